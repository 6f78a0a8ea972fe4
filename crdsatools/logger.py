"""
Logging utilities for the crdsatools library.

This module provides a colorized logger to follow frame decoding, SIC passes
and correlation attempts, plus a frame-scoped adapter that tags every message
with the carrier and frame it belongs to.
"""

import logging
import sys
from typing import Any, MutableMapping, Optional, Tuple, Union


class ColorFormatter(logging.Formatter):
    """
    Logging formatter that colors each line according to its level.
    """

    CYAN = "\x1b[36;20m"
    GREEN = "\x1b[32;20m"
    YELLOW = "\x1b[33;20m"
    RED = "\x1b[31;20m"
    BOLD_RED = "\x1b[31;1m"
    RESET = "\x1b[0m"
    FORMAT = "%(asctime)s [%(levelname)s] [%(name)s/%(module)s] %(message)s"

    LEVEL_COLORS = {
        logging.DEBUG: CYAN,
        logging.INFO: GREEN,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: BOLD_RED,
    }

    def __init__(self, use_color: bool = True):
        super().__init__(datefmt="%Y-%m-%d %H:%M:%S")
        self.use_color = use_color
        self._formatters = {
            level: logging.Formatter(
                f"{color}{self.FORMAT}{self.RESET}", datefmt=self.datefmt
            )
            for level, color in self.LEVEL_COLORS.items()
        }
        self._plain = logging.Formatter(self.FORMAT, datefmt=self.datefmt)

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_color:
            return self._plain.format(record)
        return self._formatters.get(record.levelno, self._plain).format(record)


class FrameLogAdapter(logging.LoggerAdapter):
    """
    Prefixes messages with ``[carrier/frame]`` so interleaved frames stay readable.
    """

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> Tuple[Any, MutableMapping[str, Any]]:
        carrier = self.extra.get("carrier_id")
        frame = self.extra.get("frame_id")
        if carrier is None:
            return f"[frame {frame}] {msg}", kwargs
        return f"[carrier {carrier}/frame {frame}] {msg}", kwargs


def get_logger(name: str = "crdsatools") -> logging.Logger:
    """
    Returns a logger instance for the crdsatools library.

    If no handlers are present, it adds a StreamHandler with a colorized formatter.
    Colors are disabled when stdout is not a terminal.

    Args:
        name: Name of the logger.

    Returns:
        A configured logging.Logger instance.
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        logger.setLevel(logging.INFO)
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(ColorFormatter(use_color=sys.stdout.isatty()))
        logger.addHandler(handler)

    return logger


# Create a default logger for the package
logger = get_logger()


def frame_logger(frame_id: int, carrier_id: Optional[int] = None) -> FrameLogAdapter:
    """Returns an adapter of the package logger bound to one frame."""
    return FrameLogAdapter(logger, {"frame_id": frame_id, "carrier_id": carrier_id})


def set_log_level(level: Union[int, str]) -> None:
    """
    Sets the log level for the crdsatools logger.

    Args:
        level: logging.DEBUG, logging.INFO, etc. or string "DEBUG", "INFO", etc.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())
    logger.setLevel(level)
