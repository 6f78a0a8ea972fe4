"""Tests for logger functionality."""

import logging

from crdsatools import logger


def test_logger_set_level():
    """Test setting log level via string."""
    logger.set_log_level("DEBUG")
    assert logger.logger.level == 10
    logger.set_log_level(logging.WARNING)
    assert logger.logger.level == 30
    logger.set_log_level("INFO")
    assert logger.logger.level == 20


def test_frame_logger_prefix(caplog):
    log = logger.frame_logger(7, carrier_id=2)

    with caplog.at_level(logging.INFO, logger="crdsatools"):
        log.info("decoded")
        logger.frame_logger(8).warning("aborted")

    assert "[carrier 2/frame 7] decoded" in caplog.messages
    assert "[frame 8] aborted" in caplog.messages


def test_color_formatter():
    record = logging.LogRecord("crdsatools", logging.ERROR, __file__, 1, "boom", None, None)

    colored = logger.ColorFormatter(use_color=True).format(record)
    plain = logger.ColorFormatter(use_color=False).format(record)

    assert colored.startswith(logger.ColorFormatter.RED)
    assert colored.endswith(logger.ColorFormatter.RESET)
    assert "\x1b[" not in plain
    assert "[ERROR]" in plain and plain.endswith("boom")
