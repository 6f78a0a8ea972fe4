"""
Link-performance oracles.

The decoder does not demodulate anything: whether a replica (or a correlated
set of replicas) can be decoded is decided by a link-performance oracle from
its SINR and waveform parameters. This module provides the oracles used by
the SIC engine and the Marsala correlator.

Classes
-------
LinkPerformanceOracle :
    Abstract decision interface ``evaluate(sinr, link_params) -> bool``.
ThresholdOracle :
    Decodes iff the SINR reaches a fixed threshold.
ConstantErrorOracle :
    Fails with a fixed probability regardless of SINR.
LinkResultsOracle :
    Draws failures from tabulated BLER versus Es/N0 curves.
NoErrorOracle :
    Always decodes.
LinkResultCurve :
    One BLER versus Es/N0 table.

Functions
---------
make_oracle :
    Builds the oracle selected by a `DecoderConfig`.
"""

import abc
from typing import Any, Dict, Optional

import numpy as np
from pydantic import BaseModel, ConfigDict, PrivateAttr, field_validator, model_validator
from scipy.interpolate import interp1d

from . import helpers
from .core.config import DecoderConfig, resolve_config
from .core.records import LinkParams
from .logger import logger

# BLER values are interpolated in log10 domain; zeros are clipped to this floor.
_BLER_FLOOR = 1e-12


class LinkPerformanceOracle(abc.ABC):
    """
    Decides whether a burst with a given SINR can be decoded.
    """

    @abc.abstractmethod
    def evaluate(self, sinr: float, link_params: LinkParams) -> bool:
        """
        Evaluates one decoding attempt.

        Args:
            sinr: Linear SINR of the attempt.
            link_params: Waveform parameters of the burst.

        Returns:
            True if the burst is decoded, False otherwise.
        """

    def __call__(self, sinr: float, link_params: LinkParams) -> bool:
        return self.evaluate(sinr, link_params)


class ThresholdOracle(LinkPerformanceOracle):
    """
    Deterministic oracle: success iff ``10*log10(sinr) >= threshold_db``.
    """

    def __init__(self, threshold_db: float):
        self.threshold_db = threshold_db
        self._threshold = helpers.db_to_linear(threshold_db)

    def evaluate(self, sinr: float, link_params: LinkParams) -> bool:
        return sinr > 0 and sinr >= self._threshold

    def __repr__(self) -> str:
        return f"ThresholdOracle(threshold_db={self.threshold_db})"


class NoErrorOracle(LinkPerformanceOracle):
    """Every attempt succeeds."""

    def evaluate(self, sinr: float, link_params: LinkParams) -> bool:
        return True


class ConstantErrorOracle(LinkPerformanceOracle):
    """
    Fails with probability ``error_rate`` independently of the SINR.

    Args:
        error_rate: Packet error probability in ``[0, 1]``.
        seed: Seed of the random generator.
    """

    def __init__(self, error_rate: float, seed: Optional[int] = None):
        if not 0.0 <= error_rate <= 1.0:
            raise ValueError(f"error_rate must be in [0, 1], got {error_rate}")
        self.error_rate = error_rate
        self._rng = np.random.default_rng(seed)

    def evaluate(self, sinr: float, link_params: LinkParams) -> bool:
        return bool(self._rng.random() >= self.error_rate)


class LinkResultCurve(BaseModel):
    """
    Block error rate as a function of Es/N0 for one waveform.

    Attributes:
        esno_db: Es/N0 sample points in dB, strictly increasing.
        bler: Block error rate at each sample point, in ``[0, 1]``.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    esno_db: Any
    bler: Any

    _log_interp: Any = PrivateAttr(default=None)

    @field_validator("esno_db", "bler", mode="before")
    @classmethod
    def validate_arrays(cls, v: Any) -> Any:
        arr = np.asarray(v, dtype=float)
        if arr.ndim != 1:
            raise ValueError("Link result columns must be one-dimensional.")
        return arr

    @model_validator(mode="after")
    def check_table(self) -> "LinkResultCurve":
        if self.esno_db.shape != self.bler.shape:
            raise ValueError(
                f"Shape mismatch: esno {self.esno_db.shape} != bler {self.bler.shape}"
            )
        if self.esno_db.size < 2:
            raise ValueError("A link result curve needs at least two points.")
        if np.any(np.diff(self.esno_db) <= 0):
            raise ValueError("Es/N0 points must be strictly increasing.")
        if np.any((self.bler < 0) | (self.bler > 1)):
            raise ValueError("BLER values must lie in [0, 1].")
        # Interpolated in the log domain, built once per table
        log_bler = np.log10(np.clip(self.bler, _BLER_FLOOR, 1.0))
        self._log_interp = interp1d(self.esno_db, log_bler, kind="linear")
        return self

    def bler_at(self, esno_db: float) -> float:
        """
        Interpolated BLER at ``esno_db``.

        Below the table the burst is lost (BLER 1); above it the last
        tabulated BLER applies.
        """
        if esno_db < self.esno_db[0]:
            return 1.0
        if esno_db >= self.esno_db[-1]:
            return float(self.bler[-1])
        return float(10.0 ** self._log_interp(esno_db))


class LinkResultsOracle(LinkPerformanceOracle):
    """
    Oracle drawing errors from BLER curves.

    The SINR is converted to Es/N0 with the burst's `LinkParams`, the curve of
    its modcod gives the BLER, and the attempt fails when a uniform draw falls
    below it.

    Args:
        curves: Mapping of modcod name to curve. A ``"default"`` entry is used
            for modcods without their own curve.
        seed: Seed of the random generator.
    """

    def __init__(self, curves: Dict[str, LinkResultCurve], seed: Optional[int] = None):
        if not curves:
            raise ValueError("At least one link result curve is required.")
        self.curves = dict(curves)
        self._rng = np.random.default_rng(seed)

    def curve_for(self, link_params: LinkParams) -> LinkResultCurve:
        curve = self.curves.get(link_params.modcod, self.curves.get("default"))
        if curve is None:
            raise ValueError(
                f"No link results for modcod '{link_params.modcod}' "
                f"(available: {sorted(self.curves)})"
            )
        return curve

    def evaluate(self, sinr: float, link_params: LinkParams) -> bool:
        if sinr <= 0:
            return False
        esno_db = helpers.linear_to_db(sinr * link_params.esno_factor)
        bler = self.curve_for(link_params).bler_at(esno_db)
        return bool(self._rng.random() >= bler)


def make_oracle(config: Optional[DecoderConfig] = None) -> LinkPerformanceOracle:
    """
    Builds the link-performance oracle selected by the configuration.

    Args:
        config: Decoder configuration. Falls back to the global one, then to defaults.

    Returns:
        The configured oracle.
    """
    config = resolve_config(config)

    if config.error_model == "threshold":
        oracle = ThresholdOracle(config.sinr_threshold_db)
    elif config.error_model == "constant":
        oracle = ConstantErrorOracle(config.constant_error_rate, seed=config.seed)
    elif config.error_model == "link_results":
        from . import io

        oracle = LinkResultsOracle(
            io.load_link_results_any(config.link_results_path), seed=config.seed
        )
    elif config.error_model == "none":
        oracle = NoErrorOracle()
    else:
        raise ValueError(f"Unknown error model: {config.error_model}")

    logger.debug(f"Using {type(oracle).__name__} ({config.error_model}).")
    return oracle
