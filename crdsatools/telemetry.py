"""
Telemetry sinks of the random-access decoder.

The decoder reports what it observes to a sink handle passed in at
construction. Reports are observational only; nothing returned by a sink
influences decoding.

Reports
-------
link_sinr :
    SINR in dB of every evaluated candidate replica.
correlation_rx :
    ``(trials, source_id, success)`` of every correlation attempt.
frame_decoded :
    `FrameStatistics` of every finalized frame.
"""

from typing import Any, List, Tuple

import numpy as np
from pydantic import BaseModel, Field


class FrameStatistics(BaseModel):
    """
    Outcome counters of one decoded frame.

    Attributes:
        replicas_received: Replicas registered during collection.
        packets_received: Distinct logical packets registered.
        collided_replicas: Replicas that shared their slot at the end of collection.
        decoded_sic: Packets decoded by plain SIC.
        decoded_correlation: Packets decoded by replica correlation.
        unresolved: Packets left undecoded.
        sic_passes: Successful SIC decode passes.
        correlation_passes: Correlation passes run, successful or not.
    """

    replicas_received: int = Field(0, ge=0)
    packets_received: int = Field(0, ge=0)
    collided_replicas: int = Field(0, ge=0)
    decoded_sic: int = Field(0, ge=0)
    decoded_correlation: int = Field(0, ge=0)
    unresolved: int = Field(0, ge=0)
    sic_passes: int = Field(0, ge=0)
    correlation_passes: int = Field(0, ge=0)

    @property
    def decoded(self) -> int:
        return self.decoded_sic + self.decoded_correlation


class TelemetrySink:
    """
    Sink ignoring every report. Subclass and override what you need.
    """

    def link_sinr(self, sinr_db: float) -> None:
        pass

    def correlation_rx(self, trials: int, source_id: Any, success: bool) -> None:
        pass

    def frame_decoded(self, frame_id: int, statistics: FrameStatistics) -> None:
        pass


class TraceCollector(TelemetrySink):
    """
    Sink keeping every report in memory.

    Examples
    --------
    >>> sink = TraceCollector()
    >>> receiver = RandomAccessReceiver(sink=sink)  # doctest: +SKIP
    >>> sink.sinr_db.mean()  # doctest: +SKIP
    """

    def __init__(self):
        self.sinr_trace: List[float] = []
        self.correlation_trace: List[Tuple[int, Any, bool]] = []
        self.frames: List[Tuple[int, FrameStatistics]] = []

    def link_sinr(self, sinr_db: float) -> None:
        self.sinr_trace.append(float(sinr_db))

    def correlation_rx(self, trials: int, source_id: Any, success: bool) -> None:
        self.correlation_trace.append((int(trials), source_id, bool(success)))

    def frame_decoded(self, frame_id: int, statistics: FrameStatistics) -> None:
        self.frames.append((frame_id, statistics))

    @property
    def sinr_db(self) -> np.ndarray:
        return np.asarray(self.sinr_trace, dtype=float)

    @property
    def correlation_trials(self) -> np.ndarray:
        return np.asarray([t for t, _, _ in self.correlation_trace], dtype=float)

    @property
    def correlation_success(self) -> np.ndarray:
        return np.asarray([s for _, _, s in self.correlation_trace], dtype=bool)

    def correlation_success_ratio(self) -> float:
        """Fraction of correlation attempts that decoded, NaN when there were none."""
        success = self.correlation_success
        if success.size == 0:
            return float("nan")
        return float(np.mean(success))

    def reset(self) -> None:
        self.sinr_trace.clear()
        self.correlation_trace.clear()
        self.frames.clear()
