"""
crdsatools: random-access burst decoding for slotted satellite return links.

This package provides tools for:
- Collecting the colliding replicas of a CRDSA frame slot by slot.
- Successive Interference Cancellation (SIC) iterated to convergence.
- Marsala replica correlation to recover packets SIC alone cannot decode.
- Link-performance oracles (SINR threshold, constant error, BLER tables).
- Synthetic CRDSA traffic, throughput metrics and result plots.
"""

from . import errors, helpers, metrics, traffic
from .core import (
    DecoderConfig,
    FrameCollection,
    FrameState,
    LinkParams,
    PacketReplicaRecord,
    PacketStatus,
    ReplicaSignal,
    clear_config,
    get_config,
    require_config,
    set_config,
    using_config,
)
from .elimination import PerfectElimination, ResidualElimination, make_elimination_model
from .errors import ReplicaIntegrityError
from .link import (
    ConstantErrorOracle,
    LinkPerformanceOracle,
    LinkResultCurve,
    LinkResultsOracle,
    NoErrorOracle,
    ThresholdOracle,
    make_oracle,
)
from .logger import set_log_level
from .marsala import MarsalaCorrelator
from .receiver import FrameDecoder, FrameResult, RandomAccessReceiver, make_decode_policy
from .sic import SicEngine
from .telemetry import FrameStatistics, TelemetrySink, TraceCollector

__all__ = [
    "DecoderConfig",
    "set_config",
    "get_config",
    "clear_config",
    "require_config",
    "using_config",
    "FrameCollection",
    "FrameState",
    "LinkParams",
    "PacketReplicaRecord",
    "PacketStatus",
    "ReplicaSignal",
    "ReplicaIntegrityError",
    "LinkPerformanceOracle",
    "ThresholdOracle",
    "ConstantErrorOracle",
    "LinkResultsOracle",
    "LinkResultCurve",
    "NoErrorOracle",
    "make_oracle",
    "PerfectElimination",
    "ResidualElimination",
    "make_elimination_model",
    "SicEngine",
    "MarsalaCorrelator",
    "FrameDecoder",
    "FrameResult",
    "RandomAccessReceiver",
    "make_decode_policy",
    "FrameStatistics",
    "TelemetrySink",
    "TraceCollector",
    "errors",
    "helpers",
    "metrics",
    "traffic",
    "set_log_level",
]
