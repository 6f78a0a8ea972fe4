"""
Performance metrics for random-access frames.

Functions
---------
normalized_load :
    Offered traffic in packets per slot.
throughput :
    Decoded packets per slot over one or more frames.
packet_loss_ratio :
    Fraction of received packets that could not be decoded.
decode_breakdown :
    Share of decoded packets recovered by SIC and by correlation.
"""

from typing import Dict, Iterable, Sequence, Union

import numpy as np

from .logger import logger
from .receiver import FrameResult

Results = Union[FrameResult, Iterable[FrameResult]]


def _as_list(results: Results) -> Sequence[FrameResult]:
    if isinstance(results, FrameResult):
        return [results]
    return list(results)


def normalized_load(num_packets: int, num_slots: int) -> float:
    """
    Offered load ``G`` in packets per slot.

    Parameters
    ----------
    num_packets : int
        Logical packets transmitted in a frame.
    num_slots : int
        Slots in the frame.
    """
    if num_slots <= 0:
        raise ValueError("num_slots must be positive.")
    return num_packets / num_slots


def throughput(results: Results, num_slots: int) -> float:
    """
    Normalized throughput ``S``: decoded packets per slot.

    Parameters
    ----------
    results : FrameResult or iterable of FrameResult
        Decoded frames, all of ``num_slots`` slots.
    num_slots : int
        Slots per frame.

    Returns
    -------
    float
        Mean throughput over the frames, NaN when no frame is given.
    """
    results = _as_list(results)
    if num_slots <= 0:
        raise ValueError("num_slots must be positive.")
    if not results:
        return float("nan")

    decoded = np.array([len(r.decoded) for r in results], dtype=float)
    value = float(np.mean(decoded / num_slots))
    logger.info(f"Throughput: {value:.4f} packets/slot over {len(results)} frame(s)")
    return value


def packet_loss_ratio(results: Results) -> float:
    """
    Fraction of received packets left undecoded.

    Returns
    -------
    float
        Ratio in ``[0, 1]``; 0 when no packet was received.
    """
    results = _as_list(results)
    received = np.sum([r.statistics.packets_received for r in results])
    if received == 0:
        return 0.0
    lost = np.sum([r.statistics.unresolved for r in results])
    return float(lost / received)


def decode_breakdown(results: Results) -> Dict[str, float]:
    """
    Share of decoded packets recovered by each mechanism.

    Returns
    -------
    dict
        ``{"sic": ..., "correlation": ...}``, both 0 when nothing was decoded.
    """
    results = _as_list(results)
    sic = np.sum([r.statistics.decoded_sic for r in results])
    corr = np.sum([r.statistics.decoded_correlation for r in results])
    total = sic + corr
    if total == 0:
        return {"sic": 0.0, "correlation": 0.0}
    return {"sic": float(sic / total), "correlation": float(corr / total)}
