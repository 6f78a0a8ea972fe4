from typing import Any, Optional, Sequence, Tuple, Union

import matplotlib as mpl
import matplotlib.font_manager as fm
import matplotlib.pyplot as plt
import numpy as np

from .logger import logger
from .telemetry import TraceCollector


def apply_default_theme() -> None:
    try:
        font_prop = fm.FontProperties(family="Roboto", weight="regular")
        fm.findfont(font_prop, fallback_to_default=False)
        font_name = "Roboto"
    except ValueError:
        font_name = "sans"
        logger.debug("Roboto font not found, falling back to default sans-serif.")

    mpl.rcParams.update(
        {
            "figure.figsize": (5, 3.5),
            "font.family": font_name,
            "font.size": 12,
            "lines.linewidth": 2,
            "axes.linewidth": 1,
            "axes.grid": True,
            "axes.titleweight": "bold",
            "figure.autolayout": True,
            "figure.facecolor": "white",
            "savefig.facecolor": "white",
            "savefig.dpi": 300,
            "xtick.direction": "in",
            "ytick.direction": "in",
            "xtick.top": True,
            "ytick.right": True,
        }
    )


def sinr_histogram(
    trace: Union[TraceCollector, Sequence[float], np.ndarray],
    bins: int = 50,
    threshold_db: Optional[float] = None,
    ax: Optional[Any] = None,
    title: Optional[str] = "Replica SINR",
    show: bool = False,
    **kwargs: Any,
) -> Optional[Tuple[Any, Any]]:
    """
    Plots the distribution of the SINR of evaluated replicas.

    Args:
        trace: A `TraceCollector` or an array of SINR values in dB.
        bins: Number of histogram bins.
        threshold_db: Optional decoding threshold drawn as a vertical line.
        ax: Optional matplotlib axis to plot on.
        title: Title of the plot. If None, no title is set.
        show: Whether to call plt.show() after plotting.
        **kwargs: Additional arguments passed to ax.hist.

    Returns:
        Tuple of (figure, axis) if show is False, else None.
    """
    if ax is None:
        fig, ax = plt.subplots()
    else:
        fig = ax.figure

    if isinstance(trace, TraceCollector):
        values = trace.sinr_db
    else:
        values = np.asarray(trace, dtype=float)
    # Replicas with zero power show up as -inf and cannot be binned.
    values = values[np.isfinite(values)]

    ax.hist(values, bins=bins, **kwargs)
    if threshold_db is not None:
        ax.axvline(threshold_db, color="k", linestyle="--", linewidth=1)
    ax.set_xlabel("SINR [dB]")
    ax.set_ylabel("Count")
    if title is not None:
        ax.set_title(title)

    if show:
        plt.show()
        return None
    return fig, ax


def throughput_curve(
    loads: Sequence[float],
    throughputs: Union[Sequence[float], Sequence[Sequence[float]]],
    labels: Optional[Sequence[str]] = None,
    ax: Optional[Any] = None,
    title: Optional[str] = "Throughput",
    show: bool = False,
    **kwargs: Any,
) -> Optional[Tuple[Any, Any]]:
    """
    Plots normalized throughput against normalized load.

    Args:
        loads: Offered loads ``G`` in packets per slot.
        throughputs: One throughput series, or several series sharing ``loads``.
        labels: Legend entries, one per series.
        ax: Optional matplotlib axis to plot on.
        title: Title of the plot. If None, no title is set.
        show: Whether to call plt.show() after plotting.
        **kwargs: Additional arguments passed to ax.plot.

    Returns:
        Tuple of (figure, axis) if show is False, else None.
    """
    if ax is None:
        fig, ax = plt.subplots()
    else:
        fig = ax.figure

    loads = np.asarray(loads, dtype=float)
    series = np.atleast_2d(np.asarray(throughputs, dtype=float))
    if series.shape[1] != loads.size:
        raise ValueError(
            f"Shape mismatch: {loads.size} loads, {series.shape[1]} throughput points"
        )
    if labels is not None and len(labels) != series.shape[0]:
        raise ValueError(f"Expected {series.shape[0]} labels, got {len(labels)}")

    for i, s in enumerate(series):
        label = labels[i] if labels is not None else None
        ax.plot(loads, s, marker="o", label=label, **kwargs)
    ax.set_xlabel("Normalized load G [packets/slot]")
    ax.set_ylabel("Throughput S [packets/slot]")
    if labels is not None:
        ax.legend()
    if title is not None:
        ax.set_title(title)

    if show:
        plt.show()
        return None
    return fig, ax
