"""
Signal-quality helper functions.

This module provides the unit conversions and SINR arithmetic shared by the
SIC engine, the Marsala correlator and the link-performance oracles.

Functions
---------
linear_to_db :
    Converts a linear power ratio to decibels.
db_to_linear :
    Converts decibels to a linear power ratio.
sinr :
    Single-hop SINR of a replica from its power budget.
composite_sinr :
    Combines the SINR of cascaded hops (e.g. user and feeder link).
combined_replica_sinr :
    Closed-form SINR after correlating all replicas of one packet.
"""

from typing import Union

import numpy as np

ScalarOrArray = Union[float, np.ndarray]


def linear_to_db(value: ScalarOrArray) -> ScalarOrArray:
    """
    Converts a linear power ratio to decibels.

    Zero maps to ``-inf``; the conversion does not warn about it.

    Parameters
    ----------
    value : float or array_like
        Linear power ratio (non-negative).

    Returns
    -------
    float or ndarray
        ``10 * log10(value)``. Scalar input gives a Python float.
    """
    with np.errstate(divide="ignore"):
        db = 10.0 * np.log10(np.asarray(value, dtype=float))
    if db.ndim == 0:
        return float(db)
    return db


def db_to_linear(value_db: ScalarOrArray) -> ScalarOrArray:
    """
    Converts decibels to a linear power ratio.

    Parameters
    ----------
    value_db : float or array_like
        Value in dB.

    Returns
    -------
    float or ndarray
        ``10 ** (value_db / 10)``. Scalar input gives a Python float.
    """
    linear = np.power(10.0, np.asarray(value_db, dtype=float) / 10.0)
    if linear.ndim == 0:
        return float(linear)
    return linear


def sinr(
    rx_power_w: float,
    noise_power_w: float,
    interference_power_w: float = 0.0,
    aci_power_w: float = 0.0,
    ext_noise_power_w: float = 0.0,
) -> float:
    r"""
    SINR of a single replica in its slot.

    $SINR = \frac{P_{rx}}{N + I + I_{ACI} + N_{ext}}$

    Parameters
    ----------
    rx_power_w : float
        Received power of the replica in W.
    noise_power_w : float
        Thermal noise power in W.
    interference_power_w : float, default 0.0
        Power of the other replicas colliding in the same slot, in W.
    aci_power_w : float, default 0.0
        Adjacent-channel interference in W.
    ext_noise_power_w : float, default 0.0
        External noise in W.

    Returns
    -------
    float
        Linear SINR.
    """
    denominator = noise_power_w + interference_power_w + aci_power_w + ext_noise_power_w
    if denominator <= 0:
        raise ValueError("Noise plus interference must be positive.")
    return rx_power_w / denominator


def composite_sinr(*sinrs: float) -> float:
    r"""
    Combines the SINR of cascaded hops into one end-to-end SINR.

    For a transparent return link the user-link and feeder-link noise add up,
    so $1/SINR = \sum_k 1/SINR_k$. A hop with zero SINR makes the whole
    chain zero.

    Parameters
    ----------
    *sinrs : float
        Linear SINR of each hop.

    Returns
    -------
    float
        Linear end-to-end SINR.
    """
    if not sinrs:
        raise ValueError("At least one SINR value is required.")
    if any(s <= 0 for s in sinrs):
        return 0.0
    return 1.0 / sum(1.0 / s for s in sinrs)


def combined_replica_sinr(
    replicas_count: int, occupancy: int, single_sinr: float
) -> float:
    r"""
    SINR obtained by correlating all replicas of one packet.

    The replicas of a packet add coherently while the interferers in their
    slots are assumed uncorrelated and of uniform power:

    $SINR_{comb} = \frac{R}{r + 1/SINR}$, with
    $r = \frac{occupancy}{R} - 1$ the mean number of interferers per replica.

    Parameters
    ----------
    replicas_count : int
        Total number of replicas ``R`` of the packet.
    occupancy : int
        Sum of the current sizes of all ``R`` slots the packet occupies
        (the packet's own replicas included).
    single_sinr : float
        Linear SINR of the replica under evaluation.

    Returns
    -------
    float
        Linear combined SINR, 0 when ``single_sinr`` is 0.
    """
    if replicas_count < 1:
        raise ValueError("A packet has at least one replica.")
    if occupancy < replicas_count:
        raise ValueError(
            f"Occupancy {occupancy} cannot be below the replica count {replicas_count}."
        )
    if single_sinr <= 0:
        return 0.0
    interferent_ratio = occupancy / replicas_count - 1.0
    return replicas_count / (interferent_ratio + 1.0 / single_sinr)
