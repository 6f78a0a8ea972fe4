"""
Synthetic CRDSA traffic.

This module generates the replica records a physical layer would deliver for
one random-access frame: every packet picks distinct slots for its replicas,
and every replica gets a received power drawn around a target SNR.

Functions
---------
random_slot_plan :
    Draws the slots of every packet of a frame.
random_crdsa_frame :
    Builds the replica records of a frame, in arrival order.
"""

from typing import List, Optional

import numpy as np

from . import helpers
from .core.records import LinkParams, PacketReplicaRecord, ReplicaSignal
from .logger import logger


def random_slot_plan(
    num_packets: int,
    num_slots: int,
    replicas: int,
    rng: np.random.Generator,
) -> np.ndarray:
    """
    Draws ``replicas`` distinct slots for each of ``num_packets`` packets.

    Returns
    -------
    ndarray
        Integer array of shape ``(num_packets, replicas)``. The first column
        is where each packet's first replica goes, the others its siblings.
    """
    if replicas > num_slots:
        raise ValueError(
            f"Cannot place {replicas} replicas in a frame of {num_slots} slots."
        )
    plan = np.empty((num_packets, replicas), dtype=np.int64)
    for i in range(num_packets):
        plan[i] = rng.choice(num_slots, size=replicas, replace=False)
    return plan


def random_crdsa_frame(
    num_packets: int,
    num_slots: int,
    replicas: int = 3,
    snr_db: float = 10.0,
    power_spread_db: float = 0.0,
    noise_power_w: float = 1e-12,
    feeder_snr_db: Optional[float] = None,
    link_params: Optional[LinkParams] = None,
    seed: Optional[int] = None,
) -> List[PacketReplicaRecord]:
    """
    Generates the replica records of one CRDSA frame.

    Parameters
    ----------
    num_packets : int
        Number of logical packets, one per source.
    num_slots : int
        Slots in the frame.
    replicas : int, default 3
        Replicas per packet.
    snr_db : float, default 10.0
        Mean received SNR (signal to thermal noise) of a replica.
    power_spread_db : float, default 0.0
        Replica powers are drawn uniformly in ``snr_db +/- power_spread_db / 2``,
        independently for each replica.
    noise_power_w : float, default 1e-12
        Thermal noise power.
    feeder_snr_db : float, optional
        Feeder-link SNR; single-hop replicas when omitted.
    link_params : LinkParams, optional
        Waveform parameters attached to every record.
    seed : int, optional
        Random seed for reproducibility.

    Returns
    -------
    list of PacketReplicaRecord
        Records sorted by slot, then by packet, i.e. in arrival order.
    """
    if num_packets < 0:
        raise ValueError("num_packets cannot be negative.")
    if replicas < 1:
        raise ValueError("Each packet needs at least one replica.")

    logger.debug(
        f"Generating CRDSA frame: {num_packets} packets x {replicas} replicas "
        f"over {num_slots} slots (seed={seed})."
    )
    rng = np.random.default_rng(seed)
    plan = random_slot_plan(num_packets, num_slots, replicas, rng)
    offsets_db = rng.uniform(
        -power_spread_db / 2, power_spread_db / 2, size=(num_packets, replicas)
    )
    powers_w = noise_power_w * helpers.db_to_linear(snr_db + offsets_db)
    feeder_sinr = None if feeder_snr_db is None else helpers.db_to_linear(feeder_snr_db)
    link_params = link_params or LinkParams()

    records = []
    for packet in range(num_packets):
        slots = [int(s) for s in plan[packet]]
        for k, slot in enumerate(slots):
            records.append(
                PacketReplicaRecord(
                    source_id=packet,
                    home_slot=slot,
                    sibling_slots=tuple(s for s in slots if s != slot),
                    signal=ReplicaSignal(
                        rx_power_w=float(powers_w[packet, k]),
                        noise_power_w=noise_power_w,
                        feeder_sinr=feeder_sinr,
                    ),
                    link_params=link_params,
                )
            )

    records.sort(key=lambda r: (r.home_slot, r.source_id))
    return records
