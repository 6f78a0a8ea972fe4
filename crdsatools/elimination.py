"""
Interference elimination models.

Once a packet is decoded its waveform can be regenerated and subtracted from
the slots holding its replicas. The models below decide how much of the
decoded replica's power disappears from the interference seen by the replicas
that stay in the slot.
"""

import abc
from typing import Optional

from .core.config import DecoderConfig, resolve_config
from .core.records import PacketReplicaRecord


class InterferenceEliminationModel(abc.ABC):
    """
    Base class of interference elimination models.

    Subclasses implement `cancelled_power`, the part of the decoded replica's
    power removed from a co-slot replica.
    """

    @abc.abstractmethod
    def cancelled_power(
        self, victim: PacketReplicaRecord, decoded: PacketReplicaRecord
    ) -> float:
        """Power in W removed from ``victim``'s interference."""

    def eliminate(
        self, victim: PacketReplicaRecord, decoded: PacketReplicaRecord
    ) -> None:
        """Reduces the interference of ``victim`` by the cancelled power."""
        victim.interference_power_w = max(
            0.0, victim.interference_power_w - self.cancelled_power(victim, decoded)
        )

    def __call__(self, victim: PacketReplicaRecord, decoded: PacketReplicaRecord) -> None:
        self.eliminate(victim, decoded)


class PerfectElimination(InterferenceEliminationModel):
    """The decoded replica is cancelled completely."""

    def cancelled_power(self, victim, decoded):
        return decoded.signal.rx_power_w


class ResidualElimination(InterferenceEliminationModel):
    """
    Imperfect cancellation leaving a fixed fraction of the decoded power.

    Args:
        residual_factor: Fraction in ``[0, 1]`` of the decoded replica's power
            that still interferes after cancellation.
    """

    def __init__(self, residual_factor: float):
        if not 0.0 <= residual_factor <= 1.0:
            raise ValueError(f"residual_factor must be in [0, 1], got {residual_factor}")
        self.residual_factor = residual_factor

    def cancelled_power(self, victim, decoded):
        return (1.0 - self.residual_factor) * decoded.signal.rx_power_w


def make_elimination_model(
    config: Optional[DecoderConfig] = None,
) -> InterferenceEliminationModel:
    """Builds the elimination model selected by the configuration."""
    config = resolve_config(config)
    if config.elimination_model == "residual":
        return ResidualElimination(config.residual_factor)
    return PerfectElimination()
