"""
Replica records of a random-access frame.

This module defines the data structures delivered by the physical layer for
every received burst:

- `ReplicaSignal`: power budget of one received replica (signal, noise,
  adjacent-channel interference, external noise, optional feeder-link SINR).
- `LinkParams`: waveform parameters handed to the link-performance oracle.
- `PacketReplicaRecord`: one received instance of a logical packet, carrying
  its home slot and the sibling slots of its other replicas.

All classes are built on Pydantic for validation.
"""

from enum import Enum
from typing import Any, FrozenSet, Hashable, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .. import helpers
from ..errors import ReplicaPlanMismatchError


class PacketStatus(str, Enum):
    UNDECIDED = "undecided"
    DECODED = "decoded"


class ReplicaSignal(BaseModel):
    """
    Power budget of one received replica.

    Attributes:
        rx_power_w: Received signal power in W.
        noise_power_w: Thermal noise power in W. Must be positive.
        aci_power_w: Adjacent-channel interference power in W.
        ext_noise_power_w: External noise power in W.
        feeder_sinr: Linear SINR of the feeder link for transparent payloads.
            ``None`` when the replica is evaluated on a single hop.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    rx_power_w: float = Field(..., ge=0)
    noise_power_w: float = Field(..., gt=0)
    aci_power_w: float = Field(default=0.0, ge=0)
    ext_noise_power_w: float = Field(default=0.0, ge=0)
    feeder_sinr: Optional[float] = Field(default=None, ge=0)


class LinkParams(BaseModel):
    """
    Waveform parameters used by the link-performance oracle.

    Attributes:
        modcod: Name of the modulation and coding scheme (selects a link results curve).
        symbol_rate_baud: Burst symbol rate in baud.
        bandwidth_hz: Allocated carrier bandwidth in Hz.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    modcod: str = "default"
    symbol_rate_baud: Optional[float] = Field(default=None, gt=0)
    bandwidth_hz: Optional[float] = Field(default=None, gt=0)

    @property
    def esno_factor(self) -> float:
        """Ratio converting a linear SINR into Es/N0 (1 when unknown)."""
        if self.symbol_rate_baud is None or self.bandwidth_hz is None:
            return 1.0
        return self.bandwidth_hz / self.symbol_rate_baud


class PacketReplicaRecord(BaseModel):
    """
    One received replica of a logical packet.

    Attributes:
        source_id: Identifier of the transmitting terminal.
        packet_id: Distinguishes several packets of one source in one frame.
            Must be set by the caller whenever a source sends more than one
            packet per frame: records of one source and packet id whose slot
            sets overlap are taken as replicas of a single packet, and a
            mismatch between their slot sets aborts the frame with
            `ReplicaPlanMismatchError`.
        home_slot: Slot in which this replica physically arrived.
        sibling_slots: Slots holding the other replicas of the packet, in the
            order announced by the transmitter.
        signal: Power budget of this replica.
        link_params: Waveform parameters for the oracle.
        interference_power_w: Power of the other replicas colliding in the home
            slot. Maintained by the frame collection and reduced by interference
            elimination as co-slot packets get decoded.
        composite_sinr: Last composite SINR computed for this replica.
        status: Decoding status of the packet.
        decoded_via: ``"sic"`` or ``"correlation"`` once decoded.
        payload: Opaque upper-layer packet handed to the MAC.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True, validate_assignment=True, extra="forbid"
    )

    source_id: Union[int, str]
    packet_id: int = 0
    home_slot: int = Field(..., ge=0)
    sibling_slots: Tuple[int, ...] = ()
    signal: ReplicaSignal
    link_params: LinkParams = Field(default_factory=LinkParams)
    interference_power_w: float = Field(default=0.0, ge=0)
    composite_sinr: Optional[float] = None
    status: PacketStatus = PacketStatus.UNDECIDED
    decoded_via: Optional[Literal["sic", "correlation"]] = None
    payload: Optional[Any] = None

    @field_validator("sibling_slots", mode="before")
    @classmethod
    def validate_sibling_slots(cls, v: Any) -> Any:
        if v is None:
            return ()
        v = tuple(v)
        if len(set(v)) != len(v):
            raise ValueError(f"Duplicate sibling slot ids: {v}")
        if any(s < 0 for s in v):
            raise ValueError(f"Negative sibling slot id in {v}")
        return v

    @model_validator(mode="after")
    def check_home_not_sibling(self) -> "PacketReplicaRecord":
        if self.home_slot in self.sibling_slots:
            raise ValueError(
                f"Home slot {self.home_slot} is also listed as a sibling slot."
            )
        return self

    @property
    def replica_count(self) -> int:
        return 1 + len(self.sibling_slots)

    @property
    def slot_ids(self) -> Tuple[int, ...]:
        """Home slot followed by the sibling slots."""
        return (self.home_slot,) + self.sibling_slots

    @property
    def slot_set(self) -> FrozenSet[int]:
        return frozenset(self.slot_ids)

    @property
    def packet_key(self) -> Hashable:
        """Stable identifier shared by all replicas of one logical packet."""
        return (self.source_id, self.packet_id, self.slot_set)

    @property
    def is_decoded(self) -> bool:
        return self.status is PacketStatus.DECODED

    def is_replica_of(self, other: "PacketReplicaRecord") -> bool:
        """
        Checks whether `other` is another replica of the same logical packet.

        Raises:
            ReplicaPlanMismatchError: If both records claim to be replicas of
                each other but disagree on the slots of the packet.
        """
        if other is self:
            return False
        if other.source_id != self.source_id or other.packet_id != self.packet_id:
            return False
        if other.home_slot not in self.sibling_slots:
            return False
        if other.slot_set != self.slot_set:
            raise ReplicaPlanMismatchError(
                f"Replica plans of source {self.source_id} disagree: "
                f"{sorted(self.slot_set)} vs {sorted(other.slot_set)}",
                slot_id=other.home_slot,
                source_id=self.source_id,
            )
        return True

    def update_composite_sinr(self) -> float:
        """
        Recomputes and stores the composite SINR of this replica in its home slot.

        Returns:
            The linear composite SINR.
        """
        s = self.signal
        user_sinr = helpers.sinr(
            s.rx_power_w,
            s.noise_power_w,
            self.interference_power_w,
            s.aci_power_w,
            s.ext_noise_power_w,
        )
        if s.feeder_sinr is None:
            value = user_sinr
        else:
            value = helpers.composite_sinr(user_sinr, s.feeder_sinr)
        self.composite_sinr = value
        return value

    def mark_decoded(self, via: Literal["sic", "correlation"]) -> None:
        self.status = PacketStatus.DECODED
        self.decoded_via = via

    def describe(self) -> str:
        return (
            f"source={self.source_id} packet={self.packet_id} "
            f"slot={self.home_slot} siblings={list(self.sibling_slots)}"
        )
