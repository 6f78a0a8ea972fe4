"""
Slot bookkeeping of one random-access frame.

The `FrameCollection` maps every occupied slot of a frame to the replicas that
arrived in it (`SlotContents`, in arrival order). It is filled while the frame
is being received and consumed by the decode policies: decoded packets are
removed from every slot they occupy, and slots disappear as soon as they are
empty.

Two invariants are enforced:

- every replica announced by a packet is present exactly once in its slot;
- no slot of the mapping is ever empty.

Breaking either raises a `ReplicaIntegrityError` subclass.
"""

from enum import Enum
from typing import Dict, Hashable, Iterator, List, Optional, Tuple

from ..errors import (
    DuplicateReplicaError,
    EmptySlotError,
    MissingReplicaError,
    MissingSlotError,
)
from ..logger import logger
from .records import PacketReplicaRecord, PacketStatus

SlotContents = List[PacketReplicaRecord]


class FrameState(str, Enum):
    """Lifecycle of a random-access frame."""

    COLLECTING = "collecting"
    DECODING = "decoding"
    CORRELATING = "correlating"
    FINALIZED = "finalized"


class FrameCollection:
    """
    Mapping of slot id to the replicas colliding in that slot.

    Args:
        num_slots: Number of slots of the frame. Home slots must lie in
            ``[0, num_slots)``.
        frame_id: Identifier of the frame, used in log messages.
        max_replicas: Upper bound on the replicas of one packet.
    """

    def __init__(self, num_slots: int, frame_id: int = 0, max_replicas: Optional[int] = None):
        if num_slots <= 0:
            raise ValueError(f"num_slots must be positive, got {num_slots}")
        self.num_slots = num_slots
        self.frame_id = frame_id
        self.max_replicas = max_replicas
        self._slots: Dict[int, SlotContents] = {}
        self._replicas_received = 0

    def __len__(self) -> int:
        return len(self._slots)

    def __contains__(self, slot_id: int) -> bool:
        return slot_id in self._slots

    def __getitem__(self, slot_id: int) -> SlotContents:
        return self._slots[slot_id]

    def __repr__(self) -> str:
        return (
            f"FrameCollection(frame_id={self.frame_id}, slots={len(self._slots)}, "
            f"records={self.num_records})"
        )

    @property
    def replicas_received(self) -> int:
        return self._replicas_received

    @property
    def num_records(self) -> int:
        return sum(len(contents) for contents in self._slots.values())

    def slot_ids(self) -> List[int]:
        """Occupied slot ids in ascending order."""
        return sorted(self._slots)

    def occupancy(self, slot_id: int) -> int:
        """Current number of replicas in a slot (0 when absent)."""
        return len(self._slots.get(slot_id, ()))

    def add(self, record: PacketReplicaRecord) -> PacketReplicaRecord:
        """
        Registers a received replica in its home slot.

        The frame stores a copy of the record with its decoder state reset, so
        the caller's record is never modified and can be replayed into another
        frame. The new replica interferes with every replica already in the
        slot and vice versa, so the interference power of all of them is
        updated.

        Returns:
            The copy held by the frame. Decoding results are written to it.

        Raises:
            ValueError: If the home slot lies outside the frame or the replica
                count exceeds ``max_replicas``.
        """
        if not 0 <= record.home_slot < self.num_slots:
            raise ValueError(
                f"Slot {record.home_slot} outside frame of {self.num_slots} slots."
            )
        if self.max_replicas is not None and record.replica_count > self.max_replicas:
            raise ValueError(
                f"Packet from source {record.source_id} has {record.replica_count} "
                f"replicas, at most {self.max_replicas} allowed."
            )

        stored = record.model_copy(
            update={
                "interference_power_w": 0.0,
                "composite_sinr": None,
                "status": PacketStatus.UNDECIDED,
                "decoded_via": None,
            }
        )
        contents = self._slots.setdefault(stored.home_slot, [])
        power = stored.signal.rx_power_w
        for other in contents:
            other.interference_power_w += power
        stored.interference_power_w = sum(o.signal.rx_power_w for o in contents)
        contents.append(stored)
        self._replicas_received += 1
        return stored

    def iter_slots(self) -> Iterator[Tuple[int, SlotContents]]:
        """
        Yields ``(slot_id, contents)`` in ascending slot order.

        The slot list is snapshotted up front so callers may remove records
        between two yields; slots emptied in the meantime are skipped.

        Raises:
            EmptySlotError: If a slot still present in the mapping is empty.
        """
        for slot_id in self.slot_ids():
            contents = self._slots.get(slot_id)
            if contents is None:
                continue
            if not contents:
                raise EmptySlotError(
                    f"No packet in slot {slot_id} of frame {self.frame_id}.",
                    slot_id=slot_id,
                )
            yield slot_id, contents

    def records(self) -> Iterator[PacketReplicaRecord]:
        """All remaining replicas, slot by slot in arrival order."""
        for _, contents in self.iter_slots():
            yield from list(contents)

    def find_replica(
        self, slot_id: int, record: PacketReplicaRecord
    ) -> PacketReplicaRecord:
        """
        Locates the replica of ``record`` held by ``slot_id``.

        Raises:
            MissingSlotError: If the slot is not part of the frame.
            MissingReplicaError: If the slot has no replica of the packet.
            DuplicateReplicaError: If the slot holds several replicas of it.
        """
        contents = self._slots.get(slot_id)
        if contents is None:
            raise MissingSlotError(
                f"Slot {slot_id} not found in frame {self.frame_id}!",
                slot_id=slot_id,
                source_id=record.source_id,
            )

        found: Optional[PacketReplicaRecord] = None
        for candidate in contents:
            if record.is_replica_of(candidate):
                if found is not None:
                    raise DuplicateReplicaError(
                        f"Found more than one replica of source {record.source_id} "
                        f"in slot {slot_id}!",
                        slot_id=slot_id,
                        source_id=record.source_id,
                    )
                found = candidate

        if found is None:
            raise MissingReplicaError(
                f"Slot {slot_id} does not contain a replica of the packet "
                f"from source {record.source_id}!",
                slot_id=slot_id,
                source_id=record.source_id,
            )
        return found

    def replicas_of(self, record: PacketReplicaRecord) -> List[PacketReplicaRecord]:
        """``record`` followed by its replica in every sibling slot."""
        return [record] + [self.find_replica(s, record) for s in record.sibling_slots]

    def packet_occupancy(self, record: PacketReplicaRecord) -> int:
        """
        Sum of the current sizes of all slots the packet occupies.

        Every sibling replica is checked to be present, so this also enforces
        replica consistency for the packet.
        """
        self.replicas_of(record)
        return sum(self.occupancy(s) for s in record.slot_ids)

    def remove_packet(self, record: PacketReplicaRecord, eliminator, via: str) -> None:
        """
        Removes a decoded packet from all of its slots.

        All replicas are located before anything changes, so an integrity
        fault leaves the frame untouched. Then every replica is marked decoded,
        taken out of its slot, and its power is cancelled from the replicas that
        remain in that slot.

        Args:
            record: The replica that was decoded.
            eliminator: Interference elimination model applied to co-slot replicas.
            via: ``"sic"`` or ``"correlation"``.
        """
        home = self._slots.get(record.home_slot, ())
        if not any(r is record for r in home):
            raise MissingReplicaError(
                f"{record.describe()} is not registered in slot {record.home_slot}.",
                slot_id=record.home_slot,
                source_id=record.source_id,
            )
        replicas = self.replicas_of(record)

        for replica in replicas:
            replica.mark_decoded(via)

        for replica in replicas:
            slot_id = replica.home_slot
            remaining = [r for r in self._slots[slot_id] if r is not replica]
            for victim in remaining:
                eliminator.eliminate(victim, replica)
            if remaining:
                self._slots[slot_id] = remaining
            else:
                del self._slots[slot_id]

        logger.debug(
            f"Frame {self.frame_id}: removed {len(replicas)} replica(s) of "
            f"{record.describe()} ({via})."
        )

    def validate(self) -> None:
        """
        Checks replica consistency for every record of the frame.

        Raises:
            ReplicaIntegrityError: On the first inconsistency found.
        """
        for record in self.records():
            self.replicas_of(record)

    def unresolved_packets(self) -> List[PacketReplicaRecord]:
        """One representative replica per packet still in the frame."""
        seen: Dict[Hashable, PacketReplicaRecord] = {}
        for record in self.records():
            seen.setdefault(record.packet_key, record)
        return list(seen.values())

    def collided_replicas(self) -> int:
        """Replicas sharing their slot with at least one other replica."""
        return sum(len(c) for c in self._slots.values() if len(c) > 1)

    def clear(self) -> None:
        self._slots.clear()
