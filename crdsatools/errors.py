"""
Exceptions raised on frame integrity faults.

A random-access frame is only decodable when the transmit-side replica plan
(the sibling slots each packet announces) matches the receive-side slot
placement. Any mismatch is fatal for the frame being decoded: the decode
aborts and nothing is delivered upstream.
"""

from typing import Any, Optional


class ReplicaIntegrityError(RuntimeError):
    """Base class for fatal replica bookkeeping faults within a frame."""

    def __init__(
        self, message: str, slot_id: Optional[int] = None, source_id: Any = None
    ):
        super().__init__(message)
        self.slot_id = slot_id
        self.source_id = source_id


class MissingSlotError(ReplicaIntegrityError):
    """A sibling slot announced by a packet is absent from the frame."""


class MissingReplicaError(ReplicaIntegrityError):
    """A sibling slot exists but holds no replica of the packet."""


class DuplicateReplicaError(ReplicaIntegrityError):
    """More than one replica of the same packet landed in one slot."""


class ReplicaPlanMismatchError(ReplicaIntegrityError):
    """Two replicas of one packet announce different slot sets."""


class EmptySlotError(ReplicaIntegrityError):
    """An empty slot was left in the frame and reached during iteration."""
