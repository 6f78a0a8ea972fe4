"""Tests for replica records and the frame collection."""

import pytest
from pydantic import ValidationError

from crdsatools import FrameCollection, PacketReplicaRecord, PerfectElimination, ReplicaSignal
from crdsatools.errors import (
    DuplicateReplicaError,
    EmptySlotError,
    MissingReplicaError,
    MissingSlotError,
    ReplicaPlanMismatchError,
)


class TestPacketReplicaRecord:
    def test_replica_count_and_slots(self, new_record):
        record = new_record(7, home_slot=4, sibling_slots=[9, 1])

        assert record.replica_count == 3
        assert record.slot_ids == (4, 9, 1)
        assert record.slot_set == frozenset({1, 4, 9})
        assert not record.is_decoded

    def test_duplicate_siblings_rejected(self, new_record):
        with pytest.raises(ValidationError):
            new_record(1, home_slot=0, sibling_slots=[2, 2])

    def test_home_slot_in_siblings_rejected(self, new_record):
        with pytest.raises(ValidationError):
            new_record(1, home_slot=3, sibling_slots=[3, 5])

    def test_negative_power_rejected(self):
        with pytest.raises(ValidationError):
            ReplicaSignal(rx_power_w=-1.0, noise_power_w=1.0)

    def test_zero_noise_rejected(self):
        with pytest.raises(ValidationError):
            ReplicaSignal(rx_power_w=1.0, noise_power_w=0.0)

    def test_is_replica_of(self, new_packet, new_record):
        a0, a1 = new_packet("A", [0, 1])
        other = new_record("B", home_slot=1, sibling_slots=[0])

        assert a0.is_replica_of(a1)
        assert a1.is_replica_of(a0)
        assert not a0.is_replica_of(a0)
        assert not a0.is_replica_of(other)

    def test_packet_id_distinguishes_packets(self, new_packet):
        first = new_packet("A", [0, 1], packet_id=0)
        second = new_packet("A", [0, 1], packet_id=1)

        assert not first[0].is_replica_of(second[1])
        assert first[0].packet_key != second[0].packet_key

    def test_plan_mismatch_raises(self, new_record):
        a = new_record("A", home_slot=0, sibling_slots=[1, 2])
        stray = new_record("A", home_slot=1, sibling_slots=[0])

        with pytest.raises(ReplicaPlanMismatchError):
            a.is_replica_of(stray)

    def test_composite_sinr_single_hop(self, new_record):
        record = new_record(1, home_slot=0, snr_db=10.0)
        record.interference_power_w = 9.0

        # 10 / (1 + 9)
        assert record.update_composite_sinr() == pytest.approx(1.0)
        assert record.composite_sinr == pytest.approx(1.0)

    def test_composite_sinr_with_feeder_link(self):
        record = PacketReplicaRecord(
            source_id=1,
            home_slot=0,
            signal=ReplicaSignal(rx_power_w=10.0, noise_power_w=1.0, feeder_sinr=10.0),
        )

        assert record.update_composite_sinr() == pytest.approx(5.0)


class TestFrameCollection:
    def test_add_tracks_interference(self, new_record):
        frame = FrameCollection(num_slots=4)
        a = new_record("A", 0, snr_db=10.0)
        b = new_record("B", 0, snr_db=0.0)
        c = new_record("C", 2, snr_db=3.0)

        a, b, c = (frame.add(r) for r in (a, b, c))

        assert a.interference_power_w == pytest.approx(1.0)
        assert b.interference_power_w == pytest.approx(10.0)
        assert c.interference_power_w == 0.0
        assert frame.slot_ids() == [0, 2]
        assert frame.occupancy(0) == 2
        assert frame.occupancy(1) == 0
        assert frame.num_records == 3
        assert frame.replicas_received == 3
        assert frame.collided_replicas() == 2

    def test_arrival_order_kept(self, new_record):
        frame = FrameCollection(num_slots=2)
        records = [new_record(i, 1) for i in range(5)]
        for r in records:
            frame.add(r)

        assert [r.source_id for r in frame[1]] == [0, 1, 2, 3, 4]

    def test_home_slot_out_of_range(self, new_record):
        frame = FrameCollection(num_slots=4)

        with pytest.raises(ValueError, match="outside frame"):
            frame.add(new_record("A", 4))

    def test_too_many_replicas(self, new_packet):
        frame = FrameCollection(num_slots=8, max_replicas=2)

        with pytest.raises(ValueError, match="at most 2"):
            frame.add(new_packet("A", [0, 1, 2])[0])

    def test_invalid_num_slots(self):
        with pytest.raises(ValueError):
            FrameCollection(num_slots=0)

    def test_find_replica(self, new_packet):
        frame = FrameCollection(num_slots=4)
        a0, a2 = (frame.add(r) for r in new_packet("A", [0, 2]))

        assert frame.find_replica(2, a0) is a2
        assert frame.replicas_of(a2) == [a2, a0]
        assert frame.packet_occupancy(a0) == 2

    def test_missing_sibling_slot(self, new_record):
        frame = FrameCollection(num_slots=8)
        a = new_record("A", 0, sibling_slots=[5])
        frame.add(a)

        with pytest.raises(MissingSlotError) as info:
            frame.find_replica(5, a)
        assert info.value.slot_id == 5
        assert info.value.source_id == "A"

    def test_missing_replica_in_slot(self, new_record):
        frame = FrameCollection(num_slots=8)
        a = new_record("A", 0, sibling_slots=[1])
        frame.add(a)
        frame.add(new_record("B", 1))

        with pytest.raises(MissingReplicaError):
            frame.find_replica(1, a)

    def test_duplicate_replica_in_slot(self, new_record):
        frame = FrameCollection(num_slots=8)
        a = new_record("A", 0, sibling_slots=[1])
        frame.add(a)
        frame.add(new_record("A", 1, sibling_slots=[0]))
        frame.add(new_record("A", 1, sibling_slots=[0]))

        with pytest.raises(DuplicateReplicaError):
            frame.find_replica(1, a)

    def test_empty_slot_detected(self, new_record):
        frame = FrameCollection(num_slots=8)
        frame.add(new_record("A", 0))
        frame._slots[3] = []

        with pytest.raises(EmptySlotError):
            list(frame.iter_slots())

    def test_remove_packet_cancels_interference(self, new_packet, new_record):
        frame = FrameCollection(num_slots=4)
        records = new_packet("A", [0, 1], snr_db=10.0) + [new_record("B", 1, snr_db=0.0)]
        a0, a1, b = (frame.add(r) for r in records)
        assert b.interference_power_w == pytest.approx(10.0)

        frame.remove_packet(a0, PerfectElimination(), via="sic")

        assert 0 not in frame
        assert frame[1] == [b]
        assert b.interference_power_w == pytest.approx(0.0)
        assert a0.is_decoded and a1.is_decoded
        assert a0.decoded_via == "sic" and a1.decoded_via == "sic"

    def test_remove_packet_is_atomic_on_fault(self, new_record):
        frame = FrameCollection(num_slots=8)
        a = frame.add(new_record("A", 0, sibling_slots=[1, 6]))
        a1 = frame.add(new_record("A", 1, sibling_slots=[0, 6]))

        with pytest.raises(MissingSlotError):
            frame.remove_packet(a, PerfectElimination(), via="sic")

        # Nothing was touched before the fault was detected
        assert frame.slot_ids() == [0, 1]
        assert not a.is_decoded and not a1.is_decoded

    def test_validate(self, new_packet, new_record):
        frame = FrameCollection(num_slots=8)
        for r in new_packet("A", [0, 3, 5]) + new_packet("B", [3, 4]):
            frame.add(r)
        frame.validate()

        frame.add(new_record("C", 6, sibling_slots=[7]))
        with pytest.raises(MissingSlotError):
            frame.validate()

    def test_unresolved_packets_one_per_packet(self, new_packet):
        frame = FrameCollection(num_slots=8)
        for r in new_packet("A", [0, 3, 5]) + new_packet("B", [3, 4]):
            frame.add(r)

        unresolved = frame.unresolved_packets()

        assert [(r.source_id, r.home_slot) for r in unresolved] == [("A", 0), ("B", 3)]

    def test_add_registers_a_copy(self, new_record):
        frame = FrameCollection(num_slots=4)
        a = new_record("A", 0, snr_db=10.0)
        b = new_record("B", 0, snr_db=0.0, interference_power_w=3.0)

        stored_a = frame.add(a)
        stored_b = frame.add(b)

        assert stored_a is not a and frame[0] == [stored_a, stored_b]
        # Interference carried by the input is not accumulated
        assert stored_b.interference_power_w == pytest.approx(10.0)
        assert stored_a.interference_power_w == pytest.approx(1.0)
        assert a.interference_power_w == 0.0
        assert b.interference_power_w == 3.0

    def test_decoded_input_is_registered_undecided(self, new_record):
        frame = FrameCollection(num_slots=4)
        record = new_record("A", 0)
        record.mark_decoded("sic")

        stored = frame.add(record)

        assert not stored.is_decoded and stored.decoded_via is None
        assert record.is_decoded

    def test_remove_packet_leaves_inputs_untouched(self, new_packet):
        frame = FrameCollection(num_slots=4)
        packet = new_packet("A", [0, 1])
        stored = [frame.add(r) for r in packet]

        frame.remove_packet(stored[0], PerfectElimination(), via="sic")

        assert len(frame) == 0
        assert all(r.is_decoded for r in stored)
        assert not any(r.is_decoded for r in packet)

    def test_same_source_packets_need_distinct_packet_ids(self, new_packet):
        first = new_packet("A", [0, 1], packet_id=0)
        second = new_packet("A", [1, 2], packet_id=1)
        frame = FrameCollection(num_slots=4)
        for r in first + second:
            frame.add(r)
        frame.validate()

        clashing = FrameCollection(num_slots=4)
        for r in new_packet("A", [0, 1]) + new_packet("A", [1, 2]):
            clashing.add(r)
        with pytest.raises(ReplicaPlanMismatchError):
            clashing.validate()
