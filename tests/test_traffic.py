"""Tests for synthetic CRDSA traffic."""

import numpy as np
import pytest

from crdsatools import FrameCollection
from crdsatools.traffic import random_crdsa_frame, random_slot_plan


def test_slot_plan_distinct_slots():
    plan = random_slot_plan(50, 20, 3, np.random.default_rng(0))

    assert plan.shape == (50, 3)
    assert plan.min() >= 0 and plan.max() < 20
    assert all(len(set(row)) == 3 for row in plan)


def test_slot_plan_too_many_replicas():
    with pytest.raises(ValueError):
        random_slot_plan(1, 2, 3, np.random.default_rng(0))


def test_frame_records_consistent():
    records = random_crdsa_frame(num_packets=20, num_slots=30, replicas=3, seed=0)

    assert len(records) == 60
    assert [(r.home_slot, r.source_id) for r in records] == sorted(
        (r.home_slot, r.source_id) for r in records
    )

    frame = FrameCollection(num_slots=30, max_replicas=3)
    for r in records:
        frame.add(r)
    frame.validate()
    assert len(frame.unresolved_packets()) == 20


def test_power_spread():
    records = random_crdsa_frame(
        num_packets=200, num_slots=50, snr_db=10.0, power_spread_db=6.0, noise_power_w=1.0, seed=2
    )
    snr_db = 10 * np.log10([r.signal.rx_power_w for r in records])

    assert snr_db.min() >= 7.0
    assert snr_db.max() <= 13.0
    assert np.ptp(snr_db) > 3.0


def test_no_spread_gives_equal_powers():
    records = random_crdsa_frame(num_packets=5, num_slots=10, snr_db=3.0, noise_power_w=2.0)

    np.testing.assert_allclose(
        [r.signal.rx_power_w for r in records], 2.0 * 10 ** 0.3
    )


def test_feeder_link():
    records = random_crdsa_frame(num_packets=2, num_slots=5, feeder_snr_db=20.0, seed=0)

    assert all(r.signal.feeder_sinr == pytest.approx(100.0) for r in records)


def test_seed_reproducible():
    a = random_crdsa_frame(num_packets=10, num_slots=10, power_spread_db=3.0, seed=9)
    b = random_crdsa_frame(num_packets=10, num_slots=10, power_spread_db=3.0, seed=9)

    assert [(r.home_slot, r.signal.rx_power_w) for r in a] == [
        (r.home_slot, r.signal.rx_power_w) for r in b
    ]


def test_empty_frame():
    assert random_crdsa_frame(num_packets=0, num_slots=10) == []
