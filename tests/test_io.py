"""Tests for link results and record files."""

import numpy as np
import pytest

from crdsatools import LinkParams, LinkResultCurve
from crdsatools.io import (
    load_link_results,
    load_link_results_any,
    load_link_results_dir,
    load_records,
    save_link_results,
    save_records,
)
from crdsatools.traffic import random_crdsa_frame


def test_load_link_results_with_comments(tmp_path):
    path = tmp_path / "qpsk.txt"
    path.write_text("# esno_db bler\n-1.0 1.0\n0.5 0.2\n2.0 1e-3\n")

    curve = load_link_results(path)

    np.testing.assert_allclose(curve.esno_db, [-1.0, 0.5, 2.0])
    np.testing.assert_allclose(curve.bler, [1.0, 0.2, 1e-3])


def test_save_then_load_link_results(tmp_path):
    curve = LinkResultCurve(esno_db=[0.0, 1.0, 2.5], bler=[0.9, 0.05, 1e-4])
    path = tmp_path / "curve.txt"

    save_link_results(curve, path)
    loaded = load_link_results(path)

    np.testing.assert_allclose(loaded.esno_db, curve.esno_db)
    np.testing.assert_allclose(loaded.bler, curve.bler)


def test_load_link_results_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_link_results(tmp_path / "missing.txt")


def test_load_link_results_wrong_columns(tmp_path):
    path = tmp_path / "bad.txt"
    path.write_text("0.0 1.0 5\n1.0 0.1 5\n")

    with pytest.raises(ValueError, match="2 columns"):
        load_link_results(path)


def test_load_link_results_dir(tmp_path):
    curve = LinkResultCurve(esno_db=[0.0, 1.0], bler=[0.5, 0.01])
    save_link_results(curve, tmp_path / "qpsk-1_3.txt")
    save_link_results(curve, tmp_path / "8psk-2_3.txt")
    (tmp_path / "notes.md").write_text("not a table")

    curves = load_link_results_dir(tmp_path)

    assert sorted(curves) == ["8psk-2_3", "qpsk-1_3"]
    assert load_link_results_any(tmp_path).keys() == curves.keys()
    assert list(load_link_results_any(tmp_path / "qpsk-1_3.txt")) == ["default"]


def test_load_link_results_empty_dir(tmp_path):
    with pytest.raises(ValueError):
        load_link_results_dir(tmp_path)


def test_save_and_load_records(tmp_path):
    records = random_crdsa_frame(
        num_packets=6,
        num_slots=10,
        replicas=2,
        feeder_snr_db=15.0,
        link_params=LinkParams(modcod="qpsk-1/3", symbol_rate_baud=1e6, bandwidth_hz=1.2e6),
        seed=5,
    )
    # Decoder state must not be persisted
    records[0].interference_power_w = 5.0
    records[0].mark_decoded("sic")
    path = tmp_path / "frame.yaml"

    save_records(records, path)
    loaded = load_records(path)

    assert len(loaded) == len(records)
    for original, copy in zip(records, loaded):
        assert copy.packet_key == original.packet_key
        assert copy.sibling_slots == original.sibling_slots
        assert copy.signal == original.signal
        assert copy.link_params == original.link_params
        assert copy.interference_power_w == 0.0
        assert not copy.is_decoded
