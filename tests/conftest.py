import pytest

from crdsatools import (
    MarsalaCorrelator,
    PacketReplicaRecord,
    ReplicaSignal,
    SicEngine,
    ThresholdOracle,
    TraceCollector,
    clear_config,
)
from crdsatools.helpers import db_to_linear

NOISE_W = 1.0
THRESHOLD_DB = 3.0


def make_record(source_id, home_slot, sibling_slots=(), snr_db=10.0, packet_id=0, **kwargs):
    """Replica whose signal-to-noise ratio (before collisions) is ``snr_db``."""
    return PacketReplicaRecord(
        source_id=source_id,
        packet_id=packet_id,
        home_slot=home_slot,
        sibling_slots=tuple(sibling_slots),
        signal=ReplicaSignal(
            rx_power_w=db_to_linear(snr_db) * NOISE_W, noise_power_w=NOISE_W
        ),
        **kwargs,
    )


def make_packet(source_id, slots, snr_db=10.0, packet_id=0):
    """All replicas of one packet, one record per slot."""
    if not isinstance(snr_db, (list, tuple)):
        snr_db = [snr_db] * len(slots)
    return [
        make_record(
            source_id,
            slot,
            [s for s in slots if s != slot],
            snr_db=snr,
            packet_id=packet_id,
        )
        for slot, snr in zip(slots, snr_db)
    ]


@pytest.fixture(autouse=True)
def no_global_config():
    """Tests never leak a global configuration into each other."""
    clear_config()
    yield
    clear_config()


@pytest.fixture
def oracle():
    return ThresholdOracle(THRESHOLD_DB)


@pytest.fixture
def sink():
    return TraceCollector()


@pytest.fixture
def sic(oracle, sink):
    return SicEngine(oracle, sink=sink)


@pytest.fixture
def marsala(sic):
    return MarsalaCorrelator(sic)


@pytest.fixture
def new_record():
    return make_record


@pytest.fixture
def new_packet():
    return make_packet
