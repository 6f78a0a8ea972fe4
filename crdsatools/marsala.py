r"""
Marsala: replica correlation on top of CRDSA SIC.

Packets left undecoded by SIC may still be recovered by correlating all of
their replicas: their energy adds up while the interferers of the different
slots do not. After SIC has converged, every remaining replica is tried with
the combined SINR

$SINR_{comb} = \frac{R}{occupancy/R - 1 + 1/SINR}$

where ``R`` is the packet's replica count and ``occupancy`` the number of
replicas currently sitting in its ``R`` slots. A success removes the packet
from the frame like a SIC success, which may unblock other packets, so SIC is
run again before the next correlation pass.
"""

import math
from typing import List, Optional

from . import helpers
from .core.frame import FrameCollection, FrameState
from .core.records import PacketReplicaRecord
from .logger import logger
from .sic import PhaseCallback, SicEngine
from .telemetry import FrameStatistics


def correlation_trials(num_slots: int, replicas_count: int) -> int:
    """
    Diagnostic count reported with every correlation attempt.

    Product of the ``replicas_count - 1`` integers just below ``num_slots``.
    It labels the trace only and plays no part in decoding.

    Args:
        num_slots: Number of occupied slots of the frame.
        replicas_count: Replica count ``R`` of the packet.
    """
    others = replicas_count - 1
    return math.prod(range(max(num_slots - others, 0), num_slots))


class MarsalaCorrelator:
    """
    CRDSA decoder extended with replica correlation.

    Args:
        sic: SIC engine run to convergence before every correlation pass. Its
            oracle, telemetry sink and elimination model are shared.
    """

    name = "marsala"

    def __init__(self, sic: SicEngine):
        self.sic = sic

    @property
    def oracle(self):
        return self.sic.oracle

    @property
    def sink(self):
        return self.sic.sink

    def correlate(self, frame: FrameCollection, record: PacketReplicaRecord) -> bool:
        """
        Attempts to decode ``record`` by correlating all replicas of its packet.

        Raises:
            ReplicaIntegrityError: If a sibling slot or replica is missing.
        """
        occupancy = frame.packet_occupancy(record)
        replicas_count = record.replica_count

        single_sinr = record.update_composite_sinr()
        self.sink.link_sinr(helpers.linear_to_db(single_sinr))

        combined = helpers.combined_replica_sinr(replicas_count, occupancy, single_sinr)
        logger.debug(
            f"Correlating {record.describe()}: replicas={replicas_count} "
            f"interferents={occupancy - replicas_count} "
            f"SINR={single_sinr:.4g} combined={combined:.4g}"
        )

        success = self.oracle.evaluate(combined, record.link_params)
        self.sink.correlation_rx(
            correlation_trials(len(frame), replicas_count), record.source_id, success
        )
        return success

    def correlation_pass(
        self, frame: FrameCollection, decoded: List[PacketReplicaRecord]
    ) -> bool:
        """
        Tries every remaining replica once; stops at the first success.

        Returns:
            True if a packet was decoded by correlation.
        """
        for slot_id, contents in frame.iter_slots():
            for record in list(contents):
                if not self.correlate(frame, record):
                    continue

                logger.debug(f"Marsala decoded {record.describe()}.")
                frame.remove_packet(record, self.sic.elimination, via="correlation")
                decoded.append(record)
                return True

        return False

    def run(
        self,
        frame: FrameCollection,
        on_phase: Optional[PhaseCallback] = None,
        statistics: Optional[FrameStatistics] = None,
    ) -> List[PacketReplicaRecord]:
        """
        Alternates SIC convergence and correlation passes until neither decodes.

        Returns:
            Decoded replicas in decode order.
        """
        decoded: List[PacketReplicaRecord] = []
        while True:
            if on_phase is not None:
                on_phase(FrameState.DECODING)
            self.sic.run_to_convergence(frame, decoded, statistics)

            if on_phase is not None:
                on_phase(FrameState.CORRELATING)
            progressed = self.correlation_pass(frame, decoded)
            if statistics is not None:
                statistics.correlation_passes += 1
            if not progressed:
                return decoded
