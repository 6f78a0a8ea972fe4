"""
Successive Interference Cancellation (SIC) for CRDSA frames.

A CRDSA frame is decoded by repeatedly looking for one replica whose SINR is
good enough for the link-performance oracle, removing the whole packet from
every slot it occupies and cancelling its interference, then scanning again
with the updated interference levels. The loop stops when a full scan decodes
nothing.

Slots are scanned in ascending id order and replicas within a slot in arrival
order, so a deterministic oracle gives a reproducible decode order.
"""

from typing import Callable, List, Optional

from . import helpers
from .core.frame import FrameCollection, FrameState
from .core.records import PacketReplicaRecord
from .elimination import InterferenceEliminationModel, PerfectElimination
from .link import LinkPerformanceOracle
from .logger import logger
from .telemetry import FrameStatistics, TelemetrySink

PhaseCallback = Callable[[FrameState], None]


class SicEngine:
    """
    Plain CRDSA decoder: SIC iterated to convergence.

    Args:
        oracle: Link-performance oracle deciding each decoding attempt.
        sink: Telemetry sink receiving the SINR of every evaluated replica.
        elimination: Interference elimination model. Defaults to perfect
            cancellation.
    """

    name = "crdsa"

    def __init__(
        self,
        oracle: LinkPerformanceOracle,
        sink: Optional[TelemetrySink] = None,
        elimination: Optional[InterferenceEliminationModel] = None,
    ):
        self.oracle = oracle
        self.sink = sink if sink is not None else TelemetrySink()
        self.elimination = elimination if elimination is not None else PerfectElimination()

    def evaluate(self, record: PacketReplicaRecord) -> bool:
        """Computes the replica's composite SINR and asks the oracle about it."""
        sinr = record.update_composite_sinr()
        self.sink.link_sinr(helpers.linear_to_db(sinr))
        return self.oracle.evaluate(sinr, record.link_params)

    def decode_pass(
        self, frame: FrameCollection, decoded: List[PacketReplicaRecord]
    ) -> bool:
        """
        Scans the frame once and decodes at most one packet.

        Args:
            frame: Frame being decoded. Modified in place.
            decoded: Output list; the decoded replica is appended to it.

        Returns:
            True if a packet was decoded, False if no replica passed.

        Raises:
            ReplicaIntegrityError: If the decoded packet's replicas are not
                where it announced them.
        """
        for slot_id, contents in frame.iter_slots():
            for record in list(contents):
                if not self.evaluate(record):
                    continue

                logger.debug(
                    f"SIC decoded {record.describe()} "
                    f"(SINR {helpers.linear_to_db(record.composite_sinr):.2f} dB)."
                )
                frame.remove_packet(record, self.elimination, via="sic")
                decoded.append(record)
                return True

        return False

    def run_to_convergence(
        self,
        frame: FrameCollection,
        decoded: List[PacketReplicaRecord],
        statistics: Optional[FrameStatistics] = None,
    ) -> int:
        """
        Calls `decode_pass` until it makes no progress.

        Every successful pass removes at least one replica, so there are at most
        as many successful passes as replicas in the frame.

        Returns:
            Number of successful passes.
        """
        successes = 0
        while self.decode_pass(frame, decoded):
            successes += 1
        if statistics is not None:
            statistics.sic_passes += successes
        return successes

    def run(
        self,
        frame: FrameCollection,
        on_phase: Optional[PhaseCallback] = None,
        statistics: Optional[FrameStatistics] = None,
    ) -> List[PacketReplicaRecord]:
        """
        Decodes a frame with SIC only.

        Returns:
            Decoded replicas in decode order.
        """
        decoded: List[PacketReplicaRecord] = []
        if on_phase is not None:
            on_phase(FrameState.DECODING)
        self.run_to_convergence(frame, decoded, statistics)
        return decoded
