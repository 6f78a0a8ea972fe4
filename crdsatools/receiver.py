"""
Random-access frame receiver.

This module ties the pieces together for one physical carrier:

- `FrameDecoder`: owns the `FrameCollection` of one frame and walks it
  through ``COLLECTING -> DECODING -> CORRELATING -> FINALIZED``.
- `RandomAccessReceiver`: sequences frames on a carrier, builds the oracle
  and decode policy from a `DecoderConfig`, and hands every decoded set to
  the MAC callback.
- `make_decode_policy`: selects plain CRDSA SIC or Marsala.

A frame whose replica bookkeeping is inconsistent is aborted: its decoder is
finalized without output and the `ReplicaIntegrityError` propagates to the
caller. Nothing is delivered to the MAC for it.
"""

from typing import Any, Callable, List, Optional, Protocol, Sequence

from pydantic import BaseModel, ConfigDict, Field

from .core.config import DecoderConfig, resolve_config
from .core.frame import FrameCollection, FrameState
from .core.records import PacketReplicaRecord
from .elimination import InterferenceEliminationModel, make_elimination_model
from .errors import ReplicaIntegrityError
from .link import LinkPerformanceOracle, make_oracle
from .logger import frame_logger, logger
from .marsala import MarsalaCorrelator
from .sic import PhaseCallback, SicEngine
from .telemetry import FrameStatistics, TelemetrySink

MacCallback = Callable[[int, List[PacketReplicaRecord]], None]


class DecodePolicy(Protocol):
    """Strategy decoding a whole frame."""

    name: str

    def run(
        self,
        frame: FrameCollection,
        on_phase: Optional[PhaseCallback] = None,
        statistics: Optional[FrameStatistics] = None,
    ) -> List[PacketReplicaRecord]: ...


def make_decode_policy(
    config: Optional[DecoderConfig] = None,
    oracle: Optional[LinkPerformanceOracle] = None,
    sink: Optional[TelemetrySink] = None,
    elimination: Optional[InterferenceEliminationModel] = None,
) -> DecodePolicy:
    """
    Builds the decode policy selected by ``config.decode_policy``.

    Args:
        config: Decoder configuration. Falls back to the global one, then to defaults.
        oracle: Link-performance oracle. Built from the config when omitted.
        sink: Telemetry sink shared by the policy's components.
        elimination: Interference elimination model. Built from the config when omitted.

    Returns:
        A `SicEngine` for ``"crdsa"`` or a `MarsalaCorrelator` for ``"marsala"``.
    """
    config = resolve_config(config)
    sic = SicEngine(
        oracle if oracle is not None else make_oracle(config),
        sink=sink,
        elimination=elimination if elimination is not None else make_elimination_model(config),
    )
    if config.decode_policy == "marsala":
        return MarsalaCorrelator(sic)
    return sic


class FrameResult(BaseModel):
    """
    Output of one decoded frame.

    Attributes:
        frame_id: Identifier of the frame.
        decoded: Decoded packets (one replica each) in decode order.
        unresolved: One replica of every packet left undecoded.
        statistics: Outcome counters of the frame.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    frame_id: int
    decoded: List[PacketReplicaRecord] = Field(default_factory=list)
    unresolved: List[PacketReplicaRecord] = Field(default_factory=list)
    statistics: FrameStatistics = Field(default_factory=FrameStatistics)

    @property
    def payloads(self) -> List[Any]:
        return [r.payload for r in self.decoded]


class FrameDecoder:
    """
    Decode cycle of a single random-access frame.

    Args:
        frame_id: Identifier of the frame.
        num_slots: Number of slots of the frame.
        policy: Decode policy run once at the end of the frame.
        max_replicas: Upper bound on the replicas of one packet.
        strict_validation: Check replica consistency of the whole frame
            before decoding.
        carrier_id: Carrier identifier, used in log messages.
    """

    def __init__(
        self,
        frame_id: int,
        num_slots: int,
        policy: DecodePolicy,
        max_replicas: Optional[int] = None,
        strict_validation: bool = False,
        carrier_id: Optional[int] = None,
    ):
        self.frame_id = frame_id
        self.policy = policy
        self.strict_validation = strict_validation
        self.frame = FrameCollection(num_slots, frame_id=frame_id, max_replicas=max_replicas)
        self.state = FrameState.COLLECTING
        self.history: List[FrameState] = [FrameState.COLLECTING]
        self.aborted = False
        self.result: Optional[FrameResult] = None
        self._log = frame_logger(frame_id, carrier_id)

    def _set_state(self, state: FrameState) -> None:
        if state is not self.state:
            self._log.debug(f"{self.state.value} -> {state.value}")
            self.state = state
            self.history.append(state)

    def _abort(self) -> None:
        self.aborted = True
        self.frame.clear()
        self._set_state(FrameState.FINALIZED)

    def receive(self, record: PacketReplicaRecord) -> PacketReplicaRecord:
        """Registers a replica arriving during the frame interval, returns the frame's copy."""
        if self.state is not FrameState.COLLECTING:
            raise RuntimeError(
                f"Frame {self.frame_id} is {self.state.value}, cannot receive replicas."
            )
        return self.frame.add(record)

    def receive_many(self, records: Sequence[PacketReplicaRecord]) -> None:
        for record in records:
            self.receive(record)

    def decode(self) -> FrameResult:
        """
        Runs the decode policy on the collected frame, once.

        Any exception raised while decoding finalizes the frame as aborted
        and releases its records before propagating.

        Returns:
            The frame result.

        Raises:
            RuntimeError: If the frame was already decoded.
            ReplicaIntegrityError: If the replica bookkeeping is inconsistent.
                The frame is finalized as aborted and nothing is returned.
        """
        if self.state is not FrameState.COLLECTING:
            raise RuntimeError(f"Frame {self.frame_id} has already been decoded.")

        frame = self.frame
        statistics = FrameStatistics(
            replicas_received=frame.replicas_received,
            packets_received=len({r.packet_key for r in frame.records()}),
            collided_replicas=frame.collided_replicas(),
        )

        try:
            if self.strict_validation:
                frame.validate()
            decoded = self.policy.run(
                frame, on_phase=self._set_state, statistics=statistics
            )
        except ReplicaIntegrityError as e:
            self._abort()
            self._log.error(f"Frame decode aborted: {e}")
            raise
        except Exception as e:
            self._abort()
            self._log.error(f"Frame decode failed: {type(e).__name__}: {e}")
            raise

        unresolved = frame.unresolved_packets()
        statistics.decoded_sic = sum(1 for r in decoded if r.decoded_via == "sic")
        statistics.decoded_correlation = len(decoded) - statistics.decoded_sic
        statistics.unresolved = len(unresolved)

        frame.clear()
        self._set_state(FrameState.FINALIZED)
        self.result = FrameResult(
            frame_id=self.frame_id,
            decoded=decoded,
            unresolved=unresolved,
            statistics=statistics,
        )
        self._log.info(
            f"{len(decoded)}/{statistics.packets_received} packets decoded "
            f"({statistics.decoded_sic} SIC, {statistics.decoded_correlation} correlation, "
            f"{statistics.unresolved} unresolved)."
        )
        return self.result


class RandomAccessReceiver:
    """
    Receiver of the random-access frames of one carrier.

    Args:
        config: Decoder configuration. Falls back to the global one, then to defaults.
        oracle: Link-performance oracle. Built from the config when omitted.
        sink: Telemetry sink owned by the caller.
        on_frame_decoded: MAC callback receiving ``(frame_id, decoded)`` for
            every successfully finalized frame.
        policy: Decode policy. Built from the config when omitted.
        carrier_id: Carrier identifier, used in log messages.

    Examples
    --------
    >>> rx = RandomAccessReceiver(DecoderConfig(num_slots=10))
    >>> rx.start_frame()  # doctest: +SKIP
    >>> rx.receive(record)  # doctest: +SKIP
    >>> result = rx.end_frame()  # doctest: +SKIP
    """

    def __init__(
        self,
        config: Optional[DecoderConfig] = None,
        oracle: Optional[LinkPerformanceOracle] = None,
        sink: Optional[TelemetrySink] = None,
        on_frame_decoded: Optional[MacCallback] = None,
        policy: Optional[DecodePolicy] = None,
        carrier_id: Optional[int] = None,
    ):
        self.config = resolve_config(config)
        self.sink = sink if sink is not None else TelemetrySink()
        self.on_frame_decoded = on_frame_decoded
        self.carrier_id = carrier_id
        if policy is None:
            policy = make_decode_policy(self.config, oracle=oracle, sink=self.sink)
        self.policy = policy
        self._current: Optional[FrameDecoder] = None
        self._next_frame_id = 0
        logger.debug(
            f"Random-access receiver using '{policy.name}' policy on "
            f"{self.config.num_slots}-slot frames."
        )

    @property
    def current_frame(self) -> Optional[FrameDecoder]:
        return self._current

    def start_frame(self, frame_id: Optional[int] = None) -> FrameDecoder:
        """
        Opens a new frame interval.

        Raises:
            RuntimeError: If the previous frame is still collecting.
        """
        if self._current is not None and self._current.state is FrameState.COLLECTING:
            raise RuntimeError(
                f"Frame {self._current.frame_id} is still collecting; end it first."
            )
        if frame_id is None:
            frame_id = self._next_frame_id
        self._next_frame_id = frame_id + 1
        self._current = FrameDecoder(
            frame_id,
            self.config.num_slots,
            self.policy,
            max_replicas=self.config.max_replicas,
            strict_validation=self.config.strict_validation,
            carrier_id=self.carrier_id,
        )
        return self._current

    def receive(self, record: PacketReplicaRecord) -> PacketReplicaRecord:
        """Registers a replica into the frame being collected."""
        if self._current is None or self._current.state is not FrameState.COLLECTING:
            raise RuntimeError("No frame is collecting; call start_frame() first.")
        return self._current.receive(record)

    def end_frame(self) -> FrameResult:
        """
        Closes the frame interval, decodes it and delivers the result.

        Raises:
            RuntimeError: If no frame is collecting.
            ReplicaIntegrityError: If the frame had to be aborted.
        """
        if self._current is None or self._current.state is not FrameState.COLLECTING:
            raise RuntimeError("No frame is collecting; call start_frame() first.")

        decoder = self._current
        result = decoder.decode()
        self.sink.frame_decoded(result.frame_id, result.statistics)
        if self.on_frame_decoded is not None:
            self.on_frame_decoded(result.frame_id, list(result.decoded))
        return result

    def decode_frame(
        self, records: Sequence[PacketReplicaRecord], frame_id: Optional[int] = None
    ) -> FrameResult:
        """Collects ``records`` into a fresh frame and decodes it."""
        decoder = self.start_frame(frame_id)
        decoder.receive_many(records)
        return self.end_frame()
