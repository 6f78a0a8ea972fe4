from .config import (
    DecoderConfig,
    clear_config,
    get_config,
    require_config,
    set_config,
    using_config,
)
from .frame import FrameCollection, FrameState, SlotContents
from .records import LinkParams, PacketReplicaRecord, PacketStatus, ReplicaSignal

__all__ = [
    "DecoderConfig",
    "set_config",
    "get_config",
    "clear_config",
    "require_config",
    "using_config",
    "FrameCollection",
    "FrameState",
    "SlotContents",
    "LinkParams",
    "PacketReplicaRecord",
    "PacketStatus",
    "ReplicaSignal",
]
