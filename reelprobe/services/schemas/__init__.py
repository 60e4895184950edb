from reelprobe.services.schemas.queue import (
    MediaItemRead,
    ProbeResultRead,
    QueueAddRequest,
    QueueAddResponse,
    SelectionPatch,
)
__all__ = [
    "MediaItemRead",
    "ProbeResultRead",
    "QueueAddRequest",
    "QueueAddResponse",
    "SelectionPatch",
]
