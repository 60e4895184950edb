from __future__ import annotations
from pathlib import Path
from typing import Optional, Protocol

from reelprobe.domain.entities.media_item import MediaItem
from reelprobe.domain.entities.probe import ProbeResult


class MediaQueuePort(Protocol):
    """What the probing core needs from whoever owns the visible media queue."""
    def lookup(self, path: Path | str) -> Optional[MediaItem]: ...
    def is_still_queued(self, item_id: str) -> bool: ...
    def notify_item_probed(self, item_id: str, result: ProbeResult) -> None: ...
    def remove(self, item_id: str) -> Optional[MediaItem]: ...
