# reelprobe/domain/entities/media_item.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from reelprobe.domain.entities.probe import ProbeResult
from reelprobe.domain.enums.media_action import ACTIONS_BY_KIND, MediaAction
from reelprobe.domain.enums.media_kind import MediaKind
from reelprobe.domain.policies.classifier import classify


@dataclass
class MediaItem:
    """
    One entry of the media queue.

    Identity is the absolute file path (`item_id`). The kind is derived once
    from the extension and never changes. The queue owns the item; the probing
    core only reads path/kind and hands back a ProbeResult.
    """
    path: Path
    kind: MediaKind
    display_name: str = ""
    result: Optional[ProbeResult] = None
    selected: bool = False
    available_actions: Tuple[MediaAction, ...] = field(default=())

    def __post_init__(self) -> None:
        self.path = Path(os.path.abspath(self.path))
        if not self.display_name:
            self.display_name = self.path.name
        if not self.available_actions:
            self.available_actions = ACTIONS_BY_KIND[self.kind]

    @classmethod
    def from_path(cls, path: Path | str) -> "MediaItem":
        """Classify and build. Raises UnsupportedExtension for unknown extensions."""
        return cls(path=Path(path), kind=classify(path))

    @property
    def item_id(self) -> str:
        return str(self.path)

    @property
    def probed(self) -> bool:
        return self.result is not None
