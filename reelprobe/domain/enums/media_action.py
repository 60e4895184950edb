# reelprobe/domain/enums/media_action.py
from __future__ import annotations

from enum import StrEnum
from typing import Dict, Tuple

from reelprobe.domain.enums.media_kind import MediaKind


class MediaAction(StrEnum):
    """Editing operations the surrounding application offers per queued item."""
    split = "split"
    merge = "merge"
    crop = "crop"
    compress = "compress"
    mix = "mix"
    tour = "tour"


ACTIONS_BY_KIND: Dict[MediaKind, Tuple[MediaAction, ...]] = {
    MediaKind.video: tuple(MediaAction),
    MediaKind.audio: (MediaAction.split, MediaAction.merge, MediaAction.compress, MediaAction.mix),
    MediaKind.image: (MediaAction.compress, MediaAction.mix, MediaAction.tour),
    MediaKind.subtitle: (MediaAction.mix,),
}
