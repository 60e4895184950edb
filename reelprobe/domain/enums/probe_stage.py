# reelprobe/domain/enums/probe_stage.py
from __future__ import annotations

from enum import StrEnum
from typing import Dict, Tuple

from reelprobe.domain.enums.media_kind import MediaKind


class ProbeStage(StrEnum):
    pending = "pending"
    probing_generic = "probing_generic"
    probing_video_detail = "probing_video_detail"
    extracting_thumbnail = "extracting_thumbnail"
    probing_audio_detail = "probing_audio_detail"
    complete = "complete"


# Strictly sequential per item: later stages read facts locked by earlier ones.
STAGES_BY_KIND: Dict[MediaKind, Tuple[ProbeStage, ...]] = {
    MediaKind.video: (
        ProbeStage.probing_generic,
        ProbeStage.probing_video_detail,
        ProbeStage.extracting_thumbnail,
    ),
    MediaKind.audio: (
        ProbeStage.probing_generic,
        ProbeStage.probing_audio_detail,
    ),
    MediaKind.image: (
        ProbeStage.probing_video_detail,
        ProbeStage.extracting_thumbnail,
    ),
    MediaKind.subtitle: (),
}
