from reelprobe.domain.enums.file_format import AudioFormats, ImageFormats, SubtitleFormats, VideoFormats
from reelprobe.domain.enums.media_action import ACTIONS_BY_KIND, MediaAction
from reelprobe.domain.enums.media_kind import MediaKind
from reelprobe.domain.enums.probe_stage import STAGES_BY_KIND, ProbeStage
__all__ = [
    "AudioFormats",
    "ImageFormats",
    "SubtitleFormats",
    "VideoFormats",
    "ACTIONS_BY_KIND",
    "MediaAction",
    "MediaKind",
    "STAGES_BY_KIND",
    "ProbeStage",
]
