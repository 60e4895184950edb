# reelprobe/domain/policies/classifier.py
from __future__ import annotations

from pathlib import Path
from typing import Dict

from reelprobe.domain.enums.file_format import AudioFormats, ImageFormats, SubtitleFormats, VideoFormats
from reelprobe.domain.enums.media_kind import MediaKind
from reelprobe.domain.errors import UnsupportedExtension

# Keep these small and explicit so tests are deterministic.
VIDEO_EXTS = {f.value for f in VideoFormats}
AUDIO_EXTS = {f.value for f in AudioFormats}
IMAGE_EXTS = {f.value for f in ImageFormats}
SUBTITLE_EXTS = {f.value for f in SubtitleFormats}

KIND_BY_EXT: Dict[str, MediaKind] = {
    **{e: MediaKind.video for e in VIDEO_EXTS},
    **{e: MediaKind.audio for e in AUDIO_EXTS},
    **{e: MediaKind.image for e in IMAGE_EXTS},
    **{e: MediaKind.subtitle for e in SUBTITLE_EXTS},
}
SUPPORTED_EXTS = frozenset(KIND_BY_EXT)


def extension_of(path: Path | str) -> str:
    """Lowercased extension without the dot ('' when there is none)."""
    return Path(path).suffix.lstrip(".").lower()


def classify(path: Path | str) -> MediaKind:
    """
    Map a file path to its MediaKind by extension (case-insensitive).
    Raises UnsupportedExtension for anything outside the supported sets.
    """
    ext = extension_of(path)
    try:
        return KIND_BY_EXT[ext]
    except KeyError:
        raise UnsupportedExtension(
            f"unsupported extension {('.' + ext) if ext else '(none)'}",
            path=str(path),
            extension=ext,
        ) from None


def is_supported(path: Path | str) -> bool:
    return extension_of(path) in SUPPORTED_EXTS


def is_gif(path: Path | str) -> bool:
    """GIFs are image-typed but may carry a frame rate."""
    return extension_of(path) == ImageFormats.GIF.value
