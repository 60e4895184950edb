# reelprobe/domain/entities/probe.py
from __future__ import annotations

from dataclasses import dataclass, asdict, fields
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

KB = 1024
MB = KB * 1024
GB = MB * 1024

COUNTER_FIELDS = ("video_count", "audio_count", "subtitle_count", "attachment_count", "chapter_count")


@dataclass
class ProbeResult:
    """
    Facts collected for one media file by running the transcoder in its
    diagnostic mode. Values are kept exactly as the transcoder printed them
    ("00:01:23.45", "1920x1080", "5000 kb/s", "30 fps", "48000 Hz").

    None means "not observed". Stream counters stay None until a pass that
    counts streams has run; after that 0 is a real observation.

    Facts are filled monotonically: lock() never replaces a value that is
    already present, so the first match wins for the whole job.
    """
    file_size: Optional[int] = None
    duration: Optional[str] = None
    resolution: Optional[str] = None
    bitrate: Optional[str] = None
    fps: Optional[str] = None
    sample_rate: Optional[str] = None
    thumbnail_path: Optional[Path] = None

    video_count: Optional[int] = None
    audio_count: Optional[int] = None
    subtitle_count: Optional[int] = None
    attachment_count: Optional[int] = None
    chapter_count: Optional[int] = None

    # ---- mutation helpers ---------------------------------------------------

    def lock(self, name: str, value: Any) -> bool:
        """Set fact `name` if it is still absent. Returns True if the value was taken."""
        if value is None or getattr(self, name) is not None:
            return False
        setattr(self, name, value)
        return True

    def observe_streams(self) -> None:
        """Mark stream counters as observed (0) without touching existing counts."""
        for name in COUNTER_FIELDS:
            if getattr(self, name) is None:
                setattr(self, name, 0)

    def bump(self, name: str, inc: int = 1) -> None:
        if name not in COUNTER_FIELDS:
            raise KeyError(name)
        setattr(self, name, (getattr(self, name) or 0) + inc)

    # ---- derived views ------------------------------------------------------

    @property
    def duration_td(self) -> Optional[timedelta]:
        return parse_duration(self.duration)

    @property
    def dimensions(self) -> Optional[Tuple[int, int]]:
        return parse_resolution(self.resolution)

    def facts(self) -> Dict[str, Any]:
        """Every field except the thumbnail path (which is random per run)."""
        return {f.name: getattr(self, f.name) for f in fields(self) if f.name != "thumbnail_path"}

    def as_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        if self.thumbnail_path is not None:
            d["thumbnail_path"] = str(self.thumbnail_path)
        return d

    def summary(self) -> str:
        """
        One-line description for the queue view, e.g.
        "1920x1080 • 00:01:23.45 • 5000 kb/s • 30 fps • 12.5 MB • 1 video • 2 audios".
        """
        parts: List[str] = [
            v for v in (self.resolution, self.duration, self.bitrate, self.fps, self.sample_rate) if v is not None
        ]
        if self.file_size is not None:
            parts.append(format_size(self.file_size))

        video = self.video_count or 0
        audio = self.audio_count or 0
        subs = self.subtitle_count or 0
        attachments = self.attachment_count or 0
        chapters = self.chapter_count or 0
        if video + audio + subs + chapters > 1:
            streams = [
                _plural(n, label)
                for n, label in (
                    (video, "video"),
                    (audio, "audio"),
                    (subs, "subtitle"),
                    (attachments, "attachment"),
                    (chapters, "chapter"),
                )
                if n > 0
            ]
            parts.append(" • ".join(streams))
        return " • ".join(parts)


# ---- tiny parse/format helpers ----------------------------------------------

def parse_duration(value: Optional[str]) -> Optional[timedelta]:
    """'HH:MM:SS.ff' -> timedelta; None for anything else."""
    if not value:
        return None
    try:
        hh, mm, ss = value.split(":")
        return timedelta(hours=int(hh), minutes=int(mm), seconds=float(ss))
    except ValueError:
        return None


def parse_resolution(value: Optional[str]) -> Optional[Tuple[int, int]]:
    """'1920x1080' -> (1920, 1080); None for anything else."""
    if not value or "x" not in value:
        return None
    try:
        w, h = value.split("x", 1)
        return int(w), int(h)
    except ValueError:
        return None


def format_size(size: float) -> str:
    if size >= GB:
        return f"{_two_places(size / GB)} GB"
    if size >= MB:
        return f"{_two_places(size / MB)} MB"
    return f"{_two_places(size / KB)} KB"


def _two_places(x: float) -> str:
    return f"{x:.2f}".rstrip("0").rstrip(".")


def _plural(n: int, label: str) -> str:
    return f"{n} {label}{'s' if n > 1 else ''}"
