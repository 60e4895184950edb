# reelprobe/domain/entities/thumbnail.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional


@dataclass(frozen=True)
class ThumbnailPlan:
    """Where to grab the frame and how to scale it."""
    seek: Optional[timedelta]   # None: no seek (images, or video without a known duration)
    scale: str                  # ffmpeg filter, e.g. "scale=w=196:h=-1"
