# reelprobe/services/schemas/queue.py
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from reelprobe.domain.enums import MediaAction, MediaKind


# ---------- Probe facts ----------

class ProbeResultRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    file_size: Optional[int] = None
    duration: Optional[str] = None
    resolution: Optional[str] = None
    bitrate: Optional[str] = None
    fps: Optional[str] = None
    sample_rate: Optional[str] = None
    thumbnail_path: Optional[str] = None

    video_count: Optional[int] = None
    audio_count: Optional[int] = None
    subtitle_count: Optional[int] = None
    attachment_count: Optional[int] = None
    chapter_count: Optional[int] = None

    summary: str = ""


# ---------- Queue items ----------

class MediaItemRead(BaseModel):
    id: str
    path: str
    kind: MediaKind
    display_name: str
    selected: bool = False
    available_actions: List[MediaAction] = []
    probed: bool = False
    result: Optional[ProbeResultRead] = None


class QueueAddRequest(BaseModel):
    paths: List[str] = Field(..., min_length=1)
    index: Optional[int] = Field(default=None, ge=0, description="Insert position; default appends")


class QueueAddResponse(BaseModel):
    added: List[MediaItemRead] = []
    rejected: List[str] = []
    duplicates: List[str] = []


class SelectionPatch(BaseModel):
    selected: bool
