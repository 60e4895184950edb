from __future__ import annotations
from enum import StrEnum


class MediaKind(StrEnum):
    video = "video"
    audio = "audio"
    image = "image"
    subtitle = "subtitle"
