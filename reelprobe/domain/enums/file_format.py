# reelprobe/domain/enums/file_format.py
from __future__ import annotations

from enum import StrEnum


class VideoFormats(StrEnum):
    MP4 = "mp4"
    MKV = "mkv"
    MOV = "mov"
    AVI = "avi"


class AudioFormats(StrEnum):
    MP3 = "mp3"
    WAV = "wav"


class ImageFormats(StrEnum):
    JPG = "jpg"
    JPEG = "jpeg"
    PNG = "png"
    GIF = "gif"


class SubtitleFormats(StrEnum):
    SRT = "srt"
    ASS = "ass"
