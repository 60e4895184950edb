# reelprobe/common/settings.py
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import List, Optional
from pydantic import BaseModel, Field, AliasChoices, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from reelprobe.common.strings.splitters import csv_to_list


def _to_bool(v: str | bool | int | None, default: bool = False) -> bool:
    if isinstance(v, bool):
        return v
    if v is None:
        return default
    s = str(v).strip().lower()
    return s in {"1", "true", "yes", "y", "on"}


class APIConfig(BaseModel):
    host: str = "127.0.0.1"
    port: int = 8000
    prefix: str = "/api"

    cors_allow_origins: List[str] = Field(default_factory=lambda: ["http://localhost:5173"])
    cors_allow_methods: List[str] = Field(default_factory=lambda: ["GET", "POST", "PATCH", "DELETE", "OPTIONS"])
    cors_allow_headers: List[str] = Field(default_factory=lambda: ["*"])
    cors_allow_credentials: bool = False

    @field_validator("cors_allow_origins", "cors_allow_methods", "cors_allow_headers", mode="before")
    @classmethod
    def _split_csv(cls, v):
        return csv_to_list(v)


class ConcurrencyConfig(BaseModel):
    probe_workers: int = Field(8, ge=1, le=64, description="Max probe jobs running at once")
    watch_interval_sec: float = Field(1.0, gt=0, description="Poll interval of the deletion watcher")
    cancel_on_exit: bool = True

    @field_validator("cancel_on_exit", mode="before")
    @classmethod
    def _boolify(cls, v):
        return _to_bool(v, default=True)


class ThumbnailConfig(BaseModel):
    max_width: int = Field(196, ge=16, le=4096, description="Width of landscape/square thumbnails")
    max_height: int = Field(110, ge=16, le=4096, description="Height of portrait thumbnails")
    format: str = Field("png", pattern="^(png|jpg|webp)$")


class Settings(BaseSettings):
    # -------- App / Env --------
    app_name: str = "reelprobe"
    app_env: str = "development"  # development|test|production
    log_level: str = "INFO"

    # -------- Transcoder --------
    ffmpeg_bin: str = Field(
        default="ffmpeg",
        validation_alias=AliasChoices("FFMPEG_BIN", "ffmpeg_bin"),
        description="Path (or PATH-resolvable name) of the ffmpeg executable",
    )
    transcoder_timeout_sec: Optional[float] = Field(
        default=None,
        gt=0,
        description="Wall-clock limit per transcoder invocation; unset means no limit",
    )

    # -------- Thumbnails --------
    # Unset -> a private mkdtemp() directory created once per process.
    thumbnails_dir: Optional[Path] = Field(
        default=None,
        validation_alias=AliasChoices("THUMBNAILS_DIR", "thumbnails_dir"),
    )

    # -------- Sub-configs --------
    api: APIConfig = APIConfig()
    concurrency: ConcurrencyConfig = ConcurrencyConfig()
    thumbs: ThumbnailConfig = ThumbnailConfig()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Global settings accessor (cached). Use this everywhere you need config:
        from reelprobe.common.settings import get_settings
        cfg = get_settings()
    """
    return Settings()  # pydantic_settings will read from .env automatically
