# reelprobe/services/probe/transcoder.py
from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import Optional

from reelprobe.common.logging import get_logger
from reelprobe.common.settings import Settings, get_settings
from reelprobe.domain.errors import LaunchFailed
from reelprobe.domain.ports.probe import RunnerFactory
from reelprobe.services.process.runner import ProcessRunner

logger = get_logger(__name__)


def resolve_transcoder(candidate: Optional[str] = None) -> str:
    """
    Resolve the configured transcoder to an executable path.

    This is the application-wide check: it runs once before any probe job is
    created, and a LaunchFailed here blocks the whole pipeline.
    """
    candidate = candidate or get_settings().ffmpeg_bin
    if not candidate:
        raise LaunchFailed("no transcoder configured; set FFMPEG_BIN")

    p = Path(candidate).expanduser()
    if p.parent != Path(".") or p.is_absolute():
        # looks like a path: it must exist and be executable as given
        if p.is_file() and os.access(p, os.X_OK):
            return str(p)
        raise LaunchFailed(f"transcoder not found or not executable: {p}", executable=str(p))

    resolved = shutil.which(candidate)
    if not resolved:
        raise LaunchFailed(
            f"{candidate} not found on PATH; set FFMPEG_BIN or install ffmpeg",
            executable=candidate,
        )
    return resolved


def runner_factory_for(executable: str, settings: Optional[Settings] = None) -> RunnerFactory:
    """Factory producing one fresh ProcessRunner per transcoder invocation."""
    cfg = settings or get_settings()
    timeout = cfg.transcoder_timeout_sec

    def _factory() -> ProcessRunner:
        return ProcessRunner(executable, timeout_sec=timeout)

    return _factory
