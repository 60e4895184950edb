from __future__ import annotations

from datetime import timedelta
from pathlib import Path
from typing import Optional, Protocol

from reelprobe.domain.enums.media_kind import MediaKind
from reelprobe.domain.ports.probe import ProcessRunnerPort
from reelprobe.domain.entities.thumbnail import ThumbnailPlan


class ThumbnailsPort(Protocol):
    def plan(
        self,
        kind: MediaKind,
        duration: Optional[timedelta],
        resolution: Optional[str],   # "WxH" as printed by the transcoder
    ) -> Optional[ThumbnailPlan]: ...

    def extract(
        self,
        media_path: Path,
        plan: ThumbnailPlan,
        runner: ProcessRunnerPort,
    ) -> Optional[Path]: ...
