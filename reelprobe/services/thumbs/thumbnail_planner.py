# reelprobe/services/thumbs/thumbnail_planner.py
from __future__ import annotations
from datetime import timedelta
from pathlib import Path
from typing import Optional
from PIL import Image
from reelprobe.common.logging import get_logger
from reelprobe.common.naming.slugger import unique_file_name
from reelprobe.common.path.safe import ensure_inside
from reelprobe.common.probe.ffmpeg_helpers import build_frame_cmd
from reelprobe.common.settings import get_settings
from reelprobe.domain.entities.probe import parse_resolution
from reelprobe.domain.entities.thumbnail import ThumbnailPlan
from reelprobe.domain.enums.media_kind import MediaKind
from reelprobe.domain.ports.probe import ProcessRunnerPort
from reelprobe.domain.ports.thumbs import ThumbnailsPort
from reelprobe.services.thumbs.thumbs_dir import get_thumbnails_dir, register_thumbnail

logger = get_logger(__name__)

LONG_SEEK = timedelta(seconds=5)
SHORT_SEEK = timedelta(seconds=2)


def seek_offset(kind: MediaKind, duration: Optional[timedelta]) -> Optional[timedelta]:
    """
    Where to grab the preview frame: 5s in when the clip is longer than 5s,
    2s in when longer than 2s, else the first frame. Images have no timeline
    (None), and neither does a video whose duration was never reported.
    """
    if kind != MediaKind.video or duration is None:
        return None
    if duration > LONG_SEEK:
        return LONG_SEEK
    if duration > SHORT_SEEK:
        return SHORT_SEEK
    return timedelta(0)


def scale_expression(resolution: str, max_width: int = 196, max_height: int = 110) -> str:
    """
    Landscape and square frames are bounded by width, portrait frames by
    height; -1 lets ffmpeg keep the aspect ratio on the other axis.
    """
    dims = parse_resolution(resolution)
    if dims is None:
        raise ValueError(f"unparseable resolution: {resolution!r}")
    w, h = dims
    if w >= h:
        return f"scale=w={int(max_width)}:h=-1"
    return f"scale=w=-1:h={int(max_height)}"


class ThumbnailPlanner(ThumbnailsPort):
    def __init__(
        self,
        out_dir: Optional[Path | str] = None,
        *,
        max_width: Optional[int] = None,
        max_height: Optional[int] = None,
        format: Optional[str] = None,
    ):
        cfg = get_settings()
        self._out_dir = Path(out_dir) if out_dir else None
        self.max_width = int(max_width or cfg.thumbs.max_width)
        self.max_height = int(max_height or cfg.thumbs.max_height)
        self.format = (format or cfg.thumbs.format).lower()

    @property
    def out_dir(self) -> Path:
        # resolved lazily so the shared temp dir is only created when a thumbnail is needed
        if self._out_dir is None:
            self._out_dir = get_thumbnails_dir()
        return self._out_dir

    def plan(
        self,
        kind: MediaKind,
        duration: Optional[timedelta],
        resolution: Optional[str],
    ) -> Optional[ThumbnailPlan]:
        if not resolution:
            return None
        try:
            scale = scale_expression(resolution, self.max_width, self.max_height)
        except ValueError:
            logger.warning("cannot plan thumbnail for resolution %r", resolution)
            return None
        return ThumbnailPlan(seek=seek_offset(kind, duration), scale=scale)

    def extract(
        self,
        media_path: Path,
        plan: ThumbnailPlan,
        runner: ProcessRunnerPort,
    ) -> Optional[Path]:
        """
        Write one scaled frame into the thumbnails dir. Returns its path, or None
        when the transcoder failed, was killed, or wrote something that is not
        an image. LaunchFailed propagates to the caller.
        """
        out_path = self.out_dir / unique_file_name(self.format)
        ensure_inside(out_path, self.out_dir)
        cmd = build_frame_cmd(media_path, out_path, plan.scale, plan.seek)

        outcome = runner.run(cmd)
        if not outcome.ok:
            logger.warning(
                "thumbnail extraction failed for %s (rc=%s killed=%s)",
                media_path, outcome.returncode, outcome.killed,
            )
            out_path.unlink(missing_ok=True)
            return None

        if not self._is_image(out_path):
            logger.warning("transcoder produced no readable thumbnail for %s", media_path)
            out_path.unlink(missing_ok=True)
            return None
        register_thumbnail(out_path)
        return out_path

    # ---- internals ----
    @staticmethod
    def _is_image(path: Path) -> bool:
        if not path.is_file():
            return False
        try:
            with Image.open(path) as im:
                im.verify()
        except (OSError, SyntaxError, ValueError):
            return False
        return True
