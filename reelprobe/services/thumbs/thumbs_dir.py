# reelprobe/services/thumbs/thumbs_dir.py
from __future__ import annotations

import shutil
import tempfile
import threading
from pathlib import Path
from typing import Optional, Set

from reelprobe.common.logging import get_logger
from reelprobe.common.settings import Settings, get_settings

logger = get_logger(__name__)

_lock = threading.Lock()
_dir: Optional[Path] = None
_owned = False  # True when we created it with mkdtemp
_created: Set[Path] = set()


def get_thumbnails_dir(settings: Optional[Settings] = None) -> Path:
    """
    The process-wide thumbnails directory, created on first use and shared by
    every probe job. Files in it are write-once and randomly named, so jobs
    never contend for a name.
    """
    global _dir, _owned
    with _lock:
        if _dir is None:
            cfg = settings or get_settings()
            if cfg.thumbnails_dir:
                p = Path(cfg.thumbnails_dir).expanduser()
                p.mkdir(parents=True, exist_ok=True)
                _owned = False
            else:
                p = Path(tempfile.mkdtemp(prefix="reelprobe-thumbs-"))
                _owned = True
            _dir = p.resolve()
            logger.info("thumbnails dir: %s", _dir)
        return _dir


def register_thumbnail(path: Path) -> None:
    """Record a thumbnail this process wrote, so purge_thumbnails_dir() may delete it."""
    with _lock:
        _created.add(Path(path))


def purge_thumbnails_dir() -> None:
    """
    Optional shutdown hook. Removes a private temp dir entirely; in a
    configured dir only the thumbnails registered by this process are deleted
    and anything else found there is left alone.
    The next get_thumbnails_dir() call starts over.
    """
    global _dir, _owned
    with _lock:
        d, owned = _dir, _owned
        created = list(_created)
        _dir, _owned = None, False
        _created.clear()
    if d is None or not d.exists():
        return
    if owned:
        shutil.rmtree(d, ignore_errors=True)
        return
    for p in created:
        if p.parent == d:
            p.unlink(missing_ok=True)
    logger.debug("purged %d thumbnail(s) from %s", len(created), d)
