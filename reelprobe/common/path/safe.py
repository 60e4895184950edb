# reelprobe/common/path/safe.py
from __future__ import annotations

from pathlib import Path


def resolve_root(root: Path | str) -> Path:
    """Resolve a directory we own (e.g. the thumbnails directory)."""
    return Path(root).expanduser().resolve()


def is_inside(path: Path | str, root: Path | str) -> bool:
    """True if 'path' resolves to a location inside 'root'."""
    try:
        Path(path).resolve().relative_to(resolve_root(root))
    except ValueError:
        return False
    return True


def ensure_inside(path: Path | str, root: Path | str) -> None:
    """Validate that 'path' is inside 'root'. Raises ValueError if not."""
    if not is_inside(path, root):
        raise ValueError(f"path {Path(path).resolve()} escapes root {resolve_root(root)}")
