# reelprobe/common/naming/slugger.py
from __future__ import annotations

import secrets
import string
from typing import Iterable

DEFAULT_ALPHABET = string.ascii_lowercase + string.digits


def random_slug(length: int = 12, alphabet: Iterable[str] = DEFAULT_ALPHABET) -> str:
    """Generate a short, filesystem-friendly slug (default: 12 chars of [a-z0-9])."""
    pool = tuple(alphabet)
    return "".join(secrets.choice(pool) for _ in range(length))


def unique_file_name(ext: str, *, length: int = 12) -> str:
    """Random file name with the given extension, e.g. 'k3v9x0qa1mzt.png'."""
    ext = (ext or "").lstrip(".")
    slug = random_slug(length)
    return f"{slug}.{ext}" if ext else slug
