# reelprobe/common/probe/ffmpeg_helpers.py
from __future__ import annotations
from datetime import timedelta
from pathlib import Path
from typing import List, Optional
import shlex


def build_probe_cmd(input_path: str | Path) -> List[str]:
    """
    Arguments for ffmpeg's diagnostic mode: with only an input and no output,
    ffmpeg prints the container/stream description to stderr and exits 1.
    """
    return ["-i", str(input_path)]


def build_frame_cmd(
    input_path: str | Path,
    out_path: str | Path,
    scale: str,
    seek: Optional[timedelta] = None,
) -> List[str]:
    """
    Arguments to write exactly one scaled frame to `out_path`.
    The seek goes before -i so ffmpeg seeks on the input (fast keyframe seek).
    """
    cmd: List[str] = []
    if seek is not None:
        cmd += ["-ss", format_seek(seek)]
    cmd += [
        "-i", str(input_path),
        "-frames:v", "1",
        "-vf", scale,
        "-y",  # the name is random; never block on an overwrite prompt
        str(out_path),
    ]
    return cmd


def format_seek(offset: timedelta) -> str:
    """timedelta -> 'HH:MM:SS' (with '.mmm' when there is a fractional part)."""
    total_ms = int(round(offset.total_seconds() * 1000))
    if total_ms < 0:
        raise ValueError("seek offset must be >= 0")
    secs, ms = divmod(total_ms, 1000)
    hh, rem = divmod(secs, 3600)
    mm, ss = divmod(rem, 60)
    out = f"{hh:02d}:{mm:02d}:{ss:02d}"
    if ms:
        out += f".{ms:03d}"
    return out


def display_cmd(executable: str | Path, args: List[str]) -> str:
    """Shell-quoted command line, for logs only (we never run through a shell)."""
    return shlex.join([str(executable), *map(str, args)])
