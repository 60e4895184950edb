# tests/conftest.py
from __future__ import annotations

import stat
import sys
import threading
from pathlib import Path
from typing import Callable, List, Optional, Sequence

import pytest

from reelprobe.common import settings as settings_mod
from reelprobe.domain.entities.outcome import ExitOutcome
from reelprobe.services.thumbs import thumbs_dir

# What `ffmpeg -i <file>` prints to stderr for a few typical inputs.
VIDEO_STDERR = """\
ffmpeg version 6.0 Copyright (c) 2000-2023 the FFmpeg developers
Input #0, mov,mp4,m4a,3gp,3g2,mj2, from 'clip.mp4':
  Metadata:
    major_brand     : isom
  Duration: 00:01:23.45, start: 0.000000, bitrate: 5134 kb/s
  Chapters:
    Chapter #0:0: start 0.000000, end 41.000000
    Chapter #0:1: start 41.000000, end 83.450000
  Stream #0:0(und): Video: h264 (High) (avc1 / 0x31637661), yuv420p(tv, bt709), 1920x1080 [SAR 1:1 DAR 16:9], 5000 kb/s, 30 fps, 30 tbr, 15360 tbn (default)
  Stream #0:1(und): Audio: aac (LC) (mp4a / 0x6134706D), 48000 Hz, stereo, fltp, 128 kb/s (default)
  Stream #0:2(eng): Subtitle: mov_text (tx3g / 0x67337874), 0 kb/s
At least one output file must be specified
"""

AUDIO_STDERR = """\
Input #0, mp3, from 'song.mp3':
  Duration: 00:03:10.12, start: 0.025057, bitrate: 320 kb/s
  Stream #0:0: Audio: mp3, 44100 Hz, stereo, fltp, 320 kb/s
  Stream #0:1: Video: png, rgb24(pc), 500x500, 90k tbr, 90k tbn (attached pic)
At least one output file must be specified
"""

IMAGE_STDERR = """\
Input #0, png_pipe, from 'shot.png':
  Duration: N/A, bitrate: N/A
  Stream #0:0: Video: png, rgba(pc), 640x960, 25 fps, 25 tbr, 25 tbn
At least one output file must be specified
"""

# Stand-in for the ffmpeg binary. Probe mode replays $FAKE_FFMPEG_OUTPUT on
# stderr and exits 1; frame mode writes a small PNG to the last argument.
_FAKE_FFMPEG = """\
#!{python}
import os, sys, time

args = sys.argv[1:]
if "-frames:v" in args:
    if os.environ.get("FAKE_FFMPEG_FRAME") == "fail":
        sys.stderr.write("Conversion failed!\\n")
        sys.exit(1)
    from PIL import Image
    Image.new("RGB", (196, 110), (20, 40, 60)).save(args[-1], format="PNG")
    sys.exit(0)

src = os.environ.get("FAKE_FFMPEG_OUTPUT")
if src:
    with open(src, encoding="utf-8") as fh:
        for line in fh:
            sys.stderr.write(line)
            sys.stderr.flush()
if os.environ.get("FAKE_FFMPEG_HANG"):
    time.sleep(60)
sys.exit(1)
"""


@pytest.fixture(autouse=True)
def _isolated_settings(tmp_path, monkeypatch):
    """Fresh settings per test and a private thumbnails dir."""
    monkeypatch.setenv("THUMBNAILS_DIR", str(tmp_path / "thumbs"))
    monkeypatch.setenv("APP_ENV", "test")
    settings_mod.get_settings.cache_clear()
    thumbs_dir.purge_thumbnails_dir()
    yield
    thumbs_dir.purge_thumbnails_dir()
    settings_mod.get_settings.cache_clear()


@pytest.fixture()
def fake_ffmpeg(tmp_path, monkeypatch) -> Callable[[str], Path]:
    """
    Install an executable fake ffmpeg and point FFMPEG_BIN at it.
    Call the fixture with the stderr text the probe passes should see.
    """
    exe = tmp_path / "bin" / "ffmpeg"
    exe.parent.mkdir(parents=True, exist_ok=True)
    exe.write_text(_FAKE_FFMPEG.replace("{python}", sys.executable), encoding="utf-8")
    exe.chmod(exe.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    monkeypatch.setenv("FFMPEG_BIN", str(exe))
    settings_mod.get_settings.cache_clear()

    def _install(stderr_text: str = VIDEO_STDERR) -> Path:
        out = tmp_path / "ffmpeg_stderr.txt"
        out.write_text(stderr_text, encoding="utf-8")
        monkeypatch.setenv("FAKE_FFMPEG_OUTPUT", str(out))
        return exe

    return _install


@pytest.fixture()
def media_file(tmp_path) -> Callable[[str], Path]:
    """Create an (empty-ish) media file with the given name."""
    def _make(name: str, size: int = 2048) -> Path:
        p = tmp_path / "media" / name
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_bytes(b"\0" * size)
        return p
    return _make


class FakeRunner:
    """
    In-process ProcessRunnerPort. Replays canned lines, optionally blocks
    until killed, and records every invocation on the class.
    """
    calls: List[List[str]] = []

    def __init__(
        self,
        lines: Sequence[str] = (),
        *,
        returncode: int = 1,
        block: Optional[threading.Event] = None,
        started: Optional[threading.Event] = None,
        write_frame: bool = True,
    ) -> None:
        self.lines = list(lines)
        self.returncode = returncode
        self.block = block
        self.started = started
        self.write_frame = write_frame
        self._killed = threading.Event()

    def run(self, args, on_line=None) -> ExitOutcome:
        args = [str(a) for a in args]
        FakeRunner.calls.append(args)
        if self._killed.is_set():
            return ExitOutcome(returncode=None, killed=True)
        if "-frames:v" in args:
            if self.write_frame:
                from PIL import Image
                Image.new("RGB", (8, 8)).save(args[-1], format="PNG")
                return ExitOutcome(returncode=0)
            return ExitOutcome(returncode=self.returncode)
        for n, line in enumerate(self.lines, 1):
            if on_line is not None:
                on_line(line)
            if self.block is not None and n == 1:
                if self.started is not None:
                    self.started.set()
                self._killed.wait(10)
                break
        killed = self._killed.is_set()
        return ExitOutcome(returncode=-9 if killed else self.returncode, killed=killed, lines=len(self.lines))

    def kill(self) -> None:
        self._killed.set()


@pytest.fixture()
def fake_runner_cls():
    FakeRunner.calls.clear()
    yield FakeRunner
    FakeRunner.calls.clear()


@pytest.fixture()
def ffmpeg_stderr() -> dict:
    """Canned `ffmpeg -i` diagnostics keyed by media kind."""
    return {"video": VIDEO_STDERR, "audio": AUDIO_STDERR, "image": IMAGE_STDERR}
