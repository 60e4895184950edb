# reelprobe/services/probe/output_parser.py
"""
Line scanner for ffmpeg's diagnostic output (`ffmpeg -i <file>`).

ffmpeg prints a human-oriented description of the input on stderr:

    Input #0, mov,mp4,m4a,3gp,3g2,mj2, from 'clip.mp4':
      Duration: 00:01:23.45, start: 0.000000, bitrate: 5134 kb/s
      Chapters:
        Chapter #0:0: start 0.000000, end 41.000000
      Stream #0:0(und): Video: h264 (High) (avc1 / 0x31637661), yuv420p, 1920x1080, 5000 kb/s, 30 fps, ...
      Stream #0:1(und): Audio: aac (LC) (mp4a / 0x6134706D), 48000 Hz, stereo, fltp, 128 kb/s

The format is not a contract; anything we do not recognise is skipped and the
corresponding fact simply stays absent.

Matching is two-tier and the order matters: a line is first classified
(chapter marker before stream descriptor), and only then is a kind-specific
sub-extractor applied to lines already known to describe a Video or Audio
stream.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Set

from reelprobe.common.logging import get_logger
from reelprobe.domain.entities.probe import ProbeResult
from reelprobe.domain.enums.media_kind import MediaKind
from reelprobe.domain.policies.classifier import is_gif

logger = get_logger(__name__)


class ProbePass(StrEnum):
    generic = "generic"              # duration, chapters, stream-kind counts
    video_detail = "video_detail"    # resolution, bitrate, fps of the first video stream
    audio_detail = "audio_detail"    # sample rate, bitrate of the first audio stream


DURATION_RE = re.compile(r"\s*Duration:\s(\d{2}:\d{2}:\d{2}\.\d{2})")
CHAPTER_RE = re.compile(r"\s*Chapter #0:(\d+)")
STREAM_RE = re.compile(r"\s*Stream #(\d+):(\d+).*?: (\w+)")
VIDEO_DETAIL_RE = re.compile(
    r"\s*Stream #\d+:\d+.*?: Video: .+?, (\d+x\d+)(?:.*?(\d+ kb/s))?(?:.*?(\d+?\.?\d*? fps))?"
)
AUDIO_DETAIL_RE = re.compile(r"\s*Stream #\d+:\d+.*?: Audio: .+?, (\d+ Hz)(?:.*?(\d+ kb/s))?")

# stream kind as printed by ffmpeg -> ProbeResult counter
STREAM_COUNTERS: Dict[str, str] = {
    "Video": "video_count",
    "Audio": "audio_count",
    "Subtitle": "subtitle_count",
    "Attachment": "attachment_count",
}

# rules that stop matching after their first hit
DURATION_RULE = "duration"
VIDEO_RULE = "video_detail"
AUDIO_RULE = "audio_detail"


@dataclass
class ParseState:
    """Per-invocation scanner state. Discarded with the parser."""
    locked: Set[str] = field(default_factory=set)
    lines_seen: int = 0
    lines_matched: int = 0

    def is_locked(self, rule: str) -> bool:
        return rule in self.locked

    def lock(self, rule: str) -> None:
        self.locked.add(rule)


class OutputParser:
    """
    Consumes one transcoder run's output, one line at a time, and writes the
    facts it finds into `result`.

    Which rules are active is decided by `passes`. Locking rules take their
    first match only; the chapter and stream counters count every match.
    Writes go through ProbeResult.lock(), so a fact found by an earlier
    invocation of the same job is never replaced.
    """

    def __init__(
        self,
        result: ProbeResult,
        *,
        passes: Iterable[ProbePass] = (ProbePass.generic,),
        media_path: Path | str = "",
        kind: MediaKind = MediaKind.video,
    ) -> None:
        self.result = result
        self.passes: FrozenSet[ProbePass] = frozenset(passes)
        self.state = ParseState()
        self.media_path = str(media_path)
        # GIF is image-typed but animated; it is the one image we take an fps from.
        self._keep_fps = kind == MediaKind.video or is_gif(media_path)
        if ProbePass.generic in self.passes:
            result.observe_streams()

    # ------------------------------------------------------------------
    @property
    def done(self) -> bool:
        """Nothing left to learn from further lines (early exit)."""
        if ProbePass.generic in self.passes:
            return False  # counters keep counting until the stream ends
        wanted = set()
        if ProbePass.video_detail in self.passes:
            wanted.add(VIDEO_RULE)
        if ProbePass.audio_detail in self.passes:
            wanted.add(AUDIO_RULE)
        return wanted <= self.state.locked

    def feed_all(self, lines: Iterable[str]) -> ProbeResult:
        for line in lines:
            self.feed(line)
        return self.result

    def feed(self, line: str) -> None:
        if not line or not line.strip() or self.done:
            return
        self.state.lines_seen += 1
        generic = ProbePass.generic in self.passes

        if generic and not self.state.is_locked(DURATION_RULE):
            m = DURATION_RE.search(line)
            if m:
                self.result.lock("duration", m.group(1))
                self.state.lock(DURATION_RULE)
                self.state.lines_matched += 1

        # tier 1: what kind of line is this?
        if CHAPTER_RE.search(line):
            if generic:
                self.result.bump("chapter_count")
                self.state.lines_matched += 1
            return

        m = STREAM_RE.search(line)
        if not m:
            return
        input_index, stream_kind = m.group(1), m.group(3)

        if generic and input_index == "0":
            counter = STREAM_COUNTERS.get(stream_kind)
            if counter:
                self.result.bump(counter)
                self.state.lines_matched += 1

        # tier 2: kind-specific extractors, only for lines classified above
        if stream_kind == "Video" and ProbePass.video_detail in self.passes:
            self._video_detail(line)
        elif stream_kind == "Audio" and ProbePass.audio_detail in self.passes:
            self._audio_detail(line)

    # ------------------------------------------------------------------
    def _video_detail(self, line: str) -> None:
        if self.state.is_locked(VIDEO_RULE):
            return
        m = VIDEO_DETAIL_RE.search(line)
        if not m:
            return
        resolution, bitrate, fps = m.group(1), m.group(2), m.group(3)
        self.result.lock("resolution", resolution)
        self.result.lock("bitrate", bitrate)
        if self._keep_fps:
            self.result.lock("fps", fps)
        self.state.lock(VIDEO_RULE)
        self.state.lines_matched += 1
        logger.debug("video detail %s: %s %s %s", self.media_path, resolution, bitrate, fps)

    def _audio_detail(self, line: str) -> None:
        if self.state.is_locked(AUDIO_RULE):
            return
        m = AUDIO_DETAIL_RE.search(line)
        if not m:
            return
        self.result.lock("sample_rate", m.group(1))
        self.result.lock("bitrate", m.group(2))
        self.state.lock(AUDIO_RULE)
        self.state.lines_matched += 1
        logger.debug("audio detail %s: %s %s", self.media_path, m.group(1), m.group(2))
