# reelprobe/services/probe/media_probe.py
from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Tuple

from reelprobe.common.logging import get_logger
from reelprobe.common.probe.ffmpeg_helpers import build_probe_cmd
from reelprobe.domain.entities.media_item import MediaItem
from reelprobe.domain.entities.probe import ProbeResult
from reelprobe.domain.enums.probe_stage import STAGES_BY_KIND, ProbeStage
from reelprobe.domain.errors import Cancelled, LaunchFailed, ProcessExitedNonZero, ReelProbeError
from reelprobe.domain.ports.probe import LineHandler, ProcessRunnerPort, RunnerFactory
from reelprobe.domain.ports.thumbs import ThumbnailsPort
from reelprobe.services.probe.output_parser import OutputParser, ProbePass
from reelprobe.services.thumbs.thumbnail_planner import ThumbnailPlanner

logger = get_logger(__name__)

# ffmpeg given an input and no output describes the input and exits 1.
_PROBE_EXPECTED_RC = (0, 1)

_PASSES: Dict[ProbeStage, Tuple[ProbePass, ...]] = {
    ProbeStage.probing_generic: (ProbePass.generic,),
    ProbeStage.probing_video_detail: (ProbePass.video_detail,),
    ProbeStage.probing_audio_detail: (ProbePass.audio_detail,),
}


class MediaProbe:
    """
    The probing job for one media item:

        pending -> probing_generic -> probing_video_detail -> extracting_thumbnail
                -> probing_audio_detail -> complete

    with only the stages that apply to the item's kind (see STAGES_BY_KIND).

    run() always ends in `complete` and always returns a ProbeResult. Failures
    degrade the result instead of raising: a launch failure or an unexpected
    error stops the remaining stages and is kept on `error`; non-zero exits
    are logged and kept on `issues`; facts that never matched stay None.

    cancel() may be called from any thread at any time. It kills the running
    transcoder (if any), makes the job skip what is left, and is a no-op once
    the job is complete.
    """

    def __init__(
        self,
        item: MediaItem,
        *,
        runner_factory: RunnerFactory,
        planner: Optional[ThumbnailsPort] = None,
    ) -> None:
        self.item = item
        self.runner_factory = runner_factory
        self.planner: ThumbnailsPort = planner if planner is not None else ThumbnailPlanner()

        self.result = ProbeResult()
        self.error: Optional[ReelProbeError] = None
        self.issues: List[ReelProbeError] = []
        self.stages_run: List[ProbeStage] = []

        self._lock = threading.Lock()
        self._stage = ProbeStage.pending
        self._cancel = threading.Event()
        self._finished = threading.Event()
        self._current: Optional[ProcessRunnerPort] = None

    # ---- state --------------------------------------------------------------
    @property
    def stage(self) -> ProbeStage:
        return self._stage

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    @property
    def done(self) -> bool:
        return self._finished.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._finished.wait(timeout)

    # ---- control ------------------------------------------------------------
    def run(self) -> ProbeResult:
        with self._lock:
            if self._stage != ProbeStage.pending:
                raise RuntimeError(f"probe for {self.item.item_id} already started")
        path = self.item.item_id
        logger.debug("probe start %s (%s)", path, self.item.kind)
        try:
            self.result.file_size = self._file_size()
            for stage in STAGES_BY_KIND[self.item.kind]:
                if self._cancel.is_set():
                    break
                self._enter(stage)
                self._run_stage(stage)
        except LaunchFailed as e:
            self.error = e
            logger.error("probe %s: %s", path, e)
        except Exception as e:
            # contained to this item; siblings and the coordinator never see it
            logger.exception("probe %s failed unexpectedly", path)
            self.error = ReelProbeError(f"unexpected probe failure: {e}", path=path)
        finally:
            if self._cancel.is_set() and self.error is None:
                self.error = Cancelled("probe cancelled", path=path)
            self._enter(ProbeStage.complete)
            self._finished.set()
        logger.debug("probe done %s: %s", path, self.result.summary())
        return self.result

    def cancel(self) -> None:
        with self._lock:
            if self._stage == ProbeStage.complete or self._cancel.is_set():
                return
            self._cancel.set()
            runner = self._current
        logger.info("cancelling probe %s (stage=%s)", self.item.item_id, self._stage)
        if runner is not None:
            runner.kill()

    # ---- stages -------------------------------------------------------------
    def _run_stage(self, stage: ProbeStage) -> None:
        if stage in _PASSES:
            self._probe_pass(stage)
        elif stage == ProbeStage.extracting_thumbnail:
            self._thumbnail()

    def _probe_pass(self, stage: ProbeStage) -> None:
        parser = OutputParser(
            self.result,
            passes=_PASSES[stage],
            media_path=self.item.path,
            kind=self.item.kind,
        )
        with self._runner() as runner:
            outcome = runner.run(build_probe_cmd(self.item.path), self._guard(parser.feed))
        if outcome.killed:
            logger.info("%s killed during %s; keeping %d matched line(s)", self.item.item_id, stage, parser.state.lines_matched)
        elif outcome.returncode not in _PROBE_EXPECTED_RC:
            self._exit_issue(stage, outcome.returncode)
        else:
            logger.debug("%s %s rc=%s matched=%d", self.item.item_id, stage, outcome.returncode, parser.state.lines_matched)

    def _thumbnail(self) -> None:
        plan = self.planner.plan(self.item.kind, self.result.duration_td, self.result.resolution)
        if plan is None:
            logger.info("no resolution for %s; skipping thumbnail", self.item.item_id)
            return
        with self._runner() as runner:
            thumb = self.planner.extract(self.item.path, plan, runner)
        if thumb is None and not self._cancel.is_set():
            self._exit_issue(ProbeStage.extracting_thumbnail, None)
        self.result.lock("thumbnail_path", thumb)

    # ---- internals ----------------------------------------------------------
    @contextmanager
    def _runner(self) -> Iterator[ProcessRunnerPort]:
        """Create the job's current runner; a cancel() racing with creation still kills it."""
        runner = self.runner_factory()
        with self._lock:
            self._current = runner
            cancelled = self._cancel.is_set()
        if cancelled:
            runner.kill()
        try:
            yield runner
        finally:
            with self._lock:
                self._current = None

    def _guard(self, feed: LineHandler) -> LineHandler:
        def _on_line(line: str) -> None:
            if not self._cancel.is_set():
                feed(line)
        return _on_line

    def _enter(self, stage: ProbeStage) -> None:
        with self._lock:
            self._stage = stage
        if stage != ProbeStage.complete:
            self.stages_run.append(stage)
        logger.debug("%s -> %s", self.item.item_id, stage)

    def _exit_issue(self, stage: ProbeStage, rc: Optional[int]) -> None:
        issue = ProcessExitedNonZero(f"{stage} failed", path=self.item.item_id, returncode=rc)
        self.issues.append(issue)
        logger.warning("%s: %s (rc=%s), continuing", self.item.item_id, issue.message, rc)

    def _file_size(self) -> Optional[int]:
        try:
            return self.item.path.stat().st_size
        except OSError as e:
            logger.warning("cannot stat %s: %s", self.item.item_id, e)
            return None
