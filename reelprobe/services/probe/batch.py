# reelprobe/services/probe/batch.py
from __future__ import annotations

import threading
from concurrent.futures import Future
from functools import partial
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from reelprobe.common.concurrency.thread_manager import ThreadManager
from reelprobe.common.logging import get_logger
from reelprobe.common.settings import Settings, get_settings
from reelprobe.domain.entities.media_item import MediaItem
from reelprobe.domain.errors import UnsupportedExtension
from reelprobe.domain.ports.probe import RunnerFactory
from reelprobe.domain.ports.queue import MediaQueuePort
from reelprobe.domain.ports.thumbs import ThumbnailsPort
from reelprobe.domain.ports.watcher import FileWatcherPort
from reelprobe.services.probe.media_probe import MediaProbe
from reelprobe.services.probe.transcoder import resolve_transcoder, runner_factory_for
from reelprobe.services.thumbs.thumbnail_planner import ThumbnailPlanner

logger = get_logger(__name__)


class BatchProbeCoordinator:
    """
    Fans probe jobs out over a thread pool and hands each item's ProbeResult to
    the queue as soon as that item is done (no batch barrier, no ordering
    between items).

    Two failure tiers:
      - application: the constructor resolves the transcoder and raises
        LaunchFailed before any job exists;
      - item: everything that goes wrong inside one job stays on that job and
        still ends in a delivered (possibly partial) result.
    """

    def __init__(
        self,
        queue: MediaQueuePort,
        *,
        settings: Optional[Settings] = None,
        runner_factory: Optional[RunnerFactory] = None,
        planner: Optional[ThumbnailsPort] = None,
        watcher: Optional[FileWatcherPort] = None,
        pool: Optional[ThreadManager] = None,
        verify_transcoder: bool = True,
    ) -> None:
        self.cfg = settings or get_settings()
        self.queue = queue

        self.transcoder: Optional[str] = None
        if verify_transcoder or runner_factory is None:
            self.transcoder = resolve_transcoder(self.cfg.ffmpeg_bin)  # LaunchFailed escapes here
        self.runner_factory: RunnerFactory = runner_factory or runner_factory_for(self.transcoder, self.cfg)  # type: ignore[arg-type]
        self.planner: ThumbnailsPort = planner if planner is not None else ThumbnailPlanner()
        self.watcher = watcher
        self.pool: ThreadManager = pool if pool is not None else ThreadManager(
            name="probe",
            max_workers=self.cfg.concurrency.probe_workers,
        )

        self._lock = threading.RLock()
        self._jobs: Dict[str, MediaProbe] = {}
        self._futures: Dict[str, Future] = {}

    # ---- public -------------------------------------------------------------
    def probe_paths(self, paths: Iterable[Path | str]) -> List[Future]:
        """
        Probe files by path. Paths the queue already knows reuse its MediaItem;
        others are classified here, and unsupported extensions are left out.
        """
        items: List[MediaItem] = []
        for p in paths:
            item = self.queue.lookup(p)
            if item is None:
                try:
                    item = MediaItem.from_path(p)
                except UnsupportedExtension as e:
                    logger.info("skipping %s", e)
                    continue
            items.append(item)
        return self.probe_all(items)

    def probe_all(self, items: Iterable[MediaItem]) -> List[Future]:
        """Start one job per item and return their futures (each resolves to a ProbeResult)."""
        if self.pool.closed:
            raise RuntimeError("probe coordinator is shut down")
        futures: List[Future] = []
        for item in items:
            with self._lock:
                running = self._futures.get(item.item_id)
                current = self._jobs.get(item.item_id)
                # a cancelled job (item removed, then re-added) is replaced, never reused
                if running is not None and not running.done() and current is not None and not current.cancelled:
                    logger.debug("probe already in flight for %s", item.item_id)
                    futures.append(running)
                    continue

                job = MediaProbe(item, runner_factory=self.runner_factory, planner=self.planner)
                self._jobs[item.item_id] = job
                if self.watcher is not None:
                    self.watcher.watch(item.path, partial(self._on_deleted, item.item_id))
                fut = self.pool.submit(job.run, on_done=partial(self._deliver, job))
                # a very fast job may already have been delivered (and forgotten) inside submit()
                if self._jobs.get(item.item_id) is job:
                    self._futures[item.item_id] = fut
            futures.append(fut)
        logger.debug("probe batch started: %d job(s)", len(futures))
        return futures

    def cancel(self, item_id: str) -> None:
        """Kill the item's probe if one is running. Unknown or finished ids are a no-op."""
        with self._lock:
            job = self._jobs.get(str(item_id))
        if job is not None:
            job.cancel()

    def forget(self, item_id: str) -> None:
        """The item left the queue: cancel its probe and stop watching its file."""
        self.cancel(item_id)
        if self.watcher is not None:
            self.watcher.unwatch(item_id)

    def active_jobs(self) -> List[str]:
        with self._lock:
            return sorted(self._jobs)

    def job(self, item_id: str) -> Optional[MediaProbe]:
        with self._lock:
            return self._jobs.get(str(item_id))

    def shutdown(self, wait: bool = True) -> None:
        if self.cfg.concurrency.cancel_on_exit:
            with self._lock:
                jobs = list(self._jobs.values())
            for job in jobs:
                job.cancel()
        self.pool.shutdown(wait=wait)

    def __enter__(self) -> "BatchProbeCoordinator":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown(wait=True)

    # ---- internals ----------------------------------------------------------
    def _deliver(self, job: MediaProbe, fut: Future) -> None:
        item_id = job.item.item_id
        with self._lock:
            if self._jobs.get(item_id) is job:
                del self._jobs[item_id]
                self._futures.pop(item_id, None)

        if fut.cancelled():
            logger.info("probe for %s never started (pool shut down)", item_id)
            return
        if job.cancelled:
            logger.info("probe for %s was cancelled; dropping its result", item_id)
            return
        if job.error is not None:
            logger.warning("probe %s degraded: %s", item_id, job.error)

        if not self.queue.is_still_queued(item_id):
            logger.info("%s left the queue; dropping its probe result", item_id)
            return
        self.queue.notify_item_probed(item_id, job.result)
        logger.info("probed %s: %s", item_id, job.result.summary())

    def _on_deleted(self, item_id: str) -> None:
        logger.info("%s was deleted; removing from queue", item_id)
        self.cancel(item_id)
        if self.queue.is_still_queued(item_id):
            self.queue.remove(item_id)
