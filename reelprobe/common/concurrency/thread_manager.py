from __future__ import annotations

import logging
import time
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

log = logging.getLogger(__name__)


@dataclass
class ThreadStats:
    start_ts: float
    tasks_submitted: int = 0
    tasks_completed: int = 0
    tasks_failed: int = 0

    @property
    def uptime_sec(self) -> float:
        return time.time() - self.start_ts

    @property
    def in_flight(self) -> int:
        return max(0, self.tasks_submitted - (self.tasks_completed + self.tasks_failed))


class ThreadManager:
    """
    A named thread pool for I/O-bound jobs that spend their life waiting on a
    child process (probe passes, frame extraction).

    Features
    --------
    - submit(fn, *args, on_done=cb, **kwargs) -> Future
      `on_done(future)` fires as soon as *that* task finishes, independent of
      any other task: results are delivered as they complete, never batched.
    - Stats snapshot (submitted / completed / failed / in flight)
    - wait_all() for callers that do want a barrier (tests, shutdown)
    - Clean, idempotent shutdown and context manager support

    Notes
    -----
    - Tasks beyond max_workers queue inside the executor; submit() never blocks.
    """

    def __init__(
        self,
        name: str = "probe",
        max_workers: Optional[int] = None,
        log_exceptions: bool = True,
    ) -> None:
        """
        Parameters
        ----------
        name:
            Logical name for logging and thread names.
        max_workers:
            Max threads in the pool. Default: auto for I/O (~min(16, max(4, 2*CPUs))).
        log_exceptions:
            If True, exceptions escaping a task (or its on_done callback) are logged.
        """
        if max_workers is None:
            import os
            n = os.cpu_count() or 4
            max_workers = max(4, min(16, n * 2))

        self._name = name
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=name)
        self._stats = ThreadStats(start_ts=time.time())
        self._log_exceptions = log_exceptions
        self._closed = False
        self._lock = threading.Lock()

    # -------------------------
    # Lifecycle
    # -------------------------
    def shutdown(self, wait: bool = True, cancel_futures: bool = False) -> None:
        """Shut down the executor. Safe to call multiple times."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._executor.shutdown(wait=wait, cancel_futures=cancel_futures)

    def __enter__(self) -> "ThreadManager":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown(wait=True, cancel_futures=True)

    @property
    def closed(self) -> bool:
        return self._closed

    def stats(self) -> ThreadStats:
        """Return a *snapshot* of current stats."""
        with self._lock:
            return ThreadStats(
                start_ts=self._stats.start_ts,
                tasks_submitted=self._stats.tasks_submitted,
                tasks_completed=self._stats.tasks_completed,
                tasks_failed=self._stats.tasks_failed,
            )

    # -------------------------
    # Submission
    # -------------------------
    def submit(
        self,
        fn: Callable[..., Any],
        /,
        *args,
        on_done: Optional[Callable[[Future], None]] = None,
        **kwargs,
    ) -> Future:
        """
        Submit a single callable. Returns a Future holding its result or exception.
        `on_done` runs on the worker thread right after the task finishes.
        """
        if self._closed:
            raise RuntimeError(f"{self._name}: submit() after shutdown")

        with self._lock:
            self._stats.tasks_submitted += 1

        fut: Future = self._executor.submit(fn, *args, **kwargs)

        def _cb(f: Future) -> None:
            failed = f.cancelled() or f.exception() is not None
            with self._lock:
                if failed:
                    self._stats.tasks_failed += 1
                else:
                    self._stats.tasks_completed += 1
            if failed and not f.cancelled() and self._log_exceptions:
                log.error("%s task failed", self._name, exc_info=f.exception())
            if on_done is not None:
                try:
                    on_done(f)
                except Exception:
                    if not self._log_exceptions:
                        raise
                    log.exception("%s on_done callback failed", self._name)

        fut.add_done_callback(_cb)
        return fut

    # -------------------------
    # Bulk helpers
    # -------------------------
    @staticmethod
    def wait_all(futures: Iterable[Future], timeout: Optional[float] = None) -> bool:
        """Block until every future is done. Returns False on timeout."""
        _, not_done = wait(list(futures), timeout=timeout)
        return not not_done
