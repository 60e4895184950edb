from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import Callable, Dict, Optional

from reelprobe.common.logging import get_logger
from reelprobe.common.settings import get_settings
from reelprobe.domain.ports.watcher import FileWatcherPort

logger = get_logger(__name__)


class PollingFileWatcher(FileWatcherPort):
    """
    FileWatcherPort that checks watched paths every `interval` seconds on one
    daemon thread. A callback fires once, when its path stops existing, and
    the path is then dropped from the watch list.
    """

    def __init__(self, interval: Optional[float] = None) -> None:
        self.interval = float(interval or get_settings().concurrency.watch_interval_sec)
        self._lock = threading.Lock()
        self._watched: Dict[str, Callable[[], None]] = {}
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def watch(self, path: Path | str, on_deleted: Callable[[], None]) -> None:
        key = os.path.abspath(str(path))
        with self._lock:
            self._watched[key] = on_deleted
            if self._thread is None and not self._stop.is_set():
                self._thread = threading.Thread(target=self._loop, name="file-watcher", daemon=True)
                self._thread.start()

    def unwatch(self, path: Path | str) -> None:
        with self._lock:
            self._watched.pop(os.path.abspath(str(path)), None)

    def watching(self) -> list[str]:
        with self._lock:
            return sorted(self._watched)

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def poll_once(self) -> int:
        """Check every watched path now. Returns how many deletions were reported."""
        with self._lock:
            gone = [(p, cb) for p, cb in self._watched.items() if not os.path.exists(p)]
            for p, _ in gone:
                del self._watched[p]
        for p, cb in gone:
            logger.debug("watched file disappeared: %s", p)
            try:
                cb()
            except Exception:
                logger.exception("deletion callback for %s failed", p)
        return len(gone)

    def _loop(self) -> None:
        while not self._stop.wait(self.interval):
            self.poll_once()
