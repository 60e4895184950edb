# reelprobe/services/queue/media_queue.py
from __future__ import annotations

import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from reelprobe.common.logging import get_logger
from reelprobe.domain.entities.media_item import MediaItem
from reelprobe.domain.entities.probe import ProbeResult
from reelprobe.domain.errors import UnsupportedExtension
from reelprobe.domain.ports.queue import MediaQueuePort

logger = get_logger(__name__)

ProbedListener = Callable[[MediaItem], None]
RemovedListener = Callable[[MediaItem], None]


@dataclass
class AddReport:
    added: List[MediaItem] = field(default_factory=list)
    rejected: List[str] = field(default_factory=list)  # unsupported extension
    duplicates: List[str] = field(default_factory=list)  # already queued


def _key(path: Path | str) -> str:
    return os.path.abspath(str(path))


class InMemoryMediaQueue(MediaQueuePort):
    """
    The ordered list of media files the user is working on.

    Thread-safe: probe results arrive on pool threads and deletions on the
    watcher thread while the API thread reads and edits the list. Listeners
    are called outside the lock.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._items: List[MediaItem] = []
        self._probed_listeners: List[ProbedListener] = []
        self._removed_listeners: List[RemovedListener] = []

    # ---- listeners ----
    def on_probed(self, fn: ProbedListener) -> None:
        self._probed_listeners.append(fn)

    def on_removed(self, fn: RemovedListener) -> None:
        self._removed_listeners.append(fn)

    # ---- reads ----
    def items(self) -> List[MediaItem]:
        with self._lock:
            return list(self._items)

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def lookup(self, path: Path | str) -> Optional[MediaItem]:
        return self.get(_key(path))

    def get(self, item_id: str) -> Optional[MediaItem]:
        item_id = _key(item_id)
        with self._lock:
            for it in self._items:
                if it.item_id == item_id:
                    return it
        return None

    def is_still_queued(self, item_id: str) -> bool:
        return self.get(item_id) is not None

    # ---- writes ----
    def add(self, paths: Iterable[Path | str], index: Optional[int] = None) -> AddReport:
        """
        Append (or insert at `index`) one item per supported, not yet queued
        path. Order of `paths` is kept.
        """
        report = AddReport()
        fresh: List[MediaItem] = []
        for p in paths:
            try:
                fresh.append(MediaItem.from_path(p))
            except UnsupportedExtension as e:
                logger.info("rejected %s", e)
                report.rejected.append(str(p))

        with self._lock:
            known = {it.item_id for it in self._items}
            at = len(self._items) if index is None else max(0, min(int(index), len(self._items)))
            for item in fresh:
                if item.item_id in known:
                    report.duplicates.append(item.item_id)
                    continue
                known.add(item.item_id)
                self._items.insert(at, item)
                at += 1
                report.added.append(item)

        logger.debug(
            "queue add: %d added, %d rejected, %d duplicate",
            len(report.added), len(report.rejected), len(report.duplicates),
        )
        return report

    def notify_item_probed(self, item_id: str, result: ProbeResult) -> None:
        item = self.get(item_id)
        if item is None:
            logger.debug("probe result for %s arrived after removal", item_id)
            return
        with self._lock:
            item.result = result
        for fn in list(self._probed_listeners):
            fn(item)

    def set_selected(self, item_id: str, selected: bool = True) -> Optional[MediaItem]:
        item = self.get(item_id)
        if item is not None:
            with self._lock:
                item.selected = bool(selected)
        return item

    def remove(self, item_id: str) -> Optional[MediaItem]:
        item_id = _key(item_id)
        with self._lock:
            for i, it in enumerate(self._items):
                if it.item_id == item_id:
                    removed = self._items.pop(i)
                    break
            else:
                return None
        self._fire_removed([removed])
        return removed

    def remove_selected(self) -> List[MediaItem]:
        with self._lock:
            removed = [it for it in self._items if it.selected]
            self._items = [it for it in self._items if not it.selected]
        self._fire_removed(removed)
        return removed

    def clear(self) -> List[MediaItem]:
        with self._lock:
            removed, self._items = self._items, []
        self._fire_removed(removed)
        return removed

    def _fire_removed(self, items: List[MediaItem]) -> None:
        for item in items:
            logger.debug("queue remove %s", item.item_id)
            for fn in list(self._removed_listeners):
                fn(item)
