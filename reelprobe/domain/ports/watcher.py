from __future__ import annotations
from pathlib import Path
from typing import Callable, Protocol


class FileWatcherPort(Protocol):
    """'Tell me when this path disappears.' Callbacks run on the watcher's thread."""
    def watch(self, path: Path | str, on_deleted: Callable[[], None]) -> None: ...
    def unwatch(self, path: Path | str) -> None: ...
