from __future__ import annotations
from typing import Callable, Optional, Protocol, Sequence

from reelprobe.domain.entities.outcome import ExitOutcome

LineHandler = Callable[[str], None]


class ProcessRunnerPort(Protocol):
    """One transcoder invocation: stream lines while it runs, report how it ended."""
    def run(self, args: Sequence[str], on_line: Optional[LineHandler] = None) -> ExitOutcome: ...
    def kill(self) -> None: ...


RunnerFactory = Callable[[], ProcessRunnerPort]
