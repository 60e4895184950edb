# reelprobe/domain/entities/outcome.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ExitOutcome:
    """How one transcoder invocation ended."""
    returncode: Optional[int]     # None if the process never got to report one
    killed: bool = False          # kill() was called while it was running
    timed_out: bool = False       # the wall-clock limit fired
    lines: int = 0                # lines delivered to the handler

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.killed
