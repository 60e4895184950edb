# reelprobe/domain/errors.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(eq=False)
class ReelProbeError(RuntimeError):
    """Base for probe failures. Carries a message plus the file it concerns."""
    message: str
    path: Optional[str] = None

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.path:
            return f"{self.message} ({self.path})"
        return self.message


@dataclass(eq=False)
class LaunchFailed(ReelProbeError):
    """The transcoder executable is missing or cannot be executed."""
    executable: Optional[str] = None


@dataclass(eq=False)
class ProcessExitedNonZero(ReelProbeError):
    """A transcoder invocation ended with a non-zero code. Logged, never fatal to a job."""
    returncode: Optional[int] = None


@dataclass(eq=False)
class Cancelled(ReelProbeError):
    """A probe job was stopped cooperatively (file deleted or removed from the queue)."""


@dataclass(eq=False)
class UnsupportedExtension(ReelProbeError):
    """The file extension maps to no MediaKind; the path is rejected before any job starts."""
    extension: str = ""
