# reelprobe/services/process/runner.py
from __future__ import annotations

import queue
import subprocess
import threading
from pathlib import Path
from typing import IO, Optional, Sequence

from reelprobe.common.logging import get_logger
from reelprobe.common.probe.ffmpeg_helpers import display_cmd
from reelprobe.domain.entities.outcome import ExitOutcome
from reelprobe.domain.errors import LaunchFailed
from reelprobe.domain.ports.probe import LineHandler, ProcessRunnerPort

logger = get_logger(__name__)

_EOF = object()


class ProcessRunner(ProcessRunnerPort):
    """
    Owns exactly one transcoder process.

    run() spawns it with stdout and stderr piped, hands every line from either
    channel to `on_line` in arrival order while the process is still running,
    and returns once it has exited. The process is reaped and its pipes closed
    on every path out of run(), including kill() and exceptions raised by the
    line handler.

    kill() may be called from any thread, any number of times: before run()
    it makes run() kill the process right after spawning it; after exit it
    does nothing.
    """

    def __init__(self, executable: str | Path, *, timeout_sec: Optional[float] = None) -> None:
        self.executable = str(executable)
        self.timeout_sec = timeout_sec
        self._lock = threading.Lock()
        self._proc: Optional[subprocess.Popen] = None
        self._started = False
        self._kill_requested = False
        self._killed = False
        self._timed_out = False

    # ---- Port API -------------------------------------------------------------
    def run(self, args: Sequence[str], on_line: Optional[LineHandler] = None) -> ExitOutcome:
        with self._lock:
            if self._started:
                raise RuntimeError("ProcessRunner.run() can only be called once per instance")
            self._started = True
            if self._kill_requested:
                logger.debug("skip launch, runner already killed: %s", self.executable)
                return ExitOutcome(returncode=None, killed=True)

        cmd = [self.executable, *map(str, args)]
        logger.debug("transcoder cmd: %s", display_cmd(self.executable, list(args)))
        try:
            proc = subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
            )
        except OSError as e:
            raise LaunchFailed(
                f"failed to launch transcoder: {e.strerror or e}",
                executable=self.executable,
            ) from e

        with self._lock:
            self._proc = proc
            kill_now = self._kill_requested
        if kill_now:
            self._killed = True
            _terminate(proc)

        timer: Optional[threading.Timer] = None
        if self.timeout_sec:
            timer = threading.Timer(self.timeout_sec, self._on_timeout)
            timer.daemon = True
            timer.start()

        lines: "queue.Queue[object]" = queue.Queue()
        readers = [
            threading.Thread(target=_pump, args=(stream, lines), name=f"runner-{name}-{proc.pid}", daemon=True)
            for name, stream in (("out", proc.stdout), ("err", proc.stderr))
        ]
        for t in readers:
            t.start()

        delivered = 0
        try:
            open_channels = len(readers)
            while open_channels:
                item = lines.get()
                if item is _EOF:
                    open_channels -= 1
                    continue
                delivered += 1
                if on_line is not None:
                    on_line(item)  # type: ignore[arg-type]
            returncode = proc.wait()
        finally:
            if timer is not None:
                timer.cancel()
            if proc.poll() is None:
                # only reachable when the handler raised
                _terminate(proc)
            proc.wait()
            for t in readers:
                t.join(timeout=1.0)
            for stream in (proc.stdout, proc.stderr):
                if stream is not None:
                    stream.close()
            with self._lock:
                self._proc = None

        outcome = ExitOutcome(
            returncode=returncode,
            killed=self._killed,
            timed_out=self._timed_out,
            lines=delivered,
        )
        logger.debug("transcoder exited rc=%s killed=%s lines=%d", returncode, outcome.killed, delivered)
        return outcome

    def kill(self) -> None:
        self._kill()

    # ---- internals ------------------------------------------------------------
    def _kill(self, timed_out: bool = False) -> bool:
        # flags are set before terminating so a concurrent run() never reports a half-done kill
        with self._lock:
            self._kill_requested = True
            proc = self._proc
            if proc is None or proc.poll() is not None:
                return False
            self._killed = True
            if timed_out:
                self._timed_out = True
        _terminate(proc)
        return True

    def _on_timeout(self) -> None:
        # a timer that fires after the process exited on its own is a no-op
        if self._kill(timed_out=True):
            logger.warning("transcoder exceeded %.1fs, killed: %s", self.timeout_sec, self.executable)


def _terminate(proc: subprocess.Popen) -> None:
    try:
        proc.kill()
    except ProcessLookupError:
        pass  # exited between poll() and kill()


def _pump(stream: Optional[IO[str]], sink: "queue.Queue[object]") -> None:
    """Reader thread: forward one channel line by line, then signal EOF."""
    try:
        if stream is None:
            return
        for raw in stream:
            sink.put(raw.rstrip("\r\n"))
    except (OSError, ValueError) as e:
        logger.debug("output channel closed early: %s", e)
    finally:
        sink.put(_EOF)
