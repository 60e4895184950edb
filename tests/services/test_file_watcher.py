from __future__ import annotations

import threading

from reelprobe.services.filesystem.watcher import PollingFileWatcher


def test_poll_once_reports_deleted_files_once(tmp_path):
    f = tmp_path / "a.mp4"
    f.write_bytes(b"x")
    calls = []
    w = PollingFileWatcher(interval=60)
    w.watch(f, lambda: calls.append("a"))

    assert w.poll_once() == 0
    f.unlink()
    assert w.poll_once() == 1
    assert w.poll_once() == 0
    assert calls == ["a"]
    assert w.watching() == []
    w.stop(timeout=1)


def test_unwatch_and_failing_callback(tmp_path):
    kept, dropped = tmp_path / "kept.mp4", tmp_path / "dropped.mp4"
    w = PollingFileWatcher(interval=60)

    def _boom():
        raise RuntimeError("callback failed")

    w.watch(kept, _boom)
    w.watch(dropped, lambda: None)
    w.unwatch(dropped)
    assert w.watching() == [str(kept)]
    assert w.poll_once() == 1  # the exception is logged, not raised
    w.stop(timeout=1)


def test_background_thread_notices_deletion(tmp_path):
    f = tmp_path / "a.mp4"
    f.write_bytes(b"x")
    fired = threading.Event()
    w = PollingFileWatcher(interval=0.05)
    w.watch(f, fired.set)
    f.unlink()
    assert fired.wait(5)
    w.stop(timeout=1)
