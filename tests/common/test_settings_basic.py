from pathlib import Path
from reelprobe.common.settings import get_settings


def test_settings_defaults(monkeypatch):
    monkeypatch.delenv("THUMBNAILS_DIR", raising=False)
    monkeypatch.delenv("FFMPEG_BIN", raising=False)
    get_settings.cache_clear()

    cfg = get_settings()
    assert cfg.ffmpeg_bin == "ffmpeg"
    assert cfg.thumbnails_dir is None
    assert cfg.transcoder_timeout_sec is None
    assert cfg.thumbs.max_width == 196
    assert cfg.thumbs.max_height == 110
    assert cfg.concurrency.probe_workers >= 1
    assert cfg.api.prefix == "/api"
    assert "PATCH" in cfg.api.cors_allow_methods  # the queue router exposes PATCH


def test_settings_from_env(tmp_path, monkeypatch):
    monkeypatch.setenv("FFMPEG_BIN", "/opt/ffmpeg/bin/ffmpeg")
    monkeypatch.setenv("THUMBNAILS_DIR", str(tmp_path))
    monkeypatch.setenv("CONCURRENCY__PROBE_WORKERS", "3")
    monkeypatch.setenv("THUMBS__MAX_WIDTH", "320")
    get_settings.cache_clear()

    cfg = get_settings()
    assert cfg.ffmpeg_bin == "/opt/ffmpeg/bin/ffmpeg"
    assert cfg.thumbnails_dir == Path(tmp_path)
    assert cfg.concurrency.probe_workers == 3
    assert cfg.thumbs.max_width == 320


def test_settings_cached():
    assert get_settings() is get_settings()
