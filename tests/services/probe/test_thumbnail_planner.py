from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import pytest
from PIL import Image

from reelprobe.domain.entities.thumbnail import ThumbnailPlan
from reelprobe.domain.enums import MediaKind
from reelprobe.domain.errors import LaunchFailed
from reelprobe.services.process.runner import ProcessRunner
from reelprobe.services.thumbs import thumbs_dir
from reelprobe.services.thumbs.thumbnail_planner import ThumbnailPlanner, scale_expression, seek_offset


@pytest.mark.parametrize(
    "seconds,expected",
    [(10, 5), (5.5, 5), (5, 2), (3, 2), (2, 0), (1, 0), (0, 0)],
)
def test_seek_offset_for_video(seconds, expected):
    assert seek_offset(MediaKind.video, timedelta(seconds=seconds)) == timedelta(seconds=expected)


def test_seek_offset_is_never_computed_for_images_or_unknown_duration():
    assert seek_offset(MediaKind.image, timedelta(seconds=10)) is None
    assert seek_offset(MediaKind.video, None) is None


def test_scale_expression_orientation():
    assert scale_expression("1920x1080") == "scale=w=196:h=-1"
    assert scale_expression("1080x1920") == "scale=w=-1:h=110"
    assert scale_expression("500x500") == "scale=w=196:h=-1"
    assert scale_expression("640x480", max_width=320) == "scale=w=320:h=-1"
    with pytest.raises(ValueError):
        scale_expression("N/A")


def test_plan_requires_resolution():
    planner = ThumbnailPlanner()
    assert planner.plan(MediaKind.video, timedelta(seconds=30), None) is None
    assert planner.plan(MediaKind.video, timedelta(seconds=30), "garbage") is None

    plan = planner.plan(MediaKind.video, timedelta(seconds=30), "1920x1080")
    assert plan == ThumbnailPlan(seek=timedelta(seconds=5), scale="scale=w=196:h=-1")

    still = planner.plan(MediaKind.image, None, "1080x1920")
    assert still == ThumbnailPlan(seek=None, scale="scale=w=-1:h=110")


def test_planner_uses_shared_thumbnails_dir(tmp_path):
    planner = ThumbnailPlanner()
    assert planner.out_dir == thumbs_dir.get_thumbnails_dir()
    assert planner.out_dir == (tmp_path / "thumbs").resolve()


def test_extract_writes_a_verified_png(fake_ffmpeg, media_file):
    exe = fake_ffmpeg()
    src = media_file("clip.mp4")
    planner = ThumbnailPlanner()
    plan = ThumbnailPlan(seek=timedelta(seconds=5), scale="scale=w=196:h=-1")

    out = planner.extract(src, plan, ProcessRunner(exe))

    assert out is not None
    assert out.parent == planner.out_dir
    assert out.suffix == ".png"
    assert len(out.stem) == 12
    with Image.open(out) as im:
        assert im.size == (196, 110)


def test_extract_failure_returns_none_and_leaves_no_file(fake_ffmpeg, media_file, monkeypatch):
    exe = fake_ffmpeg()
    monkeypatch.setenv("FAKE_FFMPEG_FRAME", "fail")
    planner = ThumbnailPlanner()
    out = planner.extract(media_file("clip.mp4"), ThumbnailPlan(seek=None, scale="scale=w=196:h=-1"), ProcessRunner(exe))
    assert out is None
    assert list(planner.out_dir.iterdir()) == []


def test_extract_rejects_unreadable_output(media_file):
    class _GarbageRunner:
        def run(self, args, on_line=None):
            from reelprobe.domain.entities.outcome import ExitOutcome
            Path(args[-1]).write_bytes(b"not an image")
            return ExitOutcome(returncode=0)

        def kill(self):
            pass

    planner = ThumbnailPlanner()
    out = planner.extract(media_file("a.png"), ThumbnailPlan(seek=None, scale="scale=w=196:h=-1"), _GarbageRunner())
    assert out is None
    assert list(planner.out_dir.iterdir()) == []


def test_extract_propagates_launch_failed(media_file, tmp_path):
    planner = ThumbnailPlanner()
    with pytest.raises(LaunchFailed):
        planner.extract(
            media_file("clip.mp4"),
            ThumbnailPlan(seek=None, scale="scale=w=196:h=-1"),
            ProcessRunner(tmp_path / "missing-ffmpeg"),
        )


def test_purge_removes_only_thumbnails_this_process_wrote(fake_ffmpeg, media_file):
    exe = fake_ffmpeg()
    planner = ThumbnailPlanner()
    d = thumbs_dir.get_thumbnails_dir()
    # a configured dir may hold the user's own pictures
    (d / "holiday.jpg").write_bytes(b"not ours")
    (d / "poster.png").write_bytes(b"not ours either")
    (d / "keep.txt").write_text("x")

    out = planner.extract(
        media_file("clip.mp4"),
        ThumbnailPlan(seek=None, scale="scale=w=196:h=-1"),
        ProcessRunner(exe),
    )
    assert out is not None and out.exists()

    thumbs_dir.purge_thumbnails_dir()
    assert not out.exists()
    assert (d / "holiday.jpg").read_bytes() == b"not ours"
    assert (d / "poster.png").exists()
    assert (d / "keep.txt").exists()


def test_failed_extraction_is_not_registered(fake_ffmpeg, media_file, monkeypatch):
    exe = fake_ffmpeg()
    monkeypatch.setenv("FAKE_FFMPEG_FRAME", "fail")
    d = thumbs_dir.get_thumbnails_dir()
    out = ThumbnailPlanner().extract(
        media_file("clip.mp4"),
        ThumbnailPlan(seek=None, scale="scale=w=196:h=-1"),
        ProcessRunner(exe),
    )
    assert out is None
    (d / "later.png").write_bytes(b"x")
    thumbs_dir.purge_thumbnails_dir()
    assert (d / "later.png").exists()


def test_private_temp_dir_is_removed_on_purge(monkeypatch):
    monkeypatch.delenv("THUMBNAILS_DIR", raising=False)
    from reelprobe.common.settings import get_settings
    get_settings.cache_clear()

    d = thumbs_dir.get_thumbnails_dir()
    assert d.name.startswith("reelprobe-thumbs-")
    assert thumbs_dir.get_thumbnails_dir() == d  # created once
    thumbs_dir.purge_thumbnails_dir()
    assert not d.exists()
