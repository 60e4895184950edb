from datetime import timedelta
from pathlib import Path

import pytest

from reelprobe.domain.entities.probe import ProbeResult, format_size, parse_duration, parse_resolution


def test_probe_result_defaults_are_unobserved():
    pr = ProbeResult()
    assert pr.duration is None
    assert pr.video_count is None
    assert pr.summary() == ""


def test_lock_keeps_first_value():
    pr = ProbeResult()
    assert pr.lock("duration", "00:00:10.00")
    assert not pr.lock("duration", "00:00:20.00")
    assert not pr.lock("resolution", None)
    assert pr.duration == "00:00:10.00"
    assert pr.resolution is None


def test_observe_streams_and_bump():
    pr = ProbeResult()
    pr.observe_streams()
    assert pr.audio_count == 0
    pr.bump("audio_count")
    pr.bump("audio_count")
    pr.observe_streams()  # does not reset
    assert pr.audio_count == 2
    with pytest.raises(KeyError):
        pr.bump("duration")


def test_derived_views():
    pr = ProbeResult(duration="00:01:23.45", resolution="1920x1080")
    assert pr.duration_td == timedelta(minutes=1, seconds=23.45)
    assert pr.dimensions == (1920, 1080)
    assert parse_duration("N/A") is None
    assert parse_resolution("widexhigh") is None


def test_facts_exclude_thumbnail_and_as_dict_stringifies(tmp_path):
    pr = ProbeResult(duration="00:00:01.00", thumbnail_path=tmp_path / "t.png")
    assert "thumbnail_path" not in pr.facts()
    assert pr.as_dict()["thumbnail_path"] == str(tmp_path / "t.png")


def test_format_size():
    assert format_size(512) == "0.5 KB"
    assert format_size(1024 * 1024 * 12.5) == "12.5 MB"
    assert format_size(3 * 1024 ** 3) == "3 GB"


def test_summary_lists_facts_and_stream_breakdown():
    pr = ProbeResult(
        file_size=1024 * 1024 * 12,
        duration="00:01:23.45",
        resolution="1920x1080",
        bitrate="5000 kb/s",
        fps="30 fps",
        video_count=1,
        audio_count=2,
        subtitle_count=0,
        attachment_count=0,
        chapter_count=0,
    )
    assert pr.summary() == "1920x1080 • 00:01:23.45 • 5000 kb/s • 30 fps • 12 MB • 1 video • 2 audios"


def test_summary_skips_breakdown_for_single_stream():
    pr = ProbeResult(sample_rate="44100 Hz", audio_count=1, video_count=0, chapter_count=0)
    assert pr.summary() == "44100 Hz"
