# reelprobe/services/mappers/media_item.py
from __future__ import annotations

from typing import Optional

from reelprobe.domain.entities.media_item import MediaItem
from reelprobe.domain.entities.probe import ProbeResult
from reelprobe.services.queue.media_queue import AddReport
from reelprobe.services.schemas.queue import MediaItemRead, ProbeResultRead, QueueAddResponse


def to_result_schema(r: Optional[ProbeResult]) -> Optional[ProbeResultRead]:
    if r is None:
        return None
    return ProbeResultRead(
        file_size=r.file_size,
        duration=r.duration,
        resolution=r.resolution,
        bitrate=r.bitrate,
        fps=r.fps,
        sample_rate=r.sample_rate,
        thumbnail_path=str(r.thumbnail_path) if r.thumbnail_path else None,
        video_count=r.video_count,
        audio_count=r.audio_count,
        subtitle_count=r.subtitle_count,
        attachment_count=r.attachment_count,
        chapter_count=r.chapter_count,
        summary=r.summary(),
    )


def to_read_schema(item: MediaItem) -> MediaItemRead:
    return MediaItemRead(
        id=item.item_id,
        path=str(item.path),
        kind=item.kind,
        display_name=item.display_name,
        selected=item.selected,
        available_actions=list(item.available_actions),
        probed=item.probed,
        result=to_result_schema(item.result),
    )


def to_add_response(rep: AddReport) -> QueueAddResponse:
    return QueueAddResponse(
        added=[to_read_schema(it) for it in rep.added],
        rejected=list(rep.rejected),
        duplicates=list(rep.duplicates),
    )
