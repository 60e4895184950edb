# reelprobe/services/api/routers/queue.py
from __future__ import annotations

import os
from http import HTTPStatus
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from reelprobe.common.settings import get_settings
from reelprobe.domain.entities.media_item import MediaItem
from reelprobe.services.api.deps import get_coordinator, get_media_queue
from reelprobe.services.mappers.media_item import to_add_response, to_read_schema
from reelprobe.services.probe.batch import BatchProbeCoordinator
from reelprobe.services.queue.media_queue import InMemoryMediaQueue
from reelprobe.services.schemas.queue import MediaItemRead, QueueAddRequest, QueueAddResponse, SelectionPatch

cfg = get_settings()
router = APIRouter(prefix=f"{cfg.api.prefix}/queue", tags=["queue"])


# ---- helpers ----

def _item_key(item_id: str) -> str:
    # "/api/queue/tmp/a.mp4" and "/api/queue//tmp/a.mp4" both name /tmp/a.mp4
    if not os.path.isabs(item_id):
        item_id = os.sep + item_id
    return os.path.abspath(item_id)


def _item_or_404(queue: InMemoryMediaQueue, item_id: str) -> MediaItem:
    item = queue.get(_item_key(item_id))
    if item is None:
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail="Item not in queue")
    return item


# ---- queue ----

@router.get("", response_model=List[MediaItemRead])
def list_queue(queue: InMemoryMediaQueue = Depends(get_media_queue)) -> List[MediaItemRead]:
    return [to_read_schema(it) for it in queue.items()]


@router.post("", response_model=QueueAddResponse, status_code=HTTPStatus.CREATED)
def add_to_queue(
    payload: QueueAddRequest,
    queue: InMemoryMediaQueue = Depends(get_media_queue),
    coord: BatchProbeCoordinator = Depends(get_coordinator),
) -> QueueAddResponse:
    rep = queue.add(payload.paths, index=payload.index)
    # probes run in the background; results show up on later reads
    coord.probe_all(rep.added)
    return to_add_response(rep)


@router.delete("", response_model=List[MediaItemRead])
def clear_queue(
    selected_only: bool = Query(False, description="Only remove items marked as selected"),
    queue: InMemoryMediaQueue = Depends(get_media_queue),
    coord: BatchProbeCoordinator = Depends(get_coordinator),
) -> List[MediaItemRead]:
    removed = queue.remove_selected() if selected_only else queue.clear()
    return [to_read_schema(it) for it in removed]


# ---- single item ----

@router.get("/{item_id:path}", response_model=MediaItemRead)
def get_item(
    item_id: str,
    queue: InMemoryMediaQueue = Depends(get_media_queue),
) -> MediaItemRead:
    return to_read_schema(_item_or_404(queue, item_id))


@router.patch("/{item_id:path}", response_model=MediaItemRead)
def select_item(
    item_id: str,
    payload: SelectionPatch,
    queue: InMemoryMediaQueue = Depends(get_media_queue),
) -> MediaItemRead:
    item = _item_or_404(queue, item_id)
    queue.set_selected(item.item_id, payload.selected)
    return to_read_schema(item)


@router.delete("/{item_id:path}", status_code=HTTPStatus.NO_CONTENT)
def remove_item(
    item_id: str,
    queue: InMemoryMediaQueue = Depends(get_media_queue),
    coord: BatchProbeCoordinator = Depends(get_coordinator),
) -> None:
    item = _item_or_404(queue, item_id)
    # the queue's removal listener cancels the probe and stops the watch
    queue.remove(item.item_id)
    return None
