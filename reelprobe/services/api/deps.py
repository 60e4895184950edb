# reelprobe/services/api/deps.py
from __future__ import annotations
from http import HTTPStatus

from fastapi import HTTPException, Request

from reelprobe.services.probe.batch import BatchProbeCoordinator
from reelprobe.services.queue.media_queue import InMemoryMediaQueue


def get_media_queue(request: Request) -> InMemoryMediaQueue:
    return request.app.state.queue


def get_coordinator(request: Request) -> BatchProbeCoordinator:
    """
    The probe coordinator built at startup. Missing when the transcoder could
    not be found; every endpoint that would start or stop a probe answers 503.
    """
    coord = getattr(request.app.state, "coordinator", None)
    if coord is None:
        err = getattr(request.app.state, "transcoder_error", None)
        raise HTTPException(
            status_code=HTTPStatus.SERVICE_UNAVAILABLE,
            detail=str(err) if err else "transcoder unavailable",
        )
    return coord
