from __future__ import annotations

from contextlib import asynccontextmanager
from http import HTTPStatus
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from reelprobe.common.logging import get_logger
from reelprobe.common.settings import get_settings
from reelprobe.domain.entities.media_item import MediaItem
from reelprobe.domain.errors import LaunchFailed
from reelprobe.services.api.routers import health, queue as queue_router
from reelprobe.services.filesystem.watcher import PollingFileWatcher
from reelprobe.services.probe.batch import BatchProbeCoordinator
from reelprobe.services.queue.media_queue import InMemoryMediaQueue
from reelprobe.services.thumbs.thumbs_dir import purge_thumbnails_dir

cfg = get_settings()
dev = cfg.app_env.lower() == "development"
logger = get_logger(__name__)


def create_app(
    *,
    queue: Optional[InMemoryMediaQueue] = None,
    coordinator: Optional[BatchProbeCoordinator] = None,
) -> FastAPI:
    """
    Build the API around one media queue and one probe coordinator.
    Both can be passed in (tests); otherwise they are built from settings and
    a missing transcoder leaves the app up with probing disabled.
    """
    queue = queue if queue is not None else InMemoryMediaQueue()
    transcoder_error: Optional[LaunchFailed] = None
    owns_coordinator = coordinator is None
    if coordinator is None:
        try:
            coordinator = BatchProbeCoordinator(queue, watcher=PollingFileWatcher())
        except LaunchFailed as e:
            logger.error("probing disabled: %s", e)
            transcoder_error = e

    if coordinator is not None:
        coord = coordinator

        def _forget(item: MediaItem) -> None:
            coord.forget(item.item_id)

        queue.on_removed(_forget)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if coordinator is not None and owns_coordinator:
            coordinator.shutdown(wait=False)
            if isinstance(coordinator.watcher, PollingFileWatcher):
                coordinator.watcher.stop()
            purge_thumbnails_dir()

    app = FastAPI(
        title="Reelprobe API",
        version="0.1.0",
        docs_url=f"{cfg.api.prefix}/docs",
        openapi_url=f"{cfg.api.prefix}/openapi.json",
        lifespan=lifespan,
    )
    app.state.queue = queue
    app.state.coordinator = coordinator
    app.state.transcoder_error = transcoder_error

    allow_origins = ["*"] if dev else cfg.api.cors_allow_origins
    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_methods=cfg.api.cors_allow_methods,
        allow_headers=cfg.api.cors_allow_headers,
        allow_credentials=cfg.api.cors_allow_credentials,
    )

    @app.exception_handler(LaunchFailed)
    async def _launch_failed(request: Request, exc: LaunchFailed) -> JSONResponse:
        return JSONResponse(status_code=HTTPStatus.SERVICE_UNAVAILABLE, content={"detail": str(exc)})

    # Routers
    app.include_router(health.router)
    app.include_router(queue_router.router)
    return app

app = create_app()
