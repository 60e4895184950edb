# reelprobe/services/api/routers/health.py
from __future__ import annotations
from fastapi import APIRouter, Request
from reelprobe.common.settings import get_settings

router = APIRouter()

@router.get("/healthz")
def healthz(request: Request):
    s = get_settings()
    coord = getattr(request.app.state, "coordinator", None)
    err = getattr(request.app.state, "transcoder_error", None)
    return {
        "ok": coord is not None,
        "app": s.app_name,
        "env": s.app_env,
        "transcoder": getattr(coord, "transcoder", None),
        "transcoder_error": str(err) if err else None,
        "active_jobs": len(coord.active_jobs()) if coord is not None else 0,
    }
