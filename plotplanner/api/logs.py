"""Recent log entries kept by the in-process buffer."""

from __future__ import annotations

from fastapi import APIRouter, Query

from plotplanner.core.logging_config import get_log_buffer

router = APIRouter(prefix="/logs", tags=["logs"])


@router.get("")
def list_logs(limit: int = Query(100, ge=1, le=200)) -> dict[str, list[dict[str, str]]]:
    return {"logs": get_log_buffer(limit=limit)}


__all__ = ["router"]
