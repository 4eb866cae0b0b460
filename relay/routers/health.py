from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request) -> dict:
    """Return service health status for monitoring and load balancers."""
    state = request.app.state
    return {
        "ok": True,
        "service": "relay",
        "version": state.settings.app_version,
        "mode": state.settings.mode.value,
        "pending_tasks": state.scheduler.pending,
    }


@router.get("/healthz")
async def healthz() -> dict:
    """Alternative health endpoint (kept for compatibility)."""
    return {"status": "ok"}
