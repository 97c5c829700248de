"""Service health endpoint."""

from fastapi import APIRouter

from plotplanner.core.config import settings

health_router = APIRouter(tags=["system"])


@health_router.get("/health", summary="Planner API heartbeat")
async def healthcheck() -> dict[str, str]:
    """Report liveness plus which AI backend the planner answers with."""

    return {
        "status": "ok",
        "service": settings.app_name,
        "version": settings.app_version,
        "ai_backend": "mock" if settings.ai_use_mock else "openrouter",
    }
