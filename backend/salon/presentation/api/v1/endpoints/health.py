"""Health check endpoint — no dependencies, always available."""

from fastapi import APIRouter, Request

from salon.config import get_settings

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(request: Request) -> dict:
    """Returns the application health status and the mirror's readiness."""
    settings = get_settings()
    mirror = getattr(request.app.state, "mirror", None)
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.app_env,
        "mirror": {
            "state": mirror.state.value if mirror else "uninitialized",
            "loading": mirror.is_loading if mirror else True,
            "failed_tables": mirror.failed_tables if mirror else [],
        },
    }
