from datetime import datetime, timezone

from fastapi import APIRouter

from goalquest.core.config import settings

router = APIRouter(tags=["health"])


@router.get("/healthz")
def healthz():
    """Lightweight liveness check (no deps)."""
    return {
        "status": "ok",
        "env": settings.ENV,
        "streakTimezone": settings.STREAK_TIMEZONE,
        "computed_at": datetime.now(timezone.utc).isoformat(),
    }
