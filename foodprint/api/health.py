"""Health check endpoints."""

import time
from datetime import datetime, timezone

from fastapi import APIRouter

from foodprint.config import settings
from foodprint.services.carbon_data import CARBON_FOOTPRINT_PER_KG

router = APIRouter(prefix="/api/health", tags=["health"])

_started_at = time.monotonic()


def _basic_status() -> dict:
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.version,
        "service": settings.service_name,
    }


@router.get("")
async def health_check():
    return _basic_status()


@router.get("/detailed")
async def detailed_health_check():
    """Health status with dependency configuration and uptime."""
    return {
        **_basic_status(),
        "dependencies": {
            "anthropic": "configured" if settings.anthropic_api_key else "missing_api_key",
            "carbonDatabase": {
                "status": "available",
                "entries": len(CARBON_FOOTPRINT_PER_KG),
            },
        },
        "uptimeSeconds": int(time.monotonic() - _started_at),
        "environment": settings.environment,
    }
