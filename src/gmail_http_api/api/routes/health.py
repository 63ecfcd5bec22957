"""Health check endpoint."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter

router = APIRouter(tags=["health"])

SERVICE_NAME = "gmail-http-api"


@router.get("/health")
async def health_check() -> dict[str, Any]:
    """Liveness probe; never requires the API key."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": SERVICE_NAME,
    }
