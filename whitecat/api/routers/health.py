from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter

from whitecat.api.schemas.health import HealthResponse


router = APIRouter()

SERVICE_NAME = "WhiteCat Hosting"


@router.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(
        status="ok",
        service=SERVICE_NAME,
        timestamp=datetime.now(timezone.utc),
    )
