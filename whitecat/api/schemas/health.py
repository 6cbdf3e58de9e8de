from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class HealthResponse(BaseModel):
    success: bool = True
    status: str
    service: str
    timestamp: datetime
