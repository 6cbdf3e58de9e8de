from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class ServerConfigResponse(BaseModel):
    id: int
    name: str
    cpu_cores: int
    ram_gb: float
    storage_gb: int
    storage_type: str
    bandwidth_gb: int
    price_monthly: int
    max_websites: int
    features: list[str]
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ServerConfigListResponse(BaseModel):
    success: bool = True
    data: list[ServerConfigResponse]


class ServerConfigDetailResponse(BaseModel):
    success: bool = True
    data: ServerConfigResponse
