from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class ServerConfig:
    id: int
    name: str
    cpu_cores: int
    ram_gb: float
    storage_gb: int
    storage_type: str
    bandwidth_gb: int
    price_monthly: int
    max_websites: int
    features: list[str] = field(default_factory=list)
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def unlimited_bandwidth(self) -> bool:
        return self.bandwidth_gb == 0

    @property
    def unlimited_websites(self) -> bool:
        return self.max_websites == 0
