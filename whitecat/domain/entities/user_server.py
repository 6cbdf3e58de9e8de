from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal


ServerStatus = Literal["active", "suspended", "terminated"]

SERVER_STATUSES: tuple[str, ...] = ("active", "suspended", "terminated")


@dataclass(frozen=True)
class UserServer:
    id: int
    user_id: str
    config_id: int
    server_name: str
    status: ServerStatus
    ip_address: str | None
    expires_at: datetime
    created_at: datetime
    updated_at: datetime
    # Populated only by listings joined with server_configs.
    config_name: str | None = None
    cpu_cores: int | None = None
    ram_gb: float | None = None
    storage_gb: int | None = None
