from __future__ import annotations

from datetime import datetime
from typing import Protocol

from whitecat.domain.entities.server_config import ServerConfig


class ServerConfigPort(Protocol):
    def get_server_config(self, *, config_id: int) -> ServerConfig | None:
        ...

    def get_server_config_by_name(self, *, name: str) -> ServerConfig | None:
        ...

    def list_server_configs(self, *, active_only: bool) -> list[ServerConfig]:
        ...

    def create_server_config(
        self,
        *,
        name: str,
        cpu_cores: int,
        ram_gb: float,
        storage_gb: int,
        storage_type: str,
        bandwidth_gb: int,
        price_monthly: int,
        max_websites: int,
        features: list[str],
        now: datetime,
    ) -> ServerConfig:
        ...

    def update_server_config(self, *, config_id: int, now: datetime, **fields) -> bool:
        ...

    def toggle_server_config_active(self, *, config_id: int, now: datetime) -> bool:
        ...

    def delete_server_config(self, *, config_id: int) -> bool:
        ...
