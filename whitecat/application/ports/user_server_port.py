from __future__ import annotations

from datetime import datetime
from typing import Protocol

from whitecat.domain.entities.user_server import ServerStatus, UserServer


class UserServerPort(Protocol):
    def get_user_server(self, *, server_id: int) -> UserServer | None:
        ...

    def list_user_servers(self, *, user_id: str) -> list[UserServer]:
        ...

    def create_user_server(
        self,
        *,
        user_id: str,
        config_id: int,
        server_name: str,
        expires_at: datetime,
        now: datetime,
    ) -> UserServer | None:
        ...

    def update_user_server_status(
        self,
        *,
        server_id: int,
        status: ServerStatus,
        now: datetime,
    ) -> bool:
        ...

    def extend_user_server(self, *, server_id: int, months: int, now: datetime) -> UserServer | None:
        ...

    def list_expired_user_servers(self, *, now: datetime) -> list[UserServer]:
        ...

    def delete_user_server(self, *, server_id: int) -> bool:
        ...
