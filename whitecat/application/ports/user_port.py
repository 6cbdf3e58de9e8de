from __future__ import annotations

from datetime import datetime
from typing import Protocol

from whitecat.domain.entities.user import User


class UserPort(Protocol):
    def get_user_by_id(self, *, user_id: str) -> User | None:
        ...

    def list_users(self) -> list[User]:
        ...

    def upsert_user(
        self,
        *,
        user_id: str,
        username: str,
        email: str | None,
        avatar: str | None,
        now: datetime,
    ) -> User:
        ...

    def get_balance(self, *, user_id: str) -> int:
        ...

    def update_balance(self, *, user_id: str, delta: int, now: datetime) -> int | None:
        ...

    def delete_user(self, *, user_id: str) -> bool:
        ...
