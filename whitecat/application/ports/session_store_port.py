from __future__ import annotations

from datetime import datetime
from typing import Protocol

from whitecat.domain.entities.session import Session


class SessionStorePort(Protocol):
    def create(self, **fields: str | None) -> str:
        ...

    def get(self, token: str) -> Session | None:
        ...

    def update(self, token: str, **fields: str | None) -> bool:
        ...

    def delete(self, token: str) -> bool:
        ...

    def sweep(self, now: datetime | None = None) -> int:
        ...
