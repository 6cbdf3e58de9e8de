from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class User:
    id: str
    username: str
    email: str | None
    avatar: str | None
    balance: int
    created_at: datetime
    updated_at: datetime
