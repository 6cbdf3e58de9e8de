from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Session:
    """Process-local login state keyed by an opaque cookie token."""

    id: str
    created_at: datetime
    user_id: str | None = None
    username: str | None = None
    email: str | None = None
    avatar: str | None = None
    access_token: str | None = None
    refresh_token: str | None = None
    oauth_state: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None


SESSION_MUTABLE_FIELDS: frozenset[str] = frozenset(
    {
        "user_id",
        "username",
        "email",
        "avatar",
        "access_token",
        "refresh_token",
        "oauth_state",
    }
)
