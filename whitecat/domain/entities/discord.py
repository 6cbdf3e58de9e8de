from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DiscordTokens:
    access_token: str
    refresh_token: str | None
    token_type: str
    expires_in: int | None
    scope: str | None = None


@dataclass(frozen=True)
class DiscordProfile:
    id: str
    username: str
    discriminator: str | None
    avatar: str | None
    email: str | None
