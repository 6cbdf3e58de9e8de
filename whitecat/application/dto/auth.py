from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class StartDiscordLoginOutput:
    session_token: str
    authorization_url: str


@dataclass(frozen=True)
class CompleteDiscordLoginInput:
    code: str
    state: str | None
    pre_auth_token: str | None


@dataclass(frozen=True)
class CompleteDiscordLoginOutput:
    session_token: str
    user_id: str
    username: str
