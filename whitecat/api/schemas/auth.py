from __future__ import annotations

from pydantic import BaseModel


class SessionUserResponse(BaseModel):
    id: str
    username: str
    avatar: str | None
    email: str | None
    balance: int


class CurrentUserResponse(BaseModel):
    authenticated: bool
    user: SessionUserResponse | None = None
