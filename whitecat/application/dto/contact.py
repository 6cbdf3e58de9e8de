from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ContactInput:
    name: str
    email: str
    message: str
    phone: str | None = None


@dataclass(frozen=True)
class ContactOutput:
    message: str
