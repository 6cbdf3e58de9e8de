from __future__ import annotations

from pydantic import BaseModel, Field


class ContactRequest(BaseModel):
    name: str = Field(..., max_length=200)
    email: str = Field(..., max_length=255)
    phone: str | None = Field(None, max_length=50)
    message: str = Field(..., max_length=5000)
