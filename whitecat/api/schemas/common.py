from __future__ import annotations

from pydantic import BaseModel


class SuccessResponse(BaseModel):
    success: bool = True


class MessageResponse(BaseModel):
    success: bool = True
    message: str
