"""Auth API schemas."""

from __future__ import annotations

from pydantic import BaseModel


class SessionRequest(BaseModel):
    """Admin credentials."""

    email: str
    password: str


class SessionResponse(BaseModel):
    token: str
    token_type: str = "bearer"
