"""Upload API schemas."""

from __future__ import annotations

from pydantic import BaseModel


class UploadResponse(BaseModel):
    """Durable location of a stored attachment."""

    url: str
