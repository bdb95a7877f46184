"""Attachment upload backends returning durable URLs."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Protocol
from urllib.parse import quote
from uuid import uuid4

import httpx
import structlog

from reformmap.errors import UploadError

logger = structlog.get_logger(__name__)

DEFAULT_FILENAME = "upload.bin"
DEFAULT_CONTENT_TYPE = "application/octet-stream"


@dataclass(slots=True)
class Attachment:
    """Raw file attached to a reform event."""

    filename: str
    content: bytes
    content_type: str = DEFAULT_CONTENT_TYPE


class BlobUploader(Protocol):
    """Stores attachment bytes and returns a URL that stays valid."""

    async def upload(self, attachment: Attachment) -> str:
        """Return the durable URL of the stored attachment."""


def safe_filename(filename: str | None) -> str:
    """Strip directory components from a client-supplied filename."""
    name = PurePosixPath((filename or "").replace("\\", "/")).name.strip()
    if name in ("", ".", ".."):
        return DEFAULT_FILENAME
    return name


class LocalBlobUploader:
    """Write attachments under a directory served at ``public_base_url``."""

    def __init__(self, directory: Path, public_base_url: str = "/files") -> None:
        self._directory = directory
        self._public_base_url = public_base_url.rstrip("/")

    @property
    def directory(self) -> Path:
        return self._directory

    async def upload(self, attachment: Attachment) -> str:
        name = safe_filename(attachment.filename)
        folder = uuid4().hex
        target = self._directory / folder / name
        try:
            await asyncio.to_thread(self._write, target, attachment.content)
        except OSError as exc:
            msg = f"Cannot store attachment {name}: {exc}"
            raise UploadError(msg) from exc
        url = f"{self._public_base_url}/{folder}/{quote(name)}"
        logger.info("attachment_stored", url=url, size=len(attachment.content))
        return url

    @staticmethod
    def _write(target: Path, content: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)


class HTTPBlobUploader:
    """Upload to a remote blob service with ``PUT <api_url>/<pathname>``.

    The service answers with a JSON object carrying the public ``url``.
    """

    def __init__(
        self,
        api_url: str,
        token: str | None,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_url = api_url.rstrip("/")
        self._token = token
        self._timeout = timeout
        self._transport = transport

    async def upload(self, attachment: Attachment) -> str:
        if not self._token:
            raise UploadError("Blob storage token is not configured")
        name = safe_filename(attachment.filename)
        endpoint = f"{self._api_url}/{quote(name)}"
        headers = {
            "authorization": f"Bearer {self._token}",
            "x-content-type": attachment.content_type or DEFAULT_CONTENT_TYPE,
            "x-add-random-suffix": "1",
        }
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.put(endpoint, content=attachment.content, headers=headers)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            msg = f"Blob upload timed out: {exc}"
            raise UploadError(msg) from exc
        except httpx.HTTPStatusError as exc:
            msg = f"Blob upload failed with http status {exc.response.status_code}"
            raise UploadError(msg) from exc
        except httpx.HTTPError as exc:
            msg = f"Blob upload failed: {exc}"
            raise UploadError(msg) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise UploadError("Blob service returned invalid JSON") from exc
        url = payload.get("url") if isinstance(payload, dict) else None
        if not isinstance(url, str) or not url:
            raise UploadError("Blob service response has no url")
        logger.info("attachment_uploaded", url=url, size=len(attachment.content))
        return url
