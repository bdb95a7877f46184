from __future__ import annotations

from datetime import UTC, datetime, timedelta

from reformmap.core.blob_uploader import Attachment
from reformmap.errors import UploadError

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "s3cret"


class RegistryTestClock:
    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2026, 1, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.current

    def advance(self, *, seconds: int) -> None:
        self.current += timedelta(seconds=seconds)


class StaticAuthenticator:
    def __init__(self, admin: str = ADMIN_EMAIL) -> None:
        self.admin = admin

    def is_admin(self, identity: str | None) -> bool:
        return identity == self.admin


class RecordingUploader:
    def __init__(self, base_url: str = "https://blobs.example.com") -> None:
        self.base_url = base_url
        self.uploads: list[Attachment] = []

    async def upload(self, attachment: Attachment) -> str:
        self.uploads.append(attachment)
        return f"{self.base_url}/{len(self.uploads)}/{attachment.filename}"


class FailingUploader:
    def __init__(self, reason: str = "quota exceeded") -> None:
        self.reason = reason
        self.calls = 0

    async def upload(self, attachment: Attachment) -> str:
        self.calls += 1
        raise UploadError(self.reason)
