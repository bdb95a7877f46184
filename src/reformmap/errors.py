"""Error taxonomy for the reform event registry."""

from __future__ import annotations


class RegistryError(RuntimeError):
    """Base class for failures surfaced to registry callers."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class ValidationError(RegistryError):
    """Submitted input is missing or invalid."""

    def __init__(self, reason: str, *, fields: list[str] | None = None) -> None:
        super().__init__(reason)
        self.fields = list(fields or [])


class AuthorizationError(RegistryError):
    """Caller is not the configured admin identity."""


class UploadError(RegistryError):
    """Attachment transport failed before anything was persisted."""


class StorageError(RegistryError):
    """Backend read or write failed."""


class DeserializationError(ValueError):
    """A stored record could not be decoded; readers skip it."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"{key}: {reason}")
        self.key = key
        self.reason = reason
