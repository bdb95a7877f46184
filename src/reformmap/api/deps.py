"""Shared API dependency providers."""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, Header

from reformmap.config import Settings, load_settings
from reformmap.core.auth import AdminAuthenticator
from reformmap.core.blob_uploader import BlobUploader, HTTPBlobUploader, LocalBlobUploader
from reformmap.core.registry_service import RegistryService
from reformmap.db.store import EventStore, JSONFileEventStore, SQLiteEventStore


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()


def get_event_store(settings: Settings = Depends(get_settings)) -> EventStore:
    if settings.store_backend == "json":
        return JSONFileEventStore(settings.events_file)
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)
    return SQLiteEventStore(db_path=settings.db_path)


@lru_cache(maxsize=8)
def _admin_authenticator(settings: Settings) -> AdminAuthenticator:
    return AdminAuthenticator(
        settings.admin_email,
        settings.admin_password,
        settings.secret,
        session_ttl_seconds=settings.session_ttl_seconds,
    )


def get_authenticator(settings: Settings = Depends(get_settings)) -> AdminAuthenticator:
    return _admin_authenticator(settings)


def get_blob_uploader(settings: Settings = Depends(get_settings)) -> BlobUploader:
    if settings.blob_backend == "http":
        return HTTPBlobUploader(settings.blob_api_url, settings.blob_token)
    return LocalBlobUploader(settings.upload_dir, settings.public_base_url)


def get_registry_service(
    store: EventStore = Depends(get_event_store),
    authenticator: AdminAuthenticator = Depends(get_authenticator),
    uploader: BlobUploader = Depends(get_blob_uploader),
) -> RegistryService:
    return RegistryService(store, authenticator, uploader)


def get_actor(
    authorization: str | None = Header(default=None),
    authenticator: AdminAuthenticator = Depends(get_authenticator),
) -> str | None:
    """Resolve the caller identity from a ``Bearer`` session token, if any."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return authenticator.identity_from_token(token.strip())
