"""Runtime configuration loaded from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, TypeAlias

from dotenv import load_dotenv

StoreBackend: TypeAlias = Literal["sqlite", "json"]
BlobBackend: TypeAlias = Literal["local", "http"]

DEFAULT_DB_PATH = Path(".reformmap/events.db")
DEFAULT_EVENTS_FILE = Path("events.json")
DEFAULT_UPLOAD_DIR = Path(".reformmap/uploads")
DEFAULT_BLOB_API_URL = "https://blob.vercel-storage.com"
DEFAULT_SESSION_TTL_SECONDS = 12 * 60 * 60


@dataclass(slots=True, frozen=True)
class Settings:
    """Service settings; every field maps to one environment variable."""

    store_backend: StoreBackend = "sqlite"
    db_path: Path = DEFAULT_DB_PATH
    events_file: Path = DEFAULT_EVENTS_FILE
    admin_email: str | None = None
    admin_password: str | None = None
    secret: str | None = None
    session_ttl_seconds: int = DEFAULT_SESSION_TTL_SECONDS
    blob_backend: BlobBackend = "local"
    upload_dir: Path = DEFAULT_UPLOAD_DIR
    public_base_url: str = "/files"
    blob_api_url: str = DEFAULT_BLOB_API_URL
    blob_token: str | None = None
    log_level: str = "INFO"
    environment: str = "production"

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> Settings:
        env = dict(os.environ) if environ is None else environ
        store_backend = env.get("REFORMMAP_STORE_BACKEND", "sqlite").lower()
        if store_backend not in ("sqlite", "json"):
            msg = f"Unsupported REFORMMAP_STORE_BACKEND: {store_backend}"
            raise ValueError(msg)
        blob_backend = env.get("REFORMMAP_BLOB_BACKEND", "local").lower()
        if blob_backend not in ("local", "http"):
            msg = f"Unsupported REFORMMAP_BLOB_BACKEND: {blob_backend}"
            raise ValueError(msg)
        return cls(
            store_backend=store_backend,  # type: ignore[arg-type]
            db_path=Path(env.get("REFORMMAP_DB_PATH", str(DEFAULT_DB_PATH))),
            events_file=Path(env.get("REFORMMAP_EVENTS_FILE", str(DEFAULT_EVENTS_FILE))),
            admin_email=env.get("REFORMMAP_ADMIN_EMAIL") or None,
            admin_password=env.get("REFORMMAP_ADMIN_PASSWORD") or None,
            secret=env.get("REFORMMAP_SECRET") or None,
            session_ttl_seconds=int(
                env.get("REFORMMAP_SESSION_TTL", str(DEFAULT_SESSION_TTL_SECONDS))
            ),
            blob_backend=blob_backend,  # type: ignore[arg-type]
            upload_dir=Path(env.get("REFORMMAP_UPLOAD_DIR", str(DEFAULT_UPLOAD_DIR))),
            public_base_url=env.get("REFORMMAP_PUBLIC_BASE_URL", "/files"),
            blob_api_url=env.get("REFORMMAP_BLOB_API_URL", DEFAULT_BLOB_API_URL),
            blob_token=env.get("BLOB_READ_WRITE_TOKEN") or None,
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
            environment=env.get("ENVIRONMENT", "production").lower(),
        )


def load_settings() -> Settings:
    """Read `.env` (if present) and build settings from the process environment."""
    load_dotenv()
    return Settings.from_env()
