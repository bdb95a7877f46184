"""Reform event registry: validated, authorized writes and public reads."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import structlog

from reformmap.core.auth import Authenticator
from reformmap.core.blob_uploader import Attachment, BlobUploader
from reformmap.core.color_projector import DEFAULT_COLOR, DEFAULT_PALETTE, project
from reformmap.db.store import EventStore
from reformmap.errors import AuthorizationError, ValidationError
from reformmap.models.events import (
    MAX_YEAR,
    MIN_YEAR,
    ReformEvent,
    ReformType,
    normalize_country_code,
)

logger = structlog.get_logger(__name__)

REFORM_TYPES = frozenset(member.value for member in ReformType)


@dataclass(slots=True)
class SubmitEventInput:
    """Client-supplied fields of a reform event, not yet validated."""

    country_code: Any
    year: Any
    type: Any
    title: Any = ""
    desc: Any = ""
    file_url: Any = None


@dataclass(slots=True)
class _ValidatedInput:
    country_code: str
    year: int
    type: str
    title: str
    desc: str
    file_url: str | None


def _parse_year(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        year = value
    elif isinstance(value, str):
        try:
            year = int(value.strip())
        except ValueError:
            return None
    else:
        return None
    return year if MIN_YEAR <= year <= MAX_YEAR else None


def _optional_text(value: Any) -> str | None:
    if value is None:
        return ""
    return value if isinstance(value, str) else None


def validate_input(payload: SubmitEventInput) -> _ValidatedInput:
    """Check every field and report all invalid ones at once."""
    invalid: list[str] = []

    country_code = ""
    if isinstance(payload.country_code, str):
        country_code = normalize_country_code(payload.country_code)
    if not country_code:
        invalid.append("countryCode")

    year = _parse_year(payload.year)
    if year is None:
        invalid.append("year")

    if not isinstance(payload.type, str) or payload.type not in REFORM_TYPES:
        invalid.append("type")

    title = _optional_text(payload.title)
    if title is None:
        invalid.append("title")
    desc = _optional_text(payload.desc)
    if desc is None:
        invalid.append("desc")

    file_url = payload.file_url
    if file_url is not None and not isinstance(file_url, str):
        invalid.append("fileUrl")

    if invalid or year is None or title is None or desc is None:
        msg = f"Missing or invalid fields: {', '.join(invalid)}"
        raise ValidationError(msg, fields=invalid)

    return _ValidatedInput(
        country_code=country_code,
        year=year,
        type=payload.type,
        title=title,
        desc=desc,
        file_url=file_url or None,
    )


class RegistryService:
    """Orchestrate event writes around an ``EventStore``.

    Writes run validate, authorize, upload, stamp, upsert in that order, so
    a rejected or failed request never reaches the store.
    """

    def __init__(
        self,
        store: EventStore,
        authenticator: Authenticator,
        uploader: BlobUploader,
        *,
        palette: dict[str, str] | None = None,
        default_color: str = DEFAULT_COLOR,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self._store = store
        self._authenticator = authenticator
        self._uploader = uploader
        self._palette = dict(palette or DEFAULT_PALETTE)
        self._default_color = default_color
        self._clock = clock

    @property
    def palette(self) -> dict[str, str]:
        return dict(self._palette)

    @property
    def default_color(self) -> str:
        return self._default_color

    def _authorize(self, actor: str | None) -> str:
        if actor is None or not self._authenticator.is_admin(actor):
            logger.info("registry_write_rejected", actor=actor)
            raise AuthorizationError("Caller is not the admin")
        return actor

    async def submit(
        self,
        actor: str | None,
        payload: SubmitEventInput,
        attachment: Attachment | None = None,
    ) -> ReformEvent:
        validated = validate_input(payload)
        actor = self._authorize(actor)

        if attachment is not None:
            file_url = await self._uploader.upload(attachment)
        elif validated.file_url is not None:
            file_url = validated.file_url
        else:
            existing = await self._store.get(validated.country_code, validated.year)
            file_url = existing.file_url if existing is not None else ""

        event = ReformEvent(
            country_code=validated.country_code,
            year=validated.year,
            type=validated.type,
            title=validated.title,
            desc=validated.desc,
            file_url=file_url,
            saved_by=actor,
            timestamp=self._clock(),
        )
        await self._store.upsert(event)
        logger.info("reform_event_saved", key=event.key, type=event.type, saved_by=actor)
        return event

    async def upload(self, actor: str | None, attachment: Attachment) -> str:
        """Store a standalone attachment for a later ``submit`` to reference."""
        self._authorize(actor)
        return await self._uploader.upload(attachment)

    async def query(self, year: int, country_code: str | None = None) -> list[ReformEvent]:
        if country_code is not None:
            event = await self._store.get(normalize_country_code(country_code), year)
            return [event] if event is not None else []
        return await self._store.list_by_year(year)

    async def query_all(self) -> list[ReformEvent]:
        return await self._store.list_all()

    async def colors(self, year: int) -> dict[str, str]:
        return project(await self.query(year), self._palette, self._default_color)
