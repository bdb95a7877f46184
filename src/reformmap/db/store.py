"""Persistence backends for reform events.

Both backends keep at most one event per ``<countryCode>:<year>`` key and
decode every stored record through ``decode_record``. A record that fails to
decode is reported as a ``SkippedRecord`` and left out of the result instead
of failing the whole read.
"""

from __future__ import annotations

import asyncio
import json
import os
import tempfile
import threading
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

import aiosqlite
import pydantic
import structlog

from reformmap.db.migrations import apply_migrations
from reformmap.errors import DeserializationError, StorageError
from reformmap.models.events import ReformEvent, event_key, normalize_country_code

logger = structlog.get_logger(__name__)

EVENTS_COLLECTION = "reform_events"


class EventStore(Protocol):
    """Keyed event storage with upsert-by-key semantics."""

    async def upsert(self, event: ReformEvent) -> None: ...

    async def list_by_year(self, year: int) -> list[ReformEvent]: ...

    async def list_all(self) -> list[ReformEvent]: ...

    async def get(self, country_code: str, year: int) -> ReformEvent | None: ...


@dataclass(slots=True, frozen=True)
class SkippedRecord:
    """Stored record that could not be decoded."""

    key: str
    reason: str


@dataclass(slots=True)
class RecordScan:
    """Aggregated outcome of decoding a batch of stored records."""

    events: list[ReformEvent] = field(default_factory=list)
    skipped: list[SkippedRecord] = field(default_factory=list)


def decode_record(key: str, raw: Any) -> ReformEvent:
    """Validate one stored record; the payload must agree with its key."""
    try:
        payload = json.loads(raw) if isinstance(raw, str | bytes) else raw
        event = ReformEvent.model_validate(payload)
    except (ValueError, TypeError, pydantic.ValidationError) as exc:
        raise DeserializationError(key, str(exc)) from exc
    country_code = normalize_country_code(event.country_code)
    if not country_code:
        raise DeserializationError(key, "blank countryCode")
    if country_code != event.country_code:
        event = event.model_copy(update={"country_code": country_code})
    if event.key != key:
        raise DeserializationError(key, f"payload belongs to key {event.key}")
    return event


def encode_record(event: ReformEvent) -> str:
    return event.model_dump_json(by_alias=True)


def scan_records(records: Iterable[tuple[str, Any]]) -> RecordScan:
    """Decode ``(key, raw)`` pairs; later records win for a repeated key."""
    decoded: dict[str, ReformEvent] = {}
    skipped: list[SkippedRecord] = []
    for key, raw in records:
        try:
            event = decode_record(key, raw)
        except DeserializationError as exc:
            logger.warning("event_record_skipped", key=exc.key, reason=exc.reason)
            skipped.append(SkippedRecord(key=exc.key, reason=exc.reason))
            continue
        decoded.pop(key, None)
        decoded[key] = event
    return RecordScan(events=list(decoded.values()), skipped=skipped)


class SQLiteEventStore:
    """Keyed-store backend: one collection of ``<countryCode>:<year>`` fields."""

    def __init__(self, db_path: Path, collection: str = EVENTS_COLLECTION) -> None:
        self._db_path = db_path
        self._collection = collection

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[aiosqlite.Connection]:
        try:
            conn = await aiosqlite.connect(self._db_path)
        except (aiosqlite.Error, OSError) as exc:
            msg = f"Cannot open event database {self._db_path}: {exc}"
            raise StorageError(msg) from exc
        conn.row_factory = aiosqlite.Row
        try:
            await apply_migrations(conn)
            yield conn
        except (aiosqlite.Error, OverflowError) as exc:
            msg = f"Event database error: {exc}"
            raise StorageError(msg) from exc
        finally:
            await conn.close()

    async def upsert(self, event: ReformEvent) -> None:
        async with self.connection() as conn:
            await conn.execute(
                """
                INSERT INTO keyed_records(collection, field, year, value)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(collection, field) DO UPDATE SET
                    year=excluded.year,
                    value=excluded.value
                """,
                (self._collection, event.key, event.year, encode_record(event)),
            )
            await conn.commit()
        logger.info("event_upserted", key=event.key, backend="sqlite")

    async def scan(self, year: int | None = None) -> RecordScan:
        query = "SELECT field, value FROM keyed_records WHERE collection = ?"
        params: list[str | int] = [self._collection]
        if year is not None:
            query += " AND year = ?"
            params.append(year)
        query += " ORDER BY rowid ASC"

        async with self.connection() as conn:
            cursor = await conn.execute(query, tuple(params))
            rows = await cursor.fetchall()
        return scan_records((str(row["field"]), row["value"]) for row in rows)

    async def list_by_year(self, year: int) -> list[ReformEvent]:
        return (await self.scan(year)).events

    async def list_all(self) -> list[ReformEvent]:
        return (await self.scan()).events

    async def get(self, country_code: str, year: int) -> ReformEvent | None:
        key = event_key(normalize_country_code(country_code), year)
        async with self.connection() as conn:
            cursor = await conn.execute(
                "SELECT value FROM keyed_records WHERE collection = ? AND field = ?",
                (self._collection, key),
            )
            row = await cursor.fetchone()
        if row is None:
            return None
        scan = scan_records([(key, row["value"])])
        return scan.events[0] if scan.events else None


_FILE_LOCKS: dict[Path, threading.Lock] = {}
_FILE_LOCKS_GUARD = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    resolved = path.resolve()
    with _FILE_LOCKS_GUARD:
        return _FILE_LOCKS.setdefault(resolved, threading.Lock())


def _raw_key(index: int, raw: Any) -> str:
    if isinstance(raw, dict) and "countryCode" in raw and "year" in raw:
        return event_key(normalize_country_code(str(raw["countryCode"])), raw["year"])
    return f"#{index}"


class JSONFileEventStore:
    """File backend: the whole store is one JSON array of event objects.

    Read-modify-write cycles are serialised per file and the array is
    replaced atomically through a temporary file. The locks live in this
    process only, so the file backend supports a single server process;
    run several workers against the SQLite backend instead.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._lock = _lock_for(path)

    def _read_raw(self) -> list[Any]:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as exc:
            msg = f"Cannot read events file {self._path}: {exc}"
            raise StorageError(msg) from exc
        if not text.strip():
            return []
        try:
            data = json.loads(text)
        except ValueError as exc:
            msg = f"Events file {self._path} is not valid JSON: {exc}"
            raise StorageError(msg) from exc
        if not isinstance(data, list):
            msg = f"Events file {self._path} must contain a JSON array"
            raise StorageError(msg)
        return data

    def _write_raw(self, records: list[Any]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(records, handle, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self._path)
        except OSError as exc:
            msg = f"Cannot write events file {self._path}: {exc}"
            raise StorageError(msg) from exc

    def _upsert_sync(self, event: ReformEvent) -> None:
        with self._lock:
            records = self._read_raw()
            kept = [
                raw for index, raw in enumerate(records) if _raw_key(index, raw) != event.key
            ]
            kept.append(event.model_dump(mode="json", by_alias=True))
            self._write_raw(kept)

    def _scan_sync(self) -> RecordScan:
        records = self._read_raw()
        return scan_records((_raw_key(index, raw), raw) for index, raw in enumerate(records))

    async def upsert(self, event: ReformEvent) -> None:
        await asyncio.to_thread(self._upsert_sync, event)
        logger.info("event_upserted", key=event.key, backend="json")

    async def scan(self) -> RecordScan:
        return await asyncio.to_thread(self._scan_sync)

    async def list_all(self) -> list[ReformEvent]:
        return (await self.scan()).events

    async def list_by_year(self, year: int) -> list[ReformEvent]:
        return [event for event in await self.list_all() if event.year == year]

    async def get(self, country_code: str, year: int) -> ReformEvent | None:
        key = event_key(normalize_country_code(country_code), year)
        for event in await self.list_all():
            if event.key == key:
                return event
        return None
