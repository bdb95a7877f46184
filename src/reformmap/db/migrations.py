"""SQLite migrations for the reform event store."""

from __future__ import annotations

import aiosqlite

SCHEMA_VERSION = 1


async def apply_migrations(conn: aiosqlite.Connection) -> None:
    """Create the keyed-record schema if missing and set schema version."""
    await conn.execute(
        """
        CREATE TABLE IF NOT EXISTS schema_migrations (
            version INTEGER PRIMARY KEY
        )
        """
    )

    # One row per field key of a named collection; value is the JSON event.
    await conn.execute(
        """
        CREATE TABLE IF NOT EXISTS keyed_records (
            collection TEXT NOT NULL,
            field TEXT NOT NULL,
            year INTEGER,
            value TEXT NOT NULL,
            PRIMARY KEY (collection, field)
        )
        """
    )

    await conn.execute(
        """
        CREATE INDEX IF NOT EXISTS idx_keyed_records_year
        ON keyed_records(collection, year)
        """
    )

    # Rewrite the version row only when it changes.
    cursor = await conn.execute("SELECT version FROM schema_migrations")
    versions = [row[0] for row in await cursor.fetchall()]
    if versions != [SCHEMA_VERSION]:
        await conn.execute("DELETE FROM schema_migrations")
        await conn.execute(
            "INSERT INTO schema_migrations(version) VALUES (?)", (SCHEMA_VERSION,)
        )
    await conn.commit()
