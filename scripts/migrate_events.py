#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from reformmap.db.store import JSONFileEventStore, SQLiteEventStore
from reformmap.errors import StorageError


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Copy reform events from a JSON events file into the SQLite store"
    )
    parser.add_argument("--source", required=True, help="Path to the JSON events array")
    parser.add_argument("--db", required=True, help="Path to the SQLite database")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report what would be copied without writing",
    )
    return parser


async def _migrate(source: Path, db_path: Path, *, dry_run: bool) -> tuple[int, list[str]]:
    scan = await JSONFileEventStore(source).scan()
    skipped = [f"{record.key}: {record.reason}" for record in scan.skipped]
    if dry_run:
        return len(scan.events), skipped

    db_path.parent.mkdir(parents=True, exist_ok=True)
    target = SQLiteEventStore(db_path)
    for event in scan.events:
        await target.upsert(event)
    return len(scan.events), skipped


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    try:
        copied, skipped = asyncio.run(
            _migrate(Path(args.source), Path(args.db), dry_run=args.dry_run)
        )
    except StorageError as exc:
        sys.stderr.write(f"error: {exc.reason}\n")
        return 1

    verb = "would copy" if args.dry_run else "copied"
    sys.stdout.write(f"{verb} {copied} events\n")
    for line in skipped:
        sys.stderr.write(f"skipped {line}\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
