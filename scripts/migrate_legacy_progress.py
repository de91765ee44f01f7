"""
Import legacy learner progress into the mastery store.

Reads a JSON export of the form {item_id: record, ...}. Records in the
pre-SM-2 shape (strength + last_practiced) are migrated to the current
shape; records already in the current envelope are copied as is.
Records already in the store are migrated in place as well.

Usage:
    python scripts/migrate_legacy_progress.py export.json [--dry-run]

Requires DATABASE_URL (and optionally TEST_MODE) in the environment,
or falls back to sqlite:///logs/mastery.db.
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from madina.config import configure_logging, load_settings
from madina.engine import MasteryEngine
from madina.migration import needs_migration
from madina.storage import SqlKeyValueStore


def load_export(path: Path) -> dict:
    with path.open(encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path} must hold a JSON object of item_id -> record")
    return data


def main() -> None:
    parser = argparse.ArgumentParser(description="Migrate legacy mastery progress")
    parser.add_argument("export", nargs="?", type=Path, help="JSON export to import")
    parser.add_argument("--dry-run", action="store_true", help="Only report what would change")
    args = parser.parse_args()

    settings = load_settings()
    configure_logging(settings.log_level)

    print("=" * 60)
    print("Legacy Progress Migration")
    print("=" * 60)
    print(f"Database: {settings.database_url}")

    records = load_export(args.export) if args.export else {}
    legacy_count = sum(1 for raw in records.values() if needs_migration(raw))
    print(f"Export:   {len(records)} records ({legacy_count} legacy)")

    if args.dry_run:
        print("\n[DRY RUN] No changes made.")
        return

    store = SqlKeyValueStore(settings.database_url)
    engine = MasteryEngine(store, settings=settings)
    try:
        written = engine.import_records(records)
        migrated_in_place = engine.migrate_all()
    finally:
        store.dispose()

    print(f"\n✓ Imported {written} records")
    print(f"✓ Migrated {migrated_in_place} stored legacy records in place")
    skipped = len(records) - written
    if skipped:
        print(f"⚠ Skipped {skipped} unrecognised records (see warnings above)")


if __name__ == "__main__":
    main()
