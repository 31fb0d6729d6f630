"""
Database initialization for fresh installs.

Creates the equipment and movements tables if they do not exist and can
optionally seed the register from a CSV file. Idempotent - safe to run
multiple times; rows whose asset id already exists are skipped.

Usage:
    python -m equiptrack.scripts.init_db
    python -m equiptrack.scripts.init_db --seed equipment.csv
    python -m equiptrack.scripts.init_db --seed equipment.csv --dry-run
"""

import argparse
import asyncio
import sys
from pathlib import Path

from equiptrack.config import get_settings
from equiptrack.database import close_db, create_tables, get_session_factory
from equiptrack.services.backend import SqlBackend
from equiptrack.services.csv_import import parse_csv
from equiptrack.services.inventory import InventoryState


async def seed_from_csv(path: Path, dry_run: bool) -> int:
    """Import a CSV file; returns the number of rows that could not be imported."""
    settings = get_settings()
    inventory = InventoryState(
        backend=SqlBackend(get_session_factory()),
        load_timeout=settings.data_load_timeout,
        default_threshold_days=settings.default_tag_threshold_days,
    )
    await inventory.init()
    try:
        snapshot = await inventory.current()

        rows = parse_csv(path.read_text(encoding="utf-8-sig"), snapshot.asset_ids())
        invalid = [row for row in rows if not row.is_valid]
        for row in invalid:
            print(f"  line {row.line}: {row.asset_id or '-'}: {', '.join(row.errors)}")

        print(f"  {len(rows) - len(invalid)} valid row(s), {len(invalid)} invalid")
        if dry_run:
            print("  Dry run - nothing imported")
            return len(invalid)

        result = await inventory.import_rows(rows)
        print(f"  Imported {result.success} item(s), {result.failed} failed")
        return len(invalid) + result.failed
    finally:
        await inventory.teardown()


async def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Initialize the equipment tracker database")
    parser.add_argument("--seed", type=Path, help="CSV file to import after creating tables")
    parser.add_argument("--dry-run", action="store_true", help="Validate the seed file only")
    args = parser.parse_args(argv)

    settings = get_settings()
    print(f"=== Database: {settings.db_name}@{settings.db_host}:{settings.db_port} ===")

    try:
        await create_tables()
        print("  Tables ready")

        if args.seed:
            if not args.seed.exists():
                print(f"  Seed file not found: {args.seed}")
                return 1
            print(f"\n=== Seeding from {args.seed} ===")
            problems = await seed_from_csv(args.seed, args.dry_run)
            return 1 if problems else 0
    finally:
        await close_db()

    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
