"""
Seed standards, indicators and checklist items from the JSON dataset.

Run with: python -m school_eval.db.seed_standards [--path FILE]
      or: school-eval-seed [--path FILE]

Re-running is safe: existing rows are updated, checklist items are never
duplicated.
"""
import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

from school_eval.core.config import settings
from school_eval.core.database import AsyncSessionLocal, init_db, close_db
from school_eval.core.exceptions import SchoolEvalError
from school_eval.services.seed_importer import SeedImporter, SeedReport, load_dataset


async def seed_standards(path: Optional[Path] = None) -> SeedReport:
    """Create tables if needed and import the dataset"""
    seed_path = path or settings.SEED_DATA_FILE
    print("Seed script starting...")

    await init_db()
    try:
        rows = await load_dataset(seed_path)
        print(f"Loaded {len(rows)} rows from {seed_path}")

        async with AsyncSessionLocal() as db:
            try:
                report = await SeedImporter().run(db, rows)
            except Exception:
                await db.rollback()
                raise
    finally:
        await close_db()

    print("=" * 50)
    print("Seed completed!")
    print(f"  Standards:                {report.standards}")
    print(f"  Indicators processed:     {report.indicators}")
    print(f"  Checklist items added:    {report.checklist_added}")
    print(f"  Rows skipped:             {report.rows_skipped}")
    print("=" * 50)
    return report


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Seed school standards and indicators")
    parser.add_argument(
        "--path",
        type=Path,
        default=None,
        help="Dataset file (defaults to SEED_DATA_PATH or school_standards_indicators.json)",
    )
    args = parser.parse_args(argv)

    try:
        asyncio.run(seed_standards(args.path))
    except SchoolEvalError as e:
        print(f"Error seeding database: {e.message}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
