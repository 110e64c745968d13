#!/usr/bin/env python3
"""
Migrate pending jobs from a JSON store to the SQLite database.

Usage:
    python scripts/migrate_json_to_db.py --json data/store.json --db data/jobs.db
"""

import argparse
from pathlib import Path
import sys

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from kickahead.database import SqlRepository
from kickahead.storage import JsonRepository


def migrate(json_path: Path, db_path: Path, dry_run: bool = False, keep_source: bool = False):
    """
    Migrate pending jobs from JSON to database.

    Args:
        json_path: Path to JSON store file
        db_path: Path to SQLite database file
        dry_run: If True, don't write to database
        keep_source: If True, leave migrated jobs in the JSON store

    Returns:
        Number of migrated jobs
    """
    print(f"Loading jobs from {json_path}...")
    source = JsonRepository(json_path)
    jobs = source.pending()
    print(f"Found {len(jobs)} pending jobs in JSON store")

    if dry_run:
        print("\n[DRY RUN] Would migrate the following jobs:")
        for i, job in enumerate(jobs[:5], 1):
            print(f"  {i}. {job.id}: {job.job_type} at {job.scheduled_at.isoformat()}")
        if len(jobs) > 5:
            print(f"  ... and {len(jobs) - 5} more")
        return 0

    print(f"\nInitializing database at {db_path}...")
    target = SqlRepository(db_path)

    migrated = 0
    for job in jobs:
        new_id = target.create(job.job_type, job.scheduled_at, job.args)
        if not keep_source:
            source.delete(job.id)
        migrated += 1

        if migrated % 20 == 0:
            print(f"  Migrated {migrated} jobs...")
        print(f"  {job.id} -> {new_id}")

    print(f"\n✅ Migration complete!")
    print(f"   Migrated: {migrated}")
    return migrated


def main():
    parser = argparse.ArgumentParser(description="Migrate pending jobs from JSON to database")
    parser.add_argument("--json", type=Path, default=Path("data/store.json"),
                       help="Path to JSON store file")
    parser.add_argument("--db", type=Path, default=Path("data/jobs.db"),
                       help="Path to SQLite database file")
    parser.add_argument("--dry-run", action="store_true",
                       help="Show what would be migrated without writing")
    parser.add_argument("--keep-source", action="store_true",
                       help="Do not remove migrated jobs from the JSON store")

    args = parser.parse_args()

    if not args.json.exists():
        print(f"❌ JSON file not found: {args.json}")
        sys.exit(1)

    migrate(args.json, args.db, dry_run=args.dry_run, keep_source=args.keep_source)


if __name__ == "__main__":
    main()
