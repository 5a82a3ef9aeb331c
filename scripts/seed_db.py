"""
Seed script for CivicFlow demo reports.

Usage:
  - Dry run (default): python scripts/seed_db.py
  - Apply to the configured store: python scripts/seed_db.py --apply
  - Use another seed file: python scripts/seed_db.py --seed my_seed.json --apply

Seed file format (JSON list):
  [
    {"category": "pothole", "latitude": 44.43, "longitude": 26.10,
     "description": "Deep pothole", "reporter_name": "Ana", "reporter_email": "ana@example.com"},
    {"custom_label": "Broken bench", "severity": 2, "latitude": 44.44, "longitude": 26.11,
     "description": "Bench split in half"}
  ]

Entries without "category" are created as custom reports.
"""

import argparse
import json
import os
from typing import List

from civicflow.config.firebase import create_blob_store
from civicflow.core.settings import settings
from civicflow.models.category import Category
from civicflow.models.report import CustomReportFields, Location, Reporter
from civicflow.services.report_store import ReportStore


def load_seed(path: str) -> List[dict]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def write_to_store(store: ReportStore, seed: List[dict], apply: bool = False):
    for entry in seed:
        location = Location(latitude=entry["latitude"], longitude=entry["longitude"])
        reporter = Reporter(name=entry.get("reporter_name"), email=entry.get("reporter_email"))
        kind = entry.get("category") or entry.get("custom_label") or "custom"
        print(f"Preparing: {kind} at ({location.latitude}, {location.longitude})")
        if not apply:
            continue

        if entry.get("category"):
            report = store.create(
                Category(entry["category"]),
                location,
                description=entry.get("description"),
                reporter=reporter,
            )
        else:
            fields = CustomReportFields(
                description=entry.get("description", ""),
                label=entry.get("custom_label"),
                severity=entry.get("severity"),
            )
            report = store.create_custom(fields, location, reporter=reporter)
        print(f"Wrote: {report.id}")


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--apply", action="store_true", help="Write seed to the store instead of dry-run")
    parser.add_argument("--seed", default="db_seed.json", help="Path to the seed file")
    args = parser.parse_args()

    seed_path = os.path.join(os.getcwd(), args.seed)
    if not os.path.exists(seed_path):
        print(f"Seed file not found: {seed_path}")
        return

    seed = load_seed(seed_path)

    store = ReportStore(create_blob_store(settings))
    store.load()

    write_to_store(store, seed, apply=args.apply)

    if args.apply:
        print(f"Seeding completed. Store now holds {len(store)} report(s).")
    else:
        print("Dry run complete. Re-run with --apply to write to the store.")


if __name__ == "__main__":
    main()
