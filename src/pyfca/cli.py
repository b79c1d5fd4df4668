"""Command-line interface for loading and inspecting athlete CSV datasets."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Sequence

from pyfca.config import AppSettings, iter_datasets
from pyfca.errors import IngestionError
from pyfca.ingest import build_service


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    dataset_keys = [dataset.key for dataset in iter_datasets()]
    parser = argparse.ArgumentParser(description="Load athlete CSV files into the local data store")
    parser.add_argument("--db", type=Path, default=None, help="SQLite file (default: $PYFCA_DB_PATH)")
    commands = parser.add_subparsers(dest="command", required=True)

    ingest = commands.add_parser("ingest", help="Parse a CSV file and replace the stored dataset")
    ingest.add_argument("dataset", choices=dataset_keys, help="Dataset type")
    ingest.add_argument("path", type=Path, help="Path to the CSV file")

    commands.add_parser("list", help="Show which datasets are loaded")

    show = commands.add_parser("show", help="Print typed records of a dataset as JSON")
    show.add_argument("dataset", choices=dataset_keys, help="Dataset type")
    show.add_argument("--limit", type=int, default=10, help="Maximum records to print")

    remove = commands.add_parser("remove", help="Remove a dataset and its records")
    remove.add_argument("dataset", choices=dataset_keys, help="Dataset type")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    settings = AppSettings.from_env()
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")
    service = build_service(args.db or settings.db_path)

    if args.command == "ingest":
        try:
            result = service.ingest_path(args.path, args.dataset)
        except IngestionError as exc:
            print(f"Failed to load {args.path}: {exc}", file=sys.stderr)
            return 1
        except OSError as exc:
            print(f"Cannot read {args.path}: {exc}", file=sys.stderr)
            return 1
        print(f"Loaded {result.report.total_records} {args.dataset} records from {args.path.name}")
        invalid = result.report.invalid_numeric_cells
        if invalid:
            preview = ", ".join(f"{name} ({count})" for name, count in sorted(invalid.items()))
            print(f"Numeric cells replaced by defaults: {preview}")
    elif args.command == "list":
        for summary in service.summary():
            if summary.loaded:
                print(
                    f"{summary.dataset:<12} {summary.records:>6} records  "
                    f"{summary.file_name}  ({summary.last_update})"
                )
            else:
                print(f"{summary.dataset:<12} {'-':>6}")
    elif args.command == "show":
        records = service.get_records(args.dataset)
        limit = max(0, args.limit)
        payload = [record.model_dump(by_alias=True) for record in records[:limit]]
        print(json.dumps(payload, indent=2, ensure_ascii=False))
        more = len(records) - limit
        if more > 0:
            print(f"+{more} more", file=sys.stderr)
    elif args.command == "remove":
        if service.remove_dataset(args.dataset):
            print(f"Removed {args.dataset}")
        else:
            print(f"No {args.dataset} file was loaded")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
