"""Lightweight REST client for the pyfca API."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

import httpx


def main() -> None:
    parser = argparse.ArgumentParser(description="Interact with the pyfca REST API")
    parser.add_argument("base_url", help="Base URL of the API, e.g. http://localhost:8000")
    parser.add_argument("dataset", nargs="?", help="Dataset type (players, injuries, evaluations, gps, statistics)")
    parser.add_argument("csv", type=Path, nargs="?", help="CSV file to upload")
    parser.add_argument("--list", action="store_true", help="List loaded datasets and exit")
    parser.add_argument("--remove", action="store_true", help="Remove the given dataset and exit")
    parser.add_argument("--records", action="store_true", help="Print typed records of the given dataset")
    args = parser.parse_args()

    with httpx.Client(base_url=args.base_url) as client:
        if args.list:
            resp = client.get("/datasets")
            resp.raise_for_status()
            print(json.dumps(resp.json(), indent=2, ensure_ascii=False))
            return

        if not args.dataset:
            raise SystemExit("dataset is required unless using --list")

        if args.remove:
            resp = client.delete(f"/datasets/{args.dataset}")
            if resp.status_code == 404:
                raise SystemExit(f"unknown dataset {args.dataset}")
            resp.raise_for_status()
            print(json.dumps(resp.json(), indent=2))
            return

        if args.records:
            resp = client.get(f"/records/{args.dataset}")
            resp.raise_for_status()
            print(json.dumps(resp.json(), indent=2, ensure_ascii=False))
            return

        if args.csv is None:
            raise SystemExit("csv file is required to upload")

        files = {"file": (args.csv.name, args.csv.read_bytes(), "text/csv")}
        resp = client.post(f"/datasets/{args.dataset}", files=files)
        if resp.status_code == 400:
            raise SystemExit(f"upload rejected: {resp.json().get('detail')}")
        resp.raise_for_status()
        payload = resp.json()
        print(f"Stored {payload['records']} records from {args.csv.name}")
        if payload.get("invalid_numeric_cells"):
            print("Numeric cells replaced by defaults:", json.dumps(payload["invalid_numeric_cells"]))


if __name__ == "__main__":
    main()
