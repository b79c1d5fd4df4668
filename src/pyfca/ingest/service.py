"""Coordinate CSV uploads with the dataset-entry and record stores."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol

from pyfca.config import get_dataset, iter_datasets
from pyfca.errors import UnsupportedFileError
from pyfca.ingest.csv_pipeline import ingest_text
from pyfca.ingest.records import CoercionReport, rows_to_records
from pyfca.models import IngestionEntry
from pyfca.persistence import DatasetEntryStore, RecordStore, clear_dataset, replace_dataset


logger = logging.getLogger(__name__)

CSV_SUFFIX = ".csv"


class UploadedFile(Protocol):
    """Anything with a file name and an awaitable full read, e.g. FastAPI's UploadFile."""

    filename: Optional[str]

    async def read(self) -> bytes:  # pragma: no cover - protocol
        ...


@dataclass(frozen=True)
class IngestionResult:
    entry: IngestionEntry
    report: CoercionReport


@dataclass(frozen=True)
class DatasetSummary:
    dataset: str
    title: str
    loaded: bool
    records: int
    file_name: Optional[str]
    last_update: Optional[str]


def ensure_csv_file_name(file_name: Optional[str]) -> str:
    if not file_name or not file_name.endswith(CSV_SUFFIX):
        raise UnsupportedFileError(f"Only {CSV_SUFFIX} files are accepted, got {file_name!r}")
    return file_name


def decode_upload(payload: bytes) -> str:
    # The BOM is left in place; the line splitter drops it from the header.
    return payload.decode("utf-8", errors="replace")


class IngestionService:
    """Parse uploads and keep both stores in step.

    Parsing and record construction finish before either store is written,
    so a rejected file leaves any previously stored dataset untouched.
    """

    def __init__(
        self,
        entries: DatasetEntryStore,
        records: RecordStore,
        *,
        positional_columns: Mapping[int, str] | None = None,
    ) -> None:
        self.entries = entries
        self.records = records
        self._positional_columns = positional_columns

    def parse_text(self, text: str, dataset_type: str, file_name: str) -> IngestionEntry:
        dataset = get_dataset(dataset_type)
        return ingest_text(
            text,
            dataset_type=dataset.key,
            file_name=file_name,
            positional_columns=self._positional_columns,
        )

    def parse_path(self, path: Path, dataset_type: str) -> IngestionEntry:
        ensure_csv_file_name(path.name)
        text = path.read_text(encoding="utf-8", errors="replace")
        return self.parse_text(text, dataset_type, path.name)

    async def parse_upload(self, upload: UploadedFile, dataset_type: str) -> IngestionEntry:
        file_name = ensure_csv_file_name(upload.filename)
        payload = await upload.read()
        return self.parse_text(decode_upload(payload), dataset_type, file_name)

    def add_entry(self, entry: IngestionEntry) -> CoercionReport:
        """Store ``entry`` and rebuild the typed record slot behind it."""

        dataset = get_dataset(entry.name)
        typed, report = rows_to_records(dataset.key, entry.content)
        replace_dataset(self.entries, self.records, entry, dataset.record_slot, typed)
        logger.info(
            "Stored %s from %s: %d records",
            dataset.key,
            entry.file_name,
            report.total_records,
        )
        return report

    def ingest_path(self, path: Path, dataset_type: str) -> IngestionResult:
        entry = self.parse_path(path, dataset_type)
        return IngestionResult(entry=entry, report=self.add_entry(entry))

    async def ingest_upload(self, upload: UploadedFile, dataset_type: str) -> IngestionResult:
        entry = await self.parse_upload(upload, dataset_type)
        return IngestionResult(entry=entry, report=self.add_entry(entry))

    def get_entry(self, dataset_type: str) -> Optional[IngestionEntry]:
        return self.entries.get_by_name(get_dataset(dataset_type).key)

    def get_records(self, dataset_type: str) -> List[Any]:
        return self.records.get_records(get_dataset(dataset_type).record_slot)

    def remove_dataset(self, dataset_type: str) -> bool:
        """Drop the stored entry and clear its record slot."""

        dataset = get_dataset(dataset_type)
        removed = clear_dataset(self.entries, self.records, dataset.key, dataset.record_slot)
        if removed:
            logger.info("Removed dataset %s", dataset.key)
        return removed

    def summary(self) -> List[DatasetSummary]:
        stored: Dict[str, IngestionEntry] = {entry.name: entry for entry in self.entries.list_entries()}
        summaries: List[DatasetSummary] = []
        for dataset in iter_datasets():
            entry = stored.get(dataset.key)
            summaries.append(
                DatasetSummary(
                    dataset=dataset.key,
                    title=dataset.title,
                    loaded=entry is not None,
                    records=len(entry.content) if entry else 0,
                    file_name=entry.file_name if entry else None,
                    last_update=entry.last_update if entry else None,
                )
            )
        return summaries


def build_service(db_path: Path | str) -> IngestionService:
    """Open both stores on one SQLite file and wrap them in a service."""

    return IngestionService(DatasetEntryStore(db_path), RecordStore(db_path))
