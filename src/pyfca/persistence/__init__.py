"""SQLite-backed stores for dataset entries and typed athlete records."""

from __future__ import annotations

import json
import logging
import sqlite3
import tempfile
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Type

from pydantic import BaseModel

from pyfca.config import RECORD_SLOTS, SLOT_DATASETS
from pyfca.errors import UnknownDatasetError
from pyfca.models import (
    Evaluation,
    GPSData,
    IngestionEntry,
    Injury,
    Player,
    Statistics,
)


logger = logging.getLogger(__name__)

_DATASET_MODELS: Dict[str, Type[BaseModel]] = {
    "players": Player,
    "injuries": Injury,
    "evaluations": Evaluation,
    "gps": GPSData,
    "statistics": Statistics,
}

SLOT_MODELS: Dict[str, Type[BaseModel]] = {
    slot: _DATASET_MODELS[dataset.key] for slot, dataset in SLOT_DATASETS.items()
}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class _SQLiteStore:
    """Shared connection and schema-version handling for one named store."""

    store_name: str = ""
    version: int = 1

    def __init__(self, db_path: Path | str):
        self._use_uri = isinstance(db_path, str) and db_path.startswith("file:")
        self.db_path: Path | str = db_path if self._use_uri else Path(db_path)
        with self._session() as conn:
            self._create_schema(conn)
            self._check_version(conn)

    def _connect(self) -> sqlite3.Connection:
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            try:
                conn = sqlite3.connect(self.db_path)
            except sqlite3.OperationalError:
                fallback_dir = Path(tempfile.gettempdir()) / "pyfca-runtime"
                fallback_dir.mkdir(parents=True, exist_ok=True)
                fallback = fallback_dir / "pyfca.sqlite"
                logger.warning("Cannot open %s; falling back to %s", self.db_path, fallback)
                conn = sqlite3.connect(fallback)
                self.db_path = fallback
                self._create_schema(conn)
        else:
            conn = sqlite3.connect(self.db_path, uri=self._use_uri)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _session(self) -> Iterator[sqlite3.Connection]:
        conn = self._connect()
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def _create_schema(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS store_meta (
                store TEXT PRIMARY KEY,
                version INTEGER NOT NULL,
                last_update TEXT
            )
            """
        )

    def _check_version(self, conn: sqlite3.Connection) -> None:
        row = conn.execute(
            "SELECT version FROM store_meta WHERE store = ?", (self.store_name,)
        ).fetchone()
        if row is None:
            conn.execute(
                "INSERT INTO store_meta (store, version, last_update) VALUES (?, ?, NULL)",
                (self.store_name, self.version),
            )
            return
        stored = int(row["version"])
        if stored != self.version:
            self.migrate(conn, stored)
            conn.execute(
                "UPDATE store_meta SET version = ? WHERE store = ?",
                (self.version, self.store_name),
            )

    def migrate(self, conn: sqlite3.Connection, from_version: int) -> None:
        """Upgrade persisted state written by an older schema version."""

        logger.info("Migrating %s from version %d to %d", self.store_name, from_version, self.version)

    def _touch(self, conn: sqlite3.Connection) -> str:
        now = _now()
        conn.execute(
            "UPDATE store_meta SET last_update = ? WHERE store = ?",
            (now, self.store_name),
        )
        return now

    @property
    def last_update(self) -> Optional[str]:
        with self._session() as conn:
            row = conn.execute(
                "SELECT last_update FROM store_meta WHERE store = ?", (self.store_name,)
            ).fetchone()
        return row["last_update"] if row else None


class DatasetEntryStore(_SQLiteStore):
    """At most one live ingestion entry per dataset name."""

    store_name = "csv-files-store"
    version = 1

    def _create_schema(self, conn: sqlite3.Connection) -> None:
        super()._create_schema(conn)
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS dataset_entries (
                name TEXT PRIMARY KEY,
                id TEXT NOT NULL,
                last_update TEXT NOT NULL,
                content_json TEXT NOT NULL,
                history_json TEXT NOT NULL
            )
            """
        )

    def list_entries(self) -> List[IngestionEntry]:
        with self._session() as conn:
            rows = conn.execute("SELECT * FROM dataset_entries ORDER BY rowid").fetchall()
        return [self._row_to_entry(row) for row in rows]

    def get_by_name(self, name: str) -> Optional[IngestionEntry]:
        with self._session() as conn:
            row = conn.execute("SELECT * FROM dataset_entries WHERE name = ?", (name,)).fetchone()
        return self._row_to_entry(row) if row is not None else None

    def get_by_id(self, entry_id: str) -> Optional[IngestionEntry]:
        with self._session() as conn:
            row = conn.execute("SELECT * FROM dataset_entries WHERE id = ?", (entry_id,)).fetchone()
        return self._row_to_entry(row) if row is not None else None

    def add(self, entry: IngestionEntry) -> IngestionEntry:
        """Store ``entry``, replacing any entry with the same name in place."""

        with self._session() as conn:
            self._upsert(conn, entry)
            self._touch(conn)
        return entry

    def update(self, entry_id: str, entry: IngestionEntry) -> bool:
        with self._session() as conn:
            existing = conn.execute(
                "SELECT name FROM dataset_entries WHERE id = ?", (entry_id,)
            ).fetchone()
            if existing is None:
                return False
            if existing["name"] != entry.name:
                conn.execute("DELETE FROM dataset_entries WHERE name = ?", (entry.name,))
            conn.execute(
                """
                UPDATE dataset_entries
                SET name = ?, id = ?, last_update = ?, content_json = ?, history_json = ?
                WHERE id = ?
                """,
                (*self._entry_values(entry), entry_id),
            )
            self._touch(conn)
        return True

    def remove(self, entry_id: str) -> bool:
        with self._session() as conn:
            removed = conn.execute("DELETE FROM dataset_entries WHERE id = ?", (entry_id,)).rowcount
            self._touch(conn)
        return removed > 0

    def remove_by_name(self, name: str) -> bool:
        with self._session() as conn:
            removed = conn.execute("DELETE FROM dataset_entries WHERE name = ?", (name,)).rowcount
            self._touch(conn)
        return removed > 0

    def set_entries(self, entries: Iterable[IngestionEntry]) -> None:
        with self._session() as conn:
            conn.execute("DELETE FROM dataset_entries")
            for entry in entries:
                self._upsert(conn, entry)
            self._touch(conn)

    def _upsert(self, conn: sqlite3.Connection, entry: IngestionEntry) -> None:
        conn.execute(
            """
            INSERT INTO dataset_entries (name, id, last_update, content_json, history_json)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(name) DO UPDATE SET
                id = excluded.id,
                last_update = excluded.last_update,
                content_json = excluded.content_json,
                history_json = excluded.history_json
            """,
            self._entry_values(entry),
        )

    @staticmethod
    def _entry_values(entry: IngestionEntry) -> tuple[str, str, str, str, str]:
        return (
            entry.name,
            entry.id,
            entry.last_update,
            json.dumps(entry.content, ensure_ascii=False),
            json.dumps(
                [item.model_dump(by_alias=True) for item in entry.history],
                ensure_ascii=False,
            ),
        )

    @staticmethod
    def _row_to_entry(row: sqlite3.Row) -> IngestionEntry:
        return IngestionEntry(
            id=row["id"],
            name=row["name"],
            last_update=row["last_update"],
            content=json.loads(row["content_json"]),
            history=json.loads(row["history_json"]),
        )


class RecordStore(_SQLiteStore):
    """Typed athlete records, one fully replaceable list per slot."""

    store_name = "football-data-store"
    version = 1

    def _create_schema(self, conn: sqlite3.Connection) -> None:
        super()._create_schema(conn)
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS athlete_records (
                slot TEXT NOT NULL,
                position INTEGER NOT NULL,
                record_id TEXT NOT NULL,
                payload_json TEXT NOT NULL,
                PRIMARY KEY (slot, position)
            )
            """
        )

    def get_records(self, slot: str) -> List[Any]:
        model = _slot_model(slot)
        with self._session() as conn:
            rows = conn.execute(
                "SELECT payload_json FROM athlete_records WHERE slot = ? ORDER BY position",
                (slot,),
            ).fetchall()
        return [model.model_validate(json.loads(row["payload_json"])) for row in rows]

    def set_records(self, slot: str, records: Iterable[BaseModel]) -> None:
        """Replace every record in ``slot`` in a single transaction."""

        items = self._validated(slot, records)
        with self._session() as conn:
            self._replace_slot(conn, slot, items)
            self._touch(conn)

    def _validated(self, slot: str, records: Iterable[BaseModel]) -> List[Any]:
        model = _slot_model(slot)
        return [_ensure_model(model, record) for record in records]

    def _replace_slot(self, conn: sqlite3.Connection, slot: str, items: List[Any]) -> None:
        conn.execute("DELETE FROM athlete_records WHERE slot = ?", (slot,))
        conn.executemany(
            """
            INSERT INTO athlete_records (slot, position, record_id, payload_json)
            VALUES (?, ?, ?, ?)
            """,
            [(slot, position, item.id, _dump(item)) for position, item in enumerate(items)],
        )

    def add_record(self, slot: str, record: BaseModel) -> None:
        item = _ensure_model(_slot_model(slot), record)
        with self._session() as conn:
            row = conn.execute(
                "SELECT COALESCE(MAX(position), -1) + 1 AS next FROM athlete_records WHERE slot = ?",
                (slot,),
            ).fetchone()
            conn.execute(
                """
                INSERT INTO athlete_records (slot, position, record_id, payload_json)
                VALUES (?, ?, ?, ?)
                """,
                (slot, int(row["next"]), item.id, _dump(item)),
            )
            self._touch(conn)

    def update_record(self, slot: str, record_id: str, changes: Mapping[str, Any]) -> int:
        """Apply a partial update to every record with ``record_id``; return the count."""

        model = _slot_model(slot)
        with self._session() as conn:
            rows = conn.execute(
                "SELECT position, payload_json FROM athlete_records WHERE slot = ? AND record_id = ?",
                (slot, record_id),
            ).fetchall()
            for row in rows:
                current = model.model_validate(json.loads(row["payload_json"]))
                updated = model.model_validate({**current.model_dump(), **dict(changes)})
                conn.execute(
                    """
                    UPDATE athlete_records SET record_id = ?, payload_json = ?
                    WHERE slot = ? AND position = ?
                    """,
                    (updated.id, _dump(updated), slot, row["position"]),
                )
            self._touch(conn)
        return len(rows)

    def remove_record(self, slot: str, record_id: str) -> int:
        _slot_model(slot)
        with self._session() as conn:
            removed = conn.execute(
                "DELETE FROM athlete_records WHERE slot = ? AND record_id = ?",
                (slot, record_id),
            ).rowcount
            self._touch(conn)
        return removed

    def clear_all(self) -> None:
        with self._session() as conn:
            conn.execute("DELETE FROM athlete_records")
            self._touch(conn)

    def counts(self) -> Dict[str, int]:
        with self._session() as conn:
            rows = conn.execute(
                "SELECT slot, COUNT(*) AS total FROM athlete_records GROUP BY slot"
            ).fetchall()
        found = {row["slot"]: int(row["total"]) for row in rows}
        return {slot: found.get(slot, 0) for slot in RECORD_SLOTS}

    # Athlete lookups. Related records match on ``id_atleta`` or on ``nome``.

    def player_by_id(self, player_id: str) -> Optional[Player]:
        return next((p for p in self.get_records("players") if p.id == player_id), None)

    def player_by_name(self, name: str) -> Optional[Player]:
        lowered = name.lower()
        return next((p for p in self.get_records("players") if p.nome.lower() == lowered), None)

    def injuries_by_player(self, player_id: str) -> List[Injury]:
        return _for_athlete(self.get_records("injuries"), player_id)

    def active_injuries(self) -> List[Injury]:
        return [injury for injury in self.get_records("injuries") if injury.status == "Ativo"]

    def evaluations_by_player(self, player_id: str) -> List[Evaluation]:
        return _for_athlete(self.get_records("evaluations"), player_id)

    def latest_evaluation_by_player(self, player_id: str) -> Optional[Evaluation]:
        evaluations = self.evaluations_by_player(player_id)
        if not evaluations:
            return None
        return max(evaluations, key=lambda evaluation: _parse_date(evaluation.data))

    def gps_by_player(self, player_id: str) -> List[GPSData]:
        return _for_athlete(self.get_records("gps_data"), player_id)

    def statistics_by_player(self, player_id: str) -> Optional[Statistics]:
        matches = _for_athlete(self.get_records("statistics"), player_id)
        return matches[0] if matches else None


def replace_dataset(
    entries: DatasetEntryStore,
    records: RecordStore,
    entry: IngestionEntry,
    slot: str,
    items: Iterable[BaseModel],
) -> None:
    """Store ``entry`` and replace its record slot.

    Stores opened on the same SQLite file share a single transaction, so a
    failure leaves both the previous entry and the previous records in place.
    """

    validated = records._validated(slot, items)
    if entries.db_path != records.db_path:
        entries.add(entry)
        records.set_records(slot, validated)
        return
    with entries._session() as conn:
        entries._upsert(conn, entry)
        entries._touch(conn)
        records._replace_slot(conn, slot, validated)
        records._touch(conn)


def clear_dataset(
    entries: DatasetEntryStore,
    records: RecordStore,
    name: str,
    slot: str,
) -> bool:
    """Delete the entry called ``name`` and clear ``slot``; report whether an entry existed."""

    _slot_model(slot)
    if entries.db_path != records.db_path:
        removed = entries.remove_by_name(name)
        records.set_records(slot, [])
        return removed
    with entries._session() as conn:
        removed = conn.execute("DELETE FROM dataset_entries WHERE name = ?", (name,)).rowcount
        entries._touch(conn)
        records._replace_slot(conn, slot, [])
        records._touch(conn)
    return removed > 0


def _slot_model(slot: str) -> Type[BaseModel]:
    try:
        return SLOT_MODELS[slot]
    except KeyError:
        raise UnknownDatasetError(f"Unknown record slot {slot!r}") from None


def _ensure_model(model: Type[BaseModel], record: BaseModel) -> Any:
    if not isinstance(record, model):
        raise TypeError(f"Expected {model.__name__}, got {type(record).__name__}")
    return record


def _dump(record: BaseModel) -> str:
    return json.dumps(record.model_dump(by_alias=True), ensure_ascii=False)


def _for_athlete(records: Iterable[Any], player_id: str) -> List[Any]:
    return [record for record in records if record.id_atleta == player_id or record.nome == player_id]


_DATE_FORMATS = ("%d/%m/%Y", "%d-%m-%Y", "%d/%m/%y")


def _parse_date(value: str) -> datetime:
    text = value.strip()
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        parsed = None
        for fmt in _DATE_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
    if parsed is None:
        return datetime.min
    return parsed.replace(tzinfo=None)
