import sqlite3

import pytest

from pyfca.config import RECORD_SLOTS
from pyfca.errors import UnknownDatasetError
from pyfca.models import Evaluation, GPSData, HistoryEntry, Injury, IngestionEntry, Player
from pyfca.persistence import (
    SLOT_MODELS,
    DatasetEntryStore,
    RecordStore,
    clear_dataset,
    replace_dataset,
)


def _entry(name="players", entry_id="1", file_name="players.csv", rows=None):
    return IngestionEntry(
        id=entry_id,
        name=name,
        last_update="2024-01-01T00:00:00+00:00",
        content=rows if rows is not None else [{"id": "1", "nome": "Silva", "numero": None}],
        history=[HistoryEntry(date="2024-01-01T00:00:00+00:00", action="initial", file_name=file_name)],
    )


@pytest.fixture()
def db_path(tmp_path):
    return tmp_path / "store.sqlite"


def test_entry_store_replaces_entry_with_same_name(db_path):
    store = DatasetEntryStore(db_path)
    store.add(_entry(entry_id="1"))
    store.add(_entry(name="injuries", entry_id="2", file_name="injuries.csv"))
    store.add(_entry(entry_id="3", file_name="players_v2.csv", rows=[{"id": "9"}]))

    entries = store.list_entries()
    assert [entry.name for entry in entries] == ["players", "injuries"]
    players = store.get_by_name("players")
    assert players.id == "3"
    assert players.content == [{"id": "9"}]
    assert players.file_name == "players_v2.csv"
    assert store.get_by_id("1") is None
    assert store.last_update is not None


def test_entry_store_persists_across_instances(db_path):
    DatasetEntryStore(db_path).add(_entry())
    reopened = DatasetEntryStore(db_path)
    entry = reopened.get_by_id("1")
    assert entry == _entry()
    assert entry.content[0]["numero"] is None


def test_entry_store_update_and_remove(db_path):
    store = DatasetEntryStore(db_path)
    store.add(_entry())

    assert store.update("1", _entry(entry_id="1", rows=[{"id": "2"}]))
    assert store.get_by_name("players").content == [{"id": "2"}]
    assert not store.update("missing", _entry())

    assert store.remove("1")
    assert not store.remove("1")
    assert store.list_entries() == []


def test_entry_store_remove_by_name_and_set_entries(db_path):
    store = DatasetEntryStore(db_path)
    store.set_entries([_entry(), _entry(name="gps", entry_id="5")])
    assert {entry.name for entry in store.list_entries()} == {"players", "gps"}

    assert store.remove_by_name("gps")
    assert not store.remove_by_name("gps")
    store.set_entries([])
    assert store.list_entries() == []


def test_version_mismatch_runs_migration(db_path):
    DatasetEntryStore(db_path)
    with sqlite3.connect(db_path) as conn:
        conn.execute("UPDATE store_meta SET version = 0 WHERE store = 'csv-files-store'")
    conn.close()

    calls = []

    class RecordingStore(DatasetEntryStore):
        def migrate(self, conn, from_version):
            calls.append(from_version)

    RecordingStore(db_path)
    RecordingStore(db_path)
    assert calls == [0]


def test_both_stores_share_one_file(db_path):
    DatasetEntryStore(db_path)
    RecordStore(db_path)
    with sqlite3.connect(db_path) as conn:
        rows = conn.execute("SELECT store, version FROM store_meta ORDER BY store").fetchall()
    conn.close()
    assert rows == [("csv-files-store", 1), ("football-data-store", 1)]


def test_record_store_set_add_update_remove(db_path):
    store = RecordStore(db_path)
    store.set_records("players", [Player(id="1", nome="Silva"), Player(id="2", nome="Souza")])
    store.add_record("players", Player(id="3", nome="Lima"))

    assert [player.id for player in store.get_records("players")] == ["1", "2", "3"]
    assert store.update_record("players", "2", {"posicao": "Goleiro"}) == 1
    assert store.get_records("players")[1].posicao == "Goleiro"
    assert store.remove_record("players", "1") == 1
    assert store.remove_record("players", "1") == 0
    assert store.counts()["players"] == 2

    store.set_records("players", [])
    assert store.get_records("players") == []


def test_record_store_keeps_aliased_fields(db_path):
    store = RecordStore(db_path)
    store.set_records("injuries", [Injury(id="1", id_atleta="7", dias_dm=21)])
    assert store.get_records("injuries")[0].dias_dm == 21


def test_record_store_rejects_wrong_types_and_slots(db_path):
    store = RecordStore(db_path)
    with pytest.raises(TypeError):
        store.set_records("players", [Injury(id="1")])
    with pytest.raises(UnknownDatasetError):
        store.get_records("gps")


def test_clear_all_empties_every_slot(db_path):
    store = RecordStore(db_path)
    store.set_records("players", [Player(id="1")])
    store.set_records("injuries", [Injury(id="1")])
    store.clear_all()
    assert store.counts() == {
        "players": 0,
        "injuries": 0,
        "evaluations": 0,
        "gps_data": 0,
        "statistics": 0,
    }


def test_athlete_queries(db_path):
    store = RecordStore(db_path)
    store.set_records("players", [Player(id="7", nome="Silva"), Player(id="8", nome="Souza")])
    store.set_records(
        "injuries",
        [
            Injury(id="1", id_atleta="7", status="Recuperado"),
            Injury(id="2", id_atleta="7", status="Ativo"),
            Injury(id="3", nome="Souza", status="Ativo"),
        ],
    )
    store.set_records(
        "evaluations",
        [
            Evaluation(id="1", id_atleta="7", data="2024-01-10"),
            Evaluation(id="2", id_atleta="7", data="2024-03-05"),
            Evaluation(id="3", id_atleta="7", data="05/02/2024"),
            Evaluation(id="4", id_atleta="7", data="sem data"),
        ],
    )

    assert store.player_by_id("8").nome == "Souza"
    assert store.player_by_id("99") is None
    assert store.player_by_name("SILVA").id == "7"
    assert [injury.id for injury in store.injuries_by_player("7")] == ["1", "2"]
    assert [injury.id for injury in store.injuries_by_player("Souza")] == ["3"]
    assert [injury.id for injury in store.active_injuries()] == ["2", "3"]
    assert len(store.evaluations_by_player("7")) == 4
    assert store.latest_evaluation_by_player("7").id == "2"
    assert store.latest_evaluation_by_player("8") is None
    assert store.gps_by_player("7") == []
    assert store.statistics_by_player("7") is None


def test_slot_models_follow_dataset_catalogue():
    assert tuple(SLOT_MODELS) == RECORD_SLOTS
    assert SLOT_MODELS["gps_data"] is GPSData


def test_replace_dataset_writes_entry_and_slot_together(db_path, monkeypatch):
    entries = DatasetEntryStore(db_path)
    records = RecordStore(db_path)
    replace_dataset(entries, records, _entry(), "players", [Player(id="1", nome="Silva")])

    def fail(self, conn, slot, items):
        raise sqlite3.OperationalError("disk I/O error")

    monkeypatch.setattr(RecordStore, "_replace_slot", fail)
    with pytest.raises(sqlite3.OperationalError):
        replace_dataset(entries, records, _entry(entry_id="2", rows=[{"id": "2"}]), "players", [])

    assert entries.get_by_name("players").id == "1"
    assert [player.id for player in records.get_records("players")] == ["1"]


def test_clear_dataset_removes_entry_and_slot(db_path):
    entries = DatasetEntryStore(db_path)
    records = RecordStore(db_path)
    replace_dataset(entries, records, _entry(), "players", [Player(id="1")])

    assert clear_dataset(entries, records, "players", "players")
    assert entries.get_by_name("players") is None
    assert records.get_records("players") == []
    assert not clear_dataset(entries, records, "players", "players")


def test_replace_dataset_across_separate_files(tmp_path):
    entries = DatasetEntryStore(tmp_path / "entries.sqlite")
    records = RecordStore(tmp_path / "records.sqlite")
    replace_dataset(entries, records, _entry(), "players", [Player(id="1")])
    assert entries.get_by_name("players").id == "1"
    assert len(records.get_records("players")) == 1
