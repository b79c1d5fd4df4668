import pytest
from pydantic import ValidationError

from pyfca.models import GPSData, HistoryEntry, Injury, IngestionEntry, Player


def test_records_are_immutable():
    player = Player(id="1", nome="Silva")
    with pytest.raises(ValidationError):
        player.nome = "Souza"


def test_record_requires_non_empty_id():
    with pytest.raises(ValidationError):
        Player(id="", nome="Silva")


def test_injury_status_is_restricted():
    with pytest.raises(ValidationError):
        Injury(id="1", status="Lesionado")


def test_aliases_round_trip():
    injury = Injury.model_validate({"id": "1", "diasDM": 12})
    gps = GPSData(id="2", player_load=300.5)
    assert injury.dias_dm == 12
    assert injury.model_dump(by_alias=True)["diasDM"] == 12
    assert gps.model_dump(by_alias=True)["playerLoad"] == 300.5


def test_entry_accepts_stored_camel_case_payload():
    entry = IngestionEntry.model_validate(
        {
            "id": "1700000000000",
            "name": "players",
            "lastUpdate": "2024-01-01T00:00:00+00:00",
            "content": [{"id": "1", "nome": None}],
            "history": [
                {"date": "2024-01-01T00:00:00+00:00", "action": "initial", "fileName": "a.csv"},
                {"date": "2024-02-01T00:00:00+00:00", "action": "update", "fileName": "b.csv"},
            ],
        }
    )
    assert entry.last_update.startswith("2024-01-01")
    assert entry.file_name == "b.csv"
    assert entry.content[0]["nome"] is None


def test_entry_without_history_has_no_file_name():
    entry = IngestionEntry(id="1", name="players", last_update="now", content=[])
    assert entry.file_name is None


def test_history_action_is_restricted():
    with pytest.raises(ValidationError):
        HistoryEntry(date="now", action="delete", file_name="a.csv")
