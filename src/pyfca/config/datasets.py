"""Catalogue of the CSV dataset types the dashboard accepts."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Tuple

from pyfca.errors import UnknownDatasetError


@dataclass(frozen=True)
class DatasetConfig:
    key: str
    title: str
    description: str
    example_file: str
    record_slot: str
    columns: Tuple[str, ...]


_DATASETS: Dict[str, DatasetConfig] = {
    "players": DatasetConfig(
        key="players",
        title="Jogadores",
        description="Lista de jogadores do time",
        example_file="players.csv",
        record_slot="players",
        columns=("id", "nome", "posicao", "data_nascimento", "numero", "idade"),
    ),
    "injuries": DatasetConfig(
        key="injuries",
        title="Lesões",
        description="Registro de lesões dos atletas",
        example_file="injuries.csv",
        record_slot="injuries",
        columns=("id_atleta", "nome", "posicao", "data", "tipo", "mecanismo", "status"),
    ),
    "evaluations": DatasetConfig(
        key="evaluations",
        title="Avaliações Físicas",
        description="Avaliações físicas dos atletas",
        example_file="evaluations.csv",
        record_slot="evaluations",
        columns=("id_atleta", "nome", "data", "peso", "altura", "gordura", "cmj", "sj"),
    ),
    "gps": DatasetConfig(
        key="gps",
        title="Dados GPS",
        description="Dados de GPS e carga de treinamento",
        example_file="gps_data.csv",
        record_slot="gps_data",
        columns=("id_atleta", "nome", "data", "playerload", "distancia", "sprints"),
    ),
    "statistics": DatasetConfig(
        key="statistics",
        title="Estatísticas",
        description="Estatísticas de jogo dos atletas",
        example_file="statistics.csv",
        record_slot="statistics",
        columns=("id_atleta", "nome", "posicao", "jogos", "minutos", "gols"),
    ),
}


def iter_datasets() -> Iterable[DatasetConfig]:
    """Return the configured dataset types in display order."""

    return _DATASETS.values()


def get_dataset(key: str) -> DatasetConfig:
    """Fetch a dataset type, raising UnknownDatasetError if missing."""

    normalized = key.strip().lower()
    if normalized not in _DATASETS:
        raise UnknownDatasetError(f"Unknown dataset type {key!r}")
    return _DATASETS[normalized]


RECORD_SLOTS: Tuple[str, ...] = tuple(config.record_slot for config in _DATASETS.values())

# Read-only view keyed by record slot, for store code that works slot-first.
SLOT_DATASETS: Mapping[str, DatasetConfig] = {
    config.record_slot: config for config in _DATASETS.values()
}
