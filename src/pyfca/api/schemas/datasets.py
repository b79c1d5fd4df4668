from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from pyfca.models import Evaluation, GPSData, IngestionEntry, Injury, Player, Statistics


class DatasetSummaryResponse(BaseModel):
    dataset: str
    title: str
    description: str
    example_file: str
    columns: list[str] = Field(default_factory=list)
    loaded: bool
    records: int
    file_name: str | None = None
    last_update: str | None = None


class IngestionResponse(BaseModel):
    entry: IngestionEntry
    records: int
    invalid_numeric_cells: dict[str, int] = Field(default_factory=dict)


class RemovalResponse(BaseModel):
    dataset: str
    removed: bool


class RecordListResponse(BaseModel):
    dataset: str
    records: list[dict[str, Any]]


class AthleteResponse(BaseModel):
    athlete_id: str
    player: Player | None = None
    injuries: list[Injury] = Field(default_factory=list)
    evaluations: list[Evaluation] = Field(default_factory=list)
    latest_evaluation: Evaluation | None = None
    gps: list[GPSData] = Field(default_factory=list)
    statistics: Statistics | None = None
