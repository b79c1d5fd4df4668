"""Canonical models shared across ingestion, storage and API layers."""

from .entry import HistoryEntry, IngestionEntry
from .records import (
    NOT_SPECIFIED_POSITION,
    NOT_SPECIFIED_TYPE,
    Evaluation,
    GPSData,
    Injury,
    Player,
    Statistics,
)

__all__ = [
    "HistoryEntry",
    "IngestionEntry",
    "Player",
    "Injury",
    "Evaluation",
    "GPSData",
    "Statistics",
    "NOT_SPECIFIED_POSITION",
    "NOT_SPECIFIED_TYPE",
]
