"""Pydantic models for API I/O."""

from .datasets import (
    AthleteResponse,
    DatasetSummaryResponse,
    IngestionResponse,
    RecordListResponse,
    RemovalResponse,
)

__all__ = [
    "AthleteResponse",
    "DatasetSummaryResponse",
    "IngestionResponse",
    "RecordListResponse",
    "RemovalResponse",
]
