"""Configuration helpers for dataset types and runtime settings."""

from .datasets import (
    RECORD_SLOTS,
    SLOT_DATASETS,
    DatasetConfig,
    get_dataset,
    iter_datasets,
)
from .settings import AppSettings

__all__ = [
    "AppSettings",
    "DatasetConfig",
    "RECORD_SLOTS",
    "SLOT_DATASETS",
    "get_dataset",
    "iter_datasets",
]
