"""Errors raised while turning uploaded CSV files into dataset entries."""

from __future__ import annotations


class IngestionError(ValueError):
    """Base class for failures that abort an upload."""


class EmptyFileError(IngestionError):
    def __init__(self, message: str = "CSV file is empty") -> None:
        super().__init__(message)


class NoHeadersError(IngestionError):
    def __init__(self, message: str = "Could not identify the header row in the CSV file") -> None:
        super().__init__(message)


class NoDataRowsError(IngestionError):
    def __init__(self, message: str = "No valid data rows found in the CSV file") -> None:
        super().__init__(message)


class UnsupportedFileError(IngestionError):
    """Raised when an upload is not named like a CSV file."""


class UnknownDatasetError(IngestionError, KeyError):
    """Raised for a dataset type outside the configured catalogue."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""
