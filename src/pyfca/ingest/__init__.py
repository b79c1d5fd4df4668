"""CSV ingestion: parse uploads, build typed records, feed the stores."""

from .csv_pipeline import (
    RowMapping,
    age_bracket,
    build_entry,
    detect_delimiter,
    ingest_text,
    map_row,
    normalize_header,
    normalize_headers,
    parse_csv_text,
    parse_line,
    split_lines,
)
from .records import AthleteRecord, CoercionReport, rows_to_records
from .service import IngestionResult, IngestionService, build_service, ensure_csv_file_name

__all__ = [
    "AthleteRecord",
    "CoercionReport",
    "IngestionResult",
    "IngestionService",
    "RowMapping",
    "age_bracket",
    "build_service",
    "build_entry",
    "detect_delimiter",
    "ensure_csv_file_name",
    "ingest_text",
    "map_row",
    "normalize_header",
    "normalize_headers",
    "parse_csv_text",
    "parse_line",
    "rows_to_records",
    "split_lines",
]
