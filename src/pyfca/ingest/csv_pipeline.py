"""Turn raw CSV text into normalized row mappings and dataset entries."""

from __future__ import annotations

import logging
import re
import time
import unicodedata
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Optional, Sequence

from pyfca.errors import EmptyFileError, NoDataRowsError, NoHeadersError
from pyfca.models import HistoryEntry, IngestionEntry


logger = logging.getLogger(__name__)

RowMapping = Dict[str, Optional[str]]

BYTE_ORDER_MARK = "\ufeff"
DELIMITER_CANDIDATES: tuple[str, ...] = (",", "\t", ";", "|")
DEFAULT_DELIMITER = ","
NULL_SENTINELS = frozenset({"", "NA", "N/A", "-"})

# Some club exports keep the injury mechanism and secondary location in fixed
# columns whose header text is blank or inconsistent between seasons.
POSITIONAL_FALLBACK_MIN_FIELDS = 19
MECHANISM_COLUMN_INDEX = 17
SECONDARY_LOCATION_COLUMN_INDEX = 18
POSITIONAL_FALLBACK_COLUMNS: Mapping[int, str] = {
    MECHANISM_COLUMN_INDEX: "mecanismo_direto",
    SECONDARY_LOCATION_COLUMN_INDEX: "local2_direto",
}

AGE_KEY = "idade"
AGE_BRACKET_KEY = "idade_padronizada"
AGE_NOT_INFORMED = "Não informado"

_LINE_BREAK = re.compile(r"\r?\n")
_HEADER_EDGE = re.compile(r"^['\"\s]+|['\"\s]+$")
_NON_ALNUM_RUN = re.compile(r"[^a-z0-9]+")
_UNDERSCORE_RUN = re.compile(r"_+")
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)", re.ASCII)
_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)", re.ASCII)


def split_lines(text: str) -> List[str]:
    """Split text into non-blank lines, dropping a BOM from the first one."""

    # A BOM counts as whitespace when deciding whether a line is blank.
    lines = [line for line in _LINE_BREAK.split(text) if line.replace(BYTE_ORDER_MARK, "").strip()]
    if not lines:
        raise EmptyFileError()
    if lines[0].startswith(BYTE_ORDER_MARK):
        lines[0] = lines[0][len(BYTE_ORDER_MARK):]
    return lines


def detect_delimiter(header_line: str) -> str:
    selected = DEFAULT_DELIMITER
    best = 0
    for candidate in DELIMITER_CANDIDATES:
        count = header_line.count(candidate)
        if count > best:
            best = count
            selected = candidate
    return selected


def parse_line(line: str, delimiter: str = DEFAULT_DELIMITER) -> List[str]:
    """Split one line into fields, honouring quotes and doubled-quote escapes."""

    fields: List[str] = []
    current: List[str] = []
    in_quotes = False
    index = 0
    length = len(line)
    while index < length:
        char = line[index]
        if char == '"':
            if in_quotes and index + 1 < length and line[index + 1] == '"':
                current.append('"')
                index += 1
            else:
                in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(char)
        index += 1
    fields.append("".join(current))
    return fields


def normalize_header(raw: str) -> str:
    text = _HEADER_EDGE.sub("", raw).lower()
    text = unicodedata.normalize("NFD", text)
    text = "".join(ch for ch in text if not 0x0300 <= ord(ch) <= 0x036F)
    text = _NON_ALNUM_RUN.sub("_", text)
    text = _UNDERSCORE_RUN.sub("_", text)
    return text.strip("_")


def normalize_headers(raw_headers: Sequence[str]) -> List[str]:
    keys = [normalize_header(header) for header in raw_headers]
    if not keys:
        raise NoHeadersError()
    return keys


def coerce_sentinel(value: str) -> Optional[str]:
    return None if value in NULL_SENTINELS else value


def map_row(
    values: Sequence[str],
    headers: Sequence[str],
    *,
    positional_columns: Mapping[int, str] | None = None,
) -> RowMapping:
    """Key a parsed row by the normalized headers.

    Short rows are padded with empty strings and extra trailing fields are
    ignored for the keyed mapping. Rows wide enough to reach every positional
    column also get those cells stored under their fixed keys, whatever the
    header says at that position.
    """

    row: RowMapping = {}
    for index, header in enumerate(headers):
        value = values[index] if index < len(values) else ""
        row[header] = coerce_sentinel(value)

    columns = POSITIONAL_FALLBACK_COLUMNS if positional_columns is None else positional_columns
    if len(values) >= POSITIONAL_FALLBACK_MIN_FIELDS:
        for index, key in columns.items():
            if index < len(values):
                row[key] = values[index] or None
    return row


def parse_int(value: Optional[str]) -> Optional[int]:
    """Parse the leading integer of a cell, returning ``None`` when there is none."""

    if value is None:
        return None
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else None


def parse_float(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    match = _LEADING_FLOAT.match(value)
    return float(match.group(1)) if match else None


def age_bracket(age: Optional[str]) -> str:
    years = parse_int(age)
    if not years:
        return AGE_NOT_INFORMED
    if 16 <= years <= 21:
        return "16-21 anos"
    if 22 <= years <= 30:
        return "22-30 anos"
    if years > 30:
        return "> 30 anos"
    return AGE_NOT_INFORMED


def add_derived_fields(row: RowMapping) -> RowMapping:
    if AGE_KEY in row and AGE_BRACKET_KEY not in row:
        row[AGE_BRACKET_KEY] = age_bracket(row[AGE_KEY])
    return row


def parse_csv_text(
    text: str,
    *,
    positional_columns: Mapping[int, str] | None = None,
) -> List[RowMapping]:
    """Run the full parsing pipeline over CSV text and return the data rows."""

    lines = split_lines(text)
    header_line = lines[0]
    delimiter = detect_delimiter(header_line)
    raw_headers = parse_line(header_line, delimiter)
    headers = normalize_headers(raw_headers)
    logger.debug("Detected delimiter %r with headers %s", delimiter, headers)

    rows: List[RowMapping] = []
    for line in lines[1:]:
        values = parse_line(line, delimiter)
        row = add_derived_fields(map_row(values, headers, positional_columns=positional_columns))
        rows.append(row)
    return rows


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def build_entry(
    rows: Sequence[RowMapping],
    *,
    dataset_type: str,
    file_name: str,
    entry_id: Optional[str] = None,
) -> IngestionEntry:
    content = [dict(row) for row in rows if row]
    if not content:
        raise NoDataRowsError()
    now = _timestamp()
    return IngestionEntry(
        id=entry_id or str(time.time_ns() // 1_000_000),
        name=dataset_type,
        last_update=now,
        content=content,
        history=[HistoryEntry(date=now, action="initial", file_name=file_name)],
    )


def ingest_text(
    text: str,
    *,
    dataset_type: str,
    file_name: str,
    positional_columns: Mapping[int, str] | None = None,
) -> IngestionEntry:
    rows = parse_csv_text(text, positional_columns=positional_columns)
    entry = build_entry(rows, dataset_type=dataset_type, file_name=file_name)
    logger.info("Parsed %s as %s: %d rows", file_name, dataset_type, len(entry.content))
    return entry
