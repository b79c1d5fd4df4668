"""Environment-driven runtime settings."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path


logger = logging.getLogger(__name__)

_DB_PATH_ENV = "PYFCA_DB_PATH"
_LOG_LEVEL_ENV = "PYFCA_LOG_LEVEL"

DEFAULT_DB_PATH = Path(__file__).resolve().parents[1] / "pyfca.sqlite"
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class AppSettings:
    db_path: Path
    log_level: str

    @classmethod
    def from_env(cls) -> "AppSettings":
        raw_db = os.getenv(_DB_PATH_ENV)
        db_path = Path(raw_db).expanduser() if raw_db else DEFAULT_DB_PATH
        return cls(db_path=db_path, log_level=_env_log_level(_LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL))


def _env_log_level(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    level = raw.strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        logger.warning("Invalid log level for %s: %s; using default %s", name, raw, default)
        return default
    return level
