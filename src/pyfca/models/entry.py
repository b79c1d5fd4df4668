"""Dataset entries produced by one CSV upload."""

from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class HistoryEntry(BaseModel):
    date: str
    action: Literal["initial", "update"]
    file_name: str = Field(..., alias="fileName")

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class IngestionEntry(BaseModel):
    """Parsed rows of one uploaded file plus where they came from.

    ``name`` is the dataset type. ``content`` keeps the generic row mappings
    (normalized header key to cell text or ``None``) in file order.
    """

    id: str = Field(..., min_length=1)
    name: str
    last_update: str = Field(..., alias="lastUpdate")
    content: List[Dict[str, Optional[str]]]
    history: List[HistoryEntry] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @property
    def file_name(self) -> Optional[str]:
        return self.history[-1].file_name if self.history else None
