"""
Tabular data model shared by every input path and the workbook assembler.

    Workbook
      └─ sheets: List[Sheet]          (order == tab order in the output)
           ├─ name: str
           └─ grid: List[List[str]]   (may be empty or ragged)

Row 0 is the header row by convention only; nothing here enforces a
rectangular grid.
"""

from __future__ import annotations

from typing import Any, List

from pydantic import BaseModel, field_validator


def _cell_to_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def stringify_grid(value: Any) -> Any:
    """Coerce every cell of a list-of-lists to ``str``; other shapes pass through."""
    if not isinstance(value, list):
        return value
    return [
        [_cell_to_str(cell) for cell in row] if isinstance(row, list) else row
        for row in value
    ]


class Sheet(BaseModel):
    """One named 2D grid of string cells."""

    name: str
    grid: List[List[str]] = []

    @field_validator("grid", mode="before")
    @classmethod
    def _stringify_cells(cls, value: Any) -> Any:
        # Remote services occasionally emit numbers or nulls in "string" cells.
        return stringify_grid(value)

    @property
    def is_empty(self) -> bool:
        return not self.grid

    @property
    def column_count(self) -> int:
        return max((len(row) for row in self.grid), default=0)


class Workbook(BaseModel):
    """Ordered collection of sheets produced by a single conversion."""

    sheets: List[Sheet] = []

    @property
    def sheet_names(self) -> List[str]:
        return [sheet.name for sheet in self.sheets]
