"""
Base class for spreadsheet output backends.

A writer is created per assembly and used in this order:
  1. ``new_workbook``   start an empty workbook
  2. ``append_sheet``   once per sheet, in tab order
  3. ``serialize``      return the finished file's bytes

Sheet names arrive already sanitized and unique; grids may be ragged.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Sequence


class SpreadsheetWriter(ABC):
    """Interface that every output backend must implement."""

    file_extension: str = ".xlsx"

    @abstractmethod
    def new_workbook(self) -> None:
        ...

    @abstractmethod
    def append_sheet(
        self,
        name: str,
        grid: Sequence[Sequence[str]],
        column_widths: List[int],
    ) -> None:
        """Add one sheet with its cells and per-column display widths."""
        ...

    @abstractmethod
    def serialize(self) -> bytes:
        ...
