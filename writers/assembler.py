"""
Workbook assembler: turns a ``Workbook`` into a downloadable ``.xlsx``.

Per sheet, in input order:
  1. Sanitize the name (drop ``/ \\ ? * [ ] :``, control characters and line
     breaks, trim, cap at 31 chars).
  2. Make it unique (case-insensitive, with ``History`` reserved) with a
     `` (2)``, `` (3)`` … suffix.
  3. Write the grid as-is, or a one-cell marker if the grid is empty.
  4. Size each column to ``clamp(longest cell + 2, 10, 80)``.

An empty workbook still produces one "Extraction Report" sheet, so the
output is always a valid, non-empty file.
"""

from __future__ import annotations

import logging
import os
import re
from typing import Callable, List, Sequence, Set

from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from pydantic import BaseModel

from dto.workbook import Workbook
from errors import AssemblyError
from writers.base import SpreadsheetWriter
from writers.openpyxl_writer import OpenpyxlWriter

logger = logging.getLogger(__name__)

MAX_SHEET_NAME_LENGTH = 31
MIN_COLUMN_WIDTH = 10
MAX_COLUMN_WIDTH = 80
COLUMN_PADDING = 2

EMPTY_SHEET_MARKER = "No data extracted for this sheet"
FALLBACK_SHEET_NAME = "Extraction Report"
FALLBACK_SHEET_MESSAGE = "No data could be extracted from the file."

# Excel keeps this tab name for its own change-tracking sheet.
RESERVED_SHEET_NAMES = frozenset({"history"})

_INVALID_SHEET_CHARS_RE = re.compile(r"[\\/?*\[\]:\r\n\t]")
_EXTENSION_RE = re.compile(r"\.[^/.]+$")


class SheetLayout(BaseModel):
    """A sheet exactly as it will be written."""

    name: str
    grid: List[List[str]]
    column_widths: List[int]


# ---------------------------------------------------------------------------
# Naming
# ---------------------------------------------------------------------------


def sanitize_sheet_name(name: str, position: int = 1) -> str:
    """
    Make *name* legal as a worksheet title.

    *position* (1-based) is only used to name sheets whose title is empty
    after sanitizing.
    """
    cleaned = ILLEGAL_CHARACTERS_RE.sub("", name or "")
    cleaned = _INVALID_SHEET_CHARS_RE.sub("", cleaned)
    cleaned = cleaned.strip().strip("'").strip()
    cleaned = cleaned[:MAX_SHEET_NAME_LENGTH].rstrip().rstrip("'")
    return cleaned or f"Sheet{position}"


def dedupe_sheet_name(name: str, taken: Set[str]) -> str:
    """
    Return *name*, or *name* with a numeric suffix, such that it is not in
    *taken* (compared case-insensitively).  The result is added to *taken*.
    """
    candidate = name
    counter = 2
    while candidate.lower() in taken:
        suffix = f" ({counter})"
        candidate = name[: MAX_SHEET_NAME_LENGTH - len(suffix)].rstrip() + suffix
        counter += 1
    taken.add(candidate.lower())
    return candidate


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------


def compute_column_widths(grid: Sequence[Sequence[str]]) -> List[int]:
    """Per-column display width; missing cells in ragged rows count as 0."""
    longest: List[int] = []
    for row in grid:
        for idx, cell in enumerate(row):
            length = len(cell or "")
            if idx >= len(longest):
                longest.append(length)
            elif length > longest[idx]:
                longest[idx] = length
    return [
        max(MIN_COLUMN_WIDTH, min(width + COLUMN_PADDING, MAX_COLUMN_WIDTH))
        for width in longest
    ]


def plan_sheets(workbook: Workbook) -> List[SheetLayout]:
    """Resolve names, placeholders and widths for every output sheet."""
    taken: Set[str] = set(RESERVED_SHEET_NAMES)
    layouts: List[SheetLayout] = []

    for position, sheet in enumerate(workbook.sheets, start=1):
        name = dedupe_sheet_name(sanitize_sheet_name(sheet.name, position), taken)
        if name != sheet.name:
            logger.debug("  Sheet name %r written as %r", sheet.name, name)

        grid = [list(row) for row in sheet.grid] if sheet.grid else [[EMPTY_SHEET_MARKER]]
        layouts.append(
            SheetLayout(name=name, grid=grid, column_widths=compute_column_widths(grid))
        )

    if not layouts:
        grid = [[FALLBACK_SHEET_MESSAGE]]
        layouts.append(
            SheetLayout(
                name=FALLBACK_SHEET_NAME,
                grid=grid,
                column_widths=compute_column_widths(grid),
            )
        )

    return layouts


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


def assemble(
    workbook: Workbook,
    writer_factory: Callable[[], SpreadsheetWriter] = OpenpyxlWriter,
) -> bytes:
    """Render *workbook* to spreadsheet bytes; raises ``AssemblyError`` on backend failure."""
    layouts = plan_sheets(workbook)

    try:
        writer = writer_factory()
        writer.new_workbook()
        for layout in layouts:
            writer.append_sheet(layout.name, layout.grid, layout.column_widths)
        data = writer.serialize()
    except AssemblyError:
        raise
    except Exception as exc:
        raise AssemblyError(f"Could not write the spreadsheet: {exc}") from exc

    logger.info("Assembled workbook: %d sheet(s), %d byte(s)", len(layouts), len(data))
    return data


def suggested_filename(original_name: str, extension: str = ".xlsx") -> str:
    """``report.final.pdf`` → ``report.final.xlsx``."""
    base = os.path.basename((original_name or "").replace("\\", "/"))
    stem = _EXTENSION_RE.sub("", base).strip()
    return f"{stem or 'converted'}{extension}"
