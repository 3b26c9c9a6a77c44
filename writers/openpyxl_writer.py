from __future__ import annotations

import io
import logging
from typing import List, Optional, Sequence

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.utils import get_column_letter

from writers.base import SpreadsheetWriter

logger = logging.getLogger(__name__)


class OpenpyxlWriter(SpreadsheetWriter):
    """Writes ``.xlsx`` workbooks with openpyxl; every cell is a string cell."""

    def __init__(self) -> None:
        self._wb: Optional[Workbook] = None

    def new_workbook(self) -> None:
        self._wb = Workbook()
        # openpyxl always starts with one default sheet
        self._wb.remove(self._wb.active)

    def append_sheet(
        self,
        name: str,
        grid: Sequence[Sequence[str]],
        column_widths: List[int],
    ) -> None:
        if self._wb is None:
            raise RuntimeError("new_workbook() must be called before append_sheet()")

        ws = self._wb.create_sheet(title=name)
        for row_idx, row in enumerate(grid, start=1):
            for col_idx, value in enumerate(row, start=1):
                if not value:
                    continue
                cell = ws.cell(row=row_idx, column=col_idx)
                cell.value = ILLEGAL_CHARACTERS_RE.sub("", value)
                # Keep "=..." and similar text from becoming formulas.
                cell.data_type = "s"

        for col_idx, width in enumerate(column_widths, start=1):
            ws.column_dimensions[get_column_letter(col_idx)].width = width

        logger.debug("  Wrote sheet '%s': %d row(s)", name, len(grid))

    def serialize(self) -> bytes:
        if self._wb is None:
            raise RuntimeError("new_workbook() must be called before serialize()")
        buffer = io.BytesIO()
        self._wb.save(buffer)
        return buffer.getvalue()
