"""
Local, deterministic parser for spreadsheet-format uploads.

Supports:
  - comma-delimited text (one sheet named ``Sheet1``)
  - OOXML workbooks (.xlsx): one sheet per worksheet, source names and
    order preserved

Rows are taken literally: no header inference and no cell trimming.
Empty input always yields a single empty ``Sheet1``.
"""

from __future__ import annotations

import csv
import io
import logging
import zipfile
from datetime import date, datetime, time
from typing import Any, List

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from dto.workbook import Sheet, Workbook
from errors import ParseError

logger = logging.getLogger(__name__)

DEFAULT_SHEET_NAME = "Sheet1"

_ZIP_MAGIC = b"PK\x03\x04"


def parse(data: bytes) -> Workbook:
    """Decode *data* into a ``Workbook`` without calling any remote service."""
    if data.startswith(_ZIP_MAGIC):
        return _parse_xlsx(data)
    return _parse_csv(data)


# ---------------------------------------------------------------------------
# Delimited text
# ---------------------------------------------------------------------------


def _decode_text(data: bytes) -> str:
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        logger.debug("Input is not UTF-8; falling back to latin-1")
        return data.decode("latin-1")


def _parse_csv(data: bytes) -> Workbook:
    if b"\x00" in data:
        raise ParseError("Input contains NUL bytes; it does not look like CSV text")

    text = _decode_text(data)
    if not text.strip():
        return _empty_workbook()

    # A single field can never be longer than the input itself.
    if len(data) > csv.field_size_limit():
        csv.field_size_limit(len(data))

    grid: List[List[str]] = []
    reader = csv.reader(io.StringIO(text, newline=""), strict=True)
    try:
        for row in reader:
            if not row:
                continue
            grid.append(row)
    except csv.Error as exc:
        raise ParseError(f"Malformed CSV at line {reader.line_num}: {exc}") from exc

    logger.info("Parsed CSV: %d row(s)", len(grid))
    return Workbook(sheets=[Sheet(name=DEFAULT_SHEET_NAME, grid=grid)])


# ---------------------------------------------------------------------------
# OOXML workbooks
# ---------------------------------------------------------------------------


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def _trim_row(values: List[str]) -> List[str]:
    end = len(values)
    while end and values[end - 1] == "":
        end -= 1
    return values[:end]


def _parse_xlsx(data: bytes) -> Workbook:
    try:
        wb = openpyxl.load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    except (zipfile.BadZipFile, InvalidFileException, KeyError, OSError, ValueError) as exc:
        raise ParseError(f"Could not open workbook: {exc}") from exc

    sheets: List[Sheet] = []
    try:
        for ws in wb.worksheets:
            grid = [
                _trim_row([_cell_text(v) for v in row])
                for row in ws.iter_rows(values_only=True)
            ]
            while grid and not grid[-1]:
                grid.pop()
            sheets.append(Sheet(name=ws.title, grid=grid))
            logger.info("Parsed worksheet '%s': %d row(s)", ws.title, len(grid))
    finally:
        wb.close()

    if not sheets:
        return _empty_workbook()
    return Workbook(sheets=sheets)


def _empty_workbook() -> Workbook:
    return Workbook(sheets=[Sheet(name=DEFAULT_SHEET_NAME, grid=[])])
