"""
File-to-spreadsheet converter: conversion flow and CLI entry point.

Usage:
    python converter.py <input_file> [--output <output.xlsx>] [--provider gemini|claude|openai]
                        [--media-type <type>] [--html <preview.html>]

Routes the upload by media type:
  - text/csv          → local parser
  - application/pdf   → extraction service (PDF instructions)
  - text/plain        → extraction service (plain-text instructions)

then assembles the resulting Workbook into an .xlsx file.

``ConversionSession`` is the programmatic surface used by a UI: one
selection and at most one conversion in flight; selecting a new file
discards whatever the previous conversion returns.
"""

from __future__ import annotations

import argparse
import logging
import mimetypes
import os
import sys
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from pydantic import BaseModel

from config import ConverterConfig, load_config
from dto.upload import (
    CSV_MEDIA_TYPE,
    PDF_MEDIA_TYPE,
    SUPPORTED_MEDIA_TYPES,
    TEXT_MEDIA_TYPE,
    FileKind,
    UploadedFile,
)
from dto.workbook import Workbook
from errors import (
    AssemblyError,
    ConversionCancelled,
    ConversionError,
    FileTooLargeError,
    UnsupportedTypeError,
)
from extractors import delimited
from extractors.decoder import decode
from extractors.document import DocumentExtractor
from utils.cancellation import CancellationToken
from utils.html import render_workbook_html
from writers.assembler import assemble, suggested_filename
from writers.base import SpreadsheetWriter
from writers.openpyxl_writer import OpenpyxlWriter

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = (
    "Failed to convert file. The document might be corrupted or in an "
    "unsupported format. Please try again."
)
ASSEMBLY_FAILURE_MESSAGE = (
    "Error: Could not create Excel file. The spreadsheet writer is "
    "unavailable or failed."
)
NO_FILE_MESSAGE = "Please select a file first."
UNSUPPORTED_TYPE_MESSAGE = "Invalid file type. Please upload a PDF, CSV, or TXT file."


# -------------------------------------------------------------------
# Upload policy
# -------------------------------------------------------------------


def validate_upload(file: UploadedFile, config: ConverterConfig) -> None:
    """Reject unsupported or oversized files before any conversion starts."""
    if file.media_type not in SUPPORTED_MEDIA_TYPES:
        raise UnsupportedTypeError(UNSUPPORTED_TYPE_MESSAGE)
    if file.size > config.max_file_size_bytes:
        raise FileTooLargeError(
            f"File is too large. Maximum size is {config.max_file_size_mb}MB."
        )


def user_message(exc: BaseException) -> str:
    """Map an internal failure to the text shown to the user."""
    if isinstance(exc, (UnsupportedTypeError, FileTooLargeError)):
        return str(exc)
    if isinstance(exc, AssemblyError):
        return ASSEMBLY_FAILURE_MESSAGE
    return GENERIC_FAILURE_MESSAGE


# -------------------------------------------------------------------
# Session
# -------------------------------------------------------------------


class ConversionTicket:
    """Identifies one selected file and carries its cancellation token."""

    def __init__(self, file: UploadedFile) -> None:
        self.file = file
        self.token = CancellationToken()


class ConversionOutcome(BaseModel):
    workbook: Optional[Workbook] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        return self.workbook is not None


class ConversionSession:
    """
    Holds the state of one user's conversion: the selected file, the
    extracted workbook and the current error message.

    Usage::

        session = ConversionSession(load_config())
        ticket = session.select(upload)
        if ticket is not None:
            outcome = session.convert(ticket)
            if outcome.ok:
                filename, data = session.download()
    """

    def __init__(
        self,
        config: Optional[ConverterConfig] = None,
        extractor: Optional[DocumentExtractor] = None,
        writer_factory: Callable[[], SpreadsheetWriter] = OpenpyxlWriter,
    ) -> None:
        self._config = config or load_config()
        self._extractor = extractor or DocumentExtractor(self._config.extraction)
        self._writer_factory = writer_factory
        self._ticket: Optional[ConversionTicket] = None
        self.file: Optional[UploadedFile] = None
        self.workbook: Optional[Workbook] = None
        self.error: Optional[str] = None

    # ------------------------------------------------------------------

    def select(self, file: Optional[UploadedFile]) -> Optional[ConversionTicket]:
        """
        Make *file* the current selection, discarding any previous result.

        Returns ``None`` (with ``self.error`` set) if the file is rejected.
        """
        if self._ticket is not None:
            self._ticket.token.cancel()
        self._ticket = None
        self.file = None
        self.workbook = None
        self.error = None

        if file is None:
            return None

        try:
            validate_upload(file, self._config)
        except (UnsupportedTypeError, FileTooLargeError) as exc:
            logger.info("Rejected %s: %s", file.name, exc)
            self.error = user_message(exc)
            return None

        self.file = file
        self._ticket = ConversionTicket(file)
        return self._ticket

    def is_current(self, ticket: ConversionTicket) -> bool:
        return ticket is self._ticket and not ticket.token.cancelled

    def convert(self, ticket: Optional[ConversionTicket] = None) -> ConversionOutcome:
        ticket = ticket or self._ticket
        if ticket is None:
            self.error = NO_FILE_MESSAGE
            return ConversionOutcome(error=NO_FILE_MESSAGE)

        if self.is_current(ticket):
            self.workbook = None
            self.error = None

        try:
            workbook = self._run(ticket)
        except ConversionCancelled:
            logger.info("Conversion of %s was superseded; result discarded", ticket.file.name)
            return ConversionOutcome(cancelled=True)
        except ConversionError as exc:
            logger.exception(
                "Conversion of %s failed (%s)", ticket.file.name, type(exc).__name__
            )
            return self._fail(ticket, exc)
        except Exception as exc:
            logger.exception("Unexpected failure converting %s", ticket.file.name)
            return self._fail(ticket, exc)

        if not self.is_current(ticket):
            logger.info("Conversion of %s finished after a new selection; discarded", ticket.file.name)
            return ConversionOutcome(cancelled=True)

        self.workbook = workbook
        return ConversionOutcome(workbook=workbook)

    def _fail(self, ticket: ConversionTicket, exc: BaseException) -> ConversionOutcome:
        if not self.is_current(ticket):
            return ConversionOutcome(cancelled=True)
        self.error = user_message(exc)
        return ConversionOutcome(error=self.error, error_type=type(exc).__name__)

    def _run(self, ticket: ConversionTicket) -> Workbook:
        file, token = ticket.file, ticket.token
        logger.info("Converting %s (%s, %d bytes)", file.name, file.media_type, file.size)

        if file.media_type == CSV_MEDIA_TYPE:
            workbook = delimited.parse(decode(file, token))
            token.raise_if_cancelled("parsing")
            return workbook
        if file.media_type == PDF_MEDIA_TYPE:
            return self._extractor.extract(file, FileKind.PDF, token)
        if file.media_type == TEXT_MEDIA_TYPE:
            return self._extractor.extract(file, FileKind.PLAINTEXT, token)
        raise UnsupportedTypeError(f"Unsupported file type: {file.media_type}")

    # ------------------------------------------------------------------

    def download(self) -> Optional[Tuple[str, bytes]]:
        """Assemble the current result; returns ``(filename, data)`` or ``None``."""
        if self.workbook is None or self.file is None:
            return None
        try:
            data = assemble(self.workbook, self._writer_factory)
        except AssemblyError:
            logger.exception("Could not assemble workbook for %s", self.file.name)
            self.error = ASSEMBLY_FAILURE_MESSAGE
            return None
        return suggested_filename(self.file.name), data

    def reset(self) -> None:
        self.select(None)


# -------------------------------------------------------------------
# CLI
# -------------------------------------------------------------------


def _guess_media_type(path: Path) -> str:
    media_type, _ = mimetypes.guess_type(path.name)
    return media_type or "application/octet-stream"


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Convert a PDF, CSV or TXT file into an Excel workbook.",
    )
    parser.add_argument(
        "input_file",
        help="Path to the .pdf, .csv or .txt file to convert",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Output .xlsx path (default: <input_name>.xlsx next to the input)",
    )
    parser.add_argument(
        "-p",
        "--provider",
        default=None,
        help="Extraction provider: gemini, claude or openai (default: $EXTRACTION_PROVIDER)",
    )
    parser.add_argument(
        "--media-type",
        default=None,
        help="Declared media type (default: guessed from the file extension)",
    )
    parser.add_argument(
        "--html",
        default=None,
        help="Also write an HTML preview of the extracted sheets to this path",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )

    input_path = Path(args.input_file)
    if not os.path.isfile(input_path):
        logger.error("File not found: %s", input_path)
        return 1

    upload = UploadedFile.from_path(
        input_path, args.media_type or _guess_media_type(input_path)
    )
    session = ConversionSession(load_config(provider=args.provider))

    ticket = session.select(upload)
    if ticket is None:
        logger.error(session.error)
        return 1

    outcome = session.convert(ticket)
    if not outcome.ok:
        logger.error(outcome.error)
        return 1

    if args.html:
        Path(args.html).write_text(render_workbook_html(outcome.workbook), encoding="utf-8")
        logger.info("Preview written to %s", args.html)

    result = session.download()
    if result is None:
        logger.error(session.error)
        return 1

    filename, data = result
    output_path = Path(args.output) if args.output else input_path.with_name(filename)
    output_path.write_bytes(data)

    logger.info("Output written to %s", output_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
