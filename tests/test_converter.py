import io
import json

import openpyxl
import pytest

from config import ConverterConfig, ExtractionConfig
from converter import (
    ASSEMBLY_FAILURE_MESSAGE,
    GENERIC_FAILURE_MESSAGE,
    NO_FILE_MESSAGE,
    ConversionSession,
    main,
    user_message,
    validate_upload,
)
from dto.upload import UploadedFile
from errors import (
    AssemblyError,
    ConfigurationError,
    FileTooLargeError,
    ParseError,
    ResponseFormatError,
    TransportError,
    UnsupportedTypeError,
)
from extractors.document import DocumentExtractor
from writers.base import SpreadsheetWriter

from conftest import FakeExtractionClient


def _session(config, client=None, **kwargs) -> ConversionSession:
    extractor = DocumentExtractor(config.extraction, client=client or FakeExtractionClient())
    return ConversionSession(config, extractor=extractor, **kwargs)


# -------------------------------------------------------------------
# Upload policy
# -------------------------------------------------------------------


def test_validate_upload_rejects_unsupported_type(converter_config, make_upload):
    with pytest.raises(UnsupportedTypeError, match="PDF, CSV, or TXT"):
        validate_upload(make_upload(b"x", media_type="image/png", name="a.png"), converter_config)


def test_validate_upload_rejects_oversized_file(converter_config, make_upload):
    too_big = make_upload(b"x" * (1024 * 1024 + 1))

    with pytest.raises(FileTooLargeError, match="Maximum size is 1MB"):
        validate_upload(too_big, converter_config)


def test_select_surfaces_specific_policy_message(converter_config, make_upload):
    session = _session(converter_config)

    ticket = session.select(make_upload(b"x", media_type="application/zip", name="a.zip"))

    assert ticket is None
    assert session.error == "Invalid file type. Please upload a PDF, CSV, or TXT file."


def test_user_message_keeps_failures_generic_except_assembly():
    for exc in (ParseError("x"), TransportError("x"), ResponseFormatError("x"), ConfigurationError("x")):
        assert user_message(exc) == GENERIC_FAILURE_MESSAGE
    assert user_message(AssemblyError("x")) == ASSEMBLY_FAILURE_MESSAGE
    assert user_message(FileTooLargeError("too big")) == "too big"


# -------------------------------------------------------------------
# Conversion routing
# -------------------------------------------------------------------


def test_csv_is_parsed_locally_and_downloaded(converter_config, make_upload):
    client = FakeExtractionClient()
    session = _session(converter_config, client)

    ticket = session.select(make_upload(b"Name,Age\nAlice,30\n", name="people.csv"))
    outcome = session.convert(ticket)

    assert outcome.ok
    assert client.calls == []
    assert outcome.workbook.sheets[0].grid == [["Name", "Age"], ["Alice", "30"]]

    filename, data = session.download()
    assert filename == "people.xlsx"
    wb = openpyxl.load_workbook(io.BytesIO(data))
    assert wb.sheetnames == ["Sheet1"]
    assert wb["Sheet1"]["A2"].value == "Alice"


@pytest.mark.parametrize(
    "media_type, name, expected_kind_media",
    [
        ("application/pdf", "scan.pdf", "application/pdf"),
        ("text/plain", "notes.txt", "text/plain"),
    ],
)
def test_pdf_and_text_go_to_extraction_service(
    converter_config, make_upload, media_type, name, expected_kind_media
):
    response = json.dumps({"sheets": [{"sheetName": "Extracted Data", "data": [["a"], ["1"]]}]})
    client = FakeExtractionClient(response=response)
    session = _session(converter_config, client)

    outcome = session.convert(session.select(make_upload(b"content", media_type=media_type, name=name)))

    assert outcome.ok
    assert client.calls[0]["media_type"] == expected_kind_media
    assert outcome.workbook.sheet_names == ["Extracted Data"]


def test_empty_extraction_downloads_report_sheet(converter_config, make_upload):
    session = _session(converter_config, FakeExtractionClient(response='{"sheets": []}'))

    session.convert(session.select(make_upload(b"%PDF", media_type="application/pdf", name="a.pdf")))
    filename, data = session.download()

    wb = openpyxl.load_workbook(io.BytesIO(data))
    assert filename == "a.xlsx"
    assert wb.sheetnames == ["Extraction Report"]


@pytest.mark.parametrize(
    "client, upload_kwargs, error_type",
    [
        (FakeExtractionClient(response="not json"), {"media_type": "application/pdf", "name": "a.pdf"}, "ResponseFormatError"),
        (FakeExtractionClient(error=TransportError("boom")), {"media_type": "text/plain", "name": "a.txt"}, "TransportError"),
        (FakeExtractionClient(), {"content": b"\x00\x00", "media_type": "text/csv"}, "ParseError"),
    ],
)
def test_failures_are_distinguishable_but_show_generic_message(
    converter_config, make_upload, client, upload_kwargs, error_type
):
    session = _session(converter_config, client)
    upload_kwargs = {"content": b"data", **upload_kwargs}

    outcome = session.convert(session.select(make_upload(**upload_kwargs)))

    assert not outcome.ok
    assert outcome.error_type == error_type
    assert outcome.error == GENERIC_FAILURE_MESSAGE
    assert session.error == GENERIC_FAILURE_MESSAGE


def test_missing_api_key_is_a_configuration_error(make_upload):
    config = ConverterConfig(extraction=ExtractionConfig(api_key=None))
    session = _session(config)

    outcome = session.convert(session.select(make_upload(b"%PDF", media_type="application/pdf", name="a.pdf")))

    assert outcome.error_type == "ConfigurationError"
    assert outcome.error == GENERIC_FAILURE_MESSAGE


def test_convert_without_selection(converter_config):
    session = _session(converter_config)

    outcome = session.convert()

    assert outcome.error == NO_FILE_MESSAGE


# -------------------------------------------------------------------
# Superseded conversions
# -------------------------------------------------------------------


def test_result_of_superseded_conversion_is_discarded(converter_config, make_upload):
    newer = make_upload(b"a,b\n", name="newer.csv")
    holder = {}

    def select_newer_file():
        holder["ticket"] = holder["session"].select(newer)

    client = FakeExtractionClient(
        response='{"sheets": [{"sheetName": "Old", "data": [["stale"]]}]}',
        on_send=select_newer_file,
    )
    session = _session(converter_config, client)
    holder["session"] = session

    first = session.select(make_upload(b"%PDF", media_type="application/pdf", name="old.pdf"))
    outcome = session.convert(first)

    assert outcome.cancelled
    assert session.workbook is None
    assert session.file is newer

    second = session.convert(holder["ticket"])
    assert second.ok
    assert session.workbook.sheets[0].grid == [["a", "b"]]


def test_reset_clears_state(converter_config, make_upload):
    session = _session(converter_config)
    session.convert(session.select(make_upload(b"a\n")))

    session.reset()

    assert session.file is None and session.workbook is None and session.error is None
    assert session.download() is None


# -------------------------------------------------------------------
# Assembly failure
# -------------------------------------------------------------------


class _FailingWriter(SpreadsheetWriter):
    def new_workbook(self) -> None:
        raise RuntimeError("backend missing")

    def append_sheet(self, name, grid, column_widths) -> None:
        pass

    def serialize(self) -> bytes:
        return b""


def test_assembly_failure_has_explicit_message(converter_config, make_upload):
    session = _session(converter_config, writer_factory=_FailingWriter)
    session.convert(session.select(make_upload(b"a\n")))

    assert session.download() is None
    assert session.error == ASSEMBLY_FAILURE_MESSAGE


# -------------------------------------------------------------------
# CLI
# -------------------------------------------------------------------


def test_cli_converts_csv_file(tmp_path, monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "unused-for-csv")
    source = tmp_path / "sales.csv"
    source.write_text("Region,Total\nNorth,10\n", encoding="utf-8")
    output = tmp_path / "out.xlsx"
    preview = tmp_path / "preview.html"

    exit_code = main([str(source), "--output", str(output), "--html", str(preview)])

    assert exit_code == 0
    wb = openpyxl.load_workbook(output)
    assert wb["Sheet1"]["A1"].value == "Region"
    assert "<th>Region</th>" in preview.read_text(encoding="utf-8")


def test_cli_defaults_output_next_to_input(tmp_path):
    source = tmp_path / "table.csv"
    source.write_text("a,b\n", encoding="utf-8")

    assert main([str(source), "--media-type", "text/csv"]) == 0
    assert (tmp_path / "table.xlsx").exists()


def test_cli_reports_missing_file_and_bad_type(tmp_path):
    assert main([str(tmp_path / "missing.csv")]) == 1

    image = tmp_path / "photo.png"
    image.write_bytes(b"\x89PNG")
    assert main([str(image)]) == 1
