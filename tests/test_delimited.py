import io

import openpyxl
import pytest

from errors import ParseError
from extractors.delimited import DEFAULT_SHEET_NAME, parse


def test_parse_simple_csv_scenario():
    workbook = parse(b"Name,Age\nAlice,30\nBob,25\n")

    assert len(workbook.sheets) == 1
    sheet = workbook.sheets[0]
    assert sheet.name == "Sheet1"
    assert sheet.grid == [["Name", "Age"], ["Alice", "30"], ["Bob", "25"]]


def test_parse_preserves_row_count_and_order():
    rows = [[f"r{i}c{j}" for j in range(4)] for i in range(25)]
    data = "\n".join(",".join(row) for row in rows).encode("utf-8")

    sheet = parse(data).sheets[0]

    assert len(sheet.grid) == 25
    assert all(len(row) <= 4 for row in sheet.grid)
    assert sheet.grid == rows


def test_parse_keeps_quoted_fields_and_ragged_rows_literally():
    data = b'Item,Note\r\n"Widget, large"," spaced "\r\nsolo\r\n"multi\nline",x,extra\r\n'

    grid = parse(data).sheets[0].grid

    assert grid[0] == ["Item", "Note"]
    assert grid[1] == ["Widget, large", " spaced "]
    assert grid[2] == ["solo"]
    assert grid[3] == ["multi\nline", "x", "extra"]


def test_parse_accepts_cell_larger_than_default_field_limit():
    big = "x" * 200_000
    data = f'id,body\n1,"{big}"\n'.encode("utf-8")

    grid = parse(data).sheets[0].grid

    assert grid[1] == ["1", big]


def test_parse_strips_utf8_bom_and_falls_back_to_latin1():
    assert parse("\ufeffNázev,Cena\n".encode("utf-8")).sheets[0].grid == [["Název", "Cena"]]
    assert parse("Café,1\n".encode("latin-1")).sheets[0].grid == [["Café", "1"]]


@pytest.mark.parametrize("data", [b"", b"\n\n", b"   \r\n"])
def test_parse_empty_input_yields_single_empty_sheet(data):
    workbook = parse(data)

    assert len(workbook.sheets) == 1
    assert workbook.sheets[0].name == DEFAULT_SHEET_NAME
    assert workbook.sheets[0].grid == []


def test_parse_rejects_binary_content():
    with pytest.raises(ParseError):
        parse(b"\x00\x01\x02binary\x00junk")


def test_parse_rejects_corrupted_workbook_container():
    with pytest.raises(ParseError):
        parse(b"PK\x03\x04this is not really a zip archive")


def test_parse_xlsx_returns_one_sheet_per_worksheet_in_order():
    wb = openpyxl.Workbook()
    first = wb.active
    first.title = "Employees"
    first.append(["Name", "Age", None])
    first.append(["Alice", 30, None])
    wb.create_sheet("Empty")
    third = wb.create_sheet("Flags")
    third.append([True, None, "x"])
    buffer = io.BytesIO()
    wb.save(buffer)

    workbook = parse(buffer.getvalue())

    assert workbook.sheet_names == ["Employees", "Empty", "Flags"]
    assert workbook.sheets[0].grid == [["Name", "Age"], ["Alice", "30"]]
    assert workbook.sheets[1].grid == []
    assert workbook.sheets[2].grid == [["TRUE", "", "x"]]
