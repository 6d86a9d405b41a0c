"""
Testes dos codificadores de exportação.
"""

from __future__ import annotations

import io
from datetime import datetime

import pytest
from openpyxl import load_workbook

from adminkit.exceptions import ValidationError
from adminkit.export import ExportService, generate_filename, normalize_format


HEADERS = [("id", "ID"), ("name", "Nome"), ("active", "Active"), ("remark", "Remark")]

ROWS = [
    {"id": 1, "name": "Água", "active": True, "remark": None},
    {"id": 2, "name": "Pão, queijo", "active": False, "remark": "10.5"},
]

NOW = datetime(2024, 1, 31, 12, 0, 0)


class TestFormats:
    """Testes de formato e nome de arquivo."""

    @pytest.mark.parametrize("fmt,expected", [
        (None, "csv"),
        ("CSV", "csv"),
        ("excel", "excel"),
        ("xlsx", "excel"),
    ])
    def test_normalize_format(self, fmt, expected):
        assert normalize_format(fmt) == expected

    def test_unsupported_format(self):
        with pytest.raises(ValidationError) as exc:
            normalize_format("pdf")
        assert "format" in exc.value.errors

    def test_filename(self):
        assert generate_filename("Items", "csv", NOW) == "Items_20240131_120000.csv"
        assert generate_filename("Items", "excel", NOW) == "Items_20240131_120000.xlsx"


class TestCsv:
    """Testes do CSV."""

    def test_csv_content(self):
        result = ExportService().export(ROWS, HEADERS, "csv", "Items", now=NOW)

        assert result.content.startswith(b"\xef\xbb\xbf")
        lines = result.content.decode("utf-8-sig").splitlines()
        assert lines[0] == "ID,Nome,Active,Remark"
        assert lines[1] == "1,Água,Yes,"
        assert lines[2] == '2,"Pão, queijo",No,10.5'
        assert result.rows == 2
        assert result.media_type.startswith("text/csv")

    def test_missing_keys_become_empty_cells(self):
        content = ExportService().to_csv([{"id": 1}], HEADERS)
        assert content.decode("utf-8-sig").splitlines()[1] == "1,,,"


class TestExcel:
    """Testes do Excel."""

    def test_workbook_content(self):
        result = ExportService().export(ROWS, HEADERS, "excel", "Items: 2024/01", now=NOW)

        workbook = load_workbook(io.BytesIO(result.content))
        sheet = workbook.active

        assert sheet.title == "Items_ 2024_01"
        assert [c.value for c in sheet[1]] == ["ID", "Nome", "Active", "Remark"]
        assert sheet["A1"].font.bold is True
        assert sheet["B2"].value == "Água"
        assert sheet["C2"].value == "Yes"
        assert sheet["D3"].value == 10.5
        assert result.filename.endswith(".xlsx")

    def test_long_title_truncated(self):
        content = ExportService().to_excel(ROWS, HEADERS, "x" * 40)
        sheet = load_workbook(io.BytesIO(content)).active
        assert len(sheet.title) == 31
