"""
Exportação de linhas de resource para CSV e Excel.

    service = ExportService()
    result = service.export(rows, headers, "csv", title="Itens")
    result.filename   # "Itens_20240131_120000.csv"
"""

from __future__ import annotations

import csv
import io
import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from adminkit.exceptions import MissingDependency, ValidationError

logger = logging.getLogger("adminkit.export")

CSV_FORMAT = "csv"
EXCEL_FORMAT = "excel"

_FORMAT_ALIASES = {
    "csv": CSV_FORMAT,
    "excel": EXCEL_FORMAT,
    "xlsx": EXCEL_FORMAT,
}

_EXTENSIONS = {CSV_FORMAT: "csv", EXCEL_FORMAT: "xlsx"}
_MEDIA_TYPES = {
    CSV_FORMAT: "text/csv; charset=utf-8",
    EXCEL_FORMAT: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}

_SHEET_INVALID_CHARS = re.compile(r"[\[\]:*?/\\]")
EXCEL_COLUMN_WIDTH = 20


@dataclass(frozen=True)
class ExportResult:
    filename: str
    content: bytes
    media_type: str
    rows: int


def normalize_format(fmt: str | None) -> str:
    """Resolve o formato pedido pelo cliente; default csv."""
    key = (fmt or CSV_FORMAT).strip().lower()
    if key not in _FORMAT_ALIASES:
        raise ValidationError({"format": [f"unsupported export format: {fmt}"]})
    return _FORMAT_ALIASES[key]


def generate_filename(title: str, fmt: str, now: datetime | None = None) -> str:
    now = now or datetime.now()
    return f"{title}_{now:%Y%m%d_%H%M%S}.{_EXTENSIONS[fmt]}"


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    return str(value)


def _cell_number(value: Any) -> Any:
    """Strings numéricas viram números no Excel; o resto fica como texto."""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if value is None:
        return ""
    if isinstance(value, (int, float)):
        return value
    text = str(value)
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return text


class ExportService:
    """
    Codificadores de exportação.

    headers é uma lista ordenada de (nome_do_campo, label); cada linha é
    projetada nessa ordem e campos ausentes viram célula vazia.
    """

    def export(
        self,
        rows: list[dict[str, Any]],
        headers: list[tuple[str, str]],
        fmt: str | None,
        title: str,
        now: datetime | None = None,
    ) -> ExportResult:
        fmt = normalize_format(fmt)
        if fmt == EXCEL_FORMAT:
            content = self.to_excel(rows, headers, title)
        else:
            content = self.to_csv(rows, headers)

        logger.info("Exported %d rows of %s as %s", len(rows), title, fmt)
        return ExportResult(
            filename=generate_filename(title, fmt, now),
            content=content,
            media_type=_MEDIA_TYPES[fmt],
            rows=len(rows),
        )

    def to_csv(self, rows: list[dict[str, Any]], headers: list[tuple[str, str]]) -> bytes:
        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow([label for _, label in headers])
        for row in rows:
            writer.writerow([_cell_text(row.get(name)) for name, _ in headers])
        # BOM para o Excel abrir UTF-8 corretamente
        return buffer.getvalue().encode("utf-8-sig")

    def to_excel(self, rows: list[dict[str, Any]], headers: list[tuple[str, str]], title: str) -> bytes:
        try:
            from openpyxl import Workbook
            from openpyxl.styles import Font
            from openpyxl.utils import get_column_letter
        except ImportError as e:
            raise MissingDependency("openpyxl", "Excel export") from e

        workbook = Workbook()
        sheet = workbook.active
        sheet.title = _SHEET_INVALID_CHARS.sub("_", title)[:31] or "Sheet1"

        sheet.append([label for _, label in headers])
        for cell in sheet[1]:
            cell.font = Font(bold=True)

        for row in rows:
            sheet.append([_cell_number(row.get(name)) for name, _ in headers])

        for index in range(1, len(headers) + 1):
            sheet.column_dimensions[get_column_letter(index)].width = EXCEL_COLUMN_WIDTH

        buffer = io.BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()
