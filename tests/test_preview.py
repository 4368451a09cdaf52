"""Tests for sheetmerge.preview — merged/sheet preview assembly."""
from __future__ import annotations

from io import BytesIO

from openpyxl import Workbook

from sheetmerge.config import MergeSettings
from sheetmerge.io import SpreadsheetDocument
from sheetmerge.preview import get_preview_data


def _doc(data) -> SpreadsheetDocument:
    wb = Workbook()
    ws = wb.active
    ws.title = "Sheet1"
    for r, row in enumerate(data, 1):
        for c, v in enumerate(row, 1):
            if v is not None:
                ws.cell(row=r, column=c, value=v)
    buf = BytesIO()
    wb.save(buf)
    return SpreadsheetDocument.from_bytes(buf.getvalue(), name="t.xlsx")


def test_headers_and_rows_as_text():
    doc = _doc([["ID", None, "Qty", None], [1, "x", 2.5], [None], [2, None, None, "extra"]])
    p = get_preview_data(doc, "Sheet1", 1)
    assert p.headers == ["ID", "Col 2", "Qty"]
    assert p.rows == [["1", "x", "2.5"], ["2", "", ""]]


def test_preview_starts_below_header_row():
    doc = _doc([["title"], ["A", "B"], ["a", "b"]])
    p = get_preview_data(doc, "Sheet1", 2)
    assert p.headers == ["A", "B"]
    assert p.rows == [["a", "b"]]


def test_preview_respects_row_limit():
    doc = _doc([["N"]] + [[i] for i in range(10)])
    p = get_preview_data(doc, "Sheet1", 1, MergeSettings(preview_row_limit=4))
    assert p.rows == [["0"], ["1"], ["2"], ["3"]]


def test_missing_sheet_gives_empty_preview():
    p = get_preview_data(_doc([["A"]]), "Nope", 1)
    assert p.headers == [] and p.rows == []
