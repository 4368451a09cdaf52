"""Tests for sheetmerge.header — header row detection and raw top rows."""
from __future__ import annotations

from datetime import datetime
from io import BytesIO

from openpyxl import Workbook
from openpyxl.cell.rich_text import CellRichText, TextBlock
from openpyxl.cell.text import InlineFont

from sheetmerge.config import MergeSettings
from sheetmerge.header import detect_header_row, get_raw_top_rows
from sheetmerge.io import SpreadsheetDocument


def _doc(data, sheet: str = "Sheet1") -> SpreadsheetDocument:
    wb = Workbook()
    ws = wb.active
    ws.title = sheet
    for r, row in enumerate(data, 1):
        for c, v in enumerate(row, 1):
            if v is not None:
                ws.cell(row=r, column=c, value=v)
    buf = BytesIO()
    wb.save(buf)
    return SpreadsheetDocument.from_bytes(buf.getvalue(), name="book.xlsx")


class TestDetectHeaderRow:
    def test_densest_row_wins_over_title_banner(self):
        doc = _doc([
            ["Quarterly Report"],
            [None],
            ["ID", "Name", "Email"],
            [1, "Alice", None],
        ])
        assert detect_header_row(doc, "Sheet1") == 3

    def test_ties_keep_first_row(self):
        doc = _doc([["a", "b"], ["c", "d"]])
        assert detect_header_row(doc, "Sheet1") == 1

    def test_missing_sheet_falls_back_to_one(self):
        doc = _doc([["a"]])
        assert detect_header_row(doc, "Nope") == 1

    def test_empty_sheet_falls_back_to_one(self):
        doc = _doc([])
        assert detect_header_row(doc, "Sheet1") == 1

    def test_rows_past_window_are_not_considered(self):
        data = [[None] for _ in range(30)]
        data[4] = ["only"]
        data[24] = ["a", "b", "c", "d", "e"]
        doc = _doc(data)
        assert detect_header_row(doc, "Sheet1") == 5

    def test_window_comes_from_settings(self):
        data = [[None] for _ in range(30)]
        data[4] = ["only"]
        data[24] = ["a", "b", "c", "d", "e"]
        doc = _doc(data)
        assert detect_header_row(doc, "Sheet1", MergeSettings(header_scan_rows=25)) == 25

    def test_mixed_cell_types_never_raise(self):
        rich = CellRichText("x", TextBlock(InlineFont(i=True), "y"))
        doc = _doc([
            [datetime(2024, 1, 1), True, 0],
            ["=1+1", rich, 3.5, "z", "w"],
        ])
        result = detect_header_row(doc, "Sheet1")
        assert 1 <= result <= 20
        assert result == 2


class TestRawTopRows:
    def test_rows_are_cut_to_ten_columns(self):
        doc = _doc([[f"c{i}" for i in range(12)], ["x"]])
        rows = get_raw_top_rows(doc, "Sheet1")
        assert len(rows) == 20
        assert rows[0] == [f"c{i}" for i in range(10)]
        assert rows[1][0] == "x"
        assert rows[5] == []

    def test_custom_limit(self):
        doc = _doc([["a"], ["b"], ["c"]])
        rows = get_raw_top_rows(doc, "Sheet1", limit=2)
        assert rows == [["a"], ["b"]]

    def test_missing_sheet_is_empty(self):
        assert get_raw_top_rows(_doc([["a"]]), "Nope") == []
