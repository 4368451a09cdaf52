"""
tests/test_landing.py

Insertion-point scan: appended rows start right after the last row that
holds a value, regardless of styled-but-empty trailing rows.
"""
from __future__ import annotations

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill

from sheetmerge.io import SheetView
from sheetmerge.landing import find_insertion_row, find_last_data_row, last_data_row_in


def _sheet(data) -> SheetView:
    wb = Workbook()
    ws = wb.active
    for r, row in enumerate(data, 1):
        for c, v in enumerate(row, 1):
            if v is not None:
                ws.cell(row=r, column=c, value=v)
    return SheetView(ws)


# ══════════════════════════════════════════════════════════════════════════════
# last_data_row_in — plain values
# ══════════════════════════════════════════════════════════════════════════════

class TestLastDataRowIn:
    def test_empty_map_returns_zero(self):
        assert last_data_row_in({}) == 0

    def test_skips_trailing_empty_rows(self):
        rows = {1: ["h"], 2: ["v", None], 3: [None, ""], 4: [None]}
        assert last_data_row_in(rows) == 2

    def test_zero_and_false_are_data(self):
        assert last_data_row_in({1: ["h"], 2: [0]}) == 2
        assert last_data_row_in({1: ["h"], 2: [False]}) == 2


# ══════════════════════════════════════════════════════════════════════════════
# Worksheet scans
# ══════════════════════════════════════════════════════════════════════════════

class TestFindInsertionRow:
    def test_appends_after_last_data_row(self):
        sheet = _sheet([["ID"], [1], [2]])
        assert find_last_data_row(sheet) == 3
        assert find_insertion_row(sheet, 1) == 4

    def test_styled_empty_rows_do_not_count(self):
        sheet = _sheet([["ID", "Name"], [1, "a"], [2, "b"]])
        for r in range(4, 11):
            sheet.ws.cell(row=r, column=1).font = Font(bold=True)
            sheet.ws.cell(row=r, column=2).fill = PatternFill(fill_type="solid", fgColor="FFFFFF00")
        assert sheet.max_row == 10
        assert find_insertion_row(sheet, 1) == 4

    def test_header_only_sheet_inserts_below_header(self):
        sheet = _sheet([["Report"], [None], ["ID", "Name"]])
        assert find_insertion_row(sheet, 3) == 4

    def test_never_lands_above_header(self):
        sheet = _sheet([["Report"]])
        assert find_insertion_row(sheet, 5) == 6

    def test_gap_inside_data_is_kept(self):
        sheet = _sheet([["ID"], [1], [None], [3]])
        assert find_insertion_row(sheet, 1) == 5

    def test_empty_sheet(self):
        sheet = _sheet([])
        assert find_last_data_row(sheet) == 0
        assert find_insertion_row(sheet, 1) == 2
