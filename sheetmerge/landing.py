"""
sheetmerge/landing.py — Where appended rows land.

The nominal row count (ws.max_row) over-counts when trailing rows carry
styles but no values. The insertion point is one past the last row that
actually holds a value, and never above the row right after the header.

Public API:
  find_last_data_row(sheet)                    -> int  (0 if no data)
  find_insertion_row(sheet, header_row)        -> int  (1-based)
  last_data_row_in(rows)                       -> int  (pure, plain values)
"""
from __future__ import annotations

from typing import Any, Dict, Sequence

from .cells import is_occupied
from .io import SheetView


RowValues = Dict[int, Sequence[Any]]


def last_data_row_in(rows: RowValues) -> int:
    """
    Highest row number in `rows` holding at least one occupied value,
    scanning backward from the largest row number. 0 if none.
    """
    for row_num in sorted(rows, reverse=True):
        if any(is_occupied(v) for v in rows[row_num]):
            return row_num
    return 0


def find_last_data_row(sheet: SheetView) -> int:
    rows: RowValues = {}
    for row_num, cells in sheet.iter_rows(min_row=1):
        rows[row_num] = [c.value for c in cells]
    return last_data_row_in(rows)


def find_insertion_row(sheet: SheetView, header_row: int) -> int:
    insert_at = find_last_data_row(sheet) + 1
    if insert_at <= header_row:
        insert_at = header_row + 1
    return insert_at
