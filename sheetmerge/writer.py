"""
sheetmerge/writer.py — Applies an AppendPlan to the main worksheet.

Values are copied as-is, with no type coercion; text starting with "="
stays text. None values are never written: writing None registers a
phantom cell that inflates ws.max_row for the next document's
insertion-point scan. Empty source cells still pass their style along
when copy_style is on, provided the row writes at least one value.

Styles are cloned, never shared. openpyxl copies style objects by
serialising them to XML and back, so the destination gets its own Font,
Fill, Border and so on.
"""
from __future__ import annotations

from copy import copy
from dataclasses import dataclass
from typing import Any, Iterable, Sequence, Tuple

from .cells import is_occupied
from .dedup import KeyTracker
from .io import SheetView
from .planner import AppendPlan


@dataclass
class AppendOutcome:
    appended: int = 0
    skipped: int = 0
    empty: int = 0          # rows whose values all sat in unmatched columns


def clone_style(source: Any, target: Any) -> bool:
    """Deep-copy the style of `source` onto `target`. False if source has none."""
    if not getattr(source, "has_style", False):
        return False
    target.font = copy(source.font)
    target.fill = copy(source.fill)
    target.border = copy(source.border)
    target.alignment = copy(source.alignment)
    target.protection = copy(source.protection)
    target.number_format = source.number_format
    return True


def write_row(
    main_sheet: SheetView,
    row_num: int,
    cells: Sequence[Any],
    plan: AppendPlan,
    copy_style: bool = False,
) -> int:
    """
    Copy one secondary row into main row `row_num`, routing each cell by
    column name. Orphan columns are dropped. Returns the number of cells
    that received a non-empty value; when that is 0 the main sheet is left
    untouched, styles included.
    """
    routed = [
        (plan.targets[col], cell)
        for col, cell in enumerate(cells, 1)
        if col in plan.targets
    ]
    written = sum(1 for _, cell in routed if is_occupied(cell.value))
    if not written:
        return 0

    for dest_col, cell in routed:
        if cell.value is not None:
            main_sheet.set_value(row_num, dest_col, cell.value)
        if copy_style and getattr(cell, "has_style", False):
            clone_style(cell, main_sheet.target_cell(row_num, dest_col))
    return written


def append_rows(
    main_sheet: SheetView,
    source_sheet: SheetView,
    plan: AppendPlan,
    tracker: KeyTracker,
    copy_style: bool = False,
) -> AppendOutcome:
    """
    Append every data row of the secondary sheet (rows below its header
    that hold a value), skipping rows whose key the tracker has seen.
    """
    outcome = AppendOutcome()
    for _, cells in data_rows(source_sheet, plan.source_header_row):
        if plan.dedup:
            key = source_sheet.text_in(cells, plan.key_column)
            if not tracker.offer(key):
                outcome.skipped += 1
                continue
        written = write_row(main_sheet, plan.start_row + outcome.appended, cells, plan, copy_style)
        if written == 0:
            # nothing landed; the next row reuses the slot to keep rows contiguous
            outcome.empty += 1
            continue
        outcome.appended += 1
    return outcome


def data_rows(sheet: SheetView, header_row: int) -> Iterable[Tuple[int, Sequence[Any]]]:
    for row_num, cells in sheet.iter_rows(min_row=header_row + 1):
        if sheet.row_has_values(cells):
            yield row_num, cells
