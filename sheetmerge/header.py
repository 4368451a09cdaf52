"""
sheetmerge/header.py — Header row detection and raw top-row preview.

detect_header_row picks the densest row among the first rows of a sheet:
title banners and spacer rows above the real header have fewer filled cells.
"""
from __future__ import annotations

from typing import List, Optional

from .config import MergeSettings
from .io import SheetView, SpreadsheetDocument


DEFAULT_SCAN_ROWS = 20


def score_row(sheet: SheetView, cells) -> int:
    """Number of cells whose safe text is non-empty."""
    return sum(1 for cell in cells if len(sheet.cell_text(cell)) > 0)


def detect_header_row_in_sheet(sheet: Optional[SheetView], scan_rows: int = DEFAULT_SCAN_ROWS) -> int:
    """
    Return the 1-based row in 1..scan_rows with the most non-empty cells.
    Ties keep the lowest row. Missing or empty sheets return 1.
    """
    if sheet is None:
        return 1

    best_row = 1
    best_score = -1
    for row_num, cells in sheet.iter_rows(min_row=1, max_row=scan_rows):
        score = score_row(sheet, cells)
        if score > best_score:
            best_score = score
            best_row = row_num
    return best_row


def detect_header_row(
    document: SpreadsheetDocument,
    sheet_name: str,
    settings: Optional[MergeSettings] = None,
) -> int:
    scan_rows = settings.header_scan_rows if settings else DEFAULT_SCAN_ROWS
    return detect_header_row_in_sheet(document.get_worksheet(sheet_name), scan_rows)


def get_raw_top_rows(
    document: SpreadsheetDocument,
    sheet_name: str,
    limit: Optional[int] = None,
    settings: Optional[MergeSettings] = None,
) -> List[List[str]]:
    """
    First `limit` rows as safe text, each cut to the first few columns,
    for picking the header row by hand. Rows past the used range come back
    empty so the list always has `limit` entries when the sheet exists.
    """
    settings = settings or MergeSettings()
    limit = limit if limit is not None else settings.raw_preview_rows
    max_cols = settings.raw_preview_cols

    sheet = document.get_worksheet(sheet_name)
    if sheet is None:
        return []

    rows: List[List[str]] = [[] for _ in range(limit)]
    for row_num, cells in sheet.iter_rows(min_row=1, max_row=limit):
        rows[row_num - 1] = [sheet.cell_text(c) for c in cells[:max_cols]]
    return rows
