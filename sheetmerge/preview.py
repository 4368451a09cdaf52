from __future__ import annotations

from typing import List, Optional

from .config import MergeSettings
from .io import SheetView, SpreadsheetDocument
from .models import SheetPreview


DEFAULT_PREVIEW_ROWS = 500


def sheet_preview(
    sheet: SheetView,
    header_row: int,
    limit: int = DEFAULT_PREVIEW_ROWS,
) -> SheetPreview:
    """
    Headers from `header_row` (blank header -> "Col N") plus up to `limit`
    data rows below it, as safe text. Rows without any value are skipped;
    each row is padded or cut to the header width.
    """
    header_cells = sheet.get_row(header_row)
    texts = [sheet.cell_text(c) for c in header_cells]
    while texts and not texts[-1]:
        texts.pop()
    headers = [t or f"Col {i}" for i, t in enumerate(texts, 1)]

    rows: List[List[str]] = []
    width = len(headers)
    for _, cells in sheet.iter_rows(min_row=header_row + 1):
        if len(rows) >= limit:
            break
        if not sheet.row_has_values(cells):
            continue
        rows.append([sheet.text_in(cells, col) for col in range(1, width + 1)])

    return SheetPreview(headers=headers, rows=rows)


def get_preview_data(
    document: SpreadsheetDocument,
    sheet_name: str,
    header_row: int,
    settings: Optional[MergeSettings] = None,
) -> SheetPreview:
    sheet = document.get_worksheet(sheet_name)
    if sheet is None:
        return SheetPreview()
    limit = settings.preview_row_limit if settings else DEFAULT_PREVIEW_ROWS
    return sheet_preview(sheet, header_row, limit)
