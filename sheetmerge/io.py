"""
sheetmerge/io.py — Spreadsheet document capability over openpyxl.

SpreadsheetDocument is the only place that touches the workbook codec:
load-from-bytes, sheet listing, worksheet lookup and write-to-bytes.
SheetView wraps one worksheet with the read helpers the merge stages need.

Reads are bounded by the sheet's current dimensions (max_row/max_column), so
a scan never registers cells past the used range and never inflates
ws.max_row for a later insertion-point scan.
"""
from __future__ import annotations

import os
from io import BytesIO
from typing import Any, Iterator, List, Optional, Sequence, Tuple

from openpyxl import Workbook, load_workbook
from openpyxl.cell.cell import Cell
from openpyxl.worksheet.worksheet import Worksheet

from .cells import get_safe_text, is_occupied
from .errors import AppError, SAVE_FAILED, SHEET_NOT_FOUND, SOURCE_READ_FAILED


RowCells = Tuple[Cell, ...]


class SheetView:
    """
    One worksheet plus (for documents loaded with formulas kept) its cached
    values twin, used to display formula cells by their last computed result.
    """

    def __init__(self, ws: Worksheet, cached_ws: Optional[Worksheet] = None) -> None:
        self.ws = ws
        self._cached_ws = cached_ws

    @property
    def name(self) -> str:
        return self.ws.title

    @property
    def max_row(self) -> int:
        return self.ws.max_row or 0

    @property
    def max_column(self) -> int:
        return self.ws.max_column or 0

    def iter_rows(
        self,
        min_row: int = 1,
        max_row: Optional[int] = None,
    ) -> Iterator[Tuple[int, RowCells]]:
        """
        Yield (row_number, cells) for min_row..max_row, clipped to the used range.
        Every yielded tuple spans columns 1..max_column, empty cells included.
        """
        upper = self.max_row if max_row is None else min(max_row, self.max_row)
        lower = max(min_row, 1)
        if upper < lower or self.max_column < 1:
            return
        for offset, cells in enumerate(
            self.ws.iter_rows(min_row=lower, max_row=upper, max_col=self.max_column)
        ):
            yield lower + offset, cells

    def get_row(self, row: int) -> RowCells:
        for _, cells in self.iter_rows(min_row=row, max_row=row):
            return cells
        return ()

    def cell_text(self, cell: Any) -> str:
        """Safe display text for a cell; formula cells resolve to their cached result."""
        try:
            if cell is None:
                return ""
            if getattr(cell, "data_type", None) == "f":
                if self._cached_ws is None:
                    return ""
                cached = self._cached_ws.cell(row=cell.row, column=cell.column).value
                return get_safe_text(cached)
            return get_safe_text(cell.value)
        except Exception:
            return ""

    def text_in(self, cells: Sequence[Any], column: int) -> str:
        """Safe text of the 1-based column within an already-read row."""
        if column < 1 or column > len(cells):
            return ""
        return self.cell_text(cells[column - 1])

    def text_at(self, row: int, column: int) -> str:
        return self.text_in(self.get_row(row), column)

    @staticmethod
    def row_has_values(cells: Sequence[Any]) -> bool:
        return any(is_occupied(getattr(c, "value", None)) for c in cells)

    def target_cell(self, row: int, column: int) -> Cell:
        """Destination cell for a write. Creates the cell; use only for writes."""
        return self.ws.cell(row=row, column=column)

    def set_value(self, row: int, column: int, value: Any) -> Cell:
        """
        Store a literal value. openpyxl turns any str starting with "=" into a
        formula on assignment; such text is put back to a plain string.
        """
        cell = self.target_cell(row, column)
        cell.value = value
        if isinstance(value, str) and value.startswith("="):
            cell.data_type = "s"
        return cell


class SpreadsheetDocument:
    """
    An opened workbook. keep_formulas=True keeps formula cells as formulas
    (so they survive a save) and loads a data_only twin for their cached
    results; keep_formulas=False exposes cached results directly.
    """

    def __init__(
        self,
        workbook: Workbook,
        name: str = "",
        cached_workbook: Optional[Workbook] = None,
    ) -> None:
        self.workbook = workbook
        self.name = name
        self._cached_workbook = cached_workbook

    @classmethod
    def from_bytes(cls, data: bytes, name: str = "", keep_formulas: bool = False) -> "SpreadsheetDocument":
        try:
            wb = load_workbook(BytesIO(data), data_only=not keep_formulas, rich_text=True)
            cached = load_workbook(BytesIO(data), data_only=True) if keep_formulas else None
        except Exception as e:
            raise AppError(
                SOURCE_READ_FAILED,
                f"Failed to read workbook: {e}",
                {"name": name},
            )
        return cls(wb, name=name, cached_workbook=cached)

    @classmethod
    def from_path(cls, path: str, keep_formulas: bool = False) -> "SpreadsheetDocument":
        try:
            with open(path, "rb") as f:
                data = f.read()
        except OSError as e:
            raise AppError(
                SOURCE_READ_FAILED,
                f"Failed to read file: {e}",
                {"name": os.path.basename(path), "path": path},
            )
        return cls.from_bytes(data, name=os.path.basename(path), keep_formulas=keep_formulas)

    @property
    def sheet_names(self) -> List[str]:
        return list(self.workbook.sheetnames)

    def get_worksheet(self, sheet_name: str) -> Optional[SheetView]:
        if sheet_name not in self.workbook.sheetnames:
            return None
        cached_ws = None
        if self._cached_workbook is not None and sheet_name in self._cached_workbook.sheetnames:
            cached_ws = self._cached_workbook[sheet_name]
        return SheetView(self.workbook[sheet_name], cached_ws)

    def require_worksheet(self, sheet_name: str) -> SheetView:
        view = self.get_worksheet(sheet_name)
        if view is None:
            raise AppError(
                SHEET_NOT_FOUND,
                f"Sheet '{sheet_name}' not found in {self.name or 'workbook'}",
                {"sheet": sheet_name, "available": self.sheet_names},
            )
        return view

    def to_bytes(self) -> bytes:
        buf = BytesIO()
        try:
            self.workbook.save(buf)
        except Exception as e:
            raise AppError(SAVE_FAILED, f"Failed to write workbook: {e}", {"name": self.name})
        return buf.getvalue()


def load_workbook_info(data: bytes, name: str = "") -> Tuple[SpreadsheetDocument, List[str]]:
    """Open a workbook and list its sheet names."""
    doc = SpreadsheetDocument.from_bytes(data, name=name)
    return doc, doc.sheet_names
