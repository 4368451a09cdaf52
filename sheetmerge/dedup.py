"""
sheetmerge/dedup.py — Duplicate-key tracking across the whole merge.

One KeyTracker lives for one merge call. It is seeded from the main sheet's
key column and grows as secondary rows are accepted, so a key seen in any
earlier document (or earlier in the same document) blocks later rows.
Empty keys never block a row and are never recorded.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Set

from .io import SheetView
from .schema import HeaderMap, find_column


@dataclass
class KeyTracker:
    key_column: str = ""
    main_column: Optional[int] = None
    seen: Set[str] = field(default_factory=set)

    @property
    def requested(self) -> bool:
        """A key column was configured (it may still be missing from main)."""
        return bool(self.key_column.strip())

    @property
    def active(self) -> bool:
        return self.requested and self.main_column is not None

    def seed(self, values: Iterable[str]) -> int:
        for value in values:
            key = (value or "").strip()
            if key:
                self.seen.add(key)
        return len(self.seen)

    def offer(self, value: str) -> bool:
        """
        True if the row carrying `value` should be appended. Accepted
        non-empty keys are recorded immediately.
        """
        key = (value or "").strip()
        if not key:
            return True
        if key in self.seen:
            return False
        self.seen.add(key)
        return True

    def secondary_column(self, header_map: HeaderMap) -> Optional[int]:
        if not self.active:
            return None
        return find_column(header_map.names, self.key_column)


def build_key_tracker(key_column: str, main_map: HeaderMap) -> KeyTracker:
    key = (key_column or "").strip()
    return KeyTracker(key_column=key, main_column=main_map.resolve(key) if key else None)


def main_key_values(sheet: SheetView, header_row: int, column: int) -> Iterable[str]:
    """Key text of every data row below the header row."""
    for _, cells in sheet.iter_rows(min_row=header_row + 1):
        if not sheet.row_has_values(cells):
            continue
        yield sheet.text_in(cells, column)
