"""
sheetmerge/schema.py — Name-based column mapping between documents.

Public API:
  build_header_map(sheet, header_row)          -> HeaderMap
  find_column(names, wanted)                   -> int | None
  route_columns(secondary, main)               -> ColumnRouting

A column takes part in a map only if its header text is non-empty after
trimming. Maps are rebuilt on every merge call; header rows can change
between runs.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .cells import normalize_header
from .io import SheetView


@dataclass
class HeaderMap:
    """
    lookup: trimmed header text AND its lowercase form -> 1-based column.
    names:  1-based column -> trimmed header text (original case).
    """
    header_row: int
    lookup: Dict[str, int] = field(default_factory=dict)
    names: Dict[int, str] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.names)

    def resolve(self, name: str) -> Optional[int]:
        """Exact (trimmed) match first, then lowercase."""
        text = (name or "").strip()
        if not text:
            return None
        if text in self.lookup:
            return self.lookup[text]
        return self.lookup.get(normalize_header(text))


def build_header_map(sheet: SheetView, header_row: int) -> HeaderMap:
    header_map = HeaderMap(header_row=header_row)
    for cell_col, cell in enumerate(sheet.get_row(header_row), 1):
        text = sheet.cell_text(cell)
        if not text:
            continue
        header_map.names[cell_col] = text
        header_map.lookup[text] = cell_col
        header_map.lookup[normalize_header(text)] = cell_col
    return header_map


def find_column(names: Dict[int, str], wanted: str) -> Optional[int]:
    """
    Column whose header equals `wanted` exactly (trimmed), else the first
    case-insensitive match. None if no header matches.

    When a header is repeated the leftmost column wins; a scan that keeps
    overwriting its answer would pick the rightmost one instead.
    """
    target = (wanted or "").strip()
    if not target:
        return None
    for col, text in sorted(names.items()):
        if text == target:
            return col
    lowered = normalize_header(target)
    for col, text in sorted(names.items()):
        if normalize_header(text) == lowered:
            return col
    return None


@dataclass
class ColumnRouting:
    """Secondary column -> main column, plus headers with no main counterpart."""
    targets: Dict[int, int] = field(default_factory=dict)
    unmatched: List[str] = field(default_factory=list)


def route_columns(secondary: HeaderMap, main: HeaderMap) -> ColumnRouting:
    routing = ColumnRouting()
    for col, text in sorted(secondary.names.items()):
        dest = main.resolve(text)
        if dest is None:
            routing.unmatched.append(text)
        else:
            routing.targets[col] = dest
    return routing
