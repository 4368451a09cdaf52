"""
sheetmerge/planner.py — Per-document append plan.

The insertion point is computed ONCE per secondary document, from the main
sheet as it stands when that document starts. Rows accepted from the
document then take start_row, start_row + 1, ... with no rescans, so two
documents can never collide and no blank row opens between them.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .dedup import KeyTracker
from .io import SheetView
from .landing import find_insertion_row
from .schema import HeaderMap, route_columns


@dataclass(frozen=True)
class AppendPlan:
    start_row: int                  # 1-based row in the main sheet
    source_header_row: int          # 1-based header row in the secondary sheet
    targets: Dict[int, int]         # secondary column -> main column
    unmatched: Tuple[str, ...]      # secondary headers with no main column
    key_column: Optional[int]       # secondary key column, None = no dedup here

    @property
    def dedup(self) -> bool:
        return self.key_column is not None


def build_plan(
    main_sheet: SheetView,
    main_map: HeaderMap,
    source_map: HeaderMap,
    tracker: KeyTracker,
) -> AppendPlan:
    routing = route_columns(source_map, main_map)
    return AppendPlan(
        start_row=find_insertion_row(main_sheet, main_map.header_row),
        source_header_row=source_map.header_row,
        targets=dict(routing.targets),
        unmatched=tuple(routing.unmatched),
        key_column=tracker.secondary_column(source_map),
    )
