from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

from .errors import AppError, BAD_OPTION


# ---- Merge inputs ----

@dataclass
class UploadedFile:
    """
    A user-supplied workbook plus its merge-time selections.
    data holds the raw bytes; path is used when data is empty.
    Cached sheet names and previews are for display only; the merge
    always re-reads the workbook from its bytes.
    """
    id: str
    name: str = ""
    data: bytes = b""
    path: str = ""
    is_main: bool = False
    header_row_index: int = 1             # 1-based
    selected_sheet: str = ""
    sheet_names: List[str] = field(default_factory=list)
    raw_top_rows: List[List[str]] = field(default_factory=list)
    headers: List[str] = field(default_factory=list)
    preview_rows: List[List[str]] = field(default_factory=list)


MatchType = Literal["exact", "fuzzy"]


@dataclass
class MergeOptions:
    """
    Settings for one merge call.
    Blank key_column disables deduplication. match_type "fuzzy" is accepted
    but keys are always compared exactly; include_unmatched does not add
    columns to the main sheet.
    """
    main_file_id: str
    secondary_file_ids: List[str] = field(default_factory=list)
    key_column: str = ""
    match_type: MatchType = "exact"
    fuzzy_threshold: float = 0.4
    copy_style: bool = False
    include_unmatched: bool = False

    @property
    def key(self) -> str:
        return (self.key_column or "").strip()

    def validate(self) -> None:
        if self.match_type not in ("exact", "fuzzy"):
            raise AppError(BAD_OPTION, f"match_type must be 'exact' or 'fuzzy' (got {self.match_type!r})")
        try:
            threshold = float(self.fuzzy_threshold)
        except (TypeError, ValueError):
            raise AppError(BAD_OPTION, f"fuzzy_threshold must be a number (got {self.fuzzy_threshold!r})")
        if not 0.0 <= threshold <= 1.0:
            raise AppError(BAD_OPTION, f"fuzzy_threshold must be between 0 and 1 (got {threshold})")

    # ---------- Serialization (camelCase option schema) ----------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mainFileId": self.main_file_id,
            "secondaryFileIds": list(self.secondary_file_ids),
            "keyColumn": self.key_column,
            "matchType": self.match_type,
            "fuzzyThreshold": self.fuzzy_threshold,
            "copyStyle": self.copy_style,
            "includeUnmatched": self.include_unmatched,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MergeOptions":
        return cls(
            main_file_id=data.get("mainFileId", ""),
            secondary_file_ids=list(data.get("secondaryFileIds", [])),
            key_column=data.get("keyColumn", "") or "",
            match_type=data.get("matchType", "exact"),
            fuzzy_threshold=data.get("fuzzyThreshold", 0.4),
            copy_style=bool(data.get("copyStyle", False)),
            include_unmatched=bool(data.get("includeUnmatched", False)),
        )


# ---- Merge reporting ----

@dataclass
class SheetPreview:
    headers: List[str] = field(default_factory=list)
    rows: List[List[str]] = field(default_factory=list)


@dataclass
class FileMergeResult:
    """Outcome of appending one secondary file."""
    file_id: str
    name: str
    sheet_name: str
    header_row: int
    rows_appended: int = 0
    duplicates_skipped: int = 0
    start_row: Optional[int] = None
    unmatched_columns: List[str] = field(default_factory=list)
    error_code: Optional[str] = None
    error_message: Optional[str] = None


@dataclass
class MergeResult:
    """
    Returned by engine.merge_workbooks. Never raised; failures are encoded
    in success, error_code and the logs trail.
    """
    success: bool
    logs: List[str] = field(default_factory=list)
    output: Optional[bytes] = None
    merged_headers: Optional[List[str]] = None
    merged_rows: Optional[List[List[str]]] = None
    files: List[FileMergeResult] = field(default_factory=list)
    error_code: Optional[str] = None      # set when success is False

    @property
    def has_errors(self) -> bool:
        return any(f.error_code for f in self.files)

    @property
    def rows_appended(self) -> int:
        return sum(f.rows_appended for f in self.files)

    @property
    def duplicates_skipped(self) -> int:
        return sum(f.duplicates_skipped for f in self.files)
