from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class AppError(Exception):
    """
    User-facing error with a short code and structured details.
    Raise AppError from sheetmerge modules; the merge engine turns it into a
    failed MergeResult (main stage) or a skipped file (secondary stage).
    """
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        if self.details:
            return f"{self.code}: {self.message} ({self.details})"
        return f"{self.code}: {self.message}"


# ── Error codes (keep stable for tests and callers) ──────────────────────────

MAIN_FILE_NOT_FOUND = "MAIN_FILE_NOT_FOUND"
FILE_NOT_FOUND      = "FILE_NOT_FOUND"
SHEET_NOT_FOUND     = "SHEET_NOT_FOUND"
SOURCE_READ_FAILED  = "SOURCE_READ_FAILED"
SAVE_FAILED         = "SAVE_FAILED"
BAD_HEADER_ROW      = "BAD_HEADER_ROW"
BAD_OPTION          = "BAD_OPTION"
BAD_CONFIG          = "BAD_CONFIG"
MERGE_CANCELLED     = "MERGE_CANCELLED"
DUPLICATE_FILE_ID   = "DUPLICATE_FILE_ID"


# ── Friendly message lookup ───────────────────────────────────────────────────

def friendly_message(e: AppError) -> str:
    """
    Return a plain-English one-liner suitable for display next to the merge log.
    Never exposes raw tracebacks or internal code paths.
    """
    code = e.code
    msg  = e.message or ""
    details = e.details or {}

    if code == MAIN_FILE_NOT_FOUND:
        return "Main file not found. Pick one of the uploaded files as the main file."

    if code == FILE_NOT_FOUND:
        fid = details.get("file_id", "")
        suffix = f" ({fid})" if fid else ""
        return f"That file is no longer part of this merge{suffix}."

    if code == SHEET_NOT_FOUND:
        available = details.get("available", [])
        if available:
            return f"Sheet not found. Available sheets: {', '.join(available)}.\n({msg})"
        return f"Sheet not found. Check that the sheet name is correct.\n({msg})"

    if code == SOURCE_READ_FAILED:
        name = details.get("name", "")
        suffix = f" ({name})" if name else ""
        return f"Could not read the spreadsheet{suffix}. Check that it is a valid XLSX file.\n({msg})"

    if code == SAVE_FAILED:
        return f"Could not produce the merged file.\n({msg})"

    if code == BAD_HEADER_ROW:
        return f"Header row must be a number (1 or higher).\n({msg})"

    if code == BAD_OPTION:
        return f"Invalid merge option.\n({msg})"

    if code == BAD_CONFIG:
        return f"Invalid setting. Check your environment variables or settings file.\n({msg})"

    if code == MERGE_CANCELLED:
        return "The merge was cancelled. No merged file was produced."

    if code == DUPLICATE_FILE_ID:
        fid = details.get("file_id", "")
        return f"A file with id {fid!r} is already part of this merge."

    # Fallback: first line only, never a traceback
    clean = msg.splitlines()[0] if msg else "An unexpected error occurred."
    return clean
