"""
sheetmerge/cells.py — Cell value helpers shared by every merge stage.

  get_safe_text(value)   -> str   total: never raises, malformed content -> ""
  is_occupied(value)     -> bool  single emptiness definition for row scans
  normalize_header(text) -> str   trim + lowercase, used at map build and lookup
"""
from __future__ import annotations

import json
from datetime import date, datetime, time, timedelta
from typing import Any

from openpyxl.cell.rich_text import CellRichText


FALLBACK_TEXT_LENGTH = 50


def get_safe_text(value: Any) -> str:
    """
    Convert any cell value to a display string without raising.

    Primitives stringify directly, rich text yields its plain-text projection,
    dates render as ISO strings and anything else falls back to the first 50
    characters of its JSON form.
    """
    try:
        if value is None:
            return ""
        if isinstance(value, (str, int, float, bool)):
            return str(value).strip()
        if isinstance(value, CellRichText):
            return str(value).strip()
        if isinstance(value, (datetime, date, time)):
            return value.isoformat()
        if isinstance(value, timedelta):
            return str(value)
        text = getattr(value, "text", None)
        if text:
            return str(text).strip()
        return json.dumps(value, default=str)[:FALLBACK_TEXT_LENGTH]
    except Exception:
        return ""


def is_occupied(value: Any) -> bool:
    """
    A cell holds data unless its value is None or the empty string.
    """
    if value is None:
        return False
    if isinstance(value, str) and value == "":
        return False
    return True


def normalize_header(text: Any) -> str:
    return get_safe_text(text).lower()
