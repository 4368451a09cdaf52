from __future__ import annotations

from typing import Any

from openpyxl.utils import get_column_letter

from .errors import AppError, BAD_HEADER_ROW, BAD_OPTION


def col_index_to_letters(n: int) -> str:
    """Column letters for a 1-based index (1->A), as shown in merge trace lines."""
    if n is None or n < 1:
        raise AppError(BAD_OPTION, f"Bad column index: {n}")
    return get_column_letter(n)


def parse_header_row(value: Any) -> int:
    """
    Parse a user-supplied 1-based header row ("3", 3).
    Raises AppError(BAD_HEADER_ROW) for blanks, non-numbers and values < 1.
    """
    if isinstance(value, bool):
        raise AppError(BAD_HEADER_ROW, f"Header row must be a number (got {value!r})")
    if isinstance(value, int):
        n = value
    else:
        s = str(value if value is not None else "").strip()
        if not s:
            raise AppError(BAD_HEADER_ROW, "Header row is blank")
        try:
            n = int(s)
        except ValueError:
            raise AppError(BAD_HEADER_ROW, f"Header row must be a number (got '{value}')")
    if n < 1:
        raise AppError(BAD_HEADER_ROW, f"Header row must be >= 1 (got {n})")
    return n
