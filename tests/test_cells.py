"""Tests for sheetmerge.cells — safe text extraction, occupancy, header normalization."""
from __future__ import annotations

from datetime import date, datetime

from openpyxl.cell.rich_text import CellRichText, TextBlock
from openpyxl.cell.text import InlineFont

from sheetmerge.cells import get_safe_text, is_occupied, normalize_header


class _Exploding:
    def __str__(self):
        raise RuntimeError("boom")

    def __repr__(self):
        raise RuntimeError("boom")


class _WithText:
    text = "  from text attr "


# ══════════════════════════════════════════════════════════════════════════════
# get_safe_text
# ══════════════════════════════════════════════════════════════════════════════

class TestGetSafeText:
    def test_none_is_empty(self):
        assert get_safe_text(None) == ""

    def test_strings_are_trimmed(self):
        assert get_safe_text("  Alice  ") == "Alice"
        assert get_safe_text("") == ""

    def test_numbers_and_booleans_stringify(self):
        assert get_safe_text(1) == "1"
        assert get_safe_text(2.5) == "2.5"
        assert get_safe_text(0) == "0"
        assert get_safe_text(True) == "True"

    def test_rich_text_uses_plain_projection(self):
        rich = CellRichText("plain ", TextBlock(InlineFont(b=True), "bold"))
        assert get_safe_text(rich) == "plain bold"

    def test_dates_render_iso(self):
        assert get_safe_text(datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02T03:04:05"
        assert get_safe_text(date(2024, 1, 2)) == "2024-01-02"

    def test_text_attribute_is_used(self):
        assert get_safe_text(_WithText()) == "from text attr"

    def test_structured_fallback_is_capped_at_50_chars(self):
        value = {"key": "x" * 100}
        text = get_safe_text(value)
        assert len(text) == 50
        assert text.startswith('{"key": "xxx')

    def test_malformed_value_degrades_to_empty(self):
        assert get_safe_text(_Exploding()) == ""


# ══════════════════════════════════════════════════════════════════════════════
# is_occupied / normalize_header
# ══════════════════════════════════════════════════════════════════════════════

def test_is_occupied_none_and_empty_string():
    assert not is_occupied(None)
    assert not is_occupied("")


def test_is_occupied_truthy_values():
    assert is_occupied(" ")
    assert is_occupied(0)
    assert is_occupied(False)
    assert is_occupied("=SUM(A1:A3)")


def test_normalize_header_trims_and_lowercases():
    assert normalize_header("  E-Mail ") == "e-mail"
    assert normalize_header(None) == ""
    assert normalize_header(2024) == "2024"
