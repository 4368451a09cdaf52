import pytest

from sheetmerge.errors import AppError, BAD_HEADER_ROW, BAD_OPTION
from sheetmerge.parsing import col_index_to_letters, parse_header_row


def test_col_index_to_letters_basic():
    assert col_index_to_letters(1) == "A"
    assert col_index_to_letters(26) == "Z"
    assert col_index_to_letters(27) == "AA"
    assert col_index_to_letters(703) == "AAA"


@pytest.mark.parametrize("bad", [0, -2])
def test_col_index_rejects_non_positive(bad):
    with pytest.raises(AppError) as ei:
        col_index_to_letters(bad)
    assert ei.value.code == BAD_OPTION


@pytest.mark.parametrize("value, expected", [(1, 1), (7, 7), ("3", 3), (" 12 ", 12)])
def test_parse_header_row_accepts(value, expected):
    assert parse_header_row(value) == expected


@pytest.mark.parametrize("value", [None, "", "  ", "abc", "2.5", 0, -1, "0", True])
def test_parse_header_row_rejects(value):
    with pytest.raises(AppError) as ei:
        parse_header_row(value)
    assert ei.value.code == BAD_HEADER_ROW
