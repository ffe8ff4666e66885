"""Unit tests for spoken number conversion."""

import pytest

from invoice_capture.voice.numbers import ordinal_suffix, words_to_numbers


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("gst eighteen percent", "gst 18 percent"),
        ("remove item two", "remove item 2"),
        ("two thousand twenty five", "2025"),
        ("one hundred and fifty", "150"),
        ("twenty-five", "25"),
        ("twelve point five", "12.5"),
        ("eleven lakh", "1100000"),
        ("three million", "3000000"),
    ],
)
def test_cardinals(text: str, expected: str) -> None:
    """Test cardinal number words become digits."""
    assert words_to_numbers(text) == expected


def test_consecutive_digits_stay_separate() -> None:
    """Test that digit-by-digit dictation is not summed."""
    assert words_to_numbers("invoice number nine eight seven six") == "invoice number 9 8 7 6"


def test_paired_year() -> None:
    """Test that a year spoken in pairs becomes two numbers."""
    assert words_to_numbers("twenty twenty five") == "20 25"


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("first", "1st"),
        ("second item", "2nd item"),
        ("twenty first", "21st"),
        ("fifteenth of july", "15th of july"),
        ("thirtieth", "30th"),
    ],
)
def test_ordinals(text: str, expected: str) -> None:
    """Test ordinal words become suffixed digits."""
    assert words_to_numbers(text) == expected


def test_and_between_numbers_is_kept() -> None:
    """Test that 'and' only joins inside a compound number."""
    assert words_to_numbers("two and three") == "2 and 3"


def test_other_words_untouched() -> None:
    """Test that words containing number words are left alone."""
    assert words_to_numbers("someone often gone") == "someone often gone"
    assert words_to_numbers("Customer Ravi Kumar") == "Customer Ravi Kumar"


def test_case_insensitive() -> None:
    """Test capitalized number words."""
    assert words_to_numbers("GST Eighteen") == "GST 18"


def test_empty() -> None:
    """Test empty input."""
    assert words_to_numbers("") == ""


@pytest.mark.parametrize(
    ("value", "suffix"),
    [(1, "st"), (2, "nd"), (3, "rd"), (4, "th"), (11, "th"), (12, "th"), (21, "st"), (112, "th")],
)
def test_ordinal_suffix(value: int, suffix: str) -> None:
    """Test English ordinal suffixes."""
    assert ordinal_suffix(value) == suffix
