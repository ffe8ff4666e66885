"""Spoken date parsing.

Accepts the phrasings speech-to-text produces once number words have been
converted to digits:

    2025-07-15, 2025/7/15
    july 15 2025, july 15th, 2025
    15 july 2025, 15th july 2025
    15th of july 2025

Years spoken in pairs ("twenty twenty five" -> "20 25") are joined.
"""

import re
from datetime import date

MONTHS = {
    "january": 1,
    "february": 2,
    "march": 3,
    "april": 4,
    "may": 5,
    "june": 6,
    "july": 7,
    "august": 8,
    "september": 9,
    "october": 10,
    "november": 11,
    "december": 12,
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "sept": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}

_MONTH = "(" + "|".join(sorted(MONTHS, key=len, reverse=True)) + r")\b"
_DAY = r"(\d{1,2})(?:st|nd|rd|th)?"
_YEAR = r"(\d{4}|\d{2}\s\d{2})\b"
_GAP = r"\s*,?\s*"

_ISO = re.compile(r"\b(\d{4})[-/](\d{1,2})[-/](\d{1,2})\b")
# (pattern, order of the day/month/year groups)
_SPOKEN = (
    (re.compile(rf"\b{_MONTH}{_GAP}{_DAY}{_GAP}{_YEAR}", re.IGNORECASE), ("month", "day", "year")),
    (re.compile(rf"\b{_DAY}{_GAP}{_MONTH}{_GAP}{_YEAR}", re.IGNORECASE), ("day", "month", "year")),
    (
        re.compile(rf"\b{_DAY}\s+of\s+{_MONTH}{_GAP}{_YEAR}", re.IGNORECASE),
        ("day", "month", "year"),
    ),
)


def _iso(year: int, month: int, day: int) -> str | None:
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def parse_spoken_date(text: str) -> str | None:
    """Find a date in spoken text and return it as ``YYYY-MM-DD``.

    Args:
        text: Transcript fragment following a "date" keyword

    Returns:
        ISO date, or None when no valid calendar date is found
    """
    match = _ISO.search(text)
    if match:
        year, month, day = (int(group) for group in match.groups())
        return _iso(year, month, day)

    for pattern, order in _SPOKEN:
        match = pattern.search(text)
        if not match:
            continue
        parts = dict(zip(order, match.groups(), strict=True))
        month = MONTHS[parts["month"].lower()]
        year = int(parts["year"].replace(" ", ""))
        return _iso(year, month, int(parts["day"]))
    return None
