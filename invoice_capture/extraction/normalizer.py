"""Text normalization for OCR output.

OCR output carries stray symbols, doubled spaces and embedded newlines. The
normalizer reduces it to one line of word characters and the punctuation that
matters to invoice identifiers, dates and amounts.
"""

import math
import re
from functools import lru_cache

from invoice_capture.extraction.config import DEFAULT_CONFIG, ParserConfig

_WHITESPACE = re.compile(r"\s+")

# Punctuation kept in identifiers (SEL-00123), dates (07/15/2025), labels and amounts
_SAFE_PUNCTUATION = ",.:%/-"


@lru_cache(maxsize=32)
def _noise_pattern(currency_symbols: tuple[str, ...]) -> re.Pattern[str]:
    glyphs = "".join(re.escape(symbol) for symbol in currency_symbols if len(symbol) == 1)
    return re.compile(rf"[^\w\s{re.escape(_SAFE_PUNCTUATION)}{glyphs}]")


@lru_cache(maxsize=32)
def currency_pattern(currency_symbols: tuple[str, ...]) -> str:
    """Regex fragment matching one optional currency marker.

    Multi-character markers (``Rs.``, ``INR``) are matched as whole words.
    """
    if not currency_symbols:
        return ""
    alternatives = sorted(currency_symbols, key=len, reverse=True)
    escaped = "|".join(re.escape(symbol) for symbol in alternatives)
    return rf"(?:(?:{escaped})\.?\s*)?"


def normalize_text(text: str, config: ParserConfig | None = None) -> str:
    """Normalize raw OCR text to a single cleaned line.

    Args:
        text: Raw OCR text
        config: Parser configuration (currency glyphs to keep)

    Returns:
        Text with noise characters removed and whitespace collapsed
    """
    if not text:
        return ""
    config = config or DEFAULT_CONFIG
    cleaned = _noise_pattern(config.currency_symbols).sub(" ", text)
    return _WHITESPACE.sub(" ", cleaned).strip()


def parse_amount(raw: str | None, config: ParserConfig | None = None) -> float:
    """Parse a monetary figure such as ``₹1,419.40``.

    Args:
        raw: Matched amount text
        config: Parser configuration (separators and currency glyphs)

    Returns:
        Parsed value, or 0.0 when the text is not a number
    """
    if not raw:
        return 0.0
    config = config or DEFAULT_CONFIG
    value = raw.strip()
    for symbol in sorted(config.currency_symbols, key=len, reverse=True):
        value = value.replace(symbol, "")
    value = value.replace(config.thousands_separator, "").replace(" ", "")
    value = value.replace(config.decimal_separator, ".").rstrip(".")
    try:
        number = float(value)
    except ValueError:
        return 0.0
    return number if math.isfinite(number) else 0.0
