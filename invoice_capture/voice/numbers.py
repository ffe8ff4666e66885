"""Spoken number words to digits.

Speech-to-text transcripts spell numbers out ("gst eighteen percent", "item
two", "nine eight seven six"). Converting them first lets every voice
recognizer match plain digits.

Conversion rules:
    * Compound cardinals combine: "two thousand twenty five" -> "2025",
      "one hundred and fifty" -> "150", "twenty-five" -> "25".
    * A digit word directly after another digit or teen word starts a new
      number: "nine eight seven six" -> "9 8 7 6".
    * "point" followed by digit words is a decimal: "twelve point five" -> "12.5".
    * Ordinals end a number with a suffix: "twenty first" -> "21st".
"""

import re

UNITS = {
    "zero": 0,
    "one": 1,
    "two": 2,
    "three": 3,
    "four": 4,
    "five": 5,
    "six": 6,
    "seven": 7,
    "eight": 8,
    "nine": 9,
}
TEENS = {
    "ten": 10,
    "eleven": 11,
    "twelve": 12,
    "thirteen": 13,
    "fourteen": 14,
    "fifteen": 15,
    "sixteen": 16,
    "seventeen": 17,
    "eighteen": 18,
    "nineteen": 19,
}
TENS = {
    "twenty": 20,
    "thirty": 30,
    "forty": 40,
    "fifty": 50,
    "sixty": 60,
    "seventy": 70,
    "eighty": 80,
    "ninety": 90,
}
SCALES = {"thousand": 1_000, "lakh": 100_000, "million": 1_000_000}
ORDINALS = {
    "first": 1,
    "second": 2,
    "third": 3,
    "fourth": 4,
    "fifth": 5,
    "sixth": 6,
    "seventh": 7,
    "eighth": 8,
    "ninth": 9,
    "tenth": 10,
    "eleventh": 11,
    "twelfth": 12,
    "thirteenth": 13,
    "fourteenth": 14,
    "fifteenth": 15,
    "sixteenth": 16,
    "seventeenth": 17,
    "eighteenth": 18,
    "nineteenth": 19,
    "twentieth": 20,
    "thirtieth": 30,
}

_NUMBER_WORDS = [*UNITS, *TEENS, *TENS, "hundred", *SCALES, *ORDINALS]
_WORD = "(?:" + "|".join(sorted(_NUMBER_WORDS, key=len, reverse=True)) + ")"
_JOINER = r"(?:\s+|-)(?:(?:and|point)\s+)?"
_RUN = re.compile(rf"\b{_WORD}(?:{_JOINER}{_WORD})*\b", re.IGNORECASE)


def ordinal_suffix(value: int) -> str:
    if 10 <= value % 100 <= 20:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(value % 10, "th")


def _category(word: str) -> str:
    if word in UNITS:
        return "unit"
    if word in TEENS:
        return "teen"
    if word in TENS:
        return "tens"
    if word == "hundred":
        return "hundred"
    if word in SCALES:
        return "scale"
    if word in ORDINALS:
        return "ordinal"
    return "joiner"


class _RunConverter:
    """Accumulates number words of one run into digit strings."""

    def __init__(self) -> None:
        self.output: list[str] = []
        self.total = 0
        self.current = 0
        self.active = False
        self.last: str | None = None
        self.decimals: str | None = None

    def flush(self, suffix: str = "") -> None:
        if self.active:
            number = str(self.total + self.current)
            if self.decimals:
                number = f"{number}.{self.decimals}"
            self.output.append(number + suffix)
        self.total = self.current = 0
        self.active = False
        self.last = None
        self.decimals = None

    def feed(self, word: str, next_word: str | None) -> None:
        kind = _category(word)
        if self.decimals is not None and kind != "unit":
            self.flush()

        if kind == "joiner":
            self._joiner(word, next_word)
        elif kind == "unit":
            self._unit(UNITS[word])
        elif kind in ("teen", "tens"):
            value = TEENS.get(word) or TENS[word]
            if self.last in ("unit", "teen", "tens"):
                self.flush()
            self.current += value
            self.active = True
            self.last = kind
        elif kind == "hundred":
            self.current = (self.current or 1) * 100
            self.active = True
            self.last = kind
        elif kind == "scale":
            self.total += (self.current or 1) * SCALES[word]
            self.current = 0
            self.active = True
            self.last = kind
        else:
            value = ORDINALS[word]
            if self.last in ("unit", "teen") or (self.last == "tens" and value >= 10):
                self.flush()
            self.current += value
            self.active = True
            self.flush(ordinal_suffix(self.total + self.current))

    def _unit(self, value: int) -> None:
        if self.decimals is not None:
            self.decimals += str(value)
            return
        if self.last in ("unit", "teen"):
            self.flush()
        self.current += value
        self.active = True
        self.last = "unit"

    def _joiner(self, word: str, next_word: str | None) -> None:
        if word == "point" and self.active and next_word in UNITS:
            self.decimals = ""
            return
        if word == "and" and self.last in ("hundred", "scale"):
            return
        self.flush()
        self.output.append(word)


def _convert_run(run: str) -> str:
    words = [word for word in re.split(r"[\s-]+", run.lower()) if word]
    converter = _RunConverter()
    for index, word in enumerate(words):
        next_word = words[index + 1] if index + 1 < len(words) else None
        converter.feed(word, next_word)
    converter.flush()
    return " ".join(converter.output)


def words_to_numbers(text: str) -> str:
    """Replace spoken number words in text with digits.

    Args:
        text: Transcript text

    Returns:
        Text with number-word runs replaced; other words are untouched

    Example:
        >>> words_to_numbers("gst eighteen percent")
        'gst 18 percent'
        >>> words_to_numbers("invoice number nine eight seven six")
        'invoice number 9 8 7 6'
    """
    if not text:
        return ""
    return _RUN.sub(lambda match: _convert_run(match.group(0)), text)
