"""Ordered extraction rules and candidate scoring.

A field is described by a tuple of ``Rule`` records tried most specific first.
Each rule is a compiled pattern, an optional validator for the captured value
and an optional transform producing the final value.
"""

import logging
import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

logger = logging.getLogger(__name__)

Validator = Callable[[str], bool]
Transform = Callable[[re.Match[str]], str]


def _first_group(match: re.Match[str]) -> str:
    return match.group(1)


def _always(_: str) -> bool:
    return True


@dataclass(frozen=True)
class Rule:
    """One extraction attempt for a field.

    Attributes:
        name: Rule identifier used in logs and tests
        pattern: Compiled regex; its first group is the value unless ``transform`` says otherwise
        validator: Predicate the (transformed) value must satisfy
        transform: Builds the value from the match
    """

    name: str
    pattern: re.Pattern[str]
    validator: Validator = _always
    transform: Transform = _first_group

    def matches(self, text: str) -> Iterable[str]:
        """Yield every transformed value this rule finds, left to right."""
        for match in self.pattern.finditer(text):
            value = self.transform(match)
            if value is not None:
                yield value.strip()

    def apply(self, text: str) -> str | None:
        """Return the first value that passes validation, or None."""
        for value in self.matches(text):
            if value and self.validator(value):
                return value
        return None


def first_match(rules: Sequence[Rule], text: str, field: str) -> tuple[Rule, str] | None:
    """Try rules in order and return the first rule with a valid value.

    Args:
        rules: Rules, most specific first
        text: Normalized text
        field: Field name for logging

    Returns:
        (winning rule, value) or None when no rule matches
    """
    for rule in rules:
        value = rule.apply(text)
        if value is not None:
            logger.debug(f"{field}: rule '{rule.name}' matched {value!r}")
            return rule, value
    return None


@dataclass(frozen=True)
class Candidate:
    """A loosely matched value awaiting ranking."""

    value: str
    score: int


_HAS_LETTER = re.compile(r"[A-Za-z]")
_HAS_DIGIT = re.compile(r"\d")
_HAS_SEPARATOR = re.compile(r"[-_]")


def score_identifier(value: str) -> int:
    """Score how much a token looks like a document identifier.

    +10 mixes letters and digits, +5 contains ``-`` or ``_``, +3 length 5-15,
    -5 length over 20, +2 starts with a letter.
    """
    score = 0
    if _HAS_LETTER.search(value) and _HAS_DIGIT.search(value):
        score += 10
    if _HAS_SEPARATOR.search(value):
        score += 5
    if 5 <= len(value) <= 15:
        score += 3
    if len(value) > 20:
        score -= 5
    if value[:1].isalpha():
        score += 2
    return score


def rank_candidates(values: Iterable[str]) -> list[Candidate]:
    """Score values and sort best first; ties keep their original order."""
    candidates = [Candidate(value=value, score=score_identifier(value)) for value in values]
    return sorted(candidates, key=lambda candidate: candidate.score, reverse=True)
