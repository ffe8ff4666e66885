"""Subtotal, total GST and total extraction."""

import logging
import re

from invoice_capture.extraction.config import DEFAULT_CONFIG, ParserConfig
from invoice_capture.extraction.normalizer import currency_pattern, parse_amount
from invoice_capture.extraction.rules import Rule, first_match

logger = logging.getLogger(__name__)

# Rejects the "Total" of spaced or hyphenated subtotal labels and of "GST Total"
NOT_QUALIFIED = (
    r"(?<!Sub)(?<!Sub\s)(?<!Sub-)(?<!Sub\s-\s)(?<!Sub-\s)(?<!Sub\s-)"
    r"(?<!GST\s)(?<!Tax\s)"
)


class TotalsExtractor:
    """Looks up the labelled monetary totals of an invoice.

    Each figure may carry a currency glyph and digit grouping; missing figures
    are 0. Totals are not cross-checked against the line items.
    """

    def __init__(self, config: ParserConfig | None = None) -> None:
        self.config = config or DEFAULT_CONFIG
        currency = currency_pattern(self.config.currency_symbols)
        grouping = re.escape(self.config.thousands_separator)
        decimal = re.escape(self.config.decimal_separator)
        figure = rf"\s*[:\-]?\s*{currency}(\d[\d{grouping}]*(?:{decimal}\d+)?)"

        def rule(name: str, label: str) -> Rule:
            return Rule(name, re.compile(label + figure, re.IGNORECASE))

        self.subtotal_rules = (rule("subtotal", r"\bSub\s*-?\s*Total"),)
        self.total_gst_rules = (
            rule("total-gst", r"\bTotal\s*(?:GST|Tax)"),
            rule("gst-total", r"\b(?:GST|Tax)\s*Total"),
        )
        self.total_rules = (
            rule("grand-total", r"\bGrand\s*Total"),
            rule("total", rf"{NOT_QUALIFIED}\bTotal(?:\s*Amount)?(?!\s*(?:GST|Tax))"),
        )

    def extract(self, text: str) -> dict[str, float]:
        """Extract all three totals.

        Args:
            text: Normalized text

        Returns:
            Mapping with ``subtotal``, ``total_gst`` and ``total`` (0 when absent)
        """
        return {
            "subtotal": self._figure(self.subtotal_rules, text, "subtotal"),
            "total_gst": self._figure(self.total_gst_rules, text, "total_gst"),
            "total": self._figure(self.total_rules, text, "total"),
        }

    def _figure(self, rules: tuple[Rule, ...], text: str, field: str) -> float:
        found = first_match(rules, text, field)
        if found is None:
            return 0.0
        return parse_amount(found[1], self.config)
