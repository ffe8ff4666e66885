"""OCR text to structured invoice parsing.

The parser is deterministic and holds no state between calls: every call
normalizes the text and runs the header, line item and totals extractors on
it, returning a fresh ``ParsedInvoiceData``.
"""

import logging

from invoice_capture.extraction.config import DEFAULT_CONFIG, ParserConfig
from invoice_capture.extraction.fields import FieldExtractor
from invoice_capture.extraction.line_items import LineItemExtractor
from invoice_capture.extraction.normalizer import normalize_text
from invoice_capture.extraction.schema import ParsedInvoiceData
from invoice_capture.extraction.totals import TotalsExtractor

logger = logging.getLogger(__name__)


class InvoiceTextParser:
    """Parses OCR text of an invoice into ``ParsedInvoiceData``.

    Example:
        >>> parser = InvoiceTextParser()
        >>> parser.parse("Invoice Number: SEL-00123 Total ₹1,419.4").total
        1419.4
    """

    def __init__(self, config: ParserConfig | None = None) -> None:
        self.config = config or DEFAULT_CONFIG
        self.fields = FieldExtractor(self.config)
        self.line_items = LineItemExtractor(self.config)
        self.totals = TotalsExtractor(self.config)

    def parse(self, text: str) -> ParsedInvoiceData:
        """Extract header fields, line items and totals.

        Args:
            text: Raw OCR text (may be empty)

        Returns:
            Parsed invoice; fields that were not found are empty or 0
        """
        cleaned = normalize_text(text, self.config)
        if not cleaned:
            return ParsedInvoiceData()

        logger.debug(f"Normalized OCR text: {cleaned!r}")
        result = ParsedInvoiceData(
            **self.fields.extract(cleaned),
            items=self.line_items.extract(cleaned),
            **self.totals.extract(cleaned),
        )
        logger.info(
            f"Parsed invoice text: number={result.invoice_number!r}, "
            f"{len(result.items)} items, total={result.total}"
        )
        return result


def parse_invoice_ocr_text(text: str, config: ParserConfig | None = None) -> ParsedInvoiceData:
    """Parse OCR text of an invoice.

    Args:
        text: Raw OCR text
        config: Parser configuration; defaults apply when None

    Returns:
        Parsed invoice data
    """
    return InvoiceTextParser(config).parse(text)
