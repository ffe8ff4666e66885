"""Rule-based extraction provider.

Wraps the deterministic OCR text parser in the provider interface. Needs no
model files or API keys, so it is always available.
"""

import logging

from invoice_capture.extraction.base import ExtractionProvider, ExtractionResult
from invoice_capture.extraction.config import ParserConfig
from invoice_capture.extraction.parser import InvoiceTextParser
from invoice_capture.shared.config import Settings

logger = logging.getLogger(__name__)


class HeuristicExtractionProvider(ExtractionProvider):
    """Extraction provider backed by ``InvoiceTextParser``."""

    def __init__(self, settings: Settings) -> None:
        """Initialize the provider.

        Args:
            settings: Application settings (parser locale and vocabulary)
        """
        super().__init__(settings)
        self.parser = InvoiceTextParser(ParserConfig.from_settings(settings))

    @property
    def provider_name(self) -> str:
        return "heuristic"

    def is_available(self) -> bool:
        return True

    def extract_invoice_fields(self, ocr_text: str) -> ExtractionResult:
        """Parse OCR text into invoice data.

        Empty text is not an error: it yields an all-default invoice.

        Args:
            ocr_text: Raw text from OCR engine

        Returns:
            ExtractionResult with the parsed invoice, provider='heuristic'
        """
        invoice_data = self.parser.parse(ocr_text)
        if invoice_data.is_empty():
            logger.info("Heuristic extraction found no invoice fields")
        return ExtractionResult(
            invoice_data=invoice_data,
            success=True,
            provider=self.provider_name,
        )
