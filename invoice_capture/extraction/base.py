"""Provider interface for turning OCR text into invoice data.

The API and the evaluation harness only see ``ExtractionProvider``; which
parser runs behind it is a configuration choice.
"""

from abc import ABC, abstractmethod

from pydantic import BaseModel

from invoice_capture.extraction.schema import ParsedInvoiceData
from invoice_capture.shared.config import Settings


class ExtractionResult(BaseModel):
    """Envelope around one parse.

    Attributes:
        invoice_data: Parsed invoice, None only when the provider failed
        success: False when the provider could not run
        error: Failure reason
        provider: Registry name of the provider that produced the result
    """

    invoice_data: ParsedInvoiceData | None
    success: bool
    error: str | None = None
    provider: str


class ExtractionProvider(ABC):
    """Base class for OCR text parsers exposed through the registry."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    @abstractmethod
    def extract_invoice_fields(self, ocr_text: str) -> ExtractionResult:
        """Parse one invoice's OCR text.

        Args:
            ocr_text: Text as returned by the OCR backend

        Returns:
            ExtractionResult carrying the parsed invoice or the failure reason
        """

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the provider can serve requests with the current settings."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Registry name, reported in responses and logs."""
