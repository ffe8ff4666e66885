"""Factory for creating OCR services based on configuration."""

import logging
from pathlib import Path
from typing import Protocol

from invoice_capture.ocr.service import OCRResult
from invoice_capture.shared.config import Settings

logger = logging.getLogger(__name__)


class OCRBackend(Protocol):
    """Protocol for OCR services."""

    def extract_text(self, image_path: Path) -> OCRResult:
        """Extract text from image file."""
        ...

    def is_available(self) -> bool:
        """Check if OCR service is available."""
        ...

    def is_supported_file(self, filename: str) -> bool: ...

    def is_valid_file_size(self, size: int) -> bool: ...

    def get_mime_type(self, filename: str) -> str: ...


def create_ocr_service(settings: Settings) -> OCRBackend:
    """Factory function to create OCR service based on configuration.

    Args:
        settings: Application settings with ocr_provider field

    Returns:
        Configured OCR service instance

    Raises:
        ValueError: If configured provider is unknown
    """
    provider = settings.ocr_provider

    if provider == "tesseract":
        from invoice_capture.ocr.service import OCRService

        service = OCRService(settings)
        if not service.is_available():
            logger.warning("Tesseract not found. Install tesseract-ocr or set TESSERACT_CMD")
        logger.info("Created OCR service: tesseract")
        return service

    raise ValueError(f"Unknown OCR provider: '{provider}'. Available: tesseract")
