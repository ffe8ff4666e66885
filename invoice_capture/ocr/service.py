"""Invoice image OCR using Tesseract.

Turns photographed or scanned invoices into raw text for the heuristic
parser. A missing Tesseract binary is reported through ``OCRResult`` rather
than raised, so callers can fall back to manual entry.

Based on pytesseract documentation:
https://github.com/madmaze/pytesseract
"""

import logging
import os
from pathlib import Path

import pytesseract
from PIL import Image, UnidentifiedImageError
from pydantic import BaseModel

from invoice_capture.shared.config import Settings

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".bmp": "image/bmp",
    ".tiff": "image/tiff",
}


class OCRResult(BaseModel):
    """Result of OCR operation.

    Attributes:
        text: Extracted text content
        success: Whether operation succeeded
        error: Error message if operation failed
    """

    text: str
    success: bool
    error: str | None = None


class OCRService:
    """OCR service using Tesseract engine."""

    def __init__(self, settings: Settings) -> None:
        """Initialize OCR service.

        Args:
            settings: Application settings (upload size limit)
        """
        self.settings = settings
        self._configure_tesseract()

    def _configure_tesseract(self) -> None:
        """Override the Tesseract binary path from TESSERACT_CMD when set."""
        tesseract_cmd = os.getenv("TESSERACT_CMD")
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd

    def is_available(self) -> bool:
        """Check whether the Tesseract binary can be run."""
        try:
            pytesseract.get_tesseract_version()
        except (pytesseract.TesseractNotFoundError, OSError) as e:
            logger.warning(f"Tesseract not available: {e}")
            return False
        return True

    def is_supported_file(self, filename: str) -> bool:
        return Path(filename).suffix.lower() in SUPPORTED_EXTENSIONS

    def is_valid_file_size(self, size: int) -> bool:
        return 0 < size <= self.settings.max_upload_bytes

    def get_mime_type(self, filename: str) -> str:
        """MIME type for a supported image, ``application/octet-stream`` otherwise."""
        return SUPPORTED_EXTENSIONS.get(Path(filename).suffix.lower(), "application/octet-stream")

    def extract_text(self, image_path: Path) -> OCRResult:
        """Extract text from image file.

        Args:
            image_path: Path to image file

        Returns:
            OCRResult with extracted text, or empty text and an error
        """
        if not image_path.exists():
            return OCRResult(text="", success=False, error=f"Image file not found: {image_path}")

        if not self.is_supported_file(image_path.name):
            return OCRResult(
                text="",
                success=False,
                error=f"Unsupported file type: {image_path.suffix or image_path.name}",
            )

        try:
            with Image.open(image_path) as image:
                text = pytesseract.image_to_string(image)
        except pytesseract.TesseractNotFoundError:
            logger.warning("Tesseract binary not found; returning empty OCR text")
            return OCRResult(text="", success=False, error="Tesseract OCR is not installed")
        except (UnidentifiedImageError, OSError, pytesseract.TesseractError) as e:
            logger.error(f"OCR failed for {image_path.name}: {e}")
            return OCRResult(text="", success=False, error=f"OCR processing failed: {e}")

        logger.info(f"OCR extracted {len(text)} characters from {image_path.name}")
        return OCRResult(text=text, success=True)
