"""Unit tests for invoice header field extraction.

Tests cover:
- Labelled and document-prefix invoice numbers
- Identifier fallback scan and scoring
- Dates, customer names, phones, addresses and notes
"""

import pytest

from invoice_capture.extraction.config import ParserConfig
from invoice_capture.extraction.fields import FieldExtractor, identifier_candidates


@pytest.fixture
def extractor() -> FieldExtractor:
    """Create a field extractor with default configuration."""
    return FieldExtractor()


def test_extract_labelled_header(extractor: FieldExtractor) -> None:
    """Test a fully labelled invoice header."""
    text = (
        "Invoice Number: SEL-00123 Invoice Date: 2025-07-15 "
        "Customer Name: Rajesh Singh Phone: 917865434576"
    )

    fields = extractor.extract(text)

    assert fields == {
        "invoice_number": "SEL-00123",
        "invoice_date": "2025-07-15",
        "customer_name": "Rajesh Singh",
        "customer_phone": "917865434576",
        "customer_address": "",
        "notes": "",
    }


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("SEL 00123 Thank you", "SEL-00123"),
        ("sel-4567", "SEL-4567"),
        ("Invoice: INV2024 dated today", "INV2024"),
        ("INVOICE Bill No: B-778", "B-778"),
        ("Receipt No 4471", "4471"),
    ],
)
def test_invoice_number_rules(extractor: FieldExtractor, text: str, expected: str) -> None:
    """Test the labelled and prefixed invoice number shapes."""
    assert extractor.invoice_number(text) == expected


def test_invoice_number_fallback_prefers_identifier_shape(extractor: FieldExtractor) -> None:
    """Test that the fallback scan skips dates and phones."""
    text = "Acme Stores Ref AB-778X 2025-07-15 Phone 917865434576"

    assert extractor.invoice_number(text) == "AB-778X"


def test_invoice_number_custom_prefix() -> None:
    """Test a configured document prefix."""
    extractor = FieldExtractor(ParserConfig(invoice_prefixes=("INV",)))

    assert extractor.invoice_number("inv 0042 Total 100") == "INV-0042"


def test_invoice_number_not_found(extractor: FieldExtractor) -> None:
    """Test that text without an identifier yields an empty string."""
    assert extractor.invoice_number("thank you for shopping") == ""


def test_identifier_candidates_filters_dates_phones_years_and_captions() -> None:
    """Test the permissive identifier scan filters."""
    text = "INVOICE 2025 07/15/2025 15-07-2025 2025-07-15 9876543210 TOTAL XY-12"

    assert identifier_candidates(text) == ["XY-12"]


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("Due 2025-08-01 Invoice Date: 2025-07-15", "2025-07-15"),
        ("Date: 2025-07-15", "2025-07-15"),
        ("Date: 07/15/2025", "07/15/2025"),
        ("Dated 15-07-2025", "15-07-2025"),
        ("no date here", ""),
    ],
)
def test_invoice_date(extractor: FieldExtractor, text: str, expected: str) -> None:
    """Test date rules in priority order."""
    assert extractor.invoice_date(text) == expected


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("Customer: Priya Patel Address: 12 MG Road", "Priya Patel"),
        ("Bill To: Anita Rao Phone 9876543210", "Anita Rao"),
        ("RECEIPT Ravi Kumar 9876543210", "Ravi Kumar"),
        ("Invoice Date 2025-07-15 Sunita Shah", "Sunita Shah"),
        ("CUSTOMER NAME", ""),
    ],
)
def test_customer_name(extractor: FieldExtractor, text: str, expected: str) -> None:
    """Test labelled names, bill-to names and the two-word fallback."""
    assert extractor.customer_name(text) == expected


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("Mobile No: 9876543210", "9876543210"),
        ("Ref 123456789012 Phone: 9876543210", "9876543210"),
        ("call 917865434576", "917865434576"),
        ("Account 1234567890123", ""),
    ],
)
def test_customer_phone(extractor: FieldExtractor, text: str, expected: str) -> None:
    """Test labelled phones first, then bare 10-12 digit runs."""
    assert extractor.customer_phone(text) == expected


def test_customer_address_label(extractor: FieldExtractor) -> None:
    """Test that a labelled address stops at the next caption."""
    text = "Address: 12 MG Road,Bengaluru Phone: 9876543210"

    assert extractor.customer_address(text) == "12 MG Road, Bengaluru"


def test_customer_address_street_to_country(extractor: FieldExtractor) -> None:
    """Test the unlabelled street-number-to-country address."""
    text = "Ship to 221 Baker Street, London, UK Thanks"

    assert extractor.customer_address(text) == "221 Baker Street, London, UK"


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("Notes: Deliver before 5 PM", "Deliver before 5 PM"),
        ("Note - Handle with care Share Lens", "Handle with care"),
        ("Notes: Thank you 10:45 LTE", "Thank you"),
        ("no remarks", ""),
    ],
)
def test_notes(extractor: FieldExtractor, text: str, expected: str) -> None:
    """Test that notes stop at screenshot trailer text."""
    assert extractor.notes(text) == expected
