"""Unit tests for subtotal, total GST and total extraction."""

import pytest

from invoice_capture.extraction.config import ParserConfig
from invoice_capture.extraction.totals import TotalsExtractor


@pytest.fixture
def extractor() -> TotalsExtractor:
    """Create a totals extractor with default configuration."""
    return TotalsExtractor()


def test_totals_with_currency_and_grouping(extractor: TotalsExtractor) -> None:
    """Test totals with rupee glyphs and thousands separators."""
    totals = extractor.extract("SubTotal ₹1,220 Total GST ₹199.4 Total ₹1,419.4")

    assert totals == {"subtotal": 1220.0, "total_gst": 199.4, "total": 1419.4}


@pytest.mark.parametrize("text", ["Sub-Total: 1,220", "Sub Total 1220", "SUBTOTAL: ₹1220.00"])
def test_subtotal_variants(extractor: TotalsExtractor, text: str) -> None:
    """Test subtotal label spellings."""
    assert extractor.extract(text)["subtotal"] == 1220.0


def test_total_does_not_read_subtotal_or_gst(extractor: TotalsExtractor) -> None:
    """Test that the total label ignores SubTotal and Total GST."""
    totals = extractor.extract("SubTotal 200 Total GST 36")

    assert totals["subtotal"] == 200.0
    assert totals["total_gst"] == 36.0
    assert totals["total"] == 0.0


@pytest.mark.parametrize(
    "text",
    [
        "Sub Total ₹1,220 Total GST ₹199.4 Total ₹1,419.4",
        "Sub-Total: 1,220 Total GST: 199.4 Total: 1,419.4",
        "SUB TOTAL 1220 GST Total 199.4 TOTAL 1419.4",
        "Sub - Total 1,220 Total Tax 199.4 Total ₹1,419.4",
    ],
)
def test_spaced_subtotal_label_is_not_the_total(extractor: TotalsExtractor, text: str) -> None:
    """Test that a spaced or hyphenated Sub Total never supplies the total."""
    totals = extractor.extract(text)

    assert totals == {"subtotal": 1220.0, "total_gst": 199.4, "total": 1419.4}


def test_spaced_subtotal_alone_leaves_total_empty(extractor: TotalsExtractor) -> None:
    assert extractor.extract("Sub Total 1220")["total"] == 0.0


def test_grand_total_preferred(extractor: TotalsExtractor) -> None:
    """Test that Grand Total wins over a plain Total."""
    totals = extractor.extract("Total 200 Tax Total: 36 Grand Total ₹236.00")

    assert totals["total"] == 236.0
    assert totals["total_gst"] == 36.0


def test_total_amount_label(extractor: TotalsExtractor) -> None:
    """Test the Total Amount label."""
    assert extractor.extract("Total Amount: 1,000")["total"] == 1000.0


def test_missing_totals_are_zero(extractor: TotalsExtractor) -> None:
    """Test that absent figures are 0."""
    assert extractor.extract("Charger GST 5% 10 10 105.00") == {
        "subtotal": 0.0,
        "total_gst": 0.0,
        "total": 0.0,
    }


def test_configured_currency_marker() -> None:
    """Test a multi-character currency marker."""
    extractor = TotalsExtractor(ParserConfig(currency_symbols=("Rs",)))

    assert extractor.extract("Total Rs. 500")["total"] == 500.0


def test_european_separators() -> None:
    """Test totals with swapped thousands and decimal separators."""
    extractor = TotalsExtractor(ParserConfig(thousands_separator=".", decimal_separator=","))

    assert extractor.extract("Total 1.419,40")["total"] == 1419.4
