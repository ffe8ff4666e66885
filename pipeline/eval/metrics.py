"""Evaluation metrics for the OCR text parser.

Computes precision, recall, and F1 scores per invoice field. A field counts
as absent when it holds its default (empty string or zero).
"""

from dataclasses import dataclass
from typing import Any

from invoice_capture.extraction.schema import AMOUNT_TOLERANCE, ParsedInvoiceData

EVALUATED_FIELDS = (
    "invoice_number",
    "invoice_date",
    "customer_name",
    "customer_phone",
    "customer_address",
    "item_count",
    "subtotal",
    "total_gst",
    "total",
    "notes",
)


@dataclass
class FieldMetrics:
    """Metrics for a single field."""

    precision: float
    recall: float
    f1: float
    support: int  # Samples where the field is expected


@dataclass
class EvaluationReport:
    """Complete evaluation report."""

    field_metrics: dict[str, FieldMetrics]
    macro_f1: float
    total_samples: int


def is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, int | float):
        return value == 0
    return False


def calculate_field_match(expected: Any, predicted: Any) -> bool:
    """Check if extracted field matches expected value.

    Args:
        expected: Ground truth value
        predicted: Extracted value

    Returns:
        True if values match (with tolerance for numeric fields)
    """
    if is_missing(expected) and is_missing(predicted):
        return True
    if is_missing(expected) or is_missing(predicted):
        return False

    if isinstance(expected, int | float) and isinstance(predicted, int | float):
        return abs(float(expected) - float(predicted)) <= AMOUNT_TOLERANCE

    if isinstance(expected, str) and isinstance(predicted, str):
        # Case-insensitive, whitespace-collapsed
        def normalize_string(s: str) -> str:
            return " ".join(s.strip().lower().split())

        return normalize_string(expected) == normalize_string(predicted)

    return bool(expected == predicted)


def field_value(invoice: ParsedInvoiceData, field: str) -> Any:
    if field == "item_count":
        return len(invoice.items)
    return getattr(invoice, field)


def _ratio(numerator: int, denominator: int) -> float:
    return numerator / denominator if denominator else 0.0


def score_field(
    field: str, pairs: list[tuple[ParsedInvoiceData, ParsedInvoiceData]]
) -> FieldMetrics:
    """Score one field over (expected, predicted) pairs.

    A wrong value counts as both a false positive and a false negative.
    """
    true_pos = false_pos = false_neg = support = 0

    for expected, predicted in pairs:
        exp_value = field_value(expected, field)
        pred_value = field_value(predicted, field)
        has_expected = not is_missing(exp_value)
        has_predicted = not is_missing(pred_value)
        support += has_expected

        if has_expected and has_predicted:
            if calculate_field_match(exp_value, pred_value):
                true_pos += 1
            else:
                false_pos += 1
                false_neg += 1
        elif has_expected:
            false_neg += 1
        elif has_predicted:
            false_pos += 1

    precision = _ratio(true_pos, true_pos + false_pos)
    recall = _ratio(true_pos, true_pos + false_neg)
    f1 = 2 * precision * recall / (precision + recall) if precision + recall else 0.0
    return FieldMetrics(precision=precision, recall=recall, f1=f1, support=support)


def evaluate_extraction(
    expected: list[ParsedInvoiceData], predicted: list[ParsedInvoiceData]
) -> EvaluationReport:
    """Evaluate parsing accuracy against ground truth.

    Args:
        expected: Ground truth invoices
        predicted: Parsed invoices, in the same order

    Returns:
        Evaluation report with per-field and macro-averaged F1

    Raises:
        ValueError: If the lists differ in length
    """
    if len(expected) != len(predicted):
        raise ValueError("Expected and predicted lists must have same length")

    pairs = list(zip(expected, predicted, strict=True))
    field_metrics = {field: score_field(field, pairs) for field in EVALUATED_FIELDS}
    macro_f1 = sum(m.f1 for m in field_metrics.values()) / len(field_metrics)

    return EvaluationReport(
        field_metrics=field_metrics,
        macro_f1=macro_f1,
        total_samples=len(expected),
    )
