"""Evaluation harness for the OCR text parser.

Runs the configured extraction provider over a gold dataset and computes
per-field metrics. The gold file is a JSON list of
``{"ocr_text": "...", "expected": {...}}`` records; ``expected`` uses the
invoice field names in either snake_case or camelCase.
"""

import json
import logging
from pathlib import Path
from typing import Any

from invoice_capture.extraction.factory import create_extraction_service
from invoice_capture.extraction.schema import ParsedInvoiceData
from invoice_capture.shared.config import get_settings
from pipeline.eval.metrics import evaluate_extraction

logger = logging.getLogger(__name__)


def load_gold_dataset(gold_file: Path) -> list[tuple[str, ParsedInvoiceData]]:
    """Load gold dataset from JSON file.

    Args:
        gold_file: Path to gold dataset JSON

    Returns:
        List of (ocr_text, expected_invoice) tuples
    """
    with open(gold_file, encoding="utf-8") as f:
        data = json.load(f)

    return [
        (item["ocr_text"], ParsedInvoiceData.model_validate(item["expected"])) for item in data
    ]


def run_evaluation(gold_file: Path) -> dict[str, Any]:
    """Run evaluation on gold dataset.

    Args:
        gold_file: Path to gold dataset JSON file

    Returns:
        Evaluation results dict
    """
    extraction_service = create_extraction_service(get_settings())
    samples = load_gold_dataset(gold_file)

    expected_list = []
    predicted_list = []
    for ocr_text, expected in samples:
        result = extraction_service.extract_invoice_fields(ocr_text)
        if not result.success:
            logger.warning(f"Extraction failed: {result.error}")
        predicted_list.append(result.invoice_data or ParsedInvoiceData())
        expected_list.append(expected)

    report = evaluate_extraction(expected_list, predicted_list)

    return {
        "total_samples": report.total_samples,
        "macro_f1": round(report.macro_f1, 4),
        "field_metrics": {
            field: {
                "precision": round(metrics.precision, 4),
                "recall": round(metrics.recall, 4),
                "f1": round(metrics.f1, 4),
                "support": metrics.support,
            }
            for field, metrics in report.field_metrics.items()
        },
    }


def format_results(results: dict[str, Any]) -> str:
    """Render ``run_evaluation`` output as a fixed-width table."""
    rule = "-" * 60
    lines = [
        "=" * 60,
        "INVOICE PARSER EVALUATION",
        "=" * 60,
        f"Samples: {results['total_samples']}  Macro F1: {results['macro_f1']:.1%}",
        rule,
        f"{'Field':<20} {'Precision':>10} {'Recall':>10} {'F1':>10} {'Support':>7}",
        rule,
    ]
    for field, m in results["field_metrics"].items():
        lines.append(
            f"{field:<20} {m['precision']:>10.1%} {m['recall']:>10.1%} "
            f"{m['f1']:>10.1%} {m['support']:>7}"
        )
    return "\n".join(lines)


if __name__ == "__main__":
    settings = get_settings()
    logging.basicConfig(level=settings.log_level)
    print(format_results(run_evaluation(Path("data/gold/invoices.json"))))
