"""Prometheus metrics for the invoice capture API.

Based on Prometheus best practices:
https://prometheus.io/docs/practices/naming/
"""

from prometheus_client import Counter, Histogram, generate_latest
from prometheus_client.openmetrics.exposition import CONTENT_TYPE_LATEST

# Request metrics
http_requests_total = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"],
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0),
)

# Upload metrics
upload_size_bytes = Histogram(
    "upload_size_bytes",
    "Uploaded invoice image or voice clip size in bytes",
    ["kind"],  # invoice, voice
    buckets=(1024, 10240, 102400, 1048576, 10485760),  # 1KB to 10MB
)

# OCR metrics
ocr_processing_duration_seconds = Histogram(
    "ocr_processing_duration_seconds",
    "OCR processing duration in seconds",
    buckets=(0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0),
)

ocr_requests_total = Counter(
    "ocr_requests_total",
    "Total OCR processing requests",
    ["status"],  # success, failed
)

# Transcription metrics
transcription_duration_seconds = Histogram(
    "transcription_duration_seconds",
    "Voice transcription duration in seconds",
    buckets=(0.5, 1.0, 2.0, 5.0, 10.0, 30.0),
)

transcription_requests_total = Counter(
    "transcription_requests_total",
    "Total voice transcription requests",
    ["status"],  # success, failed
)

# Parser metrics
parse_duration_seconds = Histogram(
    "parse_duration_seconds",
    "OCR text or voice transcript parsing duration in seconds",
    ["kind"],  # invoice, voice
    buckets=(0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5),
)

invoices_parsed_total = Counter(
    "invoices_parsed_total",
    "Total OCR texts parsed into invoices",
    ["result"],  # fields_found, empty
)

invoice_items_extracted = Histogram(
    "invoice_items_extracted",
    "Line items extracted per parsed invoice",
    buckets=(0, 1, 2, 3, 5, 10, 20, 50),
)

voice_commands_parsed_total = Counter(
    "voice_commands_parsed_total",
    "Total voice transcripts parsed",
    ["result"],  # recognized, unrecognized
)

voice_field_updates_total = Counter(
    "voice_field_updates_total",
    "Form fields updated by voice commands",
    ["field"],
)


def get_metrics() -> tuple[bytes, str]:
    """Generate Prometheus metrics in text format.

    Returns:
        Tuple of (metrics bytes, content type)
    """
    return generate_latest(), CONTENT_TYPE_LATEST
