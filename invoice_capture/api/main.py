"""FastAPI application for invoice capture.

Turns invoice photos and OCR text into structured invoices, and voice
transcripts or recordings into invoice form edits. Responses use the
camelCase field names of the invoice form.

Run with ``invoice-capture-api`` (or ``python -m invoice_capture.api.main``);
APP_API_HOST and APP_API_PORT choose the bind address.

Based on FastAPI best practices:
https://fastapi.tiangolo.com/
"""

import logging
import tempfile
import time
import uuid
from pathlib import Path

import uvicorn
from fastapi import FastAPI, File, HTTPException, Request, Response, UploadFile, status
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from invoice_capture.api import metrics
from invoice_capture.extraction.config import ParserConfig
from invoice_capture.extraction.factory import create_extraction_service
from invoice_capture.extraction.schema import InvoiceLineItem, ParsedInvoiceData
from invoice_capture.ocr.factory import create_ocr_service
from invoice_capture.shared.config import get_settings
from invoice_capture.speech.service import SpeechToTextService
from invoice_capture.voice.commands import VoiceParseResult, parse_voice_commands

settings = get_settings()
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Invoice Capture",
    description="Invoice OCR text parsing and voice command API",
    version=settings.service_version,
)

ocr_service = create_ocr_service(settings)
extraction_service = create_extraction_service(settings)
speech_service = SpeechToTextService(settings)
parser_config = ParserConfig.from_settings(settings)


@app.middleware("http")
async def metrics_middleware(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Record request count and duration per endpoint."""
    if request.url.path == "/metrics":
        return await call_next(request)

    start_time = time.time()
    response = await call_next(request)
    duration = time.time() - start_time

    metrics.http_requests_total.labels(
        method=request.method,
        endpoint=request.url.path,
        status=response.status_code,
    ).inc()
    metrics.http_request_duration_seconds.labels(
        method=request.method,
        endpoint=request.url.path,
    ).observe(duration)

    return response


class _ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    service: str


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    ready: bool
    ocr: bool
    speech: bool


class ParseInvoiceRequest(_ApiModel):
    """OCR text to parse."""

    text: str = Field(..., description="Raw OCR text of one invoice")


class InvoiceResponse(_ApiModel):
    """Parsed invoice, with the OCR text it came from for uploads."""

    success: bool
    document_id: str
    text: str
    invoice_data: ParsedInvoiceData
    provider: str


class VoiceParseRequest(_ApiModel):
    """Voice transcript and the form's current items."""

    text: str = Field(..., description="Speech-to-text transcript")
    current_items: list[InvoiceLineItem] = Field(
        default_factory=list, description="Items currently on the invoice form"
    )


class VoiceUploadResponse(_ApiModel):
    """Transcript of an uploaded voice clip and the edits parsed from it."""

    success: bool
    transcript: str
    result: VoiceParseResult


def _parse_invoice(document_id: str, text: str) -> InvoiceResponse:
    with metrics.parse_duration_seconds.labels(kind="invoice").time():
        extraction = extraction_service.extract_invoice_fields(text)
    if not extraction.success or extraction.invoice_data is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Invoice parsing failed: {extraction.error}",
        )

    invoice = extraction.invoice_data
    metrics.invoices_parsed_total.labels(
        result="empty" if invoice.is_empty() else "fields_found"
    ).inc()
    metrics.invoice_items_extracted.observe(len(invoice.items))

    return InvoiceResponse(
        success=True,
        document_id=document_id,
        text=text,
        invoice_data=invoice,
        provider=extraction.provider,
    )


def _parse_voice(text: str, current_items: list[InvoiceLineItem]) -> VoiceParseResult:
    with metrics.parse_duration_seconds.labels(kind="voice").time():
        result = parse_voice_commands(text, current_items, parser_config)
    metrics.voice_commands_parsed_total.labels(
        result="unrecognized" if result.is_empty() else "recognized"
    ).inc()
    for update in result.updates:
        metrics.voice_field_updates_total.labels(field=update.field).inc()
    return result


async def _read_upload(file: UploadFile, kind: str) -> bytes:
    if not file.filename:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No filename provided")

    content = await file.read()
    if not content:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Empty file")
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File too large: {len(content)} bytes (max {settings.max_upload_bytes})",
        )

    metrics.upload_size_bytes.labels(kind=kind).observe(len(content))
    return content


def _write_temp(content: bytes, filename: str) -> Path:
    with tempfile.NamedTemporaryFile(delete=False, suffix=Path(filename).suffix) as tmp:
        tmp.write(content)
        return Path(tmp.name)


@app.get("/health", response_model=HealthResponse, tags=["Health"])
def health_check() -> HealthResponse:
    """Liveness probe."""
    return HealthResponse(
        status="healthy", version=settings.service_version, service=settings.service_name
    )


@app.get("/ready", response_model=ReadinessResponse, tags=["Health"])
def readiness_check() -> ReadinessResponse:
    """Readiness probe.

    The service is ready once the text parser is; OCR and speech availability
    are reported but do not gate readiness since text and transcript parsing
    work without them.
    """
    return ReadinessResponse(
        ready=extraction_service.is_available(),
        ocr=ocr_service.is_available(),
        speech=speech_service.is_available(),
    )


@app.get("/metrics", tags=["Monitoring"])
def get_metrics() -> Response:
    """Prometheus metrics endpoint."""
    metrics_data, content_type = metrics.get_metrics()
    return Response(content=metrics_data, media_type=content_type)


@app.post("/api/v1/invoices/parse", response_model=InvoiceResponse, tags=["Invoices"])
def parse_invoice_text(request: ParseInvoiceRequest) -> InvoiceResponse:
    """Parse OCR text into a structured invoice.

    Empty or unrecognizable text is not an error: the response carries an
    all-default invoice.
    """
    return _parse_invoice(str(uuid.uuid4()), request.text)


@app.post("/api/v1/invoices/upload", response_model=InvoiceResponse, tags=["Invoices"])
async def upload_invoice(
    file: UploadFile = File(..., description="Invoice image (JPG, PNG, BMP, TIFF)"),  # noqa: B008
) -> InvoiceResponse:
    """Run OCR on an invoice image and parse the text.

    ```bash
    curl -X POST "http://localhost:8000/api/v1/invoices/upload" -F "file=@invoice.jpg"
    ```

    Returns 400 for a missing, empty, oversized or unsupported file, 503 when
    Tesseract is not installed and 500 when OCR fails.
    """
    content = await _read_upload(file, kind="invoice")
    filename = file.filename or ""
    if not ocr_service.is_supported_file(filename):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid file type: {filename}. Supported: JPG, PNG, BMP, TIFF",
        )

    tmp_path = _write_temp(content, filename)
    try:
        ocr_start = time.time()
        result = ocr_service.extract_text(tmp_path)
        metrics.ocr_processing_duration_seconds.observe(time.time() - ocr_start)
    finally:
        tmp_path.unlink(missing_ok=True)

    if not result.success:
        metrics.ocr_requests_total.labels(status="failed").inc()
        unavailable = not ocr_service.is_available()
        raise HTTPException(
            status_code=(
                status.HTTP_503_SERVICE_UNAVAILABLE
                if unavailable
                else status.HTTP_500_INTERNAL_SERVER_ERROR
            ),
            detail=f"OCR processing failed: {result.error}",
        )
    metrics.ocr_requests_total.labels(status="success").inc()

    return _parse_invoice(str(uuid.uuid4()), result.text)


@app.post("/api/v1/voice/parse", response_model=VoiceParseResult, tags=["Voice"])
def parse_voice_text(request: VoiceParseRequest) -> VoiceParseResult:
    """Parse a voice transcript into invoice form edits.

    The form's current items are needed to resolve item and remove commands;
    the returned ``items`` replace them when present.
    """
    return _parse_voice(request.text, request.current_items)


@app.post("/api/v1/voice/upload", response_model=VoiceUploadResponse, tags=["Voice"])
async def upload_voice(
    file: UploadFile = File(..., description="Voice clip (M4A, MP3, WAV, WEBM, OGG)"),  # noqa: B008
) -> VoiceUploadResponse:
    """Transcribe a voice clip and parse it against an empty item list.

    Returns 400 for an invalid file, 503 when transcription is not configured
    (no OPENAI_API_KEY) and 500 when transcription fails.
    """
    content = await _read_upload(file, kind="voice")
    filename = file.filename or ""
    if not speech_service.is_supported_file(filename):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid audio type: {filename}",
        )
    if not speech_service.is_available():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Voice transcription is not configured",
        )

    tmp_path = _write_temp(content, filename)
    try:
        start = time.time()
        transcription = speech_service.transcribe(tmp_path)
        metrics.transcription_duration_seconds.observe(time.time() - start)
    finally:
        tmp_path.unlink(missing_ok=True)

    if not transcription.success:
        metrics.transcription_requests_total.labels(status="failed").inc()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Transcription failed: {transcription.error}",
        )
    metrics.transcription_requests_total.labels(status="success").inc()

    logger.info(f"Voice upload transcribed to {len(transcription.text)} characters")
    return VoiceUploadResponse(
        success=True,
        transcript=transcription.text,
        result=_parse_voice(transcription.text, []),
    )


def main() -> None:
    """Serve the API with uvicorn on the configured host and port."""
    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
