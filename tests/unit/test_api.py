"""Unit tests for the invoice capture API.

Tests cover:
- Health, readiness and metrics endpoints
- OCR text parsing and invoice image upload
- Voice transcript parsing and voice clip upload
"""

import io
from unittest.mock import patch

import pytest
from fastapi import status
from fastapi.testclient import TestClient
from PIL import Image

from invoice_capture.api import main
from invoice_capture.api.main import app
from invoice_capture.ocr.service import OCRResult
from invoice_capture.speech.service import TranscriptionResult


@pytest.fixture
def client() -> TestClient:
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def sample_image_bytes() -> bytes:
    """Create a simple test image as bytes."""
    img = Image.new("RGB", (200, 100), color="white")
    img_bytes = io.BytesIO()
    img.save(img_bytes, format="PNG")
    img_bytes.seek(0)
    return img_bytes.read()


def test_health_check(client: TestClient) -> None:
    """Test health check endpoint."""
    response = client.get("/health")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == main.settings.service_name
    assert "version" in data


def test_readiness_check(client: TestClient) -> None:
    """Test readiness reports backend availability without gating on it."""
    with (
        patch("invoice_capture.api.main.ocr_service.is_available", return_value=False),
        patch("invoice_capture.api.main.speech_service.is_available", return_value=True),
    ):
        response = client.get("/ready")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"ready": True, "ocr": False, "speech": True}


def test_parse_invoice_text(client: TestClient) -> None:
    """Test OCR text parsing returns camelCase invoice data."""
    response = client.post(
        "/api/v1/invoices/parse",
        json={"text": "Invoice Number: SEL-00123\nCharger GST 5% 10 10 105.00\nTotal ₹105"},
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["success"] is True
    assert data["provider"] == "heuristic"
    assert "documentId" in data
    invoice = data["invoiceData"]
    assert invoice["invoiceNumber"] == "SEL-00123"
    assert invoice["total"] == 105
    assert invoice["items"][0]["description"] == "Charger"
    assert invoice["items"][0]["gstPct"] == 5


def test_parse_empty_invoice_text(client: TestClient) -> None:
    """Test that empty text is not an error."""
    response = client.post("/api/v1/invoices/parse", json={"text": ""})

    assert response.status_code == status.HTTP_200_OK
    invoice = response.json()["invoiceData"]
    assert invoice["invoiceNumber"] == ""
    assert invoice["items"] == []
    assert invoice["totalGST"] == 0


def test_parse_invoice_text_requires_text(client: TestClient) -> None:
    """Test request validation."""
    response = client.post("/api/v1/invoices/parse", json={})

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_upload_invoice_image(client: TestClient, sample_image_bytes: bytes) -> None:
    """Test OCR then parse on an uploaded image."""
    files = {"file": ("invoice.png", sample_image_bytes, "image/png")}

    with patch("invoice_capture.api.main.ocr_service.extract_text") as mock_ocr:
        mock_ocr.return_value = OCRResult(
            text="Invoice Number: SEL-00123\nSubTotal ₹1,220\nTotal ₹1,419.4", success=True
        )

        response = client.post("/api/v1/invoices/upload", files=files)

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["text"].startswith("Invoice Number")
    assert data["invoiceData"]["invoiceNumber"] == "SEL-00123"
    assert data["invoiceData"]["subtotal"] == 1220
    assert data["invoiceData"]["total"] == 1419.4
    mock_ocr.assert_called_once()


def test_upload_invalid_file_type(client: TestClient) -> None:
    """Test that non-image uploads are rejected."""
    files = {"file": ("notes.txt", b"some text", "text/plain")}

    response = client.post("/api/v1/invoices/upload", files=files)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "Invalid file type" in response.json()["detail"]


def test_upload_empty_file(client: TestClient) -> None:
    """Test that empty uploads are rejected."""
    files = {"file": ("invoice.png", b"", "image/png")}

    response = client.post("/api/v1/invoices/upload", files=files)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "Empty file"


def test_upload_too_large(client: TestClient, sample_image_bytes: bytes) -> None:
    """Test the upload size limit."""
    files = {"file": ("invoice.png", sample_image_bytes, "image/png")}

    with patch.object(main.settings, "max_upload_bytes", 10):
        response = client.post("/api/v1/invoices/upload", files=files)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "too large" in response.json()["detail"]


def test_upload_no_file(client: TestClient) -> None:
    """Test that the file field is required."""
    response = client.post("/api/v1/invoices/upload")

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_upload_ocr_failure(client: TestClient, sample_image_bytes: bytes) -> None:
    """Test that an OCR failure maps to 500."""
    files = {"file": ("invoice.png", sample_image_bytes, "image/png")}

    with (
        patch("invoice_capture.api.main.ocr_service.extract_text") as mock_ocr,
        patch("invoice_capture.api.main.ocr_service.is_available", return_value=True),
    ):
        mock_ocr.return_value = OCRResult(text="", success=False, error="bad image")
        response = client.post("/api/v1/invoices/upload", files=files)

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert "bad image" in response.json()["detail"]


def test_upload_ocr_unavailable(client: TestClient, sample_image_bytes: bytes) -> None:
    """Test that a missing Tesseract binary maps to 503."""
    files = {"file": ("invoice.png", sample_image_bytes, "image/png")}

    with (
        patch("invoice_capture.api.main.ocr_service.extract_text") as mock_ocr,
        patch("invoice_capture.api.main.ocr_service.is_available", return_value=False),
    ):
        mock_ocr.return_value = OCRResult(
            text="", success=False, error="Tesseract OCR is not installed"
        )
        response = client.post("/api/v1/invoices/upload", files=files)

    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE


def test_parse_voice_text(client: TestClient) -> None:
    """Test voice transcript parsing against the form's items."""
    current_items = [
        {"id": "1", "description": "Charger", "quantity": 10, "rate": 10, "gstPct": 5},
        {"id": "2", "description": "Cable", "quantity": 2, "rate": 50, "gstPct": 18},
        {"id": "3", "description": "Adapter", "quantity": 1, "rate": 100, "gstPct": 18},
    ]

    response = client.post(
        "/api/v1/voice/parse",
        json={"text": "remove item two", "currentItems": current_items},
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert [item["id"] for item in data["items"]] == ["1", "3"]
    assert data["updates"] == [{"itemIndex": 1, "field": "removeItem"}]


def test_parse_voice_text_header_command(client: TestClient) -> None:
    """Test a header-only voice command."""
    response = client.post("/api/v1/voice/parse", json={"text": "gst eighteen percent"})

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["gstPct"] == 18
    assert data["items"] is None
    assert data["updates"] == [{"itemIndex": -1, "field": "gstPct"}]


def test_upload_voice(client: TestClient) -> None:
    """Test transcription then parsing of a voice clip."""
    files = {"file": ("command.m4a", b"fake audio", "audio/mp4")}

    with (
        patch("invoice_capture.api.main.speech_service.is_available", return_value=True),
        patch("invoice_capture.api.main.speech_service.transcribe") as mock_transcribe,
    ):
        mock_transcribe.return_value = TranscriptionResult(
            text="customer Ravi Kumar gst five", success=True
        )
        response = client.post("/api/v1/voice/upload", files=files)

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["transcript"] == "customer Ravi Kumar gst five"
    assert data["result"]["customer"] == "Ravi Kumar"
    assert data["result"]["gstPct"] == 5


def test_upload_voice_not_configured(client: TestClient) -> None:
    """Test that missing transcription credentials map to 503."""
    files = {"file": ("command.m4a", b"fake audio", "audio/mp4")}

    with patch("invoice_capture.api.main.speech_service.is_available", return_value=False):
        response = client.post("/api/v1/voice/upload", files=files)

    assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE


def test_upload_voice_invalid_type(client: TestClient) -> None:
    """Test that non-audio uploads are rejected."""
    files = {"file": ("command.txt", b"gst five", "text/plain")}

    response = client.post("/api/v1/voice/upload", files=files)

    assert response.status_code == status.HTTP_400_BAD_REQUEST


def test_upload_voice_transcription_failure(client: TestClient) -> None:
    """Test that a transcription failure maps to 500."""
    files = {"file": ("command.wav", b"fake audio", "audio/wav")}

    with (
        patch("invoice_capture.api.main.speech_service.is_available", return_value=True),
        patch("invoice_capture.api.main.speech_service.transcribe") as mock_transcribe,
    ):
        mock_transcribe.return_value = TranscriptionResult(
            text="", success=False, error="Transcription failed: timeout"
        )
        response = client.post("/api/v1/voice/upload", files=files)

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR


def test_metrics_endpoint(client: TestClient) -> None:
    """Test Prometheus metrics endpoint."""
    client.post("/api/v1/invoices/parse", json={"text": "Total ₹50"})
    client.post("/api/v1/voice/parse", json={"text": "gst five"})

    response = client.get("/metrics")

    assert response.status_code == status.HTTP_200_OK
    assert "http_requests_total" in response.text
    assert "invoices_parsed_total" in response.text
    assert "parse_duration_seconds_bucket" in response.text
    assert 'voice_field_updates_total{field="gstPct"}' in response.text


def test_main_serves_app_with_uvicorn() -> None:
    """Test that the entry point serves the app on the configured address."""
    with (
        patch("invoice_capture.api.main.uvicorn.run") as mock_run,
        patch.object(main.settings, "api_port", 9100),
    ):
        main.main()

    mock_run.assert_called_once_with(
        app,
        host=main.settings.api_host,
        port=9100,
        log_level=main.settings.log_level.lower(),
    )
