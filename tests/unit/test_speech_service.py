"""Unit tests for the speech-to-text service.

Tests cover:
- Missing API key handling
- Successful transcription with a mocked OpenAI client
- Retry on transient errors and failure envelopes
"""

from pathlib import Path
from unittest.mock import MagicMock, patch

import httpx
import pytest
from openai import APIConnectionError, OpenAIError

from invoice_capture.shared.config import Settings
from invoice_capture.speech.service import SpeechToTextService, TranscriptionResult


@pytest.fixture
def speech_service() -> SpeechToTextService:
    """Create speech service instance."""
    return SpeechToTextService(Settings(_env_file=None))


@pytest.fixture
def audio_path(tmp_path: Path) -> Path:
    """Create a placeholder audio clip."""
    path = tmp_path / "command.m4a"
    path.write_bytes(b"\x00\x00\x00\x18ftypM4A ")
    return path


@pytest.fixture
def api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    """Configure a fake OpenAI API key."""
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")


def test_missing_api_key_returns_empty_transcript(
    speech_service: SpeechToTextService, audio_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Test that no API key means an empty transcript instead of a crash."""
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    result = speech_service.transcribe(audio_path)

    assert isinstance(result, TranscriptionResult)
    assert result.success is False
    assert result.text == ""
    assert result.error is not None
    assert "OPENAI_API_KEY" in result.error
    assert speech_service.is_available() is False


@pytest.mark.usefixtures("api_key")
def test_audio_file_not_found(speech_service: SpeechToTextService) -> None:
    """Test error handling for a missing clip."""
    result = speech_service.transcribe(Path("/non/existent/clip.m4a"))

    assert result.success is False
    assert result.text == ""
    assert result.error is not None
    assert "not found" in result.error.lower()


@pytest.mark.usefixtures("api_key")
@patch("invoice_capture.speech.service.OpenAI")
def test_transcribe_success(
    mock_openai: MagicMock, speech_service: SpeechToTextService, audio_path: Path
) -> None:
    """Test successful transcription."""
    mock_client = MagicMock()
    mock_client.audio.transcriptions.create.return_value = MagicMock(
        text=" gst eighteen percent "
    )
    mock_openai.return_value = mock_client

    result = speech_service.transcribe(audio_path)

    assert result.success is True
    assert result.text == "gst eighteen percent"
    assert result.error is None
    mock_openai.assert_called_once_with(api_key="sk-test")
    call_kwargs = mock_client.audio.transcriptions.create.call_args.kwargs
    assert call_kwargs["model"] == "whisper-1"


@pytest.mark.usefixtures("api_key")
@patch("invoice_capture.speech.service.OpenAI")
def test_transcribe_retries_transient_error(
    mock_openai: MagicMock, speech_service: SpeechToTextService, audio_path: Path
) -> None:
    """Test that a connection error is retried."""
    mock_client = MagicMock()
    request = httpx.Request("POST", "https://api.openai.com/v1/audio/transcriptions")
    mock_client.audio.transcriptions.create.side_effect = [
        APIConnectionError(request=request),
        MagicMock(text="remove item two"),
    ]
    mock_openai.return_value = mock_client

    result = speech_service.transcribe(audio_path)

    assert result.success is True
    assert result.text == "remove item two"
    assert mock_client.audio.transcriptions.create.call_count == 2


@pytest.mark.usefixtures("api_key")
@patch("invoice_capture.speech.service.OpenAI")
def test_transcribe_failure(
    mock_openai: MagicMock, speech_service: SpeechToTextService, audio_path: Path
) -> None:
    """Test that a non-transient API error is reported, not raised."""
    mock_client = MagicMock()
    mock_client.audio.transcriptions.create.side_effect = OpenAIError("invalid audio")
    mock_openai.return_value = mock_client

    result = speech_service.transcribe(audio_path)

    assert result.success is False
    assert result.text == ""
    assert result.error == "Transcription failed: invalid audio"
    assert mock_client.audio.transcriptions.create.call_count == 1


def test_retry_is_configured() -> None:
    """Test that the API call carries retry configuration."""
    assert hasattr(SpeechToTextService._transcribe_with_retry, "retry")


@pytest.mark.parametrize(
    ("filename", "supported"),
    [("clip.m4a", True), ("clip.WAV", True), ("clip.webm", True), ("clip.txt", False)],
)
def test_is_supported_file(
    speech_service: SpeechToTextService, filename: str, supported: bool
) -> None:
    """Test the accepted audio types."""
    assert speech_service.is_supported_file(filename) is supported
