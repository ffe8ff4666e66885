"""Speech-to-text for voice invoice entry.

Transcribes recorded voice commands with the OpenAI transcription API. The
transcript feeds the voice command parser; without an OPENAI_API_KEY the
service returns an empty transcript instead of failing.

Includes retry logic with exponential backoff for transient API errors.
"""

import logging
import os
from pathlib import Path

from openai import APIConnectionError, APITimeoutError, OpenAI, OpenAIError, RateLimitError
from pydantic import BaseModel
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from invoice_capture.shared.config import Settings

logger = logging.getLogger(__name__)

SUPPORTED_AUDIO_EXTENSIONS = {
    ".m4a": "audio/mp4",
    ".mp3": "audio/mpeg",
    ".mp4": "audio/mp4",
    ".wav": "audio/wav",
    ".webm": "audio/webm",
    ".ogg": "audio/ogg",
}

TRANSIENT_ERRORS = (APIConnectionError, APITimeoutError, RateLimitError)


class TranscriptionResult(BaseModel):
    """Result of a transcription.

    Attributes:
        text: Transcript, empty when nothing could be transcribed
        success: Whether transcription succeeded
        error: Error message if transcription failed
    """

    text: str
    success: bool
    error: str | None = None


class SpeechToTextService:
    """Transcribes audio clips with OpenAI.

    Requires OPENAI_API_KEY environment variable.
    """

    def __init__(self, settings: Settings) -> None:
        """Initialize the service.

        Args:
            settings: Application settings (transcription model, size limit)
        """
        self.settings = settings
        self._client: OpenAI | None = None

    def is_available(self) -> bool:
        """Check if OPENAI_API_KEY is configured."""
        return bool(os.getenv("OPENAI_API_KEY"))

    def is_supported_file(self, filename: str) -> bool:
        return Path(filename).suffix.lower() in SUPPORTED_AUDIO_EXTENSIONS

    def transcribe(self, audio_path: Path) -> TranscriptionResult:
        """Transcribe an audio file.

        Args:
            audio_path: Path to the recorded clip

        Returns:
            TranscriptionResult with the transcript, or empty text and an error
        """
        if not self.is_available():
            logger.warning("OPENAI_API_KEY not set; returning empty transcript")
            return TranscriptionResult(
                text="", success=False, error="OPENAI_API_KEY environment variable not set"
            )

        if not audio_path.exists():
            return TranscriptionResult(
                text="", success=False, error=f"Audio file not found: {audio_path}"
            )

        api_key = os.getenv("OPENAI_API_KEY")
        if self._client is None or self._client.api_key != api_key:
            self._client = OpenAI(api_key=api_key)

        try:
            text = self._transcribe_with_retry(audio_path)
        except OpenAIError as e:
            logger.error(f"Transcription failed for {audio_path.name}: {e}")
            return TranscriptionResult(text="", success=False, error=f"Transcription failed: {e}")

        logger.info(f"Transcribed {audio_path.name}: {len(text)} characters")
        return TranscriptionResult(text=text.strip(), success=True)

    @retry(
        retry=retry_if_exception_type(TRANSIENT_ERRORS),
        wait=wait_exponential_jitter(initial=1, max=30),
        stop=stop_after_attempt(3),
        reraise=True,
    )
    def _transcribe_with_retry(self, audio_path: Path) -> str:
        """Call the transcription endpoint, retrying connection and rate-limit errors.

        Raises:
            OpenAIError: After all retry attempts are exhausted
        """
        if self._client is None:
            raise RuntimeError("OpenAI client not initialized")

        with audio_path.open("rb") as audio:
            transcription = self._client.audio.transcriptions.create(
                model=self.settings.speech_model,
                file=audio,
            )
        return transcription.text
