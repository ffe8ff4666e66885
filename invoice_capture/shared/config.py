"""Shared configuration management for the invoice capture service.

Based on Pydantic Settings v2 best practices:
https://docs.pydantic.dev/latest/concepts/pydantic_settings/
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support.

    All settings can be overridden via environment variables with the prefix 'APP_'.
    Example: APP_LOG_LEVEL=debug

    List and dict settings are read as JSON, e.g.
    APP_CURRENCY_SYMBOLS='["₹", "$"]' or APP_KNOWN_ITEMS='{"Charger": 5}'.
    """

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )

    # Service configuration
    service_name: str = Field(
        default="invoice-capture",
        description="Service identifier for metrics and logs",
    )
    service_version: str = Field(
        default="0.1.0",
        description="Service version",
    )

    # Provider configuration
    ocr_provider: Literal["tesseract"] = Field(
        default="tesseract",
        description="OCR backend that turns invoice images into raw text",
    )
    extraction_provider: Literal["heuristic"] = Field(
        default="heuristic",
        description="Extraction provider: heuristic (rule-based text parser)",
    )
    speech_model: str = Field(
        default="whisper-1",
        description="OpenAI transcription model used for voice input",
    )

    # HTTP server
    api_host: str = Field(
        default="0.0.0.0",
        description="Interface the API server binds to",
    )
    api_port: int = Field(
        default=8000,
        description="Port the API server listens on",
        gt=0,
        lt=65536,
    )

    # Upload limits
    max_upload_bytes: int = Field(
        default=10 * 1024 * 1024,
        description="Maximum accepted size of an uploaded document or audio clip",
        gt=0,
    )

    # Parser locale and vocabulary
    currency_symbols: list[str] = Field(
        default_factory=lambda: ["₹"],
        description="Currency glyphs that may prefix monetary figures",
    )
    thousands_separator: str = Field(
        default=",",
        description="Digit grouping separator in monetary figures",
        min_length=1,
        max_length=1,
    )
    decimal_separator: str = Field(
        default=".",
        description="Decimal separator in monetary figures",
        min_length=1,
        max_length=1,
    )
    gst_rates: list[int] = Field(
        default_factory=lambda: [0, 5, 12, 18, 28],
        description="GST percentages accepted from either parser",
    )
    default_gst_pct: int = Field(
        default=18,
        description="GST percentage assumed when a row does not state one",
    )
    invoice_prefixes: list[str] = Field(
        default_factory=lambda: ["SEL"],
        description="Document number prefixes recognized ahead of labelled invoice numbers",
    )
    known_items: dict[str, int] = Field(
        default_factory=dict,
        description="Expected item names and their GST rates for the known-name fallback",
    )
    address_countries: list[str] = Field(
        default_factory=lambda: ["India", "Switzerland", "USA", "UK", "Canada"],
        description="Country names that end an unlabelled address",
    )
    generic_item_limit: int = Field(
        default=3,
        description="Numeric triplets read by the generic line-item fallback",
        ge=1,
    )


def get_settings() -> Settings:
    """Factory function to get settings instance.

    Returns:
        Configured Settings instance
    """
    return Settings()
