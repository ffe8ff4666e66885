"""Extraction provider lookup.

Providers register by name so a new parser plugs in without touching
callers; ``APP_EXTRACTION_PROVIDER`` selects one.
"""

import logging

from invoice_capture.extraction.base import ExtractionProvider
from invoice_capture.extraction.heuristic_provider import HeuristicExtractionProvider
from invoice_capture.shared.config import Settings

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Name to class mapping for extraction providers."""

    _providers: dict[str, type[ExtractionProvider]] = {
        "heuristic": HeuristicExtractionProvider,
    }

    @classmethod
    def register(cls, name: str, provider_class: type[ExtractionProvider]) -> None:
        """Add or replace a provider under ``name``."""
        cls._providers[name] = provider_class
        logger.info(f"Registered extraction provider: {name}")

    @classmethod
    def get_provider_class(cls, name: str) -> type[ExtractionProvider]:
        """Look up a provider class.

        Raises:
            ValueError: If ``name`` is not registered; the message lists the
                registered names
        """
        try:
            return cls._providers[name]
        except KeyError:
            available = ", ".join(sorted(cls._providers))
            raise ValueError(
                f"Unknown extraction provider: '{name}'. Available providers: {available}"
            ) from None

    @classmethod
    def list_providers(cls) -> list[str]:
        return sorted(cls._providers)


def create_extraction_service(settings: Settings) -> ExtractionProvider:
    """Build the provider named by ``settings.extraction_provider``.

    Raises:
        ValueError: If the configured provider is not registered

    Example:
        >>> provider = create_extraction_service(Settings())
        >>> provider.extract_invoice_fields("Invoice Number: SEL-00123").invoice_data.invoice_number
        'SEL-00123'
    """
    name = settings.extraction_provider
    provider = ProviderRegistry.get_provider_class(name)(settings)

    if not provider.is_available():
        logger.warning(f"Extraction provider '{name}' is not available; check configuration")

    logger.info(f"Created extraction provider: {name}")
    return provider
