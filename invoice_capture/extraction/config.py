"""Locale and vocabulary parameters of the text parsers."""

from pydantic import BaseModel, ConfigDict, Field, model_validator

from invoice_capture.extraction.schema import DEFAULT_GST_PCT
from invoice_capture.shared.config import Settings


class ParserConfig(BaseModel):
    """Parameters shared by the OCR and voice parsers.

    Attributes:
        currency_symbols: Glyphs that may prefix monetary figures
        thousands_separator: Digit grouping separator
        decimal_separator: Decimal separator
        gst_rates: Accepted GST percentages
        default_gst_pct: GST assumed when a row states none
        invoice_prefixes: Document number prefixes (e.g. ``SEL`` for ``SEL-00123``)
        known_items: Expected item names mapped to their GST rate
        address_countries: Country names that terminate an unlabelled address
        generic_item_limit: Number of numeric triplets read by the generic item tier
    """

    model_config = ConfigDict(frozen=True)

    currency_symbols: tuple[str, ...] = ("₹",)
    thousands_separator: str = Field(",", min_length=1, max_length=1)
    decimal_separator: str = Field(".", min_length=1, max_length=1)
    gst_rates: tuple[int, ...] = (0, 5, 12, 18, 28)
    default_gst_pct: int = DEFAULT_GST_PCT
    invoice_prefixes: tuple[str, ...] = ("SEL",)
    known_items: dict[str, int] = Field(default_factory=dict)
    address_countries: tuple[str, ...] = ("India", "Switzerland", "USA", "UK", "Canada")
    generic_item_limit: int = Field(3, ge=1)

    @model_validator(mode="after")
    def _check_gst_defaults(self) -> "ParserConfig":
        if self.default_gst_pct not in self.gst_rates:
            raise ValueError(
                f"default_gst_pct {self.default_gst_pct} is not one of gst_rates {self.gst_rates}"
            )
        if self.thousands_separator == self.decimal_separator:
            raise ValueError("thousands_separator and decimal_separator must differ")
        return self

    def is_allowed_gst(self, value: float) -> bool:
        return value in self.gst_rates

    @classmethod
    def from_settings(cls, settings: Settings) -> "ParserConfig":
        """Build parser configuration from application settings.

        Args:
            settings: Application settings

        Returns:
            ParserConfig carrying the settings' locale and vocabulary
        """
        return cls(
            currency_symbols=tuple(settings.currency_symbols),
            thousands_separator=settings.thousands_separator,
            decimal_separator=settings.decimal_separator,
            gst_rates=tuple(settings.gst_rates),
            default_gst_pct=settings.default_gst_pct,
            invoice_prefixes=tuple(settings.invoice_prefixes),
            known_items=dict(settings.known_items),
            address_countries=tuple(settings.address_countries),
            generic_item_limit=settings.generic_item_limit,
        )


DEFAULT_CONFIG = ParserConfig()
