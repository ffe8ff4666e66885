"""Header field extraction from normalized OCR text.

Every field is an ordered tuple of rules. Labelled rules ("Invoice Number:",
"Customer Name:") come first and are authoritative; looser shapes follow.
The invoice number additionally falls back to a permissive scan whose
candidates are ranked by ``score_identifier``.
"""

import logging
import re
from functools import lru_cache

from invoice_capture.extraction.config import DEFAULT_CONFIG, ParserConfig
from invoice_capture.extraction.rules import Rule, first_match, rank_candidates

logger = logging.getLogger(__name__)

# Words printed on invoices that are never a value of a header field
HEADER_WORDS = frozenset(
    {
        "ADDRESS",
        "AMOUNT",
        "BILL",
        "CUSTOMER",
        "DATE",
        "DESCRIPTION",
        "GST",
        "INVOICE",
        "NAME",
        "NO",
        "NOTES",
        "NUMBER",
        "PHONE",
        "QUANTITY",
        "RATE",
        "RECEIPT",
        "SUBTOTAL",
        "TOTAL",
    }
)

# Captions OCR tends to glue onto the end of the preceding value
TRAILING_CAPTIONS = frozenset(
    {
        "address",
        "bill",
        "contact",
        "customer",
        "date",
        "description",
        "email",
        "gst",
        "gstin",
        "invoice",
        "mobile",
        "name",
        "notes",
        "number",
        "phone",
        "tel",
    }
)

_I = re.IGNORECASE


def _is_header_word(value: str) -> bool:
    return value.upper() in HEADER_WORDS


def _strip_trailing_captions(value: str) -> str:
    words = value.split()
    while words and words[-1].lower().strip(",.:-") in TRAILING_CAPTIONS:
        words.pop()
    return " ".join(words)


def _clean_name(match: re.Match[str]) -> str:
    name = re.sub(r"[^\w\s]", "", match.group(1))
    return _strip_trailing_captions(" ".join(name.split()))


def _clean_free_text(match: re.Match[str]) -> str:
    value = re.sub(r"[^\w\s,.-]", "", match.group(1))
    value = " ".join(value.split())
    value = re.sub(r"\s*,\s*", ", ", value)
    return _strip_trailing_captions(value).rstrip(" ,")


# --- Invoice number ---------------------------------------------------------


def _valid_identifier(value: str) -> bool:
    return len(value) >= 3 and not _is_header_word(value)


def _valid_bare_identifier(value: str) -> bool:
    return _valid_identifier(value) and any(char.isdigit() for char in value)


_IDENTIFIER = r"([A-Z0-9][A-Z0-9\-_/]*)"

LABELLED_INVOICE_NUMBER_RULES: tuple[Rule, ...] = (
    Rule(
        "invoice-number-label",
        re.compile(rf"\bInvoice\s*(?:Number|No\.?)\s*[:\-]?\s*{_IDENTIFIER}", _I),
        _valid_identifier,
    ),
    Rule(
        "invoice-bare",
        re.compile(rf"\bInvoice\s*[:\-]?\s*{_IDENTIFIER}", _I),
        _valid_bare_identifier,
    ),
    Rule(
        "bill-number-label",
        re.compile(rf"\bBill\s*(?:Number|No\.?)\s*[:\-]?\s*{_IDENTIFIER}", _I),
        _valid_identifier,
    ),
    Rule(
        "receipt-label",
        re.compile(rf"\bReceipt\s*(?:Number|No\.?)?\s*[:\-]?\s*{_IDENTIFIER}", _I),
        _valid_bare_identifier,
    ),
)

# Permissive scan: upper-case letters, digits and separators, case-sensitive
_IDENTIFIER_SHAPE = re.compile(r"[A-Z0-9\-_/]{3,20}")

_NOT_IDENTIFIER_SHAPES = (
    re.compile(r"^\d{4}-\d{2}-\d{2}$"),
    re.compile(r"^\d{2}/\d{2}/\d{4}$"),
    re.compile(r"^\d{2}-\d{2}-\d{4}$"),
    re.compile(r"^\d{10,12}$"),
    re.compile(r"^(?:19|20)\d{2}$"),
)


@lru_cache(maxsize=32)
def _prefix_rule(prefixes: tuple[str, ...]) -> Rule | None:
    if not prefixes:
        return None
    alternation = "|".join(re.escape(prefix) for prefix in prefixes)
    return Rule(
        "document-prefix",
        re.compile(rf"\b({alternation})\s*-?\s*(\d{{3,6}})\b", _I),
        transform=lambda match: f"{match.group(1).upper()}-{match.group(2)}",
    )


def invoice_number_rules(config: ParserConfig) -> tuple[Rule, ...]:
    """Ordered invoice number rules for a configuration."""
    prefix_rule = _prefix_rule(config.invoice_prefixes)
    if prefix_rule is None:
        return LABELLED_INVOICE_NUMBER_RULES
    return (prefix_rule, *LABELLED_INVOICE_NUMBER_RULES)


def identifier_candidates(text: str) -> list[str]:
    """Collect identifier-shaped tokens that are not dates, phones, years or captions."""
    candidates = []
    for match in _IDENTIFIER_SHAPE.finditer(text):
        value = match.group(0)
        if len(value) < 3 or _is_header_word(value):
            continue
        if any(shape.match(value) for shape in _NOT_IDENTIFIER_SHAPES):
            continue
        candidates.append(value)
    return candidates


# --- Date -------------------------------------------------------------------

INVOICE_DATE_RULES: tuple[Rule, ...] = (
    Rule("invoice-date-label", re.compile(r"\bInvoice\s*Date\s*[:\-]?\s*(\d{4}-\d{2}-\d{2})", _I)),
    Rule("iso", re.compile(r"\b(\d{4}-\d{2}-\d{2})\b")),
    Rule("slashed", re.compile(r"\b(\d{2}/\d{2}/\d{4})\b")),
    Rule("dashed", re.compile(r"\b(\d{2}-\d{2}-\d{4})\b")),
)

# --- Customer ---------------------------------------------------------------


def _valid_name(value: str) -> bool:
    words = value.split()
    return len(value) >= 2 and not all(_is_header_word(word) for word in words)


def _valid_two_word_name(value: str) -> bool:
    return not any(_is_header_word(word) for word in value.split())


_NAME = r"([A-Za-z][A-Za-z ]*)"

CUSTOMER_NAME_RULES: tuple[Rule, ...] = (
    Rule(
        "customer-name-label",
        re.compile(rf"\bCustomer\s*Name\s*[:\-]?\s*{_NAME}", _I),
        _valid_name,
        _clean_name,
    ),
    Rule(
        "customer-label",
        re.compile(rf"\bCustomer\s*[:\-]?\s*{_NAME}", _I),
        _valid_name,
        _clean_name,
    ),
    Rule(
        "bill-to",
        re.compile(rf"\bBill(?:ed)?\s*To\s*[:\-]?\s*{_NAME}", _I),
        _valid_name,
        _clean_name,
    ),
    Rule(
        "two-capitalized-words",
        re.compile(r"\b([A-Z][a-z]+ [A-Z][a-z]+)\b"),
        _valid_two_word_name,
        _clean_name,
    ),
)

# --- Phone ------------------------------------------------------------------

CUSTOMER_PHONE_RULES: tuple[Rule, ...] = (
    Rule(
        "phone-label",
        re.compile(
            r"\b(?:Phone|Mobile|Tel|Ph|Contact)(?:\s*No\.?)?\s*[:\-]?\s*(\d{10,12})(?!\d)", _I
        ),
    ),
    Rule("digits", re.compile(r"(?<!\d)(\d{10,12})(?!\d)")),
)

# --- Address ----------------------------------------------------------------

_ADDRESS_STOP = r"\b(?:Phone|Mobile|GST|GSTIN|Description|Email|Customer|Invoice|Notes)\b"

ADDRESS_LABEL_RULE = Rule(
    "address-label",
    re.compile(rf"\bAddress\s*[:\-]?\s*(.+?)(?=\s*{_ADDRESS_STOP}|$)", _I),
    bool,
    _clean_free_text,
)


@lru_cache(maxsize=32)
def _country_rule(countries: tuple[str, ...]) -> Rule | None:
    if not countries:
        return None
    alternation = "|".join(re.escape(country) for country in countries)
    return Rule(
        "street-to-country",
        re.compile(rf"\b(\d+\s+[A-Za-z][A-Za-z\s,.]*?\b(?:{alternation}))\b", _I),
        bool,
        _clean_free_text,
    )


def address_rules(config: ParserConfig) -> tuple[Rule, ...]:
    """Ordered address rules for a configuration."""
    country_rule = _country_rule(config.address_countries)
    if country_rule is None:
        return (ADDRESS_LABEL_RULE,)
    return (ADDRESS_LABEL_RULE, country_rule)


# --- Notes ------------------------------------------------------------------

# Phone status-bar and share-sheet text that trails screenshots of invoices
_NOTES_TRAILER = r"\b(?:Share|Lens|LTE)\b|\b\d{1,2}:\d{2}\b"

NOTES_RULES: tuple[Rule, ...] = (
    Rule(
        "notes-label",
        re.compile(rf"\bNotes?\s*[:\-]?\s*(.+?)(?=\s*(?:{_NOTES_TRAILER})|$)", _I),
        bool,
        _clean_free_text,
    ),
)


class FieldExtractor:
    """Extracts invoice header fields from normalized text.

    Example:
        >>> extractor = FieldExtractor()
        >>> extractor.invoice_number("Invoice Number: SEL-00123")
        'SEL-00123'
    """

    def __init__(self, config: ParserConfig | None = None) -> None:
        self.config = config or DEFAULT_CONFIG

    def invoice_number(self, text: str) -> str:
        """Labelled rules first, then the best-scoring identifier-shaped token."""
        found = first_match(invoice_number_rules(self.config), text, "invoice_number")
        if found is not None:
            value = found[1]
        else:
            ranked = rank_candidates(identifier_candidates(text))
            if not ranked:
                return ""
            value = ranked[0].value
            logger.debug(
                f"invoice_number: picked {value!r} (score {ranked[0].score}) "
                f"from {len(ranked)} candidates"
            )
        value = re.sub(r"[^\w\-/]", "", value.strip())
        if len(value) < 3:
            logger.debug(f"invoice_number: {value!r} is short and may be incomplete")
        return value

    def invoice_date(self, text: str) -> str:
        return self._first(INVOICE_DATE_RULES, text, "invoice_date")

    def customer_name(self, text: str) -> str:
        return self._first(CUSTOMER_NAME_RULES, text, "customer_name")

    def customer_phone(self, text: str) -> str:
        return self._first(CUSTOMER_PHONE_RULES, text, "customer_phone")

    def customer_address(self, text: str) -> str:
        return self._first(address_rules(self.config), text, "customer_address")

    def notes(self, text: str) -> str:
        return self._first(NOTES_RULES, text, "notes")

    def extract(self, text: str) -> dict[str, str]:
        """Extract every header field.

        Args:
            text: Normalized text

        Returns:
            Mapping of ParsedInvoiceData field name to value ("" when not found)
        """
        return {
            "invoice_number": self.invoice_number(text),
            "invoice_date": self.invoice_date(text),
            "customer_name": self.customer_name(text),
            "customer_phone": self.customer_phone(text),
            "customer_address": self.customer_address(text),
            "notes": self.notes(text),
        }

    @staticmethod
    def _first(rules: tuple[Rule, ...], text: str, field: str) -> str:
        found = first_match(rules, text, field)
        return found[1] if found is not None else ""
