"""Line item extraction from normalized OCR text.

Items are located by a three-tier cascade; the first tier producing at least
one item wins:

1. Table rows: ``<word> [GST] <pct>% <qty> <rate> <amount>`` or the GST-less
   ``<word> <qty> <rate> <amount>``.
2. Known item names supplied by the caller, for text whose table layout the
   OCR destroyed.
3. Any ``<int> <number> <number>`` triplet, read as quantity, rate, amount.
"""

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass

from invoice_capture.extraction.config import DEFAULT_CONFIG, ParserConfig
from invoice_capture.extraction.normalizer import parse_amount
from invoice_capture.extraction.schema import InvoiceLineItem, amounts_agree, compute_amount

logger = logging.getLogger(__name__)

# Table header and footer words that look like a description to the row patterns
NOISE_WORDS = frozenset(
    {
        "AMOUNT",
        "CALCULATIONS",
        "DESCRIPTION",
        "GST",
        "INVOICE",
        "ITEM",
        "NOTES",
        "QUANTITY",
        "RATE",
        "SUBTOTAL",
        "THANK",
        "TOTAL",
    }
)

_I = re.IGNORECASE


@dataclass(frozen=True)
class _Row:
    """Raw row values as matched, before GST and amount resolution."""

    description: str
    quantity: float
    rate: float
    amount: float
    gst_pct: float | None
    span: tuple[int, int]


def _number(config: ParserConfig) -> str:
    return rf"\d+(?:{re.escape(config.decimal_separator)}\d+)?"


class LineItemExtractor:
    """Extracts invoice line items using the table, known-name and generic tiers.

    Example:
        >>> LineItemExtractor().extract("Charger GST 5% 10 10 105.00")[0].amount
        105.0
    """

    def __init__(self, config: ParserConfig | None = None) -> None:
        self.config = config or DEFAULT_CONFIG
        number = _number(self.config)
        self._table_patterns: tuple[tuple[re.Pattern[str], bool], ...] = (
            (
                re.compile(
                    rf"\b([A-Za-z]+)\s+GST\s*(\d+)\s*%\s*(\d+)\s+({number})\s+({number})", _I
                ),
                True,
            ),
            (
                re.compile(rf"\b([A-Za-z]+)\s+(\d+)\s*%\s*(\d+)\s+({number})\s+({number})", _I),
                True,
            ),
            (re.compile(rf"\b([A-Za-z]+)\s+(\d+)\s+({number})\s+({number})(?!\s*%)", _I), False),
        )
        self._triplet = re.compile(rf"(?<![\w.\-/:])(\d+)\s+({number})\s+({number})(?!\d)")
        self._number = number

    def extract(self, text: str) -> list[InvoiceLineItem]:
        """Run the tiers in order until one yields items.

        Args:
            text: Normalized text

        Returns:
            Extracted line items, possibly empty
        """
        for tier, finder in (
            ("table", self.table_items),
            ("known-name", self.known_name_items),
            ("generic", self.generic_items),
        ):
            items = finder(text)
            if items:
                logger.debug(f"line items: {len(items)} found by the {tier} tier")
                return items
        return []

    def table_items(self, text: str) -> list[InvoiceLineItem]:
        """Rows with a description word followed by GST, quantity, rate and amount.

        Earlier row formats win overlapping text; rows are returned in
        document order whatever format matched them.
        """
        rows: list[_Row] = []
        for row in self._table_rows(text):
            if any(row.span[0] < kept.span[1] and kept.span[0] < row.span[1] for kept in rows):
                continue
            if not self._is_item_description(row.description):
                continue
            if row.quantity <= 0 or row.rate <= 0:
                continue
            rows.append(row)
        rows.sort(key=lambda row: row.span[0])
        return [self._to_item(row) for row in rows]

    def known_name_items(self, text: str) -> list[InvoiceLineItem]:
        """Probe each caller-supplied item name with label/number variants."""
        items = []
        for name, gst_pct in self.config.known_items.items():
            for pattern in self._known_name_patterns(name, gst_pct):
                row = self._known_name_row(pattern, text, name, gst_pct)
                if row is not None:
                    items.append(self._to_item(row))
                    break
        return items

    def generic_items(self, text: str) -> list[InvoiceLineItem]:
        """Numeric triplets read positionally as quantity, rate and amount."""
        items = []
        matches = list(self._triplet.finditer(text))[: self.config.generic_item_limit]
        for position, match in enumerate(matches, start=1):
            row = _Row(
                description=f"Item {position}",
                quantity=float(match.group(1)),
                rate=self._parse(match.group(2)),
                amount=self._parse(match.group(3)),
                gst_pct=None,
                span=match.span(),
            )
            if row.quantity > 0 and row.rate > 0:
                items.append(self._to_item(row))
        return items

    def _table_rows(self, text: str) -> Iterator[_Row]:
        for pattern, has_gst in self._table_patterns:
            for match in pattern.finditer(text):
                groups = match.groups()
                if has_gst:
                    description, gst, quantity, rate, amount = groups
                    stated_gst: float | None = float(gst)
                else:
                    description, quantity, rate, amount = groups
                    stated_gst = None
                yield _Row(
                    description=description,
                    quantity=float(quantity),
                    rate=self._parse(rate),
                    amount=self._parse(amount),
                    gst_pct=stated_gst,
                    span=match.span(),
                )

    def _known_name_patterns(self, name: str, gst_pct: int) -> tuple[re.Pattern[str], ...]:
        label = re.escape(name)
        number = self._number
        values = rf"(\d+)\s+({number})\s+({number})"
        return (
            re.compile(rf"\b{label}\s+GST\s*{gst_pct}\s*%?\s*{values}", _I),
            re.compile(rf"\b{label}\s+{gst_pct}\s*%?\s*{values}", _I),
            re.compile(rf"\b{label}\s+{values}", _I),
            re.compile(rf"(?<![\w.])(\d+)\s+({number})\s+({number})\s+{label}\b", _I),
        )

    def _known_name_row(
        self, pattern: re.Pattern[str], text: str, name: str, gst_pct: int
    ) -> _Row | None:
        for match in pattern.finditer(text):
            quantity, rate, amount = match.groups()
            row = _Row(
                description=name,
                quantity=float(quantity),
                rate=self._parse(rate),
                amount=self._parse(amount),
                gst_pct=float(gst_pct),
                span=match.span(),
            )
            if row.quantity > 0 and row.rate > 0:
                return row
        return None

    def _is_item_description(self, description: str) -> bool:
        return len(description) > 2 and description.upper() not in NOISE_WORDS

    def _parse(self, raw: str) -> float:
        return parse_amount(raw, self.config)

    def _resolve_gst(self, row: _Row) -> float:
        if row.gst_pct is not None and self.config.is_allowed_gst(row.gst_pct):
            return row.gst_pct
        if row.amount > 0:
            for rate in self.config.gst_rates:
                if amounts_agree(row.amount, compute_amount(row.quantity, row.rate, rate)):
                    return rate
        return self.config.default_gst_pct

    def _to_item(self, row: _Row) -> InvoiceLineItem:
        gst_pct = self._resolve_gst(row)
        computed = compute_amount(row.quantity, row.rate, gst_pct)
        amount = row.amount if amounts_agree(row.amount, computed) else computed
        item = InvoiceLineItem(
            description=re.sub(r"[^\w\s]", "", row.description).strip(),
            quantity=row.quantity,
            rate=row.rate,
            gst_pct=gst_pct,
            amount=amount,
        )
        logger.debug(f"line items: parsed {item.model_dump()}")
        return item
