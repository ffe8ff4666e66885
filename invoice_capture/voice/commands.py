"""Voice transcript to invoice form edits.

Parsing is pure: ``parse_voice_commands`` turns a transcript and the form's
current items into a ``VoiceParseResult`` describing proposed values and the
fields they touch. Nothing is written until the dispatcher applies the result.

Recognizers run in a fixed order and independently of each other, so one
transcript may set several fields:

    invoice number -> customer -> GST -> date -> remove item -> notes
    -> item edits (or the single-field fallback) -> free-text description
"""

import logging
import re
from collections.abc import Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel

from invoice_capture.extraction.config import DEFAULT_CONFIG, ParserConfig
from invoice_capture.extraction.schema import HEADER, FieldUpdate, InvoiceLineItem
from invoice_capture.voice.dates import parse_spoken_date
from invoice_capture.voice.numbers import words_to_numbers

logger = logging.getLogger(__name__)

_I = re.IGNORECASE

# Words that start another command and therefore end a free-text value
_COMMANDS = (
    r"(?:invoice|sell|bill)\s+number|customer|gst|remove|delete|item\s*\d+|(?:additional\s+)?notes?"
)
_FIELDS = rf"{_COMMANDS}|dated|date|description|quantity|qty|rate|price"
_VALUE_END = r"\s*[,;]|\.(?!\d)|\s*$"
COMMAND_BOUNDARY = rf"(?=(?:\s*,)?\s+(?:and\s+)?(?:{_COMMANDS})\b|{_VALUE_END})"
FIELD_BOUNDARY = rf"(?=(?:\s*,)?\s+(?:and\s+)?(?:{_FIELDS})\b|{_VALUE_END})"

INVOICE_NUMBER = re.compile(
    rf"\b(?:invoice|sell|bill)\s*number\s*(?:is\s+)?[:\-]?\s*([\w\s-]+?){FIELD_BOUNDARY}", _I
)
CUSTOMER = re.compile(
    rf"\bcustomer(?:\s+name)?(?:\s+is)?\s*[:\-]?\s*([\w\s]+?){FIELD_BOUNDARY}", _I
)
GST = re.compile(
    r"\bgst(?:\s+percent(?:age)?|\s+is|\s*:)?\s*(\d+(?:\.\d+)?)\s*(?:%|percent\b)?", _I
)
DATE = (
    re.compile(r"\bdated\b\s*[:\-]?\s*(.+)", _I),
    re.compile(r"\b(?:(?:invoice|sell)\s+)?date\b(?:\s+is|\s*:)?\s*(.+)", _I),
)
REMOVE = re.compile(
    r"\b(?:remove|delete)\s+(?:the\s+)?(?:item\s+)?(?:number\s+)?"
    r"(\d+(?:st|nd|rd|th)?|all|everything)\b",
    _I,
)
NOTES = re.compile(
    rf"\b(?:additional\s+)?notes?\b(?:\s+is|\s+are)?\s*[:\-]?\s*(.+?){COMMAND_BOUNDARY}", _I
)

_ITEM = r"\bitem\s*(?:number\s*)?(?P<index>\d+)(?:st|nd|rd|th)?"
_SEP = r"(?:\s*,)?\s+(?:and\s+)?"
_DESCRIPTION = rf"description\s*(?:is\s+)?(?P<description>[^,;]+?){FIELD_BOUNDARY}"
_QUANTITY = r"(?:quantity|qty)\s*(?:is\s+)?(?P<quantity>\d+(?:\.\d+)?)"
_RATE = r"(?:rate|price)\s*(?:is\s+)?(?P<rate>\d+(?:\.\d+)?)"

# Speaking orders: description-quantity-rate, quantity-rate-description,
# description-rate-quantity
ITEM_PATTERNS = (
    re.compile(rf"{_ITEM}\s*{_DESCRIPTION}(?:{_SEP}{_QUANTITY})?(?:{_SEP}{_RATE})?", _I),
    re.compile(rf"{_ITEM}\s*{_QUANTITY}(?:{_SEP}{_RATE})?(?:{_SEP}{_DESCRIPTION})?", _I),
    re.compile(rf"{_ITEM}\s*{_DESCRIPTION}(?:{_SEP}{_RATE})?(?:{_SEP}{_QUANTITY})?", _I),
)

FALLBACK_DESCRIPTION = re.compile(rf"\b{_DESCRIPTION}", _I)
FALLBACK_QUANTITY = re.compile(rf"\b{_QUANTITY}", _I)
FALLBACK_RATE = re.compile(rf"\b{_RATE}", _I)

ITEM_FIELDS = ("description", "quantity", "rate")


class VoiceParseResult(BaseModel):
    """Proposed form edits parsed from one transcript.

    Header attributes are None when the transcript did not mention them;
    ``items`` is None when the item list is unchanged. In JSON each update is
    an ``{"itemIndex": ..., "field": ...}`` object.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    invoice_number: str | None = None
    customer: str | None = None
    gst_pct: int | None = None
    invoice_date: str | None = None
    notes: str | None = None
    description: str | None = None
    items: list[InvoiceLineItem] | None = None
    updates: list[FieldUpdate] = Field(default_factory=list)

    @field_validator("updates", mode="before")
    @classmethod
    def _updates_from_objects(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return value
        return [
            FieldUpdate(
                item.get("itemIndex", item.get("item_index")),
                item["field"],
            )
            if isinstance(item, dict)
            else item
            for item in value
        ]

    @field_serializer("updates", when_used="json")
    def _updates_as_objects(self, updates: list[FieldUpdate]) -> list[dict[str, Any]]:
        return [{"itemIndex": update.item_index, "field": update.field} for update in updates]

    def is_empty(self) -> bool:
        return not self.updates


class VoiceCommandParser:
    """Parses voice transcripts into ``VoiceParseResult``.

    Example:
        >>> result = VoiceCommandParser().parse("gst eighteen percent")
        >>> result.gst_pct, result.updates
        (18, [FieldUpdate(item_index=-1, field='gstPct')])
    """

    def __init__(self, config: ParserConfig | None = None) -> None:
        self.config = config or DEFAULT_CONFIG

    def parse(
        self, text: str, current_items: Sequence[InvoiceLineItem] = ()
    ) -> VoiceParseResult:
        """Parse a transcript against the form's current items.

        Args:
            text: Speech-to-text transcript
            current_items: Items currently on the form (not modified)

        Returns:
            Proposed edits; an empty result when nothing was recognized
        """
        result = VoiceParseResult()
        normalized = words_to_numbers(text or "").strip()
        if not normalized:
            return result
        logger.debug(f"Voice transcript after number conversion: {normalized!r}")

        self._invoice_number(normalized, result)
        self._customer(normalized, result)
        self._gst(normalized, result)
        self._date(normalized, result)

        items = list(current_items)
        changed = self._remove(normalized, items, result)
        self._notes(normalized, result)
        changed = self._items(normalized, items, result) or changed
        if changed:
            result.items = items

        logger.info(f"Voice command updated {len(result.updates)} fields")
        return result

    # --- header recognizers -------------------------------------------------

    def _invoice_number(self, text: str, result: VoiceParseResult) -> None:
        match = INVOICE_NUMBER.search(text)
        if not match:
            return
        number = re.sub(r"[\s-]", "", match.group(1))
        if number:
            result.invoice_number = number
            result.updates.append(FieldUpdate(HEADER, "invoiceNumber"))

    def _customer(self, text: str, result: VoiceParseResult) -> None:
        match = CUSTOMER.search(text)
        if not match:
            return
        customer = " ".join(match.group(1).split())
        if customer:
            result.customer = customer
            result.updates.append(FieldUpdate(HEADER, "customer"))

    def _gst(self, text: str, result: VoiceParseResult) -> None:
        match = GST.search(text)
        if not match:
            return
        value = float(match.group(1))
        if not value.is_integer() or not self.config.is_allowed_gst(value):
            logger.debug(f"Ignoring spoken GST {value}: not one of {self.config.gst_rates}")
            return
        result.gst_pct = int(value)
        result.updates.append(FieldUpdate(HEADER, "gstPct"))

    def _date(self, text: str, result: VoiceParseResult) -> None:
        for pattern in DATE:
            match = pattern.search(text)
            if not match:
                continue
            iso = parse_spoken_date(match.group(1))
            if iso:
                result.invoice_date = iso
                result.updates.append(FieldUpdate(HEADER, "invoiceDate"))
            return

    def _remove(self, text: str, items: list[InvoiceLineItem], result: VoiceParseResult) -> bool:
        match = REMOVE.search(text)
        if not match:
            return False
        target = match.group(1).lower()

        if target in ("all", "everything"):
            # The form always keeps one row
            del items[1:]
            result.updates.append(FieldUpdate(HEADER, "removeAll"))
            return True

        index = int(re.sub(r"\D", "", target)) - 1
        if 0 <= index < len(items) and len(items) > 1:
            del items[index]
            result.updates.append(FieldUpdate(index, "removeItem"))
            return True
        logger.debug(f"Cannot remove item {index + 1} from {len(items)} items")
        return False

    def _notes(self, text: str, result: VoiceParseResult) -> None:
        match = NOTES.search(text)
        if not match:
            return
        notes = " ".join(match.group(1).split())
        if notes:
            result.notes = notes
            result.updates.append(FieldUpdate(HEADER, "notes"))

    # --- items ----------------------------------------------------------------

    def _items(self, text: str, items: list[InvoiceLineItem], result: VoiceParseResult) -> bool:
        slots: dict[int, int] = {}
        seen: set[FieldUpdate] = set()
        found = False

        for pattern in ITEM_PATTERNS:
            for match in pattern.finditer(text):
                values = {
                    field: match.group(field)
                    for field in ITEM_FIELDS
                    if match.group(field) is not None
                }
                if not values:
                    continue
                found = True
                spoken = max(0, int(match.group("index")) - 1)
                if spoken not in slots:
                    slots[spoken] = self._slot(items, spoken)
                self._update_item(items, slots[spoken], values, result, seen)

        if found:
            return True
        return self._fallback(text, items, result)

    def _fallback(self, text: str, items: list[InvoiceLineItem], result: VoiceParseResult) -> bool:
        values: dict[str, str] = {}
        for field, pattern in (
            ("description", FALLBACK_DESCRIPTION),
            ("quantity", FALLBACK_QUANTITY),
            ("rate", FALLBACK_RATE),
        ):
            match = pattern.search(text)
            if match:
                values[field] = match.group(field)
        if not values:
            return False

        if not items and set(values) == {"description"}:
            result.description = values["description"].strip()
            result.updates.append(FieldUpdate(HEADER, "description"))
            return False

        self._update_item(items, self._slot(items, 0), values, result, set())
        return True

    def _slot(self, items: list[InvoiceLineItem], index: int) -> int:
        """Position of the addressed item, appending a blank item past the end."""
        if index < len(items):
            return index
        items.append(
            InvoiceLineItem(
                id=str(len(items) + 1),
                quantity=1,
                rate=0,
                gst_pct=self.config.default_gst_pct,
            )
        )
        return len(items) - 1

    def _update_item(
        self,
        items: list[InvoiceLineItem],
        index: int,
        values: dict[str, str],
        result: VoiceParseResult,
        seen: set[FieldUpdate],
    ) -> None:
        changes: dict[str, str | float] = {}
        if "description" in values:
            changes["description"] = " ".join(values["description"].split())
        if "quantity" in values:
            changes["quantity"] = float(values["quantity"])
        if "rate" in values:
            changes["rate"] = float(values["rate"])

        item = items[index].model_copy(update=changes)
        if item.has_computable_amount():
            item = item.with_computed_amount()
        items[index] = item

        for field in ITEM_FIELDS:
            update = FieldUpdate(index, field)
            if field in changes and update not in seen:
                seen.add(update)
                result.updates.append(update)


def parse_voice_commands(
    text: str,
    current_items: Sequence[InvoiceLineItem] = (),
    config: ParserConfig | None = None,
) -> VoiceParseResult:
    """Parse a voice transcript into proposed invoice form edits.

    Args:
        text: Speech-to-text transcript
        current_items: Items currently on the form
        config: Parser configuration; defaults apply when None

    Returns:
        Proposed edits and the fields they update
    """
    return VoiceCommandParser(config).parse(text, current_items)
