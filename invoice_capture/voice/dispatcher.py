"""Applies parsed voice commands to an invoice form.

The form supplies one callback per editable field. Setters are only invoked
for values the transcript actually set, in a fixed order, so a form can rely
on the invoice number being written before the items.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from invoice_capture.extraction.config import ParserConfig
from invoice_capture.extraction.schema import FieldUpdate, InvoiceLineItem
from invoice_capture.voice.commands import VoiceParseResult, parse_voice_commands

logger = logging.getLogger(__name__)


def _ignore(_value: object) -> None:
    return None


@dataclass
class FieldSetters:
    """Form callbacks written to by voice commands.

    Attributes:
        set_invoice_number: Receives the invoice number string
        set_selected_customer: Receives the customer name
        set_gst_pct: Receives the GST percentage as an int
        set_invoice_date: Receives an ISO ``YYYY-MM-DD`` date
        set_notes: Receives the notes text
        set_items: Receives the full replacement item list
        set_description: Receives the invoice-level description
        current_items: Items currently on the form (read only)
    """

    set_invoice_number: Callable[[str], None] = _ignore
    set_selected_customer: Callable[[str], None] = _ignore
    set_gst_pct: Callable[[int], None] = _ignore
    set_invoice_date: Callable[[str], None] = _ignore
    set_notes: Callable[[str], None] = _ignore
    set_items: Callable[[list[InvoiceLineItem]], None] = _ignore
    set_description: Callable[[str], None] = _ignore
    current_items: Sequence[InvoiceLineItem] = ()


def apply_voice_result(result: VoiceParseResult, setters: FieldSetters) -> list[FieldUpdate]:
    """Push a parse result into the form through its setters.

    Args:
        result: Output of ``parse_voice_commands``
        setters: Form callbacks

    Returns:
        The updates described by the result, in parse order
    """
    if result.invoice_number is not None:
        setters.set_invoice_number(result.invoice_number)
    if result.customer is not None:
        setters.set_selected_customer(result.customer)
    if result.gst_pct is not None:
        setters.set_gst_pct(result.gst_pct)
    if result.invoice_date is not None:
        setters.set_invoice_date(result.invoice_date)
    if result.notes is not None:
        setters.set_notes(result.notes)
    if result.items is not None:
        setters.set_items(list(result.items))
    if result.description is not None:
        setters.set_description(result.description)

    logger.debug(f"Applied voice updates: {result.updates}")
    return list(result.updates)


def parse_invoice_voice_text(
    text: str, setters: FieldSetters, config: ParserConfig | None = None
) -> list[FieldUpdate]:
    """Parse a transcript and apply it to the form.

    Args:
        text: Speech-to-text transcript
        setters: Form callbacks, including the current items
        config: Parser configuration; defaults apply when None

    Returns:
        Fields updated by the transcript; empty when nothing was recognized

    Example:
        >>> gst = []
        >>> parse_invoice_voice_text("gst eighteen percent", FieldSetters(set_gst_pct=gst.append))
        [FieldUpdate(item_index=-1, field='gstPct')]
        >>> gst
        [18]
    """
    result = parse_voice_commands(text, setters.current_items, config)
    return apply_voice_result(result, setters)
