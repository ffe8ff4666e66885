"""Invoice data models produced by the OCR and voice parsers.

Attributes are snake_case in Python and serialize with the camelCase names
the invoice form uses (``invoiceNumber``, ``gstPct``, ``totalGST``...).
"""

import math
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_GST_PCT = 18

# Tolerance used when comparing a stated amount against a computed one
AMOUNT_TOLERANCE = 0.01


def compute_amount(quantity: float, rate: float, gst_pct: float) -> float:
    """Line amount including GST, at full precision.

    Args:
        quantity: Item quantity
        rate: Unit price before tax
        gst_pct: GST percentage

    Returns:
        quantity * rate * (1 + gst_pct / 100)
    """
    return quantity * rate * (100 + gst_pct) / 100


def amounts_agree(stated: float, computed: float) -> bool:
    """Check whether a stated amount matches a computed one within tolerance."""
    return math.isclose(stated, computed, rel_tol=0.0, abs_tol=AMOUNT_TOLERANCE)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class InvoiceLineItem(_CamelModel):
    """A single invoice row.

    Attributes:
        id: Row identifier owned by the form (optional)
        description: Item description
        quantity: Quantity (non-negative)
        rate: Unit price before tax (non-negative)
        gst_pct: GST percentage applied to the row
        amount: Row total including GST
    """

    id: str | None = Field(None, description="Form row identifier")
    description: str = Field("", description="Item description")
    quantity: float = Field(0, ge=0, description="Quantity")
    rate: float = Field(0, ge=0, description="Unit price before tax")
    gst_pct: float = Field(DEFAULT_GST_PCT, description="GST percentage")
    amount: float = Field(0, description="Row total including GST")

    def has_computable_amount(self) -> bool:
        return self.quantity > 0 and self.rate > 0

    def with_computed_amount(self) -> "InvoiceLineItem":
        """Return a copy whose amount is recomputed from quantity, rate and GST.

        Items without a positive quantity and rate are returned unchanged.
        """
        if not self.has_computable_amount():
            return self.model_copy()
        amount = compute_amount(self.quantity, self.rate, self.gst_pct)
        return self.model_copy(update={"amount": amount})


class ParsedInvoiceData(_CamelModel):
    """Structured invoice record extracted from OCR text.

    Every field defaults to empty/zero; partial results are normal.
    """

    invoice_number: str = Field("", description="Invoice identifier")
    invoice_date: str = Field("", description="Invoice date as written on the document")
    customer_name: str = Field("", description="Customer name")
    customer_phone: str = Field("", description="Customer phone number")
    customer_address: str = Field("", description="Customer address")
    items: list[InvoiceLineItem] = Field(default_factory=list, description="Line items")
    subtotal: float = Field(0, description="Subtotal before tax")
    total_gst: float = Field(0, alias="totalGST", description="Total GST")
    total: float = Field(0, description="Total including tax")
    notes: str = Field("", description="Free-text notes")

    def is_empty(self) -> bool:
        """Check whether nothing at all was extracted."""
        return self == ParsedInvoiceData()


class FieldUpdate(NamedTuple):
    """Names a form field changed by a voice command.

    ``item_index`` is -1 for header fields, otherwise the 0-based item row.
    """

    item_index: int
    field: str


HEADER = -1
