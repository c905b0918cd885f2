"""
Pydantic models for invoice records and extraction results.

This module defines the core data structures used throughout the converter:
- InvoiceHeader, LineItem and InvoiceTotals for fields captured from text
- Invoice, the per-invoice-number aggregate built up across pages
- ExtractionOptions and ExtractionResult for a single conversion run
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from .config import (
    DEFAULT_CURRENCY,
    DEFAULT_LAYOUT,
    DRAFT_STATUS,
    EXCLUDE_DRAFT_DEFAULT,
    MIN_DIGITAL_TEXT_LEN,
    NORMALIZE_CURRENCY_TO,
    OCR_SCALE,
    LayoutVariant,
)


class InvoiceHeader(BaseModel):
    """
    Header block of an invoice.

    Every field is an optional raw string. Once a field holds a non-empty
    value it is never overwritten by a later capture of the same invoice.
    """
    vendor_id: Optional[str] = Field(None, description="Vendor identifier")
    attention_to: Optional[str] = Field(None, description="Addressee of the invoice")
    invoice_date: Optional[str] = Field(
        None,
        description="Invoice date as printed (dd/mm/yyyy family)"
    )
    credit_term: Optional[str] = Field(None, description="Credit term, e.g. '30 Days'")
    invoice_no: Optional[str] = Field(None, description="Invoice number")
    related_invoice_no: Optional[str] = Field(None, description="Related invoice number")
    invoice_status: Optional[str] = Field(None, description="Free-text invoice status")
    instruction_id: Optional[str] = Field(None, description="Invoicing instruction ID")
    header_description: Optional[str] = Field(None, description="Invoice-level description")


class LineItem(BaseModel):
    """
    Represents a single line item captured from invoice text.

    Numeric fields are kept as the raw strings found in the text (thousands
    separators included); they are only converted to numbers on export.
    """
    line_no: int = Field(..., ge=1, description="Line number printed on the invoice")
    description: str = Field(..., description="Item or service description")
    quantity: str = Field(..., description="Quantity as printed")
    unit_price: str = Field(..., description="Unit price as printed")
    gross_excluding_tax: str = Field(..., description="Gross amount excluding GST")
    tax_amount: Optional[str] = Field(
        None,
        description="GST amount, only present in itemised layouts"
    )
    gross_including_tax: str = Field(..., description="Gross amount including GST")
    tax_rate_percent: Optional[float] = Field(
        None,
        description="GST rate derived from the tax amount, one decimal place"
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "line_no": 1,
                    "description": "Consulting services March",
                    "quantity": "10.00000",
                    "unit_price": "150.00",
                    "gross_excluding_tax": "1,500.00",
                    "tax_amount": "135.00",
                    "gross_including_tax": "1,635.00",
                    "tax_rate_percent": 9.0,
                }
            ]
        }
    }


class InvoiceTotals(BaseModel):
    """Invoice-level totals, read from text or computed from line items."""
    currency: Optional[str] = Field(None, description="Currency name, e.g. 'Singapore Dollar'")
    subtotal: Optional[str] = Field(None, description="Sub total excluding GST")
    tax: Optional[str] = Field(None, description="Total GST payable")
    freight: Optional[str] = Field(None, description="Freight amount")
    grand_total: Optional[str] = Field(None, description="Total invoice amount")


class Invoice(BaseModel):
    """
    Aggregate of everything captured for one invoice number.

    Created on the first sighting of the number, grown as later chunks are
    processed, and finalized (totals reconciled) once at the end of a run.
    """
    invoice_no: str = Field(..., min_length=1, description="Grouping key across pages")
    header: InvoiceHeader = Field(default_factory=InvoiceHeader)
    line_items: list[LineItem] = Field(default_factory=list)
    totals: InvoiceTotals = Field(default_factory=InvoiceTotals)
    gst_rate: Optional[float] = Field(
        None,
        description="Invoice-level GST rate used when an item has no rate of its own"
    )
    finalized: bool = Field(False, description="True once totals have been reconciled")


# ============================================================================
# Run Options and Results
# ============================================================================

class ExtractionOptions(BaseModel):
    """Options recognized by a single conversion run."""
    exclude_draft_invoices: bool = Field(
        EXCLUDE_DRAFT_DEFAULT,
        description="Drop invoices whose status equals the draft status"
    )
    force_ocr: bool = Field(False, description="OCR every page even if digital text exists")
    minimum_digital_text_length: int = Field(
        MIN_DIGITAL_TEXT_LEN,
        ge=0,
        description="Digital text shorter than this triggers OCR"
    )
    normalize_currency_to: Optional[str] = Field(
        NORMALIZE_CURRENCY_TO,
        description="Currency code written over every extracted currency"
    )
    layout: LayoutVariant = Field(DEFAULT_LAYOUT, description="Line-item/totals layout variant")
    default_currency: str = Field(
        DEFAULT_CURRENCY,
        description="Currency used when none is printed"
    )
    draft_status: str = Field(DRAFT_STATUS, description="Status string treated as draft")
    ocr_scale: float = Field(OCR_SCALE, gt=0, description="Render scale for OCR bitmaps")


class ExtractionStatus(str, Enum):
    """Outcome of a conversion run that did not fail outright."""
    OK = "ok"
    NO_LINE_ITEMS = "no_line_items"


class ExtractionResult(BaseModel):
    """
    Rows produced by a conversion run together with their column headers.

    A run that finds no line items is not an error; it reports
    NO_LINE_ITEMS so callers can retry with OCR forced.
    """
    status: ExtractionStatus
    message: str
    layout: LayoutVariant
    headers: list[str]
    rows: list[list[Any]] = Field(default_factory=list)
    invoices: list[Invoice] = Field(default_factory=list)
    page_count: int = Field(0, ge=0)
    text_preview: str = ""

    @property
    def row_count(self) -> int:
        return len(self.rows)


# ============================================================================
# Record Merging
# ============================================================================

def merge_if_absent(target: BaseModel, source: BaseModel) -> list[str]:
    """
    Copy fields from source onto target where the target field is still empty.

    A field that already holds a value is never overwritten (first writer
    wins). Empty and None source values are ignored.

    Returns:
        Names of the fields that were filled
    """
    filled = []
    for name in type(target).model_fields:
        value = getattr(source, name, None)
        if value in (None, "") or getattr(target, name) not in (None, ""):
            continue
        setattr(target, name, value)
        filled.append(name)
    return filled
