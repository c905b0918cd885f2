"""
Configuration constants and enums for the invoice-to-rows converter.
"""

import logging
import os
from enum import Enum
from typing import Final, Optional


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# ============================================================================
# Business Defaults
# ============================================================================

# Currency assumed when none is printed on the invoice
DEFAULT_CURRENCY: Final[str] = os.getenv("DEFAULT_CURRENCY", "Singapore Dollar")

# Status string (compared case-insensitively) that marks an invoice as a draft
DRAFT_STATUS: Final[str] = os.getenv("DRAFT_STATUS", "draft")

EXCLUDE_DRAFT_DEFAULT: Final[bool] = _env_flag("EXCLUDE_DRAFT_INVOICES", False)

# Optional currency code written over every extracted currency (e.g. "SGD")
NORMALIZE_CURRENCY_TO: Final[Optional[str]] = os.getenv("NORMALIZE_CURRENCY_TO") or None


class LayoutVariant(str, Enum):
    """Supported line-item/totals grammars."""
    STANDARD = "standard"    # no per-line tax amount, 19 export columns
    ITEMISED = "itemised"    # per-line tax amount and freight, 21 export columns


DEFAULT_LAYOUT: Final[LayoutVariant] = LayoutVariant(os.getenv("INVOICE_LAYOUT", "standard"))

# ============================================================================
# Extraction Tuning
# ============================================================================

# Digital text shorter than this (after normalization) sends the page to OCR
MIN_DIGITAL_TEXT_LEN: Final[int] = int(os.getenv("MIN_DIGITAL_TEXT_LEN", "20"))

# Render scale for OCR bitmaps (1.0 == 72 dpi)
OCR_SCALE: Final[float] = float(os.getenv("OCR_SCALE", "2"))

OCR_LANGUAGE: Final[str] = os.getenv("OCR_LANGUAGE", "eng")

# Line-item descriptions shorter than this are treated as noise
MIN_DESCRIPTION_LENGTH: Final[int] = 3

# Pasted-text segments shorter than this are ignored
MIN_SEGMENT_LENGTH: Final[int] = 10

TEXT_PREVIEW_LENGTH: Final[int] = 800

# ============================================================================
# Export
# ============================================================================

EXCEL_DATE_FORMAT: Final[str] = "dd/mm/yyyy"
WORKSHEET_TITLE: Final[str] = "Invoice Lines"

# ============================================================================
# API Configuration
# ============================================================================

API_HOST: Final[str] = os.getenv("API_HOST", "0.0.0.0")
API_PORT: Final[int] = int(os.getenv("API_PORT", "8000"))
MAX_UPLOAD_SIZE_MB: Final[int] = int(os.getenv("MAX_UPLOAD_SIZE_MB", "10"))

# ============================================================================
# Logging Configuration
# ============================================================================

LOG_LEVEL: Final[str] = os.getenv("LOG_LEVEL", "INFO")

def setup_logging() -> logging.Logger:
    """Configure and return the application logger."""
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger("invoice_rows")


logger = setup_logging()
