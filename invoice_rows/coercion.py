"""
Conversions from the raw strings captured in invoice text.

Extractors keep every number as the string that was printed; this module
turns those strings into numbers, rounded money values and calendar dates.
None of these helpers raise on bad input.
"""

import math
import re
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union

_CENTS = Decimal("0.01")
_TENTH = Decimal("0.1")

_DMY_PATTERN = re.compile(r"^(\d{1,2})[/-](\d{1,2})[/-](\d{4}|\d{2})$")


def parse_number(value) -> Optional[float]:
    """
    Parse a printed number such as "1,234.50" into a float.

    Thousands separators are stripped. Returns None for empty, non-numeric
    or non-finite input.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None

    value_str = str(value).strip().replace(",", "")
    if not value_str:
        return None

    try:
        number = float(value_str)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def parse_amount(value) -> Optional[Decimal]:
    """Parse a printed amount into a Decimal, or None."""
    if value is None:
        return None
    value_str = str(value).strip().replace(",", "")
    if not value_str:
        return None
    try:
        amount = Decimal(value_str)
    except InvalidOperation:
        return None
    return amount if amount.is_finite() else None


def round_money(amount: Decimal) -> Decimal:
    """Round half-up to two decimal places."""
    return amount.quantize(_CENTS, rounding=ROUND_HALF_UP)


def format_amount(amount: Decimal) -> str:
    """Format a computed amount as "1234.50" (no thousands separators)."""
    return f"{round_money(amount):.2f}"


def derive_tax_rate(tax_amount, gross_excluding_tax) -> Optional[float]:
    """
    Derive a GST percentage from a line's tax and pre-tax amounts.

    Returns the rate to one decimal place, e.g. 9.00 on 100.00 gives 9.0.
    Returns None when either amount is unusable or the base is not positive.
    """
    tax = parse_amount(tax_amount)
    base = parse_amount(gross_excluding_tax)
    if tax is None or base is None or base <= 0:
        return None
    rate = (tax / base * 100).quantize(_TENTH, rounding=ROUND_HALF_UP)
    return float(rate)


def to_calendar_date(value: Optional[str]) -> Union[date, str]:
    """
    Convert a day/month/year string to a date.

    Two-digit years are read as 2000+year; other years need four digits.
    Strings that do not parse are returned unchanged; a missing value becomes "".
    """
    if not value:
        return ""

    match = _DMY_PATTERN.match(value.strip())
    if not match:
        return value

    day, month, year = match.groups()
    year_number = int(year)
    if len(year) == 2:
        year_number += 2000

    try:
        return date(year_number, int(month), int(day))
    except ValueError:
        return value
