# Parish Finance Pivot - Drill-down income & expenditure tables for councils
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Display helpers for amounts, dates and fiscal year labels.

Amounts are shown the way a UK cashbook shows them: thousands separated
by commas, always two decimals, negatives in parentheses instead of a minus
sign::

    1234.5   -> "1,234.50"
    -20      -> "(20.00)"
    0        -> "0.00"

Rounding is half away from zero on the exact value of the float, which is
what ``Number.toLocaleString("en-GB")`` does in a browser.
"""

import math
import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

_CENTS = Decimal("0.01")
_PERIOD_KEY_RE = re.compile(r"^(\d{4})-(\d)$")
_DAY_FIRST_DATE_RE = re.compile(r"^\d{1,2}/\d{1,2}/\d{2,4}$")


def format_currency(value: float) -> str:
    """Format a signed amount with grouped digits and parenthesized negatives."""
    if not math.isfinite(value):
        value = 0.0
    quantized = Decimal(abs(value)).quantize(_CENTS, rounding=ROUND_HALF_UP)
    formatted = f"{quantized:,.2f}"
    if value < 0:
        return f"({formatted})"
    return formatted


def format_money(value: float, symbol: str = "£") -> str:
    """Prefix a formatted amount with a currency symbol (``£(20.00)``)."""
    return f"{symbol}{format_currency(value)}"


def format_date(value: Optional[str]) -> str:
    """Return a transaction date for display.

    Dates arrive day-first (``DD/MM/YYYY``) and are displayed verbatim.
    Anything else is shown as it is; a missing date shows as empty.
    """
    if not value:
        return ""
    text = str(value).strip()
    if _DAY_FIRST_DATE_RE.match(text):
        day, month, year = text.split("/")
        return f"{day}/{month}/{year}"
    return text


def format_year_label(period_key: str) -> str:
    """Convert a period key such as ``"2024-5"`` into a tab label ``"2024/25"``.

    Keys that are not of the form ``<4 digits>-<digit>`` (e.g. ``"Unknown"``)
    are returned unchanged.
    """
    m = _PERIOD_KEY_RE.match(period_key)
    if not m:
        return period_key
    start_year = int(m.group(1))
    return f"{start_year}/{(start_year + 1) % 100:02d}"
