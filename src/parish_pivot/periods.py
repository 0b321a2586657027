# Parish Finance Pivot - Drill-down income & expenditure tables for councils
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Fiscal period helpers for Parish Finance Pivot.

This module defines the FiscalPeriod value object (one cashbook file once
loaded), helpers on period keys such as ``"2024-5"``, and the summary
figures shown above the pivot table.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Optional

from .engine import EXPENSE_TYPE, INCOME_TYPE
from .formatting import format_year_label
from .io import TransactionRecord

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")
UNKNOWN_AS_OF = "unknown date"


@dataclass(frozen=True)
class FiscalPeriod:
    """Records and metadata for one fiscal period.

    Attributes:
        key: Period key ``"<startYear>-<endDigit>"`` or ``"Unknown"``.
        records: Transaction records in source order.
        as_of: "Data to" description (``"30 Nov 2025"``), or None.
        is_complete: True when the file covers the whole year to 31 March.
        opening_balance: Opening balance from the side table, if any.
        source_label: Name of the file the records came from.
    """

    key: str
    records: tuple[TransactionRecord, ...]
    as_of: Optional[str]
    is_complete: bool
    opening_balance: Optional[float] = None
    source_label: str = ""

    @property
    def record_count(self) -> int:
        return len(self.records)

    @property
    def label(self) -> str:
        """Tab label, e.g. ``"2024/25"``."""
        return format_year_label(self.key)

    @property
    def heading(self) -> str:
        return f"Financial Year {self.label}"

    @property
    def currency_notice(self) -> str:
        """How current the data is: complete year, or the "data to" date."""
        if self.is_complete:
            return "Complete year data"
        return f"Data to: {self.as_of or UNKNOWN_AS_OF}"


def period_start_year(period_key: str) -> int:
    """Return the integer before the first ``-`` of a period key.

    Keys without a leading number (``"Unknown"``) give 0, so they sort
    after every real fiscal year.
    """
    m = _LEADING_INT_RE.match(period_key.split("-", 1)[0])
    return int(m.group(1)) if m else 0


def sort_period_keys(keys: Iterable[str]) -> list[str]:
    """Sort period keys by descending start year (most recent first).

    Keys with the same start year keep their original order.
    """
    return sorted(keys, key=period_start_year, reverse=True)


@dataclass(frozen=True)
class PeriodSummary:
    """Summary figures of one period.

    ``expense`` keeps its sign (normally negative); displays show its
    absolute value under a "Total Expenditure" label. ``closing_balance``
    is only known when an opening balance is.
    """

    income: float
    expense: float
    net: float
    transaction_count: int
    opening_balance: Optional[float] = None
    closing_balance: Optional[float] = None

    @property
    def has_balances(self) -> bool:
        return self.opening_balance is not None


def summarize_records(
    records: Iterable[TransactionRecord],
    opening_balance: Optional[float] = None,
) -> PeriodSummary:
    """Compute income, expenditure, net position and closing balance.

    - income  = sum of ``total_amount`` where ``type == "Income"``
    - expense = sum of ``total_amount`` where ``type == "Expense"``
    - net     = income + expense (expenses are negative)
    - closing = opening + net, when an opening balance is given
    """
    records = list(records)
    income = sum(r.total_amount for r in records if r.type == INCOME_TYPE)
    expense = sum(r.total_amount for r in records if r.type == EXPENSE_TYPE)
    net = income + expense

    closing = opening_balance + net if opening_balance is not None else None

    return PeriodSummary(
        income=float(income),
        expense=float(expense),
        net=float(net),
        transaction_count=len(records),
        opening_balance=opening_balance,
        closing_balance=closing,
    )


def summarize_period(period: FiscalPeriod) -> PeriodSummary:
    """Shortcut for :func:`summarize_records` on a loaded period."""
    return summarize_records(period.records, period.opening_balance)
