# Parish Finance Pivot - Drill-down income & expenditure tables for councils
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Fiscal year and data currency inference from cashbook filenames.

Parish cashbook exports are named by whoever saved them, so the fiscal year
(1 April to 31 March) has to be guessed from the filename. Three fragments
are looked for:

- a fiscal year tag ``YYYY-D``      e.g. "Receipts and Payments 2022-3.CSV"
- a full date ``DD-MM-YYYY``        e.g. "Cashbook Report 30-11-2025.CSV"
- a short date ``to DD-MM``         e.g. "Cashbook Report 2025-6 to 31-12.CSV"

A filename may contain several of them. The rules below are tried in order
and the first one that applies wins:

1) fiscal year tag alone                -> complete year, data to 31 March
2) full date                            -> partial year, data to that date
3) fiscal year tag and a short date     -> partial year, data to that date
4) anything else                        -> period "Unknown", no date

Each rule returns a :class:`Classification`.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Optional

UNKNOWN_PERIOD = "Unknown"

MONTH_NAMES = (
    "",
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
)

# First month of the fiscal year (April).
FISCAL_YEAR_START_MONTH = 4

_YEAR_RE = re.compile(r"(\d{4})-(\d)\b")
_FULL_DATE_RE = re.compile(r"(\d{1,2})-(\d{1,2})-(\d{4})")
_SHORT_DATE_RE = re.compile(r"to\s+(\d{1,2})-(\d{1,2})", re.IGNORECASE)


@dataclass(frozen=True)
class Classification:
    """Result of classifying one filename.

    Attributes:
        period_key: Fiscal period key ``"<startYear>-<endDigit>"`` or
            ``"Unknown"``.
        as_of: Human readable "data to" date (``"31 Mar 2025"``), or None
            when nothing could be inferred.
        is_complete: True only for full fiscal year files.
    """

    period_key: str
    as_of: Optional[str]
    is_complete: bool


@dataclass(frozen=True)
class _FilenameMatches:
    year: Optional[re.Match]
    full_date: Optional[re.Match]
    short_date: Optional[re.Match]


def _month_name(month: int) -> str:
    if 1 <= month <= 12:
        return MONTH_NAMES[month]
    return str(month)


def _format_as_of(day: int, month: int, year: int) -> str:
    return f"{day} {_month_name(month)} {year}"


def _tagged_period_key(m: re.Match) -> tuple[int, str]:
    start_year = int(m.group(1))
    end_digit = int(m.group(2))
    return start_year, f"{start_year}-{end_digit}"


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


def _is_complete_year(m: _FilenameMatches) -> bool:
    # "2025-6 to 31-12" is a partial year: leave it to the short date rule.
    return m.year is not None and m.full_date is None and m.short_date is None


def _complete_year(m: _FilenameMatches) -> Classification:
    start_year, key = _tagged_period_key(m.year)
    end_digit = int(m.year.group(2))
    # Known quirk: a "0" end digit pushes the year end a decade ahead
    # ("2029-0" -> "31 Mar 2039"). Kept for compatibility with existing data.
    end_year = start_year + 1 if end_digit != 0 else start_year + 10
    return Classification(period_key=key, as_of=f"31 Mar {end_year}", is_complete=True)


def _has_full_date(m: _FilenameMatches) -> bool:
    return m.full_date is not None


def _partial_year_from_full_date(m: _FilenameMatches) -> Classification:
    day = int(m.full_date.group(1))
    month = int(m.full_date.group(2))
    year = int(m.full_date.group(3))

    if month >= FISCAL_YEAR_START_MONTH:
        key = f"{year}-{(year + 1) % 10}"
    else:
        key = f"{year - 1}-{year % 10}"

    return Classification(
        period_key=key, as_of=_format_as_of(day, month, year), is_complete=False
    )


def _has_year_and_short_date(m: _FilenameMatches) -> bool:
    return m.year is not None and m.short_date is not None


def _partial_year_from_short_date(m: _FilenameMatches) -> Classification:
    start_year, key = _tagged_period_key(m.year)
    day = int(m.short_date.group(1))
    month = int(m.short_date.group(2))

    # April..December belong to the start year, January..March to the next.
    date_year = start_year if month >= FISCAL_YEAR_START_MONTH else start_year + 1

    return Classification(
        period_key=key, as_of=_format_as_of(day, month, date_year), is_complete=False
    )


Rule = tuple[Callable[[_FilenameMatches], bool], Callable[[_FilenameMatches], Classification]]

# Order matters: the first rule whose predicate holds decides.
RULES: tuple[Rule, ...] = (
    (_is_complete_year, _complete_year),
    (_has_full_date, _partial_year_from_full_date),
    (_has_year_and_short_date, _partial_year_from_short_date),
)


def classify_filename(filename: str) -> Classification:
    """Infer the fiscal period and data currency of a cashbook file.

    Args:
        filename: Base name of the file (directories are not inspected).

    Returns:
        A :class:`Classification`. Filenames matching none of the rules are
        classified as ``Classification("Unknown", None, False)``; they are
        not rejected.

    Examples:
        >>> classify_filename("Receipts and Payments 2022-3.CSV")
        Classification(period_key='2022-3', as_of='31 Mar 2023', is_complete=True)
        >>> classify_filename("Cashbook Report 30-11-2025.CSV")
        Classification(period_key='2025-6', as_of='30 Nov 2025', is_complete=False)
    """
    matches = _FilenameMatches(
        year=_YEAR_RE.search(filename),
        full_date=_FULL_DATE_RE.search(filename),
        short_date=_SHORT_DATE_RE.search(filename),
    )

    for applies, extract in RULES:
        if applies(matches):
            return extract(matches)

    return Classification(period_key=UNKNOWN_PERIOD, as_of=None, is_complete=False)
