# Parish Finance Pivot - Drill-down income & expenditure tables for councils
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
I/O module for Parish Finance Pivot.

This module reads one cashbook CSV export into a list of
:class:`TransactionRecord`, writes records back to CSV, and reads the
optional opening balances side table.

Expected input format
---------------------

One header row, then one row per ledger line. Columns are looked up by
(trimmed) header name; the column order does not matter:

    type, date, payee, reference, vat, centre, centre_name,
    account, account_name, amount, total_amount, detail

- ``type``:          "Income", "Expense" or any other category
- ``date``:          day-first date (DD/MM/YYYY), kept as text
- ``vat``:           signed VAT amount
- ``amount``:        signed amount net of VAT
- ``total_amount``:  signed gross amount
- everything else:   free text

Leniency
--------
Bad data is never an error:

- a missing column reads as an empty string,
- ``amount``, ``vat`` and ``total_amount`` go through
  ``pandas.to_numeric(errors="coerce")``; empty, non-numeric, NaN and
  infinite values become 0,
- values and header names are trimmed, blank lines are skipped and any
  column not listed above is ignored,
- a row with more fields than the header keeps its first fields.

Grouping labels are *not* replaced here: an empty ``type`` stays empty in
the record (and in CSV exports) and is only shown as "Unknown" by the
aggregation engine.

Output format
-------------
:func:`records_to_csv` writes the same twelve columns in the order above,
one record per CRLF-terminated line. Values containing a comma, a quote,
a carriage return or a line feed are quoted, with embedded quotes doubled.
"""

import csv
import json
import math
import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

import numpy as np
import pandas as pd

from .logging_setup import get_logger

logger = get_logger(__name__)

RECORD_FIELDS: tuple[str, ...] = (
    "type",
    "date",
    "payee",
    "reference",
    "vat",
    "centre",
    "centre_name",
    "account",
    "account_name",
    "amount",
    "total_amount",
    "detail",
)

NUMERIC_FIELDS: tuple[str, ...] = ("amount", "vat", "total_amount")

PathLike = Union[str, "os.PathLike[str]"]

_READ_OPTIONS: dict[str, Any] = {
    "dtype": str,
    "keep_default_na": False,
    "index_col": False,
    "skip_blank_lines": True,
    "encoding": "utf-8-sig",
    "encoding_errors": "replace",
}


@dataclass(frozen=True)
class TransactionRecord:
    """One cashbook line.

    Text fields hold the trimmed source value (possibly empty). Numeric
    fields are always finite floats.
    """

    type: str = ""
    date: str = ""
    payee: str = ""
    reference: str = ""
    vat: float = 0.0
    centre: str = ""
    centre_name: str = ""
    account: str = ""
    account_name: str = ""
    amount: float = 0.0
    total_amount: float = 0.0
    detail: str = ""

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "TransactionRecord":
        """Build a record from a header-keyed row, applying the default rules."""
        values: dict[str, Any] = {}
        for field in RECORD_FIELDS:
            raw = row.get(field)
            if field in NUMERIC_FIELDS:
                values[field] = parse_number(raw)
            else:
                values[field] = "" if raw is None else str(raw).strip()
        return cls(**values)

    def to_row(self) -> dict[str, Any]:
        """Return the record as a dict in the canonical column order."""
        return {field: getattr(self, field) for field in RECORD_FIELDS}


def parse_number(value: Any) -> float:
    """Coerce a single value to a finite float, falling back to 0.0.

    >>> parse_number("12.50")
    12.5
    >>> parse_number("")
    0.0
    >>> parse_number("n/a")
    0.0
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return 0.0
    number = pd.to_numeric(value, errors="coerce")
    try:
        number = float(number)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def coerce_numeric_column(values: pd.Series) -> pd.Series:
    """Vectorized :func:`parse_number` for a column of strings."""
    numbers = pd.to_numeric(values.astype(str).str.strip(), errors="coerce")
    numbers = numbers.replace([np.inf, -np.inf], np.nan)
    return numbers.fillna(0.0).astype(float)


def read_transactions(path: PathLike) -> list[TransactionRecord]:
    """Read one cashbook CSV file and normalize it into records.

    Rows with more fields than the header are kept; their extra fields are
    ignored.

    Args:
        path: Path to the CSV file.

    Returns:
        The records in file order. An empty file (or a header-only file)
        yields an empty list.

    Raises:
        OSError: if the file cannot be opened.
        pandas.errors.ParserError: if the file is not CSV at all.
    """
    try:
        header = pd.read_csv(path, nrows=0, **_READ_OPTIONS)
        width = len(header.columns)
        df = pd.read_csv(
            path,
            engine="python",
            on_bad_lines=lambda fields: fields[:width],
            **_READ_OPTIONS,
        )
    except pd.errors.EmptyDataError:
        return []

    return records_from_dataframe(df)


def records_from_dataframe(df: pd.DataFrame) -> list[TransactionRecord]:
    """Normalize a raw, header-keyed DataFrame into records."""
    d = df.copy()
    d.columns = [str(c).strip() for c in d.columns]
    # Duplicate header names keep the first column
    d = d.loc[:, ~d.columns.duplicated()]
    d = d.fillna("")

    for col in d.columns:
        d[col] = d[col].astype(str).str.strip()

    for col in RECORD_FIELDS:
        if col not in d.columns:
            d[col] = 0.0 if col in NUMERIC_FIELDS else ""

    for col in NUMERIC_FIELDS:
        d[col] = coerce_numeric_column(d[col])

    return [TransactionRecord.from_row(row) for row in d.to_dict("records")]


def records_to_dataframe(records: Iterable[TransactionRecord]) -> pd.DataFrame:
    """Return records as a DataFrame with the canonical column order."""
    return pd.DataFrame([r.to_row() for r in records], columns=list(RECORD_FIELDS))


def _format_number_field(value: float) -> str:
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return repr(number)


def records_to_csv(records: Iterable[TransactionRecord]) -> str:
    """Serialize records to CSV text with the fixed export header.

    Missing text fields are written as empty strings (never "Unknown").
    """
    df = records_to_dataframe(records)
    for col in NUMERIC_FIELDS:
        df[col] = df[col].map(_format_number_field)
    return df.to_csv(index=False, lineterminator="\r\n", quoting=csv.QUOTE_MINIMAL)


# ---------------------------------------------------------------------------
# Opening balances side table
# ---------------------------------------------------------------------------


def _coerce_balance(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def load_balances(path: PathLike) -> dict[str, float]:
    """Load opening balances keyed by fiscal period key.

    The file holds a JSON object such as ``{"2024-5": 15234.12}``. A
    missing or unreadable file, invalid JSON or a JSON value that is not an
    object all give an empty mapping. Entries whose value is not a number
    (or a numeric string) are skipped.
    """
    balances_path = Path(path)
    if not balances_path.is_file():
        return {}

    try:
        raw = json.loads(balances_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, ValueError) as exc:
        logger.warning("Ignoring unreadable balances file %s: %s", balances_path, exc)
        return {}

    if not isinstance(raw, dict):
        logger.warning(
            "Ignoring balances file %s: expected a JSON object, got %s",
            balances_path,
            type(raw).__name__,
        )
        return {}

    balances: dict[str, float] = {}
    for key, value in raw.items():
        number = _coerce_balance(value)
        if number is None:
            logger.warning(
                "Ignoring non-numeric opening balance for %s: %r", key, value
            )
            continue
        balances[str(key)] = number
    return balances
