# Parish Finance Pivot - Drill-down income & expenditure tables for councils
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Directory ingestion for Parish Finance Pivot.

A data directory holds one CSV export per fiscal period (or part of a
period) and an optional ``balances.json`` side table::

    data/
        Receipts and Payments 2022-3.CSV
        Receipts and Payments 2023-4.CSV
        Cashbook Report 30-11-2025.CSV
        balances.json              {"2025-6": 15234.12, ...}

``load_financial_data()`` reads every CSV file once, classifies it by
filename (see ``filenames.py``) and returns a :class:`LoadResult` holding:

- the periods keyed by period key, most recent first,
- the ordered list of period keys,
- an error message when the directory is missing or holds no CSV file.

Rules:
- ``.csv`` is matched case-insensitively; files whose names differ only
  by case are read once (the first one in name order wins),
- two files resolving to the same period key: the later one (in name
  order) replaces the earlier one,
- files whose name matches no rule are kept under period ``"Unknown"``.

``check_data_source()`` performs the same directory checks up front and
raises ConfigurationError / EmptySourceError, for callers that prefer to
stop with a message before loading anything.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

import pandas as pd

from .errors import ConfigurationError, EmptySourceError
from .filenames import UNKNOWN_PERIOD, classify_filename
from .io import TransactionRecord, load_balances, read_transactions
from .logging_setup import get_logger
from .periods import FiscalPeriod, sort_period_keys

logger = get_logger(__name__)

DEFAULT_BALANCES_FILE = "balances.json"
CSV_SUFFIX = ".csv"

PathLike = Union[str, "os.PathLike[str]"]


@dataclass(frozen=True)
class LoadResult:
    """Everything loaded from one data directory.

    Attributes:
        periods: Fiscal periods keyed by period key, most recent first.
        period_keys: Period keys, most recent first.
        error: Reason why nothing could be loaded, or None.
    """

    periods: dict[str, FiscalPeriod] = field(default_factory=dict)
    period_keys: list[str] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def financial_data(self) -> dict[str, tuple[TransactionRecord, ...]]:
        """Records per period key."""
        return {key: self.periods[key].records for key in self.period_keys}

    @property
    def metadata(self) -> dict[str, dict[str, Any]]:
        """Per-period metadata, as handed to the presentation layer."""
        return {
            key: {
                "as_of_description": p.as_of,
                "is_complete": p.is_complete,
                "record_count": p.record_count,
                "source_label": p.source_label,
                "opening_balance": p.opening_balance,
            }
            for key, p in ((k, self.periods[k]) for k in self.period_keys)
        }

    @classmethod
    def failed(cls, reason: str) -> "LoadResult":
        return cls(periods={}, period_keys=[], error=reason)


def list_csv_files(directory: PathLike) -> list[Path]:
    """Return the CSV files of ``directory`` sorted by name.

    The extension is matched case-insensitively; subdirectories are not
    searched.
    """
    base = Path(directory)
    return sorted(
        (p for p in base.iterdir() if p.is_file() and p.suffix.lower() == CSV_SUFFIX),
        key=lambda p: p.name,
    )


def check_data_source(directory: Optional[PathLike]) -> list[Path]:
    """Validate a data directory and return its CSV files.

    Raises:
        ConfigurationError: if no directory is configured, or it does not
            exist or cannot be read.
        EmptySourceError: if the directory holds no CSV file.
    """
    if directory is None or str(directory).strip() == "":
        raise ConfigurationError(
            "No data directory configured. Please set [data].directory in the "
            "configuration file or pass --data-dir."
        )

    base = Path(directory)
    if not base.is_dir():
        raise ConfigurationError(f"Data directory not found: {base}")

    try:
        csv_files = list_csv_files(base)
    except OSError as exc:
        raise ConfigurationError(f"Data directory cannot be read: {base}") from exc

    if not csv_files:
        raise EmptySourceError(f"No CSV files found in {base}")

    return csv_files


def _read_records(path: Path) -> list[TransactionRecord]:
    try:
        return read_transactions(path)
    except (OSError, UnicodeDecodeError, pd.errors.ParserError) as exc:
        logger.warning("Could not read %s, no records loaded: %s", path.name, exc)
        return []


def build_periods(
    csv_files: list[Path],
    balances: Mapping[str, float],
) -> dict[str, FiscalPeriod]:
    """Read and classify ``csv_files`` into periods keyed by period key."""
    periods: dict[str, FiscalPeriod] = {}
    seen: set[str] = set()

    for path in csv_files:
        name_lower = path.name.lower()
        if name_lower in seen:
            logger.info("Skipping %s: same file name already loaded", path.name)
            continue
        seen.add(name_lower)

        records = _read_records(path)
        c = classify_filename(path.name)

        if c.period_key == UNKNOWN_PERIOD:
            logger.warning(
                "Cannot infer the fiscal year of %s, loading it as %r",
                path.name,
                UNKNOWN_PERIOD,
            )
        if c.period_key in periods:
            logger.warning(
                "%s replaces %s for period %s",
                path.name,
                periods[c.period_key].source_label,
                c.period_key,
            )

        periods[c.period_key] = FiscalPeriod(
            key=c.period_key,
            records=tuple(records),
            as_of=c.as_of,
            is_complete=c.is_complete,
            opening_balance=balances.get(c.period_key),
            source_label=path.name,
        )
        logger.debug(
            "Loaded %d records from %s as period %s",
            len(records),
            path.name,
            c.period_key,
        )

    return periods


def load_financial_data(
    directory: PathLike,
    balances_file: str = DEFAULT_BALANCES_FILE,
) -> LoadResult:
    """Load every cashbook CSV file of ``directory``.

    This function never raises for a missing or empty directory: it returns
    a failed :class:`LoadResult` whose ``error`` explains why, so that the
    caller can show a notice instead.

    Args:
        directory: Data directory.
        balances_file: Name of the opening balances JSON file inside
            ``directory``.

    Returns:
        A :class:`LoadResult` with periods sorted most recent first.
    """
    base = Path(directory)

    if not base.is_dir():
        return LoadResult.failed(f"Directory not found: {base}")

    try:
        csv_files = list_csv_files(base)
    except OSError:
        return LoadResult.failed(f"Directory not found: {base}")

    if not csv_files:
        return LoadResult.failed("No CSV files found")

    balances = load_balances(base / balances_file)
    periods = build_periods(csv_files, balances)

    keys = sort_period_keys(periods)
    logger.info(
        "Loaded %d period(s) from %d CSV file(s) in %s", len(keys), len(csv_files), base
    )

    return LoadResult(
        periods={key: periods[key] for key in keys},
        period_keys=keys,
        error=None,
    )
