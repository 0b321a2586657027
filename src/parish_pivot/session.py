# Parish Finance Pivot - Drill-down income & expenditure tables for councils
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Period selection and summary controller.

A :class:`PivotSession` is what one reader works with: the periods loaded by
``load_financial_data()``, the period currently selected, its aggregated
tree and the expansion state of that tree.

Workflow
--------
1. The session opens on the most recent period (the first period key).
2. ``select_period(key)`` clears the expansion state and rebuilds the tree
   from that period's records, even if the new period has the same labels.
3. ``toggle(path)`` flips one node; ``rows()`` renders the visible rows.
4. ``summary()``, ``heading()``, ``currency_notice()`` and ``tabs()`` feed
   the blocks around the table.
5. ``export_csv()`` returns the raw records of the active period as CSV,
   to be saved as ``financial-data-<period_key>.csv``.

All methods run synchronously and leave the session in a consistent state;
there is no background work.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .engine import PivotTree, aggregate
from .formatting import format_year_label
from .io import records_to_csv
from .loader import LoadResult
from .logging_setup import get_logger
from .periods import FiscalPeriod, PeriodSummary, summarize_period
from .views import ExpansionState, NodePath, PivotRow, render

logger = get_logger(__name__)

EXPORT_FILENAME_TEMPLATE = "financial-data-{period_key}.csv"
INCOMPLETE_MARKER = "*"


@dataclass(frozen=True)
class PeriodTab:
    """One entry of the period tab list."""

    key: str
    label: str
    is_complete: bool
    is_active: bool

    @property
    def display_label(self) -> str:
        """Label with a ``*`` marker when the period is incomplete."""
        return self.label if self.is_complete else f"{self.label}{INCOMPLETE_MARKER}"


def export_filename(period_key: str) -> str:
    return EXPORT_FILENAME_TEMPLATE.format(period_key=period_key)


class PivotSession:
    """Interactive state of the pivot table for one set of loaded periods."""

    def __init__(self, data: LoadResult, select_first: bool = True) -> None:
        self.data = data
        self.active_key: Optional[str] = None
        self.state = ExpansionState()
        self.tree: PivotTree = aggregate([])

        if select_first and data.period_keys:
            self.select_period(data.period_keys[0])

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    @property
    def period_keys(self) -> list[str]:
        return list(self.data.period_keys)

    @property
    def active_period(self) -> Optional[FiscalPeriod]:
        if self.active_key is None:
            return None
        return self.data.periods.get(self.active_key)

    def select_period(self, period_key: str) -> None:
        """Activate a period: collapse everything and re-aggregate.

        Raises:
            KeyError: if ``period_key`` was not loaded.
        """
        if period_key not in self.data.periods:
            raise KeyError(f"Unknown period: {period_key!r}")

        period = self.data.periods[period_key]
        self.active_key = period_key
        self.state = self.state.cleared()
        self.tree = aggregate(period.records)
        logger.debug(
            "Selected period %s (%d records)", period_key, period.record_count
        )

    # ------------------------------------------------------------------
    # Expansion
    # ------------------------------------------------------------------

    def toggle(self, path: NodePath) -> list[PivotRow]:
        """Flip one node and return the re-rendered rows."""
        self.state = self.state.toggle(path)
        return self.rows()

    def is_expanded(self, path: NodePath) -> bool:
        return self.state.is_expanded(path)

    def rows(self) -> list[PivotRow]:
        """Visible rows of the active period."""
        return render(self.tree, self.state)

    # ------------------------------------------------------------------
    # Surrounding blocks
    # ------------------------------------------------------------------

    def tabs(self) -> list[PeriodTab]:
        """Period tabs, most recent first."""
        return [
            PeriodTab(
                key=key,
                label=format_year_label(key),
                is_complete=self.data.periods[key].is_complete,
                is_active=key == self.active_key,
            )
            for key in self.data.period_keys
        ]

    def heading(self) -> str:
        period = self.active_period
        return period.heading if period is not None else ""

    def currency_notice(self) -> str:
        period = self.active_period
        return period.currency_notice if period is not None else ""

    def summary(self) -> Optional[PeriodSummary]:
        period = self.active_period
        if period is None:
            return None
        return summarize_period(period)

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export_filename(self) -> Optional[str]:
        if self.active_key is None:
            return None
        return export_filename(self.active_key)

    def export_csv(self) -> Optional[str]:
        """CSV text of the active period's records.

        Returns None when no period is active or the period has no records.
        """
        period = self.active_period
        if period is None or not period.records:
            return None
        return records_to_csv(period.records)

    def write_export(
        self, directory: Union[str, "os.PathLike[str]"] = "."
    ) -> Optional[Path]:
        """Write the export file into ``directory`` and return its path."""
        content = self.export_csv()
        filename = self.export_filename()
        if content is None or filename is None:
            return None

        out_dir = Path(directory)
        out_dir.mkdir(parents=True, exist_ok=True)
        path = out_dir / filename
        with open(path, "w", encoding="utf-8", newline="") as fh:
            fh.write(content)
        logger.info("Wrote %s (%d records)", path, self.active_period.record_count)
        return path
