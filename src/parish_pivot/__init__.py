# Parish Finance Pivot - Drill-down income & expenditure tables for councils
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Parish Finance Pivot
--------------------

A small Python package that turns the cashbook exports of a parish council
(one CSV file per fiscal year, or per part of a year) into a collapsible,
drill-down pivot table:

    Type -> Cost centre -> Account -> Transaction

with subtotals at every level and a grand total.

Main capabilities:
- fiscal year and "data currency" inference from free-form filenames,
- lenient CSV ingestion (numeric coercion, "Unknown" grouping labels),
- optional opening balances from a ``balances.json`` side table,
- three-level aggregation with rolled-up amount / VAT / total,
- expand/collapse state keyed by node path, rendered as text or HTML,
- income / expenditure / net / closing balance summaries,
- CSV re-export of the active fiscal year.

The package separates ingestion (loader, io), computation (engine),
presentation (views, formatting) and orchestration (session, cli).

Version: 1.3.0

Usage:
    python -m parish_pivot.cli --help
"""

__all__ = ["engine", "filenames", "loader", "session", "views"]

__version__ = "1.3.0"
