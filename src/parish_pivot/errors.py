# Parish Finance Pivot - Drill-down income & expenditure tables for councils
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Exceptions raised when the data source cannot be used.

Only the outer layers (data source checks, CLI) raise these. Bad values
inside a CSV file are never errors: numbers fall back to 0 and grouping
labels to "Unknown".
"""


class ConfigurationError(ValueError):
    """No data directory configured, or the directory is missing/unreadable."""


class EmptySourceError(ValueError):
    """The data directory exists but contains no CSV files."""
