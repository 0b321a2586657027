# Parish Finance Pivot - Drill-down income & expenditure tables for councils
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for Parish Finance Pivot.

This module is responsible for:
- loading the application configuration from a TOML file,
- applying defaults for every missing setting,
- exposing typed dataclasses used by the rest of the application.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:  # pragma: no cover - fallback for older Python
    import tomli as tomllib  # type: ignore[import]

from .loader import DEFAULT_BALANCES_FILE

DEFAULT_CONFIG_FILE = "parish_pivot_config.toml"
DEFAULT_DATA_DIR = "/var/www/html/wp-content/uploads/public-docs/Finance/data"
DISPLAY_MODES = ("table", "html", "both")


@dataclass(frozen=True)
class DataConfig:
    """Where the cashbook CSV files live.

    ``directory`` is None when the configuration explicitly leaves it empty.
    """

    directory: Optional[Path]
    balances_file: str = DEFAULT_BALANCES_FILE


@dataclass(frozen=True)
class DisplayConfig:
    """Display options for the CLI."""

    currency_symbol: str = "£"
    mode: str = "table"


@dataclass(frozen=True)
class AppConfig:
    """
    Application-wide configuration for Parish Finance Pivot.

    This aggregates:
    - the data source (CSV directory and balances side table),
    - display options,
    - the log level (None means: environment variable or INFO).
    """

    data: DataConfig
    display: DisplayConfig
    log_level: Optional[str] = None


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed or is not a table.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Invalid TOML root type in {path}, expected a table.")

    return data


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = raw.get(name) or {}
    if not isinstance(section, Mapping):
        return {}
    return section


def _parse_data_config(raw: Mapping[str, Any], base_dir: Path) -> DataConfig:
    """
    Extract the [data] section.

    A relative directory is resolved against the TOML file's directory and a
    trailing slash is dropped. An empty string means "not configured".
    """
    data_section = _section(raw, "data")

    raw_dir = data_section.get("directory", DEFAULT_DATA_DIR)
    dir_text = "" if raw_dir is None else str(raw_dir).strip()
    if dir_text != "/":
        dir_text = dir_text.rstrip("/")

    directory: Optional[Path]
    if not dir_text:
        directory = None
    else:
        directory = (base_dir / dir_text).resolve()

    balances_file = str(data_section.get("balances_file") or DEFAULT_BALANCES_FILE)

    return DataConfig(directory=directory, balances_file=balances_file)


def _parse_display_config(raw: Mapping[str, Any]) -> DisplayConfig:
    display_section = _section(raw, "display")

    symbol = display_section.get("currency_symbol", "£")
    mode = str(display_section.get("mode", "table"))
    if mode not in DISPLAY_MODES:
        raise ValueError(
            f"Invalid value for 'display.mode': {mode!r}. "
            f"Expected one of: {', '.join(DISPLAY_MODES)}."
        )

    return DisplayConfig(currency_symbol=str(symbol), mode=mode)


def default_config(base_dir: Optional[Path] = None) -> AppConfig:
    """Configuration used when no TOML file is present."""
    return _build_config({}, base_dir or Path.cwd())


def _build_config(raw: Mapping[str, Any], base_dir: Path) -> AppConfig:
    logging_section = _section(raw, "logging")
    level = logging_section.get("level")

    return AppConfig(
        data=_parse_data_config(raw, base_dir),
        display=_parse_display_config(raw),
        log_level=str(level) if level else None,
    )


def load_app_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load the Parish Finance Pivot configuration from a TOML file.

    Expected sections in the TOML file (all optional)
    -------------------------------------------------
    [data]
        ``directory``: folder holding the cashbook CSV files.
        ``balances_file``: opening balances JSON file inside that folder.

    [display]
        ``currency_symbol``: prefix of summary figures (default "£").
        ``mode``: "table", "html" or "both".

    [logging]
        ``level``: log level name (e.g. "INFO", "DEBUG").

    Parameters
    ----------
    config_path:
        Path to the TOML file. When omitted, ``parish_pivot_config.toml`` in
        the current directory is used if it exists, otherwise defaults.

    Returns
    -------
    AppConfig
        Parsed and validated configuration.

    Raises
    ------
    FileNotFoundError
        If an explicitly given ``config_path`` does not exist.
    ValueError
        If the TOML file cannot be parsed or holds invalid values.
    """
    if config_path is None:
        config_file = Path(DEFAULT_CONFIG_FILE).resolve()
        if not config_file.is_file():
            return default_config(config_file.parent)
    else:
        config_file = Path(config_path).resolve()

    raw = _load_toml(config_file)
    return _build_config(raw, config_file.parent)
