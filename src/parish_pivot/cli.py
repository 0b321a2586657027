# Parish Finance Pivot - Drill-down income & expenditure tables for councils
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for Parish Finance Pivot.

This module wires together the building blocks of the package:

- configuration (data directory, balances file, display options),
- data source checks and directory ingestion,
- the pivot session (period selection, expand/collapse, summary),
- view helpers (text table, HTML table) and CSV export.

The CLI is intentionally thin: it does not implement any aggregation or
formatting itself.


Commands
--------

``check``
    Validate the data directory and list the CSV files found::

        python -m parish_pivot.cli check --data-dir data/

``periods``
    List the fiscal periods, most recent first, with their tab label,
    data currency, record count and source file. Incomplete periods are
    marked with ``*``::

        python -m parish_pivot.cli periods

``show``
    Print the heading, data currency notice, summary figures and pivot
    table of one period (the most recent one by default). Nodes are
    expanded with ``--expand``, giving the node path as labels joined by
    ``|``. Each ``--expand`` flips one node, in the order given::

        python -m parish_pivot.cli show --period 2024-5 \\
            --expand Income --expand "Income|Admin"

    ``--display-mode html`` (or ``both``) writes the table as HTML to
    ``--html-output`` (default ``pivot-<period_key>.html``).

``export``
    Write the raw records of one period to
    ``financial-data-<period_key>.csv``::

        python -m parish_pivot.cli export --period 2024-5 --output exports/


Configuration
-------------

Settings are read from ``parish_pivot_config.toml`` in the current
directory (or ``--config PATH``). ``--data-dir`` overrides
``[data].directory`` for one run. When the data directory is missing or
holds no CSV file, the CLI prints the reason and exits with status 1.
"""

import argparse
from pathlib import Path
from typing import Optional

from . import __version__
from .config import DISPLAY_MODES, AppConfig, load_app_config
from .errors import ConfigurationError, EmptySourceError
from .loader import check_data_source, load_financial_data
from .logging_setup import configure_logging
from .session import PivotSession
from .views import rows_to_html, rows_to_text, summary_to_dataframe

ERROR_PREFIX = "Finance Pivot Table: "


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="python -m parish_pivot.cli",
        description=(
            "Parish Finance Pivot - drill-down income and expenditure tables "
            "built from cashbook CSV exports."
        ),
    )

    ap.add_argument(
        "--version",
        action="store_true",
        help="Show the installed version of parish_pivot and exit.",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help=(
            "Path to the TOML configuration file. If omitted, "
            "'parish_pivot_config.toml' in the current directory is used when "
            "present."
        ),
    )
    ap.add_argument(
        "--data-dir",
        dest="data_dir",
        help="Override the [data].directory setting for this run.",
    )
    ap.add_argument(
        "--log-level",
        dest="log_level",
        help="Log level (DEBUG, INFO, WARNING, ...). Overrides [logging].level.",
    )

    subparsers = ap.add_subparsers(dest="command", metavar="command")

    subparsers.add_parser(
        "check",
        help="Validate the data directory and list its CSV files.",
    )

    subparsers.add_parser(
        "periods",
        help="List the fiscal periods found in the data directory.",
    )

    show = subparsers.add_parser(
        "show",
        help="Show the summary and pivot table of one period.",
    )
    show.add_argument(
        "--period",
        help="Period key (e.g. 2024-5). Defaults to the most recent period.",
    )
    show.add_argument(
        "--expand",
        action="append",
        default=[],
        metavar="PATH",
        help=(
            "Toggle a node, given as labels joined by '|' "
            "(e.g. 'Income' or 'Income|Admin'). Can be repeated."
        ),
    )
    show.add_argument(
        "--display-mode",
        dest="display_mode",
        choices=list(DISPLAY_MODES),
        help="Override the display.mode setting from the configuration file.",
    )
    show.add_argument(
        "--html-output",
        dest="html_output",
        help="HTML file to write when display mode includes 'html'.",
    )

    export = subparsers.add_parser(
        "export",
        help="Write the records of one period to financial-data-<period>.csv.",
    )
    export.add_argument(
        "--period",
        help="Period key (e.g. 2024-5). Defaults to the most recent period.",
    )
    export.add_argument(
        "--output",
        dest="output_dir",
        default=".",
        help="Directory to write the CSV file into (default: current directory).",
    )

    return ap


def _resolve_data_dir(args: argparse.Namespace, config: AppConfig) -> Optional[Path]:
    if args.data_dir is not None:
        return Path(args.data_dir) if args.data_dir.strip() else None
    return config.data.directory


def _open_session(
    parser: argparse.ArgumentParser,
    args: argparse.Namespace,
    config: AppConfig,
) -> PivotSession:
    """Load the data directory and select the requested (or latest) period."""
    data_dir = _resolve_data_dir(args, config)
    try:
        check_data_source(data_dir)
    except (ConfigurationError, EmptySourceError) as exc:
        raise SystemExit(f"{ERROR_PREFIX}{exc}") from exc

    data = load_financial_data(data_dir, balances_file=config.data.balances_file)
    if not data.ok:
        raise SystemExit(f"{ERROR_PREFIX}{data.error}")

    session = PivotSession(data)
    period_key = getattr(args, "period", None)
    if period_key:
        try:
            session.select_period(period_key)
        except KeyError:
            parser.error(
                f"Unknown period {period_key!r}. "
                f"Available periods: {', '.join(data.period_keys)}"
            )
    return session


def _handle_check(args: argparse.Namespace, config: AppConfig) -> None:
    data_dir = _resolve_data_dir(args, config)
    try:
        csv_files = check_data_source(data_dir)
    except (ConfigurationError, EmptySourceError) as exc:
        raise SystemExit(f"{ERROR_PREFIX}{exc}") from exc

    print(f"Directory exists: {data_dir}. Found {len(csv_files)} CSV file(s).")
    for path in csv_files:
        print(f"  {path.name}")


def _handle_periods(session: PivotSession) -> None:
    print("Fiscal periods (most recent first, * = incomplete):")
    for tab in session.tabs():
        period = session.data.periods[tab.key]
        print(
            f"  {tab.display_label:<10} {tab.key:<8} "
            f"{period.currency_notice:<28} "
            f"{period.record_count:>6} records  {period.source_label}"
        )


def _print_summary(session: PivotSession, symbol: str) -> None:
    summary = session.summary()
    if summary is None:
        return
    df = summary_to_dataframe(summary, symbol)
    print(df.to_string(index=False, header=False))


def _handle_show(
    args: argparse.Namespace, session: PivotSession, config: AppConfig
) -> None:
    for path in args.expand:
        session.toggle(path)

    rows = session.rows()
    display_mode = args.display_mode or config.display.mode

    tabs = "  ".join(
        f"[{t.display_label}]" if t.is_active else t.display_label
        for t in session.tabs()
    )

    if display_mode in {"table", "both"}:
        print(tabs)
        print()
        print(f"=== {session.heading()} ===")
        print(session.currency_notice())
        print()
        _print_summary(session, config.display.currency_symbol)
        print()
        if session.tree.is_empty:
            print("No transactions recorded for this period.")
        print(rows_to_text(rows))

    if display_mode in {"html", "both"}:
        out_path = Path(args.html_output or f"pivot-{session.active_key}.html")
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(rows_to_html(rows), encoding="utf-8")
        print(f"Wrote {out_path} ({len(rows)} rows)")


def _handle_export(args: argparse.Namespace, session: PivotSession) -> None:
    path = session.write_export(args.output_dir)
    if path is None:
        print(f"No records to export for period {session.active_key}.")
        return
    print(f"Wrote {path} ({session.active_period.record_count} records)")


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the Parish Finance Pivot CLI.

    Parses command-line arguments, loads the configuration, sets up
    logging, checks and loads the data directory, then runs the selected
    command.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(f"parish_pivot version {__version__}")
        return

    if args.command is None:
        parser.print_help()
        return

    try:
        config = load_app_config(args.config_path)
    except (FileNotFoundError, ValueError) as exc:
        raise SystemExit(f"{ERROR_PREFIX}{exc}") from exc

    configure_logging(args.log_level or config.log_level)

    if args.command == "check":
        _handle_check(args, config)
        return

    session = _open_session(parser, args, config)

    if args.command == "periods":
        _handle_periods(session)
    elif args.command == "show":
        _handle_show(args, session, config)
    elif args.command == "export":
        _handle_export(args, session)


if __name__ == "__main__":
    main()
