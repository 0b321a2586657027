# Parish Finance Pivot - Drill-down income & expenditure tables for councils
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
View utilities for Parish Finance Pivot.

This module turns an aggregated :class:`~parish_pivot.engine.PivotTree` into
the rows a reader actually sees, given which nodes are expanded.

Expansion state
---------------
Every node is identified by its path: the labels from its Type down to the
node itself, e.g. ``("Income", "Admin", "Grants")``. Paths are stored as
node ids joined with ``|`` (``"Income|Admin|Grants"``).

:class:`ExpansionState` is an immutable set of expanded node ids. All nodes
start collapsed. ``toggle()`` flips exactly one node and returns a new
state; descendants are neither expanded nor collapsed along with it. A node
hidden by a collapsed ancestor keeps its own state, so re-expanding the
ancestor shows it as it was left.

Rendering
---------
``render(tree, state)`` walks the tree in presentation order and returns a
fresh list of :class:`PivotRow`:

- level 0 : one row per Type ("Income" first, then by label),
- level 1 : Centres of an expanded Type (by label),
- level 2 : Accounts of an expanded Centre (by label),
- level 3 : transactions of an expanded Account that has any,
- a "Grand Total" row, always last.

Accounts without transactions are plain rows with nothing to expand.
Rendering is total: an empty tree gives just the grand total row.

The rows can then be shown as a DataFrame / text table
(``rows_to_dataframe``) or as an HTML table (``rows_to_html``).
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from html import escape
from typing import Optional, Union

import pandas as pd

from .engine import LEVEL_ACCOUNT, GroupNode, PivotTree
from .formatting import format_currency, format_date, format_money
from .io import TransactionRecord
from .periods import PeriodSummary

NODE_ID_SEPARATOR = "|"
TRANSACTION_LEVEL = LEVEL_ACCOUNT + 1
GRAND_TOTAL_LABEL = "Grand Total"

ICON_COLLAPSED = "\u25b6"
ICON_EXPANDED = "\u25bc"
INDENT_PX = 20

NodePath = Union[str, Sequence[str]]


def node_id(path: NodePath) -> str:
    """Return the node id of a path (labels joined with ``|``).

    A string is taken to be a node id already and returned unchanged.
    """
    if isinstance(path, str):
        return path
    return NODE_ID_SEPARATOR.join(path)


@dataclass(frozen=True)
class ExpansionState:
    """Immutable set of expanded node ids."""

    expanded: frozenset[str] = field(default_factory=frozenset)

    def is_expanded(self, path: NodePath) -> bool:
        return node_id(path) in self.expanded

    def toggle(self, path: NodePath) -> "ExpansionState":
        """Return a new state with exactly this node flipped."""
        nid = node_id(path)
        if nid in self.expanded:
            return ExpansionState(self.expanded - {nid})
        return ExpansionState(self.expanded | {nid})

    def cleared(self) -> "ExpansionState":
        return ExpansionState()

    def __len__(self) -> int:
        return len(self.expanded)


@dataclass(frozen=True)
class PivotRow:
    """One visible row of the pivot table.

    Attributes:
        kind: "type", "centre", "account", "transaction" or "grand_total".
        level: Indentation level (0 to 3; the grand total is at 0).
        label: Grouping label, or "Grand Total".
        amount, vat, total_amount: Values shown in the numeric columns.
        node_id: Path id of a summary row (None for transactions and the
            grand total).
        expandable: Whether the row can be toggled.
        expanded: Whether the row is currently expanded.
        emphasis: Whether label and total are shown in bold.
        record: The underlying record of a transaction row.
    """

    kind: str
    level: int
    label: str
    amount: float
    vat: float
    total_amount: float
    node_id: Optional[str] = None
    expandable: bool = False
    expanded: bool = False
    emphasis: bool = False
    record: Optional[TransactionRecord] = None

    @property
    def description(self) -> str:
        """First column text: label, or "date payee detail" for transactions."""
        if self.record is None:
            return self.label
        parts = (
            format_date(self.record.date),
            self.record.payee,
            self.record.detail,
        )
        return " ".join(p for p in parts if p)


_KIND_BY_LEVEL = {0: "type", 1: "centre", 2: "account"}


def _summary_row(
    node: GroupNode, path: tuple[str, ...], state: ExpansionState
) -> PivotRow:
    if node.is_account:
        expandable = len(node.transactions) > 0
    else:
        expandable = True
    return PivotRow(
        kind=_KIND_BY_LEVEL[node.level],
        level=node.level,
        label=node.name,
        amount=node.amount,
        vat=node.vat,
        total_amount=node.total_amount,
        node_id=node_id(path),
        expandable=expandable,
        expanded=expandable and state.is_expanded(path),
    )


def _transaction_row(record: TransactionRecord) -> PivotRow:
    return PivotRow(
        kind="transaction",
        level=TRANSACTION_LEVEL,
        label=record.payee,
        amount=record.amount,
        vat=record.vat,
        total_amount=record.total_amount,
        record=record,
    )


def _render_node(
    node: GroupNode,
    path: tuple[str, ...],
    state: ExpansionState,
    rows: list[PivotRow],
) -> None:
    row = _summary_row(node, path, state)
    rows.append(row)

    if not row.expanded:
        return

    if node.is_account:
        if row.expandable:
            rows.extend(_transaction_row(r) for r in node.transactions)
        return

    for child in node.sorted_children():
        _render_node(child, path + (child.name,), state, rows)


def render(tree: PivotTree, state: Optional[ExpansionState] = None) -> list[PivotRow]:
    """Return the visible rows of ``tree`` for the given expansion state.

    The result is rebuilt from scratch on each call and ends with the grand
    total row.
    """
    if state is None:
        state = ExpansionState()
    rows: list[PivotRow] = []

    for type_node in tree.sorted_types():
        _render_node(type_node, (type_node.name,), state, rows)

    gt = tree.grand_total
    rows.append(
        PivotRow(
            kind="grand_total",
            level=0,
            label=GRAND_TOTAL_LABEL,
            amount=gt.amount,
            vat=gt.vat,
            total_amount=gt.total_amount,
            emphasis=True,
        )
    )
    return rows


# ---------------------------------------------------------------------------
# Text / DataFrame view
# ---------------------------------------------------------------------------

PIVOT_COLUMNS = ["Description", "Amount", "VAT", "Total Amount"]


def _text_icon(row: PivotRow) -> str:
    if not row.expandable:
        return " "
    return ICON_EXPANDED if row.expanded else ICON_COLLAPSED


def rows_to_dataframe(rows: Iterable[PivotRow]) -> pd.DataFrame:
    """Convert rendered rows into a display DataFrame.

    Columns: Description (indented two spaces per level, with an expand
    icon on summary rows), Amount, VAT, Total Amount (formatted).
    """
    out: list[dict[str, str]] = []
    for row in rows:
        indent = "  " * row.level
        if row.kind in ("transaction", "grand_total"):
            description = f"{indent}{row.description}"
        else:
            description = f"{indent}{_text_icon(row)} {row.label}"
        out.append(
            {
                "Description": description,
                "Amount": format_currency(row.amount),
                "VAT": format_currency(row.vat),
                "Total Amount": format_currency(row.total_amount),
            }
        )
    return pd.DataFrame(out, columns=PIVOT_COLUMNS)


def rows_to_text(rows: Iterable[PivotRow]) -> str:
    """Render rows as a plain text table (as printed by the CLI)."""
    df = rows_to_dataframe(rows)
    width = max([len("Description"), *df["Description"].str.len()])
    return df.to_string(
        index=False,
        justify="left",
        formatters={"Description": lambda s: f"{s:<{width}}"},
    )


# ---------------------------------------------------------------------------
# HTML view
# ---------------------------------------------------------------------------


def _html_summary_row(row: PivotRow) -> str:
    indent = row.level * INDENT_PX
    if row.expandable:
        icon = "&#9660;" if row.expanded else "&#9654;"
        classes = f"level-{row.level} {row.kind}-row clickable"
    else:
        icon = "&nbsp;&nbsp;"
        classes = f"level-{row.level} {row.kind}-row"
    return (
        f'<tr class="{classes}" data-node-id="{escape(row.node_id or "")}">'
        f'<td class="col-name" style="padding-left: {indent + 10}px">'
        f'<span class="expand-icon">{icon}</span> {escape(row.label)}</td>'
        f'<td class="col-amount">{format_currency(row.amount)}</td>'
        f'<td class="col-vat">{format_currency(row.vat)}</td>'
        f'<td class="col-total">{format_currency(row.total_amount)}</td>'
        "</tr>"
    )


def _html_transaction_row(row: PivotRow) -> str:
    record = row.record or TransactionRecord()
    indent = TRANSACTION_LEVEL * INDENT_PX
    return (
        f'<tr class="level-{TRANSACTION_LEVEL} transaction-row">'
        f'<td class="col-name" style="padding-left: {indent + 10}px">'
        f'<span class="tx-date">{escape(format_date(record.date))}</span> '
        f'<span class="tx-payee">{escape(record.payee)}</span> '
        f'<span class="tx-detail">{escape(record.detail)}</span></td>'
        f'<td class="col-amount">{format_currency(row.amount)}</td>'
        f'<td class="col-vat">{format_currency(row.vat)}</td>'
        f'<td class="col-total">{format_currency(row.total_amount)}</td>'
        "</tr>"
    )


def _html_grand_total_row(row: PivotRow) -> str:
    return (
        '<tr class="grand-total-row">'
        f'<td class="col-name"><strong>{escape(row.label)}</strong></td>'
        f'<td class="col-amount">{format_currency(row.amount)}</td>'
        f'<td class="col-vat">{format_currency(row.vat)}</td>'
        f'<td class="col-total"><strong>{format_currency(row.total_amount)}'
        "</strong></td>"
        "</tr>"
    )


def rows_to_html(rows: Iterable[PivotRow]) -> str:
    """Render rows as an HTML ``<table class="pivot-table">``.

    Expandable rows carry a ``data-node-id`` attribute so that a page script
    can send toggles back. All text is HTML-escaped.
    """
    body: list[str] = []
    for row in rows:
        if row.kind == "grand_total":
            body.append(_html_grand_total_row(row))
        elif row.kind == "transaction":
            body.append(_html_transaction_row(row))
        else:
            body.append(_html_summary_row(row))

    return "\n".join(
        [
            '<table class="pivot-table">',
            "<thead><tr>"
            '<th class="col-name">Description</th>'
            '<th class="col-amount">Amount</th>'
            '<th class="col-vat">VAT</th>'
            '<th class="col-total">Total Amount</th>'
            "</tr></thead>",
            "<tbody>",
            *body,
            "</tbody>",
            "</table>",
        ]
    )


# ---------------------------------------------------------------------------
# Summary block
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SummaryItem:
    """One figure of the summary block (label, formatted value, tone)."""

    label: str
    value: str
    tone: str = ""


def summary_items(summary: PeriodSummary, symbol: str = "£") -> list[SummaryItem]:
    """Return the summary figures in display order.

    With an opening balance: Opening Balance, Closing Balance and Net
    Position (signed, toned positive/negative). Always: Total Income
    (signed), Total Expenditure (absolute value) and Transactions.
    """
    items: list[SummaryItem] = []

    if summary.opening_balance is not None and summary.closing_balance is not None:
        for label, value in (
            ("Opening Balance", summary.opening_balance),
            ("Closing Balance", summary.closing_balance),
            ("Net Position", summary.net),
        ):
            tone = "positive" if value >= 0 else "negative"
            items.append(SummaryItem(label, format_money(value, symbol), tone))

    items.append(SummaryItem("Total Income", format_money(summary.income, symbol)))
    items.append(
        SummaryItem("Total Expenditure", format_money(abs(summary.expense), symbol))
    )
    items.append(SummaryItem("Transactions", str(summary.transaction_count)))
    return items


def summary_to_dataframe(summary: PeriodSummary, symbol: str = "£") -> pd.DataFrame:
    """Summary figures as a two-column (label, value) DataFrame."""
    return pd.DataFrame(
        [{"label": i.label, "value": i.value} for i in summary_items(summary, symbol)],
        columns=["label", "value"],
    )
