# Parish Finance Pivot - Drill-down income & expenditure tables for councils
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Core aggregation engine for Parish Finance Pivot.

This module groups the transaction records of one fiscal period into a
three-level tree:

    level 0 : Type         (``type``, e.g. "Income", "Expense")
    level 1 : Cost centre  (``centre_name``)
    level 2 : Account      (``account_name``), holding the raw records

Every node carries three rolled-up sums: ``amount`` (net), ``vat`` and
``total_amount`` (gross).

Aggregation
-----------
``aggregate()`` performs a single pass over the records. For each record it:

1. resolves the three grouping labels (empty values become "Unknown"),
2. creates the Type, Centre and Account nodes on first reference,
3. appends the record to the Account node,
4. adds the record's amounts to the Account, Centre and Type nodes.

The grand total is computed separately, directly over all records. By
construction it always agrees with the sum of the Type nodes, and every
node's sums equal the sums of its children (or of its records for an
Account).

Presentation order
------------------
The tree itself is unordered (dicts keyed by label). Rendering code asks for
children in presentation order through ``GroupNode.sorted_children()`` and
``PivotTree.sorted_types()``:

- "Income" always comes first among Types, other Types follow sorted by
  label,
- Centres and Accounts are sorted by label within their parent.

The tree is rebuilt from scratch for each period; it is never updated
incrementally.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Optional

from .io import TransactionRecord

UNKNOWN_LABEL = "Unknown"
INCOME_TYPE = "Income"
EXPENSE_TYPE = "Expense"

LEVEL_TYPE = 0
LEVEL_CENTRE = 1
LEVEL_ACCOUNT = 2


def grouping_label(value: Optional[str]) -> str:
    """Return the grouping label for a raw field value ("Unknown" if empty)."""
    if value is None:
        return UNKNOWN_LABEL
    text = str(value).strip()
    return text if text else UNKNOWN_LABEL


def type_sort_key(label: str) -> tuple[int, str]:
    """Sort key placing "Income" before every other Type label."""
    return (0 if label == INCOME_TYPE else 1, label)


@dataclass
class GroupNode:
    """A node of the Type -> Centre -> Account tree.

    Attributes:
        name: Grouping label.
        level: 0 (Type), 1 (Centre) or 2 (Account).
        amount: Sum of ``amount`` over all records below this node.
        vat: Sum of ``vat`` over all records below this node.
        total_amount: Sum of ``total_amount`` over all records below this node.
        children: Child nodes keyed by label (Type and Centre nodes only).
        transactions: Records in input order (Account nodes only).
    """

    name: str
    level: int
    amount: float = 0.0
    vat: float = 0.0
    total_amount: float = 0.0
    children: dict[str, "GroupNode"] = field(default_factory=dict)
    transactions: list[TransactionRecord] = field(default_factory=list)

    @property
    def is_account(self) -> bool:
        return self.level == LEVEL_ACCOUNT

    def add(self, record: TransactionRecord) -> None:
        """Add a record's amounts to this node's sums."""
        self.amount += record.amount
        self.vat += record.vat
        self.total_amount += record.total_amount

    def child(self, label: str) -> "GroupNode":
        """Return the child node for ``label``, creating it if needed."""
        node = self.children.get(label)
        if node is None:
            node = GroupNode(name=label, level=self.level + 1)
            self.children[label] = node
        return node

    def sorted_children(self) -> list["GroupNode"]:
        """Children in presentation order (by label)."""
        return [self.children[label] for label in sorted(self.children)]


@dataclass(frozen=True)
class GrandTotal:
    """Element-wise sum of amount, VAT and total over all records."""

    amount: float = 0.0
    vat: float = 0.0
    total_amount: float = 0.0


@dataclass
class PivotTree:
    """Result of :func:`aggregate`: the Type nodes and the grand total."""

    types: dict[str, GroupNode]
    grand_total: GrandTotal

    def sorted_types(self) -> list[GroupNode]:
        """Type nodes in presentation order ("Income" first)."""
        return [self.types[label] for label in sorted(self.types, key=type_sort_key)]

    def find(self, path: Iterable[str]) -> Optional[GroupNode]:
        """Return the node at ``path`` (labels from Type downwards), if any."""
        nodes = self.types
        node: Optional[GroupNode] = None
        for label in path:
            node = nodes.get(label)
            if node is None:
                return None
            nodes = node.children
        return node

    @property
    def is_empty(self) -> bool:
        return not self.types


def calculate_grand_total(records: Iterable[TransactionRecord]) -> GrandTotal:
    """Sum amount, VAT and total directly over ``records``."""
    amount = vat = total_amount = 0.0
    for r in records:
        amount += r.amount
        vat += r.vat
        total_amount += r.total_amount
    return GrandTotal(amount=amount, vat=vat, total_amount=total_amount)


def aggregate(records: Iterable[TransactionRecord]) -> PivotTree:
    """Group records into the Type -> Centre -> Account tree.

    Args:
        records: Transaction records of one period, in source order.

    Returns:
        A :class:`PivotTree`. An empty input gives an empty tree and a zero
        grand total.
    """
    records = list(records)
    types: dict[str, GroupNode] = {}

    for r in records:
        type_label = grouping_label(r.type)
        type_node = types.get(type_label)
        if type_node is None:
            type_node = GroupNode(name=type_label, level=LEVEL_TYPE)
            types[type_label] = type_node

        centre_node = type_node.child(grouping_label(r.centre_name))
        account_node = centre_node.child(grouping_label(r.account_name))

        account_node.transactions.append(r)

        # Roll up through all three levels
        account_node.add(r)
        centre_node.add(r)
        type_node.add(r)

    return PivotTree(types=types, grand_total=calculate_grand_total(records))
