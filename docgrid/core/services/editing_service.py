from __future__ import annotations

"""Service layer running table and structural primitives on transactions.

The primitives in :mod:`docgrid.core.tables` and
:mod:`docgrid.core.transforms` report a no-op by handing back the transaction
they were given. Callers that prefer an explicit outcome (a command palette,
a scripting bridge) go through :class:`EditingService`, which wraps every
call in an :class:`OperationResult`.

Scope and guarantees:
- Pure in-memory work on immutable transactions; nothing is recorded.
- Expected no-ops return ``OperationResult(success=False, ...)`` and never
  raise. Programming errors raised by the document model propagate.
- No editing policy: the service runs exactly the primitive it is given.

Examples
--------
Basic usage:

    service = EditingService()
    result = service.select_column(tr, 0)
    if result.success:
        tr = result.transaction
"""

from dataclasses import dataclass
import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence

from docgrid.core.helpers import Primitive, TypeSpec, chain
from docgrid.core.model.node import Node
from docgrid.core.model.schema import Mark, NodeType, Schema, schema_from_config
from docgrid.core.state.transaction import Transaction
from docgrid.core import tables, transforms


__all__ = ["EditingService", "OperationResult"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OperationResult:
    """Result of running a primitive.

    Attributes
    ----------
    success
        Whether the primitive produced a new transaction.
    message
        Human-readable summary suitable for logs or UI display.
    details
        Optional structured details for diagnostics or caller logic.
    transaction
        The resulting transaction; the input transaction on a no-op.
    """
    success: bool
    message: str
    details: Optional[Dict[str, Any]] = None
    transaction: Optional[Transaction] = None


class EditingService:
    """Runs primitives and reports what happened.

    Parameters
    ----------
    schema
        Schema used by primitives that build content
        (:func:`~docgrid.core.tables.empty_selected_cells`). Defaults to the
        configured schema.
    """

    def __init__(self, schema: Optional[Schema] = None) -> None:
        self._schema = schema or schema_from_config()

    @property
    def schema(self) -> Schema:
        return self._schema

    # -------------------------------------------------------------------------
    # Generic entry points
    # -------------------------------------------------------------------------

    def apply(self, tr: Transaction, primitive: Primitive, name: Optional[str] = None) -> OperationResult:
        """Run *primitive* on *tr*; success means a different transaction came back."""
        label = name or getattr(primitive, "__qualname__", "primitive")
        logger.info("Edit: %s", label)
        result = primitive(tr)
        details = {"operation": label, "steps": len(result.steps) - len(tr.steps)}
        if result is tr:
            logger.info("Edit noop: %s", label)
            return OperationResult(False, f"Nothing to do for '{label}'.", details, tr)
        details["selection"] = repr(result.selection)
        logger.info("Edit OK: %s steps=%d", label, details["steps"])
        return OperationResult(True, f"Applied '{label}'.", details, result)

    def apply_all(self, tr: Transaction, primitives: Sequence[Primitive], name: Optional[str] = None) -> OperationResult:
        """Run *primitives* in order as one operation."""
        if not primitives:
            return OperationResult(False, "No operations given.", {"operation": name or "chain"}, tr)
        return self.apply(tr, chain(*primitives), name or "chain")

    # -------------------------------------------------------------------------
    # Table operations
    # -------------------------------------------------------------------------

    def select_column(self, tr: Transaction, column_index: int) -> OperationResult:
        return self.apply(tr, tables.select_column(column_index), f"select_column {column_index}")

    def select_row(self, tr: Transaction, row_index: int) -> OperationResult:
        return self.apply(tr, tables.select_row(row_index), f"select_row {row_index}")

    def select_table(self, tr: Transaction) -> OperationResult:
        return self.apply(tr, tables.select_table, "select_table")

    def empty_selected_cells(self, tr: Transaction) -> OperationResult:
        return self.apply(tr, tables.empty_selected_cells(self._schema), "empty_selected_cells")

    # -------------------------------------------------------------------------
    # Structural operations
    # -------------------------------------------------------------------------

    def insert_node(self, tr: Transaction, node: Node) -> OperationResult:
        return self.apply(tr, transforms.safe_insert(node), f"safe_insert {node.type.name}")

    def remove_selected_node(self, tr: Transaction) -> OperationResult:
        return self.apply(tr, transforms.remove_selected_node, "remove_selected_node")

    def replace_selected_node(self, tr: Transaction, node: Node) -> OperationResult:
        return self.apply(tr, transforms.replace_selected_node(node), f"replace_selected_node {node.type.name}")

    def remove_parent(self, tr: Transaction, types: TypeSpec) -> OperationResult:
        return self.apply(tr, transforms.remove_parent_node_of_type(types), "remove_parent_node_of_type")

    def replace_parent(self, tr: Transaction, types: TypeSpec, node: Node) -> OperationResult:
        return self.apply(tr, transforms.replace_parent_node_of_type(types, node), "replace_parent_node_of_type")

    def set_parent_markup(
        self,
        tr: Transaction,
        types: TypeSpec,
        node_type: Optional[NodeType] = None,
        attrs: Optional[Mapping[str, Any]] = None,
        marks: Optional[Iterable[Mark]] = None,
    ) -> OperationResult:
        return self.apply(
            tr, transforms.set_parent_node_markup(types, node_type, attrs, marks), "set_parent_node_markup"
        )

    def select_parent(self, tr: Transaction, types: TypeSpec) -> OperationResult:
        return self.apply(tr, transforms.select_parent_node_of_type(types), "select_parent_node_of_type")
