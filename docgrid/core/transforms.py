from __future__ import annotations

"""Structural transform primitives.

Each primitive takes its arguments and returns a function from
:class:`Transaction` to :class:`Transaction`. When a primitive cannot act
(nothing to operate on, or the schema would reject the result) it returns
the transaction it was given, so callers detect no-ops with ``is``.
"""

import logging
from typing import Any, Iterable, Mapping, Optional

from docgrid.core.helpers import (
    Primitive,
    TypeSpec,
    find_parent_node_of_type,
    is_node_selection,
    remove_node_at_pos,
    replace_node_at_pos,
)
from docgrid.core.model.node import Node
from docgrid.core.model.schema import Mark, NodeType
from docgrid.core.state.selection import NodeSelection
from docgrid.core.state.transaction import Transaction

__all__ = [
    "remove_parent_node_of_type",
    "remove_selected_node",
    "replace_parent_node_of_type",
    "replace_selected_node",
    "safe_insert",
    "select_parent_node_of_type",
    "set_parent_node_markup",
]

logger = logging.getLogger(__name__)


def _outcome(label: str, before: Transaction, after: Transaction) -> Transaction:
    if after is before:
        logger.debug("Edit noop: %s", label)
    else:
        logger.debug("Edit OK: %s", label)
    return after


def remove_parent_node_of_type(types: TypeSpec) -> Primitive:
    """Delete the closest ancestor of the selection whose type is in *types*.

    Nothing happens when the deletion would leave the ancestor's parent with
    content its type does not accept.
    """
    def apply(tr: Transaction) -> Transaction:
        parent = find_parent_node_of_type(types)(tr.selection)
        if parent is None:
            logger.debug("Edit noop: remove_parent_node_of_type, no matching parent")
            return tr
        logger.debug("Edit: remove %s at %d", parent.node.type.name, parent.pos)
        return _outcome("remove_parent_node_of_type", tr, remove_node_at_pos(parent.pos)(tr))
    return apply


def replace_parent_node_of_type(types: TypeSpec, node: Node) -> Primitive:
    """Replace the closest ancestor whose type is in *types* with *node*."""
    def apply(tr: Transaction) -> Transaction:
        parent = find_parent_node_of_type(types)(tr.selection)
        if parent is None:
            logger.debug("Edit noop: replace_parent_node_of_type, no matching parent")
            return tr
        logger.debug("Edit: replace %s at %d with %s", parent.node.type.name, parent.pos, node.type.name)
        return _outcome("replace_parent_node_of_type", tr, replace_node_at_pos(parent.pos, node)(tr))
    return apply


def remove_selected_node(tr: Transaction) -> Transaction:
    """Delete the node of a node selection, unless its parent would be left invalid."""
    if not is_node_selection(tr.selection):
        return tr
    logger.debug("Edit: remove selected %s", tr.selection.node.type.name)
    return _outcome("remove_selected_node", tr, remove_node_at_pos(tr.selection.from_)(tr))


def replace_selected_node(node: Node) -> Primitive:
    def apply(tr: Transaction) -> Transaction:
        if not is_node_selection(tr.selection):
            return tr
        logger.debug("Edit: replace selected %s with %s", tr.selection.node.type.name, node.type.name)
        return _outcome("replace_selected_node", tr, replace_node_at_pos(tr.selection.from_, node)(tr))
    return apply


def safe_insert(node: Node) -> Primitive:
    """Insert *node* at the cursor, or after the innermost ancestor that accepts it there.

    The ancestors are tried from the innermost outwards, stopping below the
    document node. Returns the given transaction when no boundary fits.
    """
    def apply(tr: Transaction) -> Transaction:
        resolved = tr.selection.resolved_from
        index = resolved.index()
        if resolved.parent.can_replace_with(index, index, node.type, node.marks):
            logger.debug("Edit OK: safe_insert %s at cursor %d", node.type.name, resolved.pos)
            return tr.insert(resolved.pos, node)

        for depth in range(resolved.depth, 0, -1):
            pos = resolved.after(depth)
            target = tr.doc.resolve(pos)
            index = target.index()
            if target.parent.can_replace_with(index, index, node.type, node.marks):
                logger.debug("Edit OK: safe_insert %s after %s at %d",
                             node.type.name, resolved.node(depth).type.name, pos)
                return tr.insert(pos, node)

        logger.debug("Edit noop: safe_insert found no place for %s", node.type.name)
        return tr
    return apply


def set_parent_node_markup(
    types: TypeSpec,
    node_type: Optional[NodeType] = None,
    attrs: Optional[Mapping[str, Any]] = None,
    marks: Optional[Iterable[Mark]] = None,
) -> Primitive:
    """Change the type, attributes or marks of the closest ancestor of *types*.

    *attrs* is merged over the ancestor's current attributes; keys the
    target type does not declare are dropped. The content is kept, so a
    *node_type* that would not accept it makes this a no-op.
    """
    def apply(tr: Transaction) -> Transaction:
        parent = find_parent_node_of_type(types)(tr.selection)
        if parent is None:
            logger.debug("Edit noop: set_parent_node_markup, no matching parent")
            return tr
        target = node_type or parent.node.type
        if not target.valid_content(parent.node.content):
            logger.debug("Edit noop: %s cannot hold the content of %s", target.name, parent.node.type.name)
            return tr
        merged = dict(parent.node.attrs)
        merged.update(attrs or {})
        merged = {name: value for name, value in merged.items() if name in target.attrs}
        logger.debug("Edit OK: set_parent_node_markup %s at %d -> %s", parent.node.type.name, parent.pos, target.name)
        return tr.set_node_markup(parent.pos, target, merged, marks)
    return apply


def select_parent_node_of_type(types: TypeSpec) -> Primitive:
    def apply(tr: Transaction) -> Transaction:
        if is_node_selection(tr.selection):
            return tr
        parent = find_parent_node_of_type(types)(tr.selection)
        if parent is None:
            return tr
        logger.debug("Edit OK: select %s at %d", parent.node.type.name, parent.pos)
        return tr.set_selection(NodeSelection.create(tr.doc, parent.pos))
    return apply
