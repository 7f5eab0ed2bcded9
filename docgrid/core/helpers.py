from __future__ import annotations

"""Position and validity helpers shared by the table utilities and transforms.

Finders return small value objects (:class:`NodeWithPos`,
:class:`ContentNodeWithPos`) or ``None``; they never raise for "not found".
Node type arguments accept a :class:`NodeType`, a type name, or an iterable
of either.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Union

from docgrid.core.model.node import Node
from docgrid.core.model.resolved_pos import ResolvedPos
from docgrid.core.model.schema import NodeType
from docgrid.core.state.selection import CELL_ROLES, Selection
from docgrid.core.state.transaction import Transaction

__all__ = [
    "ContentNodeWithPos",
    "NodeWithPos",
    "Primitive",
    "TypeSpec",
    "chain",
    "equal_node_type",
    "find_cell_closest_to_pos",
    "find_children",
    "find_children_by_type",
    "find_parent_node",
    "find_parent_node_closest_to_pos",
    "find_parent_node_of_type",
    "find_selected_node_of_type",
    "flatten",
    "has_parent_node_of_type",
    "is_node_selection",
    "remove_node_at_pos",
    "replace_node_at_pos",
]

logger = logging.getLogger(__name__)

TypeSpec = Union[NodeType, str, Iterable[Union[NodeType, str]]]
Primitive = Callable[[Transaction], Transaction]


@dataclass(frozen=True)
class NodeWithPos:
    """A node and the position directly before it."""
    node: Node
    pos: int


@dataclass(frozen=True)
class ContentNodeWithPos:
    """An ancestor node with its position, content start and depth."""
    node: Node
    pos: int
    start: int
    depth: int


def is_node_selection(selection: Selection) -> bool:
    return selection.kind == "node"


def equal_node_type(types: TypeSpec, node: Node) -> bool:
    """Return True if *node*'s type matches one of *types*."""
    if isinstance(types, (NodeType, str)):
        types = (types,)
    for candidate in types:
        if candidate is node.type or candidate == node.type.name:
            return True
    return False


# ---------------------------------------------------------------------------
# Ancestor lookups
# ---------------------------------------------------------------------------

def find_parent_node_closest_to_pos(
    resolved: ResolvedPos, predicate: Callable[[Node], bool]
) -> Optional[ContentNodeWithPos]:
    """Innermost ancestor of *resolved* (document excluded) satisfying *predicate*."""
    for depth in range(resolved.depth, 0, -1):
        node = resolved.node(depth)
        if predicate(node):
            return ContentNodeWithPos(node, resolved.before(depth), resolved.start(depth), depth)
    return None


def find_parent_node(predicate: Callable[[Node], bool]) -> Callable[[Selection], Optional[ContentNodeWithPos]]:
    def finder(selection: Selection) -> Optional[ContentNodeWithPos]:
        return find_parent_node_closest_to_pos(selection.resolved_from, predicate)
    return finder


def find_parent_node_of_type(types: TypeSpec) -> Callable[[Selection], Optional[ContentNodeWithPos]]:
    return find_parent_node(lambda node: equal_node_type(types, node))


def has_parent_node_of_type(types: TypeSpec) -> Callable[[Selection], bool]:
    def check(selection: Selection) -> bool:
        return find_parent_node_of_type(types)(selection) is not None
    return check


def find_selected_node_of_type(types: TypeSpec) -> Callable[[Selection], Optional[ContentNodeWithPos]]:
    """Return the selected node when the selection is a node selection of one of *types*."""
    def finder(selection: Selection) -> Optional[ContentNodeWithPos]:
        if not is_node_selection(selection) or not equal_node_type(types, selection.node):
            return None
        resolved = selection.resolved_from
        return ContentNodeWithPos(selection.node, resolved.pos, resolved.pos + 1, resolved.depth)
    return finder


def find_cell_closest_to_pos(resolved: ResolvedPos) -> Optional[ContentNodeWithPos]:
    return find_parent_node_closest_to_pos(resolved, lambda node: node.type.table_role in CELL_ROLES)


# ---------------------------------------------------------------------------
# Node-at-position edits
# ---------------------------------------------------------------------------

def replace_node_at_pos(pos: int, node: Node) -> Callable[[Transaction], Transaction]:
    """Replace the node starting at *pos* with *node*, if the parent accepts it there."""
    def apply(tr: Transaction) -> Transaction:
        current = tr.doc.node_at(pos)
        if current is None:
            return tr
        resolved = tr.doc.resolve(pos)
        index = resolved.index()
        if not resolved.parent.can_replace(index, index + 1, (node,)):
            logger.debug("Edit noop: replace_node_at_pos rejected pos=%d type=%s", pos, node.type.name)
            return tr
        return tr.replace_with(pos, pos + current.node_size, node)
    return apply


def remove_node_at_pos(pos: int) -> Callable[[Transaction], Transaction]:
    """Delete the node starting at *pos*, unless that leaves its parent invalid."""
    def apply(tr: Transaction) -> Transaction:
        current = tr.doc.node_at(pos)
        if current is None:
            return tr
        resolved = tr.doc.resolve(pos)
        index = resolved.index()
        if not resolved.parent.can_replace(index, index + 1):
            logger.debug("Edit noop: remove_node_at_pos would empty %s", resolved.parent.type.name)
            return tr
        return tr.delete(pos, pos + current.node_size)
    return apply


# ---------------------------------------------------------------------------
# Children
# ---------------------------------------------------------------------------

def flatten(node: Node, descend: bool = True) -> List[NodeWithPos]:
    """Descendants of *node* with positions relative to its content start."""
    result: List[NodeWithPos] = []

    def visit(child: Node, pos: int, parent: Optional[Node], index: int) -> Optional[bool]:
        result.append(NodeWithPos(child, pos))
        return None if descend else False

    node.descendants(visit)
    return result


def find_children(node: Node, predicate: Callable[[Node], bool], descend: bool = True) -> List[NodeWithPos]:
    return [item for item in flatten(node, descend) if predicate(item.node)]


def find_children_by_type(node: Node, types: TypeSpec, descend: bool = True) -> List[NodeWithPos]:
    return find_children(node, lambda child: equal_node_type(types, child), descend)


def chain(*primitives: Primitive) -> Primitive:
    """Thread a transaction through *primitives* in order."""
    def run(tr: Transaction) -> Transaction:
        for primitive in primitives:
            tr = primitive(tr)
        return tr
    return run
