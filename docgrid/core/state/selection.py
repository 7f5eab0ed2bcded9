from __future__ import annotations

"""Selections: cursor/text ranges, single selected nodes, rectangular cell ranges.

``Selection`` is a tagged union of three frozen dataclasses. Each variant
exposes a ``kind`` tag (``"text"``, ``"node"`` or ``"cell"``) and the same
read-only surface (``anchor``, ``head``, ``from_``, ``to``,
``resolved_from``, ``resolved_to``, ``empty``, ``map``, ``eq``); code that
needs variant-specific data dispatches on ``kind``.
"""

import logging
from dataclasses import dataclass
from typing import Callable, ClassVar, List, Optional, Tuple, Union

from docgrid.core.exceptions import SelectionError
from docgrid.core.model.node import Node
from docgrid.core.model.resolved_pos import ResolvedPos
from docgrid.core.model.table_map import Rect, TableMap
from docgrid.core.state.mapping import Mapping

__all__ = [
    "CellSelection",
    "NodeSelection",
    "Selection",
    "TextSelection",
    "in_same_table",
    "points_at_cell",
]

logger = logging.getLogger(__name__)

CELL_ROLES = ("cell", "header_cell")


def points_at_cell(resolved: ResolvedPos) -> bool:
    """True if *resolved* sits inside a row, directly before a cell."""
    after = resolved.node_after
    return (
        resolved.parent.type.table_role == "row"
        and after is not None
        and after.type.table_role in CELL_ROLES
    )


def in_same_table(a: ResolvedPos, b: ResolvedPos) -> bool:
    return a.depth == b.depth and b.start(-1) <= a.pos <= b.end(-1)


def _textblock_ranges(doc: Node) -> List[Tuple[int, int]]:
    ranges: List[Tuple[int, int]] = []

    def visit(node: Node, pos: int, parent: Optional[Node], index: int) -> Optional[bool]:
        if node.is_textblock:
            ranges.append((pos + 1, pos + 1 + node.content_size))
            return False
        return None

    doc.descendants(visit)
    return ranges


@dataclass(frozen=True, eq=False)
class TextSelection:
    """A text range; a cursor when anchor and head coincide."""

    resolved_anchor: ResolvedPos
    resolved_head: ResolvedPos
    kind: ClassVar[str] = "text"

    @classmethod
    def create(cls, doc: Node, anchor: int, head: Optional[int] = None) -> "TextSelection":
        return cls(doc.resolve(anchor), doc.resolve(anchor if head is None else head))

    @classmethod
    def near(cls, resolved: ResolvedPos, bias: int = 1) -> "TextSelection":
        """Cursor at the closest position inside a textblock, searching in *bias* direction first.

        Documents without any textblock get a plain cursor at *resolved*.
        """
        if resolved.parent.inline_content:
            return cls(resolved, resolved)
        doc = resolved.doc
        ranges = _textblock_ranges(doc)
        forward = [start for start, _end in ranges if start >= resolved.pos]
        backward = [end for _start, end in ranges if end <= resolved.pos]
        candidates = forward[:1] + backward[-1:] if bias > 0 else backward[-1:] + forward[:1]
        if not candidates:
            return cls(resolved, resolved)
        target = doc.resolve(candidates[0])
        return cls(target, target)

    @classmethod
    def at_start(cls, doc: Node) -> "TextSelection":
        return cls.near(doc.resolve(0))

    @property
    def anchor(self) -> int:
        return self.resolved_anchor.pos

    @property
    def head(self) -> int:
        return self.resolved_head.pos

    @property
    def from_(self) -> int:
        return min(self.anchor, self.head)

    @property
    def to(self) -> int:
        return max(self.anchor, self.head)

    @property
    def resolved_from(self) -> ResolvedPos:
        return self.resolved_anchor if self.anchor <= self.head else self.resolved_head

    @property
    def resolved_to(self) -> ResolvedPos:
        return self.resolved_head if self.anchor <= self.head else self.resolved_anchor

    @property
    def empty(self) -> bool:
        return self.anchor == self.head

    @property
    def is_cursor(self) -> bool:
        return self.empty

    def map(self, doc: Node, mapping: Mapping) -> "TextSelection":
        resolved_head = doc.resolve(mapping.map(self.head))
        if not resolved_head.parent.inline_content:
            return TextSelection.near(resolved_head)
        return TextSelection(doc.resolve(mapping.map(self.anchor)), resolved_head)

    def eq(self, other: "Selection") -> bool:
        return other.kind == self.kind and other.anchor == self.anchor and other.head == self.head

    def __repr__(self) -> str:
        return f"<TextSelection {self.anchor}-{self.head}>"


@dataclass(frozen=True, eq=False)
class NodeSelection:
    """Selection of the single node starting at ``resolved_from``."""

    resolved_from: ResolvedPos
    node: Node
    kind: ClassVar[str] = "node"

    @classmethod
    def create(cls, doc: Node, pos: int) -> "NodeSelection":
        resolved = doc.resolve(pos)
        node = resolved.node_after
        if node is None:
            raise SelectionError("No node after position for a node selection", {"pos": pos})
        return cls(resolved, node)

    @property
    def anchor(self) -> int:
        return self.resolved_from.pos

    @property
    def head(self) -> int:
        return self.to

    @property
    def from_(self) -> int:
        return self.resolved_from.pos

    @property
    def to(self) -> int:
        return self.from_ + self.node.node_size

    @property
    def resolved_to(self) -> ResolvedPos:
        return self.resolved_from.doc.resolve(self.to)

    @property
    def empty(self) -> bool:
        return False

    def map(self, doc: Node, mapping: Mapping) -> "Selection":
        result = mapping.map_result(self.from_)
        resolved = doc.resolve(result.pos)
        if result.deleted or resolved.node_after is None:
            return TextSelection.near(resolved)
        return NodeSelection(resolved, resolved.node_after)

    def eq(self, other: "Selection") -> bool:
        return other.kind == self.kind and other.anchor == self.anchor

    def __repr__(self) -> str:
        return f"<NodeSelection {self.node.type.name}@{self.from_}>"


@dataclass(frozen=True, eq=False)
class CellSelection:
    """Rectangle of table cells spanned by an anchor cell and a head cell.

    Both ends are positions directly before a cell, inside the same table.
    """

    resolved_anchor_cell: ResolvedPos
    resolved_head_cell: ResolvedPos
    kind: ClassVar[str] = "cell"

    @classmethod
    def create(cls, doc: Node, anchor_cell: int, head_cell: Optional[int] = None) -> "CellSelection":
        resolved_anchor = doc.resolve(anchor_cell)
        resolved_head = resolved_anchor if head_cell is None else doc.resolve(head_cell)
        for resolved in (resolved_anchor, resolved_head):
            if not points_at_cell(resolved):
                raise SelectionError("Cell selection end does not point at a cell", {"pos": resolved.pos})
        if not in_same_table(resolved_anchor, resolved_head):
            raise SelectionError(
                "Cell selection ends are in different tables",
                {"anchor": resolved_anchor.pos, "head": resolved_head.pos},
            )
        return cls(resolved_anchor, resolved_head)

    @property
    def anchor(self) -> int:
        return self.resolved_anchor_cell.pos

    @property
    def head(self) -> int:
        return self.resolved_head_cell.pos

    @property
    def table_node(self) -> Node:
        return self.resolved_anchor_cell.node(-1)

    @property
    def table_start(self) -> int:
        return self.resolved_anchor_cell.start(-1)

    def table_map(self) -> TableMap:
        return TableMap.get(self.table_node)

    def rect(self) -> Rect:
        """Grid rectangle spanned by the anchor and head cells."""
        start = self.table_start
        return self.table_map().rect_between(self.anchor - start, self.head - start)

    def cell_positions(self) -> List[int]:
        """Positions of every cell in the rectangle, ascending."""
        start = self.table_start
        return sorted(start + offset for offset in self.table_map().cells_in_rect(self.rect()))

    def for_each_cell(self, f: Callable[[Node, int], object]) -> None:
        doc = self.resolved_anchor_cell.doc
        for pos in self.cell_positions():
            f(doc.node_at(pos), pos)

    @property
    def from_(self) -> int:
        return self.cell_positions()[0]

    @property
    def to(self) -> int:
        doc = self.resolved_anchor_cell.doc
        return max(pos + doc.node_at(pos).node_size for pos in self.cell_positions())

    @property
    def resolved_from(self) -> ResolvedPos:
        return self.resolved_anchor_cell.doc.resolve(self.from_)

    @property
    def resolved_to(self) -> ResolvedPos:
        return self.resolved_anchor_cell.doc.resolve(self.to)

    @property
    def empty(self) -> bool:
        return False

    def map(self, doc: Node, mapping: Mapping) -> "Selection":
        resolved_anchor = doc.resolve(mapping.map(self.anchor))
        resolved_head = doc.resolve(mapping.map(self.head))
        if points_at_cell(resolved_anchor) and points_at_cell(resolved_head) and in_same_table(resolved_anchor, resolved_head):
            return CellSelection(resolved_anchor, resolved_head)
        logger.debug("Cell selection lost its cells after mapping, falling back to text selection")
        return TextSelection.near(resolved_head)

    def eq(self, other: "Selection") -> bool:
        return other.kind == self.kind and other.anchor == self.anchor and other.head == self.head

    def __repr__(self) -> str:
        return f"<CellSelection {self.anchor}:{self.head}>"


Selection = Union[TextSelection, NodeSelection, CellSelection]
