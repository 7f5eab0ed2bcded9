from __future__ import annotations

"""Resolved positions: a position plus the chain of ancestors around it."""

from typing import TYPE_CHECKING, List, Optional, Tuple

from docgrid.core.exceptions import PositionError

if TYPE_CHECKING:
    from docgrid.core.model.node import Node

__all__ = ["ResolvedPos"]


class ResolvedPos:
    """A position resolved against a document.

    ``path`` holds one ``(node, index, offset)`` triple per depth: the
    ancestor node, the index of the child the position points into, and the
    absolute position where that child starts. Depth 0 is the document.

    Methods taking a ``depth`` accept ``None`` for the innermost depth and
    negative values counted from it (``-1`` is the parent's parent).
    """

    def __init__(self, pos: int, path: List[Tuple["Node", int, int]], parent_offset: int) -> None:
        self.pos = pos
        self.path = path
        self.parent_offset = parent_offset
        self.depth = len(path) - 1

    @classmethod
    def resolve(cls, doc: "Node", pos: int) -> "ResolvedPos":
        if not 0 <= pos <= doc.content_size:
            raise PositionError(f"Position {pos} out of range", pos, {"size": doc.content_size})
        path: List[Tuple["Node", int, int]] = []
        start = 0
        parent_offset = pos
        node = doc
        while True:
            index, offset = node.find_index(parent_offset)
            rem = parent_offset - offset
            path.append((node, index, start + offset))
            if not rem:
                break
            node = node.child(index)
            if node.is_text:
                break
            parent_offset = rem - 1
            start += offset + 1
        return cls(pos, path, parent_offset)

    def _depth(self, depth: Optional[int]) -> int:
        if depth is None:
            return self.depth
        return self.depth + depth if depth < 0 else depth

    # ------------------------------------------------------------------
    # Ancestors
    # ------------------------------------------------------------------
    @property
    def parent(self) -> "Node":
        return self.path[self.depth][0]

    @property
    def doc(self) -> "Node":
        return self.path[0][0]

    def node(self, depth: Optional[int] = None) -> "Node":
        return self.path[self._depth(depth)][0]

    def index(self, depth: Optional[int] = None) -> int:
        return self.path[self._depth(depth)][1]

    def index_after(self, depth: Optional[int] = None) -> int:
        depth = self._depth(depth)
        return self.index(depth) + (0 if depth == self.depth and not self.text_offset else 1)

    def start(self, depth: Optional[int] = None) -> int:
        """Position at the start of the content of the ancestor at *depth*."""
        depth = self._depth(depth)
        return 0 if depth == 0 else self.path[depth - 1][2] + 1

    def end(self, depth: Optional[int] = None) -> int:
        depth = self._depth(depth)
        return self.start(depth) + self.node(depth).content_size

    def before(self, depth: Optional[int] = None) -> int:
        """Position directly before the ancestor at *depth*."""
        depth = self._depth(depth)
        if not depth:
            raise PositionError("There is no position before the top-level node", self.pos)
        return self.pos if depth == self.depth + 1 else self.path[depth - 1][2]

    def after(self, depth: Optional[int] = None) -> int:
        """Position directly after the ancestor at *depth*."""
        depth = self._depth(depth)
        if not depth:
            raise PositionError("There is no position after the top-level node", self.pos)
        if depth == self.depth + 1:
            return self.pos
        return self.path[depth - 1][2] + self.path[depth][0].node_size

    # ------------------------------------------------------------------
    # Neighbours
    # ------------------------------------------------------------------
    @property
    def text_offset(self) -> int:
        """Offset into the text node the position points into (0 between nodes)."""
        return self.pos - self.path[-1][2]

    @property
    def node_after(self) -> Optional["Node"]:
        parent = self.parent
        index = self.index(self.depth)
        if index == parent.child_count:
            return None
        child = parent.child(index)
        return child.cut(self.text_offset) if self.text_offset else child

    @property
    def node_before(self) -> Optional["Node"]:
        index = self.index(self.depth)
        if self.text_offset:
            return self.parent.child(index).cut(0, self.text_offset)
        return None if index == 0 else self.parent.child(index - 1)

    def pos_at_index(self, index: int, depth: Optional[int] = None) -> int:
        depth = self._depth(depth)
        node = self.path[depth][0]
        pos = 0 if depth == 0 else self.path[depth - 1][2] + 1
        for i in range(index):
            pos += node.child(i).node_size
        return pos

    def shared_depth(self, pos: int) -> int:
        """Depth of the innermost ancestor containing both this position and *pos*."""
        for depth in range(self.depth, 0, -1):
            if self.start(depth) <= pos <= self.end(depth):
                return depth
        return 0

    def __repr__(self) -> str:
        parts = "/".join(
            f"{self.node(d).type.name}_{self.index(d - 1)}" for d in range(1, self.depth + 1)
        )
        return f"<ResolvedPos {parts}:{self.parent_offset}>"
