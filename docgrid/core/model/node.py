from __future__ import annotations

"""Immutable document nodes.

A :class:`Node` never changes after construction. Edits build a new node
along the path from the edited parent up to the root and reuse every other
subtree object as-is, so unchanged parts of two document versions are the
same Python objects.

Position arithmetic follows the usual flattened-tree convention: a text node
occupies one position per character, a leaf node one position, and any other
node two positions (its opening and closing token) plus its content.
"""

from dataclasses import dataclass, field
from functools import cached_property
from typing import TYPE_CHECKING, Any, Callable, Iterable, List, Mapping, Optional, Sequence, Tuple

from docgrid.core.exceptions import PositionError, ReplaceError, SchemaError

if TYPE_CHECKING:
    from docgrid.core.model.resolved_pos import ResolvedPos
    from docgrid.core.model.schema import Mark, NodeType

__all__ = ["Node", "normalize_inline", "same_marks"]


def same_marks(a: Sequence["Mark"], b: Sequence["Mark"]) -> bool:
    return len(a) == len(b) and all(x.eq(y) for x, y in zip(a, b))


def normalize_inline(content: Iterable["Node"]) -> Tuple["Node", ...]:
    """Drop empty text nodes and join adjacent text nodes carrying the same marks."""
    result: List[Node] = []
    for child in content:
        if child.is_text:
            if not child.text:
                continue
            if result and result[-1].is_text and same_marks(result[-1].marks, child.marks):
                result[-1] = result[-1].with_text(result[-1].text + child.text)
                continue
        result.append(child)
    return tuple(result)


@dataclass(frozen=True, eq=False)
class Node:
    """A typed document node.

    Attributes
    ----------
    type
        The :class:`NodeType` of this node.
    attrs
        Attribute values, complete with defaults.
    content
        Child nodes (empty for text and leaf nodes).
    marks
        Marks applied to this node (inline nodes only).
    text
        Text of a text node, ``None`` otherwise.
    """

    type: "NodeType"
    attrs: Mapping[str, Any] = field(default_factory=dict)
    content: Tuple["Node", ...] = ()
    marks: Tuple["Mark", ...] = ()
    text: Optional[str] = None

    # ------------------------------------------------------------------
    # Size and shape
    # ------------------------------------------------------------------
    @cached_property
    def content_size(self) -> int:
        return sum(child.node_size for child in self.content)

    @cached_property
    def node_size(self) -> int:
        if self.is_text:
            return len(self.text or "")
        if self.is_leaf:
            return 1
        return self.content_size + 2

    @property
    def child_count(self) -> int:
        return len(self.content)

    @property
    def is_text(self) -> bool:
        return self.type.is_text

    @property
    def is_leaf(self) -> bool:
        return self.type.is_leaf

    @property
    def is_block(self) -> bool:
        return self.type.is_block

    @property
    def is_inline(self) -> bool:
        return self.type.is_inline

    @property
    def is_textblock(self) -> bool:
        return self.type.is_textblock

    @property
    def inline_content(self) -> bool:
        return self.type.inline_content

    @property
    def is_atom(self) -> bool:
        return self.type.is_atom

    @property
    def text_content(self) -> str:
        if self.is_text:
            return self.text or ""
        return "".join(child.text_content for child in self.content)

    def child(self, index: int) -> "Node":
        if not 0 <= index < len(self.content):
            raise PositionError(f"Index {index} out of range for {self.type.name}", context={"index": index})
        return self.content[index]

    def maybe_child(self, index: int) -> Optional["Node"]:
        return self.content[index] if 0 <= index < len(self.content) else None

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------
    def for_each(self, f: Callable[["Node", int, int], Any]) -> None:
        """Call ``f(child, offset, index)`` for every direct child."""
        offset = 0
        for index, child in enumerate(self.content):
            f(child, offset, index)
            offset += child.node_size

    def nodes_between(
        self,
        from_: int,
        to: int,
        f: Callable[["Node", int, Optional["Node"], int], Any],
        start_pos: int = 0,
    ) -> None:
        """Call ``f(node, pos, parent, index)`` for every descendant overlapping ``[from_, to)``.

        Positions are relative to this node's content start plus *start_pos*.
        When *f* returns ``False`` the node's children are skipped.
        """
        pos = 0
        for index, child in enumerate(self.content):
            if pos >= to:
                break
            end = pos + child.node_size
            if end > from_ and f(child, start_pos + pos, self, index) is not False and child.content:
                start = pos + 1
                child.nodes_between(
                    max(0, from_ - start),
                    min(child.content_size, to - start),
                    f,
                    start_pos + start,
                )
            pos = end

    def descendants(self, f: Callable[["Node", int, Optional["Node"], int], Any]) -> None:
        self.nodes_between(0, self.content_size, f)

    def find_index(self, pos: int) -> Tuple[int, int]:
        """Return ``(index, offset)`` of the child at content offset *pos*.

        When *pos* falls on a child boundary the child after it is returned.
        """
        if pos == 0:
            return 0, 0
        if pos == self.content_size:
            return len(self.content), pos
        if pos < 0 or pos > self.content_size:
            raise PositionError(f"Position {pos} outside of {self.type.name}", pos)
        cur = 0
        for index, child in enumerate(self.content):
            end = cur + child.node_size
            if end >= pos:
                if end == pos:
                    return index + 1, end
                return index, cur
            cur = end
        raise PositionError(f"Position {pos} outside of {self.type.name}", pos)

    def node_at(self, pos: int) -> Optional["Node"]:
        """Return the node starting directly after *pos*, or None."""
        node: Optional[Node] = self
        while True:
            index, offset = node.find_index(pos)
            node = node.maybe_child(index)
            if node is None:
                return None
            if offset == pos or node.is_text:
                return node
            pos -= offset + 1

    def resolve(self, pos: int) -> "ResolvedPos":
        from docgrid.core.model.resolved_pos import ResolvedPos

        return ResolvedPos.resolve(self, pos)

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------
    def same_markup(self, other: "Node") -> bool:
        return (
            self.type is other.type
            and dict(self.attrs) == dict(other.attrs)
            and same_marks(self.marks, other.marks)
        )

    def eq(self, other: "Node") -> bool:
        """Structural equality (``==`` stays identity-based)."""
        if self is other:
            return True
        return (
            self.same_markup(other)
            and self.text == other.text
            and len(self.content) == len(other.content)
            and all(a.eq(b) for a, b in zip(self.content, other.content))
        )

    def content_eq(self, content: Sequence["Node"]) -> bool:
        return len(self.content) == len(content) and all(a.eq(b) for a, b in zip(self.content, content))

    # ------------------------------------------------------------------
    # Derivation
    # ------------------------------------------------------------------
    def copy(self, content: Iterable["Node"]) -> "Node":
        """Return a node with the same markup and the given content."""
        return Node(self.type, self.attrs, normalize_inline(content), self.marks, self.text)

    def with_text(self, text: str) -> "Node":
        if not self.is_text:
            raise SchemaError("with_text() called on a non-text node")
        return Node(self.type, self.attrs, (), self.marks, text)

    def mark(self, marks: Iterable["Mark"]) -> "Node":
        return Node(self.type, self.attrs, self.content, tuple(marks), self.text)

    def cut(self, from_: int = 0, to: Optional[int] = None) -> "Node":
        """Cut a text node down to ``text[from_:to]``; other nodes are returned unchanged."""
        if not self.is_text:
            return self
        text = self.text or ""
        end = len(text) if to is None else to
        if from_ == 0 and end == len(text):
            return self
        return self.with_text(text[from_:end])

    def replace_child(self, index: int, node: "Node") -> "Node":
        content = list(self.content)
        content[index] = node
        return self.copy(content)

    def replace(self, from_: int, to: int, nodes: Sequence["Node"]) -> "Node":
        """Return a new tree where content positions ``from_..to`` hold *nodes*.

        Both ends must resolve into the same parent node. Text nodes cut by
        either end are split, and adjacent text with equal marks is joined.
        Every node outside the path to the edited parent is reused.

        Raises
        ------
        ReplaceError
            If the range crosses parents or the edited parent would end up
            with content its type does not accept.
        """
        if from_ > to:
            raise ReplaceError("Replacement range is inverted", {"from": from_, "to": to})
        rfrom = self.resolve(from_)
        rto = self.resolve(to)
        depth = rfrom.depth
        if rto.depth != depth or rfrom.start(depth) != rto.start(depth):
            raise ReplaceError("Replacement range must stay within one parent", {"from": from_, "to": to})

        parent = rfrom.parent
        before = list(parent.content[:rfrom.index()])
        if rfrom.text_offset:
            before.append(parent.child(rfrom.index()).cut(0, rfrom.text_offset))
        if rto.text_offset:
            after = [parent.child(rto.index()).cut(rto.text_offset)] + list(parent.content[rto.index() + 1:])
        else:
            after = list(parent.content[rto.index():])

        new_content = normalize_inline(before + list(nodes) + after)
        if not parent.type.valid_content(new_content):
            raise ReplaceError(
                f"Invalid content for node {parent.type.name}",
                {"content": [c.type.name for c in new_content]},
            )

        updated = parent.copy(new_content)
        for d in range(depth - 1, -1, -1):
            updated = rfrom.node(d).replace_child(rfrom.index(d), updated)
        return updated

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------
    def can_replace(self, from_index: int, to_index: int, nodes: Sequence["Node"] = ()) -> bool:
        """Return True if children ``from_index..to_index`` may be replaced by *nodes*."""
        content = list(self.content[:from_index]) + list(nodes) + list(self.content[to_index:])
        return self.type.valid_content(content)

    def can_replace_with(self, from_index: int, to_index: int, node_type: "NodeType",
                         marks: Sequence["Mark"] = ()) -> bool:
        """Return True if children ``from_index..to_index`` may be replaced by one node of *node_type*."""
        types = [c.type for c in self.content[:from_index]] + [node_type] + [c.type for c in self.content[to_index:]]
        if not self.type.content_match.matches(types):
            return False
        return all(self.type.allows_mark_type(m.type) for m in marks)

    def check(self) -> None:
        """Raise :class:`SchemaError` if this node or any descendant has invalid content."""
        if not self.type.valid_content(self.content):
            raise SchemaError(
                f"Invalid content for node {self.type.name}",
                {"content": [c.type.name for c in self.content]},
            )
        for child in self.content:
            child.check()

    def __repr__(self) -> str:
        if self.is_text:
            text = repr(self.text)
            for mark in reversed(self.marks):
                text = f"{mark.type.name}({text})"
            return text
        inner = ", ".join(repr(child) for child in self.content)
        return f"{self.type.name}({inner})" if inner else self.type.name
