from __future__ import annotations

"""Immutable, chainable transactions.

A :class:`Transaction` holds a candidate document and selection together with
the document it started from and the mapping of every edit applied so far.
Each method returns a *new* transaction describing one more edit; the
receiver is never modified. Callers that need to know whether anything
happened compare the returned object with the one they passed in.

Edits are flat: both ends of a replaced range must sit in the same parent
node. Document changes map the current selection through the edit, unless
the caller sets a selection explicitly afterwards.
"""

import logging
from typing import Any, Dict, Iterable, Mapping as MappingType, Optional, Sequence, Tuple, Union

from docgrid.core.exceptions import ReplaceError
from docgrid.core.model.node import Node
from docgrid.core.model.schema import Mark, NodeType
from docgrid.core.state.mapping import Mapping, StepMap
from docgrid.core.state.selection import Selection, TextSelection

__all__ = ["Transaction"]

logger = logging.getLogger(__name__)

Content = Union[Node, Sequence[Node]]


def _as_nodes(content: Optional[Content]) -> Tuple[Node, ...]:
    if content is None:
        return ()
    if isinstance(content, Node):
        return (content,)
    return tuple(content)


class Transaction:
    """A candidate next state: document, selection, and the edits leading to it.

    Parameters
    ----------
    before
        The document the transaction started from.
    doc
        The current candidate document.
    selection
        The current candidate selection (always resolved against ``doc``).
    mapping
        Position mapping from ``before`` to ``doc``.
    selection_set
        Whether the selection was set explicitly since the last edit.
    meta
        Free-form metadata attached by callers.
    """

    __slots__ = ("before", "doc", "selection", "mapping", "selection_set", "_meta")

    def __init__(
        self,
        before: Node,
        doc: Node,
        selection: Selection,
        mapping: Optional[Mapping] = None,
        selection_set: bool = False,
        meta: Optional[MappingType[str, Any]] = None,
    ) -> None:
        self.before = before
        self.doc = doc
        self.selection = selection
        self.mapping = mapping or Mapping()
        self.selection_set = selection_set
        self._meta: Dict[str, Any] = dict(meta or {})

    @classmethod
    def create(cls, doc: Node, selection: Optional[Selection] = None) -> "Transaction":
        """Start a transaction on *doc*; the selection defaults to the first text position."""
        return cls(doc, doc, selection if selection is not None else TextSelection.at_start(doc))

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------
    @property
    def doc_changed(self) -> bool:
        return len(self.mapping) > 0

    @property
    def steps(self) -> Tuple[StepMap, ...]:
        return self.mapping.maps

    def get_meta(self, key: str, default: Any = None) -> Any:
        return self._meta.get(key, default)

    # ------------------------------------------------------------------
    # Derivation
    # ------------------------------------------------------------------
    def _derive(self, **changes: Any) -> "Transaction":
        values = {
            "before": self.before,
            "doc": self.doc,
            "selection": self.selection,
            "mapping": self.mapping,
            "selection_set": self.selection_set,
            "meta": self._meta,
        }
        values.update(changes)
        return Transaction(**values)

    def _step(self, doc: Node, step_map: StepMap) -> "Transaction":
        mapping = self.mapping.appended(step_map)
        selection = self.selection.map(doc, Mapping((step_map,)))
        return self._derive(doc=doc, mapping=mapping, selection=selection, selection_set=False)

    def replace_with(self, from_: int, to: int, content: Optional[Content] = None) -> "Transaction":
        """Replace positions ``from_..to`` with *content* (a node or a sequence of nodes).

        Raises
        ------
        ReplaceError
            If the range crosses parents or the parent would get invalid content.
        PositionError
            If either end lies outside the document.
        """
        nodes = _as_nodes(content)
        doc = self.doc.replace(from_, to, nodes)
        new_size = sum(node.node_size for node in nodes)
        logger.debug("Step: replace from=%d to=%d nodes=%d", from_, to, len(nodes))
        return self._step(doc, StepMap(from_, to - from_, new_size))

    def delete(self, from_: int, to: int) -> "Transaction":
        return self.replace_with(from_, to, None)

    def insert(self, pos: int, content: Content) -> "Transaction":
        return self.replace_with(pos, pos, content)

    def set_node_markup(
        self,
        pos: int,
        node_type: Optional[NodeType] = None,
        attrs: Optional[MappingType[str, Any]] = None,
        marks: Optional[Iterable[Mark]] = None,
    ) -> "Transaction":
        """Change the type, attributes and/or marks of the node at *pos*, keeping its content.

        ``None`` keeps the current type/marks; *attrs* replaces the attribute
        set (completed with the new type's defaults).
        """
        node = self.doc.node_at(pos)
        if node is None:
            raise ReplaceError("No node at given position", {"pos": pos})
        new_type = node_type or node.type
        if node.is_text or new_type.is_text:
            raise ReplaceError("Cannot change markup of a text node", {"pos": pos})
        if not new_type.valid_content(node.content):
            raise ReplaceError(
                f"Invalid content for node type {new_type.name}",
                {"pos": pos, "content": [c.type.name for c in node.content]},
            )
        new_node = new_type.create(attrs, node.content, node.marks if marks is None else marks)
        doc = self.doc.replace(pos, pos + node.node_size, (new_node,))
        step_map = (
            StepMap(pos, 0, 0)
            if new_node.node_size == node.node_size
            else StepMap(pos, node.node_size, new_node.node_size)
        )
        logger.debug("Step: set_node_markup pos=%d type=%s", pos, new_type.name)
        return self._step(doc, step_map)

    def set_selection(self, selection: Selection) -> "Transaction":
        """Return a transaction with *selection*, which must be resolved against ``doc``."""
        return self._derive(selection=selection, selection_set=True)

    def set_meta(self, key: str, value: Any) -> "Transaction":
        meta = dict(self._meta)
        meta[key] = value
        return self._derive(meta=meta)

    def __repr__(self) -> str:
        return f"<Transaction steps={len(self.mapping)} selection={self.selection!r}>"
