from __future__ import annotations

"""Schema: the set of node and mark types a document may contain.

A schema is built from a plain mapping (usually the ``default_schema.yml``
shipped in :mod:`docgrid.config`)::

    top_node: doc
    nodes:
      doc: {content: "block+"}
      paragraph: {content: "inline*", group: block}
      text: {group: inline, inline: true}
    marks:
      strong: {}

Node types keep their declaration order, which matters: when a content
expression names a group, the first declared member is the one
:meth:`NodeType.create_and_fill` generates.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from docgrid.config import ConfigManager
from docgrid.core.exceptions import SchemaError
from docgrid.core.model.content import ContentExpression, parse_content_expression
from docgrid.core.model.node import Node, normalize_inline

__all__ = [
    "Attribute",
    "Mark",
    "MarkType",
    "NodeType",
    "Schema",
    "schema_from_config",
]

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass(frozen=True)
class Attribute:
    """Declared attribute of a node or mark type."""
    name: str
    default: Any = _MISSING

    @property
    def is_required(self) -> bool:
        return self.default is _MISSING


def _init_attrs(owner: str, spec: Optional[Mapping[str, Any]]) -> Dict[str, Attribute]:
    attrs: Dict[str, Attribute] = {}
    for name, attr_spec in (spec or {}).items():
        if attr_spec is None:
            attrs[name] = Attribute(name)
        elif isinstance(attr_spec, Mapping):
            attrs[name] = Attribute(name, attr_spec.get("default", _MISSING))
        else:
            raise SchemaError(f"Attribute spec for '{owner}.{name}' must be a mapping", {"spec": attr_spec})
    return attrs


def _compute_attrs(owner: str, declared: Mapping[str, Attribute], given: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    given = dict(given or {})
    unknown = set(given) - set(declared)
    if unknown:
        raise SchemaError(f"Unsupported attributes for '{owner}'", {"attrs": sorted(unknown)})
    built: Dict[str, Any] = {}
    for name, attr in declared.items():
        if name in given:
            built[name] = given[name]
        elif attr.is_required:
            raise SchemaError(f"No value supplied for attribute '{name}' on '{owner}'")
        else:
            built[name] = attr.default
    return built


@dataclass(frozen=True)
class Mark:
    """A mark (emphasis, link...) attached to an inline node."""
    type: "MarkType"
    attrs: Mapping[str, Any] = field(default_factory=dict)

    def eq(self, other: "Mark") -> bool:
        return self is other or (self.type is other.type and dict(self.attrs) == dict(other.attrs))

    def __repr__(self) -> str:
        return f"Mark({self.type.name}{', ' + repr(dict(self.attrs)) if self.attrs else ''})"


class MarkType:
    def __init__(self, name: str, schema: "Schema", spec: Mapping[str, Any]) -> None:
        self.name = name
        self.schema = schema
        self.spec = dict(spec or {})
        self.attrs = _init_attrs(name, self.spec.get("attrs"))

    def create(self, attrs: Optional[Mapping[str, Any]] = None) -> Mark:
        return Mark(self, _compute_attrs(self.name, self.attrs, attrs))

    def __repr__(self) -> str:
        return f"<MarkType {self.name}>"


class NodeType:
    """A node type: its name, groups, attributes and content expression.

    ``table_role`` (``table``, ``row``, ``cell`` or ``header_cell``) marks
    the types the table utilities operate on.
    """

    def __init__(self, name: str, schema: "Schema", spec: Mapping[str, Any]) -> None:
        self.name = name
        self.schema = schema
        self.spec = dict(spec or {})
        self.groups: Tuple[str, ...] = tuple((self.spec.get("group") or "").split())
        self.attrs = _init_attrs(name, self.spec.get("attrs"))
        self.is_text = name == "text"
        self.is_inline = bool(self.spec.get("inline")) or self.is_text
        self.is_block = not self.is_inline and name != schema.top_node_name
        # Set once every type of the schema exists
        self.content_match: ContentExpression = ContentExpression("", None, ())  # type: ignore[arg-type]
        self.mark_set: Optional[Tuple[MarkType, ...]] = None

    # ------------------------------------------------------------------
    # Descriptive properties
    # ------------------------------------------------------------------
    @property
    def table_role(self) -> Optional[str]:
        return self.spec.get("table_role")

    @property
    def is_leaf(self) -> bool:
        return self.content_match.is_empty

    @property
    def is_atom(self) -> bool:
        return self.is_leaf or bool(self.spec.get("atom"))

    @property
    def is_textblock(self) -> bool:
        return self.is_block and self.inline_content

    @property
    def inline_content(self) -> bool:
        return self.content_match.inline_content

    def has_required_attrs(self) -> bool:
        return any(attr.is_required for attr in self.attrs.values())

    def compute_attrs(self, attrs: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """Return *attrs* completed with declared defaults.

        Raises
        ------
        SchemaError
            For undeclared attributes or a missing required one.
        """
        return _compute_attrs(self.name, self.attrs, attrs)

    def allows_mark_type(self, mark_type: MarkType) -> bool:
        return self.mark_set is None or mark_type in self.mark_set

    # ------------------------------------------------------------------
    # Content checks
    # ------------------------------------------------------------------
    def valid_content(self, content: Sequence[Node]) -> bool:
        """Return True if *content* satisfies this type's content expression and mark rules."""
        if not self.content_match.matches([child.type for child in content]):
            return False
        return all(self.allows_mark_type(mark.type) for child in content for mark in child.marks)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    def create(
        self,
        attrs: Optional[Mapping[str, Any]] = None,
        content: Optional[Iterable[Node]] = None,
        marks: Optional[Iterable[Mark]] = None,
    ) -> Node:
        """Create a node of this type without checking its content."""
        if self.is_text:
            raise SchemaError("Use Schema.text() to create text nodes")
        return Node(self, self.compute_attrs(attrs), normalize_inline(content or ()), tuple(marks or ()))

    def create_checked(
        self,
        attrs: Optional[Mapping[str, Any]] = None,
        content: Optional[Iterable[Node]] = None,
        marks: Optional[Iterable[Mark]] = None,
    ) -> Node:
        """Like :meth:`create` but raise :class:`SchemaError` on invalid content."""
        node = self.create(attrs, content, marks)
        if not self.valid_content(node.content):
            raise SchemaError(f"Invalid content for node {self.name}", {"content": [c.type.name for c in node.content]})
        return node

    def create_and_fill(
        self,
        attrs: Optional[Mapping[str, Any]] = None,
        content: Optional[Iterable[Node]] = None,
        marks: Optional[Iterable[Mark]] = None,
    ) -> Optional[Node]:
        """Create a node whose content is the minimal valid content of this type.

        When *content* is given it is used as-is and ``None`` is returned if
        it does not fit. Otherwise the shortest type sequence accepted by the
        content expression is generated, each child filled recursively.
        Returns ``None`` when no such sequence exists (for instance when the
        only option needs a required attribute).
        """
        if content is not None:
            node = self.create(attrs, content, marks)
            return node if self.valid_content(node.content) else None
        types = self.content_match.fill()
        if types is None:
            return None
        children: List[Node] = []
        for child_type in types:
            child = child_type.create_and_fill()
            if child is None:
                return None
            children.append(child)
        return self.create(attrs, children, marks)

    def __repr__(self) -> str:
        return f"<NodeType {self.name}>"


class Schema:
    """Node and mark types of a document, built from a mapping spec."""

    def __init__(self, spec: Mapping[str, Any]) -> None:
        if not isinstance(spec, Mapping) or not spec.get("nodes"):
            raise SchemaError("Schema spec needs a non-empty 'nodes' mapping")
        self.spec = spec
        self.top_node_name: str = spec.get("top_node") or "doc"

        self.nodes: Dict[str, NodeType] = {}
        for name, node_spec in spec["nodes"].items():
            self.nodes[name] = NodeType(name, self, node_spec or {})
        if self.top_node_name not in self.nodes:
            raise SchemaError(f"Schema is missing its top node type '{self.top_node_name}'")

        self.marks: Dict[str, MarkType] = {
            name: MarkType(name, self, mark_spec or {}) for name, mark_spec in (spec.get("marks") or {}).items()
        }

        for node_type in self.nodes.values():
            node_type.content_match = parse_content_expression(node_type.spec.get("content", ""), self.nodes)
            allowed = node_type.spec.get("marks")
            if allowed is not None:
                node_type.mark_set = self._parse_mark_set(allowed)
            elif not node_type.inline_content:
                node_type.mark_set = ()

        logger.debug("Schema built: nodes=%d marks=%d", len(self.nodes), len(self.marks))

    def _parse_mark_set(self, allowed: str) -> Optional[Tuple[MarkType, ...]]:
        if allowed == "_":
            return None
        found = []
        for name in allowed.split():
            if name not in self.marks:
                raise SchemaError(f"Unknown mark type '{name}'")
            found.append(self.marks[name])
        return tuple(found)

    @property
    def top_node_type(self) -> NodeType:
        return self.nodes[self.top_node_name]

    def node_type(self, name: str) -> NodeType:
        try:
            return self.nodes[name]
        except KeyError:
            raise SchemaError(f"Unknown node type '{name}'") from None

    def node(
        self,
        type_: "str | NodeType",
        attrs: Optional[Mapping[str, Any]] = None,
        content: Optional[Iterable[Node]] = None,
        marks: Optional[Iterable[Mark]] = None,
    ) -> Node:
        node_type = self.node_type(type_) if isinstance(type_, str) else type_
        if node_type.schema is not self:
            raise SchemaError(f"Node type from different schema used ({node_type.name})")
        return node_type.create_checked(attrs, content, marks)

    def text(self, text: str, marks: Optional[Iterable[Mark]] = None) -> Node:
        if not text:
            raise SchemaError("Empty text nodes are not allowed")
        return Node(self.node_type("text"), {}, (), tuple(marks or ()), text)

    def mark(self, name: "str | MarkType", attrs: Optional[Mapping[str, Any]] = None) -> Mark:
        if isinstance(name, MarkType):
            return name.create(attrs)
        if name not in self.marks:
            raise SchemaError(f"Unknown mark type '{name}'")
        return self.marks[name].create(attrs)


def schema_from_config(config_manager: Optional[Any] = None) -> Schema:
    """Build the schema described by the ``default_schema`` config section."""
    manager = config_manager or ConfigManager()
    spec = manager.get_schema_config()
    if not spec:
        raise SchemaError("No schema configuration available")
    return Schema(spec)
