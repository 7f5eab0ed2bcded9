from __future__ import annotations

"""Content expressions: the nesting rules attached to every node type.

An expression such as ``"block+"`` or ``"(table_cell | table_header)*"`` is
parsed once into a small tree, which is then used two ways:

- compiled to a regular expression over space-terminated type names, so
  checking a child sequence is a single ``fullmatch``;
- walked to find the shortest sequence of types that satisfies it, which is
  what :meth:`NodeType.create_and_fill` builds.

Supported syntax: names (node types or groups), sequences, ``|`` choices,
parentheses, and the ``*``, ``+``, ``?``, ``{n}``, ``{n,}``, ``{n,m}``
quantifiers.
"""

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, List, Mapping, Optional, Sequence, Tuple

from docgrid.core.exceptions import SchemaError

if TYPE_CHECKING:
    from docgrid.core.model.schema import NodeType

__all__ = ["ContentExpression", "parse_content_expression"]


_TOKEN_RE = re.compile(r"\w+|\S")


# Expression tree nodes are plain tuples:
#   ("name", (NodeType, ...))
#   ("seq", (expr, ...))
#   ("choice", (expr, ...))
#   ("repeat", expr, min, max)    max is None for unbounded
_Expr = tuple


class _TokenStream:
    def __init__(self, source: str, types: Mapping[str, "NodeType"]) -> None:
        self.source = source
        self.types = types
        self.tokens = _TOKEN_RE.findall(source)
        self.pos = 0

    @property
    def next(self) -> Optional[str]:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def eat(self, token: str) -> bool:
        if self.next == token:
            self.pos += 1
            return True
        return False

    def error(self, message: str) -> SchemaError:
        return SchemaError(message, {"expression": self.source})


def _parse_choice(stream: _TokenStream) -> _Expr:
    exprs = [_parse_seq(stream)]
    while stream.eat("|"):
        exprs.append(_parse_seq(stream))
    return exprs[0] if len(exprs) == 1 else ("choice", tuple(exprs))


def _parse_seq(stream: _TokenStream) -> _Expr:
    exprs = []
    while stream.next is not None and stream.next not in (")", "|"):
        exprs.append(_parse_subscript(stream))
    if not exprs:
        raise stream.error("Empty sequence in content expression")
    return exprs[0] if len(exprs) == 1 else ("seq", tuple(exprs))


def _parse_subscript(stream: _TokenStream) -> _Expr:
    expr = _parse_atom(stream)
    while True:
        if stream.eat("+"):
            expr = ("repeat", expr, 1, None)
        elif stream.eat("*"):
            expr = ("repeat", expr, 0, None)
        elif stream.eat("?"):
            expr = ("repeat", expr, 0, 1)
        elif stream.eat("{"):
            expr = _parse_range(stream, expr)
        else:
            return expr


def _parse_number(stream: _TokenStream) -> int:
    token = stream.next
    if token is None or not token.isdigit():
        raise stream.error(f"Expected number, got {token!r}")
    stream.pos += 1
    return int(token)


def _parse_range(stream: _TokenStream, expr: _Expr) -> _Expr:
    low = _parse_number(stream)
    high: Optional[int] = low
    if stream.eat(","):
        high = _parse_number(stream) if stream.next != "}" else None
    if not stream.eat("}"):
        raise stream.error("Unclosed braced range")
    if high is not None and high < low:
        raise stream.error(f"Invalid range {{{low},{high}}}")
    return ("repeat", expr, low, high)


def _resolve_name(stream: _TokenStream, name: str) -> Tuple["NodeType", ...]:
    node_type = stream.types.get(name)
    if node_type is not None:
        return (node_type,)
    members = tuple(t for t in stream.types.values() if name in t.groups)
    if not members:
        raise stream.error(f"No node type or group '{name}' found")
    return members


def _parse_atom(stream: _TokenStream) -> _Expr:
    if stream.eat("("):
        expr = _parse_choice(stream)
        if not stream.eat(")"):
            raise stream.error("Missing closing paren")
        return expr
    token = stream.next
    if token is None or not re.fullmatch(r"\w+", token):
        raise stream.error(f"Unexpected token {token!r}")
    stream.pos += 1
    return ("name", _resolve_name(stream, token))


def _to_regex(expr: _Expr) -> str:
    kind = expr[0]
    if kind == "name":
        return "(?:" + "|".join(re.escape(t.name) + " " for t in expr[1]) + ")"
    if kind == "seq":
        return "".join(_to_regex(e) for e in expr[1])
    if kind == "choice":
        return "(?:" + "|".join(_to_regex(e) for e in expr[1]) + ")"
    _, inner, low, high = expr
    if (low, high) == (0, None):
        quant = "*"
    elif (low, high) == (1, None):
        quant = "+"
    elif (low, high) == (0, 1):
        quant = "?"
    elif high is None:
        quant = f"{{{low},}}"
    else:
        quant = f"{{{low},{high}}}"
    return f"(?:{_to_regex(inner)}){quant}"


def _fill(expr: _Expr) -> Optional[List["NodeType"]]:
    """Shortest list of generatable types satisfying *expr*, or None."""
    kind = expr[0]
    if kind == "name":
        for node_type in expr[1]:
            if not node_type.is_text and not node_type.has_required_attrs():
                return [node_type]
        return None
    if kind == "seq":
        result: List["NodeType"] = []
        for sub in expr[1]:
            part = _fill(sub)
            if part is None:
                return None
            result.extend(part)
        return result
    if kind == "choice":
        best: Optional[List["NodeType"]] = None
        for sub in expr[1]:
            part = _fill(sub)
            if part is not None and (best is None or len(part) < len(best)):
                best = part
        return best
    _, inner, low, _high = expr
    if low == 0:
        return []
    part = _fill(inner)
    return None if part is None else part * low


def _referenced(expr: _Expr) -> Iterable["NodeType"]:
    if expr[0] == "name":
        yield from expr[1]
    elif expr[0] in ("seq", "choice"):
        for sub in expr[1]:
            yield from _referenced(sub)
    else:
        yield from _referenced(expr[1])


@dataclass(frozen=True)
class ContentExpression:
    """Compiled content expression of one node type."""

    source: str
    pattern: "re.Pattern[str]"
    referenced: Tuple["NodeType", ...]
    _tree: Optional[_Expr] = None

    @property
    def is_empty(self) -> bool:
        """True for leaf types, whose expression admits no children."""
        return self._tree is None

    @property
    def inline_content(self) -> bool:
        return any(t.is_inline for t in self.referenced)

    def matches(self, types: Sequence["NodeType"]) -> bool:
        """Return True if a child sequence of *types* satisfies the expression."""
        return self.pattern.fullmatch("".join(t.name + " " for t in types)) is not None

    def fill(self) -> Optional[List["NodeType"]]:
        """Return the shortest generatable type sequence, or None if there is none."""
        if self._tree is None:
            return []
        return _fill(self._tree)


def parse_content_expression(source: str, types: Mapping[str, "NodeType"]) -> ContentExpression:
    """Parse *source* against the node types of a schema.

    Raises
    ------
    SchemaError
        If the expression is malformed or names an unknown type or group.
    """
    stream = _TokenStream(source or "", types)
    if not stream.tokens:
        return ContentExpression(source or "", re.compile(""), ())
    tree = _parse_choice(stream)
    if stream.next is not None:
        raise stream.error(f"Unexpected trailing token {stream.next!r}")
    referenced = tuple(dict.fromkeys(_referenced(tree)))
    return ContentExpression(source, re.compile(_to_regex(tree)), referenced, tree)
