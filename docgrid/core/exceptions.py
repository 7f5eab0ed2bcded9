from __future__ import annotations

"""Exception classes raised by the document model collaborators.

Expected "nothing to do" outcomes (no enclosing table, index out of range,
wrong selection variant, schema refusing an edit) never raise; they return
``None``, ``False`` or the untouched transaction. The classes below signal
programming errors: malformed schemas, positions outside the document,
replacements that would break a node's content expression.
"""

from typing import Any, Dict, Optional


__all__ = [
    "DocGridError",
    "SchemaError",
    "PositionError",
    "ReplaceError",
    "SelectionError",
]


class DocGridError(Exception):
    """Base exception for all document model errors.

    Carries an optional ``context`` mapping with the values that triggered
    the failure so log records stay useful without re-deriving them.
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.context = dict(context or {})

    def __str__(self) -> str:
        if self.context:
            details = ", ".join(f"{k}={v!r}" for k, v in sorted(self.context.items()))
            return f"{super().__str__()} ({details})"
        return super().__str__()


class SchemaError(DocGridError):
    """Raised when a schema definition or content expression is invalid.

    This includes unknown node or mark names, malformed content
    expressions, and attribute values the node type does not declare.
    """
    pass


class PositionError(DocGridError):
    """Raised when a position falls outside the document or a depth query is meaningless."""

    def __init__(self, message: str, pos: Optional[int] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        merged = dict(context or {})
        if pos is not None:
            merged.setdefault("pos", pos)
        super().__init__(message, merged)
        self.pos = pos


class ReplaceError(DocGridError):
    """Raised when a replacement would cross parents or produce invalid content."""
    pass


class SelectionError(DocGridError):
    """Raised when a selection is built over positions that cannot hold it."""
    pass
