from __future__ import annotations

"""Document model: schema, immutable nodes, resolved positions, table grids.

This package is free of selection and transaction logic so that it can be
used on its own to build and inspect documents.
"""

from .content import ContentExpression, parse_content_expression  # noqa: F401
from .node import Node  # noqa: F401
from .resolved_pos import ResolvedPos  # noqa: F401
from .schema import Attribute, Mark, MarkType, NodeType, Schema, schema_from_config  # noqa: F401
from .table_map import Rect, TableMap  # noqa: F401

__all__: list[str] = [
    "Attribute",
    "ContentExpression",
    "Mark",
    "MarkType",
    "Node",
    "NodeType",
    "Rect",
    "ResolvedPos",
    "Schema",
    "TableMap",
    "parse_content_expression",
    "schema_from_config",
]
