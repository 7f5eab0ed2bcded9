"""Table and position utilities for immutable, schema-checked documents.

Front-ends should only depend on the public API exposed here rather than
importing internal modules directly.
"""

from .core import *  # noqa: F401,F403
from .core import __all__ as _core_all
from .core.model import Node, NodeType, Rect, Schema, TableMap, schema_from_config
from .core.services import EditingService, OperationResult
from .core.state import CellSelection, NodeSelection, TextSelection, Transaction

__all__: list[str] = sorted(
    set(_core_all)
    | {
        "CellSelection",
        "EditingService",
        "Node",
        "NodeSelection",
        "NodeType",
        "OperationResult",
        "Rect",
        "Schema",
        "TableMap",
        "TextSelection",
        "Transaction",
        "schema_from_config",
    }
)
