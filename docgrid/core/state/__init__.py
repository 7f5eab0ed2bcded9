from __future__ import annotations

"""Editing state values: position mapping, selections, transactions."""

from .mapping import MapResult, Mapping, StepMap  # noqa: F401
from .selection import CellSelection, NodeSelection, Selection, TextSelection  # noqa: F401
from .transaction import Transaction  # noqa: F401

__all__: list[str] = [
    "CellSelection",
    "MapResult",
    "Mapping",
    "NodeSelection",
    "Selection",
    "StepMap",
    "TextSelection",
    "Transaction",
]
