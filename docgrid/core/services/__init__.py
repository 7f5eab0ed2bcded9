from __future__ import annotations

"""Service layer wrapping the primitives with explicit outcomes."""

from .editing_service import EditingService, OperationResult  # noqa: F401

__all__: list[str] = [
    "EditingService",
    "OperationResult",
]
