from __future__ import annotations

"""Position mapping through document changes.

Every replacement a transaction performs is recorded as a :class:`StepMap`
("at *start*, *old_size* positions became *new_size* positions"). A
:class:`Mapping` chains them so a position captured before a series of edits
can be carried over to the current document.
"""

from dataclasses import dataclass
from typing import Iterable, NamedTuple, Tuple

__all__ = ["MapResult", "Mapping", "StepMap"]


class MapResult(NamedTuple):
    pos: int
    deleted: bool


@dataclass(frozen=True)
class StepMap:
    start: int
    old_size: int
    new_size: int

    def map_result(self, pos: int, assoc: int = 1) -> MapResult:
        """Map *pos*; *assoc* picks the side a position at the edit boundary sticks to."""
        if pos < self.start:
            return MapResult(pos, False)
        end = self.start + self.old_size
        if pos <= end:
            if not self.old_size:
                side = assoc
            elif pos == self.start:
                side = -1
            elif pos == end:
                side = 1
            else:
                side = assoc
            mapped = self.start + (0 if side < 0 else self.new_size)
            deleted = pos != (self.start if assoc < 0 else end)
            return MapResult(mapped, deleted)
        return MapResult(pos + self.new_size - self.old_size, False)

    def map(self, pos: int, assoc: int = 1) -> int:
        return self.map_result(pos, assoc).pos


class Mapping:
    """Immutable sequence of step maps."""

    def __init__(self, maps: Iterable[StepMap] = ()) -> None:
        self.maps: Tuple[StepMap, ...] = tuple(maps)

    def appended(self, step_map: StepMap) -> "Mapping":
        return Mapping(self.maps + (step_map,))

    def slice(self, start: int = 0) -> "Mapping":
        return Mapping(self.maps[start:])

    def map_result(self, pos: int, assoc: int = 1) -> MapResult:
        deleted = False
        for step_map in self.maps:
            pos, was_deleted = step_map.map_result(pos, assoc)
            deleted = deleted or was_deleted
        return MapResult(pos, deleted)

    def map(self, pos: int, assoc: int = 1) -> int:
        return self.map_result(pos, assoc).pos

    def __len__(self) -> int:
        return len(self.maps)
