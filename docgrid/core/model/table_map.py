from __future__ import annotations

"""Row/column grid of a table node, with row and column spans resolved.

The grid is a row-major tuple of cell offsets, one slot per (row, column)
coordinate. Offsets are relative to the start of the table's content, so the
absolute position of a cell is ``table_start + offset``. A cell spanning
several rows or columns fills every slot it covers with the same offset.

Maps are derived data: they are computed on demand and cached per table node
object, which is safe because nodes are immutable.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, FrozenSet, List, Optional, Tuple
from weakref import WeakKeyDictionary

from docgrid.core.exceptions import PositionError

if TYPE_CHECKING:
    from docgrid.core.model.node import Node

__all__ = ["Rect", "TableMap"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Rect:
    """Half-open rectangle of grid coordinates: columns ``left..right``, rows ``top..bottom``."""
    left: int
    top: int
    right: int
    bottom: int

    def coordinates(self) -> FrozenSet[Tuple[int, int]]:
        """Return the set of ``(row, column)`` pairs inside the rectangle."""
        return frozenset(
            (row, col) for row in range(self.top, self.bottom) for col in range(self.left, self.right)
        )


def _span(cell: "Node", name: str) -> int:
    try:
        return max(1, int(cell.attrs.get(name) or 1))
    except (TypeError, ValueError):
        return 1


class TableMap:
    """Grid of a table node.

    Attributes
    ----------
    width
        Number of columns once spans are resolved.
    height
        Number of rows.
    map
        Row-major cell offsets, ``width * height`` long. A slot is ``None``
        only for malformed (ragged) tables; such tables are listed in
        ``problems``.
    problems
        Human-readable descriptions of structural inconsistencies found while
        building the grid (collisions, overlong rowspans, missing slots).
    """

    _cache: "WeakKeyDictionary[Node, TableMap]" = WeakKeyDictionary()

    def __init__(self, width: int, height: int, map: Tuple[Optional[int], ...],
                 problems: Tuple[str, ...] = ()) -> None:
        self.width = width
        self.height = height
        self.map = map
        self.problems = problems

    @classmethod
    def get(cls, table: "Node") -> "TableMap":
        """Return the (cached) map of *table*."""
        found = cls._cache.get(table)
        if found is None:
            found = cls.compute(table)
            cls._cache[table] = found
        return found

    @classmethod
    def compute(cls, table: "Node") -> "TableMap":
        height = table.child_count
        grid: List[List[Optional[int]]] = [[] for _ in range(height)]
        problems: List[str] = []

        pos = 0
        for row_index, row in enumerate(table.content):
            pos += 1
            col = 0
            for cell in row.content:
                slots = grid[row_index]
                while col < len(slots) and slots[col] is not None:
                    col += 1
                colspan = _span(cell, "colspan")
                rowspan = _span(cell, "rowspan")
                for r in range(row_index, row_index + rowspan):
                    if r >= height:
                        problems.append(f"overlong rowspan at offset {pos}")
                        break
                    target = grid[r]
                    if len(target) < col + colspan:
                        target.extend([None] * (col + colspan - len(target)))
                    for c in range(col, col + colspan):
                        if target[c] is None:
                            target[c] = pos
                        else:
                            problems.append(f"collision at row {r} column {c}")
                col += colspan
                pos += cell.node_size
            pos += 1

        width = max((len(slots) for slots in grid), default=0)
        for row_index, slots in enumerate(grid):
            if len(slots) < width:
                problems.append(f"row {row_index} is missing {width - len(slots)} cell(s)")
                slots.extend([None] * (width - len(slots)))

        if problems:
            logger.debug("TableMap problems: %s", "; ".join(problems))
        return cls(width, height, tuple(offset for slots in grid for offset in slots), tuple(problems))

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def position_at(self, row: int, col: int) -> Optional[int]:
        """Offset of the cell covering ``(row, col)``."""
        if not (0 <= row < self.height and 0 <= col < self.width):
            raise PositionError("Grid coordinate out of range", context={"row": row, "col": col})
        return self.map[row * self.width + col]

    def find_cell(self, offset: int) -> Rect:
        """Return the rectangle covered by the cell at *offset*."""
        indices = [i for i, value in enumerate(self.map) if value == offset]
        if not indices:
            raise PositionError(f"No cell with offset {offset} found", context={"offset": offset})
        rows = [i // self.width for i in indices]
        cols = [i % self.width for i in indices]
        return Rect(min(cols), min(rows), max(cols) + 1, max(rows) + 1)

    def rect_between(self, a: int, b: int) -> Rect:
        """Smallest rectangle containing both cells *a* and *b* that cuts through no cell."""
        ra, rb = self.find_cell(a), self.find_cell(b)
        return self.expand_rect(Rect(
            min(ra.left, rb.left),
            min(ra.top, rb.top),
            max(ra.right, rb.right),
            max(ra.bottom, rb.bottom),
        ))

    def expand_rect(self, rect: Rect) -> Rect:
        """Grow *rect* until every cell it touches lies entirely inside it."""
        left, top, right, bottom = rect.left, rect.top, rect.right, rect.bottom
        grown = True
        while grown:
            grown = False
            for offset in self.cells_in_rect(Rect(left, top, right, bottom)):
                cell = self.find_cell(offset)
                if cell.left < left or cell.top < top or cell.right > right or cell.bottom > bottom:
                    left, top = min(left, cell.left), min(top, cell.top)
                    right, bottom = max(right, cell.right), max(bottom, cell.bottom)
                    grown = True
        return Rect(left, top, right, bottom)

    def cells_in_rect(self, rect: Rect) -> List[int]:
        """Distinct cell offsets covering *rect*, first occurrence in row-major order."""
        seen = set()
        result = []
        for row in range(rect.top, rect.bottom):
            for col in range(rect.left, rect.right):
                offset = self.map[row * self.width + col]
                if offset is None or offset in seen:
                    continue
                seen.add(offset)
                result.append(offset)
        return result

    def column_rect(self, col: int) -> Rect:
        return Rect(col, 0, col + 1, self.height)

    def row_rect(self, row: int) -> Rect:
        return Rect(0, row, self.width, row + 1)

    def table_rect(self) -> Rect:
        return Rect(0, 0, self.width, self.height)

    def __repr__(self) -> str:
        return f"<TableMap {self.width}x{self.height}>"
