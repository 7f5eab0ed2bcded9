from __future__ import annotations

"""Table queries, rectangular cell selections and the cell-emptying edit.

Every function here is curried the same way: configuration first (an
index, a schema), then the selection or transaction. Queries return ``None``
or ``False`` when there is nothing to answer; builders return the very
transaction they were given when they cannot act.

Cell positions always refer to the position directly before the cell node,
which is also what a :class:`CellSelection` is anchored on.
"""

import logging
from typing import Callable, List, Optional

from docgrid.core.helpers import ContentNodeWithPos, NodeWithPos, find_parent_node
from docgrid.core.model.schema import Schema
from docgrid.core.model.table_map import Rect, TableMap
from docgrid.core.state.selection import CellSelection, Selection
from docgrid.core.state.transaction import Transaction

__all__ = [
    "empty_selected_cells",
    "find_table",
    "get_cells_in_column",
    "get_cells_in_row",
    "get_cells_in_table",
    "get_selection_rect",
    "is_cell_selection",
    "is_column_selected",
    "is_row_selected",
    "is_table_selected",
    "select_column",
    "select_row",
    "select_table",
]

logger = logging.getLogger(__name__)

RectOf = Callable[[TableMap], Rect]


# ---------------------------------------------------------------------------
# Locating
# ---------------------------------------------------------------------------

def find_table(selection: Selection) -> Optional[ContentNodeWithPos]:
    """Return the innermost table around the selection's start, or None."""
    return find_parent_node(lambda node: node.type.table_role == "table")(selection)


def is_cell_selection(selection: Selection) -> bool:
    return selection.kind == "cell"


def get_selection_rect(selection: Selection) -> Optional[Rect]:
    """Grid rectangle of a cell selection; None for other selections."""
    if not is_cell_selection(selection):
        return None
    return selection.rect()


# ---------------------------------------------------------------------------
# Cell extraction
# ---------------------------------------------------------------------------

def _cells(table: ContentNodeWithPos, table_map: TableMap, rect: Rect) -> List[NodeWithPos]:
    cells = [
        NodeWithPos(table.node.node_at(offset), table.start + offset)
        for offset in table_map.cells_in_rect(rect)
    ]
    cells.sort(key=lambda cell: cell.pos)
    return cells


def get_cells_in_column(column_index: int) -> Callable[[Selection], Optional[List[NodeWithPos]]]:
    """Cells covering column *column_index* of the surrounding table, by ascending position.

    A cell spanning several rows is returned once. Returns None outside a
    table or for a column index the table does not have.
    """
    def query(selection: Selection) -> Optional[List[NodeWithPos]]:
        table = find_table(selection)
        if table is None:
            return None
        table_map = TableMap.get(table.node)
        if not 0 <= column_index < table_map.width:
            return None
        return _cells(table, table_map, table_map.column_rect(column_index))
    return query


def get_cells_in_row(row_index: int) -> Callable[[Selection], Optional[List[NodeWithPos]]]:
    """Cells covering row *row_index*; see :func:`get_cells_in_column`."""
    def query(selection: Selection) -> Optional[List[NodeWithPos]]:
        table = find_table(selection)
        if table is None:
            return None
        table_map = TableMap.get(table.node)
        if not 0 <= row_index < table_map.height:
            return None
        return _cells(table, table_map, table_map.row_rect(row_index))
    return query


def get_cells_in_table(selection: Selection) -> Optional[List[NodeWithPos]]:
    table = find_table(selection)
    if table is None:
        return None
    table_map = TableMap.get(table.node)
    return _cells(table, table_map, table_map.table_rect())


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------

def _is_rect_selected(selection: Selection, rect_of: RectOf, index: Optional[int] = None,
                      limit_of: Optional[Callable[[TableMap], int]] = None) -> bool:
    if not is_cell_selection(selection):
        return False
    table_map = selection.table_map()
    if index is not None and limit_of is not None and not 0 <= index < limit_of(table_map):
        return False
    return selection.rect().coordinates() == table_map.expand_rect(rect_of(table_map)).coordinates()


def is_column_selected(column_index: int) -> Callable[[Selection], bool]:
    """True if a cell selection covers exactly column *column_index*, nothing more or less."""
    def check(selection: Selection) -> bool:
        return _is_rect_selected(
            selection, lambda m: m.column_rect(column_index), column_index, lambda m: m.width
        )
    return check


def is_row_selected(row_index: int) -> Callable[[Selection], bool]:
    def check(selection: Selection) -> bool:
        return _is_rect_selected(selection, lambda m: m.row_rect(row_index), row_index, lambda m: m.height)
    return check


def is_table_selected(selection: Selection) -> bool:
    return _is_rect_selected(selection, lambda m: m.table_rect())


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def _select(tr: Transaction, label: str, rect_of: RectOf, index: Optional[int] = None,
            limit_of: Optional[Callable[[TableMap], int]] = None) -> Transaction:
    logger.debug("Edit: %s", label)
    table = find_table(tr.selection)
    if table is None:
        logger.debug("Edit noop: %s outside of a table", label)
        return tr
    table_map = TableMap.get(table.node)
    if index is not None and limit_of is not None and not 0 <= index < limit_of(table_map):
        logger.debug("Edit noop: %s out of range (table is %dx%d)", label, table_map.width, table_map.height)
        return tr

    rect = table_map.expand_rect(rect_of(table_map))
    if not rect.coordinates():
        logger.debug("Edit noop: %s on a table without cells", label)
        return tr
    first = table_map.position_at(rect.top, rect.left)
    last = table_map.position_at(rect.bottom - 1, rect.right - 1)
    if first is None or last is None:
        logger.debug("Edit noop: %s hits a missing cell (problems=%s)", label, table_map.problems)
        return tr

    selection = CellSelection.create(tr.doc, table.start + first, table.start + last)
    logger.debug("Edit OK: %s anchor=%d head=%d", label, selection.anchor, selection.head)
    return tr.set_selection(selection)


def select_column(column_index: int) -> Callable[[Transaction], Transaction]:
    """Select every cell of column *column_index* as a cell selection."""
    def apply(tr: Transaction) -> Transaction:
        return _select(
            tr, f"select_column {column_index}", lambda m: m.column_rect(column_index),
            column_index, lambda m: m.width,
        )
    return apply


def select_row(row_index: int) -> Callable[[Transaction], Transaction]:
    def apply(tr: Transaction) -> Transaction:
        return _select(
            tr, f"select_row {row_index}", lambda m: m.row_rect(row_index), row_index, lambda m: m.height
        )
    return apply


def select_table(tr: Transaction) -> Transaction:
    return _select(tr, "select_table", lambda m: m.table_rect())


# ---------------------------------------------------------------------------
# Content edits
# ---------------------------------------------------------------------------

def empty_selected_cells(schema: Schema) -> Callable[[Transaction], Transaction]:
    """Reset the content of every selected cell to the minimal content of its type.

    Cells keep their type and attributes. Positions are taken from the
    selection before the first edit and cells are rewritten from the last
    to the first, so an edit never shifts a cell still waiting its turn.
    Cells that already hold the minimal content are skipped; when every cell
    does, the given transaction is returned unchanged.
    """
    def apply(tr: Transaction) -> Transaction:
        selection = tr.selection
        if not is_cell_selection(selection):
            logger.debug("Edit noop: empty_selected_cells needs a cell selection, got %s", selection.kind)
            return tr

        positions = selection.cell_positions()
        logger.debug("Edit: empty_selected_cells cells=%d", len(positions))
        result = tr
        for pos in reversed(positions):
            cell = tr.doc.node_at(pos)
            filled = schema.node_type(cell.type.name).create_and_fill()
            if filled is None:
                logger.warning("Cannot build empty content for %s at %d", cell.type.name, pos)
                continue
            if cell.content_eq(filled.content):
                continue
            result = result.replace_with(pos + 1, pos + 1 + cell.content_size, filled.content)

        if result is tr:
            logger.debug("Edit noop: empty_selected_cells, every cell already empty")
        else:
            logger.debug("Edit OK: empty_selected_cells steps=%d", len(result.steps) - len(tr.steps))
        return result
    return apply
