from __future__ import annotations

"""Table queries, cell selections and structural transforms.

Submodules are layered: :mod:`.model` (schema, nodes, positions, grids),
:mod:`.state` (mapping, selections, transactions), then :mod:`.helpers`,
:mod:`.tables` and :mod:`.transforms` on top, and :mod:`.services` last.
"""

from .exceptions import (  # noqa: F401
    DocGridError,
    PositionError,
    ReplaceError,
    SchemaError,
    SelectionError,
)
from .helpers import (  # noqa: F401
    ContentNodeWithPos,
    NodeWithPos,
    chain,
    find_cell_closest_to_pos,
    find_children,
    find_children_by_type,
    find_parent_node,
    find_parent_node_closest_to_pos,
    find_parent_node_of_type,
    find_selected_node_of_type,
    has_parent_node_of_type,
    is_node_selection,
    remove_node_at_pos,
    replace_node_at_pos,
)
from .tables import (  # noqa: F401
    empty_selected_cells,
    find_table,
    get_cells_in_column,
    get_cells_in_row,
    get_cells_in_table,
    get_selection_rect,
    is_cell_selection,
    is_column_selected,
    is_row_selected,
    is_table_selected,
    select_column,
    select_row,
    select_table,
)
from .transforms import (  # noqa: F401
    remove_parent_node_of_type,
    remove_selected_node,
    replace_parent_node_of_type,
    replace_selected_node,
    safe_insert,
    select_parent_node_of_type,
    set_parent_node_markup,
)

__all__: list[str] = [
    "ContentNodeWithPos",
    "DocGridError",
    "NodeWithPos",
    "PositionError",
    "ReplaceError",
    "SchemaError",
    "SelectionError",
    "chain",
    "empty_selected_cells",
    "find_cell_closest_to_pos",
    "find_children",
    "find_children_by_type",
    "find_parent_node",
    "find_parent_node_closest_to_pos",
    "find_parent_node_of_type",
    "find_selected_node_of_type",
    "find_table",
    "get_cells_in_column",
    "get_cells_in_row",
    "get_cells_in_table",
    "get_selection_rect",
    "has_parent_node_of_type",
    "is_cell_selection",
    "is_column_selected",
    "is_node_selection",
    "is_row_selected",
    "is_table_selected",
    "remove_node_at_pos",
    "remove_parent_node_of_type",
    "remove_selected_node",
    "replace_node_at_pos",
    "replace_parent_node_of_type",
    "replace_selected_node",
    "safe_insert",
    "select_column",
    "select_parent_node_of_type",
    "select_row",
    "select_table",
    "set_parent_node_markup",
]
