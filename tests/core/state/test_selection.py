import pytest

from docgrid.core.exceptions import SelectionError
from docgrid.core.state import CellSelection, NodeSelection, TextSelection, Transaction


TABLE_2X2 = (
    "<doc><table>"
    "<tr><td><p>1</p></td><td><p>2</p></td></tr>"
    "<tr><td><p>3</p></td><td><p>4</p></td></tr>"
    "</table></doc>"
)


class TestTextSelection:
    def test_range_accessors(self, doc_of):
        doc = doc_of("<doc><p>hello</p></doc>")
        forward = TextSelection.create(doc, 2, 4)
        backward = TextSelection.create(doc, 4, 2)
        assert (forward.from_, forward.to, forward.empty) == (2, 4, False)
        assert (backward.from_, backward.to) == (2, 4)
        assert backward.resolved_from.pos == 2
        assert backward.resolved_to.pos == 4
        assert forward.kind == "text"

    def test_cursor(self, doc_of):
        selection = TextSelection.create(doc_of("<doc><p>hello</p></doc>"), 3)
        assert selection.empty and selection.is_cursor
        assert selection.anchor == selection.head == 3

    def test_near_moves_into_textblock(self, doc_of):
        doc = doc_of("<doc><hr/><p>one</p></doc>")
        assert TextSelection.near(doc.resolve(0)).head == 2
        assert TextSelection.at_start(doc).head == 2

    def test_near_searches_backwards_with_negative_bias(self, doc_of):
        doc = doc_of("<doc><p>one</p><hr/><p>two</p></doc>")
        assert TextSelection.near(doc.resolve(5), -1).head == 4
        assert TextSelection.near(doc.resolve(5), 1).head == 7

    def test_near_without_textblocks(self, doc_of):
        doc = doc_of("<doc><hr/></doc>")
        assert TextSelection.at_start(doc).head == 0

    def test_eq(self, doc_of):
        doc = doc_of("<doc><p>hello</p></doc>")
        assert TextSelection.create(doc, 1, 3).eq(TextSelection.create(doc, 1, 3))
        assert not TextSelection.create(doc, 1, 3).eq(TextSelection.create(doc, 3, 1))


class TestNodeSelection:
    def test_create(self, doc_of):
        doc = doc_of("<doc><p>one</p><hr/></doc>")
        selection = NodeSelection.create(doc, 5)
        assert selection.node.type.name == "horizontal_rule"
        assert (selection.from_, selection.to) == (5, 6)
        assert selection.kind == "node"
        assert not selection.empty

    def test_create_without_node_raises(self, doc_of):
        doc = doc_of("<doc><p>one</p><hr/></doc>")
        with pytest.raises(SelectionError):
            NodeSelection.create(doc, 6)

    def test_maps_over_insertion(self, build, schema):
        built = build("<doc><p>one</p><node/><hr/></doc>")
        tr = Transaction.create(built.doc, built.selection)
        moved = tr.insert(0, schema.node("paragraph"))
        assert moved.selection.kind == "node"
        assert moved.selection.from_ == 7

    def test_falls_back_when_deleted(self, build):
        built = build("<doc><p>one</p><node/><hr/></doc>")
        tr = Transaction.create(built.doc, built.selection)
        deleted = tr.delete(5, 6)
        assert deleted.selection.kind == "text"


class TestCellSelection:
    def test_rect_and_cells(self, doc_of):
        doc = doc_of(TABLE_2X2)
        selection = CellSelection.create(doc, 2, 19)
        assert selection.kind == "cell"
        assert selection.cell_positions() == [2, 7, 14, 19]
        assert (selection.from_, selection.to) == (2, 24)
        assert selection.rect().coordinates() == frozenset({(0, 0), (0, 1), (1, 0), (1, 1)})

    def test_for_each_cell(self, doc_of):
        doc = doc_of(TABLE_2X2)
        seen = []
        CellSelection.create(doc, 7, 14).for_each_cell(lambda cell, pos: seen.append((cell.text_content, pos)))
        assert seen == [("1", 2), ("2", 7), ("3", 14), ("4", 19)]

    def test_single_cell(self, doc_of):
        selection = CellSelection.create(doc_of(TABLE_2X2), 14)
        assert selection.anchor == selection.head == 14
        assert selection.cell_positions() == [14]

    @pytest.mark.parametrize("anchor, head", [(3, 19), (2, 1), (0, 2)])
    def test_positions_must_point_at_cells(self, doc_of, anchor, head):
        with pytest.raises(SelectionError):
            CellSelection.create(doc_of(TABLE_2X2), anchor, head)

    def test_cells_must_share_a_table(self, doc_of):
        doc = doc_of("<doc><table><tr><td><p>1</p></td></tr></table>"
                     "<table><tr><td><p>2</p></td></tr></table></doc>")
        with pytest.raises(SelectionError):
            CellSelection.create(doc, 2, 11)

    def test_maps_over_insertion_before_table(self, doc_of, schema):
        doc = doc_of(TABLE_2X2)
        tr = Transaction.create(doc, CellSelection.create(doc, 2, 14))
        moved = tr.insert(0, schema.node("paragraph", None, [schema.text("abc")]))
        assert moved.selection.kind == "cell"
        assert (moved.selection.anchor, moved.selection.head) == (7, 19)

    def test_falls_back_to_text_when_table_goes(self, doc_of):
        doc = doc_of("<doc><p>x</p>" + TABLE_2X2[5:])
        tr = Transaction.create(doc, CellSelection.create(doc, 5, 22))
        gone = tr.delete(3, 29)
        assert gone.selection.kind == "text"
        assert gone.selection.head == 2
