import pytest

from docgrid.core.transforms import (
    remove_parent_node_of_type,
    remove_selected_node,
    replace_parent_node_of_type,
    replace_selected_node,
    safe_insert,
    select_parent_node_of_type,
    set_parent_node_markup,
)


TABLE_BETWEEN = "<doc><p>one</p><table><tr><td><p>1<cursor/></p></td></tr></table><p>two</p></doc>"
RULE_SELECTED = "<doc><p>one</p><node/><hr/><p>two</p></doc>"


@pytest.fixture
def paragraph(schema):
    def factory(text=None):
        return schema.node("paragraph", None, [schema.text(text)] if text else [])
    return factory


class TestRemoveParentNodeOfType:
    def test_removes_closest_parent(self, make_tr, doc_of):
        tr = make_tr(TABLE_BETWEEN)
        new_tr = remove_parent_node_of_type("table")(tr)
        assert new_tr is not tr
        assert new_tr.doc.eq(doc_of("<doc><p>one</p><p>two</p></doc>"))
        assert new_tr.selection.head == 6

    def test_no_matching_parent(self, make_tr):
        tr = make_tr(TABLE_BETWEEN)
        assert remove_parent_node_of_type("blockquote")(tr) is tr

    def test_parent_would_be_left_empty(self, make_tr):
        tr = make_tr("<doc><table><tr><td><p>1<cursor/></p></td></tr></table></doc>")
        assert remove_parent_node_of_type("table")(tr) is tr

    def test_accepts_several_types(self, make_tr, doc_of, schema):
        tr = make_tr("<doc><p>one</p><blockquote><p>x<cursor/></p></blockquote></doc>")
        new_tr = remove_parent_node_of_type([schema.node_type("table"), "blockquote"])(tr)
        assert new_tr.doc.eq(doc_of("<doc><p>one</p></doc>"))


class TestReplaceParentNodeOfType:
    def test_replaces_parent(self, make_tr, doc_of, paragraph):
        tr = make_tr(TABLE_BETWEEN)
        new_tr = replace_parent_node_of_type("table", paragraph("new"))(tr)
        assert new_tr.doc.eq(doc_of("<doc><p>one</p><p>new</p><p>two</p></doc>"))

    def test_no_matching_parent(self, make_tr, paragraph):
        tr = make_tr(TABLE_BETWEEN)
        assert replace_parent_node_of_type("heading", paragraph("new"))(tr) is tr

    def test_replacement_rejected_by_schema(self, make_tr, schema):
        tr = make_tr(TABLE_BETWEEN)
        row = schema.node_type("table_row").create_and_fill()
        assert replace_parent_node_of_type("paragraph", row)(tr) is tr


class TestSelectedNode:
    def test_remove_selected_node(self, make_tr, doc_of):
        new_tr = remove_selected_node(make_tr(RULE_SELECTED))
        assert new_tr.doc.eq(doc_of("<doc><p>one</p><p>two</p></doc>"))
        assert new_tr.selection.kind == "text"

    def test_remove_would_empty_parent(self, make_tr):
        tr = make_tr("<doc><blockquote><node/><hr/></blockquote></doc>")
        assert remove_selected_node(tr) is tr

    def test_remove_needs_node_selection(self, make_tr):
        tr = make_tr(TABLE_BETWEEN)
        assert remove_selected_node(tr) is tr

    def test_replace_selected_node(self, make_tr, doc_of, paragraph):
        new_tr = replace_selected_node(paragraph("new"))(make_tr(RULE_SELECTED))
        assert new_tr.doc.eq(doc_of("<doc><p>one</p><p>new</p><p>two</p></doc>"))

    def test_replace_rejected_by_schema(self, make_tr, schema):
        tr = make_tr(RULE_SELECTED)
        assert replace_selected_node(schema.node_type("table_cell").create_and_fill())(tr) is tr

    def test_replace_needs_node_selection(self, make_tr, paragraph):
        tr = make_tr(TABLE_BETWEEN)
        assert replace_selected_node(paragraph("new"))(tr) is tr


class TestSafeInsert:
    def test_inserts_at_cursor_when_allowed(self, make_tr, doc_of, schema):
        new_tr = safe_insert(schema.node("hard_break"))(make_tr("<doc><p>o<cursor/>ne</p></doc>"))
        assert new_tr.doc.eq(doc_of("<doc><p>o<br/>ne</p></doc>"))

    def test_climbs_to_first_accepting_parent(self, make_tr, doc_of, schema):
        new_tr = safe_insert(schema.node("horizontal_rule"))(make_tr("<doc><p>one<cursor/></p><p>two</p></doc>"))
        assert new_tr.doc.eq(doc_of("<doc><p>one</p><hr/><p>two</p></doc>"))

    def test_inserts_inside_cell_before_leaving_table(self, make_tr, doc_of, schema):
        table = schema.node_type("table").create_and_fill()
        new_tr = safe_insert(table)(make_tr(TABLE_BETWEEN))
        inserted = new_tr.doc.child(1).child(0).child(0)
        assert [child.type.name for child in inserted.content] == ["paragraph", "table"]

    def test_row_lands_after_current_row(self, make_tr, schema):
        row = schema.node_type("table_row").create_and_fill()
        new_tr = safe_insert(row)(make_tr(TABLE_BETWEEN))
        table = new_tr.doc.child(1)
        assert table.child_count == 2
        assert table.child(0).text_content == "1"

    def test_no_place_found(self, make_tr, schema):
        tr = make_tr("<doc><p>one<cursor/></p></doc>")
        cell = schema.node_type("table_cell").create_and_fill()
        assert safe_insert(cell)(tr) is tr

    def test_inserts_once(self, make_tr, schema):
        tr = make_tr("<doc><blockquote><p>x<cursor/></p></blockquote></doc>")
        new_tr = safe_insert(schema.node("horizontal_rule"))(tr)
        assert len(new_tr.steps) == 1
        assert [child.type.name for child in new_tr.doc.child(0).content] == ["paragraph", "horizontal_rule"]


class TestSetParentNodeMarkup:
    def test_merges_attrs(self, make_tr):
        tr = make_tr('<doc><table><tr><td colspan="2"><p>1<cursor/></p></td></tr></table></doc>')
        new_tr = set_parent_node_markup("table_cell", None, {"background": "red"})(tr)
        cell = new_tr.doc.child(0).child(0).child(0)
        assert cell.attrs == {"colspan": 2, "rowspan": 1, "background": "red"}
        assert cell.text_content == "1"

    def test_changes_type(self, make_tr, doc_of, schema):
        tr = make_tr("<doc><p>title<cursor/></p></doc>")
        new_tr = set_parent_node_markup("paragraph", schema.node_type("heading"), {"level": 2})(tr)
        assert new_tr.doc.eq(doc_of('<doc><h level="2">title</h></doc>'))

    def test_drops_attrs_the_new_type_lacks(self, make_tr, schema):
        tr = make_tr('<doc><h level="3">title<cursor/></h></doc>')
        new_tr = set_parent_node_markup("heading", schema.node_type("paragraph"))(tr)
        assert new_tr.doc.child(0).type.name == "paragraph"
        assert new_tr.doc.child(0).attrs == {}

    def test_incompatible_content(self, make_tr, schema):
        tr = make_tr("<doc><p>title<cursor/></p></doc>")
        assert set_parent_node_markup("paragraph", schema.node_type("horizontal_rule"))(tr) is tr

    def test_no_matching_parent(self, make_tr):
        tr = make_tr("<doc><p>title<cursor/></p></doc>")
        assert set_parent_node_markup("heading", None, {"level": 2})(tr) is tr


class TestSelectParentNodeOfType:
    def test_selects_parent(self, make_tr):
        tr = make_tr(TABLE_BETWEEN)
        new_tr = select_parent_node_of_type("table")(tr)
        assert new_tr.selection.kind == "node"
        assert new_tr.selection.node.type.name == "table"
        assert new_tr.selection.from_ == 5
        assert new_tr.doc is tr.doc

    def test_no_matching_parent(self, make_tr):
        tr = make_tr(TABLE_BETWEEN)
        assert select_parent_node_of_type("blockquote")(tr) is tr

    def test_already_node_selection(self, make_tr):
        tr = make_tr(RULE_SELECTED)
        assert select_parent_node_of_type("doc")(tr) is tr
