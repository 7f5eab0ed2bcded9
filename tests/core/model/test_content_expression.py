import pytest

from docgrid.core.exceptions import SchemaError
from docgrid.core.model import parse_content_expression


def _types(schema, *names):
    return [schema.node_type(name) for name in names]


class TestMatching:
    """Child sequences checked against compiled expressions."""

    def test_group_with_plus(self, schema):
        expr = parse_content_expression("block+", schema.nodes)
        assert expr.matches(_types(schema, "paragraph"))
        assert expr.matches(_types(schema, "paragraph", "table", "heading"))
        assert not expr.matches([])
        assert not expr.matches(_types(schema, "table_row"))

    def test_choice_star(self, schema):
        expr = parse_content_expression("(table_cell | table_header)*", schema.nodes)
        assert expr.matches([])
        assert expr.matches(_types(schema, "table_header", "table_cell", "table_cell"))
        assert not expr.matches(_types(schema, "paragraph"))

    def test_braced_ranges(self, schema):
        exact = parse_content_expression("paragraph{2}", schema.nodes)
        assert exact.matches(_types(schema, "paragraph", "paragraph"))
        assert not exact.matches(_types(schema, "paragraph"))

        bounded = parse_content_expression("heading paragraph{1,3}", schema.nodes)
        assert bounded.matches(_types(schema, "heading", "paragraph", "paragraph", "paragraph"))
        assert not bounded.matches(_types(schema, "heading"))
        assert not bounded.matches(_types(schema, "heading", *["paragraph"] * 4))

        open_ended = parse_content_expression("paragraph{2,}", schema.nodes)
        assert open_ended.matches(_types(schema, *["paragraph"] * 5))
        assert not open_ended.matches(_types(schema, "paragraph"))

    def test_optional(self, schema):
        expr = parse_content_expression("heading? paragraph", schema.nodes)
        assert expr.matches(_types(schema, "paragraph"))
        assert expr.matches(_types(schema, "heading", "paragraph"))
        assert not expr.matches(_types(schema, "heading", "heading", "paragraph"))

    def test_type_name_prefix_is_not_a_match(self, schema):
        # "table" must not accept "table_row" just because it is a prefix
        expr = parse_content_expression("table", schema.nodes)
        assert not expr.matches(_types(schema, "table_row"))

    def test_empty_expression_is_leaf(self, schema):
        expr = parse_content_expression("", schema.nodes)
        assert expr.is_empty
        assert expr.matches([])
        assert not expr.matches(_types(schema, "paragraph"))

    def test_inline_content(self, schema):
        assert parse_content_expression("inline*", schema.nodes).inline_content
        assert not parse_content_expression("block+", schema.nodes).inline_content


class TestFill:
    def test_fill_picks_first_group_member(self, schema):
        assert parse_content_expression("block+", schema.nodes).fill() == _types(schema, "paragraph")

    def test_fill_optional_parts_are_skipped(self, schema):
        assert parse_content_expression("inline*", schema.nodes).fill() == []
        assert parse_content_expression("heading? paragraph", schema.nodes).fill() == _types(schema, "paragraph")

    def test_fill_sequence_and_range(self, schema):
        expr = parse_content_expression("heading paragraph{2,3}", schema.nodes)
        assert expr.fill() == _types(schema, "heading", "paragraph", "paragraph")

    def test_fill_prefers_shortest_choice(self, schema):
        expr = parse_content_expression("(paragraph paragraph | heading)", schema.nodes)
        assert expr.fill() == _types(schema, "heading")

    def test_fill_skips_required_attrs_and_text(self, schema):
        assert parse_content_expression("image", schema.nodes).fill() is None
        assert parse_content_expression("text", schema.nodes).fill() is None


@pytest.mark.parametrize(
    "source",
    [
        "paragraph{3,1}",
        "no_such_type",
        "(paragraph",
        "paragraph )",
        "paragraph{x}",
        "paragraph{2",
        "| paragraph",
    ],
)
def test_malformed_expressions_raise(schema, source):
    with pytest.raises(SchemaError) as info:
        parse_content_expression(source, schema.nodes)
    assert info.value.context["expression"] == source
