"""Shared fixtures: the default schema and an XML document builder.

Documents are written as XML literals and parsed with lxml. Element names
are node type names (or the short aliases below), mark names wrap inline
text, and four empty marker elements record positions:

``<cursor/>``
    a collapsed text selection
``<anchor/>`` / ``<head/>``
    a text range, or a cell selection when both sit in different cells
``<node/>``
    a node selection of the node that follows

Whitespace-only text is ignored inside nodes that do not take inline
content, so markup can be indented freely.
"""

import os
import sys
from typing import Dict, List, NamedTuple, Optional, Tuple

import pytest

# Ensure project root is importable when running pytest from repository root
_REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if _REPO_ROOT not in sys.path:
    sys.path.insert(0, _REPO_ROOT)

lxml = pytest.importorskip("lxml")
from lxml import etree as ET

from docgrid.config import ConfigManager
from docgrid.core.helpers import find_cell_closest_to_pos
from docgrid.core.model import Node, Schema, schema_from_config
from docgrid.core.state import CellSelection, NodeSelection, TextSelection, Transaction


ALIASES = {
    "p": "paragraph",
    "h": "heading",
    "tr": "table_row",
    "td": "table_cell",
    "th": "table_header",
    "hr": "horizontal_rule",
    "br": "hard_break",
}

MARKERS = ("cursor", "anchor", "head", "node")


class Built(NamedTuple):
    doc: Node
    tags: Dict[str, int]
    selection: object


def _coerce(value: str):
    if value.lstrip("-").isdigit():
        return int(value)
    if value == "null":
        return None
    return value


class DocBuilder:
    """Turns XML markup into a document plus the positions of its markers."""

    def __init__(self, schema: Schema) -> None:
        self.schema = schema

    def parse(self, markup: str) -> Tuple[Node, Dict[str, int]]:
        root = ET.fromstring(markup)
        tags: Dict[str, int] = {}
        node = self._node(root, 0, tags)  # the top node has no opening token
        return node, tags

    def _node(self, elem, content_start: int, tags: Dict[str, int]) -> Node:
        node_type = self.schema.node_type(ALIASES.get(elem.tag, elem.tag))
        attrs = {name: _coerce(value) for name, value in elem.attrib.items()}
        if node_type.is_leaf:
            return node_type.create(attrs)
        content = self._content(elem, content_start, (), node_type.inline_content, tags)
        return self.schema.node(node_type, attrs, content)

    def _text(self, text: Optional[str], marks, inline: bool) -> List[Node]:
        if not text or (not inline and not text.strip()):
            return []
        return [self.schema.text(text, marks)]

    def _content(self, elem, start: int, marks, inline: bool, tags: Dict[str, int]) -> List[Node]:
        nodes: List[Node] = []
        pos = start

        def add(new: List[Node]) -> None:
            nonlocal pos
            nodes.extend(new)
            pos += sum(n.node_size for n in new)

        add(self._text(elem.text, marks, inline))
        for child in elem:
            if child.tag in MARKERS:
                tags[child.tag] = pos
            elif child.tag in self.schema.marks:
                attrs = {name: _coerce(value) for name, value in child.attrib.items()}
                mark = self.schema.mark(child.tag, attrs)
                add(self._content(child, pos, tuple(marks) + (mark,), True, tags))
            else:
                add([self._node(child, pos + 1, tags)])
            add(self._text(child.tail, marks, inline))
        return nodes

    def selection(self, doc: Node, tags: Dict[str, int]):
        if "node" in tags:
            return NodeSelection.create(doc, tags["node"])
        if "anchor" in tags and "head" in tags:
            anchor_cell = find_cell_closest_to_pos(doc.resolve(tags["anchor"]))
            head_cell = find_cell_closest_to_pos(doc.resolve(tags["head"]))
            if anchor_cell and head_cell and anchor_cell.pos != head_cell.pos:
                return CellSelection.create(doc, anchor_cell.pos, head_cell.pos)
            return TextSelection.create(doc, tags["anchor"], tags["head"])
        if "cursor" in tags:
            return TextSelection.create(doc, tags["cursor"])
        return TextSelection.at_start(doc)

    def __call__(self, markup: str) -> Built:
        doc, tags = self.parse(markup)
        return Built(doc, tags, self.selection(doc, tags))


@pytest.fixture(scope="session")
def schema(tmp_path_factory):
    """Default schema, read without any user configuration overrides."""
    patch = pytest.MonkeyPatch()
    patch.setenv("DOCGRID_CONFIG_DIR", str(tmp_path_factory.mktemp("no_user_config")))
    ConfigManager._instance = None
    try:
        yield schema_from_config()
    finally:
        patch.undo()
        ConfigManager._instance = None


@pytest.fixture
def build(schema):
    return DocBuilder(schema)


@pytest.fixture
def doc_of(build):
    """Markup -> document node (markers ignored)."""
    def factory(markup: str) -> Node:
        return build(markup).doc
    return factory


@pytest.fixture
def make_tr(build):
    """Markup -> transaction carrying the selection the markers describe."""
    def factory(markup: str) -> Transaction:
        built = build(markup)
        return Transaction.create(built.doc, built.selection)
    return factory
