"""Unit tests for mapping/block_mapper.py"""

import pytest

from pagestream import map_blocks_to_tiptap_json, map_single_block
from pagestream.blocks import BLOCK_TYPES, HeadingBlock, UnknownBlock


def _one(block, database_id=None):
    nodes = map_single_block(block, database_id)
    assert len(nodes) == 1
    return nodes[0]


# =============================================================================
# Document root
# =============================================================================

def test_empty_document():
    """No blocks gives an empty doc node."""
    doc = map_blocks_to_tiptap_json([])
    assert doc.to_dict() == {"type": "doc", "content": []}


def test_multiple_blocks():
    """Blocks map in order into the doc content."""
    doc = map_blocks_to_tiptap_json([
        {"type": "heading", "level": 1, "content": "Title"},
        {"type": "paragraph", "content": "Body text"},
    ])
    assert [n.type for n in doc.content] == ["heading", "paragraph"]


def test_database_id_injected_by_index():
    """Ids are looked up by the block's position in the list."""
    doc = map_blocks_to_tiptap_json(
        [
            {"type": "heading", "level": 1, "content": "Report"},
            {"type": "database", "database": {"name": "DB", "columns": [], "entries": []}},
            {"type": "database", "database": {"name": "Other", "columns": [], "entries": []}},
        ],
        {1: "db_injected"},
    )
    assert doc.content[1].attrs["databaseId"] == "db_injected"
    assert doc.content[2].attrs["databaseId"] is None


def test_accepts_payload_models():
    """Parsed payload models map the same as raw dicts."""
    assert _one(HeadingBlock(level=3, content="x")).to_dict() == _one(
        {"type": "heading", "level": 3, "content": "x"}
    ).to_dict()


# =============================================================================
# Text blocks
# =============================================================================

def test_heading_with_level():
    node = _one({"type": "heading", "level": 1, "content": "Hello"})
    assert node.to_dict() == {
        "type": "heading",
        "attrs": {"level": 1},
        "content": [{"type": "text", "text": "Hello"}],
    }


def test_heading_defaults_to_level_2():
    assert _one({"type": "heading", "content": "Sub"}).attrs == {"level": 2}


def test_paragraph_inline_marks():
    """Paragraph text is tokenized for inline marks."""
    node = _one({"type": "paragraph", "content": "Hello **world**"})
    assert [r.text for r in node.content] == ["Hello ", "world"]
    assert node.content[1].marks[0].type == "bold"


def test_paragraph_without_text_omits_content():
    """A missing text field omits content rather than emitting []."""
    node = _one({"type": "paragraph"})
    assert node.content is None
    assert node.to_dict() == {"type": "paragraph"}


def test_blockquote_wraps_paragraph():
    node = _one({"type": "blockquote", "content": "A wise quote"})
    assert node.type == "blockquote"
    assert node.content[0].type == "paragraph"
    assert node.content[0].content[0].text == "A wise quote"


def test_callout_with_emoji():
    """Callouts become blockquotes whose first run is the unmarked emoji."""
    node = _one({"type": "callout", "content": "Important **note**", "emoji": "⚠️"})
    runs = node.content[0].content
    assert node.type == "blockquote"
    assert runs[0].to_dict() == {"type": "text", "text": "⚠️ "}
    assert [r.text for r in runs[1:]] == ["Important ", "note"]
    assert runs[2].marks[0].type == "bold"


def test_callout_default_emoji():
    node = _one({"type": "callout", "content": "Note"})
    assert node.content[0].content[0].text == "ℹ️ "


def test_code_block_verbatim():
    """Code keeps markup characters verbatim in a single run."""
    node = _one({"type": "codeBlock", "content": "x = a ** b * c  # [1]", "language": "python"})
    assert node.to_dict() == {
        "type": "codeBlock",
        "attrs": {"language": "python"},
        "content": [{"type": "text", "text": "x = a ** b * c  # [1]"}],
    }


def test_code_block_without_language():
    """A missing language is an explicit null attr."""
    node = _one({"type": "codeBlock", "content": "hello"})
    assert node.to_dict()["attrs"] == {"language": None}


def test_divider():
    assert _one({"type": "divider"}).to_dict() == {"type": "horizontalRule"}


# =============================================================================
# Lists
# =============================================================================

def test_bullet_list_items():
    node = _one({"type": "bulletList", "items": ["Alpha", "Beta", "Gamma"]})
    assert node.type == "bulletList"
    assert len(node.content) == 3
    item = node.content[0]
    assert item.type == "listItem"
    assert item.content[0].type == "paragraph"
    assert item.content[0].content[0].text == "Alpha"


def test_bullet_list_inline_formatting():
    node = _one({"type": "bulletList", "items": ["**Bold item**"]})
    assert node.content[0].content[0].content[0].marks[0].type == "bold"


@pytest.mark.parametrize("kind", ["bulletList", "orderedList"])
def test_empty_list_has_no_children(kind):
    """An empty items array gives zero children, not an error."""
    node = _one({"type": kind, "items": []})
    assert node.content == []


def test_ordered_list_start():
    node = _one({"type": "orderedList", "items": ["First", "Second"]})
    assert node.attrs == {"start": 1}
    assert len(node.content) == 2


def test_task_list_checked_state():
    node = _one({"type": "taskList", "tasks": [
        {"text": "Done [2]", "checked": True},
        {"text": "Open task", "checked": False},
    ]})
    assert [t.type for t in node.content] == ["taskItem", "taskItem"]
    assert [t.attrs["checked"] for t in node.content] == [True, False]
    done = node.content[0].content[0].content
    assert done[1].marks[0].attrs == {"citationIndex": 2}


def test_list_with_non_string_items():
    """Numbers and nulls in items render as text instead of dropping the list."""
    node = _one({"type": "bulletList", "items": ["Revenue", 42, None]})
    assert node.type == "bulletList"
    texts = [item.content[0].content for item in node.content]
    assert texts[0][0].text == "Revenue"
    assert texts[1][0].text == "42"
    assert texts[2] == []


def test_task_with_null_checked():
    node = _one({"type": "taskList", "tasks": [{"text": "Review", "checked": None}]})
    assert node.type == "taskList"
    assert node.content[0].attrs == {"checked": False}
    assert node.content[0].content[0].content[0].text == "Review"


@pytest.mark.parametrize("block,level", [
    ({"type": "heading", "level": 1, "content": "Overview", "citations": ["src-1"]}, 1),
    ({"type": "heading", "level": "big", "content": "Overview"}, 2),
    ({"type": "heading", "level": "3", "content": "Overview"}, 3),
])
def test_heading_survives_bad_fields(block, level):
    """A heading with an unusable side field is still a heading."""
    node = _one(block)
    assert node.type == "heading"
    assert node.attrs == {"level": level}
    assert node.content[0].text == "Overview"


# =============================================================================
# Structured blocks
# =============================================================================

def test_table_rows():
    """The header row comes first, followed by one row per data row."""
    node = _one({"type": "table", "table": {
        "headers": ["Name", "**Value**"],
        "rows": [["Revenue", "$10M [1]"], ["EBITDA", ""]],
    }})
    assert node.type == "table"
    assert len(node.content) == 3

    header = node.content[0]
    assert header.type == "tableRow"
    assert [c.type for c in header.content] == ["tableHeader", "tableHeader"]
    assert header.content[0].attrs == {"colspan": 1, "rowspan": 1}
    assert header.content[0].content[0].content[0].text == "Name"
    assert header.content[1].content[0].content[0].marks[0].type == "bold"

    body = node.content[1]
    assert [c.type for c in body.content] == ["tableCell", "tableCell"]
    assert body.content[0].content[0].content[0].text == "Revenue"
    assert body.content[1].content[0].content[1].marks[0].type == "citation"
    assert node.content[2].content[1].content[0].to_dict() == {"type": "paragraph"}


def test_table_numeric_cells():
    """Numbers in generated tables render as text."""
    node = _one({"type": "table", "table": {"headers": ["Year", "Growth"], "rows": [[2024, 0.5]]}})
    assert node.content[1].content[0].content[0].content[0].text == "2024"


def test_table_missing_data_falls_back():
    """A table without its table field becomes an empty paragraph."""
    assert _one({"type": "table"}).to_dict() == {"type": "paragraph"}


def test_database_default_attrs():
    node = _one({"type": "database", "database": {
        "name": "Risk Register", "columns": [{"name": "Risk", "type": "TEXT"}], "entries": [{"Risk": "Market"}],
    }})
    assert node.to_dict() == {
        "type": "databaseViewBlock",
        "attrs": {
            "databaseId": None,
            "viewType": "table",
            "filters": [],
            "sortBy": None,
            "groupBy": None,
            "hiddenColumns": [],
        },
    }


def test_database_injected_id():
    node = _one({"type": "database", "database": {"name": "Test DB", "columns": [], "entries": []}}, "db_12345")
    assert node.attrs["databaseId"] == "db_12345"


# =============================================================================
# Totality
# =============================================================================

def test_unknown_kind_falls_back_to_paragraph():
    node = _one({"type": "unknown_type", "content": "Fallback text"})
    assert node.type == "paragraph"
    assert node.content[0].text == "Fallback text"


@pytest.mark.parametrize("block", [
    {"type": "timeline"},
    {"type": "timeline", "content": 42},
    {"type": "table", "table": "not a table"},
    {"type": "taskList", "tasks": "nope"},
    {"no_type": True},
    {},
    UnknownBlock(type="x"),
])
def test_mapper_never_raises(block):
    """Malformed or unknown payloads always produce at least one node."""
    nodes = map_single_block(block)
    assert len(nodes) >= 1
    assert nodes[0].type == "paragraph"


@pytest.mark.parametrize("kind", BLOCK_TYPES)
def test_every_kind_maps_with_minimal_payload(kind):
    """Each defined kind maps from just its type field."""
    assert len(map_single_block({"type": kind})) >= 1
