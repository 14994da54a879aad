"""
Block Mapper: generated blocks -> rich-text document JSON.

Pure, deterministic conversion of the model's simplified block format into
the editor's node tree. The mapper is total: every input, including
unknown kinds and half-formed payloads, yields at least one node.
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from pagestream.blocks.block_schema import (
    DEFAULT_CALLOUT_EMOJI,
    DEFAULT_HEADING_LEVEL,
    BlockPayload,
    BlockquoteBlock,
    BulletListBlock,
    CalloutBlock,
    CodeBlock,
    DatabaseBlock,
    DividerBlock,
    DocumentNode,
    HeadingBlock,
    OrderedListBlock,
    ParagraphBlock,
    TableBlock,
    TaskListBlock,
    UnknownBlock,
    parse_block,
)
from pagestream.mapping.inline import parse_inline_content, text_node


BlockInput = Union[BlockPayload, Dict[str, Any]]


# =============================================================================
# Public API
# =============================================================================

def map_blocks_to_tiptap_json(
    blocks: Sequence[BlockInput],
    database_ids: Optional[Mapping[int, str]] = None,
) -> DocumentNode:
    """
    Convert a list of generated blocks into a root doc node.

    Args:
        blocks: Block payloads (models or raw dicts)
        database_ids: Ids of databases already created, keyed by the
            position of their block in `blocks`

    Returns:
        DocumentNode of type "doc"
    """
    database_ids = database_ids or {}
    content: List[DocumentNode] = []
    for i, block in enumerate(blocks):
        content.extend(map_single_block(block, database_ids.get(i)))
    return DocumentNode(type="doc", content=content)


def map_single_block(
    block: BlockInput,
    database_id: Optional[str] = None,
) -> List[DocumentNode]:
    """
    Map one generated block to one or more document nodes.

    Used for incremental insertion while a section is still streaming.

    Example:
        >>> [n.type for n in map_single_block({"type": "divider"})]
        ['horizontalRule']
    """
    block = parse_block(block)

    if isinstance(block, HeadingBlock):
        return [_map_heading(block)]
    elif isinstance(block, ParagraphBlock):
        return [_paragraph(block.content)]
    elif isinstance(block, BulletListBlock):
        return [DocumentNode(type="bulletList", content=[_list_item(i) for i in block.items])]
    elif isinstance(block, OrderedListBlock):
        return [DocumentNode(
            type="orderedList",
            attrs={"start": 1},
            content=[_list_item(i) for i in block.items],
        )]
    elif isinstance(block, TaskListBlock):
        return [_map_task_list(block)]
    elif isinstance(block, BlockquoteBlock):
        return [DocumentNode(type="blockquote", content=[_paragraph(block.content, omit_empty=False)])]
    elif isinstance(block, CalloutBlock):
        return [_map_callout(block)]
    elif isinstance(block, DividerBlock):
        return [DocumentNode(type="horizontalRule")]
    elif isinstance(block, CodeBlock):
        return [_map_code_block(block)]
    elif isinstance(block, TableBlock):
        return [_map_table(block)]
    elif isinstance(block, DatabaseBlock):
        return [_map_database(database_id)]

    return [_map_unknown(block)]


# =============================================================================
# Block Mappers
# =============================================================================

def _paragraph(text: Optional[str], omit_empty: bool = True) -> DocumentNode:
    runs = parse_inline_content(text or "")
    if not runs and omit_empty:
        return DocumentNode(type="paragraph")
    return DocumentNode(type="paragraph", content=runs)


def _list_item(text: str) -> DocumentNode:
    return DocumentNode(type="listItem", content=[_paragraph(text, omit_empty=False)])


def _map_heading(block: HeadingBlock) -> DocumentNode:
    return DocumentNode(
        type="heading",
        attrs={"level": block.level or DEFAULT_HEADING_LEVEL},
        content=parse_inline_content(block.content or ""),
    )


def _map_task_list(block: TaskListBlock) -> DocumentNode:
    return DocumentNode(
        type="taskList",
        content=[
            DocumentNode(
                type="taskItem",
                attrs={"checked": task.checked},
                content=[_paragraph(task.text, omit_empty=False)],
            )
            for task in block.tasks
        ],
    )


def _map_callout(block: CalloutBlock) -> DocumentNode:
    """
    Callout maps to a blockquote with an emoji prefix.

    The editor has no native callout node, so the emoji is the first,
    unmarked run of the quoted paragraph.
    """
    emoji = block.emoji or DEFAULT_CALLOUT_EMOJI
    runs = [text_node(f"{emoji} ")] + parse_inline_content(block.content or "")
    return DocumentNode(
        type="blockquote",
        content=[DocumentNode(type="paragraph", content=runs)],
    )


def _map_code_block(block: CodeBlock) -> DocumentNode:
    # Code is verbatim: no inline marks
    return DocumentNode(
        type="codeBlock",
        attrs={"language": block.language or None},
        content=[text_node(block.content)] if block.content else None,
    )


def _table_cell(node_type: str, text: str) -> DocumentNode:
    return DocumentNode(
        type=node_type,
        attrs={"colspan": 1, "rowspan": 1},
        content=[_paragraph(text)],
    )


def _map_table(block: TableBlock) -> DocumentNode:
    table = block.table
    if table is None:
        return DocumentNode(type="paragraph")

    header_row = DocumentNode(
        type="tableRow",
        content=[_table_cell("tableHeader", header) for header in table.headers],
    )
    body_rows = [
        DocumentNode(type="tableRow", content=[_table_cell("tableCell", cell) for cell in row])
        for row in table.rows
    ]
    return DocumentNode(type="table", content=[header_row] + body_rows)


def _map_database(database_id: Optional[str]) -> DocumentNode:
    return DocumentNode(
        type="databaseViewBlock",
        attrs={
            "databaseId": database_id or None,
            "viewType": "table",
            "filters": [],
            "sortBy": None,
            "groupBy": None,
            "hiddenColumns": [],
        },
    )


def _map_unknown(block: UnknownBlock) -> DocumentNode:
    content = block.raw.get("content")
    return _paragraph(content if isinstance(content, str) else "")
