"""Pydantic models for generated blocks, stream events and document nodes."""

from .block_schema import (
    BLOCK_TYPES,
    BLOCK_PAYLOAD_MODELS,
    BlockPayload,
    ParagraphBlock,
    HeadingBlock,
    CalloutBlock,
    BlockquoteBlock,
    DividerBlock,
    CodeBlock,
    BulletListBlock,
    OrderedListBlock,
    TaskItem,
    TaskListBlock,
    TableData,
    TableBlock,
    ColumnSpec,
    DatabaseSpec,
    DatabaseBlock,
    UnknownBlock,
    BlockStartEvent,
    ContentDeltaEvent,
    BlockEndEvent,
    BlockEvent,
    BlockErrorEvent,
    StreamEvent,
    InlineMark,
    DocumentNode,
    parse_block,
    block_to_dict,
)

__all__ = [
    "BLOCK_TYPES",
    "BLOCK_PAYLOAD_MODELS",
    "BlockPayload",
    "ParagraphBlock",
    "HeadingBlock",
    "CalloutBlock",
    "BlockquoteBlock",
    "DividerBlock",
    "CodeBlock",
    "BulletListBlock",
    "OrderedListBlock",
    "TaskItem",
    "TaskListBlock",
    "TableData",
    "TableBlock",
    "ColumnSpec",
    "DatabaseSpec",
    "DatabaseBlock",
    "UnknownBlock",
    "BlockStartEvent",
    "ContentDeltaEvent",
    "BlockEndEvent",
    "BlockEvent",
    "BlockErrorEvent",
    "StreamEvent",
    "InlineMark",
    "DocumentNode",
    "parse_block",
    "block_to_dict",
]
