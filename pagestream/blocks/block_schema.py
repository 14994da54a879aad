"""
Block Schema: Type-safe models for generated page blocks.

This module provides Pydantic models for the content blocks a language model
emits while generating a page section, the events the block streamer
produces, and the rich-document nodes the block mapper renders to.

Key Features:
- One payload model per block kind, plus a forward-compatible unknown kind
- Lenient coercion of model-generated fields (list items, task state,
  citations, table cells, column specs) so a recognized kind stays recognized
- Streaming events with camelCase wire aliases
- Generic document node tree for the rich-text editor
"""

from typing import List, Dict, Any, Optional, Literal, Union, Annotated
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)
from pydantic.alias_generators import to_camel


DEFAULT_HEADING_LEVEL = 2
DEFAULT_CALLOUT_EMOJI = "ℹ️"


# =============================================================================
# Block Type Definitions
# =============================================================================

BLOCK_TYPES: List[str] = [
    "heading", "paragraph", "bulletList", "orderedList", "callout",
    "divider", "codeBlock", "table", "database", "taskList", "blockquote",
]

ColumnType = Literal[
    "TEXT", "NUMBER", "SELECT", "MULTI_SELECT", "DATE", "CHECKBOX", "URL", "STATUS"
]

COLUMN_TYPES = {
    "TEXT", "NUMBER", "SELECT", "MULTI_SELECT", "DATE", "CHECKBOX", "URL", "STATUS"
}


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


# =============================================================================
# Block Payload Models
# =============================================================================

class BaseBlock(BaseModel):
    """Base class for all block payloads; unmodelled fields are preserved."""
    model_config = ConfigDict(extra="allow")

    citations: Optional[List[int]] = Field(
        None, description="RAG citation references used in this block"
    )

    @field_validator("citations", mode="before")
    @classmethod
    def int_citations(cls, v: Any) -> Any:
        # Models sometimes cite by source id; only numeric references survive
        if not isinstance(v, list):
            return None
        return [n for n in v if _is_int(n)]


class ParagraphBlock(BaseBlock):
    """Paragraph with inline **bold**, *italic*, `code` and [N] citations."""
    type: Literal["paragraph"] = "paragraph"
    content: Optional[str] = None


class HeadingBlock(BaseBlock):
    type: Literal["heading"] = "heading"
    level: Optional[int] = Field(None, description="Heading level, defaults to 2")
    content: Optional[str] = None

    @field_validator("level", mode="before")
    @classmethod
    def int_level(cls, v: Any) -> Any:
        if _is_int(v):
            return v
        if isinstance(v, str) and v.strip().isdigit():
            return int(v)
        return None


class CalloutBlock(BaseBlock):
    type: Literal["callout"] = "callout"
    emoji: Optional[str] = Field(None, description="Callout icon emoji")
    content: Optional[str] = None


class BlockquoteBlock(BaseBlock):
    type: Literal["blockquote"] = "blockquote"
    content: Optional[str] = None


class DividerBlock(BaseBlock):
    type: Literal["divider"] = "divider"


class CodeBlock(BaseBlock):
    """Verbatim code; the content is never tokenized for inline marks."""
    type: Literal["codeBlock"] = "codeBlock"
    language: Optional[str] = None
    content: Optional[str] = None


class _ListBlock(BaseBlock):
    items: List[str] = Field(default_factory=list)

    @field_validator("items", mode="before")
    @classmethod
    def stringify_items(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [_cell_text(item) for item in v]
        return v


class BulletListBlock(_ListBlock):
    type: Literal["bulletList"] = "bulletList"


class OrderedListBlock(_ListBlock):
    type: Literal["orderedList"] = "orderedList"


class TaskItem(BaseModel):
    text: str = ""
    checked: bool = False

    @field_validator("text", mode="before")
    @classmethod
    def stringify_text(cls, v: Any) -> Any:
        return _cell_text(v)

    @field_validator("checked", mode="before")
    @classmethod
    def lenient_checked(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower() in ("true", "yes", "x", "1", "done")
        return bool(v)


class TaskListBlock(BaseBlock):
    type: Literal["taskList"] = "taskList"
    tasks: List[TaskItem] = Field(default_factory=list)

    @field_validator("tasks", mode="before")
    @classmethod
    def bare_task_text(cls, v: Any) -> Any:
        # A task given as a bare value is an unchecked task with that text
        if isinstance(v, list):
            return [t if isinstance(t, (dict, TaskItem)) else {"text": t} for t in v]
        return v


class TableData(BaseModel):
    """Table contents; the first row of the rendered table is the headers."""
    headers: List[str] = Field(default_factory=list)
    rows: List[List[str]] = Field(default_factory=list)

    @field_validator("headers", mode="before")
    @classmethod
    def stringify_headers(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [_cell_text(h) for h in v]
        return v

    @field_validator("rows", mode="before")
    @classmethod
    def stringify_cells(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [
                [_cell_text(c) for c in row] if isinstance(row, list) else row
                for row in v
            ]
        return v


class TableBlock(BaseBlock):
    type: Literal["table"] = "table"
    table: Optional[TableData] = None


class ColumnSpec(BaseModel):
    name: str
    type: ColumnType = "TEXT"
    options: Optional[List[str]] = None

    @field_validator("type", mode="before")
    @classmethod
    def known_column_type(cls, v: Any) -> Any:
        # Models invent column types; anything unknown degrades to TEXT
        if isinstance(v, str) and v.upper() in COLUMN_TYPES:
            return v.upper()
        return "TEXT"


class DatabaseSpec(BaseModel):
    """Specification for a database to be created from generated output."""
    name: str = ""
    columns: List[ColumnSpec] = Field(default_factory=list)
    entries: List[Dict[str, Any]] = Field(default_factory=list)


class DatabaseBlock(BaseBlock):
    type: Literal["database"] = "database"
    database: Optional[DatabaseSpec] = None


class UnknownBlock(BaseModel):
    """Fallback for unrecognized or invalid blocks - keeps the raw fields."""
    type: str = Field("", description="Original block kind name")
    raw: Dict[str, Any] = Field(default_factory=dict, description="Original block data")


BlockPayload = Union[
    ParagraphBlock, HeadingBlock, CalloutBlock, BlockquoteBlock, DividerBlock,
    CodeBlock, BulletListBlock, OrderedListBlock, TaskListBlock, TableBlock,
    DatabaseBlock, UnknownBlock,
]


# =============================================================================
# Block Payload Model Mapping
# =============================================================================

BLOCK_PAYLOAD_MODELS: Dict[str, type] = {
    "paragraph": ParagraphBlock,
    "heading": HeadingBlock,
    "callout": CalloutBlock,
    "blockquote": BlockquoteBlock,
    "divider": DividerBlock,
    "codeBlock": CodeBlock,
    "bulletList": BulletListBlock,
    "orderedList": OrderedListBlock,
    "taskList": TaskListBlock,
    "table": TableBlock,
    "database": DatabaseBlock,
}


def parse_block(data: Any) -> BlockPayload:
    """
    Turn a decoded JSON value into a block payload without ever failing.

    Unknown kinds, non-object values and payloads that fail validation all
    come back as UnknownBlock with the original fields preserved.

    Example:
        >>> parse_block({"type": "heading", "level": 1, "content": "Hi"}).level
        1
        >>> parse_block({"type": "timeline", "events": []}).raw
        {'type': 'timeline', 'events': []}
    """
    if isinstance(data, (BaseBlock, UnknownBlock)):
        return data
    if not isinstance(data, dict):
        return UnknownBlock(raw={"content": data} if isinstance(data, str) else {})

    kind = data.get("type")
    model = BLOCK_PAYLOAD_MODELS.get(kind) if isinstance(kind, str) else None
    if model is None:
        return UnknownBlock(type=kind if isinstance(kind, str) else "", raw=dict(data))
    try:
        return model.model_validate(data)
    except ValidationError:
        return UnknownBlock(type=kind, raw=dict(data))


def block_to_dict(block: BlockPayload) -> Dict[str, Any]:
    """Serialize a payload back to the generated JSON shape."""
    if isinstance(block, UnknownBlock):
        return dict(block.raw)
    return block.model_dump(exclude_none=True)


# =============================================================================
# Streaming Block Events
# =============================================================================

class CamelModel(BaseModel):
    """Event base: snake_case attributes, camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BlockStartEvent(CamelModel):
    """Emitted as soon as a streamable or list block's kind is known."""
    type: Literal["block_start"] = "block_start"
    block_type: str = Field(..., description="Kind of block being streamed")
    block_index: int
    section_index: int
    attrs: Optional[Dict[str, Any]] = None


class ContentDeltaEvent(CamelModel):
    """Newly decoded text to append to a streaming block."""
    type: Literal["content_delta"] = "content_delta"
    text: str
    block_index: int


class BlockEndEvent(CamelModel):
    """Emitted when a streamed block's closing brace has been read."""
    type: Literal["block_end"] = "block_end"
    block_index: int
    section_index: int
    block: BlockPayload


class BlockEvent(CamelModel):
    """A complete atomic block, emitted once with no start/delta/end frame."""
    type: Literal["block"] = "block"
    block_index: int
    section_index: int
    block: BlockPayload


class BlockErrorEvent(CamelModel):
    """Terminal failure for one block; the rest of the stream is unaffected."""
    type: Literal["block_error"] = "block_error"
    block_index: int
    section_index: int
    message: str
    raw: str = Field("", description="Preview of the offending object text")
    partial: bool = Field(False, description="True if the stream ended mid-block")


# Union type for all streaming events
StreamEvent = Annotated[
    Union[BlockStartEvent, ContentDeltaEvent, BlockEndEvent, BlockEvent, BlockErrorEvent],
    Field(discriminator="type")
]


# =============================================================================
# Document Nodes
# =============================================================================

class InlineMark(BaseModel):
    """Span-level annotation on a text run: bold, italic, code or citation."""
    type: str
    attrs: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"type": self.type}
        if self.attrs is not None:
            out["attrs"] = dict(self.attrs)
        return out


class DocumentNode(BaseModel):
    """
    A node of the rich-text document tree.

    `content=None` means the key is absent, which the editor treats
    differently from an empty list of children.
    """
    type: str
    attrs: Optional[Dict[str, Any]] = None
    content: Optional[List["DocumentNode"]] = None
    text: Optional[str] = None
    marks: Optional[List[InlineMark]] = None

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to a JSON-ready dict, omitting unset keys.

        None values inside attrs are kept (e.g. a code block's language).
        """
        out: Dict[str, Any] = {"type": self.type}
        if self.attrs is not None:
            out["attrs"] = dict(self.attrs)
        if self.content is not None:
            out["content"] = [child.to_dict() for child in self.content]
        if self.text is not None:
            out["text"] = self.text
        if self.marks is not None:
            out["marks"] = [mark.to_dict() for mark in self.marks]
        return out
