"""Stream generated page blocks and map them to rich-text documents."""

from .blocks import (
    BlockStartEvent,
    ContentDeltaEvent,
    BlockEndEvent,
    BlockEvent,
    BlockErrorEvent,
    DocumentNode,
    InlineMark,
    parse_block,
)
from .streaming import BlockStreamer, StreamPolicy, classify_block_kind
from .mapping import parse_inline_content, map_single_block, map_blocks_to_tiptap_json
from .config import Settings, load_config
from .errors import PageStreamError, MalformedBlockError

__version__ = "0.1.0"

__all__ = [
    "BlockStartEvent",
    "ContentDeltaEvent",
    "BlockEndEvent",
    "BlockEvent",
    "BlockErrorEvent",
    "DocumentNode",
    "InlineMark",
    "parse_block",
    "BlockStreamer",
    "StreamPolicy",
    "classify_block_kind",
    "parse_inline_content",
    "map_single_block",
    "map_blocks_to_tiptap_json",
    "Settings",
    "load_config",
    "PageStreamError",
    "MalformedBlockError",
]
