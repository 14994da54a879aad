"""Block payload to rich-document mapping."""

from .inline import parse_inline_content
from .block_mapper import map_single_block, map_blocks_to_tiptap_json

__all__ = [
    "parse_inline_content",
    "map_single_block",
    "map_blocks_to_tiptap_json",
]
