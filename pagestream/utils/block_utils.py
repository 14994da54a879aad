"""
Block Utilities: Helper functions for block processing.
"""

import re
from typing import List, Dict, Any, Union

from pagestream.blocks.block_schema import (
    BlockPayload,
    BulletListBlock,
    OrderedListBlock,
    TableBlock,
    TaskListBlock,
    UnknownBlock,
    parse_block,
)


CITATION_PATTERN = re.compile(r'\[(\d+)\]')


def extract_citations_from_text(text: str) -> List[int]:
    """
    Extract citation numbers from text.

    Args:
        text: Text with inline citations like [1], [2], [1][2]

    Returns:
        List of citation numbers found in text, in order of appearance
    """
    if not text:
        return []
    return [int(n) for n in CITATION_PATTERN.findall(text)]


def _block_texts(block: BlockPayload) -> List[str]:
    if isinstance(block, UnknownBlock):
        content = block.raw.get("content")
        return [content] if isinstance(content, str) else []
    if isinstance(block, (BulletListBlock, OrderedListBlock)):
        return list(block.items)
    if isinstance(block, TaskListBlock):
        return [task.text for task in block.tasks]
    if isinstance(block, TableBlock):
        if block.table is None:
            return []
        return list(block.table.headers) + [cell for row in block.table.rows for cell in row]
    content = getattr(block, "content", None)
    return [content] if isinstance(content, str) else []


def collect_block_citations(block: Union[BlockPayload, Dict[str, Any]]) -> List[int]:
    """
    Collect every source index a block refers to.

    Args:
        block: Block payload or raw dict

    Returns:
        Sorted distinct citation numbers from the block's text and its
        explicit `citations` field
    """
    block = parse_block(block)
    found = set()
    for text in _block_texts(block):
        found.update(extract_citations_from_text(text))

    explicit = (
        block.raw.get("citations") if isinstance(block, UnknownBlock) else block.citations
    )
    if isinstance(explicit, list):
        found.update(n for n in explicit if isinstance(n, int) and not isinstance(n, bool))
    return sorted(found)
