"""
Block Classifier: decides how each block kind is streamed.

Streamable kinds carry a single "content" string that is forwarded as it
arrives. Synthetic-list kinds announce themselves immediately but are
rendered once, when their items are complete. Everything else, including
kinds this package has never heard of, is atomic: buffered until the
object closes and emitted as one event.
"""

from enum import Enum
from typing import Any, FrozenSet


class StreamPolicy(str, Enum):
    STREAMABLE = "streamable"
    ATOMIC = "atomic"
    SYNTHETIC_LIST = "synthetic_list"


STREAMABLE_KINDS: FrozenSet[str] = frozenset({
    "paragraph",
    "heading",
    "callout",
    "blockquote",
    "codeBlock",
})

SYNTHETIC_LIST_KINDS: FrozenSet[str] = frozenset({
    "bulletList",
    "orderedList",
    "taskList",
})

# Field whose string value is streamed for STREAMABLE kinds
PRIMARY_TEXT_FIELD = "content"


def classify_block_kind(kind: Any) -> StreamPolicy:
    """
    Map a block kind name to its streaming policy.

    Example:
        >>> classify_block_kind("heading")
        <StreamPolicy.STREAMABLE: 'streamable'>
        >>> classify_block_kind("timeline")
        <StreamPolicy.ATOMIC: 'atomic'>
    """
    if not isinstance(kind, str):
        return StreamPolicy.ATOMIC
    if kind in STREAMABLE_KINDS:
        return StreamPolicy.STREAMABLE
    if kind in SYNTHETIC_LIST_KINDS:
        return StreamPolicy.SYNTHETIC_LIST
    return StreamPolicy.ATOMIC
