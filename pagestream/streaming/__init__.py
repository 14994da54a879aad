"""Incremental block streaming over a chunked JSON array."""

from .classifier import StreamPolicy, classify_block_kind
from .block_streamer import BlockStreamer, synthesize_list_text
from .section import stream_section_events, astream_section_events

__all__ = [
    "StreamPolicy",
    "classify_block_kind",
    "BlockStreamer",
    "synthesize_list_text",
    "stream_section_events",
    "astream_section_events",
]
