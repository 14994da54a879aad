"""
Section Driver: Feeds model output for one page section through a BlockStreamer.

Transport, retries and timeouts stay with the caller; this module only
moves text chunks in and block events out, and substitutes a readable
fallback when a section produced nothing parseable.
"""

from typing import AsyncIterable, AsyncIterator, Iterable, Iterator, List, Optional

from pagestream.blocks.block_schema import BlockEvent, HeadingBlock, ParagraphBlock
from pagestream.config import Settings
from pagestream.log import get_logger
from pagestream.streaming.block_streamer import BlockStreamer, StreamEventType

log = get_logger(__name__)

FALLBACK_MESSAGE = "Content could not be parsed from the response."


def fallback_events(
    section_index: int,
    start_block_index: int,
    section_title: Optional[str] = None,
) -> List[BlockEvent]:
    """Atomic events shown in place of a section whose output was unusable."""
    blocks = []
    if section_title:
        blocks.append(HeadingBlock(level=2, content=section_title))
    blocks.append(ParagraphBlock(content=FALLBACK_MESSAGE))
    return [
        BlockEvent(block_index=start_block_index + i, section_index=section_index, block=block)
        for i, block in enumerate(blocks)
    ]


def stream_section_events(
    chunks: Iterable[str],
    section_index: int,
    start_block_index: int = 0,
    section_title: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> Iterator[StreamEventType]:
    """
    Yield block events for a section as its text chunks arrive.

    Args:
        chunks: Raw text chunks from the model, in order
        section_index: Section these blocks belong to
        start_block_index: Index given to the section's first block
        section_title: Used for the fallback heading
        settings: Streamer settings

    Yields:
        Block events, drained after every chunk
    """
    streamer = BlockStreamer(section_index, start_block_index, settings)
    produced = False

    for chunk in chunks:
        streamer.feed(chunk)
        for event in streamer.drain():
            produced = True
            yield event

    streamer.finish()
    for event in streamer.drain():
        produced = True
        yield event

    if not produced:
        log.warning("Section %d produced no blocks; using fallback", section_index)
        yield from fallback_events(section_index, start_block_index, section_title)


async def astream_section_events(
    chunks: AsyncIterable[str],
    section_index: int,
    start_block_index: int = 0,
    section_title: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> AsyncIterator[StreamEventType]:
    """
    Async variant of stream_section_events for streaming model clients.

    Example:
        >>> async for event in astream_section_events(client.stream(prompt), 0, 0):
        ...     await push(event.model_dump(by_alias=True))
    """
    streamer = BlockStreamer(section_index, start_block_index, settings)
    produced = False

    async for chunk in chunks:
        streamer.feed(chunk)
        for event in streamer.drain():
            produced = True
            yield event

    streamer.finish()
    for event in streamer.drain():
        produced = True
        yield event

    if not produced:
        log.warning("Section %d produced no blocks; using fallback", section_index)
        for event in fallback_events(section_index, start_block_index, section_title):
            yield event
