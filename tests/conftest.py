"""Shared helpers for driving a BlockStreamer in tests"""

from typing import List

import pytest

from pagestream import BlockStreamer


def chunked(text: str, size: int) -> List[str]:
    return [text[i:i + size] for i in range(0, len(text), size)]


@pytest.fixture(name="run_stream")
def run_stream_fixture():
    """Feed text (whole or in fixed-size chunks) and return every drained event."""
    def _run(text, chunk_size=None, section_index=0, start_block_index=0, settings=None, finish=False):
        streamer = BlockStreamer(section_index, start_block_index, settings)
        events = []
        for chunk in chunked(text, chunk_size) if chunk_size else [text]:
            streamer.feed(chunk)
            events.extend(streamer.drain())
        if finish:
            streamer.finish()
            events.extend(streamer.drain())
        return events
    return _run
