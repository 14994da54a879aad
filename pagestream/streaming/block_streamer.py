"""
Block Streamer: Parses a streaming JSON array of blocks into block events.

This module handles the challenge of rendering a generated page section
while the model is still writing it. The model outputs a JSON array of
block objects; text arrives in chunks that split JSON tokens arbitrarily.

Key Features:
- Resumable scanning: fed text is scanned once, partial tokens wait for more
- Incremental string decoding, including split \\uXXXX escapes and surrogate pairs
- Brace/bracket depth tracking that ignores characters inside strings
- Per-kind policy: streamed text, synthetic list text, or atomic blocks
- Malformed or truncated blocks reported as block_error, scoped to one block
"""

import json
import re
from enum import Enum
from typing import List, Dict, Any, Optional, Union

from pagestream.blocks.block_schema import (
    DEFAULT_CALLOUT_EMOJI,
    DEFAULT_HEADING_LEVEL,
    BlockPayload,
    BulletListBlock,
    OrderedListBlock,
    TaskListBlock,
    BlockStartEvent,
    ContentDeltaEvent,
    BlockEndEvent,
    BlockEvent,
    BlockErrorEvent,
    parse_block,
)
from pagestream.config import Settings
from pagestream.errors import MalformedBlockError
from pagestream.log import get_logger
from pagestream.streaming.classifier import (
    PRIMARY_TEXT_FIELD,
    StreamPolicy,
    classify_block_kind,
)

log = get_logger(__name__)

StreamEventType = Union[
    BlockStartEvent, ContentDeltaEvent, BlockEndEvent, BlockEvent, BlockErrorEvent
]

# Runs of characters that need no special handling
_STRING_RUN = re.compile(r'[^"\\]+')
_NESTED_RUN = re.compile(r'[^"{}\[\]]+')

_WHITESPACE = " \t\r\n"
_LITERAL_END = " \t\r\n,}]"

_SIMPLE_ESCAPES = {
    '"': '"',
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}

# Top-level fields captured as they stream, before the object closes
_ATTR_FIELDS = ("level", "emoji", "language")


class _State(Enum):
    AWAIT_ARRAY = "await_array"
    AWAIT_ELEMENT = "await_element"
    IN_OBJECT = "in_object"
    CLOSED = "closed"


class _Expect(Enum):
    KEY = "key"
    COLON = "colon"
    VALUE = "value"
    COMMA = "comma"


def synthesize_list_text(block: Union[BlockPayload, Dict[str, Any]]) -> str:
    """
    Render a list block as plain text for the single synthetic delta.

    Example:
        >>> synthesize_list_text({"type": "orderedList", "items": ["a", "b"]})
        '1. a\\n2. b'
    """
    block = parse_block(block)
    if isinstance(block, BulletListBlock):
        return "\n".join(f"- {item}" for item in block.items)
    if isinstance(block, OrderedListBlock):
        return "\n".join(f"{i}. {item}" for i, item in enumerate(block.items, 1))
    if isinstance(block, TaskListBlock):
        return "\n".join(
            f"{'[x]' if task.checked else '[ ]'} {task.text}" for task in block.tasks
        )
    return ""


class BlockStreamer:
    """
    Turns a chunked JSON array of blocks into ordered block events.

    One instance per stream (e.g. per page section); not thread-safe.

    Handles:
    - Streamable kinds: block_start, content_delta (one per feed), block_end
    - List kinds: block_start, one synthesized content_delta, block_end
    - Atomic kinds (table, database, unknown): a single block event

    Example:
        >>> streamer = BlockStreamer(section_index=0, start_block_index=0)
        >>> streamer.feed('[{"type": "paragraph", "con')
        >>> [e.type for e in streamer.drain()]
        ['block_start']
        >>> streamer.feed('tent": "Hello"}]')
        >>> [e.type for e in streamer.drain()]
        ['content_delta', 'block_end']
    """

    def __init__(
        self,
        section_index: int,
        start_block_index: int = 0,
        settings: Optional[Settings] = None,
    ):
        self._section_index = section_index
        self._block_index = start_block_index
        self.settings = settings or Settings()

        self._buffer = ""
        self._pos = 0
        self._state = _State.AWAIT_ARRAY
        self._events: List[StreamEventType] = []
        self._noise_logged = False
        self._finished = False

        self._reset_object()

    # =========================================================================
    # Public API
    # =========================================================================

    @property
    def section_index(self) -> int:
        return self._section_index

    @property
    def next_block_index(self) -> int:
        """Index the next array element will receive."""
        return self._block_index

    @property
    def closed(self) -> bool:
        """True once the array's closing bracket (or finish()) was seen."""
        return self._state is _State.CLOSED

    def feed(self, text: str) -> None:
        """
        Append a chunk of model output and scan it.

        Args:
            text: Raw chunk; any length, split anywhere
        """
        if not text:
            return
        if self._state is _State.CLOSED:
            log.debug("Ignoring %d chars fed after the block array closed", len(text))
            return

        self._buffer += text
        self._scan()
        self._flush_delta()
        self._compact()

    def drain(self) -> List[StreamEventType]:
        """
        Return and clear all events queued since the last drain.

        Returns:
            List of events in emission order (empty if none pending)
        """
        events = self._events
        self._events = []
        return events

    def finish(self) -> None:
        """
        End-of-stream bookkeeping.

        Reports a block left open by a truncated stream as a partial
        block_error, and logs when the array never opened or never closed.
        """
        if self._finished:
            return
        self._finished = True

        if self._state is _State.IN_OBJECT:
            self._flush_delta()
            raw = self._buffer[self._obj_start:]
            self._emit_error(
                "Stream ended before block was complete", raw, partial=True
            )
            self._advance_block()
        elif self._state is _State.AWAIT_ARRAY:
            log.warning("Section %d: stream ended without a block array", self._section_index)
        elif self._state is _State.AWAIT_ELEMENT:
            log.warning("Section %d: block array was never closed", self._section_index)

        self._state = _State.CLOSED
        self._buffer = ""
        self._pos = 0

    # =========================================================================
    # Scanner
    # =========================================================================

    def _scan(self) -> None:
        buf = self._buffer
        end = len(buf)

        while self._pos < end:
            state = self._state

            if state is _State.IN_OBJECT:
                self._scan_object(buf, end)
                continue

            ch = buf[self._pos]
            self._pos += 1

            if state is _State.AWAIT_ARRAY:
                if ch == "[":
                    self._state = _State.AWAIT_ELEMENT
                elif ch not in _WHITESPACE:
                    self._note_noise(ch)
            elif state is _State.AWAIT_ELEMENT:
                if ch == "{":
                    self._start_object(self._pos - 1)
                elif ch == "]":
                    self._state = _State.CLOSED
                    log.debug("Section %d: block array closed", self._section_index)
                    return
                elif ch not in _WHITESPACE and ch != ",":
                    self._note_noise(ch)
            else:
                return

    def _scan_object(self, buf: str, end: int) -> None:
        """Consume object text until the object closes or the buffer runs out."""
        pos = self._pos

        while pos < end:
            if self._in_string:
                if self._escape is not None:
                    self._escape += buf[pos]
                    pos += 1
                    self._decode_escape()
                    continue

                m = _STRING_RUN.match(buf, pos)
                if m:
                    self._append_text(m.group())
                    pos = m.end()
                    continue

                ch = buf[pos]
                pos += 1
                if ch == "\\":
                    self._escape = ""
                else:
                    self._end_string()
                continue

            if self._depth > 1:
                m = _NESTED_RUN.match(buf, pos)
                if m:
                    pos = m.end()
                    continue
                ch = buf[pos]
                pos += 1
                if ch == '"':
                    self._begin_string(None)
                elif ch in "{[":
                    self._depth += 1
                elif ch in "}]":
                    self._depth -= 1
                    if self._depth == 1:
                        self._expect = _Expect.COMMA
                continue

            ch = buf[pos]

            if self._literal is not None:
                if ch not in _LITERAL_END:
                    self._literal.append(ch)
                    pos += 1
                    continue
                self._end_literal()

            pos += 1
            if ch in _WHITESPACE:
                continue

            if ch == "}":
                self._pos = pos
                self._close_object(pos)
                return

            expect = self._expect
            if ch == '"':
                if expect is _Expect.KEY:
                    self._begin_string(self._key_parts)
                elif expect is _Expect.VALUE:
                    self._begin_value_string()
                else:
                    self._begin_string(None)
            elif ch in "{[":
                self._depth += 1
                if expect is _Expect.VALUE:
                    self._expect = _Expect.COMMA
            elif ch == ":":
                if expect is _Expect.COLON:
                    self._expect = _Expect.VALUE
            elif ch == ",":
                if expect is _Expect.COMMA:
                    self._expect = _Expect.KEY
            elif expect is _Expect.VALUE and ch != "]":
                self._literal = [ch]
                self._expect = _Expect.COMMA

        self._pos = pos

    # =========================================================================
    # Strings and escapes
    # =========================================================================

    def _begin_string(self, sink: Optional[List[str]]) -> None:
        self._in_string = True
        self._sink = sink
        if sink is not None:
            sink.clear()

    def _begin_value_string(self) -> None:
        self._expect = _Expect.COMMA
        if self._key == PRIMARY_TEXT_FIELD and not self._content_taken:
            self._content_taken = True
            self._in_content = True
            self._in_string = True
            self._sink = self._pending_text
            return
        self._begin_string(self._value_parts)

    def _append_text(self, text: str) -> None:
        if self._sink is None:
            return
        if self._high_surrogate is not None:
            self._sink.append(chr(self._high_surrogate))
            self._high_surrogate = None
        self._sink.append(text)

    def _decode_escape(self) -> None:
        esc = self._escape
        if self._sink is None:
            # Only the character after the backslash matters when skipping
            self._escape = None
            return

        if esc[0] != "u":
            self._escape = None
            self._append_text(_SIMPLE_ESCAPES.get(esc, esc))
            return
        if len(esc) < 5:
            return

        self._escape = None
        try:
            code = int(esc[1:], 16)
        except ValueError:
            self._append_text("\\" + esc)
            return

        if 0xD800 <= code <= 0xDBFF:
            if self._high_surrogate is not None:
                self._sink.append(chr(self._high_surrogate))
            self._high_surrogate = code
        elif 0xDC00 <= code <= 0xDFFF and self._high_surrogate is not None:
            high = self._high_surrogate
            self._high_surrogate = None
            self._sink.append(chr(0x10000 + ((high - 0xD800) << 10) + (code - 0xDC00)))
        else:
            self._append_text(chr(code))

    def _end_string(self) -> None:
        if self._high_surrogate is not None and self._sink is not None:
            self._sink.append(chr(self._high_surrogate))
        self._high_surrogate = None
        self._in_string = False
        sink = self._sink
        self._sink = None

        if self._in_content:
            self._in_content = False
        elif sink is self._key_parts:
            self._key = "".join(sink)
            self._expect = _Expect.COLON
        elif sink is self._value_parts:
            self._assign(self._key, "".join(sink))

    def _end_literal(self) -> None:
        text = "".join(self._literal)
        self._literal = None
        try:
            value = json.loads(text)
        except ValueError:
            return
        self._assign(self._key, value)

    # =========================================================================
    # Block lifecycle
    # =========================================================================

    def _reset_object(self) -> None:
        self._obj_start = 0
        self._depth = 0
        self._expect = _Expect.KEY
        self._key = ""
        self._key_parts: List[str] = []
        self._value_parts: List[str] = []
        self._literal: Optional[List[str]] = None
        self._in_string = False
        self._sink: Optional[List[str]] = None
        self._escape: Optional[str] = None
        self._high_surrogate: Optional[int] = None

        self._kind: Any = None
        self._kind_known = False
        self._policy = StreamPolicy.ATOMIC
        self._attrs: Dict[str, Any] = {}
        self._started = False
        self._content_taken = False
        self._in_content = False
        self._pending_text: List[str] = []

    def _start_object(self, start: int) -> None:
        self._reset_object()
        self._state = _State.IN_OBJECT
        self._obj_start = start
        self._depth = 1

    def _assign(self, key: str, value: Any) -> None:
        if key == "type":
            if not self._kind_known:
                self._kind = value
                self._kind_known = True
                self._policy = classify_block_kind(value)
                if self._policy is not StreamPolicy.ATOMIC:
                    self._emit_start()
        elif key in _ATTR_FIELDS:
            self._attrs[key] = value

    def _start_attrs(self) -> Optional[Dict[str, Any]]:
        kind = self._kind
        if kind == "heading":
            level = self._attrs.get("level")
            if isinstance(level, str) and level.strip().isdigit():
                level = int(level)
            elif not isinstance(level, int) or isinstance(level, bool):
                level = DEFAULT_HEADING_LEVEL
            return {"level": level}
        if kind == "callout":
            emoji = self._attrs.get("emoji")
            if not isinstance(emoji, str) or not emoji:
                emoji = DEFAULT_CALLOUT_EMOJI
            return {"emoji": emoji}
        if kind == "codeBlock" and isinstance(self._attrs.get("language"), str):
            return {"language": self._attrs["language"]}
        return None

    def _emit_start(self) -> None:
        self._started = True
        self._events.append(BlockStartEvent(
            block_type=self._kind,
            block_index=self._block_index,
            section_index=self._section_index,
            attrs=self._start_attrs(),
        ))

    def _flush_delta(self) -> None:
        if not self._started or self._policy is not StreamPolicy.STREAMABLE:
            return
        if not self._pending_text:
            return
        text = "".join(self._pending_text)
        self._pending_text.clear()
        if text:
            self._events.append(ContentDeltaEvent(text=text, block_index=self._block_index))

    def _close_object(self, end: int) -> None:
        raw = self._buffer[self._obj_start:end]
        self._flush_delta()

        try:
            block = parse_block(self._decode_object(raw))
        except MalformedBlockError as e:
            self._emit_error(e.message, raw)
        else:
            self._emit_complete(block)

        self._advance_block()
        self._state = _State.AWAIT_ELEMENT

    def _decode_object(self, raw: str) -> Dict[str, Any]:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise MalformedBlockError(
                f"Invalid block JSON: {e.msg} (char {e.pos})",
                self._block_index,
                self._section_index,
                raw,
                e,
            ) from e
        if not isinstance(data, dict):
            raise MalformedBlockError(
                "Block is not a JSON object", self._block_index, self._section_index, raw
            )
        return data

    def _emit_complete(self, block: BlockPayload) -> None:
        policy = self._policy if self._kind_known else classify_block_kind(block.type)
        index = self._block_index

        if policy is StreamPolicy.ATOMIC:
            self._events.append(BlockEvent(
                block_index=index, section_index=self._section_index, block=block
            ))
        else:
            if not self._started:
                self._kind = block.type
                self._policy = policy
                self._emit_start()
            if policy is StreamPolicy.SYNTHETIC_LIST:
                text = synthesize_list_text(block)
                if text:
                    self._events.append(ContentDeltaEvent(text=text, block_index=index))
            self._events.append(BlockEndEvent(
                block_index=index, section_index=self._section_index, block=block
            ))
        log.debug(
            "Section %d: block %d (%s) complete as %s",
            self._section_index, index, block.type, policy.value,
        )

    def _emit_error(self, message: str, raw: str, partial: bool = False) -> None:
        log.warning(
            "Section %d: block %d failed: %s", self._section_index, self._block_index, message
        )
        self._events.append(BlockErrorEvent(
            block_index=self._block_index,
            section_index=self._section_index,
            message=message,
            raw=raw[: self.settings.error_preview_chars],
            partial=partial,
        ))

    def _advance_block(self) -> None:
        self._block_index += 1
        self._reset_object()

    # =========================================================================
    # Buffer management
    # =========================================================================

    def _note_noise(self, ch: str) -> None:
        if self.settings.strip_code_fences or self._noise_logged:
            return
        self._noise_logged = True
        log.warning(
            "Section %d: skipping unexpected %r outside block objects", self._section_index, ch
        )

    def _compact(self) -> None:
        """Drop buffer text that no future event can refer to."""
        cut = self._obj_start if self._state is _State.IN_OBJECT else self._pos
        if cut <= 0:
            return
        self._buffer = self._buffer[cut:]
        self._pos -= cut
        if self._state is _State.IN_OBJECT:
            self._obj_start = 0
