"""
Inline Content Parser: splits block text into marked text runs.

Supported syntax, matched left to right with this precedence:
    **bold**
    *italic*
    `code`
    [N] citation marker (N = one or more digits)

Unmatched delimiters stay literal. Marks are applied to complete text
only, never to partial streamed deltas.
"""

import re
from typing import List, Optional

from pagestream.blocks.block_schema import DocumentNode, InlineMark


INLINE_PATTERN = re.compile(
    r"(\*\*(?P<bold>.+?)\*\*)"
    r"|(\*(?P<italic>[^*]+?)\*)"
    r"|(`(?P<code>[^`]+?)`)"
    r"|(?P<citation>\[(?P<index>\d+)\])"
)


def text_node(text: str, mark: Optional[InlineMark] = None) -> DocumentNode:
    return DocumentNode(type="text", text=text, marks=[mark] if mark is not None else None)


def parse_inline_content(text: str) -> List[DocumentNode]:
    """
    Parse a string with inline formatting into text nodes.

    Args:
        text: Complete block text

    Returns:
        Ordered text runs; each is unmarked or carries exactly one mark.
        Empty input gives an empty list.

    Example:
        >>> [n.text for n in parse_inline_content("Revenue grew 20% [1]")]
        ['Revenue grew 20% ', '[1]']
    """
    if not text:
        return []

    nodes: List[DocumentNode] = []
    last = 0
    for match in INLINE_PATTERN.finditer(text):
        if match.start() > last:
            nodes.append(text_node(text[last:match.start()]))

        if match.group("bold") is not None:
            nodes.append(text_node(match.group("bold"), InlineMark(type="bold")))
        elif match.group("italic") is not None:
            nodes.append(text_node(match.group("italic"), InlineMark(type="italic")))
        elif match.group("code") is not None:
            nodes.append(text_node(match.group("code"), InlineMark(type="code")))
        else:
            nodes.append(text_node(
                match.group("citation"),
                InlineMark(type="citation", attrs={"citationIndex": int(match.group("index"))}),
            ))
        last = match.end()

    if last < len(text):
        nodes.append(text_node(text[last:]))
    return nodes
