"""Unit tests for mapping/inline.py"""

import pytest

from pagestream import parse_inline_content


def _runs(text):
    return [node.to_dict() for node in parse_inline_content(text)]


def test_empty_string():
    """Empty input yields no runs at all."""
    assert parse_inline_content("") == []


def test_plain_text():
    """Text without markup is a single unmarked run."""
    assert _runs("Hello world") == [{"type": "text", "text": "Hello world"}]


def test_citation_run():
    """A trailing [N] becomes a citation-marked run."""
    assert _runs("Revenue grew 20% [1]") == [
        {"type": "text", "text": "Revenue grew 20% "},
        {"type": "text", "text": "[1]", "marks": [{"type": "citation", "attrs": {"citationIndex": 1}}]},
    ]


def test_mixed_formatting():
    """Bold, italic and citations interleave with plain runs."""
    runs = parse_inline_content("**Bold** and *italic* with [1]")
    assert [r.text for r in runs] == ["Bold", " and ", "italic", " with ", "[1]"]
    assert runs[0].marks[0].type == "bold"
    assert runs[1].marks is None
    assert runs[2].marks[0].type == "italic"
    assert runs[4].marks[0].type == "citation"


def test_code_span():
    """Backtick spans become code runs."""
    runs = parse_inline_content("Use `forEach` here")
    assert [r.text for r in runs] == ["Use ", "forEach", " here"]
    assert runs[1].marks[0].type == "code"


@pytest.mark.parametrize("text,index", [("See [12]", 12), ("See [007]", 7), ("[123456]", 123456)])
def test_multi_digit_citations(text, index):
    """Citation indices are parsed as whole integers."""
    run = parse_inline_content(text)[-1]
    assert run.marks[0].attrs == {"citationIndex": index}


def test_multiple_citations():
    """Each marker gets its own run."""
    runs = parse_inline_content("Fact [1] and fact [2][3]")
    assert [r.marks[0].attrs["citationIndex"] for r in runs if r.marks] == [1, 2, 3]


@pytest.mark.parametrize("text", [
    "[a]", "[1a]", "[]", "[ 1]", "a ** b", "lone * star", "`unclosed", "**",
])
def test_unmatched_delimiters_stay_literal(text):
    """Unmatched or non-numeric markup is left as plain text."""
    assert _runs(text) == [{"type": "text", "text": text}]


def test_one_mark_per_run():
    """Every run carries at most one mark."""
    runs = parse_inline_content("**a** *b* `c` [4] d")
    assert all(r.marks is None or len(r.marks) == 1 for r in runs)
    assert "".join(r.text for r in runs) == "a b c [4] d"
