"""Citation helpers for generated blocks."""

from .block_utils import extract_citations_from_text, collect_block_citations

__all__ = ["extract_citations_from_text", "collect_block_citations"]
