"""Exceptions raised inside pagestream."""

from typing import Optional


class PageStreamError(Exception):
    """Base class for pagestream errors."""


class MalformedBlockError(PageStreamError, ValueError):
    """A completed array element that is not a valid JSON object."""

    def __init__(
        self,
        message: str,
        block_index: int,
        section_index: int,
        raw: str = "",
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.block_index = block_index
        self.section_index = section_index
        self.raw = raw
        self.cause = cause
