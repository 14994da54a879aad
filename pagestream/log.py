"""Package-wide logging helpers.

Installs a NullHandler on the package logger so applications that never
configure logging see no warnings, and offers a small helper for wiring a
stream handler at runtime.
"""

import logging
import sys
from typing import Optional, Union

__all__ = [
    "PACKAGE_LOGGER_NAME",
    "get_logger",
    "configure_logging",
]

PACKAGE_LOGGER_NAME = "pagestream"

logging.getLogger(PACKAGE_LOGGER_NAME).addHandler(logging.NullHandler())


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger scoped to pagestream (the package logger by default)."""
    return logging.getLogger(name or PACKAGE_LOGGER_NAME)


def configure_logging(
    *,
    level: Union[int, str] = logging.INFO,
    stream=None,
    fmt: Optional[str] = None,
    propagate: bool = True,
) -> logging.Logger:
    """
    Attach a single StreamHandler to the package logger.

    Args:
        level: Logging level or level name
        stream: Target stream; defaults to sys.stderr
        fmt: Log format string
        propagate: Whether records bubble up to the root logger (pytest's
            caplog relies on this)

    Returns:
        The configured package logger
    """
    logger = get_logger()
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(level)
    logger.propagate = propagate

    for handler in list(logger.handlers):
        if not isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(
        logging.Formatter(fmt or "%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    logger.addHandler(handler)
    return logger
