"""Logging setup for the command line.

The library only creates module loggers under ``semantium``; applications
decide where records go. ``setup_logging`` is what the CLI uses.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

LOGGER_NAME = "semantium"
_HANDLER_NAME = "semantium-cli"


def setup_logging(level: str = "WARNING", stream: TextIO | None = None) -> logging.Logger:
    numeric_level = getattr(logging, str(level).upper(), logging.WARNING)
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if handler.get_name() == _HANDLER_NAME:
            logger.removeHandler(handler)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter("%(levelname)-8s | %(name)s | %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(numeric_level)
    return logger
