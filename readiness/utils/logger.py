"""
Logging for the readiness assessment.

Modules call get_logger(__name__). The CLI calls setup_logger('readiness')
once so every module logger under the package shares one console handler.
Level names are coloured only when the handler writes to a terminal, which
keeps redirected runs and CI logs free of escape codes.
"""

import copy
import logging
import sys
from typing import IO, Optional

from readiness.config import COLOUR_RESET, DATE_FORMAT, LEVEL_COLOURS, LOG_FORMAT


class LevelColourFormatter(logging.Formatter):
    """Paints the level name with its LEVEL_COLOURS entry when *colour* is on."""

    def __init__(self, fmt: str = LOG_FORMAT, datefmt: str = DATE_FORMAT, colour: bool = True):
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.colour = colour

    def format(self, record):
        if not self.colour or record.levelno not in LEVEL_COLOURS:
            return super().format(record)
        # Other handlers share the record; they must see the plain name
        painted = copy.copy(record)
        painted.levelname = f"{LEVEL_COLOURS[record.levelno]}{record.levelname}{COLOUR_RESET}"
        return super().format(painted)


def _is_terminal(stream) -> bool:
    isatty = getattr(stream, 'isatty', None)
    return bool(isatty and isatty())


def setup_logger(name: str, verbose: bool = False, stream: Optional[IO[str]] = None) -> logging.Logger:
    """
    Attach a console handler to *name* and set its level.

    Calling it again only adjusts the level of the existing handler(s).

    Args:
        name: Logger name; the package name so module loggers inherit it
        verbose: DEBUG when True, INFO otherwise
        stream: Output stream (default sys.stdout)
    """
    logger = logging.getLogger(name)
    level = logging.DEBUG if verbose else logging.INFO
    logger.setLevel(level)

    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    stream = stream if stream is not None else sys.stdout
    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    handler.setFormatter(LevelColourFormatter(colour=_is_terminal(stream)))
    logger.addHandler(handler)
    return logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
