"""Structured logging setup for cal-nlp.

Uses the same pipe-separated line format everywhere so parse-path
decisions (generative vs. rule-based) are easy to grep.
"""

from __future__ import annotations

import logging
import sys

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Marks the handler we attach so repeated setup calls stay idempotent.
_HANDLER_ATTR = "_cal_nlp_log_handler"


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger with the cal-nlp formatter.

    Attaches a :class:`logging.StreamHandler` on *stderr*.  Calling this
    more than once only updates the level of the existing handler.

    Args:
        level: A standard logging level name (e.g. ``"DEBUG"``).

    Raises:
        ValueError: If *level* is not a recognised logging level string.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level!r}")

    root = logging.getLogger()
    root.setLevel(numeric_level)

    for handler in root.handlers:
        if getattr(handler, _HANDLER_ATTR, False):
            handler.setLevel(numeric_level)
            return

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))

    setattr(handler, _HANDLER_ATTR, True)
    root.addHandler(handler)
