from __future__ import annotations

import logging
import os
import sys
from typing import Optional, TextIO

_LOG = logging.getLogger("xtpl")


def configure_logging(verbosity: int = 0, stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Sets up the ``xtpl`` logger for command-line use.

    0 -> WARNING, 1 -> INFO, 2+ (or XTPL_DEBUG=1) -> DEBUG. Messages go to
    stderr so that stdout stays clean for expanded text and JSON.
    """
    if os.environ.get("XTPL_DEBUG"):
        verbosity = max(verbosity, 2)
    level = logging.WARNING if verbosity <= 0 else logging.INFO if verbosity == 1 else logging.DEBUG
    _LOG.setLevel(level)
    if not _LOG.handlers:
        h = logging.StreamHandler(stream or sys.stderr)
        fmt = logging.Formatter("[%(levelname)s] %(message)s")
        h.setFormatter(fmt)
        _LOG.addHandler(h)
        _LOG.propagate = False
    return _LOG


__all__ = ["configure_logging"]
