from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

DEFAULT_ENCODING = "utf-8"
DEFAULT_INPUT_ENCODING = "utf-8-sig"  # tolerate a BOM on input


@dataclass(frozen=True)
class ExpandOptions:
    """
    Per-call settings of the expansion engine.

    Diagnostics go to ``logger`` only; the engine never configures
    logging itself, so the caller decides level and sink.
    """
    input_encoding: str = DEFAULT_INPUT_ENCODING
    output_encoding: str = DEFAULT_ENCODING
    # None: platform convention (case-insensitive on Windows)
    env_case_sensitive: Optional[bool] = None
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("xtpl"))
