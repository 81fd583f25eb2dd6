"""
Scanner output types.

The scanner does not build a full token stream: it splits the template
into literal runs and raw placeholder spans, leaving the interior of
each placeholder to the placeholder parser.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class SegmentType(enum.Enum):
    """Kinds of segments produced by the scanner."""
    LITERAL = "LITERAL"
    PLACEHOLDER = "PLACEHOLDER"


@dataclass(frozen=True)
class Segment:
    """
    A piece of template text with positional information for diagnostics.

    For LITERAL segments ``value`` is the text to emit (escapes already
    applied). For PLACEHOLDER segments ``value`` is the raw interior between
    ``{{`` and ``}}`` and ``interior_position`` is the offset of its first
    character.
    """
    type: SegmentType
    value: str
    position: int        # Offset of the segment start in the source
    line: int            # 1-based
    column: int          # 1-based
    interior_position: int = -1

    @property
    def is_placeholder(self) -> bool:
        return self.type is SegmentType.PLACEHOLDER

    def __repr__(self) -> str:
        return f"Segment({self.type.name}, {self.value!r}, {self.line}:{self.column})"


__all__ = ["SegmentType", "Segment"]
