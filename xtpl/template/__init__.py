"""
Template syntax: scanner, placeholder parser and head resolution.
"""

from __future__ import annotations

from .lexer import TemplateLexer, iter_segments
from .nodes import EnvironmentRef, FilterCall, ParsedPlaceholder, VariableRef
from .parser import PlaceholderParser, parse_placeholder
from .resolver import EnvironmentView, HeadResolver, VariableTable
from .tokens import Segment, SegmentType

__all__ = [
    "TemplateLexer",
    "iter_segments",
    "Segment",
    "SegmentType",
    "PlaceholderParser",
    "parse_placeholder",
    "ParsedPlaceholder",
    "FilterCall",
    "VariableRef",
    "EnvironmentRef",
    "VariableTable",
    "EnvironmentView",
    "HeadResolver",
]
