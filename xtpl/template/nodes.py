"""
Parsed placeholder structure.

A placeholder is a head reference followed by an ordered pipeline of
filter calls. All nodes are immutable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple, Union


@dataclass(frozen=True)
class VariableRef:
    """``var.<name>``: a caller-supplied variable."""
    name: str

    def __str__(self) -> str:
        return f"var.{self.name}"


@dataclass(frozen=True)
class EnvironmentRef:
    """``env.<NAME>``: a process environment variable."""
    name: str

    def __str__(self) -> str:
        return f"env.{self.name}"


Head = Union[VariableRef, EnvironmentRef]


@dataclass(frozen=True)
class FilterCall:
    """One pipeline stage: filter name, literal arguments and source offset of the name."""
    name: str
    args: Tuple[str, ...] = ()
    position: int = 0


@dataclass(frozen=True)
class ParsedPlaceholder:
    """
    Structured content of one ``{{ ... }}`` span.

    ``position`` is the offset of the opening marker; ``head_position``
    the offset of the head token.
    """
    head: Head
    pipeline: Tuple[FilterCall, ...] = field(default_factory=tuple)
    position: int = 0
    head_position: int = 0


__all__ = ["VariableRef", "EnvironmentRef", "Head", "FilterCall", "ParsedPlaceholder"]
