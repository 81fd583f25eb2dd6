"""
Filter catalogue for placeholder pipelines.
"""

from __future__ import annotations

from .registry import FilterArgumentError, FilterRegistry, FilterSpec, create_default_registry
from .values import FilterValue, ValueKind

__all__ = [
    "FilterArgumentError",
    "FilterRegistry",
    "FilterSpec",
    "FilterValue",
    "ValueKind",
    "create_default_registry",
]
