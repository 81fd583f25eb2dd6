"""
Calling single filters outside of a template.
"""

from __future__ import annotations

from typing import Union

from xtpl.filters.registry import FilterRegistry
from xtpl.filters.values import FilterValue
from xtpl.template.nodes import FilterCall


def apply_filter(registry: FilterRegistry, name: str, value: Union[str, bytes], *args: str) -> FilterValue:
    """Runs one filter; ``value`` is text for str and binary for bytes."""
    fv = FilterValue.binary(value) if isinstance(value, bytes) else FilterValue.text(value)
    return registry.apply(FilterCall(name=name, args=tuple(args), position=0), fv)
