"""
Filter registry.

A fixed table of named, pure transformations. Each filter module exposes
``get_filters()`` returning its FilterSpec list; ``create_default_registry()``
collects the whole catalogue. Registries are filled once and then only read,
so a single instance can be shared between expansion calls and threads.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Literal, Optional, Sequence, Tuple

from .values import FilterValue, ValueKind
from ..errors import FilterError
from ..template.nodes import FilterCall

logger = logging.getLogger(__name__)

InputKind = Literal["text", "bytes", "any"]
FilterFunc = Callable[[FilterValue, Tuple[str, ...]], FilterValue]


class FilterArgumentError(ValueError):
    """
    Raised by filter functions for a malformed argument or input.

    The registry turns it into a positioned FilterError.
    """

    def __init__(self, reason: str, argument: Optional[str] = None):
        super().__init__(reason)
        self.reason = reason
        self.argument = argument


@dataclass(frozen=True)
class FilterSpec:
    """Registration record of one filter."""
    name: str
    func: FilterFunc
    category: str
    summary: str = ""
    args: Tuple[str, ...] = ()          # argument names, for arity and help
    optional_args: int = 0              # trailing args that may be omitted
    accepts: InputKind = "text"

    @property
    def min_args(self) -> int:
        return len(self.args) - self.optional_args

    @property
    def max_args(self) -> int:
        return len(self.args)

    def usage(self) -> str:
        parts = [self.name]
        for i, arg in enumerate(self.args):
            optional = i >= self.min_args
            parts.append(f"[<{arg}>]" if optional else f"<{arg}>")
        return ":".join(parts)


def text_filter(fn: Callable[..., str]) -> FilterFunc:
    """Adapts ``fn(text, *args) -> str`` to the FilterValue calling convention."""
    def wrapper(value: FilterValue, args: Tuple[str, ...]) -> FilterValue:
        return FilterValue.text(fn(value.as_text(), *args))
    wrapper.__name__ = getattr(fn, "__name__", "text_filter")
    wrapper.__doc__ = fn.__doc__
    return wrapper


class FilterRegistry:
    """
    Name -> FilterSpec table plus the pipeline runner.
    """

    def __init__(self, specs: Iterable[FilterSpec] = ()):
        self._filters: Dict[str, FilterSpec] = {}
        for spec in specs:
            self.register(spec)

    def register(self, spec: FilterSpec) -> None:
        """
        Raises:
            ValueError: If a filter with this name is already registered
        """
        if spec.name in self._filters:
            raise ValueError(f"Filter '{spec.name}' already registered")
        self._filters[spec.name] = spec

    def get(self, name: str) -> Optional[FilterSpec]:
        return self._filters.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self._filters

    def __len__(self) -> int:
        return len(self._filters)

    def specs(self) -> List[FilterSpec]:
        return sorted(self._filters.values(), key=lambda s: (s.category, s.name))

    def names(self) -> List[str]:
        return sorted(self._filters)

    def apply(self, call: FilterCall, value: FilterValue) -> FilterValue:
        """
        Applies one pipeline stage.

        Raises:
            FilterError: Unknown filter, wrong argument count, wrong input kind
                or malformed argument/input
        """
        spec = self._filters.get(call.name)
        if spec is None:
            raise FilterError(
                f"unknown filter '{call.name}'",
                position=call.position,
                snippet=call.name,
                filter_name=call.name,
            )

        if not spec.min_args <= len(call.args) <= spec.max_args:
            expected = (
                str(spec.min_args) if spec.min_args == spec.max_args
                else f"{spec.min_args} to {spec.max_args}"
            )
            raise FilterError(
                f"filter '{call.name}' takes {expected} argument(s), got {len(call.args)} (usage: {spec.usage()})",
                position=call.position,
                snippet=":".join((call.name,) + call.args),
                filter_name=call.name,
            )

        if spec.accepts == "text" and value.kind is ValueKind.BYTES:
            raise FilterError(
                f"filter '{call.name}' expects text but received binary data; "
                f"convert it first (e.g. '| utf8' or '| base64')",
                position=call.position,
                snippet=call.name,
                filter_name=call.name,
            )
        if spec.accepts == "bytes" and value.kind is ValueKind.TEXT:
            raise FilterError(
                f"filter '{call.name}' expects binary data but received text; "
                f"decode it first (e.g. '| frombase64' or '| encode:utf-8')",
                position=call.position,
                snippet=call.name,
                filter_name=call.name,
            )

        try:
            return spec.func(value, call.args)
        except FilterArgumentError as e:
            detail = f" (argument {e.argument!r})" if e.argument is not None else ""
            raise FilterError(
                f"filter '{call.name}' failed{detail}: {e.reason}",
                position=call.position,
                snippet=":".join((call.name,) + call.args),
                filter_name=call.name,
            ) from e

    def run_pipeline(self, pipeline: Sequence[FilterCall], value: FilterValue) -> FilterValue:
        for call in pipeline:
            value = self.apply(call, value)
            logger.debug("filter %s -> %s", call.name, value.kind.value)
        return value


def create_default_registry() -> FilterRegistry:
    """Registry with the complete built-in catalogue."""
    from . import binary, encoding, escapes, paths, text

    registry = FilterRegistry()
    for module in (text, paths, encoding, escapes, binary):
        for spec in module.get_filters():
            registry.register(spec)
    return registry


__all__ = [
    "InputKind",
    "FilterFunc",
    "FilterArgumentError",
    "FilterSpec",
    "FilterRegistry",
    "text_filter",
    "create_default_registry",
]
