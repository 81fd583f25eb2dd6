"""
Head resolution: supplies the initial value of a placeholder from the
caller's variables (``var.<name>``) or the environment (``env.<NAME>``).
"""

from __future__ import annotations

import os
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional

from .nodes import EnvironmentRef, Head, ParsedPlaceholder, VariableRef
from ..errors import ResolutionError


class VariableTable(Mapping[str, str]):
    """
    Read-only, case-sensitive name -> value mapping for one expansion run.

    The contents are copied on construction, so later changes to the source
    mapping do not leak into a running expansion.
    """

    def __init__(self, values: Optional[Mapping[str, str]] = None):
        data: Dict[str, str] = {}
        for key, value in (values or {}).items():
            if not isinstance(key, str) or not isinstance(value, str):
                raise TypeError(f"variable {key!r}: names and values must be strings")
            data[key] = value
        self._data = MappingProxyType(data)

    def __getitem__(self, key: str) -> str:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"VariableTable({dict(self._data)!r})"


def default_env_case_sensitive() -> bool:
    """Windows environments are case-insensitive, everything else is case-sensitive."""
    return os.name != "nt"


class EnvironmentView(Mapping[str, str]):
    """
    Read-only snapshot of environment variables.

    ``case_sensitive=None`` picks the platform convention
    (see ``default_env_case_sensitive``). With ``case_sensitive=False``
    names are compared case-insensitively; if the source holds several
    names differing only by case, the last one wins.
    """

    def __init__(self, environ: Optional[Mapping[str, str]] = None, *, case_sensitive: Optional[bool] = None):
        self.case_sensitive = default_env_case_sensitive() if case_sensitive is None else case_sensitive
        source = os.environ if environ is None else environ
        self._data: Dict[str, str] = dict(source)
        self._folded: Dict[str, str] = {}
        if not self.case_sensitive:
            self._folded = {k.upper(): v for k, v in self._data.items()}

    def __getitem__(self, key: str) -> str:
        if self.case_sensitive:
            return self._data[key]
        return self._folded[key.upper()]

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        if self.case_sensitive:
            return key in self._data
        return key.upper() in self._folded

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)


class HeadResolver:
    """Looks up the value named by a placeholder head."""

    def __init__(self, variables: Mapping[str, str], environment: Mapping[str, str]):
        self.variables = variables
        self.environment = environment

    def resolve(self, placeholder: ParsedPlaceholder) -> str:
        """
        Raises:
            ResolutionError: If the variable or environment variable is not defined
        """
        head: Head = placeholder.head
        if isinstance(head, VariableRef):
            if head.name not in self.variables:
                raise ResolutionError(
                    f"undefined variable '{head.name}'",
                    position=placeholder.head_position,
                    snippet=str(head),
                )
            return self.variables[head.name]
        if isinstance(head, EnvironmentRef):
            if head.name not in self.environment:
                raise ResolutionError(
                    f"undefined environment variable '{head.name}'",
                    position=placeholder.head_position,
                    snippet=str(head),
                )
            return self.environment[head.name]
        raise TypeError(f"unsupported placeholder head: {head!r}")


__all__ = ["VariableTable", "EnvironmentView", "HeadResolver", "default_env_case_sensitive"]
