"""
Base exception for user-facing errors and the template error taxonomy.

All expected errors that should be displayed to the user
as clean messages (without stack traces) must inherit from XtplUserError.

Programming errors and bugs should NOT inherit from XtplUserError:
they will propagate with full tracebacks.
"""

from __future__ import annotations

from typing import Optional


class XtplUserError(Exception):
    """
    Base class for all user-facing errors in expand-template.

    These errors indicate problems that the user can fix:
    template syntax, undefined variables, bad filter arguments,
    configuration issues.
    """
    pass


class ConfigError(XtplUserError):
    """Invalid xtpl.yaml, variables file or command-line variable."""
    pass


class TemplateError(XtplUserError):
    """
    An error tied to a location in the template text.

    ``position`` is the absolute character offset in the template.
    ``line``/``column`` are 1-based and are filled in by the processor
    once the error is bound to its template (see ``bind_source``).
    """

    kind = "template error"

    def __init__(self, message: str, *, position: int, snippet: str = ""):
        super().__init__(message)
        self.message = message
        self.position = position
        self.snippet = snippet
        self.line: Optional[int] = None
        self.column: Optional[int] = None
        self.template_name: str = ""

    def bind_source(self, text: str, template_name: str = "") -> "TemplateError":
        """Computes line and column of ``position`` within ``text``."""
        pos = max(0, min(self.position, len(text)))
        self.line = text.count("\n", 0, pos) + 1
        self.column = pos - (text.rfind("\n", 0, pos) + 1) + 1
        self.template_name = template_name
        return self

    def location(self) -> str:
        where = f"offset {self.position}"
        if self.line is not None:
            where = f"{self.line}:{self.column} ({where})"
        if self.template_name:
            where = f"{self.template_name}:{where}"
        return where

    def __str__(self) -> str:
        text = f"{self.kind}: {self.message} at {self.location()}"
        if self.snippet:
            text += f": {_clip(self.snippet)!r}"
        return text


class TemplateSyntaxError(TemplateError):
    """Malformed template or placeholder."""
    kind = "parse error"


class ResolutionError(TemplateError):
    """Placeholder head refers to an undefined variable or environment variable."""
    kind = "resolution error"


class FilterError(TemplateError):
    """Unknown filter, bad filter argument or filter applied to the wrong value kind."""
    kind = "filter error"

    def __init__(self, message: str, *, position: int, snippet: str = "", filter_name: str = ""):
        super().__init__(message, position=position, snippet=snippet)
        self.filter_name = filter_name


class OutputKindError(TemplateError):
    """Placeholder pipeline ended with binary data instead of text."""
    kind = "output error"


def _clip(snippet: str, limit: int = 60) -> str:
    return snippet if len(snippet) <= limit else snippet[: limit - 3] + "..."


__all__ = [
    "XtplUserError",
    "ConfigError",
    "TemplateError",
    "TemplateSyntaxError",
    "ResolutionError",
    "FilterError",
    "OutputKindError",
]
