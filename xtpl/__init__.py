"""
expand-template: {{ var.NAME | filter:arg }} placeholder expansion.
"""

from __future__ import annotations

from .engine import TemplateProcessor, expand_template
from .errors import (
    FilterError,
    OutputKindError,
    ResolutionError,
    TemplateError,
    TemplateSyntaxError,
    XtplUserError,
)
from .template.resolver import EnvironmentView, VariableTable
from .types import ExpandOptions

__all__ = [
    "TemplateProcessor",
    "expand_template",
    "ExpandOptions",
    "VariableTable",
    "EnvironmentView",
    "XtplUserError",
    "TemplateError",
    "TemplateSyntaxError",
    "ResolutionError",
    "FilterError",
    "OutputKindError",
]
