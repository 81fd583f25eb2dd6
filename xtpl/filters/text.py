"""
Plain text filters: case, whitespace, literal edits, substitution, fallback.
"""

from __future__ import annotations

from typing import List

from .registry import FilterSpec, text_filter

# Whitespace set shared with the placeholder parser
_WS = " \t\r\n"


def _lower(text: str) -> str:
    return text.lower()


def _upper(text: str) -> str:
    return text.upper()


def _trim(text: str) -> str:
    return text.strip(_WS)


def _append(text: str, suffix: str) -> str:
    return text + suffix


def _prepend(text: str, prefix: str) -> str:
    return prefix + text


def _replace(text: str, old: str, new: str) -> str:
    # str.replace("") would insert `new` between every character
    if not old:
        return text
    return text.replace(old, new)


def _default(text: str, fallback: str) -> str:
    return text if text else fallback


def get_filters() -> List[FilterSpec]:
    return [
        FilterSpec("lower", text_filter(_lower), "case", "Lower-case the text"),
        FilterSpec("upper", text_filter(_upper), "case", "Upper-case the text"),
        FilterSpec("trim", text_filter(_trim), "whitespace", "Strip leading and trailing space, tab, CR, LF"),
        FilterSpec("append", text_filter(_append), "edit", "Add text after the value", args=("text",)),
        FilterSpec("prepend", text_filter(_prepend), "edit", "Add text before the value", args=("text",)),
        FilterSpec(
            "replace", text_filter(_replace), "edit",
            "Replace every occurrence of <old> with <new>",
            args=("old", "new"),
        ),
        FilterSpec("default", text_filter(_default), "edit", "Use <fallback> when the value is empty", args=("fallback",)),
    ]


__all__ = ["get_filters"]
