"""
String-literal escapes for C#, Java and C.

Escaping produces text that can be pasted between double quotes in the
target language; unescaping accepts everything the language accepts in a
regular string literal and rejects unknown escape sequences.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Tuple

from .registry import FilterArgumentError, FilterSpec, text_filter

NumericRule = Tuple["re.Pattern[str]", int]


@dataclass(frozen=True)
class _Dialect:
    name: str
    escapes: Dict[str, str]                 # char -> escape sequence
    unescapes: Dict[str, str]               # char after '\' -> char
    numeric: Tuple[NumericRule, ...]        # patterns matched after '\'
    fallback: Callable[[int], str]          # escape for other control chars
    is_special: Callable[[int], bool] = lambda cp: cp < 0x20 or cp == 0x7F


def _escape(text: str, dialect: _Dialect) -> str:
    out: List[str] = []
    for ch in text:
        esc = dialect.escapes.get(ch)
        if esc is not None:
            out.append(esc)
        elif dialect.is_special(ord(ch)):
            out.append(dialect.fallback(ord(ch)))
        else:
            out.append(ch)
    return "".join(out)


def _unescape(text: str, dialect: _Dialect) -> str:
    out: List[str] = []
    i = 0
    n = len(text)
    while True:
        j = text.find("\\", i)
        if j < 0:
            out.append(text[i:])
            break
        out.append(text[i:j])
        if j + 1 >= n:
            raise FilterArgumentError(f"dangling backslash at end of {dialect.name} string")
        ch = text[j + 1]
        simple = dialect.unescapes.get(ch)
        if simple is not None:
            out.append(simple)
            i = j + 2
            continue
        for pattern, base in dialect.numeric:
            m = pattern.match(text, j + 1)
            if m:
                code = int(m.group(1), base)
                if code > 0x10FFFF:
                    raise FilterArgumentError(f"{dialect.name} escape out of range at index {j}: {m.group(0)!r}")
                out.append(chr(code))
                i = m.end()
                break
        else:
            raise FilterArgumentError(f"invalid {dialect.name} escape sequence '\\{ch}' at index {j}")
    return _join_surrogates("".join(out))


def _join_surrogates(text: str) -> str:
    """Merges UTF-16 surrogate pairs produced by \\uXXXX\\uXXXX escapes."""
    if not any(0xD800 <= ord(c) <= 0xDFFF for c in text):
        return text
    return text.encode("utf-16-le", "surrogatepass").decode("utf-16-le", "surrogatepass")


def _u4(cp: int) -> str:
    return "\\u%04x" % cp


def _octal(cp: int) -> str:
    return "\\%03o" % cp


_HEX4 = re.compile(r"u([0-9A-Fa-f]{4})")
_HEX8 = re.compile(r"U([0-9A-Fa-f]{8})")

CSHARP = _Dialect(
    name="C#",
    escapes={
        "\\": "\\\\", '"': '\\"', "\0": "\\0", "\a": "\\a", "\b": "\\b",
        "\f": "\\f", "\n": "\\n", "\r": "\\r", "\t": "\\t", "\v": "\\v",
    },
    unescapes={
        "\\": "\\", '"': '"', "'": "'", "0": "\0", "a": "\a", "b": "\b",
        "f": "\f", "n": "\n", "r": "\r", "t": "\t", "v": "\v", "e": "\x1b",
    },
    numeric=(
        (_HEX4, 16),
        (_HEX8, 16),
        (re.compile(r"x([0-9A-Fa-f]{1,4})"), 16),
    ),
    fallback=_u4,
    # NEL and the Unicode line/paragraph separators end a C# line too
    is_special=lambda cp: cp < 0x20 or cp == 0x7F or cp in (0x85, 0x2028, 0x2029),
)

JAVA = _Dialect(
    name="Java",
    escapes={
        "\\": "\\\\", '"': '\\"', "\b": "\\b", "\f": "\\f",
        "\n": "\\n", "\r": "\\r", "\t": "\\t",
    },
    unescapes={
        "\\": "\\", '"': '"', "'": "'", "b": "\b", "f": "\f",
        "n": "\n", "r": "\r", "t": "\t", "s": " ",
    },
    numeric=(
        (re.compile(r"u+([0-9A-Fa-f]{4})"), 16),
        (re.compile(r"([0-3][0-7]{0,2}|[4-7][0-7]?)"), 8),
    ),
    fallback=_u4,
)

C = _Dialect(
    name="C",
    escapes={
        "\\": "\\\\", '"': '\\"', "\a": "\\a", "\b": "\\b", "\f": "\\f",
        "\n": "\\n", "\r": "\\r", "\t": "\\t", "\v": "\\v",
    },
    unescapes={
        "\\": "\\", '"': '"', "'": "'", "?": "?", "a": "\a", "b": "\b",
        "f": "\f", "n": "\n", "r": "\r", "t": "\t", "v": "\v",
    },
    numeric=(
        (re.compile(r"([0-7]{1,3})"), 8),
        (re.compile(r"x([0-9A-Fa-f]+)"), 16),
        (_HEX4, 16),
        (_HEX8, 16),
    ),
    fallback=_octal,
)


def _pair(prefix: str, dialect: _Dialect) -> List[FilterSpec]:
    return [
        FilterSpec(
            f"esc{prefix}", text_filter(lambda s: _escape(s, dialect)), "escape",
            f"Escape for a {dialect.name} string literal",
        ),
        FilterSpec(
            f"fromesc{prefix}", text_filter(lambda s: _unescape(s, dialect)), "escape",
            f"Unescape a {dialect.name} string literal body",
        ),
    ]


def escape_csharp(text: str) -> str:
    return _escape(text, CSHARP)


def unescape_csharp(text: str) -> str:
    return _unescape(text, CSHARP)


def escape_java(text: str) -> str:
    return _escape(text, JAVA)


def unescape_java(text: str) -> str:
    return _unescape(text, JAVA)


def escape_c(text: str) -> str:
    return _escape(text, C)


def unescape_c(text: str) -> str:
    return _unescape(text, C)


def get_filters() -> List[FilterSpec]:
    return _pair("cs", CSHARP) + _pair("java", JAVA) + _pair("c", C)


__all__ = [
    "escape_csharp", "unescape_csharp",
    "escape_java", "unescape_java",
    "escape_c", "unescape_c",
    "get_filters",
]
