"""
Markup and transport encodings: URL percent-encoding, XML entities and
Windows registry script (.reg) string quoting.
"""

from __future__ import annotations

import re
from typing import List
from urllib.parse import quote, unquote

from .registry import FilterArgumentError, FilterSpec, text_filter

_XML_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&apos;",
}
_XML_ENTITIES = {v[1:-1]: k for k, v in _XML_ESCAPES.items()}
_XML_ESCAPE_RE = re.compile(r"[&<>\"']")
_XML_ENTITY_RE = re.compile(r"&(#[0-9]+|#[xX][0-9A-Fa-f]+|[A-Za-z]+);")
_PERCENT_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def url_encode(text: str) -> str:
    """Percent-encodes UTF-8 bytes of everything except unreserved characters."""
    return quote(text, safe="")


def url_decode(text: str) -> str:
    bad = _PERCENT_RE.search(text)
    if bad:
        raise FilterArgumentError(f"malformed percent escape at index {bad.start()}")
    try:
        return unquote(text, errors="strict")
    except UnicodeDecodeError as e:
        raise FilterArgumentError(f"percent escapes are not valid UTF-8: {e.reason}")


def xml_encode(text: str) -> str:
    return _XML_ESCAPE_RE.sub(lambda m: _XML_ESCAPES[m.group(0)], text)


def xml_decode(text: str) -> str:
    def repl(m: re.Match) -> str:
        ref = m.group(1)
        if ref.startswith(("#x", "#X")):
            code = int(ref[2:], 16)
        elif ref.startswith("#"):
            code = int(ref[1:])
        else:
            if ref not in _XML_ENTITIES:
                raise FilterArgumentError(f"unknown XML entity '&{ref};'")
            return _XML_ENTITIES[ref]
        if code > 0x10FFFF:
            raise FilterArgumentError(f"character reference out of range: '&{ref};'")
        return chr(code)

    return _XML_ENTITY_RE.sub(repl, text)


def reg_quote(text: str) -> str:
    """Escapes double quotes for a .reg string value."""
    return text.replace('"', '\\"')


def reg_escape(text: str) -> str:
    """Escapes backslashes and double quotes for a .reg string value."""
    return text.replace("\\", "\\\\").replace('"', '\\"')


def reg_unescape(text: str) -> str:
    out: List[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            if i + 1 >= len(text) or text[i + 1] not in '\\"':
                raise FilterArgumentError(f"invalid registry escape at index {i}")
            out.append(text[i + 1])
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


def get_filters() -> List[FilterSpec]:
    return [
        FilterSpec("urlenc", text_filter(url_encode), "encoding", "URL percent-encode (UTF-8)"),
        FilterSpec("urldec", text_filter(url_decode), "encoding", "Decode URL percent-encoding"),
        FilterSpec("xmlenc", text_filter(xml_encode), "encoding", "Escape XML special characters"),
        FilterSpec("xmldec", text_filter(xml_decode), "encoding", "Decode XML entities and character references"),
        FilterSpec("regq", text_filter(reg_quote), "encoding", "Escape '\"' for .reg string values"),
        FilterSpec("regesc", text_filter(reg_escape), "encoding", "Escape '\\' and '\"' for .reg string values"),
        FilterSpec("fromregesc", text_filter(reg_unescape), "encoding", "Undo regesc"),
    ]


__all__ = ["url_encode", "url_decode", "xml_encode", "xml_decode", "reg_quote", "reg_escape", "reg_unescape", "get_filters"]
