"""
Path filters.

Normalization works on the text of the path only: it never touches the
filesystem and never follows symlinks. ``..`` segments are resolved
lexically; on a relative path, leading ``..`` that cannot be collapsed are
kept, on an absolute path they are dropped at the root.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import List

from .registry import FilterSpec, text_filter

_DRIVE_RE = re.compile(r"^([A-Za-z]):")


@dataclass
class _PathParts:
    drive: str          # "C:" or "\\\\server\\share" (UNC) or ""
    rooted: bool
    segments: List[str]


def _split(path: str) -> _PathParts:
    """Splits a path written with either separator style."""
    p = path.replace("\\", "/")
    drive = ""
    if p.startswith("//") and not p.startswith("///"):
        # UNC: //server/share/rest
        parts = p[2:].split("/")
        if len(parts) >= 2 and parts[0] and parts[1]:
            drive = "//" + parts[0] + "/" + parts[1]
            p = "/" + "/".join(parts[2:])
    else:
        m = _DRIVE_RE.match(p)
        if m:
            drive = m.group(0)
            p = p[2:]
    rooted = p.startswith("/") or (drive.startswith("//"))
    segments = [s for s in p.split("/") if s and s != "."]
    return _PathParts(drive, rooted, _collapse(segments, rooted))


def _collapse(segments: List[str], rooted: bool) -> List[str]:
    out: List[str] = []
    for seg in segments:
        if seg == "..":
            if out and out[-1] != "..":
                out.pop()
            elif not rooted:
                out.append(seg)
        else:
            out.append(seg)
    return out


def _join(parts: _PathParts, sep: str) -> str:
    drive = parts.drive.replace("/", sep)
    body = sep.join(parts.segments)
    if parts.rooted:
        return drive + sep + body
    if drive:
        return drive + body
    return body or "."


def _is_absolute(path: str) -> bool:
    parts = _split(path)
    return parts.rooted


def _absolute(path: str) -> str:
    if _is_absolute(path):
        return path
    parts = _split(path)
    base = os.getcwd()
    if parts.drive and not parts.drive.startswith("//"):
        # Drive-relative ("C:foo"): anchor on the drive root
        return parts.drive + "/" + "/".join(parts.segments)
    return base.rstrip("\\/") + "/" + path


def to_windows(path: str, absolute: bool = False) -> str:
    """Backslash separators; ``..`` and ``.`` collapsed."""
    if not path and not absolute:
        return path
    if absolute:
        path = _absolute(path)
    return _join(_split(path), "\\")


def to_linux(path: str, absolute: bool = False) -> str:
    """Forward slash separators; a drive ``C:`` becomes the ``/c`` mount."""
    if not path and not absolute:
        return path
    if absolute:
        path = _absolute(path)
    parts = _split(path)
    if parts.drive and not parts.drive.startswith("//"):
        letter = parts.drive[0].lower()
        parts = _PathParts("", True, [letter] + parts.segments)
    return _join(parts, "/")


def to_host(path: str, absolute: bool = False) -> str:
    if os.name == "nt":
        return to_windows(path, absolute)
    return to_linux(path, absolute)


def _separator_of(path: str) -> str:
    if "\\" in path and "/" not in path:
        return "\\"
    if _DRIVE_RE.match(path) and "/" not in path:
        return "\\"
    return "/"


def path_append(path: str, segment: str) -> str:
    """
    Appends ``segment`` using the separator style already present in ``path``.
    """
    if not path:
        return segment
    sep = _separator_of(path)
    seg = segment.replace("/", sep).replace("\\", sep).lstrip(sep)
    head = path.rstrip("\\/")
    if not head:
        # path was only separators: the root
        return sep + seg
    return head + sep + seg


def path_quote(path: str) -> str:
    if len(path) >= 2 and path.startswith('"') and path.endswith('"'):
        return path
    return f'"{path}"'


def get_filters() -> List[FilterSpec]:
    return [
        FilterSpec("pathwin", text_filter(lambda p: to_windows(p)), "path",
                   "Normalize to Windows separators"),
        FilterSpec("pathwinabs", text_filter(lambda p: to_windows(p, True)), "path",
                   "Normalize to an absolute Windows path"),
        FilterSpec("pathlinux", text_filter(lambda p: to_linux(p)), "path",
                   "Normalize to Linux separators, C:\\ becomes /c/"),
        FilterSpec("pathlinuxabs", text_filter(lambda p: to_linux(p, True)), "path",
                   "Normalize to an absolute Linux path"),
        FilterSpec("pathos", text_filter(lambda p: to_host(p)), "path",
                   "Normalize for the host platform"),
        FilterSpec("pathosabs", text_filter(lambda p: to_host(p, True)), "path",
                   "Normalize to an absolute path for the host platform"),
        FilterSpec("pathappend", text_filter(path_append), "path",
                   "Append a path segment with the value's separator style", args=("segment",)),
        FilterSpec("pathquote", text_filter(path_quote), "path",
                   "Wrap in double quotes unless already quoted"),
    ]


__all__ = ["to_windows", "to_linux", "to_host", "path_append", "path_quote", "get_filters"]
