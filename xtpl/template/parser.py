"""
Placeholder parser.

Turns the interior of one ``{{ ... }}`` span into a ParsedPlaceholder:

    head ( '|' filterName ( ':' arg )* )*

where head is ``var.<name>`` or ``env.<NAME>`` and arg is either a quoted
string (only ``\\"`` and ``\\\\`` are escapes) or a bare word that stops at
whitespace, ':', '|' or '}'.
"""

from __future__ import annotations

import re
from typing import List, Optional

from .nodes import EnvironmentRef, FilterCall, Head, ParsedPlaceholder, VariableRef
from .tokens import Segment
from ..errors import TemplateSyntaxError

WHITESPACE = " \t\r\n"
PIPE = "|"
ARG_SEPARATOR = ":"
QUOTE = '"'

_HEAD_RE = re.compile(r"^(var|env)\.(\S+)$")
_UNQUOTED_STOP = WHITESPACE + ":|}"
_NAME_STOP = WHITESPACE + ":|"


class _Cursor:
    """
    Read position inside a placeholder interior.

    ``base`` is the absolute offset of the interior in the template, so
    every reported position points into the original text.
    """

    def __init__(self, text: str, base: int):
        self.text = text
        self.base = base
        self.index = 0

    @property
    def position(self) -> int:
        return self.base + self.index

    def is_at_end(self) -> bool:
        return self.index >= len(self.text)

    def current(self) -> str:
        return self.text[self.index] if self.index < len(self.text) else ""

    def match(self, ch: str) -> bool:
        return self.current() == ch

    def advance(self) -> str:
        ch = self.current()
        self.index += 1
        return ch

    def skip_whitespace(self) -> None:
        while not self.is_at_end() and self.text[self.index] in WHITESPACE:
            self.index += 1

    def read_until(self, stop_chars: str) -> str:
        start = self.index
        while not self.is_at_end() and self.text[self.index] not in stop_chars:
            self.index += 1
        return self.text[start:self.index]

    def peek_word(self) -> str:
        """Text from the cursor up to the next whitespace or pipe (for error snippets)."""
        end = self.index
        while end < len(self.text) and self.text[end] not in WHITESPACE + PIPE:
            end += 1
        return self.text[self.index:end] or self.current()


class PlaceholderParser:
    """
    Recursive-descent parser for a single placeholder interior.

    A parser instance is bound to one interior; call ``parse()`` once.
    """

    def __init__(self, interior: str, *, interior_position: int = 0, position: Optional[int] = None):
        self.cursor = _Cursor(interior, interior_position)
        self.position = interior_position - 2 if position is None else position

    def parse(self) -> ParsedPlaceholder:
        """
        Raises:
            TemplateSyntaxError: On any malformed placeholder content
        """
        cur = self.cursor
        cur.skip_whitespace()
        head_position = cur.position
        head = self._parse_head()

        pipeline: List[FilterCall] = []
        while True:
            cur.skip_whitespace()
            if cur.is_at_end():
                break
            if not cur.match(PIPE):
                raise TemplateSyntaxError(
                    "unexpected token in placeholder, expected '|'",
                    position=cur.position,
                    snippet=cur.peek_word(),
                )
            cur.advance()
            pipeline.append(self._parse_filter())

        return ParsedPlaceholder(
            head=head,
            pipeline=tuple(pipeline),
            position=self.position,
            head_position=head_position,
        )

    def _parse_head(self) -> Head:
        cur = self.cursor
        start = cur.position
        token = cur.read_until(WHITESPACE + PIPE)
        if not token:
            raise TemplateSyntaxError(
                "invalid placeholder head: expected 'var.<name>' or 'env.<NAME>'",
                position=start,
                snippet=cur.peek_word() or "{{" + cur.text + "}}",
            )
        m = _HEAD_RE.match(token)
        if not m:
            raise TemplateSyntaxError(
                "invalid placeholder head: expected 'var.<name>' or 'env.<NAME>'",
                position=start,
                snippet=token,
            )
        kind, name = m.group(1), m.group(2)
        return VariableRef(name) if kind == "var" else EnvironmentRef(name)

    def _parse_filter(self) -> FilterCall:
        cur = self.cursor
        cur.skip_whitespace()
        name_position = cur.position
        name = cur.read_until(_NAME_STOP)
        if not name:
            raise TemplateSyntaxError(
                "missing filter name after '|'",
                position=name_position,
                snippet=cur.peek_word(),
            )

        args: List[str] = []
        while True:
            saved = cur.index
            cur.skip_whitespace()
            if not cur.match(ARG_SEPARATOR):
                cur.index = saved
                break
            cur.advance()
            args.append(self._parse_argument(name))

        return FilterCall(name=name, args=tuple(args), position=name_position)

    def _parse_argument(self, filter_name: str) -> str:
        cur = self.cursor
        start = cur.position
        if cur.match(QUOTE):
            value = self._parse_quoted(start)
        else:
            value = cur.read_until(_UNQUOTED_STOP)
        if not value:
            raise TemplateSyntaxError(
                f"empty filter argument for filter '{filter_name}'",
                position=start,
                snippet=f"{filter_name}:{cur.peek_word()}",
            )
        return value

    def _parse_quoted(self, start: int) -> str:
        """
        Reads a quoted argument. Only \\" and \\\\ are escapes; any other
        backslash is kept as is, so Windows paths need no doubling.
        """
        cur = self.cursor
        cur.advance()  # opening quote
        out: List[str] = []
        while not cur.is_at_end():
            ch = cur.advance()
            if ch == "\\" and cur.current() in (QUOTE, "\\") and not cur.is_at_end():
                out.append(cur.advance())
            elif ch == QUOTE:
                return "".join(out)
            else:
                out.append(ch)
        raise TemplateSyntaxError(
            "unterminated quoted filter argument",
            position=start,
            snippet=cur.text[start - cur.base:],
        )


def parse_placeholder(segment: Segment) -> ParsedPlaceholder:
    """Parses the interior of a PLACEHOLDER segment produced by the scanner."""
    parser = PlaceholderParser(
        segment.value,
        interior_position=segment.interior_position,
        position=segment.position,
    )
    return parser.parse()


__all__ = ["PlaceholderParser", "parse_placeholder"]
