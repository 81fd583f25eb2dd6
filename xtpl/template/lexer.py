"""
Template scanner.

Walks raw template text in a single forward pass and yields literal runs
and raw placeholder spans. The interior of a placeholder is not interpreted
here; that is the placeholder parser's job.
"""

from __future__ import annotations

import re
from typing import Iterator, List

from .tokens import Segment, SegmentType
from ..errors import TemplateSyntaxError

OPEN_MARKER = "{{"
CLOSE_MARKER = "}}"

# Escaped markers (\{{, \}}, \{\{, \}\}) or an opening marker
_SPECIAL = re.compile(r"\\(?:\{\{|\}\}|\{\\\{|\}\\\})|\{\{")

# Literal runs longer than this are emitted in several segments
LITERAL_CHUNK_SIZE = 64 * 1024


class TemplateLexer:
    """
    Splits template text into literal and placeholder segments.

    The scan is lazy: segments are produced on demand, so the caller can
    stream output while the rest of the template is still unscanned.
    A lexer instance makes exactly one pass; create a new one to rescan.
    """

    def __init__(self, text: str, *, chunk_size: int = LITERAL_CHUNK_SIZE):
        self.text = text
        self.length = len(text)
        self.position = 0
        self.line = 1
        self.column = 1
        self.chunk_size = chunk_size
        self._started = False

    def segments(self) -> Iterator[Segment]:
        """
        Yields segments in source order.

        Raises:
            TemplateSyntaxError: On an opening marker without a closing one
        """
        if self._started:
            raise RuntimeError("TemplateLexer is single-pass; create a new instance to rescan")
        self._started = True

        pending: List[str] = []
        pending_size = 0
        lit_pos, lit_line, lit_col = 0, 1, 1

        def flush() -> Iterator[Segment]:
            nonlocal pending, pending_size
            if pending:
                yield Segment(SegmentType.LITERAL, "".join(pending), lit_pos, lit_line, lit_col)
                pending = []
                pending_size = 0

        while self.position < self.length:
            match = _SPECIAL.search(self.text, self.position)
            stop = match.start() if match else self.length

            # Plain text up to the next special sequence
            while self.position < stop:
                if not pending:
                    lit_pos, lit_line, lit_col = self.position, self.line, self.column
                piece_end = min(stop, self.position + self.chunk_size - pending_size)
                pending.append(self.text[self.position:piece_end])
                pending_size += piece_end - self.position
                self._advance_to(piece_end)
                if pending_size >= self.chunk_size:
                    yield from flush()

            if match is None:
                break

            marker = match.group(0)
            if marker.startswith("\\"):
                # Escaped marker: emit the bare braces, drop the backslash(es)
                if not pending:
                    lit_pos, lit_line, lit_col = self.position, self.line, self.column
                pending.append(OPEN_MARKER if marker[1] == "{" else CLOSE_MARKER)
                pending_size += 2
                self._advance_to(match.end())
                if pending_size >= self.chunk_size:
                    yield from flush()
                continue

            yield from flush()
            yield self._read_placeholder(match.start())

        yield from flush()

    def _read_placeholder(self, start: int) -> Segment:
        """Reads one placeholder whose opening marker is at ``start``."""
        interior_start = start + len(OPEN_MARKER)
        end = self._find_close(interior_start)
        if end < 0:
            raise TemplateSyntaxError(
                "unterminated placeholder: no closing '}}' before end of input",
                position=start,
                snippet=self.text[start:start + 40].split("\n", 1)[0],
            )
        segment = Segment(
            SegmentType.PLACEHOLDER,
            self.text[interior_start:end],
            start,
            self.line,
            self.column,
            interior_start,
        )
        self._advance_to(end + len(CLOSE_MARKER))
        return segment

    def _find_close(self, pos: int) -> int:
        """
        Finds the nearest closing marker after ``pos``, or -1.

        Quotes are not tracked here: a '}}' always ends the placeholder, and
        a quoted argument cut short by it is reported by the parser.
        """
        return self.text.find(CLOSE_MARKER, pos)

    def _advance_to(self, pos: int) -> None:
        """Moves to ``pos``, updating line and column numbers."""
        newlines = self.text.count("\n", self.position, pos)
        if newlines:
            self.line += newlines
            self.column = pos - self.text.rfind("\n", self.position, pos)
        else:
            self.column += pos - self.position
        self.position = pos


def iter_segments(text: str) -> Iterator[Segment]:
    """
    Convenience wrapper: lazily scans ``text``.

    Raises:
        TemplateSyntaxError: On an unterminated placeholder
    """
    return TemplateLexer(text).segments()


__all__ = ["TemplateLexer", "iter_segments", "OPEN_MARKER", "CLOSE_MARKER", "LITERAL_CHUNK_SIZE"]
