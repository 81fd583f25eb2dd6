"""
Values flowing through a filter pipeline.

A value is either text or a byte sequence and always knows which one it is.
Conversion between the two happens only inside named filters, never by
inspecting the Python type of a payload at a function boundary.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Union


class ValueKind(enum.Enum):
    TEXT = "text"
    BYTES = "bytes"


@dataclass(frozen=True)
class FilterValue:
    kind: ValueKind
    payload: Union[str, bytes]

    @classmethod
    def text(cls, value: str) -> "FilterValue":
        if not isinstance(value, str):
            raise TypeError(f"text value expected, got {type(value).__name__}")
        return cls(ValueKind.TEXT, value)

    @classmethod
    def binary(cls, value: bytes) -> "FilterValue":
        if not isinstance(value, (bytes, bytearray)):
            raise TypeError(f"bytes value expected, got {type(value).__name__}")
        return cls(ValueKind.BYTES, bytes(value))

    @property
    def is_text(self) -> bool:
        return self.kind is ValueKind.TEXT

    @property
    def is_bytes(self) -> bool:
        return self.kind is ValueKind.BYTES

    def as_text(self) -> str:
        if self.kind is not ValueKind.TEXT:
            raise TypeError("value holds binary data, not text")
        return self.payload  # type: ignore[return-value]

    def as_bytes(self) -> bytes:
        if self.kind is not ValueKind.BYTES:
            raise TypeError("value holds text, not binary data")
        return self.payload  # type: ignore[return-value]

    def to_bytes(self, encoding: str = "utf-8") -> bytes:
        """Bytes as is; text encoded with ``encoding``. Used by filters that accept either kind."""
        if self.kind is ValueKind.BYTES:
            return self.payload  # type: ignore[return-value]
        return self.payload.encode(encoding)  # type: ignore[union-attr]

    def __repr__(self) -> str:
        return f"FilterValue({self.kind.value}, {self.payload!r})"


__all__ = ["ValueKind", "FilterValue"]
