"""
Binary filters and the explicit text/bytes boundary.

``base64``, ``hex`` and ``gzip`` accept either kind; text input is encoded
as UTF-8 first. ``frombase64``, ``fromhex`` and ``gunzip`` produce bytes,
which must be turned back into text (``utf8``, ``decode:<codec>``,
``base64``, ``hex``) before the placeholder ends.
"""

from __future__ import annotations

import base64
import binascii
import codecs
import gzip
import re
import zlib
from typing import List, Tuple

from .registry import FilterArgumentError, FilterSpec
from .values import FilterValue

_B64_WS = re.compile(r"\s+")


def _base64(value: FilterValue, args: Tuple[str, ...]) -> FilterValue:
    return FilterValue.text(base64.b64encode(value.to_bytes()).decode("ascii"))


def _frombase64(value: FilterValue, args: Tuple[str, ...]) -> FilterValue:
    data = _B64_WS.sub("", value.as_text())
    try:
        return FilterValue.binary(base64.b64decode(data, validate=True))
    except (binascii.Error, ValueError) as e:
        raise FilterArgumentError(f"invalid Base64 input: {e}")


def _hex(value: FilterValue, args: Tuple[str, ...]) -> FilterValue:
    return FilterValue.text(value.to_bytes().hex())


def _fromhex(value: FilterValue, args: Tuple[str, ...]) -> FilterValue:
    data = re.sub(r"\s+", "", value.as_text())
    if len(data) % 2:
        raise FilterArgumentError(f"odd-length hex string ({len(data)} digits)")
    try:
        return FilterValue.binary(bytes.fromhex(data))
    except ValueError as e:
        raise FilterArgumentError(f"invalid hex input: {e}")


def _gzip(value: FilterValue, args: Tuple[str, ...]) -> FilterValue:
    # mtime=0 keeps the output identical for identical input
    return FilterValue.binary(gzip.compress(value.to_bytes(), mtime=0))


def _gunzip(value: FilterValue, args: Tuple[str, ...]) -> FilterValue:
    try:
        return FilterValue.binary(gzip.decompress(value.as_bytes()))
    except (OSError, EOFError, zlib.error) as e:
        raise FilterArgumentError(f"invalid gzip data: {e}")


def _lookup_codec(name: str) -> str:
    try:
        info = codecs.lookup(name)
    except LookupError:
        raise FilterArgumentError("unknown text encoding", argument=name)
    # bytes-to-bytes and str-to-str codecs (hex, base64, rot13, ...)
    if not getattr(info, "_is_text_encoding", True):
        raise FilterArgumentError(f"'{info.name}' is not a text encoding", argument=name)
    return info.name


def _decode_with(value: FilterValue, codec: str) -> FilterValue:
    try:
        return FilterValue.text(value.as_bytes().decode(codec))
    except UnicodeDecodeError as e:
        raise FilterArgumentError(f"bytes are not valid {codec}: {e.reason} at byte {e.start}")


def _utf8(value: FilterValue, args: Tuple[str, ...]) -> FilterValue:
    return _decode_with(value, "utf-8")


def _decode(value: FilterValue, args: Tuple[str, ...]) -> FilterValue:
    return _decode_with(value, _lookup_codec(args[0]))


def _encode(value: FilterValue, args: Tuple[str, ...]) -> FilterValue:
    codec = _lookup_codec(args[0]) if args else "utf-8"
    try:
        return FilterValue.binary(value.as_text().encode(codec))
    except UnicodeEncodeError as e:
        raise FilterArgumentError(f"text cannot be encoded as {codec}: {e.reason}", argument=args[0] if args else None)


def get_filters() -> List[FilterSpec]:
    return [
        FilterSpec("base64", _base64, "binary", "Base64-encode (text as UTF-8)", accepts="any"),
        FilterSpec("frombase64", _frombase64, "binary", "Decode Base64 to bytes"),
        FilterSpec("hex", _hex, "binary", "Lower-case hex encoding (text as UTF-8)", accepts="any"),
        FilterSpec("fromhex", _fromhex, "binary", "Decode hex digits to bytes"),
        FilterSpec("gzip", _gzip, "binary", "Gzip-compress to bytes (text as UTF-8)", accepts="any"),
        FilterSpec("gunzip", _gunzip, "binary", "Decompress gzip bytes", accepts="bytes"),
        FilterSpec("utf8", _utf8, "conversion", "Decode UTF-8 bytes to text", accepts="bytes"),
        FilterSpec("decode", _decode, "conversion", "Decode bytes to text with a codec", args=("encoding",), accepts="bytes"),
        FilterSpec(
            "encode", _encode, "conversion", "Encode text to bytes (default UTF-8)",
            args=("encoding",), optional_args=1,
        ),
    ]


__all__ = ["get_filters"]
