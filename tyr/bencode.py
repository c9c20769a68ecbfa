"""Bencoding, the serialisation format of torrent files and tracker replies."""

from __future__ import annotations

import re
from collections.abc import Mapping
from operator import itemgetter
from typing import Any

_INT_RE = re.compile(rb"-?(?:0|[1-9][0-9]*)")
_LEN_RE = re.compile(rb"0|[1-9][0-9]*")


class BencodeError(ValueError):
    """Raised for malformed bencoded data or values that cannot be encoded."""


def encode(value: Any) -> bytes:
    """Encode integers, byte strings, strings, lists and mappings."""
    out = bytearray()
    _encode_into(out, value)
    return bytes(out)


def _encode_into(out: bytearray, value: Any) -> None:
    if isinstance(value, int):
        out += b"i%de" % int(value)
    elif isinstance(value, str):
        _encode_bytes(out, value.encode("utf-8", "surrogateescape"))
    elif isinstance(value, (bytes, bytearray, memoryview)):
        _encode_bytes(out, bytes(value))
    elif isinstance(value, (list, tuple)):
        out += b"l"
        for item in value:
            _encode_into(out, item)
        out += b"e"
    elif isinstance(value, Mapping):
        items: dict[bytes, Any] = {}
        for key, item in value.items():
            raw_key = _dict_key(key)
            if raw_key in items:
                raise BencodeError(f"duplicate dictionary key {raw_key!r}")
            items[raw_key] = item
        out += b"d"
        for raw_key, item in sorted(items.items(), key=itemgetter(0)):
            _encode_bytes(out, raw_key)
            _encode_into(out, item)
        out += b"e"
    else:
        raise BencodeError(f"cannot encode value of type {type(value).__name__}")


def _dict_key(key: Any) -> bytes:
    if isinstance(key, str):
        return key.encode("utf-8", "surrogateescape")
    if isinstance(key, (bytes, bytearray, memoryview)):
        return bytes(key)
    raise BencodeError(f"dictionary key must be a string, not {type(key).__name__}")


def _encode_bytes(out: bytearray, data: bytes) -> None:
    out += b"%d:" % len(data)
    out += data


class _Reader:
    """Cursor over a bencoded buffer."""

    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        self.data = bytes(data)
        self.pos = 0

    def peek(self) -> int:
        if self.pos >= len(self.data):
            raise BencodeError("unexpected end of data")
        return self.data[self.pos]

    def value(self) -> Any:
        token = self.peek()
        if token == ord("i"):
            return self._integer()
        if token == ord("l"):
            self.pos += 1
            items = []
            while self.peek() != ord("e"):
                items.append(self.value())
            self.pos += 1
            return items
        if token == ord("d"):
            self.pos += 1
            fields = {}
            while self.peek() != ord("e"):
                key = self.key()
                fields[key] = self.value()
            self.pos += 1
            return fields
        if ord("0") <= token <= ord("9"):
            return self._string()
        raise BencodeError(f"invalid token {chr(token)!r} at offset {self.pos}")

    def key(self) -> bytes:
        token = self.peek()
        if not ord("0") <= token <= ord("9"):
            raise BencodeError(f"dictionary key must be a byte string at offset {self.pos}")
        return self._string()

    def raw(self) -> bytes:
        start = self.pos
        self.value()
        return self.data[start : self.pos]

    def finish(self) -> None:
        if self.pos != len(self.data):
            raise BencodeError(f"unused trailing data at offset {self.pos}")

    def _integer(self) -> int:
        end = self.data.find(b"e", self.pos + 1)
        if end < 0:
            raise BencodeError("unterminated integer")
        text = self.data[self.pos + 1 : end]
        if not _INT_RE.fullmatch(text) or text == b"-0":
            raise BencodeError(f"invalid integer {text!r} at offset {self.pos}")
        self.pos = end + 1
        return int(text)

    def _string(self) -> bytes:
        colon = self.data.find(b":", self.pos)
        if colon < 0:
            raise BencodeError("unterminated string length")
        digits = self.data[self.pos : colon]
        if not _LEN_RE.fullmatch(digits):
            raise BencodeError(f"invalid string length {digits!r} at offset {self.pos}")
        start = colon + 1
        end = start + int(digits)
        if end > len(self.data):
            raise BencodeError("string runs past end of data")
        self.pos = end
        return self.data[start:end]


def decode(data: bytes | bytearray | memoryview) -> Any:
    """Decode one complete bencoded value; dictionary keys come back as bytes."""
    reader = _Reader(data)
    value = reader.value()
    reader.finish()
    return value


def _raw_fields(data: bytes | bytearray | memoryview, *, strict: bool = True) -> dict[bytes, bytes]:
    """Split a bencoded dictionary into its keys and the exact bytes of each value."""
    reader = _Reader(data)
    if reader.peek() != ord("d"):
        raise BencodeError("expected a dictionary")
    reader.pos += 1
    fields: dict[bytes, bytes] = {}
    while reader.peek() != ord("e"):
        key = reader.key()
        fields[key] = reader.raw()
    reader.pos += 1
    if strict:
        reader.finish()
    return fields