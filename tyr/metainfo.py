"""Torrent metainfo files: the outer document and its info dictionary."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from os import PathLike
from typing import Any, BinaryIO

from .bencode import BencodeError, _raw_fields, decode, encode

AnnounceList = list[list[str]]

_HASH_SIZE = 20


class InfoHash(bytes):
    """A 20-byte SHA-1 digest identifying a torrent."""

    def __new__(cls, data: bytes | bytearray | memoryview = bytes(_HASH_SIZE)) -> InfoHash:
        value = bytes(data)
        if len(value) != _HASH_SIZE:
            raise ValueError(f"info hash must be {_HASH_SIZE} bytes, got {len(value)}")
        return super().__new__(cls, value)

    def hex(self) -> str:  # type: ignore[override]
        return bytes.hex(self)

    def __str__(self) -> str:
        return self.hex()

    def __repr__(self) -> str:
        return f"InfoHash({self.hex()!r})"


def _text(value: bytes) -> str:
    return value.decode("utf-8", "surrogateescape")


def _get_int(fields: dict[bytes, Any], key: bytes) -> int:
    value = fields.get(key, 0)
    if not isinstance(value, int):
        raise BencodeError(f"field {key.decode()!r} must be an integer")
    return value


def _get_bytes(fields: dict[bytes, Any], key: bytes) -> bytes:
    value = fields.get(key, b"")
    if not isinstance(value, bytes):
        raise BencodeError(f"field {key.decode()!r} must be a byte string")
    return value


def _get_str(fields: dict[bytes, Any], key: bytes) -> str:
    return _text(_get_bytes(fields, key))


def _str_list(value: Any, what: str) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(item, bytes) for item in value):
        raise BencodeError(f"{what} must be a list of byte strings")
    return [_text(item) for item in value]


def _as_dict(value: Any, what: str) -> dict[bytes, Any]:
    if not isinstance(value, dict):
        raise BencodeError(f"{what} must be a dictionary")
    return value


@dataclass
class FileInfo:
    """One file inside a multi-file torrent."""

    length: int = 0
    path: list[str] = field(default_factory=list)
    path_utf8: list[str] = field(default_factory=list)
    torrent_offset: int = 0

    def best_path(self) -> list[str]:
        """The UTF-8 path when present, otherwise the plain path."""
        return self.path_utf8 if self.path_utf8 else self.path

    @classmethod
    def _from_value(cls, value: Any) -> FileInfo:
        fields = _as_dict(value, "file entry")
        return cls(
            length=_get_int(fields, b"length"),
            path=_str_list(fields.get(b"path", []), "file path"),
            path_utf8=_str_list(fields.get(b"path.utf-8", []), "file path.utf-8"),
        )

    def _to_value(self) -> dict[str, Any]:
        value: dict[str, Any] = {"length": self.length, "path": self.path}
        if self.path_utf8:
            value["path.utf-8"] = self.path_utf8
        return value


@dataclass
class Info:
    """The info dictionary of a torrent (BEP 3, with common extensions)."""

    piece_length: int = 0
    pieces: bytes = b""
    name: str = ""
    name_utf8: str = ""
    length: int = 0
    private: bool | None = None
    source: str = ""
    files: list[FileInfo] = field(default_factory=list)
    meta_version: int = 0

    def total_length(self) -> int:
        """Total size in bytes of all content."""
        if not self.files:
            return self.length
        return sum(f.length for f in self.files)

    def num_pieces(self) -> int:
        """Number of piece hashes."""
        return len(self.pieces) // _HASH_SIZE

    def best_name(self) -> str:
        """The UTF-8 name when present, otherwise the plain name."""
        return self.name_utf8 or self.name

    @classmethod
    def from_bencode(cls, data: bytes) -> Info:
        """Parse a bencoded info dictionary."""
        fields = _as_dict(decode(data), "info")
        private = fields.get(b"private")
        if private is not None and not isinstance(private, int):
            raise BencodeError("field 'private' must be an integer")
        files = fields.get(b"files", [])
        if not isinstance(files, list):
            raise BencodeError("field 'files' must be a list")
        return cls(
            piece_length=_get_int(fields, b"piece length"),
            pieces=_get_bytes(fields, b"pieces"),
            name=_get_str(fields, b"name"),
            name_utf8=_get_str(fields, b"name.utf-8"),
            length=_get_int(fields, b"length"),
            private=None if private is None else bool(private),
            source=_get_str(fields, b"source"),
            files=[FileInfo._from_value(item) for item in files],
            meta_version=_get_int(fields, b"meta version"),
        )

    def to_bencode(self) -> bytes:
        """Encode the info dictionary, omitting empty optional fields."""
        value: dict[str, Any] = {
            "piece length": self.piece_length,
            "pieces": self.pieces,
            "name": self.name,
        }
        if self.name_utf8:
            value["name.utf-8"] = self.name_utf8
        if self.length:
            value["length"] = self.length
        if self.private is not None:
            value["private"] = int(self.private)
        if self.source:
            value["source"] = self.source
        if self.files:
            value["files"] = [f._to_value() for f in self.files]
        if self.meta_version:
            value["meta version"] = self.meta_version
        return encode(value)


def overrides_announce(announce_list: AnnounceList, announce: str) -> bool:
    """Whether the announce list takes precedence over a single announce URL."""
    return any(url != "" or announce == "" for tier in announce_list for url in tier)


def distinct_values(announce_list: AnnounceList) -> list[str]:
    """All URLs in the announce list, first occurrence order, without repeats."""
    return list(dict.fromkeys(url for tier in announce_list for url in tier))


@dataclass
class MetaInfo:
    """A torrent file; the info dictionary is kept as its original bytes."""

    info_bytes: bytes = b""
    announce: str = ""
    announce_list: AnnounceList = field(default_factory=list)
    comment: str = ""

    @classmethod
    def from_bencode(cls, data: bytes) -> MetaInfo:
        """Parse a complete bencoded torrent file."""
        return cls._from_fields(_raw_fields(data))

    @classmethod
    def _from_fields(cls, raw: dict[bytes, bytes]) -> MetaInfo:
        meta = cls(info_bytes=raw.get(b"info", b""))
        if b"announce" in raw:
            meta.announce = _get_str({b"announce": decode(raw[b"announce"])}, b"announce")
        if b"comment" in raw:
            meta.comment = _get_str({b"comment": decode(raw[b"comment"])}, b"comment")
        if b"announce-list" in raw:
            tiers = decode(raw[b"announce-list"])
            if not isinstance(tiers, list):
                raise BencodeError("field 'announce-list' must be a list")
            meta.announce_list = [_str_list(tier, "announce tier") for tier in tiers]
        return meta

    def to_bencode(self) -> bytes:
        """Encode the torrent file, embedding the info bytes unchanged."""
        parts = [b"d"]
        if self.announce:
            parts += [encode("announce"), encode(self.announce)]
        if self.announce_list:
            parts += [encode("announce-list"), encode(self.announce_list)]
        if self.comment:
            parts += [encode("comment"), encode(self.comment)]
        if self.info_bytes:
            parts += [encode("info"), self.info_bytes]
        parts.append(b"e")
        return b"".join(parts)

    def unmarshal_info(self) -> Info:
        """Parse the embedded info dictionary."""
        return Info.from_bencode(self.info_bytes)

    def hash_info_bytes(self) -> InfoHash:
        """SHA-1 of the info dictionary bytes."""
        return InfoHash(hashlib.sha1(self.info_bytes).digest())

    def write(self, stream: BinaryIO) -> None:
        """Write the bencoded torrent file to a binary stream."""
        stream.write(self.to_bencode())

    def upverted_announce_list(self) -> AnnounceList:
        """The announce list, or the single announce URL as one tier."""
        if overrides_announce(self.announce_list, self.announce):
            return self.announce_list
        if self.announce:
            return [[self.announce]]
        return []


def load(stream: BinaryIO) -> MetaInfo:
    """Read a torrent file from a binary stream; data after the document is ignored."""
    return MetaInfo._from_fields(_raw_fields(stream.read(), strict=False))


def load_from_file(path: str | PathLike[str]) -> MetaInfo:
    """Read a torrent file from disk."""
    with open(path, "rb") as stream:
        return load(stream)