"""Validated, flattened view of a torrent's info dictionary."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from .metainfo import InfoHash, MetaInfo

_HASH_SIZE = 20


class InvalidLengthError(ValueError):
    """Raised when the number of piece hashes does not match the content length."""


@dataclass(frozen=True)
class File:
    """A file of the torrent, with its path relative to the download directory."""

    path: str
    length: int


@dataclass(frozen=True)
class Info:
    """Everything a download needs to know about a torrent's content."""

    name: str
    pieces: list[InfoHash] = field(default_factory=list)
    files: list[File] = field(default_factory=list)
    total_length: int = 0
    piece_length: int = 0
    last_piece_size: int = 0
    hash: InfoHash = field(default_factory=InfoHash)
    num_pieces: int = 0
    private: bool = False


def _join(parts: list[str]) -> str:
    parts = [p for p in parts if p]
    if not parts:
        return ""
    return os.path.normpath(os.path.join(*parts))


def from_torrent(metainfo: MetaInfo) -> Info:
    """Build an :class:`Info` from a parsed torrent file."""
    info = metainfo.unmarshal_info()
    num_pieces = info.num_pieces()
    pieces = [
        InfoHash(info.pieces[start : start + _HASH_SIZE])
        for start in range(0, num_pieces * _HASH_SIZE, _HASH_SIZE)
    ]

    total_length = info.total_length()
    if info.files:
        files = [File(path=_join(f.best_path()), length=f.length) for f in info.files]
    else:
        files = [File(path=info.best_name(), length=total_length)]

    piece_length = info.piece_length
    if piece_length <= 0:
        raise InvalidLengthError(f"invalid piece length {piece_length}")

    result = Info(
        name=info.best_name(),
        pieces=pieces,
        files=files,
        total_length=total_length,
        piece_length=piece_length,
        last_piece_size=total_length - piece_length * (num_pieces - 1),
        hash=metainfo.hash_info_bytes(),
        num_pieces=num_pieces,
        private=bool(info.private),
    )

    if num_pieces != (total_length + piece_length - 1) // piece_length:
        raise InvalidLengthError(
            f"torrent has {num_pieces} pieces for {total_length} bytes "
            f"with piece length {piece_length}"
        )

    return result