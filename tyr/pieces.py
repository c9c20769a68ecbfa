"""Mapping between pieces, the files they span and the block requests that fetch them."""

from __future__ import annotations

import hashlib
import os
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from os import PathLike

from .meta import Info

DEFAULT_BLOCK_SIZE = 16 * 1024

_ZERO_HASH = bytes(20)


@dataclass(frozen=True)
class FileChunk:
    """The part of one file that belongs to a piece."""

    file_index: int
    offset_of_file: int
    length: int


@dataclass(frozen=True)
class ChunkRequest:
    """A block of a piece, as asked for from a peer."""

    piece_index: int
    begin: int
    length: int


@dataclass(frozen=True)
class ExistingFile:
    """A file already present on disk with a non-zero size."""

    index: int
    size: int


PieceInfo = tuple[FileChunk, ...]


def piece_length(info: Info, index: int) -> int:
    """Length in bytes of the piece at ``index``."""
    if index == info.num_pieces - 1:
        return info.last_piece_size
    return info.piece_length


def piece_file_chunks(index: int, info: Info) -> list[FileChunk]:
    """The file ranges a piece is made of, in order."""
    piece_start = index * info.piece_length
    need_to_read = info.piece_length
    file_start = 0
    result: list[FileChunk] = []

    for file_index, f in enumerate(info.files):
        if need_to_read <= 0:
            break
        file_end = file_start + f.length
        read_start = piece_start + (info.piece_length - need_to_read)

        if file_start <= read_start <= file_end:
            should_read = min(file_end - read_start, need_to_read)
            result.append(
                FileChunk(
                    file_index=file_index,
                    offset_of_file=read_start - file_start,
                    length=should_read,
                )
            )
            need_to_read -= should_read

        file_start = file_end

    if need_to_read < 0:
        raise RuntimeError("unexpected need to read")

    return result


def build_piece_infos(info: Info) -> list[PieceInfo]:
    """File ranges of every piece of the torrent."""
    result: list[PieceInfo] = []
    for index in range(info.num_pieces):
        if bytes(info.pieces[index]) == _ZERO_HASH:
            raise ValueError(f"piece {index} has an empty hash")
        result.append(tuple(piece_file_chunks(index, info)))
    return result


def pieces_to_check(
    info: Info,
    piece_infos: Sequence[Sequence[FileChunk]],
    existing: Mapping[int, ExistingFile],
) -> list[int]:
    """Indices of pieces whose data lies entirely within files already on disk."""
    if not existing:
        return []

    def fully_present(chunks: Sequence[FileChunk]) -> bool:
        for chunk in chunks:
            found = existing.get(chunk.file_index)
            if found is None:
                return False
            if chunk.offset_of_file > found.size or chunk.offset_of_file + chunk.length > found.size:
                return False
        return True

    return [index for index in range(info.num_pieces) if fully_present(piece_infos[index])]


def _read_range(path: str, offset: int, length: int) -> bytes:
    try:
        with open(path, "rb") as stream:
            stream.seek(offset)
            data = stream.read(length)
    except OSError as exc:
        raise OSError(f"failed to open file {path!r}: {exc}") from exc
    if len(data) != length:
        raise OSError(f"failed to read file {path}: unexpected end of file")
    return data


def check_pieces(
    info: Info,
    base_path: str | PathLike[str],
    piece_infos: Sequence[Sequence[FileChunk]],
    indices: Iterable[int],
) -> list[int]:
    """Hash the given pieces from disk and return those that match their expected hash."""
    verified: list[int] = []
    for index in indices:
        digest = hashlib.sha1()
        for chunk in piece_infos[index]:
            path = os.path.join(base_path, info.files[chunk.file_index].path)
            digest.update(_read_range(path, chunk.offset_of_file, chunk.length))
        if digest.digest() == bytes(info.pieces[index]):
            verified.append(index)
    return verified


def piece_chunk_len(info: Info, index: int) -> int:
    """Number of blocks in the piece at ``index``."""
    size = piece_length(info, index)
    return (size + DEFAULT_BLOCK_SIZE - 1) // DEFAULT_BLOCK_SIZE


def piece_chunk(info: Info, index: int, chunk_index: int) -> ChunkRequest:
    """The request for one block of a piece."""
    size = piece_length(info, index)
    begin = DEFAULT_BLOCK_SIZE * chunk_index
    end = min(begin + DEFAULT_BLOCK_SIZE, size)
    if begin < 0 or end < begin:
        raise ValueError(f"chunk {chunk_index} is outside piece {index}")
    return ChunkRequest(piece_index=index, begin=begin, length=end - begin)


def piece_chunks(info: Info, index: int) -> list[ChunkRequest]:
    """Requests for every block of a piece."""
    per_piece = (info.piece_length + DEFAULT_BLOCK_SIZE - 1) // DEFAULT_BLOCK_SIZE
    piece_start = index * info.piece_length
    piece_len = min(info.piece_length, info.total_length - piece_start)

    result: list[ChunkRequest] = []
    for n in range(per_piece):
        begin = DEFAULT_BLOCK_SIZE * n
        length = min(piece_len - begin, DEFAULT_BLOCK_SIZE)
        if length <= 0:
            break
        result.append(ChunkRequest(piece_index=index, begin=begin, length=length))
    return result