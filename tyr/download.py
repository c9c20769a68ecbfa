"""Download state, display helpers and resume data."""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path

from .bencode import encode
from .metainfo import Info as MetaInfoInfo
from .metainfo import InfoHash


class State(enum.IntEnum):
    """Lifecycle state of a download."""

    STOPPED = 0
    DOWNLOADING = 1
    UPLOADING = 2
    CHECKING = 3
    MOVING = 4
    ERROR = 5

    def __str__(self) -> str:
        return self.name.capitalize()


@dataclass
class Priority:
    """How many connected peers have a piece."""

    index: int
    weight: int = 0


@dataclass
class Resume:
    """Persistent state of a download, saved between sessions."""

    base_path: str = ""
    bitmap: bytes = b""
    tags: list[str] = field(default_factory=list)
    add_at: int = 0
    completed_at: int = 0
    downloaded: int = 0
    uploaded: int = 0
    state: State = State.STOPPED

    def to_bencode(self) -> bytes:
        """Encode the resume record as a bencoded dictionary."""
        return encode(
            {
                "BasePath": self.base_path,
                "Bitmap": self.bitmap,
                "Tags": list(self.tags),
                "AddAt": self.add_at,
                "CompletedAt": self.completed_at,
                "Downloaded": self.downloaded,
                "Uploaded": self.uploaded,
                "State": int(self.state),
            }
        )


def canonical_name(info: MetaInfoInfo, info_hash: InfoHash) -> str:
    """Display name of a torrent: its name, without extension for single files."""
    name = info.name_utf8 or info.name
    if not name:
        return info_hash.hex()
    if info.files:
        return name
    return ".".join(name.split(".")[:-1])


def rank_pieces(num_pieces: int, peer_pieces: Iterable[Iterable[int]]) -> list[Priority]:
    """Pieces ordered by how many peers have them, most common first."""
    ranking = [Priority(index=i) for i in range(num_pieces)]
    for pieces in peer_pieces:
        for index in pieces:
            ranking[index].weight += 1
    ranking.sort(key=lambda p: p.weight, reverse=True)
    return ranking


def resume_path(session_path: str | PathLike[str], info_hash: InfoHash) -> Path:
    """Where the resume file of a torrent is stored inside the session directory."""
    name = f"{info_hash.hex()}.resume"
    return Path(session_path) / "resume" / name[:2] / name