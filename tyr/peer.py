"""Peer wire helpers: peer ids, bitfields and validation of what peers send."""

from __future__ import annotations

import secrets

from .meta import Info
from .pieces import piece_length

PEER_ID_SIZE = 20
MAX_MESSAGE_SIZE = 1024 * 1024

_PREFIX_SIZE = 8
_PEER_ID_CHARS = (
    b"0123456789abcdefghijklmnopqrstuvwxyz"
    b"ABCDEFGHIJKLMNOPQRSTUVWXYZ!\"#$%&'()*+,-./:;<=>?@[\\]^_`{|}~"
)


class InvalidPeerDataError(ValueError):
    """Raised when a peer sends data that breaks the protocol."""


def new_peer_id(prefix: bytes | str) -> bytes:
    """A fresh 20-byte peer id: the client prefix followed by 12 random characters."""
    raw_prefix = prefix.encode("ascii") if isinstance(prefix, str) else bytes(prefix)
    peer_id = bytearray(PEER_ID_SIZE)
    head = raw_prefix[:PEER_ID_SIZE]
    peer_id[: len(head)] = head
    peer_id[_PREFIX_SIZE:] = bytes(
        secrets.choice(_PEER_ID_CHARS) for _ in range(PEER_ID_SIZE - _PREFIX_SIZE)
    )
    return bytes(peer_id)


def _digit(value: int) -> int:
    return (value - ord("0")) & 0xFF


def parse_peer_id(peer_id: bytes) -> str:
    """A readable client name guessed from a peer id."""
    peer_id = bytes(peer_id)
    if len(peer_id) != PEER_ID_SIZE:
        raise ValueError(f"peer id must be {PEER_ID_SIZE} bytes, got {len(peer_id)}")

    if peer_id[0] == ord("-") and peer_id[7] == ord("-"):
        if peer_id[1:3] == b"qB":
            parts = [_digit(b) for b in peer_id[3:6]]
            if peer_id[6] != ord("0"):
                parts.append(_digit(peer_id[6]))
            return "qBittorrent " + ".".join(str(p) for p in parts)
        return peer_id[1:6].decode("utf-8", "replace")

    return peer_id[:6].decode("utf-8", "replace")


def is_valid_request(info: Info, index: int, begin: int, length: int) -> bool:
    """Whether a block request from a peer lies inside an existing piece."""
    if index < 0 or begin < 0 or length < 0:
        return False
    if index >= info.num_pieces:
        return False
    return begin + length <= piece_length(info, index)


def decode_bitfield(payload: bytes, num_pieces: int) -> set[int]:
    """Piece indices set in a bitfield message payload; spare trailing bits are ignored."""
    expected = (num_pieces + 7) // 8
    if len(payload) != expected:
        raise InvalidPeerDataError(
            f"expecting bitfield length {expected}, receive {len(payload)}"
        )
    return {
        byte_index * 8 + bit
        for byte_index, byte in enumerate(payload)
        for bit in range(8)
        if byte & (0x80 >> bit) and byte_index * 8 + bit < num_pieces
    }


def check_message_size(size: int) -> int:
    """Reject message lengths a well-behaved peer never sends; return the size otherwise."""
    if size < 0 or size >= MAX_MESSAGE_SIZE:
        raise InvalidPeerDataError(f"invalid message size {size}")
    return size