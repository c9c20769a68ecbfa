"""HTTP tracker announces: request parameters, reply parsing and the candidate peer queue."""

from __future__ import annotations

import heapq
import itertools
import struct
from dataclasses import dataclass, field
from datetime import timedelta
from ipaddress import IPv4Address, IPv6Address, ip_address
from typing import Any

from .bencode import BencodeError, _raw_fields, decode

IPAddress = IPv4Address | IPv6Address
AddrPort = tuple[IPAddress, int]

EVENT_STARTED = "started"
EVENT_COMPLETED = "completed"
EVENT_STOPPED = "stopped"

DEFAULT_INTERVAL = timedelta(minutes=30)

_COMPACT_V4 = 6
_COMPACT_V6 = 18


class TrackerError(ValueError):
    """Raised when a tracker reply cannot be understood."""


@dataclass
class AnnounceResult:
    """What a tracker told us in reply to an announce."""

    failed_reason: str | None = None
    peers: list[AddrPort] = field(default_factory=list)
    interval: timedelta = DEFAULT_INTERVAL
    complete: int | None = None
    incomplete: int | None = None


class PeerQueue:
    """Candidate peers, highest priority first."""

    def __init__(self) -> None:
        self._heap: list[tuple[int, int, AddrPort]] = []
        self._counter = itertools.count()

    def push(self, addr: AddrPort, priority: int) -> None:
        """Add a peer with its priority."""
        heapq.heappush(self._heap, (-priority, next(self._counter), addr))

    def peek(self) -> tuple[AddrPort, int]:
        """The peer with the highest priority, without removing it."""
        if not self._heap:
            raise IndexError("peek from an empty peer queue")
        neg_priority, _, addr = self._heap[0]
        return addr, -neg_priority

    def pop(self) -> tuple[AddrPort, int]:
        """Remove and return the peer with the highest priority."""
        if not self._heap:
            raise IndexError("pop from an empty peer queue")
        neg_priority, _, addr = heapq.heappop(self._heap)
        return addr, -neg_priority

    def __len__(self) -> int:
        return len(self._heap)


def parse_non_compact_peers(data: bytes) -> list[AddrPort]:
    """Peers from a bencoded list of ``{ip, port}`` dictionaries; malformed data yields none."""
    try:
        items = decode(data)
    except BencodeError:
        return []
    if not isinstance(items, list):
        return []

    entries: list[tuple[bytes, int]] = []
    for item in items:
        if not isinstance(item, dict):
            return []
        ip = item.get(b"ip", b"")
        port = item.get(b"port", 0)
        if not isinstance(ip, bytes) or not isinstance(port, int) or not 0 <= port <= 0xFFFF:
            return []
        entries.append((ip, port))

    peers: list[AddrPort] = []
    for ip, port in entries:
        try:
            addr = ip_address(ip.decode("ascii"))
        except (UnicodeDecodeError, ValueError):
            continue
        peers.append((addr, port))
    return peers


def parse_compact_peers(data: bytes) -> list[AddrPort]:
    """Peers from the compact IPv4 form: 4 address bytes and 2 port bytes each."""
    if len(data) % _COMPACT_V4 != 0:
        raise TrackerError(f"invalid binary peers length {len(data)}")
    return [
        (IPv4Address(data[i : i + 4]), struct.unpack(">H", data[i + 4 : i + 6])[0])
        for i in range(0, len(data), _COMPACT_V4)
    ]


def parse_compact_peers6(data: bytes) -> list[AddrPort]:
    """Peers from the compact IPv6 form: 16 address bytes and 2 port bytes each."""
    if len(data) % _COMPACT_V6 != 0:
        raise TrackerError(f"invalid binary peers6 length {len(data)}")
    return [
        (IPv6Address(data[i : i + 16]), struct.unpack(">H", data[i + 16 : i + 18])[0])
        for i in range(0, len(data), _COMPACT_V6)
    ]


def _is_list(raw: bytes) -> bool:
    return raw[:1] == b"l" and raw[-1:] == b"e"


def _compact_bytes(raw: bytes, key: str) -> bytes:
    try:
        value = decode(raw)
    except BencodeError as exc:
        raise TrackerError(f"failed to parse binary format {key!r}: {exc}") from exc
    if not isinstance(value, bytes):
        raise TrackerError(f"failed to parse binary format {key!r}: not a byte string")
    return value


def _optional_int(raw: dict[bytes, bytes], key: bytes) -> int | None:
    if key not in raw:
        return None
    value = decode(raw[key])
    if not isinstance(value, int):
        raise BencodeError(f"field {key.decode()!r} must be an integer")
    return value


def parse_announce_response(body: bytes) -> AnnounceResult:
    """Parse a bencoded tracker announce reply, compact or not, IPv4 and IPv6."""
    try:
        raw = _raw_fields(body)
        failure: Any = decode(raw[b"failure reason"]) if b"failure reason" in raw else None
        if failure is not None and not isinstance(failure, bytes):
            raise BencodeError("field 'failure reason' must be a byte string")
        interval = _optional_int(raw, b"interval")
        complete = _optional_int(raw, b"complete")
        incomplete = _optional_int(raw, b"incomplete")
    except BencodeError as exc:
        raise TrackerError(f"failed to parse torrent announce response: {exc}") from exc

    if failure is not None:
        return AnnounceResult(
            failed_reason=failure.decode("utf-8", "surrogateescape"),
            interval=timedelta(0),
        )

    result = AnnounceResult(complete=complete, incomplete=incomplete)
    if interval is not None:
        result.interval = timedelta(seconds=interval)

    peers_raw = raw.get(b"peers")
    if peers_raw is not None:
        if _is_list(peers_raw):
            peers = parse_non_compact_peers(peers_raw)
        else:
            peers = parse_compact_peers(_compact_bytes(peers_raw, "peers"))
        result.peers = sorted(peers, key=lambda peer: peer[0].packed)

    peers6_raw = raw.get(b"peers6")
    if peers6_raw is not None:
        if _is_list(peers6_raw):
            result.peers.extend(parse_non_compact_peers(peers6_raw))
        else:
            result.peers.extend(parse_compact_peers6(_compact_bytes(peers6_raw, "peers6")))

    result.peers = list(dict.fromkeys(result.peers))
    return result


def announce_params(
    info_hash: bytes,
    peer_id: bytes,
    port: int,
    uploaded: int,
    downloaded: int,
    left: int,
    event: str = "",
) -> dict[str, str | bytes]:
    """Query parameters of an announce request; the raw hashes stay as bytes."""
    params: dict[str, str | bytes] = {
        "info_hash": bytes(info_hash),
        "peer_id": bytes(peer_id),
        "port": str(port),
        "compat": "1",
        "uploaded": str(uploaded),
        "downloaded": str(downloaded),
        "left": str(left),
    }
    if event:
        params["event"] = event
    return params