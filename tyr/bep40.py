"""Canonical peer priority (BEP 40) and the CRC32-C checksum it relies on."""

from __future__ import annotations

import struct
from ipaddress import IPv4Address, IPv6Address

IPAddress = IPv4Address | IPv6Address
AddrPort = tuple[IPAddress, int]

_CASTAGNOLI = 0x82F63B78


def _make_table() -> tuple[int, ...]:
    table = []
    for n in range(256):
        c = n
        for _ in range(8):
            c = (c >> 1) ^ _CASTAGNOLI if c & 1 else c >> 1
        table.append(c)
    return tuple(table)


_TABLE = _make_table()


def crc32c(data: bytes) -> int:
    """CRC-32 with the Castagnoli polynomial."""
    crc = 0xFFFFFFFF
    for byte in data:
        crc = _TABLE[(crc ^ byte) & 0xFF] ^ (crc >> 8)
    return crc ^ 0xFFFFFFFF


def simple_priority(key: bytes, addr: bytes) -> int:
    """Priority from a secret key and a peer address when the local address is unknown."""
    return crc32c(key + addr)


def _port_bytes(a: int, b: int) -> bytes:
    return struct.pack(">HH", min(a, b), max(a, b))


def _mask(data: bytes, size: int) -> bytes:
    return bytes(b if i < size else b & 0x55 for i, b in enumerate(data))


def _ordered(a: bytes, b: bytes) -> bytes:
    return a + b if a < b else b + a


def _priority_bytes4(a: AddrPort, b: AddrPort) -> bytes:
    if a[0] == b[0]:
        return _port_bytes(a[1], b[1])
    if not isinstance(a[0], IPv4Address) or not isinstance(b[0], IPv4Address):
        raise ValueError("not v4 addr")
    ad, bd = a[0].packed, b[0].packed
    size = 2
    for i in (4, 3, 2):
        if ad[:i] == bd[:i]:
            size = i + 1
            break
    return _ordered(_mask(ad, size), _mask(bd, size))


def _priority_bytes6(a: AddrPort, b: AddrPort) -> bytes:
    if a[0] == b[0]:
        return _port_bytes(a[1], b[1])
    if not isinstance(a[0], IPv6Address) or not isinstance(b[0], IPv6Address):
        raise ValueError("not v6 addr")
    ad, bd = a[0].packed, b[0].packed
    size = 6
    for i in range(14, 5, -2):
        if ad[:i] == bd[:i]:
            size = i + 2
            break
    return _ordered(_mask(ad, size), _mask(bd, size))


def priority4(client: AddrPort, peer: AddrPort) -> int:
    """BEP 40 priority of two IPv4 endpoints."""
    return crc32c(_priority_bytes4(client, peer))


def priority6(client: AddrPort, peer: AddrPort) -> int:
    """BEP 40 priority of two IPv6 endpoints."""
    return crc32c(_priority_bytes6(client, peer))


def _format_addr_port(addr: AddrPort) -> str:
    ip, port = addr
    if isinstance(ip, IPv6Address):
        return f"[{ip}]:{port}"
    return f"{ip}:{port}"


def peer_priority(
    peer: AddrPort,
    local_v4: IPv4Address | None,
    local_v6: IPv6Address | None,
    port: int,
    key: bytes,
) -> int:
    """Priority of a peer relative to the local address of the same family."""
    ip = peer[0]
    if isinstance(ip, IPv4Address):
        local = local_v4
        compute = priority4
    elif isinstance(ip, IPv6Address):
        local = local_v6
        compute = priority6
    else:
        raise TypeError(f"unexpected address format {peer!r}")
    if local is None:
        return simple_priority(key, _format_addr_port(peer).encode())
    return compute((local, port), peer)