"""Crypto method selection for message stream encryption handshakes."""

from __future__ import annotations

import enum
from collections.abc import Callable


class CryptoMethod(enum.IntFlag):
    """Encryption methods offered and chosen during the handshake."""

    PLAINTEXT = 1
    RC4 = 2


ALL_SUPPORTED = CryptoMethod.PLAINTEXT | CryptoMethod.RC4

CryptoSelector = Callable[[CryptoMethod], CryptoMethod]


def force_crypto(provided: CryptoMethod) -> CryptoMethod:
    """Always pick RC4."""
    return CryptoMethod.RC4


def prefer_crypto(provided: CryptoMethod) -> CryptoMethod:
    """Pick RC4 when offered, plaintext otherwise."""
    if provided & CryptoMethod.RC4:
        return CryptoMethod.RC4
    return CryptoMethod.PLAINTEXT


def prefer_not_crypto(provided: CryptoMethod) -> CryptoMethod:
    """Pick plaintext when offered, RC4 otherwise."""
    if provided & CryptoMethod.PLAINTEXT:
        return CryptoMethod.PLAINTEXT
    return CryptoMethod.RC4


def crypto_selector(mode: str) -> CryptoSelector | None:
    """Selector for a configured crypto mode; ``None`` means encryption is disabled."""
    if mode == "force":
        return force_crypto
    if mode in ("", "prefer"):
        return prefer_crypto
    if mode == "prefer-not":
        return prefer_not_crypto
    if mode == "disable":
        return None
    raise ValueError(
        f"invalid `application.crypto` config {mode!r}, only 'prefer'(default) "
        "'prefer-not', 'disable' or 'force' are allowed"
    )