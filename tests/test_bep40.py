from ipaddress import ip_address

import pytest

from tyr.bep40 import crc32c, peer_priority, priority4, priority6, simple_priority


def ap(text, port=0):
    return ip_address(text), port


def test_crc32c_known_vectors():
    assert crc32c(bytes.fromhex("624C14007BD50000")) == 0xEC2D7224
    assert crc32c(bytes.fromhex("7BD5200A7BD520EA")) == 0x99568189
    assert crc32c(b"123456789") == 0xE3069283


def test_priority4():
    assert priority4(ap("123.213.32.10"), ap("98.76.54.32")) == 0xEC2D7224
    assert priority4(ap("98.76.54.32"), ap("123.213.32.10")) == 0xEC2D7224
    assert priority4(ap("123.213.32.10"), ap("123.213.32.234")) == 0x99568189
    assert priority4(ap("206.248.98.111"), ap("142.147.89.224")) == 0x2B41D456


def test_priority6():
    assert (
        priority6(
            ap("2015:7693:6cd9:a56a:e47f:7101:483e:800a"),
            ap("b1fa:9ff2:fbdc:23b9:3618:332c:216c:5b4a"),
        )
        == 0xFBD26E29
    )


def test_priority6_is_symmetric():
    a = ap("2001:db8::1", 10)
    b = ap("2001:db8:1::2", 20)
    assert priority6(a, b) == priority6(b, a)


def test_same_address_uses_ports_in_order():
    a = ap("10.0.0.1", 1)
    b = ap("10.0.0.1", 2)
    assert priority4(a, b) == crc32c(bytes([0, 1, 0, 2]))
    assert priority4(b, a) == priority4(a, b)


def test_mixed_families_raise():
    with pytest.raises(ValueError):
        priority4(ap("10.0.0.1"), ap("::1"))
    with pytest.raises(ValueError):
        priority6(ap("::1"), ap("10.0.0.1"))


def test_simple_priority_concatenates():
    assert simple_priority(b"ab", b"cd") == crc32c(b"abcd")


def test_peer_priority_without_local_address():
    key = bytes(32)
    assert peer_priority(ap("1.2.3.4", 80), None, None, 6881, key) == simple_priority(key, b"1.2.3.4:80")
    assert peer_priority(ap("::1", 80), None, None, 6881, key) == simple_priority(key, b"[::1]:80")


def test_peer_priority_with_local_address():
    local4 = ip_address("123.213.32.10")
    local6 = ip_address("2015:7693:6cd9:a56a:e47f:7101:483e:800a")
    assert peer_priority(ap("98.76.54.32"), local4, local6, 0, b"k") == 0xEC2D7224
    assert (
        peer_priority(ap("b1fa:9ff2:fbdc:23b9:3618:332c:216c:5b4a"), local4, local6, 0, b"k")
        == 0xFBD26E29
    )