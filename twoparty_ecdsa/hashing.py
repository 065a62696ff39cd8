"""Integer encodings, SHA-256 based hashing and commitments, and random sampling."""

from __future__ import annotations

import hashlib
import math
import secrets
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from twoparty_ecdsa.curve import Point


def int_from_bytes(data: bytes) -> int:
    """Interpret bytes as an unsigned big-endian integer."""
    return int.from_bytes(bytes(data), "big")


def int_to_bytes(value: int) -> bytes:
    """Minimal unsigned big-endian encoding; zero encodes as a single zero byte."""
    if value < 0:
        raise ValueError("cannot encode a negative integer")
    return value.to_bytes(max(1, (value.bit_length() + 7) // 8), "big")


def hash_ints(*args: int) -> int:
    """SHA-256 over the concatenated magnitudes of the integers, as an integer."""
    digest = hashlib.sha256()
    for value in args:
        digest.update(int_to_bytes(abs(value)))
    return int_from_bytes(digest.digest())


def hash_points(*args: Point) -> int:
    """SHA-256 over the compressed encodings of the points, as an integer."""
    digest = hashlib.sha256()
    for point in args:
        digest.update(point.to_bytes(True))
    return int_from_bytes(digest.digest())


def create_commitment(message: int, blinding: int) -> int:
    """Hash commitment to ``message`` with a caller-chosen blinding factor."""
    return hash_ints(message, blinding)


def sample_bits(bits: int) -> int:
    """A uniformly random integer of at most ``bits`` bits."""
    if bits < 0:
        raise ValueError("bit count must be non-negative")
    return secrets.randbits(bits)


def sample_below(upper: int) -> int:
    """A uniformly random integer in ``[0, upper)``."""
    if upper <= 0:
        raise ValueError("upper bound must be positive")
    return secrets.randbelow(upper)


def sample_range(lower: int, upper: int) -> int:
    """A uniformly random integer in ``[lower, upper)``."""
    if upper <= lower:
        raise ValueError("empty sampling range")
    return lower + secrets.randbelow(upper - lower)


def sample_coprime(modulus: int) -> int:
    """A random element of the multiplicative group modulo ``modulus``."""
    while True:
        candidate = sample_below(modulus)
        if math.gcd(candidate, modulus) == 1:
            return candidate