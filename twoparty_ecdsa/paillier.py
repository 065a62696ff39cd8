"""The Paillier cryptosystem with generator ``n + 1``."""

from __future__ import annotations

import math
import secrets
from dataclasses import dataclass
from functools import cached_property

from twoparty_ecdsa.hashing import sample_coprime

_SMALL_PRIMES = [p for p in range(3, 2000, 2) if all(p % d for d in range(3, math.isqrt(p) + 1, 2))]
_MILLER_RABIN_ROUNDS = 40


@dataclass(frozen=True)
class EncryptionKey:
    """Public Paillier key: the modulus ``n``."""

    n: int

    @cached_property
    def nn(self) -> int:
        return self.n * self.n


@dataclass(frozen=True)
class DecryptionKey:
    """Private Paillier key: the two prime factors of the modulus."""

    p: int
    q: int

    @cached_property
    def encryption_key(self) -> EncryptionKey:
        return EncryptionKey(self.p * self.q)

    @cached_property
    def _lambda(self) -> int:
        return math.lcm(self.p - 1, self.q - 1)

    @cached_property
    def _mu(self) -> int:
        return pow(self._lambda, -1, self.encryption_key.n)


def _is_probable_prime(candidate: int) -> bool:
    if candidate < 2:
        return False
    for small in (2, *_SMALL_PRIMES):
        if candidate % small == 0:
            return candidate == small
    d, s = candidate - 1, 0
    while d % 2 == 0:
        d //= 2
        s += 1
    for _ in range(_MILLER_RABIN_ROUNDS):
        x = pow(secrets.randbelow(candidate - 3) + 2, d, candidate)
        if x in (1, candidate - 1):
            continue
        for _ in range(s - 1):
            x = x * x % candidate
            if x == candidate - 1:
                break
        else:
            return False
    return True


def _random_prime(bits: int) -> int:
    while True:
        candidate = secrets.randbits(bits) | (3 << (bits - 2)) | 1
        if _is_probable_prime(candidate):
            return candidate


def keypair(bits: int = 2048) -> tuple[EncryptionKey, DecryptionKey]:
    """Generate a key pair whose modulus has exactly ``bits`` bits."""
    if bits < 32:
        raise ValueError("Paillier modulus must have at least 32 bits")
    while True:
        p = _random_prime(bits // 2)
        q = _random_prime(bits - bits // 2)
        if p != q and math.gcd(p * q, (p - 1) * (q - 1)) == 1:
            dk = DecryptionKey(p, q)
            return dk.encryption_key, dk


def sample_randomness(ek: EncryptionKey) -> int:
    """Encryption randomness: a random unit modulo ``n``."""
    return sample_coprime(ek.n)


def encrypt_with_randomness(ek: EncryptionKey, plaintext: int, randomness: int) -> int:
    return (plaintext * ek.n + 1) * pow(randomness, ek.n, ek.nn) % ek.nn


def encrypt(ek: EncryptionKey, plaintext: int) -> int:
    return encrypt_with_randomness(ek, plaintext, sample_randomness(ek))


def decrypt(dk: DecryptionKey, ciphertext: int) -> int:
    ek = dk.encryption_key
    u = pow(ciphertext, dk._lambda, ek.nn)
    return (u - 1) // ek.n * dk._mu % ek.n


def add(ek: EncryptionKey, c1: int, c2: int) -> int:
    """Ciphertext of the sum of the two plaintexts."""
    return c1 * c2 % ek.nn


def mul(ek: EncryptionKey, ciphertext: int, scalar: int) -> int:
    """Ciphertext of the plaintext multiplied by ``scalar``."""
    return pow(ciphertext, scalar, ek.nn)