"""Zero-knowledge proofs over Paillier and composite-modulus groups."""

from __future__ import annotations

import hashlib
import math
from dataclasses import dataclass

from twoparty_ecdsa import paillier
from twoparty_ecdsa.errors import IncorrectProofError
from twoparty_ecdsa.hashing import (
    hash_ints,
    int_from_bytes,
    int_to_bytes,
    sample_below,
    sample_bits,
)
from twoparty_ecdsa.paillier import DecryptionKey, EncryptionKey

SALT_STRING = b"twoparty-ecdsa correct paillier key"

_COMPOSITE_CHALLENGE_BITS = 128
_COMPOSITE_SLACK_BITS = 128
_CORRECT_KEY_ROUNDS = 11
_SMALL_PRIME_BOUND = 6370
_RANGE_ROUNDS = 40


def _primes_below(bound: int) -> list[int]:
    sieve = bytearray([1]) * bound
    sieve[0:2] = b"\x00\x00"
    for candidate in range(2, math.isqrt(bound - 1) + 1):
        if sieve[candidate]:
            sieve[candidate * candidate :: candidate] = bytearray(
                len(range(candidate * candidate, bound, candidate))
            )
    return [value for value, flag in enumerate(sieve) if flag]


_SMALL_PRIMES_PRODUCT = math.prod(_primes_below(_SMALL_PRIME_BOUND))


@dataclass(frozen=True)
class DLogStatement:
    """Public parameters ``(N, g, ni)`` of a discrete log in ``Z_N^*``."""

    n: int
    g: int
    ni: int


@dataclass(frozen=True)
class CompositeDLogProof:
    """Proof of knowledge of ``s`` with ``ni = g^(-s) mod N``."""

    x: int
    y: int

    @staticmethod
    def _challenge(x: int, statement: DLogStatement) -> int:
        digest = hash_ints(x, statement.g, statement.n, statement.ni)
        return digest & ((1 << _COMPOSITE_CHALLENGE_BITS) - 1)

    @classmethod
    def prove(cls, statement: DLogStatement, secret: int) -> CompositeDLogProof:
        bound = (1 << (_COMPOSITE_CHALLENGE_BITS + _COMPOSITE_SLACK_BITS)) * statement.n
        nonce = sample_below(bound)
        x = pow(statement.g, nonce, statement.n)
        challenge = cls._challenge(x, statement)
        return cls(x, nonce + challenge * secret)

    def verify(self, statement: DLogStatement) -> None:
        """Raise IncorrectProofError unless the proof holds for ``statement``."""
        n, g, ni = statement.n, statement.g, statement.ni
        well_formed = (
            n > 1
            and 0 < g < n
            and 0 < ni < n
            and 0 < self.x < n
            and self.y >= 0
            and math.gcd(g, n) == 1
            and math.gcd(ni, n) == 1
        )
        if not well_formed:
            raise IncorrectProofError("malformed composite dlog statement or proof")
        challenge = self._challenge(self.x, statement)
        if pow(g, self.y, n) * pow(ni, challenge, n) % n != self.x:
            raise IncorrectProofError("composite dlog proof failed")


def _mask(n: int, salt: bytes, index: int) -> int:
    blocks = (n.bit_length() + 255) // 256 + 1
    prefix = bytes(salt) + int_to_bytes(n) + index.to_bytes(4, "big")
    data = b"".join(
        hashlib.sha256(prefix + counter.to_bytes(4, "big")).digest() for counter in range(blocks)
    )
    return int_from_bytes(data) % n


@dataclass(frozen=True)
class NiCorrectKeyProof:
    """Proof that a Paillier modulus ``N`` is coprime with ``phi(N)``."""

    sigma_vec: tuple[int, ...]

    @classmethod
    def proof(cls, dk: DecryptionKey, salt: bytes | None = None) -> NiCorrectKeyProof:
        salt = SALT_STRING if salt is None else salt
        n = dk.encryption_key.n
        phi = (dk.p - 1) * (dk.q - 1)
        exponent = pow(n, -1, phi)
        return cls(
            tuple(pow(_mask(n, salt, index), exponent, n) for index in range(_CORRECT_KEY_ROUNDS))
        )

    def verify(self, ek: EncryptionKey, salt: bytes = SALT_STRING) -> None:
        """Raise IncorrectProofError unless the proof holds for ``ek``."""
        n = ek.n
        if (
            n <= 1
            or len(self.sigma_vec) != _CORRECT_KEY_ROUNDS
            or math.gcd(n, _SMALL_PRIMES_PRODUCT) != 1
            or any(not 0 <= sigma < n for sigma in self.sigma_vec)
        ):
            raise IncorrectProofError("malformed correct key proof")
        for index, sigma in enumerate(self.sigma_vec):
            if pow(sigma, n, n) != _mask(n, salt, index):
                raise IncorrectProofError("correct key proof failed")


@dataclass(frozen=True)
class _OpenedPair:
    w1: int
    r1: int
    w2: int
    r2: int


@dataclass(frozen=True)
class _MaskedShare:
    index: int
    value: int
    randomness: int


def _range_challenge(
    ek: EncryptionKey, ciphertext: int, bound: int, pairs: tuple[tuple[int, int], ...]
) -> int:
    flat = [value for pair in pairs for value in pair]
    return hash_ints(ek.n, ciphertext, bound, *flat)


@dataclass(frozen=True)
class RangeProofNi:
    """Non-interactive proof that a Paillier plaintext lies below a third of a bound."""

    range_bound: int
    encrypted_pairs: tuple[tuple[int, int], ...]
    responses: tuple[_OpenedPair | _MaskedShare, ...]

    @classmethod
    def prove(
        cls,
        ek: EncryptionKey,
        range_: int,
        ciphertext: int,
        secret: int,
        randomness: int,
    ) -> RangeProofNi:
        third = range_ // 3
        openings = []
        for _ in range(_RANGE_ROUNDS):
            low = sample_below(third)
            w1, w2 = low + third, low
            if sample_bits(1):
                w1, w2 = w2, w1
            openings.append(
                _OpenedPair(w1, paillier.sample_randomness(ek), w2, paillier.sample_randomness(ek))
            )
        pairs = tuple(
            (
                paillier.encrypt_with_randomness(ek, o.w1, o.r1),
                paillier.encrypt_with_randomness(ek, o.w2, o.r2),
            )
            for o in openings
        )
        challenge = _range_challenge(ek, ciphertext, range_, pairs)

        responses: list[_OpenedPair | _MaskedShare] = []
        for round_index, opening in enumerate(openings):
            if not (challenge >> round_index) & 1:
                responses.append(opening)
                continue
            candidates = ((0, opening.w1, opening.r1), (1, opening.w2, opening.r2))
            index, share, share_randomness = next(
                (c for c in candidates if third <= secret + c[1] < 2 * third), candidates[0]
            )
            responses.append(
                _MaskedShare(index, secret + share, randomness * share_randomness % ek.n)
            )
        return cls(range_, pairs, tuple(responses))

    def verify(self, ek: EncryptionKey, ciphertext: int) -> None:
        """Raise IncorrectProofError unless the proof holds for ``ciphertext``."""
        if len(self.encrypted_pairs) != _RANGE_ROUNDS or len(self.responses) != _RANGE_ROUNDS:
            raise IncorrectProofError("range proof has the wrong number of rounds")
        third = self.range_bound // 3
        challenge = _range_challenge(ek, ciphertext, self.range_bound, self.encrypted_pairs)
        for round_index, (pair, response) in enumerate(zip(self.encrypted_pairs, self.responses)):
            if not (challenge >> round_index) & 1:
                ok = self._check_opening(ek, pair, response, third)
            else:
                ok = self._check_masked(ek, ciphertext, pair, response, third)
            if not ok:
                raise IncorrectProofError("range proof failed")

    @staticmethod
    def _check_opening(
        ek: EncryptionKey, pair: tuple[int, int], response: object, third: int
    ) -> bool:
        if not isinstance(response, _OpenedPair):
            return False
        if paillier.encrypt_with_randomness(ek, response.w1, response.r1) != pair[0]:
            return False
        if paillier.encrypt_with_randomness(ek, response.w2, response.r2) != pair[1]:
            return False
        low, high = sorted((response.w1, response.w2))
        return 0 <= low < third and high == low + third

    @staticmethod
    def _check_masked(
        ek: EncryptionKey, ciphertext: int, pair: tuple[int, int], response: object, third: int
    ) -> bool:
        if not isinstance(response, _MaskedShare) or response.index not in (0, 1):
            return False
        if not third <= response.value < 2 * third:
            return False
        combined = paillier.add(ek, ciphertext, pair[response.index])
        return combined == paillier.encrypt_with_randomness(
            ek, response.value, response.randomness
        )