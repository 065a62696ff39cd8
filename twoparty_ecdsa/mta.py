"""Multiplicative-to-additive (MtA) share conversion.

Alice holds ``a``, Bob holds ``b``; after the exchange Alice learns ``alpha``
and Bob learns ``beta`` with ``alpha + beta = a * b`` modulo the group order.
Alice's message may carry range proofs, one per verifier setup.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from twoparty_ecdsa import paillier
from twoparty_ecdsa.curve import Point, Scalar
from twoparty_ecdsa.errors import InvalidKeyError, ProofError
from twoparty_ecdsa.hashing import sample_below
from twoparty_ecdsa.paillier import DecryptionKey, EncryptionKey
from twoparty_ecdsa.range_proofs import AliceProof
from twoparty_ecdsa.sigma import DLogProof
from twoparty_ecdsa.zkproofs import DLogStatement


@dataclass(frozen=True)
class MessageA:
    """Alice's Paillier ciphertext of ``a`` and proofs that ``a`` is small."""

    c: int
    range_proofs: tuple[AliceProof, ...] = ()

    @classmethod
    def a(
        cls,
        a: Scalar,
        alice_ek: EncryptionKey,
        dlog_statements: Sequence[DLogStatement],
    ) -> tuple[MessageA, int]:
        """Encrypt ``a`` with fresh randomness; return the message and the randomness.

        ``dlog_statements`` may be empty when no range proofs are needed.
        """
        randomness = sample_below(alice_ek.n)
        message = cls.a_with_predefined_randomness(a, alice_ek, randomness, dlog_statements)
        return message, randomness

    @classmethod
    def a_with_predefined_randomness(
        cls,
        a: Scalar,
        alice_ek: EncryptionKey,
        randomness: int,
        dlog_statements: Sequence[DLogStatement],
    ) -> MessageA:
        a_int = a.to_int()
        c_a = paillier.encrypt_with_randomness(alice_ek, a_int, randomness)
        proofs = tuple(
            AliceProof.generate(a_int, c_a, alice_ek, statement, randomness)
            for statement in dlog_statements
        )
        return cls(c=c_a, range_proofs=proofs)


@dataclass(frozen=True)
class MessageB:
    """Bob's ciphertext of ``a * b + beta_tag`` with proofs of knowledge."""

    c: int
    b_proof: DLogProof
    beta_tag_proof: DLogProof

    @classmethod
    def b(
        cls,
        b: Scalar,
        alice_ek: EncryptionKey,
        m_a: MessageA,
        dlog_statements: Sequence[DLogStatement],
    ) -> tuple[MessageB, Scalar, int, int]:
        """Answer Alice's message; return ``(message, beta, randomness, beta_tag)``."""
        beta_tag = sample_below(alice_ek.n)
        randomness = sample_below(alice_ek.n)
        message, beta = cls.b_with_predefined_randomness(
            b, alice_ek, m_a, randomness, beta_tag, dlog_statements
        )
        return message, beta, randomness, beta_tag

    @classmethod
    def b_with_predefined_randomness(
        cls,
        b: Scalar,
        alice_ek: EncryptionKey,
        m_a: MessageA,
        randomness: int,
        beta_tag: int,
        dlog_statements: Sequence[DLogStatement],
    ) -> tuple[MessageB, Scalar]:
        """Raise InvalidKeyError unless Alice's range proofs all verify."""
        if len(m_a.range_proofs) != len(dlog_statements):
            raise InvalidKeyError("range proof count does not match the statements")
        if not all(
            proof.verify(m_a.c, alice_ek, statement)
            for proof, statement in zip(m_a.range_proofs, dlog_statements)
        ):
            raise InvalidKeyError("range proof of message A failed")

        beta_tag_fe = Scalar(beta_tag)
        c_beta_tag = paillier.encrypt_with_randomness(alice_ek, beta_tag, randomness)
        b_c_a = paillier.mul(alice_ek, m_a.c, b.to_int())
        c_b = paillier.add(alice_ek, b_c_a, c_beta_tag)
        beta = Scalar.zero() - beta_tag_fe
        message = cls(
            c=c_b,
            b_proof=DLogProof.prove(b),
            beta_tag_proof=DLogProof.prove(beta_tag_fe),
        )
        return message, beta

    def verify_proofs_get_alpha(self, dk: DecryptionKey, a: Scalar) -> tuple[Scalar, int]:
        """Decrypt Alice's share; return ``(alpha, raw plaintext)``.

        Raises InvalidKeyError if Bob's proofs or the ciphertext check fail.
        """
        alice_share = paillier.decrypt(dk, self.c)
        alpha = Scalar(alice_share)
        g_alpha = Point.generator() * alpha
        ba_btag = self.b_proof.pk * a + self.beta_tag_proof.pk
        try:
            self.b_proof.verify()
            self.beta_tag_proof.verify()
        except ProofError as exc:
            raise InvalidKeyError("dlog proof of message B failed") from exc
        # Together with the proof of knowledge of beta_tag this checks the ciphertext.
        if ba_btag != g_alpha:
            raise InvalidKeyError("message B ciphertext is inconsistent")
        return alpha, alice_share


def verify_b_against_public(public_gb: Point, mta_gb: Point) -> bool:
    """Whether the public point of Bob's MtA input matches the expected one."""
    return public_gb == mta_gb