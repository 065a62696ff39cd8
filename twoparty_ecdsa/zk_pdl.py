"""Interactive proof that a Paillier ciphertext encrypts the discrete log of a point.

Statement ``(c, pk, Q, G)``, witness ``(x, r, sk)`` with ``Q = x * G``,
``c = Enc(pk, x, r)`` and ``Dec(sk, c) = x``. Because of the range proof the
protocol is sound only for ``x < q / 3``.
"""

from __future__ import annotations

from dataclasses import dataclass

from twoparty_ecdsa import paillier
from twoparty_ecdsa.curve import ORDER, Point, Scalar
from twoparty_ecdsa.errors import IncorrectProofError, ZkPdlError
from twoparty_ecdsa.hashing import create_commitment, int_from_bytes, sample_below
from twoparty_ecdsa.paillier import DecryptionKey, EncryptionKey
from twoparty_ecdsa.zkproofs import RangeProofNi

_MESSAGE2_FAILED = "zk pdl message2 failed"
_FINALIZE_FAILED = "zk pdl finalize failed"


@dataclass(frozen=True)
class PDLStatement:
    """``ciphertext`` encrypts under ``ek`` the discrete log of ``q`` to base ``g``."""

    ciphertext: int
    ek: EncryptionKey
    q: Point
    g: Point


@dataclass(frozen=True)
class PDLWitness:
    x: Scalar
    r: int
    dk: DecryptionKey


@dataclass
class PDLVerifierState:
    c_tag: int
    c_tag_tag: int
    a: int
    b: int
    blindness: int
    q_tag: Point
    c_hat: int = 0


@dataclass(frozen=True)
class PDLProverDecommit:
    q_hat: Point
    blindness: int


@dataclass(frozen=True)
class PDLProverState:
    decommit: PDLProverDecommit
    alpha: int


@dataclass(frozen=True)
class PDLVerifierFirstMessage:
    c_tag: int
    c_tag_tag: int


@dataclass(frozen=True)
class PDLProverFirstMessage:
    c_hat: int
    range_proof: RangeProofNi


@dataclass(frozen=True)
class PDLVerifierSecondMessage:
    a: int
    b: int
    blindness: int


@dataclass(frozen=True)
class PDLProverSecondMessage:
    decommit: PDLProverDecommit


def _concat(a: int, b: int) -> int:
    return a + (b << a.bit_length())


def _point_commitment(point: Point, blindness: int) -> int:
    return create_commitment(int_from_bytes(point.to_bytes(True)), blindness)


def verifier_message1(
    statement: PDLStatement,
) -> tuple[PDLVerifierFirstMessage, PDLVerifierState]:
    """Blind the ciphertext as ``a * c + b`` and commit to ``(a, b)``."""
    a_fe = Scalar.random()
    a = a_fe.to_int()
    b = sample_below(ORDER**2)
    ek = statement.ek
    c_tag = paillier.add(
        ek, paillier.mul(ek, statement.ciphertext, a), paillier.encrypt(ek, b)
    )
    blindness = sample_below(ORDER)
    c_tag_tag = create_commitment(_concat(a, b), blindness)
    q_tag = statement.q * a_fe + statement.g * Scalar(b)
    return (
        PDLVerifierFirstMessage(c_tag=c_tag, c_tag_tag=c_tag_tag),
        PDLVerifierState(
            c_tag=c_tag,
            c_tag_tag=c_tag_tag,
            a=a,
            b=b,
            blindness=blindness,
            q_tag=q_tag,
        ),
    )


def verifier_message2(
    prover_first_message: PDLProverFirstMessage,
    statement: PDLStatement,
    state: PDLVerifierState,
) -> PDLVerifierSecondMessage:
    """Record the prover's commitment, check its range proof and open ``(a, b)``."""
    decommit = PDLVerifierSecondMessage(a=state.a, b=state.b, blindness=state.blindness)
    try:
        prover_first_message.range_proof.verify(statement.ek, statement.ciphertext)
        range_proof_ok = True
    except IncorrectProofError:
        range_proof_ok = False
    state.c_hat = prover_first_message.c_hat
    if not range_proof_ok:
        raise ZkPdlError(_MESSAGE2_FAILED)
    return decommit


def verifier_finalize(
    prover_first_message: PDLProverFirstMessage,
    prover_second_message: PDLProverSecondMessage,
    state: PDLVerifierState,
) -> None:
    """Raise ZkPdlError unless the prover's decommitment matches ``q_tag``."""
    decommit = prover_second_message.decommit
    c_hat_test = _point_commitment(decommit.q_hat, decommit.blindness)
    if prover_first_message.c_hat != c_hat_test or decommit.q_hat != state.q_tag:
        raise ZkPdlError(_FINALIZE_FAILED)


def prover_message1(
    witness: PDLWitness,
    statement: PDLStatement,
    verifier_first_message: PDLVerifierFirstMessage,
) -> tuple[PDLProverFirstMessage, PDLProverState]:
    """Decrypt the blinded ciphertext, commit to ``alpha * G`` and prove the range."""
    alpha = paillier.decrypt(witness.dk, verifier_first_message.c_tag)
    q_hat = statement.g * Scalar(alpha)
    blindness = sample_below(ORDER)
    c_hat = _point_commitment(q_hat, blindness)
    range_proof = RangeProofNi.prove(
        statement.ek, ORDER, statement.ciphertext, witness.x.to_int(), witness.r
    )
    return (
        PDLProverFirstMessage(c_hat=c_hat, range_proof=range_proof),
        PDLProverState(decommit=PDLProverDecommit(q_hat=q_hat, blindness=blindness), alpha=alpha),
    )


def prover_message2(
    verifier_first_message: PDLVerifierFirstMessage,
    verifier_second_message: PDLVerifierSecondMessage,
    witness: PDLWitness,
    state: PDLProverState,
) -> PDLProverSecondMessage:
    """Check the verifier's opening and reveal the commitment to ``alpha * G``."""
    opening = verifier_second_message
    c_tag_tag_test = create_commitment(_concat(opening.a, opening.b), opening.blindness)
    alpha_test = opening.a * witness.x.to_int() + opening.b
    if alpha_test != state.alpha or verifier_first_message.c_tag_tag != c_tag_tag_test:
        raise ZkPdlError(_MESSAGE2_FAILED)
    return PDLProverSecondMessage(decommit=state.decommit)