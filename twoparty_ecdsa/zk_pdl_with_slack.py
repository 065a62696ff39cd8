"""Non-interactive proof that a Paillier ciphertext encrypts a discrete log, with slack.

Statement ``(c, pk, Q, G)`` with setup ``(h1, h2, N_tilde)``, witness ``(x, r)``
such that ``Q = x * G`` and ``c = Enc(pk, x, r)``. Because of the range proof
the statement holds only for ``x`` in ``[-q^3, q^3]``.
"""

from __future__ import annotations

from dataclasses import dataclass

from twoparty_ecdsa.curve import ORDER, Point, Scalar
from twoparty_ecdsa.errors import ZkPdlWithSlackError
from twoparty_ecdsa.hashing import hash_ints, int_from_bytes, sample_below, sample_range
from twoparty_ecdsa.paillier import EncryptionKey


@dataclass(frozen=True)
class PDLwSlackStatement:
    ciphertext: int
    ek: EncryptionKey
    q: Point
    g: Point
    h1: int
    h2: int
    n_tilde: int


@dataclass(frozen=True)
class PDLwSlackWitness:
    x: Scalar
    r: int


def _point_int(point: Point) -> int:
    return int_from_bytes(point.to_bytes(True))


def _challenge(statement: PDLwSlackStatement, z: int, u1: Point, u2: int, u3: int) -> int:
    return hash_ints(
        _point_int(statement.g),
        _point_int(statement.q),
        statement.ciphertext,
        z,
        _point_int(u1),
        u2,
        u3,
    )


@dataclass(frozen=True)
class PDLwSlackProof:
    z: int
    u1: Point
    u2: int
    u3: int
    s1: int
    s2: int
    s3: int

    @classmethod
    def prove(cls, witness: PDLwSlackWitness, statement: PDLwSlackStatement) -> PDLwSlackProof:
        ek = statement.ek
        q3 = ORDER**3
        alpha = sample_below(q3)
        beta = sample_range(1, ek.n - 1)
        rho = sample_below(ORDER * statement.n_tilde)
        gamma = sample_below(q3 * statement.n_tilde)
        x = witness.x.to_int()

        z = commitment_unknown_order(statement.h1, statement.h2, statement.n_tilde, x, rho)
        u1 = statement.g * Scalar(alpha)
        u2 = commitment_unknown_order(ek.n + 1, beta, ek.nn, alpha, ek.n)
        u3 = commitment_unknown_order(statement.h1, statement.h2, statement.n_tilde, alpha, gamma)

        e = _challenge(statement, z, u1, u2, u3)
        return cls(
            z=z,
            u1=u1,
            u2=u2,
            u3=u3,
            s1=e * x + alpha,
            s2=commitment_unknown_order(witness.r, beta, ek.n, e, 1),
            s3=e * rho + gamma,
        )

    def verify(self, statement: PDLwSlackStatement) -> None:
        """Raise ZkPdlWithSlackError unless the proof holds for ``statement``."""
        ek = statement.ek
        e = _challenge(statement, self.z, self.u1, self.u2, self.u3)

        u1_test = statement.g * Scalar(self.s1) + statement.q * Scalar(ORDER - e)

        u2_tmp = commitment_unknown_order(ek.n + 1, self.s2, ek.nn, self.s1, ek.n)
        u2_test = commitment_unknown_order(u2_tmp, statement.ciphertext, ek.nn, 1, -e)

        u3_tmp = commitment_unknown_order(
            statement.h1, statement.h2, statement.n_tilde, self.s1, self.s3
        )
        u3_test = commitment_unknown_order(u3_tmp, self.z, statement.n_tilde, 1, -e)

        if not (self.u1 == u1_test and self.u2 == u2_test and self.u3 == u3_test):
            raise ZkPdlWithSlackError()


def commitment_unknown_order(h1: int, h2: int, n_tilde: int, x: int, r: int) -> int:
    """``h1^x * h2^r mod n_tilde``; a negative ``r`` uses the inverse of ``h2``.

    Raises ValueError when ``r`` is negative and ``h2`` is not invertible.
    """
    h1_x = pow(h1, x, n_tilde)
    if r < 0:
        h2_r = pow(pow(h2, -1, n_tilde), -r, n_tilde)
    else:
        h2_r = pow(h2, r, n_tilde)
    return h1_x * h2_r % n_tilde