"""Zero-knowledge range proofs for the MtA protocol.

Alice proves that her Paillier plaintext is small. Bob proves that his
affine operation on Alice's ciphertext used small values, optionally also
binding his secret to the curve point ``X = b * G``. Both proofs are
non-interactive, with the challenge computed by Fiat-Shamir. Bob's ``gamma``
is sampled from ``[0, q^2 * N)`` and ``tau`` from ``[0, q^3 * N_tilde)``.
"""

from __future__ import annotations

from dataclasses import dataclass

from twoparty_ecdsa.curve import ORDER, Point, Scalar
from twoparty_ecdsa.hashing import hash_ints, sample_below, sample_coprime
from twoparty_ecdsa.paillier import EncryptionKey
from twoparty_ecdsa.zkproofs import DLogStatement

_Q3 = ORDER**3


def _mod_inv(value: int, modulus: int) -> int | None:
    try:
        return pow(value, -1, modulus)
    except ValueError:
        return None


def _pedersen(statement: DLogStatement, x: int, r: int) -> int:
    n_tilde = statement.n
    return pow(statement.g, x, n_tilde) * pow(statement.ni, r, n_tilde) % n_tilde


def _coords(point: Point) -> tuple[int, int]:
    if point.is_zero():
        raise ValueError("point at infinity has no coordinates")
    return point.x_coord(), point.y_coord()


@dataclass(frozen=True)
class AliceProof:
    """Alice's proof that the plaintext of her ciphertext lies below ``q^3``."""

    z: int
    e: int
    s: int
    s1: int
    s2: int

    @classmethod
    def generate(
        cls,
        a: int,
        cipher: int,
        alice_ek: EncryptionKey,
        dlog_statement: DLogStatement,
        r: int,
    ) -> AliceProof:
        """Prove that ``cipher`` encrypts ``a`` with randomness ``r``."""
        n, nn = alice_ek.n, alice_ek.nn
        n_tilde = dlog_statement.n
        alpha = sample_below(_Q3)
        beta = sample_coprime(n)
        gamma = sample_below(_Q3 * n_tilde)
        ro = sample_below(ORDER * n_tilde)
        z = _pedersen(dlog_statement, a, ro)
        u = (alpha * n + 1) * pow(beta, n, nn) % nn
        w = _pedersen(dlog_statement, alpha, gamma)

        e = hash_ints(n, n + 1, cipher, z, u, w)
        return cls(
            z=z,
            e=e,
            s=pow(r, e, n) * beta % n,
            s1=e * a + alpha,
            s2=e * ro + gamma,
        )

    def verify(
        self, cipher: int, alice_ek: EncryptionKey, dlog_statement: DLogStatement
    ) -> bool:
        n, nn = alice_ek.n, alice_ek.nn
        n_tilde = dlog_statement.n

        if self.s1 > _Q3:
            return False

        z_e_inv = _mod_inv(pow(self.z, self.e, n_tilde), n_tilde)
        if z_e_inv is None:
            return False
        w = _pedersen(dlog_statement, self.s1, self.s2) * z_e_inv % n_tilde

        gs1 = (self.s1 * n + 1) % nn
        cipher_e_inv = _mod_inv(pow(cipher, self.e, nn), nn)
        if cipher_e_inv is None:
            return False
        u = gs1 * pow(self.s, n, nn) * cipher_e_inv % nn

        return hash_ints(n, n + 1, cipher, self.z, u, w) == self.e


@dataclass(frozen=True)
class BobCheck:
    """Extra values hashed into Bob's challenge when MtA runs with check."""

    u: Point
    x: Point


@dataclass(frozen=True)
class BobProof:
    """Bob's proof that his MtA output was formed with small values."""

    t: int
    z: int
    e: int
    s: int
    s1: int
    s2: int
    t1: int
    t2: int

    @classmethod
    def generate(
        cls,
        a_encrypted: int,
        mta_encrypted: int,
        b: Scalar,
        beta_prim: int,
        alice_ek: EncryptionKey,
        dlog_statement: DLogStatement,
        r: int,
        check: bool,
    ) -> tuple[BobProof, Point | None]:
        """Prove ``mta_encrypted = b * a_encrypted + Enc(beta_prim, r)``.

        With ``check`` the challenge also binds ``X = b * G``; the commitment
        ``u`` needed to verify that binding is returned alongside the proof.
        """
        n, nn = alice_ek.n, alice_ek.nn
        n_tilde = dlog_statement.n
        b_int = b.to_int()

        alpha = sample_below(_Q3)
        beta = sample_coprime(n)
        gamma = sample_below(ORDER**2 * n)
        ro = sample_below(ORDER * n_tilde)
        ro_prim = sample_below(_Q3 * n_tilde)
        sigma = sample_below(ORDER * n_tilde)
        tau = sample_below(_Q3 * n_tilde)
        z = _pedersen(dlog_statement, b_int, ro)
        z_prim = _pedersen(dlog_statement, alpha, ro_prim)
        t = _pedersen(dlog_statement, beta_prim, sigma)
        w = _pedersen(dlog_statement, gamma, tau)
        v = pow(a_encrypted, alpha, nn) * (gamma * n + 1) * pow(beta, n, nn) % nn

        values = [n, n + 1, a_encrypted, mta_encrypted, z, z_prim, t, v, w]
        check_u = None
        if check:
            generator = Point.generator()
            x_point = generator * b
            check_u = generator * Scalar(alpha)
            values.extend(_coords(x_point))
            values.extend(_coords(check_u))
        e = hash_ints(*values)

        proof = cls(
            t=t,
            z=z,
            e=e,
            s=pow(r, e, n) * beta % n,
            s1=e * b_int + alpha,
            s2=e * ro + ro_prim,
            t1=e * beta_prim + gamma,
            t2=e * sigma + tau,
        )
        return proof, check_u

    def verify(
        self,
        a_enc: int,
        mta_avc_out: int,
        alice_ek: EncryptionKey,
        dlog_statement: DLogStatement,
        check: BobCheck | None = None,
    ) -> bool:
        n, nn = alice_ek.n, alice_ek.nn
        n_tilde = dlog_statement.n

        if self.s1 > _Q3:
            return False

        z_e_inv = _mod_inv(pow(self.z, self.e, n_tilde), n_tilde)
        if z_e_inv is None:
            return False
        z_prim = _pedersen(dlog_statement, self.s1, self.s2) * z_e_inv % n_tilde

        mta_e_inv = _mod_inv(pow(mta_avc_out, self.e, nn), nn)
        if mta_e_inv is None:
            return False
        v = (
            pow(a_enc, self.s1, nn)
            * pow(self.s, n, nn)
            * (self.t1 * n + 1)
            * mta_e_inv
            % nn
        )

        t_e_inv = _mod_inv(pow(self.t, self.e, n_tilde), n_tilde)
        if t_e_inv is None:
            return False
        w = _pedersen(dlog_statement, self.t1, self.t2) * t_e_inv % n_tilde

        values = [n, n + 1, a_enc, mta_avc_out, self.z, z_prim, self.t, v, w]
        if check is not None:
            values.extend(_coords(check.x))
            values.extend(_coords(check.u))
        return hash_ints(*values) == self.e


@dataclass(frozen=True)
class BobProofExt:
    """Bob's proof extended with knowledge of ``b`` such that ``X = b * G``."""

    proof: BobProof
    u: Point

    def verify(
        self,
        a_enc: int,
        mta_avc_out: int,
        alice_ek: EncryptionKey,
        dlog_statement: DLogStatement,
        x: Point,
    ) -> bool:
        if not self.proof.verify(
            a_enc, mta_avc_out, alice_ek, dlog_statement, BobCheck(u=self.u, x=x)
        ):
            return False
        lhs = Point.generator() * Scalar(self.proof.s1)
        rhs = x * Scalar(self.proof.e) + self.u
        return lhs == rhs