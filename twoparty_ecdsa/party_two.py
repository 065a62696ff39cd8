"""Party two of two-party ECDSA: key generation, PDL checks and partial signing.

Party two holds a secret share ``x2`` and the Paillier encryption of party
one's share ``x1``. It checks that the encryption is consistent with party
one's public share. For each message it produces an encrypted partial
signature that only party one can complete.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from twoparty_ecdsa import paillier
from twoparty_ecdsa.curve import ORDER, Point, Scalar
from twoparty_ecdsa.errors import (
    IncorrectProofError,
    PartyTwoError,
    ProofError,
    ZkPdlWithSlackError,
)
from twoparty_ecdsa.hashing import (
    create_commitment,
    hash_points,
    int_from_bytes,
    sample_below,
    sample_bits,
)
from twoparty_ecdsa.mta import MessageA, MessageB
from twoparty_ecdsa.paillier import EncryptionKey
from twoparty_ecdsa.sigma import DLogProof, ECDDHProof, ECDDHStatement, ECDDHWitness
from twoparty_ecdsa.zk_pdl_with_slack import PDLwSlackProof, PDLwSlackStatement
from twoparty_ecdsa.zkproofs import (
    SALT_STRING,
    CompositeDLogProof,
    DLogStatement,
    NiCorrectKeyProof,
)

if TYPE_CHECKING:
    from twoparty_ecdsa.party_one import EphKeyGenFirstMsg as Party1EphKeyGenFirstMsg
    from twoparty_ecdsa.party_one import KeyGenFirstMsg as Party1KeyGenFirstMsg
    from twoparty_ecdsa.party_one import KeyGenSecondMsg as Party1KeyGenSecondMsg

SECURITY_BITS = 256
PAILLIER_KEY_SIZE = 2048


def _point_int(point: Point) -> int:
    return int_from_bytes(point.to_bytes(True))


@dataclass(frozen=True)
class EcKeyPair:
    public_share: Point
    secret_share: Scalar = field(repr=False)


@dataclass(frozen=True)
class KeyGenFirstMsg:
    d_log_proof: DLogProof
    public_share: Point

    @classmethod
    def create(cls) -> tuple[KeyGenFirstMsg, EcKeyPair]:
        """Pick a random secret share and prove knowledge of it."""
        return cls.create_with_fixed_secret_share(Scalar.random())

    @classmethod
    def create_with_fixed_secret_share(
        cls, secret_share: Scalar
    ) -> tuple[KeyGenFirstMsg, EcKeyPair]:
        public_share = Point.generator() * secret_share
        d_log_proof = DLogProof.prove(secret_share)
        return (
            cls(d_log_proof=d_log_proof, public_share=public_share),
            EcKeyPair(public_share=public_share, secret_share=secret_share),
        )


@dataclass(frozen=True)
class KeyGenSecondMsg:
    @classmethod
    def verify_commitments_and_dlog_proof(
        cls,
        party_one_first_message: Party1KeyGenFirstMsg,
        party_one_second_message: Party1KeyGenSecondMsg,
    ) -> KeyGenSecondMsg:
        """Check that party one's commitments open and its dlog proof holds.

        Raises ProofError on any failure.
        """
        witness = party_one_second_message.comm_witness
        proof = witness.d_log_proof
        pk_ok = party_one_first_message.pk_commitment == create_commitment(
            _point_int(witness.public_share), witness.pk_commitment_blind_factor
        )
        zk_ok = party_one_first_message.zk_pok_commitment == create_commitment(
            _point_int(proof.pk_t_rand_commitment), witness.zk_pok_blind_factor
        )
        if not (pk_ok and zk_ok):
            raise ProofError("key generation commitments do not open")
        proof.verify()
        return cls()


def compute_pubkey(local_share: EcKeyPair, other_share_public_share: Point) -> Point:
    """The joint public key ``x2 * (x1 * G)``."""
    return other_share_public_share * local_share.secret_share


@dataclass(frozen=True)
class PaillierPublic:
    """Party one's Paillier encryption key and the encryption of its share."""

    ek: EncryptionKey
    encrypted_secret_share: int

    def pdl_verify(
        self,
        composite_dlog_proof: CompositeDLogProof,
        pdl_w_slack_statement: PDLwSlackStatement,
        pdl_w_slack_proof: PDLwSlackProof,
        q1: Point,
    ) -> None:
        """Check that the encrypted share is the discrete log of ``q1``.

        Raises PartyTwoError when the statement does not match or a proof fails.
        """
        statement = pdl_w_slack_statement
        if (
            statement.ek != self.ek
            or statement.ciphertext != self.encrypted_secret_share
            or statement.q != q1
        ):
            raise PartyTwoError()
        dlog_statement = DLogStatement(n=statement.n_tilde, g=statement.h1, ni=statement.h2)
        try:
            composite_dlog_proof.verify(dlog_statement)
            pdl_w_slack_proof.verify(statement)
        except (IncorrectProofError, ZkPdlWithSlackError) as exc:
            raise PartyTwoError() from exc


def verify_ni_proof_correct_key(proof: NiCorrectKeyProof, ek: EncryptionKey) -> None:
    """Raise IncorrectProofError if the key is too short or the proof fails."""
    if ek.n.bit_length() < PAILLIER_KEY_SIZE - 1:
        raise IncorrectProofError("paillier key is too short")
    proof.verify(ek, SALT_STRING)


@dataclass(frozen=True)
class Party2Private:
    x2: Scalar = field(repr=False)

    @classmethod
    def set_private_key(cls, ec_key: EcKeyPair) -> Party2Private:
        return cls(x2=ec_key.secret_share)

    def update_private_key(self, factor: int) -> Party2Private:
        """The share multiplied by ``factor`` modulo the group order."""
        return Party2Private(x2=self.x2 * Scalar(factor))

    def to_mta_message_b(
        self, ek: EncryptionKey, ciphertext: int
    ) -> tuple[MessageB, Scalar]:
        """Answer an MtA exchange where ``ciphertext`` encrypts Alice's input."""
        message_a = MessageA(c=ciphertext, range_proofs=())
        message_b, beta, _, _ = MessageB.b(self.x2, ek, message_a, ())
        return message_b, beta


@dataclass(frozen=True)
class EphEcKeyPair:
    public_share: Point
    secret_share: Scalar = field(repr=False)


@dataclass(frozen=True)
class EphCommWitness:
    pk_commitment_blind_factor: int
    zk_pok_blind_factor: int
    public_share: Point
    d_log_proof: ECDDHProof
    c: Point  # secret_share * base_point2


@dataclass(frozen=True)
class EphKeyGenFirstMsg:
    pk_commitment: int
    zk_pok_commitment: int

    @classmethod
    def create_commitments(cls) -> tuple[EphKeyGenFirstMsg, EphCommWitness, EphEcKeyPair]:
        """Commit to a fresh ephemeral share and its DDH proof."""
        generator = Point.generator()
        secret_share = Scalar.random()
        public_share = generator * secret_share
        h = Point.base_point2()
        c = h * secret_share
        delta = ECDDHStatement(g1=generator, h1=public_share, g2=h, h2=c)
        d_log_proof = ECDDHProof.prove(ECDDHWitness(x=secret_share), delta)

        pk_commitment_blind_factor = sample_bits(SECURITY_BITS)
        pk_commitment = create_commitment(_point_int(public_share), pk_commitment_blind_factor)

        zk_pok_blind_factor = sample_bits(SECURITY_BITS)
        zk_pok_commitment = create_commitment(
            hash_points(d_log_proof.a1, d_log_proof.a2), zk_pok_blind_factor
        )
        return (
            cls(pk_commitment=pk_commitment, zk_pok_commitment=zk_pok_commitment),
            EphCommWitness(
                pk_commitment_blind_factor=pk_commitment_blind_factor,
                zk_pok_blind_factor=zk_pok_blind_factor,
                public_share=public_share,
                d_log_proof=d_log_proof,
                c=c,
            ),
            EphEcKeyPair(public_share=public_share, secret_share=secret_share),
        )


@dataclass(frozen=True)
class EphKeyGenSecondMsg:
    comm_witness: EphCommWitness

    @classmethod
    def verify_and_decommit(
        cls,
        comm_witness: EphCommWitness,
        party_one_first_message: Party1EphKeyGenFirstMsg,
    ) -> EphKeyGenSecondMsg:
        """Check party one's DDH proof and open the commitments; raise ProofError on failure."""
        delta = ECDDHStatement(
            g1=Point.generator(),
            h1=party_one_first_message.public_share,
            g2=Point.base_point2(),
            h2=party_one_first_message.c,
        )
        party_one_first_message.d_log_proof.verify(delta)
        return cls(comm_witness=comm_witness)


@dataclass(frozen=True)
class PartialSig:
    c3: int

    @classmethod
    def compute(
        cls,
        ek: EncryptionKey,
        encrypted_secret_share: int,
        local_share: Party2Private,
        ephemeral_local_share: EphEcKeyPair,
        ephemeral_other_public_share: Point,
        message: int,
    ) -> PartialSig:
        """Encrypt ``k2^-1 * (m + r * x1 * x2)`` plus a random multiple of ``q``."""
        q = ORDER
        r_point = ephemeral_other_public_share * ephemeral_local_share.secret_share
        if r_point.is_zero():
            raise ValueError("ephemeral point is at infinity")
        rx = r_point.x_coord() % q
        rho = sample_below(q**2)
        k2_inv = ephemeral_local_share.secret_share.invert().to_int()
        partial_sig = rho * q + k2_inv * message % q
        c1 = paillier.encrypt(ek, partial_sig)
        v = k2_inv * (rx * local_share.x2.to_int() % q) % q
        c2 = paillier.mul(ek, encrypted_secret_share, v)
        return cls(c3=paillier.add(ek, c2, c1))