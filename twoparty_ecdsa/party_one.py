"""Party one of two-party ECDSA: key generation, Paillier setup and signing.

Party one holds a secret share ``x1`` and a Paillier key pair; party two
receives the Paillier encryption of ``x1`` and produces an encrypted partial
signature that party one decrypts and completes.
"""

from __future__ import annotations

import hmac
import math
from dataclasses import dataclass, field
from typing import Any

from twoparty_ecdsa import paillier
from twoparty_ecdsa.curve import ORDER, Point, Scalar
from twoparty_ecdsa.errors import InvalidSignatureError, ProofError
from twoparty_ecdsa.hashing import (
    create_commitment,
    hash_points,
    int_from_bytes,
    int_to_bytes,
    sample_below,
    sample_bits,
)
from twoparty_ecdsa.mta import MessageB
from twoparty_ecdsa.paillier import DecryptionKey, EncryptionKey
from twoparty_ecdsa.sigma import DLogProof, ECDDHProof, ECDDHStatement, ECDDHWitness
from twoparty_ecdsa.zk_pdl_with_slack import PDLwSlackProof, PDLwSlackStatement, PDLwSlackWitness
from twoparty_ecdsa.zkproofs import CompositeDLogProof, DLogStatement, NiCorrectKeyProof

SECURITY_BITS = 256


def _point_int(point: Point) -> int:
    return int_from_bytes(point.to_bytes(True))


@dataclass(frozen=True)
class EcKeyPair:
    public_share: Point
    secret_share: Scalar = field(repr=False)


@dataclass(frozen=True)
class CommWitness:
    pk_commitment_blind_factor: int
    zk_pok_blind_factor: int
    public_share: Point
    d_log_proof: DLogProof


@dataclass(frozen=True)
class KeyGenFirstMsg:
    pk_commitment: int
    zk_pok_commitment: int

    @classmethod
    def create_commitments(cls) -> tuple[KeyGenFirstMsg, CommWitness, EcKeyPair]:
        """Commit to a fresh random secret share and its proof of knowledge."""
        return cls.create_commitments_with_fixed_secret_share(Scalar.random())

    @classmethod
    def create_commitments_with_fixed_secret_share(
        cls, secret_share: Scalar
    ) -> tuple[KeyGenFirstMsg, CommWitness, EcKeyPair]:
        public_share = Point.generator() * secret_share
        d_log_proof = DLogProof.prove(secret_share)

        pk_commitment_blind_factor = sample_bits(SECURITY_BITS)
        pk_commitment = create_commitment(_point_int(public_share), pk_commitment_blind_factor)

        zk_pok_blind_factor = sample_bits(SECURITY_BITS)
        zk_pok_commitment = create_commitment(
            _point_int(d_log_proof.pk_t_rand_commitment), zk_pok_blind_factor
        )

        ec_key_pair = EcKeyPair(public_share=public_share, secret_share=secret_share)
        return (
            cls(pk_commitment=pk_commitment, zk_pok_commitment=zk_pok_commitment),
            CommWitness(
                pk_commitment_blind_factor=pk_commitment_blind_factor,
                zk_pok_blind_factor=zk_pok_blind_factor,
                public_share=public_share,
                d_log_proof=d_log_proof,
            ),
            ec_key_pair,
        )


@dataclass(frozen=True)
class KeyGenSecondMsg:
    comm_witness: CommWitness

    @classmethod
    def verify_and_decommit(cls, comm_witness: CommWitness, proof: DLogProof) -> KeyGenSecondMsg:
        """Check party two's dlog proof and open the commitments; raise ProofError on failure."""
        proof.verify()
        return cls(comm_witness=comm_witness)


@dataclass(frozen=True)
class Party1Private:
    x1: Scalar = field(repr=False)
    paillier_priv: DecryptionKey = field(repr=False)
    c_key_randomness: int = field(repr=False)

    @classmethod
    def set_private_key(cls, ec_key: EcKeyPair, paillier_key: PaillierKeyPair) -> Party1Private:
        return cls(
            x1=ec_key.secret_share,
            paillier_priv=paillier_key.dk,
            c_key_randomness=paillier_key.randomness,
        )

    def refresh_private_key(
        self, factor: int
    ) -> tuple[
        EncryptionKey,
        int,
        Party1Private,
        NiCorrectKeyProof,
        PDLwSlackStatement,
        PDLwSlackProof,
        CompositeDLogProof,
    ]:
        """Multiply the share by ``factor`` under a fresh Paillier key.

        Returns the new encryption key, the new encrypted share, the new private
        state, a proof of a correct key and the PDL-with-slack proof material.
        """
        ek_new, dk_new = paillier.keypair()
        randomness = paillier.sample_randomness(ek_new)
        x1_new = self.x1 * Scalar(factor)
        c_key_new = paillier.encrypt_with_randomness(ek_new, x1_new.to_int(), randomness)
        correct_key_proof_new = NiCorrectKeyProof.proof(dk_new, None)

        paillier_key_pair = PaillierKeyPair(
            ek=ek_new, dk=dk_new, encrypted_share=c_key_new, randomness=randomness
        )
        party_one_private_new = Party1Private(
            x1=x1_new, paillier_priv=dk_new, c_key_randomness=randomness
        )
        pdl_statement, pdl_proof, composite_dlog_proof = paillier_key_pair.pdl_proof(
            party_one_private_new
        )
        return (
            ek_new,
            c_key_new,
            party_one_private_new,
            correct_key_proof_new,
            pdl_statement,
            pdl_proof,
            composite_dlog_proof,
        )

    def to_mta_message_b(self, message_b: MessageB) -> tuple[Scalar, int]:
        """Finish an MtA exchange where ``x1`` is Alice's input."""
        return message_b.verify_proofs_get_alpha(self.paillier_priv, self.x1)


@dataclass(frozen=True)
class PaillierKeyPair:
    ek: EncryptionKey
    dk: DecryptionKey = field(repr=False)
    encrypted_share: int
    randomness: int = field(repr=False)

    @classmethod
    def generate_keypair_and_encrypted_share(cls, keygen: EcKeyPair) -> PaillierKeyPair:
        ek, dk = paillier.keypair()
        return cls.generate_encrypted_share_from_fixed_paillier_keypair(ek, dk, keygen)

    @classmethod
    def generate_encrypted_share_from_fixed_paillier_keypair(
        cls, ek: EncryptionKey, dk: DecryptionKey, keygen: EcKeyPair
    ) -> PaillierKeyPair:
        randomness = paillier.sample_randomness(ek)
        encrypted_share = paillier.encrypt_with_randomness(
            ek, keygen.secret_share.to_int(), randomness
        )
        return cls(ek=ek, dk=dk, encrypted_share=encrypted_share, randomness=randomness)

    def generate_ni_proof_correct_key(self) -> NiCorrectKeyProof:
        return NiCorrectKeyProof.proof(self.dk, None)

    def pdl_proof(
        self, party1_private: Party1Private
    ) -> tuple[PDLwSlackStatement, PDLwSlackProof, CompositeDLogProof]:
        """Prove that the encrypted share is the discrete log of ``x1 * G``."""
        n_tilde, h1, h2, xhi = generate_h1_h2_n_tilde()
        dlog_statement = DLogStatement(n=n_tilde, g=h1, ni=h2)
        composite_dlog_proof = CompositeDLogProof.prove(dlog_statement, xhi)

        generator = Point.generator()
        statement = PDLwSlackStatement(
            ciphertext=self.encrypted_share,
            ek=self.ek,
            q=generator * party1_private.x1,
            g=generator,
            h1=dlog_statement.g,
            h2=dlog_statement.ni,
            n_tilde=dlog_statement.n,
        )
        witness = PDLwSlackWitness(x=party1_private.x1, r=party1_private.c_key_randomness)
        proof = PDLwSlackProof.prove(witness, statement)
        return statement, proof, composite_dlog_proof


@dataclass(frozen=True)
class EphEcKeyPair:
    public_share: Point
    secret_share: Scalar = field(repr=False)


@dataclass(frozen=True)
class EphKeyGenFirstMsg:
    d_log_proof: ECDDHProof
    public_share: Point
    c: Point  # secret_share * base_point2

    @classmethod
    def create(cls) -> tuple[EphKeyGenFirstMsg, EphEcKeyPair]:
        generator = Point.generator()
        secret_share = Scalar.random()
        public_share = generator * secret_share
        h = Point.base_point2()
        c = h * secret_share
        delta = ECDDHStatement(g1=generator, h1=public_share, g2=h, h2=c)
        d_log_proof = ECDDHProof.prove(ECDDHWitness(x=secret_share), delta)
        return (
            cls(d_log_proof=d_log_proof, public_share=public_share, c=c),
            EphEcKeyPair(public_share=public_share, secret_share=secret_share),
        )


@dataclass(frozen=True)
class EphKeyGenSecondMsg:
    @classmethod
    def verify_commitments_and_dlog_proof(
        cls, party_two_first_message: Any, party_two_second_message: Any
    ) -> EphKeyGenSecondMsg:
        """Check party two's ephemeral commitments and DDH proof; raise ProofError on failure."""
        witness = party_two_second_message.comm_witness
        proof = witness.d_log_proof
        pk_ok = party_two_first_message.pk_commitment == create_commitment(
            _point_int(witness.public_share), witness.pk_commitment_blind_factor
        )
        zk_ok = party_two_first_message.zk_pok_commitment == create_commitment(
            hash_points(proof.a1, proof.a2), witness.zk_pok_blind_factor
        )
        if not (pk_ok and zk_ok):
            raise ProofError("ephemeral commitments do not open")
        delta = ECDDHStatement(
            g1=Point.generator(),
            h1=witness.public_share,
            g2=Point.base_point2(),
            h2=witness.c,
        )
        proof.verify(delta)
        return cls()


@dataclass(frozen=True)
class SignatureRecid:
    s: int
    r: int
    recid: int


def _complete_signature(
    party_one_private: Party1Private,
    partial_sig_c3: int,
    ephemeral_local_share: EphEcKeyPair,
    ephemeral_other_public_share: Point,
) -> tuple[Point, int, int]:
    r_point = ephemeral_other_public_share * ephemeral_local_share.secret_share
    if r_point.is_zero():
        raise InvalidSignatureError("ephemeral point is at infinity")
    k1_inv = ephemeral_local_share.secret_share.invert()
    s_tag = paillier.decrypt(party_one_private.paillier_priv, partial_sig_c3)
    s_tag_tag = (Scalar(s_tag) * k1_inv).to_int()
    return r_point, r_point.x_coord() % ORDER, s_tag_tag


@dataclass(frozen=True)
class Signature:
    s: int
    r: int

    @classmethod
    def compute(
        cls,
        party_one_private: Party1Private,
        partial_sig_c3: int,
        ephemeral_local_share: EphEcKeyPair,
        ephemeral_other_public_share: Point,
    ) -> Signature:
        """Decrypt party two's partial signature and produce a low-s signature."""
        _, rx, s_tag_tag = _complete_signature(
            party_one_private, partial_sig_c3, ephemeral_local_share, ephemeral_other_public_share
        )
        return cls(s=min(s_tag_tag, ORDER - s_tag_tag), r=rx)

    @classmethod
    def compute_with_recid(
        cls,
        party_one_private: Party1Private,
        partial_sig_c3: int,
        ephemeral_local_share: EphEcKeyPair,
        ephemeral_other_public_share: Point,
    ) -> SignatureRecid:
        """As ``compute``, adding the recovery id that identifies the public key."""
        r_point, rx, s_tag_tag = _complete_signature(
            party_one_private, partial_sig_c3, ephemeral_local_share, ephemeral_other_public_share
        )
        ry = r_point.y_coord() % ORDER
        s = min(s_tag_tag, ORDER - s_tag_tag)
        # id = R.y & 1, flipped when s had to be negated.
        recid = ry & 1
        if s_tag_tag > ORDER - s_tag_tag:
            recid ^= 1
        return SignatureRecid(s=s, r=rx, recid=recid)


def compute_pubkey(party_one_private: Party1Private, other_share_public_share: Point) -> Point:
    """The joint public key ``x1 * (x2 * G)``."""
    return other_share_public_share * party_one_private.x1


def verify(signature: Signature, pubkey: Point, message: int) -> None:
    """Raise InvalidSignatureError unless ``signature`` is a valid low-s ECDSA signature."""
    s_fe = Scalar(signature.s)
    rx_fe = Scalar(signature.r)
    try:
        s_inv = s_fe.invert()
    except ZeroDivisionError as exc:
        raise InvalidSignatureError("s is zero") from exc
    e_fe = Scalar(message % ORDER)
    u1 = Point.generator() * (e_fe * s_inv)
    u2 = pubkey * (rx_fe * s_inv)
    total = u1 + u2
    if total.is_zero() or signature.r < 0:
        raise InvalidSignatureError()
    same_r = hmac.compare_digest(int_to_bytes(signature.r), int_to_bytes(total.x_coord()))
    # The second condition rules out the malleable high-s form.
    if not (same_r and signature.s < ORDER - signature.s):
        raise InvalidSignatureError()


def generate_h1_h2_n_tilde() -> tuple[int, int, int, int]:
    """Setup ``(N_tilde, h1, h2, xhi)`` with ``h2 = h1^(-xhi) mod N_tilde``."""
    ek_tilde, dk_tilde = paillier.keypair()
    n_tilde = ek_tilde.n
    phi = (dk_tilde.p - 1) * (dk_tilde.q - 1)
    while True:
        h1 = sample_below(phi)
        if h1 > 0 and math.gcd(h1, n_tilde) == 1:
            break
    xhi = sample_below(1 << 256)
    h2 = pow(pow(h1, -1, n_tilde), xhi, n_tilde)
    return n_tilde, h1, h2, xhi