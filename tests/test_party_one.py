from dataclasses import replace
from types import SimpleNamespace

import pytest

from twoparty_ecdsa import paillier
from twoparty_ecdsa.curve import ORDER, Point, Scalar
from twoparty_ecdsa.errors import (
    IncorrectProofError,
    InvalidSignatureError,
    ProofError,
)
from twoparty_ecdsa.hashing import create_commitment, hash_points, int_from_bytes, sample_below
from twoparty_ecdsa.mta import MessageA, MessageB
from twoparty_ecdsa.party_one import (
    EcKeyPair,
    EphKeyGenFirstMsg,
    EphKeyGenSecondMsg,
    KeyGenFirstMsg,
    KeyGenSecondMsg,
    PaillierKeyPair,
    Party1Private,
    Signature,
    compute_pubkey,
    generate_h1_h2_n_tilde,
    verify,
)
from twoparty_ecdsa.sigma import DLogProof, ECDDHProof, ECDDHStatement, ECDDHWitness
from twoparty_ecdsa.zkproofs import DLogStatement


@pytest.fixture(scope="module")
def paillier_keys():
    return paillier.keypair(1024)


def _party_one(paillier_keys, secret=None):
    ek, dk = paillier_keys
    secret = secret if secret is not None else Scalar.random()
    ec_key = EcKeyPair(public_share=Point.generator() * secret, secret_share=secret)
    key_pair = PaillierKeyPair.generate_encrypted_share_from_fixed_paillier_keypair(ek, dk, ec_key)
    return ec_key, key_pair, Party1Private.set_private_key(ec_key, key_pair)


def _partial_sig(ek, encrypted_share, x2, k2, r1, message):
    rx = (r1 * k2).x_coord() % ORDER
    k2_inv = pow(k2.to_int(), -1, ORDER)
    plain = sample_below(ORDER**2) * ORDER + k2_inv * message % ORDER
    c1 = paillier.encrypt(ek, plain)
    v = k2_inv * (rx * x2.to_int() % ORDER) % ORDER
    return paillier.add(ek, paillier.mul(ek, encrypted_share, v), c1)


def _sign(paillier_keys, message):
    _, key_pair, private = _party_one(paillier_keys)
    x2 = Scalar.random()
    k2 = Scalar.random()
    eph_msg, eph_pair = EphKeyGenFirstMsg.create()
    c3 = _partial_sig(
        key_pair.ek, key_pair.encrypted_share, x2, k2, eph_msg.public_share, message
    )
    r2 = Point.generator() * k2
    pubkey = compute_pubkey(private, Point.generator() * x2)
    return private, c3, eph_pair, r2, pubkey


def test_create_commitments_open_to_public_share():
    first, witness, ec_key = KeyGenFirstMsg.create_commitments()
    assert ec_key.public_share == Point.generator() * ec_key.secret_share
    assert witness.public_share == ec_key.public_share
    assert first.pk_commitment == create_commitment(
        int_from_bytes(ec_key.public_share.to_bytes(True)), witness.pk_commitment_blind_factor
    )
    assert first.zk_pok_commitment == create_commitment(
        int_from_bytes(witness.d_log_proof.pk_t_rand_commitment.to_bytes(True)),
        witness.zk_pok_blind_factor,
    )


def test_fixed_secret_share():
    secret = Scalar(10)
    _, witness, ec_key = KeyGenFirstMsg.create_commitments_with_fixed_secret_share(secret)
    assert ec_key.secret_share == secret
    assert witness.public_share == Point.generator() * secret
    assert witness.d_log_proof.pk == witness.public_share


def test_verify_and_decommit():
    _, witness, _ = KeyGenFirstMsg.create_commitments()
    proof = DLogProof.prove(Scalar.random())
    second = KeyGenSecondMsg.verify_and_decommit(witness, proof)
    assert second.comm_witness == witness

    bad = replace(proof, pk=Point.generator() * Scalar.random())
    with pytest.raises(ProofError):
        KeyGenSecondMsg.verify_and_decommit(witness, bad)


def test_encrypted_share_decrypts_to_secret(paillier_keys):
    ec_key, key_pair, private = _party_one(paillier_keys)
    assert paillier.decrypt(key_pair.dk, key_pair.encrypted_share) == ec_key.secret_share.to_int()
    assert private.x1 == ec_key.secret_share


def test_generate_keypair_and_encrypted_share():
    secret = Scalar.random()
    ec_key = EcKeyPair(public_share=Point.generator() * secret, secret_share=secret)
    key_pair = PaillierKeyPair.generate_keypair_and_encrypted_share(ec_key)
    assert key_pair.ek.n.bit_length() == 2048
    assert paillier.decrypt(key_pair.dk, key_pair.encrypted_share) == secret.to_int()


def test_compute_pubkey(paillier_keys):
    _, _, private = _party_one(paillier_keys)
    x2 = Scalar.random()
    pubkey = compute_pubkey(private, Point.generator() * x2)
    assert pubkey == Point.generator() * (private.x1 * x2)


def test_correct_key_proof(paillier_keys):
    _, key_pair, _ = _party_one(paillier_keys)
    proof = key_pair.generate_ni_proof_correct_key()
    proof.verify(key_pair.ek)
    other_ek, _ = paillier.keypair(1024)
    with pytest.raises(IncorrectProofError):
        proof.verify(other_ek)


def test_two_party_sign_and_verify(paillier_keys):
    message = 1234
    private, c3, eph_pair, r2, pubkey = _sign(paillier_keys, message)
    signature = Signature.compute(private, c3, eph_pair, r2)
    verify(signature, pubkey, message)
    assert signature.s < ORDER - signature.s
    assert signature.r == (r2 * eph_pair.secret_share).x_coord() % ORDER
    with pytest.raises(InvalidSignatureError):
        verify(signature, pubkey, message + 1)


def test_verify_rejects_high_s_and_zero(paillier_keys):
    message = 1234
    private, c3, eph_pair, r2, pubkey = _sign(paillier_keys, message)
    signature = Signature.compute(private, c3, eph_pair, r2)
    with pytest.raises(InvalidSignatureError):
        verify(Signature(s=ORDER - signature.s, r=signature.r), pubkey, message)
    with pytest.raises(InvalidSignatureError):
        verify(Signature(s=0, r=signature.r), pubkey, message)


def test_compute_with_recid_recovers_pubkey(paillier_keys):
    message = 1234
    private, c3, eph_pair, r2, pubkey = _sign(paillier_keys, message)
    plain = Signature.compute(private, c3, eph_pair, r2)
    with_recid = Signature.compute_with_recid(private, c3, eph_pair, r2)
    assert (with_recid.s, with_recid.r) == (plain.s, plain.r)
    assert with_recid.recid in (0, 1)

    r_point = Point.from_bytes(bytes([2 + with_recid.recid]) + with_recid.r.to_bytes(32, "big"))
    recovered = (r_point * Scalar(with_recid.s) - Point.generator() * Scalar(message)) * Scalar(
        with_recid.r
    ).invert()
    assert recovered == pubkey


def test_eph_key_gen_first_message():
    msg, pair = EphKeyGenFirstMsg.create()
    assert msg.public_share == Point.generator() * pair.secret_share
    assert msg.c == Point.base_point2() * pair.secret_share
    statement = ECDDHStatement(
        g1=Point.generator(), h1=msg.public_share, g2=Point.base_point2(), h2=msg.c
    )
    msg.d_log_proof.verify(statement)
    wrong = replace(statement, h2=Point.base_point2() * Scalar.random())
    with pytest.raises(ProofError):
        msg.d_log_proof.verify(wrong)


def _party_two_eph_messages():
    secret = Scalar.random()
    public = Point.generator() * secret
    c = Point.base_point2() * secret
    statement = ECDDHStatement(g1=Point.generator(), h1=public, g2=Point.base_point2(), h2=c)
    proof = ECDDHProof.prove(ECDDHWitness(x=secret), statement)
    pk_blind = sample_below(1 << 256)
    zk_blind = sample_below(1 << 256)
    first = SimpleNamespace(
        pk_commitment=create_commitment(int_from_bytes(public.to_bytes(True)), pk_blind),
        zk_pok_commitment=create_commitment(hash_points(proof.a1, proof.a2), zk_blind),
    )
    second = SimpleNamespace(
        comm_witness=SimpleNamespace(
            pk_commitment_blind_factor=pk_blind,
            zk_pok_blind_factor=zk_blind,
            public_share=public,
            d_log_proof=proof,
            c=c,
        )
    )
    return first, second


def test_eph_verify_commitments_and_dlog_proof():
    first, second = _party_two_eph_messages()
    result = EphKeyGenSecondMsg.verify_commitments_and_dlog_proof(first, second)
    assert result == EphKeyGenSecondMsg()


def test_eph_verify_rejects_bad_commitment():
    first, second = _party_two_eph_messages()
    tampered = SimpleNamespace(
        pk_commitment=first.pk_commitment + 1, zk_pok_commitment=first.zk_pok_commitment
    )
    with pytest.raises(ProofError):
        EphKeyGenSecondMsg.verify_commitments_and_dlog_proof(tampered, second)


def test_eph_verify_rejects_bad_ddh_point():
    first, second = _party_two_eph_messages()
    second.comm_witness.c = Point.base_point2() * Scalar.random()
    with pytest.raises(ProofError):
        EphKeyGenSecondMsg.verify_commitments_and_dlog_proof(first, second)


def test_to_mta_message_b(paillier_keys):
    _, key_pair, private = _party_one(paillier_keys)
    b = Scalar.random()
    message_b, beta, _, _ = MessageB.b(b, key_pair.ek, MessageA(c=key_pair.encrypted_share), [])
    alpha, _ = private.to_mta_message_b(message_b)
    assert alpha + beta == private.x1 * b


def test_generate_h1_h2_n_tilde():
    n_tilde, h1, h2, xhi = generate_h1_h2_n_tilde()
    assert n_tilde.bit_length() == 2048
    assert 0 <= xhi < 1 << 256
    assert pow(h1, xhi, n_tilde) * h2 % n_tilde == 1


def test_pdl_proof(paillier_keys):
    ec_key, key_pair, private = _party_one(paillier_keys)
    statement, proof, composite = key_pair.pdl_proof(private)
    assert statement.q == ec_key.public_share
    assert statement.ciphertext == key_pair.encrypted_share
    assert statement.ek == key_pair.ek
    proof.verify(statement)
    composite.verify(DLogStatement(n=statement.n_tilde, g=statement.h1, ni=statement.h2))
    with pytest.raises(IncorrectProofError):
        composite.verify(DLogStatement(n=statement.n_tilde, g=statement.h1, ni=statement.h1))


def test_refresh_private_key(paillier_keys):
    _, _, private = _party_one(paillier_keys)
    factor = 7
    ek_new, c_key_new, private_new, key_proof, statement, proof, composite = (
        private.refresh_private_key(factor)
    )
    assert private_new.x1 == private.x1 * Scalar(factor)
    assert paillier.decrypt(private_new.paillier_priv, c_key_new) == private_new.x1.to_int()
    assert statement.q == Point.generator() * private_new.x1
    assert statement.ciphertext == c_key_new
    key_proof.verify(ek_new)
    proof.verify(statement)
    composite.verify(DLogStatement(n=statement.n_tilde, g=statement.h1, ni=statement.h2))