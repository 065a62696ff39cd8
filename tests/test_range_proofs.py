from dataclasses import replace

import pytest

from twoparty_ecdsa import paillier
from twoparty_ecdsa.curve import ORDER, Point, Scalar
from twoparty_ecdsa.hashing import sample_below, sample_coprime
from twoparty_ecdsa.range_proofs import AliceProof, BobCheck, BobProof, BobProofExt
from twoparty_ecdsa.zkproofs import DLogStatement

KEY_BITS = 1024


@pytest.fixture(scope="module")
def setup():
    ek_tilde, dk_tilde = paillier.keypair(KEY_BITS)
    phi = (dk_tilde.p - 1) * (dk_tilde.q - 1)
    h1 = sample_below(ek_tilde.n)
    while True:
        xhi = sample_below(phi)
        try:
            pow(xhi, -1, phi)
            break
        except ValueError:
            continue
    h2 = pow(h1, xhi, ek_tilde.n)
    ek, dk = paillier.keypair(KEY_BITS)
    return DLogStatement(n=ek_tilde.n, g=h1, ni=h2), ek, dk


def _alice_setup(setup):
    dlog_statement, ek, _ = setup
    a = Scalar.random().to_int()
    r = sample_coprime(ek.n)
    cipher = paillier.encrypt_with_randomness(ek, a, r)
    return a, r, cipher


def _bob_setup(ek):
    a = Scalar.random().to_int()
    encrypted_a = paillier.encrypt(ek, a)
    b = Scalar.random()
    b_times_enc_a = paillier.mul(ek, encrypted_a, b.to_int())
    beta_prim = sample_below(ek.n)
    r = paillier.sample_randomness(ek)
    enc_beta_prim = paillier.encrypt_with_randomness(ek, beta_prim, r)
    mta_out = paillier.add(ek, b_times_enc_a, enc_beta_prim)
    return encrypted_a, b, beta_prim, r, mta_out


def _generate_ext(a_enc, mta_out, b, beta_prim, ek, dlog_statement, r):
    proof, u = BobProof.generate(a_enc, mta_out, b, beta_prim, ek, dlog_statement, r, True)
    return BobProofExt(proof=proof, u=u)


def test_alice_zkp(setup):
    dlog_statement, ek, _ = setup
    a, r, cipher = _alice_setup(setup)
    proof = AliceProof.generate(a, cipher, ek, dlog_statement, r)
    assert proof.verify(cipher, ek, dlog_statement) is True


def test_alice_proof_rejects_other_ciphertext(setup):
    dlog_statement, ek, _ = setup
    a, r, cipher = _alice_setup(setup)
    proof = AliceProof.generate(a, cipher, ek, dlog_statement, r)
    other = paillier.encrypt(ek, a)
    assert proof.verify(other, ek, dlog_statement) is False


def test_alice_proof_rejects_tampered_response(setup):
    dlog_statement, ek, _ = setup
    a, r, cipher = _alice_setup(setup)
    proof = AliceProof.generate(a, cipher, ek, dlog_statement, r)
    assert replace(proof, s2=proof.s2 + 1).verify(cipher, ek, dlog_statement) is False


def test_alice_proof_rejects_s1_above_bound(setup):
    dlog_statement, ek, _ = setup
    a, r, cipher = _alice_setup(setup)
    proof = AliceProof.generate(a, cipher, ek, dlog_statement, r)
    assert replace(proof, s1=ORDER**3 + 1).verify(cipher, ek, dlog_statement) is False


def test_alice_proof_rejects_non_invertible_z(setup):
    dlog_statement, ek, _ = setup
    a, r, cipher = _alice_setup(setup)
    proof = AliceProof.generate(a, cipher, ek, dlog_statement, r)
    assert replace(proof, z=0).verify(cipher, ek, dlog_statement) is False


def test_bob_zkp(setup):
    dlog_statement, ek, _ = setup
    for _ in range(5):
        encrypted_a, b, beta_prim, r, mta_out = _bob_setup(ek)

        proof, u = BobProof.generate(
            encrypted_a, mta_out, b, beta_prim, ek, dlog_statement, r, False
        )
        assert u is None
        assert proof.verify(encrypted_a, mta_out, ek, dlog_statement, None) is True

        x_point = Point.generator() * b
        ext = _generate_ext(encrypted_a, mta_out, b, beta_prim, ek, dlog_statement, r)
        assert ext.verify(encrypted_a, mta_out, ek, dlog_statement, x_point) is True


def test_bob_proof_rejects_wrong_output(setup):
    dlog_statement, ek, _ = setup
    encrypted_a, b, beta_prim, r, mta_out = _bob_setup(ek)
    proof, _ = BobProof.generate(encrypted_a, mta_out, b, beta_prim, ek, dlog_statement, r, False)
    wrong = paillier.add(ek, mta_out, paillier.encrypt(ek, 1))
    assert proof.verify(encrypted_a, wrong, ek, dlog_statement) is False


def test_bob_proof_rejects_tampered_t1(setup):
    dlog_statement, ek, _ = setup
    encrypted_a, b, beta_prim, r, mta_out = _bob_setup(ek)
    proof, _ = BobProof.generate(encrypted_a, mta_out, b, beta_prim, ek, dlog_statement, r, False)
    tampered = replace(proof, t1=proof.t1 + 1)
    assert tampered.verify(encrypted_a, mta_out, ek, dlog_statement) is False


def test_bob_proof_with_check_needs_check_values(setup):
    dlog_statement, ek, _ = setup
    encrypted_a, b, beta_prim, r, mta_out = _bob_setup(ek)
    proof, u = BobProof.generate(encrypted_a, mta_out, b, beta_prim, ek, dlog_statement, r, True)
    x_point = Point.generator() * b
    assert proof.verify(encrypted_a, mta_out, ek, dlog_statement, None) is False
    assert proof.verify(
        encrypted_a, mta_out, ek, dlog_statement, BobCheck(u=u, x=x_point)
    ) is True


def test_bob_proof_ext_rejects_wrong_point(setup):
    dlog_statement, ek, _ = setup
    encrypted_a, b, beta_prim, r, mta_out = _bob_setup(ek)
    ext = _generate_ext(encrypted_a, mta_out, b, beta_prim, ek, dlog_statement, r)
    wrong_x = Point.generator() * (b + 1)
    assert ext.verify(encrypted_a, mta_out, ek, dlog_statement, wrong_x) is False


def test_bob_proof_ext_rejects_wrong_u(setup):
    dlog_statement, ek, _ = setup
    encrypted_a, b, beta_prim, r, mta_out = _bob_setup(ek)
    ext = _generate_ext(encrypted_a, mta_out, b, beta_prim, ek, dlog_statement, r)
    x_point = Point.generator() * b
    forged = replace(ext, u=ext.u + Point.generator())
    assert forged.verify(encrypted_a, mta_out, ek, dlog_statement, x_point) is False


def test_bob_proof_rejects_s1_above_bound(setup):
    dlog_statement, ek, _ = setup
    encrypted_a, b, beta_prim, r, mta_out = _bob_setup(ek)
    proof, _ = BobProof.generate(encrypted_a, mta_out, b, beta_prim, ek, dlog_statement, r, False)
    assert replace(proof, s1=ORDER**3 + 5).verify(
        encrypted_a, mta_out, ek, dlog_statement
    ) is False