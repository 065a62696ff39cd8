import math

import pytest

from twoparty_ecdsa.paillier import (
    add,
    decrypt,
    encrypt,
    encrypt_with_randomness,
    keypair,
    mul,
    sample_randomness,
)


@pytest.fixture(scope="module")
def keys():
    return keypair(512)


def test_modulus_size_and_factors(keys):
    ek, dk = keys
    assert ek.n.bit_length() == 512
    assert ek.n == dk.p * dk.q
    assert dk.encryption_key == ek
    assert ek.nn == ek.n * ek.n


@pytest.mark.parametrize("message", [0, 1, 1234, 2**200 + 5])
def test_encrypt_decrypt_round_trip(keys, message):
    ek, dk = keys
    assert decrypt(dk, encrypt(ek, message)) == message


def test_plaintext_is_reduced_modulo_n(keys):
    ek, dk = keys
    assert decrypt(dk, encrypt(ek, ek.n + 9)) == 9


def test_additive_homomorphism(keys):
    ek, dk = keys
    assert decrypt(dk, add(ek, encrypt(ek, 100), encrypt(ek, 23))) == 123


def test_scalar_multiplication(keys):
    ek, dk = keys
    assert decrypt(dk, mul(ek, encrypt(ek, 11), 7)) == 77


def test_chosen_randomness_is_deterministic(keys):
    ek, dk = keys
    r = sample_randomness(ek)
    c = encrypt_with_randomness(ek, 55, r)
    assert c == encrypt_with_randomness(ek, 55, r)
    assert decrypt(dk, c) == 55


def test_encryption_is_randomized(keys):
    ek, dk = keys
    c1, c2 = encrypt(ek, 5), encrypt(ek, 5)
    assert c1 != c2
    assert decrypt(dk, c1) == decrypt(dk, c2) == 5


def test_randomness_is_unit(keys):
    ek, _ = keys
    r = sample_randomness(ek)
    assert 0 <= r < ek.n
    assert math.gcd(r, ek.n) == 1


def test_tiny_modulus_rejected():
    with pytest.raises(ValueError):
        keypair(8)