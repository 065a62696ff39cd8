# twoparty_ecdsa

Two-party ECDSA signing over secp256k1. The secret key is split between two
parties. Neither party ever holds the whole key, and together they produce
ordinary ECDSA signatures. Party one keeps a Paillier key pair. Party two
holds a Paillier encryption of party one's share and sends party one an
encrypted partial signature, which party one decrypts and completes.

The package is pure Python and has no runtime dependencies. The curve,
Paillier encryption, hashing, commitments and the zero-knowledge proofs are
all built on the standard library.

## What is inside

- `twoparty_ecdsa.curve`: secp256k1 `Scalar` (integers modulo the group
  order) and `Point`, with `Point.generator()` and a second generator
  `Point.base_point2()`.
- `twoparty_ecdsa.paillier`: `EncryptionKey`, `DecryptionKey`, `keypair`,
  `encrypt`, `encrypt_with_randomness`, `decrypt`, and the homomorphic `add`
  and `mul`.
- `twoparty_ecdsa.hashing`: SHA-256 hashing of integers (`hash_ints`) and
  points (`hash_points`), hash commitments (`create_commitment`) and random
  sampling helpers.
- `twoparty_ecdsa.sigma`: Schnorr discrete-log proofs (`DLogProof`) and EC DDH
  proofs (`ECDDHProof`).
- `twoparty_ecdsa.zkproofs`: `DLogStatement`, `CompositeDLogProof`,
  `NiCorrectKeyProof` and `RangeProofNi`.
- `twoparty_ecdsa.zk_pdl`: an interactive proof, between a verifier and a
  prover, that a Paillier ciphertext encrypts the discrete log of a point.
- `twoparty_ecdsa.zk_pdl_with_slack`: the non-interactive variant,
  `PDLwSlackProof`, which the key generation below uses.
- `twoparty_ecdsa.range_proofs` and `twoparty_ecdsa.mta`: the
  multiplicative-to-additive share conversion (`MessageA`, `MessageB`) with
  Alice's and Bob's range proofs (`AliceProof`, `BobProof`, `BobProofExt`).
- `twoparty_ecdsa.party_one` and `twoparty_ecdsa.party_two`: the two sides of
  key generation and signing.
- `twoparty_ecdsa.errors`: the exceptions the package raises, all derived from
  `EcdsaError`.

## Key generation

```python
from twoparty_ecdsa import party_one, party_two

p1_first, comm_witness, p1_keys = party_one.KeyGenFirstMsg.create_commitments()
p2_first, p2_keys = party_two.KeyGenFirstMsg.create()

p1_second = party_one.KeyGenSecondMsg.verify_and_decommit(comm_witness, p2_first.d_log_proof)
party_two.KeyGenSecondMsg.verify_commitments_and_dlog_proof(p1_first, p1_second)

paillier_pair = party_one.PaillierKeyPair.generate_keypair_and_encrypted_share(p1_keys)
p1_private = party_one.Party1Private.set_private_key(p1_keys, paillier_pair)

p2_paillier = party_two.PaillierPublic(
    ek=paillier_pair.ek,
    encrypted_secret_share=paillier_pair.encrypted_share,
)
party_two.verify_ni_proof_correct_key(paillier_pair.generate_ni_proof_correct_key(), p2_paillier.ek)

statement, pdl_proof, composite_proof = paillier_pair.pdl_proof(p1_private)
p2_paillier.pdl_verify(composite_proof, statement, pdl_proof, p1_second.comm_witness.public_share)
```

`verify_ni_proof_correct_key` rejects Paillier moduli shorter than 2047 bits.
`pdl_verify` raises `PartyTwoError` when the statement does not match party
two's copy of the key and ciphertext or when a proof fails.

## Signing

```python
eph2_first, eph_witness, eph2_keys = party_two.EphKeyGenFirstMsg.create_commitments()
eph1_first, eph1_keys = party_one.EphKeyGenFirstMsg.create()

eph2_second = party_two.EphKeyGenSecondMsg.verify_and_decommit(eph_witness, eph1_first)
party_one.EphKeyGenSecondMsg.verify_commitments_and_dlog_proof(eph2_first, eph2_second)

p2_private = party_two.Party2Private.set_private_key(p2_keys)
message = 1234

partial = party_two.PartialSig.compute(
    paillier_pair.ek,
    paillier_pair.encrypted_share,
    p2_private,
    eph2_keys,
    eph1_first.public_share,
    message,
)
signature = party_one.Signature.compute(
    p1_private, partial.c3, eph1_keys, eph2_second.comm_witness.public_share
)

pubkey = party_one.compute_pubkey(p1_private, p2_first.public_share)
party_one.verify(signature, pubkey, message)
```

`party_one.verify` returns `None` when the signature is valid. It raises
`InvalidSignatureError` when the signature is invalid, and also when `s` is
not in the low-s form. `Signature.compute` always produces the low-s form.
For a signature together with its recovery id, use
`party_one.Signature.compute_with_recid`, which returns a `SignatureRecid`.

Each signature needs fresh ephemeral shares.

## Key refresh

`Party1Private.refresh_private_key(factor)` multiplies party one's share by
`factor` under a freshly generated Paillier key. It returns the new
encryption key, the new encrypted share, the new private state, a
`NiCorrectKeyProof` and the PDL-with-slack statement and proofs for party two
to check. Party two updates its own share with
`Party2Private.update_private_key(factor)`.

## Multiplicative-to-additive conversion

```python
from twoparty_ecdsa import paillier
from twoparty_ecdsa.curve import Scalar
from twoparty_ecdsa.mta import MessageA, MessageB

ek, dk = paillier.keypair()
a, b = Scalar.random(), Scalar.random()

m_a, _ = MessageA.a(a, ek, [])
m_b, beta, _, _ = MessageB.b(b, ek, m_a, [])
alpha, _ = m_b.verify_proofs_get_alpha(dk, a)
assert alpha + beta == a * b
```

Pass one `DLogStatement` per verifier to attach range proofs to `MessageA`.
`MessageB.b` raises `InvalidKeyError` if the proofs do not match the
statements. An existing two-party key can feed this exchange through
`Party2Private.to_mta_message_b` and `Party1Private.to_mta_message_b`.

## Errors

Every failed check raises a subclass of `twoparty_ecdsa.errors.EcdsaError`:
`ProofError`, `IncorrectProofError`, `InvalidKeyError`,
`InvalidSignatureError`, `ZkPdlError`, `ZkPdlWithSlackError` or
`PartyTwoError`.

## What it does not do

- It carries no messages between the parties. Every message is a plain
  dataclass, and sending, storing and serialising them is up to the caller.
- It has no command-line tool or server.
- It has no segment encryption of a share for verifiable backup or recovery.

## Caveats

Paillier keys default to 2048 bits and all arithmetic runs in Python, so
key generation and the PDL proofs can take a few seconds. The package has
not been audited. Use it for study and prototyping, not for protecting real
funds.