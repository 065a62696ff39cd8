"""Exception hierarchy shared by the protocol modules."""

from __future__ import annotations


class EcdsaError(Exception):
    """Base class for every error raised by this package."""

    default_message = "two-party ECDSA error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class InvalidKeyError(EcdsaError):
    """A key, ciphertext or accompanying proof failed validation."""

    default_message = "invalid key"


class InvalidSignatureError(EcdsaError):
    """A signature does not verify against the public key and message."""

    default_message = "invalid signature"


class ProofError(EcdsaError):
    """A sigma protocol or commitment check failed."""

    default_message = "proof verification failed"


class IncorrectProofError(EcdsaError):
    """A Paillier-related zero-knowledge proof failed."""

    default_message = "incorrect proof"


class ZkPdlError(EcdsaError):
    """A step of the interactive PDL protocol failed."""

    default_message = "zk pdl failed"


class ZkPdlWithSlackError(EcdsaError):
    """The non-interactive PDL-with-slack proof did not verify."""

    default_message = "zk pdl with slack verification failed"


class PartyTwoError(EcdsaError):
    """Party two rejected party one's PDL proof."""

    default_message = "party two pdl verify failed (lindell 2017)"