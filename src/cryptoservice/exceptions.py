"""Error taxonomy for cryptographic operations."""


class CryptoError(Exception):
    """Base exception for all cryptoservice failures."""


class UnsupportedAlgorithm(CryptoError, ValueError):
    """The requested algorithm is not part of the supported set."""


class KeyLengthMismatch(CryptoError, ValueError):
    """The key length does not match the cipher's required key size."""


class MalformedEnvelope(CryptoError):
    """A cipher envelope could not be decoded or is truncated."""


class DecryptionFailed(CryptoError):
    """Decryption failed.

    Never carries detail about the cause, so callers cannot distinguish a
    padding error from a wrong key.
    """

    def __init__(self) -> None:
        super().__init__("decryption failed")


class AuthenticationFailed(CryptoError):
    """Authenticated decryption rejected the tag."""

    def __init__(self) -> None:
        super().__init__("authentication failed")


class InvalidCost(CryptoError, ValueError):
    """A password hashing cost is outside the algorithm's supported range."""


class InvalidParameters(CryptoError, ValueError):
    """Key derivation or generation parameters are out of range."""


class DerivationFailed(CryptoError):
    """The key derivation primitive could not complete."""


class MalformedRecord(CryptoError):
    """A password hash record is not in a recognised format."""


class RandomnessUnavailable(CryptoError):
    """The operating system's secure random source could not supply bytes."""


__all__ = [
    "CryptoError",
    "UnsupportedAlgorithm",
    "KeyLengthMismatch",
    "MalformedEnvelope",
    "DecryptionFailed",
    "AuthenticationFailed",
    "InvalidCost",
    "InvalidParameters",
    "DerivationFailed",
    "MalformedRecord",
    "RandomnessUnavailable",
]
