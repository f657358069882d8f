"""
cryptoservice: hashing, password hashing, MACs, symmetric encryption and key
derivation behind one small, typed API.

The :class:`CryptoService` facade binds configurable defaults; the same
operations are available as plain functions in :mod:`cryptoservice.crypto`.
"""

__version__ = "1.0.0"

from .algorithms import CipherAlgorithm, HashAlgorithm, PasswordAlgorithm
from .config import Argon2Cost, CryptoSettings
from .crypto import Envelope, TokenPair
from .exceptions import (
    AuthenticationFailed,
    CryptoError,
    DecryptionFailed,
    DerivationFailed,
    InvalidCost,
    InvalidParameters,
    KeyLengthMismatch,
    MalformedEnvelope,
    MalformedRecord,
    RandomnessUnavailable,
    UnsupportedAlgorithm,
)
from .service import CryptoService

__all__ = [
    "CryptoService",
    "CryptoSettings",
    "Argon2Cost",
    "HashAlgorithm",
    "CipherAlgorithm",
    "PasswordAlgorithm",
    "Envelope",
    "TokenPair",
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
