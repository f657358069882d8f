"""Cryptographic primitives: digests, MACs, passwords, ciphers and KDFs."""

from .cipher import (
    Envelope,
    decrypt,
    decrypt_authenticated,
    encrypt,
    encrypt_authenticated,
)
from .digest import TokenPair, generate_and_hash_token, hash, hmac_token, is_valid_hash_format
from .entropy import generate_random_string, generate_salt, generate_token, random_bytes
from .kdf import derive_key, pbkdf2
from .mac import hmac, secure_compare, validate_token
from .passwords import hash_password, identify, needs_rehash, verify_password

__all__ = [
    # Digest
    "hash",
    "is_valid_hash_format",
    "hmac_token",
    "generate_and_hash_token",
    "TokenPair",
    # Password hashing
    "hash_password",
    "verify_password",
    "needs_rehash",
    "identify",
    # MAC
    "hmac",
    "validate_token",
    "secure_compare",
    # Cipher
    "encrypt",
    "decrypt",
    "encrypt_authenticated",
    "decrypt_authenticated",
    "Envelope",
    # Key derivation
    "derive_key",
    "pbkdf2",
    # Randomness
    "random_bytes",
    "generate_token",
    "generate_salt",
    "generate_random_string",
]
