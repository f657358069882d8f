"""Supported algorithm identifiers."""

import hashlib
from enum import Enum
from typing import Union

from .exceptions import UnsupportedAlgorithm


class _AlgorithmEnum(str, Enum):
    """String enum that refuses values outside the declared members."""

    @classmethod
    def coerce(cls, value: Union[str, "_AlgorithmEnum"]) -> "_AlgorithmEnum":
        """Return the member for ``value``.

        Args:
            value: A member or its string identifier (case-insensitive).

        Raises:
            UnsupportedAlgorithm: If ``value`` names no member.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise UnsupportedAlgorithm(f"Unsupported {cls.__name__}: {value!r}")

    def __str__(self) -> str:
        return self.value


class HashAlgorithm(_AlgorithmEnum):
    """One-way hash functions, named as :mod:`hashlib` names them."""

    MD5 = "md5"
    SHA1 = "sha1"
    SHA224 = "sha224"
    SHA256 = "sha256"
    SHA384 = "sha384"
    SHA512 = "sha512"
    SHA3_224 = "sha3_224"
    SHA3_256 = "sha3_256"
    SHA3_384 = "sha3_384"
    SHA3_512 = "sha3_512"
    BLAKE2B = "blake2b"
    BLAKE2S = "blake2s"

    @property
    def digest_size(self) -> int:
        return hashlib.new(self.value).digest_size

    @property
    def hex_length(self) -> int:
        return self.digest_size * 2


class CipherAlgorithm(_AlgorithmEnum):
    """Symmetric ciphers, named the way OpenSSL names them."""

    AES_128_CBC = "aes-128-cbc"
    AES_192_CBC = "aes-192-cbc"
    AES_256_CBC = "aes-256-cbc"
    AES_128_GCM = "aes-128-gcm"
    AES_192_GCM = "aes-192-gcm"
    AES_256_GCM = "aes-256-gcm"

    @property
    def key_length(self) -> int:
        return int(self.value.split("-")[1]) // 8

    @property
    def authenticated(self) -> bool:
        return self.value.endswith("-gcm")

    @property
    def iv_length(self) -> int:
        # 96-bit nonce for GCM, one AES block for CBC
        return 12 if self.authenticated else 16


class PasswordAlgorithm(_AlgorithmEnum):
    """Adaptive password hashing algorithms."""

    BCRYPT = "bcrypt"
    ARGON2ID = "argon2id"


AlgorithmName = Union[str, HashAlgorithm]
CipherName = Union[str, CipherAlgorithm]

__all__ = [
    "HashAlgorithm",
    "CipherAlgorithm",
    "PasswordAlgorithm",
    "AlgorithmName",
    "CipherName",
]
