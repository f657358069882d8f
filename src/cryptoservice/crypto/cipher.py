"""Symmetric encryption with AES-CBC and AES-GCM envelopes.

Envelope layouts (base64 of the concatenated bytes):

- CBC: ``IV[16] || ciphertext``
- GCM: ``IV[12] || tag[16] || ciphertext``
"""

import base64
import binascii
from dataclasses import dataclass
from typing import Optional, Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
import structlog

from ..algorithms import CipherAlgorithm, CipherName
from ..exceptions import (
    AuthenticationFailed,
    DecryptionFailed,
    KeyLengthMismatch,
    MalformedEnvelope,
    UnsupportedAlgorithm,
)
from .entropy import random_bytes
from .mac import BytesLike, to_bytes

logger = structlog.get_logger(__name__)

TAG_LENGTH = 16
DEFAULT_CIPHER = CipherAlgorithm.AES_256_CBC
DEFAULT_AEAD = CipherAlgorithm.AES_256_GCM


@dataclass(frozen=True)
class Envelope:
    """The fields of an encrypted message before serialization."""

    iv: bytes
    ciphertext: bytes
    tag: Optional[bytes] = None

    def to_bytes(self) -> bytes:
        return self.iv + (self.tag or b"") + self.ciphertext

    def encode(self) -> str:
        """Serialize to the base64 text form."""
        return base64.b64encode(self.to_bytes()).decode("ascii")

    @classmethod
    def decode(cls, text: Union[str, bytes], iv_length: int, tag_length: int = 0) -> "Envelope":
        """Parse the base64 text form.

        Args:
            text: Base64 envelope.
            iv_length: Length of the leading IV.
            tag_length: Length of the tag following the IV, 0 for none.

        Raises:
            MalformedEnvelope: If the text is not base64 or too short.
        """
        try:
            raw = base64.b64decode(text, validate=True)
        except (binascii.Error, ValueError, TypeError):
            raise MalformedEnvelope("Envelope is not valid base64") from None

        header = iv_length + tag_length
        if len(raw) < header:
            raise MalformedEnvelope(
                f"Envelope too short: {len(raw)} bytes, need at least {header}"
            )
        return cls(
            iv=raw[:iv_length],
            tag=raw[iv_length:header] if tag_length else None,
            ciphertext=raw[header:],
        )


def _resolve(algorithm: Optional[CipherName], default: CipherAlgorithm, authenticated: bool) -> CipherAlgorithm:
    algo = default if algorithm is None else CipherAlgorithm.coerce(algorithm)
    if algo.authenticated != authenticated:
        kind = "authenticated (GCM)" if authenticated else "CBC"
        raise UnsupportedAlgorithm(f"{algo.value} is not a {kind} cipher")
    return algo


def _check_key(key: BytesLike, algo: CipherAlgorithm) -> bytes:
    key_bytes = to_bytes(key)
    if len(key_bytes) != algo.key_length:
        raise KeyLengthMismatch(
            f"{algo.value} requires a {algo.key_length}-byte key, got {len(key_bytes)}"
        )
    return key_bytes


def encrypt(plaintext: BytesLike, key: BytesLike, algorithm: Optional[CipherName] = None) -> str:
    """Encrypt with AES-CBC and PKCS7 padding.

    Provides confidentiality only; use :func:`encrypt_authenticated` when the
    ciphertext needs tamper detection.

    Args:
        plaintext: Data to encrypt.
        key: Key of exactly the cipher's key length.
        algorithm: A CBC cipher; defaults to ``aes-256-cbc``.

    Returns:
        Base64 envelope ``IV || ciphertext``.

    Raises:
        UnsupportedAlgorithm: If ``algorithm`` is not a supported CBC cipher.
        KeyLengthMismatch: If ``key`` has the wrong length.
        RandomnessUnavailable: If no IV can be generated.
    """
    algo = _resolve(algorithm, DEFAULT_CIPHER, authenticated=False)
    key_bytes = _check_key(key, algo)
    data = to_bytes(plaintext)

    iv = random_bytes(algo.iv_length)
    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(data) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key_bytes), modes.CBC(iv)).encryptor()
    ciphertext = encryptor.update(padded) + encryptor.finalize()

    logger.debug("encrypted_data", algorithm=algo.value, data_size=len(data))
    return Envelope(iv=iv, ciphertext=ciphertext).encode()


def decrypt(
    envelope: Union[str, bytes],
    key: BytesLike,
    algorithm: Optional[CipherName] = None,
    *,
    raw: bool = False,
) -> Union[str, bytes]:
    """Decrypt an envelope produced by :func:`encrypt`.

    Args:
        envelope: Base64 envelope.
        key: The key used for encryption.
        algorithm: The CBC cipher used for encryption.
        raw: Return bytes instead of a UTF-8 decoded string.

    Raises:
        UnsupportedAlgorithm: If ``algorithm`` is not a supported CBC cipher.
        KeyLengthMismatch: If ``key`` has the wrong length.
        MalformedEnvelope: If the envelope is not base64 or shorter than the IV.
        DecryptionFailed: On any other failure, without further detail.
    """
    algo = _resolve(algorithm, DEFAULT_CIPHER, authenticated=False)
    key_bytes = _check_key(key, algo)
    parsed = Envelope.decode(envelope, algo.iv_length)

    try:
        decryptor = Cipher(algorithms.AES(key_bytes), modes.CBC(parsed.iv)).decryptor()
        padded = decryptor.update(parsed.ciphertext) + decryptor.finalize()
        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        data = unpadder.update(padded) + unpadder.finalize()
        result = data if raw else data.decode("utf-8")
    except ValueError:
        # UnicodeDecodeError is a ValueError too; every cause looks the same
        logger.warning("decryption_failed", algorithm=algo.value)
        raise DecryptionFailed() from None

    logger.debug("decrypted_data", algorithm=algo.value, data_size=len(data))
    return result


def encrypt_authenticated(
    plaintext: BytesLike,
    key: BytesLike,
    aad: BytesLike = "",
    algorithm: Optional[CipherName] = None,
) -> str:
    """Encrypt with AES-GCM.

    Args:
        plaintext: Data to encrypt.
        key: Key of exactly the cipher's key length.
        aad: Associated data, authenticated but not encrypted.
        algorithm: A GCM cipher; defaults to ``aes-256-gcm``.

    Returns:
        Base64 envelope ``IV || tag || ciphertext``.

    Raises:
        UnsupportedAlgorithm: If ``algorithm`` is not a supported GCM cipher.
        KeyLengthMismatch: If ``key`` has the wrong length.
        RandomnessUnavailable: If no nonce can be generated.
    """
    algo = _resolve(algorithm, DEFAULT_AEAD, authenticated=True)
    key_bytes = _check_key(key, algo)
    data = to_bytes(plaintext)
    associated = to_bytes(aad) or None

    nonce = random_bytes(algo.iv_length)
    sealed = AESGCM(key_bytes).encrypt(nonce, data, associated)
    # AESGCM appends the tag to the ciphertext
    envelope = Envelope(iv=nonce, tag=sealed[-TAG_LENGTH:], ciphertext=sealed[:-TAG_LENGTH])

    logger.debug(
        "encrypted_data",
        algorithm=algo.value,
        data_size=len(data),
        has_associated_data=associated is not None,
    )
    return envelope.encode()


def decrypt_authenticated(
    envelope: Union[str, bytes],
    key: BytesLike,
    aad: BytesLike = "",
    algorithm: Optional[CipherName] = None,
    *,
    raw: bool = False,
) -> Union[str, bytes]:
    """Decrypt and verify an envelope produced by :func:`encrypt_authenticated`.

    No plaintext is returned unless the tag verifies.

    Raises:
        UnsupportedAlgorithm: If ``algorithm`` is not a supported GCM cipher.
        KeyLengthMismatch: If ``key`` has the wrong length.
        MalformedEnvelope: If the envelope is not base64 or too short.
        AuthenticationFailed: If the ciphertext, tag, key or aad do not match.
        DecryptionFailed: If ``raw`` is false and the plaintext is not UTF-8.
    """
    algo = _resolve(algorithm, DEFAULT_AEAD, authenticated=True)
    key_bytes = _check_key(key, algo)
    parsed = Envelope.decode(envelope, algo.iv_length, TAG_LENGTH)
    associated = to_bytes(aad) or None

    try:
        data = AESGCM(key_bytes).decrypt(parsed.iv, parsed.ciphertext + parsed.tag, associated)
    except InvalidTag:
        logger.warning("authentication_failed", algorithm=algo.value)
        raise AuthenticationFailed() from None

    logger.debug(
        "decrypted_data",
        algorithm=algo.value,
        data_size=len(data),
        has_associated_data=associated is not None,
    )
    if raw:
        return data
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        raise DecryptionFailed() from None
