"""Keyed message authentication and timing-safe comparison."""

import hashlib
import hmac as _hmac
from typing import Union

from ..algorithms import AlgorithmName, HashAlgorithm

BytesLike = Union[str, bytes]


def to_bytes(value: BytesLike) -> bytes:
    """Return ``value`` as bytes, UTF-8 encoding strings."""
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise TypeError(f"Expected str or bytes, got {type(value).__name__}")


def secure_compare(a: BytesLike, b: BytesLike) -> bool:
    """Compare two values in constant time.

    Returns early only when the lengths differ; otherwise every byte is
    examined regardless of where the first difference is.

    Args:
        a: First value.
        b: Second value.

    Returns:
        True if the values are equal, False otherwise.
    """
    a_bytes = to_bytes(a)
    b_bytes = to_bytes(b)
    if len(a_bytes) != len(b_bytes):
        return False
    return _hmac.compare_digest(a_bytes, b_bytes)


def hmac(data: BytesLike, key: BytesLike, algorithm: AlgorithmName = "sha256") -> str:
    """Compute an HMAC and return it as lowercase hex.

    Raises:
        UnsupportedAlgorithm: If ``algorithm`` is not a supported hash.
    """
    algo = HashAlgorithm.coerce(algorithm)
    return _hmac.new(to_bytes(key), to_bytes(data), algo.value).hexdigest()


def validate_token(token: BytesLike, stored_hash: str, algorithm: AlgorithmName = "sha256") -> bool:
    """Check ``token`` against a stored digest without leaking timing.

    Args:
        token: The plaintext token presented by a caller.
        stored_hash: Hex digest previously stored for the token.
        algorithm: Hash algorithm the stored digest was made with.

    Returns:
        True if ``stored_hash`` is the digest of ``token``.
    """
    algo = HashAlgorithm.coerce(algorithm)
    computed = hashlib.new(algo.value, to_bytes(token)).hexdigest()
    if not isinstance(stored_hash, str):
        return False
    return secure_compare(computed, stored_hash)
