"""One-way hashing and token digests."""

import hashlib
import re
from typing import NamedTuple

import structlog

from ..algorithms import AlgorithmName, HashAlgorithm
from .entropy import random_bytes
from .mac import BytesLike, hmac, to_bytes

logger = structlog.get_logger(__name__)


class TokenPair(NamedTuple):
    """A freshly generated token and the digest to persist for it."""

    token: str
    token_hash: str


def hash(input: BytesLike, algorithm: AlgorithmName = "sha256") -> str:  # noqa: A001
    """Hash ``input`` and return the lowercase hex digest.

    The result is unsalted and deterministic.

    Raises:
        UnsupportedAlgorithm: If ``algorithm`` is not a supported hash.
    """
    algo = HashAlgorithm.coerce(algorithm)
    return hashlib.new(algo.value, to_bytes(input)).hexdigest()


def is_valid_hash_format(candidate: object, algorithm: AlgorithmName = "sha256") -> bool:
    """Check that ``candidate`` has the shape of a digest from ``algorithm``.

    Only length and character set are checked.
    """
    algo = HashAlgorithm.coerce(algorithm)
    if not isinstance(candidate, str):
        return False
    return re.fullmatch(f"[0-9a-f]{{{algo.hex_length}}}", candidate) is not None


def hmac_token(data: BytesLike, key: BytesLike, algorithm: AlgorithmName = "sha256") -> str:
    """Keyed digest of ``data``; see :func:`cryptoservice.crypto.mac.hmac`."""
    return hmac(data, key, algorithm)


def generate_and_hash_token(byte_length: int = 32, algorithm: AlgorithmName = "sha256") -> TokenPair:
    """Generate a random hex token and its digest.

    Args:
        byte_length: Number of random bytes behind the token.
        algorithm: Hash algorithm for the stored digest.

    Returns:
        A :class:`TokenPair`. Hand ``token`` to the caller once and store
        only ``token_hash``.

    Raises:
        InvalidParameters: If ``byte_length`` is not positive.
        RandomnessUnavailable: If the secure random source fails.
        UnsupportedAlgorithm: If ``algorithm`` is not a supported hash.
    """
    algo = HashAlgorithm.coerce(algorithm)
    token = random_bytes(byte_length).hex()
    token_hash = hash(token, algo)
    logger.debug("generated_token", byte_length=byte_length, algorithm=algo.value)
    return TokenPair(token, token_hash)
