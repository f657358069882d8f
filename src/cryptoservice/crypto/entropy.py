"""Secure randomness helpers."""

import secrets

import structlog

from ..exceptions import InvalidParameters, RandomnessUnavailable

logger = structlog.get_logger(__name__)


def random_bytes(length: int) -> bytes:
    """Return ``length`` bytes from the operating system CSPRNG.

    Args:
        length: Number of bytes, at least 1.

    Returns:
        Random bytes.

    Raises:
        InvalidParameters: If ``length`` is not positive.
        RandomnessUnavailable: If the OS source cannot supply entropy.
    """
    if not isinstance(length, int) or length < 1:
        raise InvalidParameters(f"Random length must be a positive integer, got {length!r}")
    try:
        return secrets.token_bytes(length)
    except (OSError, NotImplementedError) as e:
        logger.error("randomness_unavailable", length=length, error=str(e))
        raise RandomnessUnavailable(f"Secure random source failed: {e}") from e


def generate_token(length: int = 32) -> str:
    """Generate a hex token from ``length`` random bytes."""
    return random_bytes(length).hex()


def _random_hex(length: int) -> str:
    if not isinstance(length, int) or length < 1:
        raise InvalidParameters(f"Length must be a positive integer, got {length!r}")
    return random_bytes((length + 1) // 2).hex()[:length]


def generate_salt(length: int = 16) -> str:
    """Generate a hex salt of exactly ``length`` characters."""
    return _random_hex(length)


def generate_random_string(length: int = 32) -> str:
    """Generate a random hex string of exactly ``length`` characters."""
    return _random_hex(length)
