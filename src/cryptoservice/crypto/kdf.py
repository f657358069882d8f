"""Password-based key derivation."""

from argon2.exceptions import HashingError
from argon2.low_level import Type, hash_secret_raw
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
import structlog

from ..algorithms import AlgorithmName, HashAlgorithm
from ..config import Argon2Cost
from ..exceptions import DerivationFailed, InvalidParameters, UnsupportedAlgorithm
from .mac import BytesLike, to_bytes
from .passwords import validate_argon2_cost

logger = structlog.get_logger(__name__)

ARGON2_MIN_SALT_LENGTH = 8
ARGON2_MIN_OUTPUT_LENGTH = 4

_PBKDF2_HASHES = {
    HashAlgorithm.SHA1: hashes.SHA1,
    HashAlgorithm.SHA224: hashes.SHA224,
    HashAlgorithm.SHA256: hashes.SHA256,
    HashAlgorithm.SHA384: hashes.SHA384,
    HashAlgorithm.SHA512: hashes.SHA512,
    HashAlgorithm.SHA3_224: hashes.SHA3_224,
    HashAlgorithm.SHA3_256: hashes.SHA3_256,
    HashAlgorithm.SHA3_384: hashes.SHA3_384,
    HashAlgorithm.SHA3_512: hashes.SHA3_512,
}


def derive_key(
    password: BytesLike,
    salt: BytesLike,
    memory_cost: int = 65536,
    time_cost: int = 3,
    parallelism: int = 4,
    output_length: int = 32,
) -> bytes:
    """Derive a raw key from a password using Argon2id.

    The salt is supplied and stored by the caller, so the same inputs always
    reconstruct the same key.

    Args:
        password: The password to derive the key from.
        salt: At least 8 bytes of salt.
        memory_cost: Memory in KiB.
        time_cost: Number of passes.
        parallelism: Number of lanes.
        output_length: Key length in bytes.

    Returns:
        Raw derived key bytes, usable as a cipher key.

    Raises:
        InvalidParameters: If any parameter is not an integer or is outside
            Argon2's valid range.
        DerivationFailed: If the primitive fails, e.g. cannot allocate memory.
    """
    for name, value in (
        ("memory_cost", memory_cost),
        ("time_cost", time_cost),
        ("parallelism", parallelism),
        ("output_length", output_length),
    ):
        if not isinstance(value, int) or isinstance(value, bool):
            raise InvalidParameters(f"{name} must be an integer, got {type(value).__name__}")
    cost = Argon2Cost(time_cost=time_cost, memory_cost=memory_cost, parallelism=parallelism)
    validate_argon2_cost(cost, error=InvalidParameters)

    salt_bytes = to_bytes(salt)
    if len(salt_bytes) < ARGON2_MIN_SALT_LENGTH:
        raise InvalidParameters(
            f"Salt must be at least {ARGON2_MIN_SALT_LENGTH} bytes, got {len(salt_bytes)}"
        )
    if output_length < ARGON2_MIN_OUTPUT_LENGTH:
        raise InvalidParameters(
            f"output_length must be >= {ARGON2_MIN_OUTPUT_LENGTH}, got {output_length}"
        )

    try:
        key = hash_secret_raw(
            secret=to_bytes(password),
            salt=salt_bytes,
            time_cost=cost.time_cost,
            memory_cost=cost.memory_cost,
            parallelism=cost.parallelism,
            hash_len=output_length,
            type=Type.ID,
        )
    except (HashingError, MemoryError) as e:
        logger.error("key_derivation_failed", method="argon2id", memory_cost=memory_cost)
        raise DerivationFailed(f"Argon2id derivation failed: {e}") from e

    logger.debug(
        "derived_key",
        method="argon2id",
        salt_size=len(salt_bytes),
        output_length=output_length,
    )
    return key


def pbkdf2(
    password: BytesLike,
    salt: BytesLike,
    iterations: int = 100_000,
    length: int = 64,
    algorithm: AlgorithmName = "sha256",
) -> str:
    """Derive a hex key with PBKDF2-HMAC.

    Args:
        password: The password to derive the key from.
        salt: Salt bytes or string.
        iterations: Number of PBKDF2 iterations.
        length: Number of hex characters to return.
        algorithm: Underlying hash; SHA-1, SHA-2 or SHA-3 family.

    Returns:
        ``length`` lowercase hex characters.

    Raises:
        InvalidParameters: If ``iterations`` or ``length`` is not positive.
        UnsupportedAlgorithm: If the hash cannot be used with PBKDF2 here.
    """
    algo = HashAlgorithm.coerce(algorithm)
    if algo not in _PBKDF2_HASHES:
        raise UnsupportedAlgorithm(f"PBKDF2 does not support {algo.value}")
    if iterations < 1:
        raise InvalidParameters(f"iterations must be >= 1, got {iterations}")
    if length < 1:
        raise InvalidParameters(f"length must be >= 1, got {length}")

    kdf = PBKDF2HMAC(
        algorithm=_PBKDF2_HASHES[algo](),
        length=(length + 1) // 2,
        salt=to_bytes(salt),
        iterations=iterations,
    )
    key = kdf.derive(to_bytes(password))
    logger.debug("derived_key", method="pbkdf2", algorithm=algo.value, iterations=iterations)
    return key.hex()[:length]
