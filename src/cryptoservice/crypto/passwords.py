"""Adaptive password hashing with bcrypt and Argon2id."""

import re
from typing import Optional, Union

import argon2
import bcrypt
import structlog
from argon2 import PasswordHasher
from argon2.exceptions import (
    HashingError,
    InvalidHashError,
    VerificationError,
    VerifyMismatchError,
)

from ..algorithms import PasswordAlgorithm
from ..config import Argon2Cost
from ..exceptions import DerivationFailed, InvalidCost, MalformedRecord
from .mac import BytesLike, to_bytes

logger = structlog.get_logger(__name__)

DEFAULT_BCRYPT_COST = 10
BCRYPT_MIN_COST = 4
BCRYPT_MAX_COST = 31
# bcrypt only ever reads the first 72 bytes of a password
BCRYPT_MAX_PASSWORD_BYTES = 72

ARGON2_MAX_PARALLELISM = 2**24 - 1
ARGON2_MAX_MEMORY = 2**32 - 1

_BCRYPT_RECORD = re.compile(r"\$2[abxy]?\$([0-9]{2})\$[./A-Za-z0-9]{53}")
_ARGON2ID_PREFIX = "$argon2id$"

Cost = Union[int, Argon2Cost]


def validate_argon2_cost(cost: Argon2Cost, error: type = InvalidCost) -> None:
    """Check Argon2 parameters against the ranges the algorithm accepts.

    Raises:
        error: With a message naming the offending parameter.
    """
    if cost.time_cost < 1:
        raise error(f"Argon2 time_cost must be >= 1, got {cost.time_cost}")
    if not 1 <= cost.parallelism <= ARGON2_MAX_PARALLELISM:
        raise error(
            f"Argon2 parallelism must be in 1..{ARGON2_MAX_PARALLELISM}, got {cost.parallelism}"
        )
    if not 8 * cost.parallelism <= cost.memory_cost <= ARGON2_MAX_MEMORY:
        raise error(
            f"Argon2 memory_cost must be in {8 * cost.parallelism}..{ARGON2_MAX_MEMORY} KiB, "
            f"got {cost.memory_cost}"
        )


def _bcrypt_password(password: BytesLike) -> bytes:
    return to_bytes(password)[:BCRYPT_MAX_PASSWORD_BYTES]


def _hasher(cost: Argon2Cost) -> PasswordHasher:
    return PasswordHasher(
        time_cost=cost.time_cost,
        memory_cost=cost.memory_cost,
        parallelism=cost.parallelism,
        hash_len=32,
        salt_len=16,
        type=argon2.Type.ID,
    )


def identify(record: str) -> PasswordAlgorithm:
    """Return the algorithm that produced ``record``.

    Raises:
        MalformedRecord: If the record is not a bcrypt or Argon2id hash.
    """
    # both record formats are pure ASCII
    if isinstance(record, str) and record.isascii():
        if _BCRYPT_RECORD.fullmatch(record):
            return PasswordAlgorithm.BCRYPT
        if record.startswith(_ARGON2ID_PREFIX):
            return PasswordAlgorithm.ARGON2ID
    raise MalformedRecord("Unrecognised password hash record")


def hash_password(
    password: BytesLike,
    algorithm: Union[str, PasswordAlgorithm] = PasswordAlgorithm.BCRYPT,
    cost: Optional[Cost] = None,
) -> str:
    """Hash a password with an adaptive algorithm.

    Args:
        password: The password to hash.
        algorithm: ``bcrypt`` or ``argon2id``.
        cost: bcrypt work factor (int, 4..31) or an :class:`Argon2Cost`.
            Defaults to 10 for bcrypt and ``Argon2Cost()`` for Argon2id.

    Returns:
        A self-describing hash record.

    Raises:
        InvalidCost: If ``cost`` is the wrong type or out of range.
        UnsupportedAlgorithm: If ``algorithm`` is unknown.
    """
    algo = PasswordAlgorithm.coerce(algorithm)

    if algo is PasswordAlgorithm.BCRYPT:
        rounds = DEFAULT_BCRYPT_COST if cost is None else cost
        if isinstance(rounds, bool) or not isinstance(rounds, int):
            raise InvalidCost(f"bcrypt cost must be an integer, got {type(rounds).__name__}")
        if not BCRYPT_MIN_COST <= rounds <= BCRYPT_MAX_COST:
            raise InvalidCost(
                f"bcrypt cost must be in {BCRYPT_MIN_COST}..{BCRYPT_MAX_COST}, got {rounds}"
            )
        record = bcrypt.hashpw(_bcrypt_password(password), bcrypt.gensalt(rounds=rounds))
        logger.debug("hashed_password", algorithm=algo.value, cost=rounds)
        return record.decode("ascii")

    params = Argon2Cost() if cost is None else cost
    if not isinstance(params, Argon2Cost):
        raise InvalidCost(f"Argon2id cost must be an Argon2Cost, got {type(params).__name__}")
    validate_argon2_cost(params)
    try:
        record = _hasher(params).hash(to_bytes(password))
    except HashingError as e:
        raise DerivationFailed(f"Argon2id hashing failed: {e}") from e
    logger.debug(
        "hashed_password",
        algorithm=algo.value,
        time_cost=params.time_cost,
        memory_cost=params.memory_cost,
        parallelism=params.parallelism,
    )
    return record


def verify_password(password: BytesLike, record: str) -> bool:
    """Verify a password against a hash record.

    Args:
        password: The password to verify.
        record: A record produced by :func:`hash_password`.

    Returns:
        True if the password matches, False otherwise.

    Raises:
        MalformedRecord: If ``record`` cannot be parsed.
    """
    algo = identify(record)

    if algo is PasswordAlgorithm.BCRYPT:
        try:
            return bcrypt.checkpw(_bcrypt_password(password), record.encode("ascii"))
        except ValueError as e:
            raise MalformedRecord(f"Invalid bcrypt record: {e}") from e

    try:
        return PasswordHasher().verify(record, to_bytes(password))
    except VerifyMismatchError:
        return False
    except InvalidHashError as e:
        raise MalformedRecord(f"Invalid Argon2id record: {e}") from e
    except VerificationError as e:
        logger.warning("password_verification_error", algorithm=algo.value, error=str(e))
        raise MalformedRecord(f"Argon2id record could not be verified: {e}") from e


def needs_rehash(record: str, desired_cost: Optional[Cost] = None) -> bool:
    """Tell whether ``record`` was made with parameters other than ``desired_cost``.

    An integer cost targets bcrypt and an :class:`Argon2Cost` targets
    Argon2id; a record from the other algorithm always needs rehashing.
    ``None`` compares against the record algorithm's default cost.

    Raises:
        MalformedRecord: If ``record`` cannot be parsed.
    """
    algo = identify(record)

    if desired_cost is None:
        desired_cost = DEFAULT_BCRYPT_COST if algo is PasswordAlgorithm.BCRYPT else Argon2Cost()

    if algo is PasswordAlgorithm.BCRYPT:
        if not isinstance(desired_cost, int) or isinstance(desired_cost, bool):
            return True
        match = _BCRYPT_RECORD.fullmatch(record)
        return int(match.group(1)) != desired_cost

    if not isinstance(desired_cost, Argon2Cost):
        return True
    try:
        params = argon2.extract_parameters(record)
    except InvalidHashError as e:
        raise MalformedRecord(f"Invalid Argon2id record: {e}") from e
    return (
        params.time_cost != desired_cost.time_cost
        or params.memory_cost != desired_cost.memory_cost
        or params.parallelism != desired_cost.parallelism
    )
