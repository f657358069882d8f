"""Tests for password hashing."""

import pytest

from cryptoservice.algorithms import PasswordAlgorithm
from cryptoservice.config import Argon2Cost
from cryptoservice.crypto import hash_password, identify, needs_rehash, verify_password
from cryptoservice.exceptions import InvalidCost, MalformedRecord, UnsupportedAlgorithm

# Small parameters keep the tests fast
FAST_ARGON2 = Argon2Cost(time_cost=1, memory_cost=1024, parallelism=1)


@pytest.fixture(scope="module")
def bcrypt_record():
    """A bcrypt record with cost 10."""
    return hash_password("correct horse", PasswordAlgorithm.BCRYPT, 10)


@pytest.fixture(scope="module")
def argon2_record():
    """An Argon2id record with fast parameters."""
    return hash_password("correct horse", PasswordAlgorithm.ARGON2ID, FAST_ARGON2)


def test_bcrypt_hash_and_verify(bcrypt_record):
    """Test bcrypt round trip."""
    assert bcrypt_record.startswith("$2b$10$")
    assert identify(bcrypt_record) is PasswordAlgorithm.BCRYPT
    assert verify_password("correct horse", bcrypt_record)
    assert not verify_password("wrong", bcrypt_record)


def test_bcrypt_salted():
    """Test equal passwords give different records."""
    first = hash_password("pw", "bcrypt", 4)
    second = hash_password("pw", "bcrypt", 4)
    assert first != second
    assert verify_password("pw", first)
    assert verify_password("pw", second)


def test_bcrypt_default_cost():
    """Test the default bcrypt cost is 10."""
    assert hash_password("pw").startswith("$2b$10$")


def test_bcrypt_long_password():
    """Test passwords beyond 72 bytes hash and verify consistently."""
    password = "x" * 100
    record = hash_password(password, "bcrypt", 4)
    assert verify_password(password, record)


@pytest.mark.parametrize("cost", [3, 32, -1, 0])
def test_bcrypt_invalid_cost(cost):
    """Test out-of-range bcrypt costs."""
    with pytest.raises(InvalidCost):
        hash_password("pw", "bcrypt", cost)


def test_bcrypt_cost_wrong_type():
    """Test bcrypt rejects an Argon2 cost."""
    with pytest.raises(InvalidCost):
        hash_password("pw", "bcrypt", FAST_ARGON2)


def test_argon2_hash_and_verify(argon2_record):
    """Test Argon2id round trip with embedded parameters."""
    assert argon2_record.startswith("$argon2id$")
    assert "m=1024,t=1,p=1" in argon2_record
    assert identify(argon2_record) is PasswordAlgorithm.ARGON2ID
    assert verify_password("correct horse", argon2_record)
    assert not verify_password("wrong", argon2_record)


@pytest.mark.parametrize(
    "cost",
    [
        Argon2Cost(time_cost=0, memory_cost=1024, parallelism=1),
        Argon2Cost(time_cost=1, memory_cost=4, parallelism=1),
        Argon2Cost(time_cost=1, memory_cost=1024, parallelism=0),
        Argon2Cost(time_cost=1, memory_cost=16, parallelism=4),
    ],
)
def test_argon2_invalid_cost(cost):
    """Test out-of-range Argon2 parameters."""
    with pytest.raises(InvalidCost):
        hash_password("pw", "argon2id", cost)


def test_argon2_cost_wrong_type():
    """Test Argon2id rejects a scalar cost."""
    with pytest.raises(InvalidCost):
        hash_password("pw", "argon2id", 10)


def test_unsupported_algorithm():
    """Test unknown password algorithms."""
    with pytest.raises(UnsupportedAlgorithm):
        hash_password("pw", "scrypt")


@pytest.mark.parametrize(
    "record",
    ["", "plaintext", "$2b$10$short", "$argon2i$v=19$m=16,t=2,p=1$abc$def", "$1$md5crypt"],
)
def test_verify_malformed_record(record):
    """Test malformed records raise instead of returning False."""
    with pytest.raises(MalformedRecord):
        verify_password("pw", record)


@pytest.mark.parametrize(
    "record",
    [
        "$argon2id$v=19$m=1024,t=1,p=1$é$é",
        "$2b$١٠$" + "a" * 53,
    ],
)
def test_non_ascii_record_is_malformed(record):
    """Test records with non-ASCII characters are rejected by every operation."""
    with pytest.raises(MalformedRecord):
        identify(record)
    with pytest.raises(MalformedRecord):
        verify_password("pw", record)
    with pytest.raises(MalformedRecord):
        needs_rehash(record, 10)


def test_verify_corrupted_argon2_record(argon2_record):
    """Test a damaged Argon2id record is reported as malformed."""
    with pytest.raises(MalformedRecord):
        verify_password("pw", "$argon2id$v=19$garbage")


def test_needs_rehash_bcrypt(bcrypt_record):
    """Test bcrypt rehash detection."""
    assert not needs_rehash(bcrypt_record, 10)
    assert needs_rehash(bcrypt_record, 12)
    assert not needs_rehash(bcrypt_record)
    assert needs_rehash(bcrypt_record, FAST_ARGON2)


def test_needs_rehash_argon2(argon2_record):
    """Test Argon2id rehash detection."""
    assert not needs_rehash(argon2_record, FAST_ARGON2)
    assert needs_rehash(argon2_record, Argon2Cost(time_cost=2, memory_cost=1024, parallelism=1))
    assert needs_rehash(argon2_record, Argon2Cost(time_cost=1, memory_cost=2048, parallelism=1))
    assert needs_rehash(argon2_record, Argon2Cost(time_cost=1, memory_cost=1024, parallelism=2))
    assert needs_rehash(argon2_record)
    assert needs_rehash(argon2_record, 10)


def test_needs_rehash_malformed():
    """Test rehash checks on malformed records."""
    with pytest.raises(MalformedRecord):
        needs_rehash("not a record", 10)
    with pytest.raises(MalformedRecord):
        needs_rehash("$argon2id$broken", FAST_ARGON2)
