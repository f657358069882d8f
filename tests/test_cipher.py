"""Tests for CBC and GCM envelopes."""

import base64
import os

import pytest

from cryptoservice.algorithms import CipherAlgorithm
from cryptoservice.crypto import (
    Envelope,
    decrypt,
    decrypt_authenticated,
    encrypt,
    encrypt_authenticated,
)
from cryptoservice.exceptions import (
    AuthenticationFailed,
    DecryptionFailed,
    KeyLengthMismatch,
    MalformedEnvelope,
    UnsupportedAlgorithm,
)

KEY = bytes(range(32))

CBC_ALGORITHMS = [a for a in CipherAlgorithm if not a.authenticated]
GCM_ALGORITHMS = [a for a in CipherAlgorithm if a.authenticated]


def flip_bit(envelope: str, index: int) -> str:
    """Return ``envelope`` with the low bit of byte ``index`` flipped."""
    raw = bytearray(base64.b64decode(envelope))
    raw[index] ^= 0x01
    return base64.b64encode(bytes(raw)).decode()


@pytest.mark.parametrize("plaintext", ["", "a", "test-data", "x" * 16, "ünïcødé ✓" * 50])
def test_cbc_round_trip(plaintext):
    """Test CBC encryption and decryption."""
    envelope = encrypt(plaintext, KEY)
    assert decrypt(envelope, KEY) == plaintext


@pytest.mark.parametrize("algorithm", CBC_ALGORITHMS)
def test_cbc_round_trip_per_algorithm(algorithm):
    """Test every CBC key size."""
    key = os.urandom(algorithm.key_length)
    envelope = encrypt("test-data", key, algorithm)
    assert decrypt(envelope, key, algorithm.value) == "test-data"


def test_cbc_envelope_layout():
    """Test the CBC envelope is IV followed by whole blocks."""
    raw = base64.b64decode(encrypt("test-data", KEY))
    assert len(raw) == 16 + 16
    raw = base64.b64decode(encrypt("x" * 16, KEY))
    assert len(raw) == 16 + 32


def test_cbc_bytes_round_trip():
    """Test binary plaintext with raw output."""
    data = os.urandom(100)
    assert decrypt(encrypt(data, KEY), KEY, raw=True) == data


def test_cbc_random_iv():
    """Test the same plaintext encrypts differently each time."""
    first = encrypt("test-data", KEY)
    second = encrypt("test-data", KEY)
    assert first != second
    assert base64.b64decode(first)[:16] != base64.b64decode(second)[:16]


def test_cbc_string_key():
    """Test keys given as strings are UTF-8 encoded."""
    key = "k" * 32
    assert decrypt(encrypt("test-data", key), key) == "test-data"


def test_cbc_key_length_mismatch():
    """Test wrong key sizes are rejected."""
    with pytest.raises(KeyLengthMismatch):
        encrypt("test-data", b"short")
    with pytest.raises(KeyLengthMismatch):
        encrypt("test-data", KEY, CipherAlgorithm.AES_128_CBC)
    with pytest.raises(KeyLengthMismatch):
        decrypt(encrypt("test-data", KEY), KEY[:16])


def test_cbc_unsupported_algorithm():
    """Test unknown and authenticated ciphers are rejected by the CBC path."""
    with pytest.raises(UnsupportedAlgorithm):
        encrypt("test-data", KEY, "des-ede3-cbc")
    with pytest.raises(UnsupportedAlgorithm):
        encrypt("test-data", KEY, CipherAlgorithm.AES_256_GCM)
    with pytest.raises(UnsupportedAlgorithm):
        decrypt("AAAA", KEY, "aes-256-gcm")


@pytest.mark.parametrize("envelope", ["not base64!!", "QUJD", ""])
def test_cbc_malformed_envelope(envelope):
    """Test undecodable or too-short envelopes."""
    with pytest.raises(MalformedEnvelope):
        decrypt(envelope, KEY)


def test_cbc_wrong_key_fails_without_detail():
    """Test decrypting with the wrong key reveals nothing about the cause."""
    envelope = encrypt("test-data" * 10, KEY)
    wrong = bytes(reversed(KEY))
    with pytest.raises(DecryptionFailed) as excinfo:
        decrypt(envelope, wrong)
    assert str(excinfo.value) == "decryption failed"
    assert excinfo.value.__cause__ is None
    assert excinfo.value.__suppress_context__


def test_cbc_truncated_ciphertext():
    """Test ciphertext that is not whole blocks."""
    raw = base64.b64decode(encrypt("test-data", KEY))
    truncated = base64.b64encode(raw[:-1]).decode()
    with pytest.raises(DecryptionFailed):
        decrypt(truncated, KEY)

    iv_only = base64.b64encode(raw[:16]).decode()
    with pytest.raises(DecryptionFailed):
        decrypt(iv_only, KEY)


@pytest.mark.parametrize("aad", ["", "context", b"\x00binary"])
@pytest.mark.parametrize("plaintext", ["", "test-data", "ünïcødé ✓" * 50])
def test_gcm_round_trip(plaintext, aad):
    """Test GCM encryption and decryption with associated data."""
    envelope = encrypt_authenticated(plaintext, KEY, aad)
    assert decrypt_authenticated(envelope, KEY, aad) == plaintext


@pytest.mark.parametrize("algorithm", GCM_ALGORITHMS)
def test_gcm_round_trip_per_algorithm(algorithm):
    """Test every GCM key size."""
    key = os.urandom(algorithm.key_length)
    envelope = encrypt_authenticated("test-data", key, algorithm=algorithm)
    assert decrypt_authenticated(envelope, key, algorithm=algorithm) == "test-data"


def test_gcm_envelope_layout():
    """Test the GCM envelope is nonce, tag, then ciphertext."""
    raw = base64.b64decode(encrypt_authenticated("test-data", KEY))
    assert len(raw) == 12 + 16 + len("test-data")

    parsed = Envelope.decode(base64.b64encode(raw), 12, 16)
    assert parsed.iv == raw[:12]
    assert parsed.tag == raw[12:28]
    assert parsed.ciphertext == raw[28:]
    assert parsed.to_bytes() == raw


def test_gcm_random_nonce():
    """Test the same plaintext encrypts differently each time."""
    assert encrypt_authenticated("test-data", KEY) != encrypt_authenticated("test-data", KEY)


def test_gcm_tamper_detection():
    """Test flipping any bit in the tag or ciphertext is detected."""
    envelope = encrypt_authenticated("test-data", KEY, "aad")
    length = len(base64.b64decode(envelope))
    for index in range(length):
        with pytest.raises(AuthenticationFailed):
            decrypt_authenticated(flip_bit(envelope, index), KEY, "aad")


def test_gcm_wrong_key_or_aad():
    """Test authentication fails for the wrong key or associated data."""
    envelope = encrypt_authenticated("test-data", KEY, "aad")
    with pytest.raises(AuthenticationFailed):
        decrypt_authenticated(envelope, bytes(reversed(KEY)), "aad")
    with pytest.raises(AuthenticationFailed):
        decrypt_authenticated(envelope, KEY, "other")
    with pytest.raises(AuthenticationFailed):
        decrypt_authenticated(envelope, KEY)


def test_gcm_authentication_failure_has_no_detail():
    """Test authentication errors carry no cause."""
    envelope = encrypt_authenticated("test-data", KEY)
    with pytest.raises(AuthenticationFailed) as excinfo:
        decrypt_authenticated(flip_bit(envelope, 30), KEY)
    assert str(excinfo.value) == "authentication failed"
    assert excinfo.value.__cause__ is None


def test_gcm_malformed_envelope():
    """Test envelopes too short to hold nonce and tag."""
    short = base64.b64encode(b"\x00" * 27).decode()
    with pytest.raises(MalformedEnvelope):
        decrypt_authenticated(short, KEY)
    with pytest.raises(MalformedEnvelope):
        decrypt_authenticated("***", KEY)


def test_gcm_empty_ciphertext_still_authenticated():
    """Test a bare nonce and tag is decrypted only if authentic."""
    envelope = encrypt_authenticated("", KEY)
    assert len(base64.b64decode(envelope)) == 28
    assert decrypt_authenticated(envelope, KEY) == ""

    forged = base64.b64encode(b"\x00" * 28).decode()
    with pytest.raises(AuthenticationFailed):
        decrypt_authenticated(forged, KEY)


def test_gcm_key_length_and_algorithm():
    """Test key size and cipher family checks."""
    with pytest.raises(KeyLengthMismatch):
        encrypt_authenticated("test-data", KEY[:31])
    with pytest.raises(UnsupportedAlgorithm):
        encrypt_authenticated("test-data", KEY, algorithm="aes-256-cbc")


def test_gcm_bytes_round_trip():
    """Test binary plaintext with raw output."""
    data = os.urandom(64)
    envelope = encrypt_authenticated(data, KEY)
    assert decrypt_authenticated(envelope, KEY, raw=True) == data
