"""Audit event type definitions."""

from enum import Enum


class EventType(str, Enum):
    """Audit event types."""

    # Digest and MAC events
    DIGEST_HASH = "digest.hash"
    DIGEST_HMAC = "digest.hmac"
    TOKEN_CREATE = "token.create"
    TOKEN_VALIDATE = "token.validate"

    # Password events
    PASSWORD_HASH = "password.hash"
    PASSWORD_VERIFY = "password.verify"
    PASSWORD_REHASH_CHECK = "password.rehash_check"

    # Cipher events
    CRYPTO_ENCRYPT = "crypto.encrypt"
    CRYPTO_DECRYPT = "crypto.decrypt"

    # Key events
    KEY_DERIVE = "key.derive"
