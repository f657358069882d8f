"""Runtime configuration for the crypto service."""

import os
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .algorithms import CipherAlgorithm, HashAlgorithm

ENV_PREFIX = "CRYPTOSERVICE_"


class Argon2Cost(BaseModel):
    """Argon2id work parameters.

    Values are not range checked here; the hashing and derivation functions
    validate them and raise their own typed errors.
    """

    model_config = ConfigDict(frozen=True)

    time_cost: int = 3  # Number of iterations
    memory_cost: int = 65536  # KiB (64MB)
    parallelism: int = 4  # Number of lanes


class CryptoSettings(BaseModel):
    """Defaults applied when a caller does not name an algorithm or cost."""

    model_config = ConfigDict(frozen=True)

    default_cipher: CipherAlgorithm = CipherAlgorithm.AES_256_CBC
    default_hash: HashAlgorithm = HashAlgorithm.SHA256
    bcrypt_cost: int = Field(default=10, ge=4, le=31)
    argon2: Argon2Cost = Field(default_factory=Argon2Cost)
    log_level: str = "INFO"
    log_dir: Optional[Path] = None

    @field_validator("default_cipher", mode="before")
    @classmethod
    def _coerce_cipher(cls, value):
        cipher = CipherAlgorithm.coerce(value)
        # the default only applies to encrypt()/decrypt(), which are CBC only
        if cipher.authenticated:
            raise ValueError(f"Default cipher must be a CBC cipher, got {cipher.value}")
        return cipher

    @field_validator("default_hash", mode="before")
    @classmethod
    def _coerce_hash(cls, value):
        return HashAlgorithm.coerce(value)

    @field_validator("log_level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {value}")
        return level

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "CryptoSettings":
        """Build settings from ``CRYPTOSERVICE_*`` environment variables.

        Recognised variables: ``DEFAULT_CIPHER``, ``DEFAULT_HASH``,
        ``BCRYPT_COST``, ``ARGON2_TIME_COST``, ``ARGON2_MEMORY_COST``,
        ``ARGON2_PARALLELISM``, ``LOG_LEVEL`` and ``LOG_DIR``. Unset variables
        keep their defaults.

        Raises:
            ValueError: If a variable holds an invalid value.
        """
        env = os.environ if environ is None else environ

        def read(name: str) -> Optional[str]:
            value = env.get(ENV_PREFIX + name)
            return value if value else None

        values = {}
        for field, name in (
            ("default_cipher", "DEFAULT_CIPHER"),
            ("default_hash", "DEFAULT_HASH"),
            ("bcrypt_cost", "BCRYPT_COST"),
            ("log_level", "LOG_LEVEL"),
            ("log_dir", "LOG_DIR"),
        ):
            value = read(name)
            if value is not None:
                values[field] = value

        argon2 = {}
        for field, name in (
            ("time_cost", "ARGON2_TIME_COST"),
            ("memory_cost", "ARGON2_MEMORY_COST"),
            ("parallelism", "ARGON2_PARALLELISM"),
        ):
            value = read(name)
            if value is not None:
                argon2[field] = value
        if argon2:
            values["argon2"] = argon2

        try:
            return cls(**values)
        except ValidationError as e:
            raise ValueError(f"Invalid {ENV_PREFIX}* configuration: {e}") from e


__all__ = ["Argon2Cost", "CryptoSettings", "ENV_PREFIX"]
