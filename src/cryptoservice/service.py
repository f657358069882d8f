"""CryptoService facade over the primitive modules."""

from typing import Optional, Union

from . import crypto
from .algorithms import AlgorithmName, CipherName, PasswordAlgorithm
from .config import CryptoSettings
from .crypto.digest import TokenPair
from .crypto.mac import BytesLike
from .crypto.passwords import Cost


class CryptoService:
    """Stateless cryptographic helper bound to a set of defaults.

    Every method is safe to call concurrently; the only state is the
    immutable :class:`CryptoSettings`.
    """

    def __init__(self, settings: Optional[CryptoSettings] = None):
        """Initialize the service.

        Args:
            settings: Defaults for cipher, hash and work factors. If None,
                uses the built-in defaults.
        """
        self.settings = settings or CryptoSettings()

    @classmethod
    def from_env(cls) -> "CryptoService":
        """Create a service configured from ``CRYPTOSERVICE_*`` variables."""
        return cls(CryptoSettings.from_env())

    def _hash_algorithm(self, algorithm: Optional[AlgorithmName]) -> AlgorithmName:
        return self.settings.default_hash if algorithm is None else algorithm

    def _cipher_algorithm(self, algorithm: Optional[CipherName]) -> CipherName:
        return self.settings.default_cipher if algorithm is None else algorithm

    # ------------------------------------------------------------------
    # Digest
    # ------------------------------------------------------------------

    def hash(self, input: BytesLike, algorithm: Optional[AlgorithmName] = None) -> str:
        return crypto.hash(input, self._hash_algorithm(algorithm))

    def is_valid_hash_format(self, candidate: object, algorithm: Optional[AlgorithmName] = None) -> bool:
        return crypto.is_valid_hash_format(candidate, self._hash_algorithm(algorithm))

    def hmac_token(self, data: BytesLike, key: BytesLike, algorithm: Optional[AlgorithmName] = None) -> str:
        return crypto.hmac_token(data, key, self._hash_algorithm(algorithm))

    def generate_and_hash_token(
        self, byte_length: int = 32, algorithm: Optional[AlgorithmName] = None
    ) -> TokenPair:
        return crypto.generate_and_hash_token(byte_length, self._hash_algorithm(algorithm))

    # ------------------------------------------------------------------
    # Password hashing
    # ------------------------------------------------------------------

    def _default_cost(self, algorithm: PasswordAlgorithm) -> Cost:
        if algorithm is PasswordAlgorithm.BCRYPT:
            return self.settings.bcrypt_cost
        return self.settings.argon2

    def hash_password(
        self,
        password: BytesLike,
        algorithm: Union[str, PasswordAlgorithm] = PasswordAlgorithm.BCRYPT,
        cost: Optional[Cost] = None,
    ) -> str:
        algo = PasswordAlgorithm.coerce(algorithm)
        if cost is None:
            cost = self._default_cost(algo)
        return crypto.hash_password(password, algo, cost)

    def verify_password(self, password: BytesLike, record: str) -> bool:
        return crypto.verify_password(password, record)

    def needs_rehash(self, record: str, desired_cost: Optional[Cost] = None) -> bool:
        """Tell whether ``record`` should be rehashed at ``desired_cost``.

        Without a desired cost, the configured cost for the record's own
        algorithm is used.
        """
        if desired_cost is None:
            desired_cost = self._default_cost(crypto.identify(record))
        return crypto.needs_rehash(record, desired_cost)

    # ------------------------------------------------------------------
    # MAC
    # ------------------------------------------------------------------

    def hmac(self, data: BytesLike, key: BytesLike, algorithm: Optional[AlgorithmName] = None) -> str:
        return crypto.hmac(data, key, self._hash_algorithm(algorithm))

    def validate_token(
        self, token: BytesLike, stored_hash: str, algorithm: Optional[AlgorithmName] = None
    ) -> bool:
        return crypto.validate_token(token, stored_hash, self._hash_algorithm(algorithm))

    @staticmethod
    def secure_compare(a: BytesLike, b: BytesLike) -> bool:
        return crypto.secure_compare(a, b)

    # ------------------------------------------------------------------
    # Cipher
    # ------------------------------------------------------------------

    def encrypt(self, plaintext: BytesLike, key: BytesLike, algorithm: Optional[CipherName] = None) -> str:
        return crypto.encrypt(plaintext, key, self._cipher_algorithm(algorithm))

    def decrypt(
        self,
        envelope: Union[str, bytes],
        key: BytesLike,
        algorithm: Optional[CipherName] = None,
        *,
        raw: bool = False,
    ) -> Union[str, bytes]:
        return crypto.decrypt(envelope, key, self._cipher_algorithm(algorithm), raw=raw)

    def encrypt_authenticated(
        self,
        plaintext: BytesLike,
        key: BytesLike,
        aad: BytesLike = "",
        algorithm: Optional[CipherName] = None,
    ) -> str:
        return crypto.encrypt_authenticated(plaintext, key, aad, algorithm)

    def decrypt_authenticated(
        self,
        envelope: Union[str, bytes],
        key: BytesLike,
        aad: BytesLike = "",
        algorithm: Optional[CipherName] = None,
        *,
        raw: bool = False,
    ) -> Union[str, bytes]:
        return crypto.decrypt_authenticated(envelope, key, aad, algorithm, raw=raw)

    # ------------------------------------------------------------------
    # Key derivation
    # ------------------------------------------------------------------

    def derive_key(
        self,
        password: BytesLike,
        salt: BytesLike,
        memory_cost: Optional[int] = None,
        time_cost: Optional[int] = None,
        parallelism: Optional[int] = None,
        output_length: int = 32,
    ) -> bytes:
        """Argon2id key derivation; unset costs come from the settings."""
        defaults = self.settings.argon2
        return crypto.derive_key(
            password,
            salt,
            memory_cost=defaults.memory_cost if memory_cost is None else memory_cost,
            time_cost=defaults.time_cost if time_cost is None else time_cost,
            parallelism=defaults.parallelism if parallelism is None else parallelism,
            output_length=output_length,
        )

    def pbkdf2(
        self,
        password: BytesLike,
        salt: BytesLike,
        iterations: int = 100_000,
        length: int = 64,
        algorithm: Optional[AlgorithmName] = None,
    ) -> str:
        return crypto.pbkdf2(password, salt, iterations, length, self._hash_algorithm(algorithm))

    # ------------------------------------------------------------------
    # Randomness
    # ------------------------------------------------------------------

    @staticmethod
    def generate_token(length: int = 32) -> str:
        return crypto.generate_token(length)

    @staticmethod
    def generate_salt(length: int = 16) -> str:
        return crypto.generate_salt(length)

    @staticmethod
    def generate_random_string(length: int = 32) -> str:
        return crypto.generate_random_string(length)
