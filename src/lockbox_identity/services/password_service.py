"""Password hashing service using keyed HMAC-SHA512.

Every call to ``hash`` draws a fresh random key (the salt), so no salt is
ever shared between users or between two hashes of the same password.
"""

import secrets

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, hmac

from lockbox_identity.domain.user.value_objects import PasswordHash


class PasswordHashingService:
    """Service for password hashing and verification.

    Examples
    --------
    >>> service = PasswordHashingService()
    >>> credential = service.hash("my_secure_password")
    >>> service.verify("my_secure_password", credential.hash, credential.salt)
    True
    >>> service.verify("wrong_password", credential.hash, credential.salt)
    False
    """

    MIN_SALT_BYTES = 64
    DEFAULT_SALT_BYTES = 128

    def __init__(self, salt_bytes: int = DEFAULT_SALT_BYTES):
        """Initialize the password hashing service.

        Parameters
        ----------
        salt_bytes
            Length of the random key drawn per hash. Must be at least 64.
        """
        if salt_bytes < self.MIN_SALT_BYTES:
            msg = f"Salt must be at least {self.MIN_SALT_BYTES} bytes"
            raise ValueError(msg)
        self._salt_bytes = salt_bytes

    def hash(self, password: str) -> PasswordHash:
        """Hash a plaintext password under a fresh random salt.

        Parameters
        ----------
        password
            The plaintext password to hash

        Returns
        -------
        The keyed hash together with the salt it was computed under
        """
        salt = secrets.token_bytes(self._salt_bytes)
        return PasswordHash(hash=self._digest(password, salt).finalize(), salt=salt)

    def verify(self, password: str, password_hash: bytes, salt: bytes) -> bool:
        """Verify a password against a stored hash and salt.

        The comparison is constant-time with respect to the hash content.

        Returns
        -------
        True if password matches, False otherwise
        """
        if not password_hash or not salt:
            return False
        try:
            self._digest(password, salt).verify(password_hash)
        except InvalidSignature:
            return False
        return True

    @staticmethod
    def _digest(password: str, salt: bytes) -> hmac.HMAC:
        digest = hmac.HMAC(salt, hashes.SHA512())
        digest.update(password.encode("utf-8"))
        return digest
