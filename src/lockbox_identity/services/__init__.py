"""Identity services - password hashing, single-use tokens and session tokens."""

from lockbox_identity.services.jwt_service import SessionTokenService
from lockbox_identity.services.password_service import PasswordHashingService
from lockbox_identity.services.token_service import (
    OneTimeTokenService,
    decode_transported_token,
)

__all__ = [
    "OneTimeTokenService",
    "PasswordHashingService",
    "SessionTokenService",
    "decode_transported_token",
]
