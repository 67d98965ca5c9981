"""User domain: the account record and its credential/token lifecycle.

This domain handles:
- User aggregate (id, email, credential, verification flag, tokens)
- Single-use token value objects and their lifetimes
- The persistence port consumed by the lifecycle service
"""

from lockbox_identity.domain.user.aggregates import User
from lockbox_identity.domain.user.exceptions import (
    EmailAlreadyExistsError,
    InvalidAccountStateError,
    InvalidEmailError,
)
from lockbox_identity.domain.user.repositories import UserRepository
from lockbox_identity.domain.user.value_objects import (
    AccountState,
    AccountStatistics,
    Email,
    EmailStatus,
    OneTimeToken,
    PasswordHash,
    TokenKind,
)

__all__ = [
    "AccountState",
    "AccountStatistics",
    "Email",
    "EmailAlreadyExistsError",
    "EmailStatus",
    "InvalidAccountStateError",
    "InvalidEmailError",
    "OneTimeToken",
    "PasswordHash",
    "TokenKind",
    "User",
    "UserRepository",
]
