"""Lockbox identity: account credentials and single-use token lifecycle.

Public API:
- AccountLifecycleService and its OperationResult values
- Password hashing, single-use token and session token services
- The User aggregate and the ports it is persisted and notified through
"""

from lockbox_identity.application.ports import EmailDispatcher
from lockbox_identity.application.results import (
    PASSWORD_RESET_NOTICE,
    EmailStatusReport,
    FailureReason,
    OperationResult,
    ResultStatus,
)
from lockbox_identity.application.services import AccountLifecycleService
from lockbox_identity.domain.user import (
    AccountState,
    AccountStatistics,
    Email,
    EmailAlreadyExistsError,
    EmailStatus,
    InvalidAccountStateError,
    InvalidEmailError,
    OneTimeToken,
    PasswordHash,
    TokenKind,
    User,
    UserRepository,
)
from lockbox_identity.exceptions import (
    EmailDeliveryError,
    IdentityError,
    UnverifiedAccountError,
)
from lockbox_identity.services import (
    OneTimeTokenService,
    PasswordHashingService,
    SessionTokenService,
    decode_transported_token,
)

__all__ = [
    "PASSWORD_RESET_NOTICE",
    "AccountLifecycleService",
    "AccountState",
    "AccountStatistics",
    "Email",
    "EmailAlreadyExistsError",
    "EmailDeliveryError",
    "EmailDispatcher",
    "EmailStatus",
    "EmailStatusReport",
    "FailureReason",
    "IdentityError",
    "InvalidAccountStateError",
    "InvalidEmailError",
    "OneTimeToken",
    "OneTimeTokenService",
    "OperationResult",
    "PasswordHash",
    "PasswordHashingService",
    "ResultStatus",
    "SessionTokenService",
    "TokenKind",
    "UnverifiedAccountError",
    "User",
    "UserRepository",
    "decode_transported_token",
]
