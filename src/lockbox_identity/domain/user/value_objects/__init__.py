"""Value objects for the user domain."""

from lockbox_identity.domain.user.value_objects.account_state import (
    AccountState,
    EmailStatus,
)
from lockbox_identity.domain.user.value_objects.account_statistics import (
    AccountStatistics,
)
from lockbox_identity.domain.user.value_objects.email import Email
from lockbox_identity.domain.user.value_objects.one_time_token import OneTimeToken
from lockbox_identity.domain.user.value_objects.password_hash import PasswordHash
from lockbox_identity.domain.user.value_objects.token_kind import TokenKind

__all__ = [
    "AccountState",
    "AccountStatistics",
    "Email",
    "EmailStatus",
    "OneTimeToken",
    "PasswordHash",
    "TokenKind",
]
