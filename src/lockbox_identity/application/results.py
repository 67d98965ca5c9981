"""Tagged results returned by the account lifecycle service.

Business-rule outcomes are values, never exceptions. ``status`` is what a
calling layer maps to a response; ``reason`` is an internal diagnostic and
must not be shown to end users where it would reveal account existence.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Generic, Optional, TypeVar

from lockbox_identity.domain.user.value_objects import EmailStatus

T = TypeVar("T")

PASSWORD_RESET_NOTICE = (
    "If an account with this email exists, a password reset link has been sent."
)


class ResultStatus(str, Enum):
    SUCCESS = "success"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INVALID_OR_EXPIRED_TOKEN = "invalid_or_expired_token"
    UNAUTHORIZED = "unauthorized"
    SYSTEM_ERROR = "system_error"


class FailureReason(str, Enum):
    ACCOUNT_NOT_FOUND = "account_not_found"
    EMAIL_ALREADY_REGISTERED = "email_already_registered"
    ALREADY_VERIFIED = "already_verified"
    EMAIL_NOT_VERIFIED = "email_not_verified"
    BAD_CREDENTIALS = "bad_credentials"
    TOKEN_MISSING = "token_missing"
    TOKEN_NOT_FOUND = "token_not_found"
    TOKEN_EXPIRED = "token_expired"
    NOT_MARKED_FOR_DELETION = "not_marked_for_deletion"
    TOKEN_ALREADY_CONSUMED = "token_already_consumed"
    EMAIL_DELIVERY_FAILED = "email_delivery_failed"
    CONCURRENT_UPDATE = "concurrent_update"


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Outcome of one lifecycle operation."""

    status: ResultStatus
    data: Optional[T] = None
    reason: Optional[FailureReason] = None
    message: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.status == ResultStatus.SUCCESS

    @classmethod
    def success(cls, data: Optional[T] = None, message: Optional[str] = None) -> OperationResult[T]:
        return cls(status=ResultStatus.SUCCESS, data=data, message=message)

    @classmethod
    def failure(
        cls,
        status: ResultStatus,
        reason: FailureReason,
        message: Optional[str] = None,
    ) -> OperationResult[T]:
        if status == ResultStatus.SUCCESS:
            msg = "A failure result cannot carry SUCCESS status"
            raise ValueError(msg)
        return cls(status=status, reason=reason, message=message)

    @classmethod
    def not_found(cls, reason: FailureReason = FailureReason.ACCOUNT_NOT_FOUND) -> OperationResult[T]:
        return cls.failure(ResultStatus.NOT_FOUND, reason)

    @classmethod
    def conflict(cls, reason: FailureReason) -> OperationResult[T]:
        return cls.failure(ResultStatus.CONFLICT, reason)

    @classmethod
    def invalid_token(cls, reason: FailureReason) -> OperationResult[T]:
        return cls.failure(ResultStatus.INVALID_OR_EXPIRED_TOKEN, reason)

    @classmethod
    def unauthorized(cls, reason: FailureReason = FailureReason.BAD_CREDENTIALS) -> OperationResult[T]:
        return cls.failure(ResultStatus.UNAUTHORIZED, reason)

    @classmethod
    def delivery_failed(cls) -> OperationResult[T]:
        return cls.failure(ResultStatus.SYSTEM_ERROR, FailureReason.EMAIL_DELIVERY_FAILED)


@dataclass(frozen=True)
class EmailStatusReport:
    """Registration status of an email address."""

    email: str
    status: EmailStatus
    registered_at: Optional[datetime] = None

    @property
    def is_registered(self) -> bool:
        return self.status != EmailStatus.NOT_REGISTERED

