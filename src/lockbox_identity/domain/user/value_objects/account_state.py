from enum import Enum


class AccountState(str, Enum):
    """Lifecycle state of a registered account."""

    PENDING_VERIFICATION = "pending_verification"
    ACTIVE = "active"
    DELETION_PENDING = "deletion_pending"


class EmailStatus(str, Enum):
    """Registration status of an email address, as seen by an operator."""

    NOT_REGISTERED = "not_registered"
    PENDING_VERIFICATION = "pending_verification"
    PENDING_EXPIRED = "pending_expired"
    VERIFIED = "verified"
