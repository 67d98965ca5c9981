from datetime import timedelta
from enum import Enum


class TokenKind(str, Enum):
    """The three single-use token workflows and their lifetimes."""

    EMAIL_VERIFICATION = "email_verification"
    PASSWORD_RESET = "password_reset"
    ACCOUNT_DELETION = "account_deletion"

    @property
    def ttl(self) -> timedelta:
        return _TOKEN_TTLS[self]


_TOKEN_TTLS = {
    TokenKind.EMAIL_VERIFICATION: timedelta(hours=72),
    TokenKind.PASSWORD_RESET: timedelta(hours=1),
    TokenKind.ACCOUNT_DELETION: timedelta(hours=24),
}
