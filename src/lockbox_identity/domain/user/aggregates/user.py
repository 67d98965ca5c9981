"""User aggregate for credential and token lifecycle concerns."""

from datetime import datetime
from typing import Optional, Union
from uuid import UUID, uuid4

from lockbox_identity.domain.shared.time import utc_now
from lockbox_identity.domain.user.exceptions import InvalidAccountStateError
from lockbox_identity.domain.user.value_objects import (
    AccountState,
    Email,
    OneTimeToken,
    PasswordHash,
    TokenKind,
)


class User:
    """
    User aggregate root.

    Holds the credential (hash + salt), the email verification flag and the
    outstanding single-use tokens. At most one token of each kind exists at a
    time: issuing a new one overwrites the previous one of that kind.
    """

    def __init__(  # noqa: PLR0913
        self,
        email: Union[str, Email],
        password: PasswordHash,
        id: UUID | None = None,
        is_email_verified: bool = False,
        tokens: dict[TokenKind, OneTimeToken] | None = None,
        is_marked_for_deletion: bool = False,
        deletion_scheduled_at: datetime | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
        version: int = 1,
    ):
        self._email = email if isinstance(email, Email) else Email(email)
        self._password = password
        self._id = id or uuid4()
        self._is_email_verified = is_email_verified
        self._tokens: dict[TokenKind, OneTimeToken] = dict(tokens or {})
        self._is_marked_for_deletion = is_marked_for_deletion
        self._deletion_scheduled_at = deletion_scheduled_at
        self._created_at = created_at or utc_now()
        self._updated_at = updated_at or self._created_at
        self._version = version

    @property
    def id(self) -> UUID:
        return self._id

    @property
    def email(self) -> str:
        return self._email.value

    @property
    def password(self) -> PasswordHash:
        return self._password

    @property
    def is_email_verified(self) -> bool:
        return self._is_email_verified

    @property
    def is_marked_for_deletion(self) -> bool:
        return self._is_marked_for_deletion

    @property
    def deletion_scheduled_at(self) -> datetime | None:
        return self._deletion_scheduled_at

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    @property
    def version(self) -> int:
        """Revision of the stored record this instance was read from."""
        return self._version

    @property
    def state(self) -> AccountState:
        if self._is_marked_for_deletion:
            return AccountState.DELETION_PENDING
        if self._is_email_verified:
            return AccountState.ACTIVE
        return AccountState.PENDING_VERIFICATION

    @property
    def has_pending_password_reset(self) -> bool:
        return TokenKind.PASSWORD_RESET in self._tokens

    def token(self, kind: TokenKind) -> Optional[OneTimeToken]:
        """Return the outstanding token of ``kind``, if any."""
        return self._tokens.get(kind)

    def issue_token(self, token: OneTimeToken, kind: TokenKind) -> None:
        """Store a freshly issued token, replacing any previous one of ``kind``."""
        self._tokens[kind] = token
        self._touch()

    def clear_token(self, kind: TokenKind) -> None:
        self._tokens.pop(kind, None)
        self._touch()

    def verify_email(self) -> None:
        """Flip the verification flag and consume the verification token."""
        if self._is_email_verified:
            msg = f"Email already verified for user {self._id}"
            raise InvalidAccountStateError(msg)
        self._is_email_verified = True
        self.clear_token(TokenKind.EMAIL_VERIFICATION)

    def change_password(self, password: PasswordHash) -> None:
        """Replace the credential and consume any outstanding reset token."""
        self._password = password
        self.clear_token(TokenKind.PASSWORD_RESET)

    def request_deletion(self, token: OneTimeToken, now: datetime) -> None:
        self._is_marked_for_deletion = True
        self._deletion_scheduled_at = now
        self.issue_token(token, TokenKind.ACCOUNT_DELETION)

    def _touch(self) -> None:
        self._updated_at = utc_now()

    def mark_saved(self, version: int) -> None:
        """Record the revision the store assigned on the last successful write."""
        self._version = version

    @classmethod
    def register(
        cls,
        email: Union[str, Email],
        password: PasswordHash,
        verification_token: OneTimeToken,
    ) -> "User":
        return cls(
            email=email,
            password=password,
            tokens={TokenKind.EMAIL_VERIFICATION: verification_token},
        )

    @classmethod
    def reconstitute(  # noqa: PLR0913
        cls,
        id: UUID,
        email: Union[str, Email],
        password: PasswordHash,
        is_email_verified: bool,
        tokens: dict[TokenKind, OneTimeToken],
        is_marked_for_deletion: bool,
        deletion_scheduled_at: datetime | None,
        created_at: datetime,
        updated_at: datetime,
        version: int,
    ) -> "User":
        return cls(
            id=id,
            email=email,
            password=password,
            is_email_verified=is_email_verified,
            tokens=tokens,
            is_marked_for_deletion=is_marked_for_deletion,
            deletion_scheduled_at=deletion_scheduled_at,
            created_at=created_at,
            updated_at=updated_at,
            version=version,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, User):
            return NotImplemented
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self) -> str:
        return f"User(id={self._id}, email={self._email.value}, state={self.state.value})"
