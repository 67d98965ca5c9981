"""User repository interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, Union

from lockbox_identity.domain.user.aggregates.user import User
from lockbox_identity.domain.user.value_objects import (
    AccountStatistics,
    Email,
    TokenKind,
)


class UserRepository(ABC):
    """Repository interface for User aggregates.

    Every operation is atomic at single-record granularity. Token lookups
    are exact, case-sensitive matches and do not check expiry.
    """

    @abstractmethod
    async def find_by_email(self, email: Union[str, Email]) -> Optional[User]:
        """Find a user by their (normalized) email address."""

    @abstractmethod
    async def find_by_verification_token(self, token: str) -> Optional[User]:
        """Find the user holding this email verification token."""

    @abstractmethod
    async def find_by_reset_token(self, token: str) -> Optional[User]:
        """Find the user holding this password reset token."""

    @abstractmethod
    async def find_by_deletion_token(self, token: str) -> Optional[User]:
        """Find the user holding this account deletion token."""

    @abstractmethod
    async def exists_by_email(self, email: Union[str, Email]) -> bool:
        """Check if a user exists with the given email."""

    @abstractmethod
    async def insert(self, user: User) -> None:
        """Persist a new user.

        Raises
        ------
        EmailAlreadyExistsError
            If another record already owns the email
        """

    @abstractmethod
    async def save(self, user: User) -> bool:
        """Update a previously fetched user if the record is unchanged since.

        The write only applies while the stored revision still equals
        ``user.version``; on success ``user`` is moved to the new revision.

        Returns
        -------
        True if the record was updated, False if it was changed or removed
        concurrently
        """

    @abstractmethod
    async def save_if_token_matches(
        self,
        user: User,
        kind: TokenKind,
        token: str,
    ) -> bool:
        """Persist ``user`` only if the stored token of ``kind`` still equals ``token``.

        This is a single conditional update guarded by both the token and the
        record revision, so two callers racing to consume the same token
        cannot both succeed and no concurrent change is overwritten.

        Returns
        -------
        True if the record was updated, False if the token or the record
        changed in the meantime
        """

    @abstractmethod
    async def remove(self, user: User) -> None:
        """Permanently delete a user record."""

    @abstractmethod
    async def remove_if_token_matches(
        self,
        user: User,
        kind: TokenKind,
        token: str,
    ) -> bool:
        """Delete ``user`` only if the stored token of ``kind`` still equals ``token``.

        Returns
        -------
        True if the record was deleted, False otherwise
        """

    @abstractmethod
    async def collect_statistics(self, now: datetime) -> AccountStatistics:
        """Count accounts by verification, deletion and reset state at ``now``."""
