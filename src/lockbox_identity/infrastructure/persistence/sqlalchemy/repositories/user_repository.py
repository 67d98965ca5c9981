"""SQLAlchemy implementation of UserRepository."""

import logging
from datetime import datetime
from typing import Any, Union

from sqlalchemy import and_, case, delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from lockbox_identity.domain.shared.time import ensure_tz_aware
from lockbox_identity.domain.user import (
    AccountStatistics,
    Email,
    EmailAlreadyExistsError,
    OneTimeToken,
    PasswordHash,
    TokenKind,
    User,
    UserRepository,
)
from lockbox_identity.infrastructure.persistence.sqlalchemy.models import UserModel

logger = logging.getLogger(__name__)

_TOKEN_COLUMNS: dict[TokenKind, tuple[InstrumentedAttribute, InstrumentedAttribute]] = {
    TokenKind.EMAIL_VERIFICATION: (
        UserModel.email_verification_token,
        UserModel.email_verification_token_expires,
    ),
    TokenKind.PASSWORD_RESET: (
        UserModel.password_reset_token,
        UserModel.password_reset_token_expires,
    ),
    TokenKind.ACCOUNT_DELETION: (
        UserModel.account_deletion_token,
        UserModel.account_deletion_token_expires,
    ),
}


def _count_where(condition: Any) -> Any:
    return func.count(case((condition, 1)))


class UserRepositorySQLAlchemy(UserRepository):
    """SQLAlchemy implementation of the UserRepository interface.

    Every write commits on its own, so each operation is atomic at the level
    of a single user record. Reads always hit the database rather than the
    session's identity map.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_email(self, email: Union[str, Email]) -> User | None:
        email_value = email.value if isinstance(email, Email) else Email(email).value
        return await self._find_one(UserModel.email == email_value)

    async def find_by_verification_token(self, token: str) -> User | None:
        return await self._find_by_token(TokenKind.EMAIL_VERIFICATION, token)

    async def find_by_reset_token(self, token: str) -> User | None:
        return await self._find_by_token(TokenKind.PASSWORD_RESET, token)

    async def find_by_deletion_token(self, token: str) -> User | None:
        return await self._find_by_token(TokenKind.ACCOUNT_DELETION, token)

    async def exists_by_email(self, email: Union[str, Email]) -> bool:
        user = await self.find_by_email(email)
        return user is not None

    async def insert(self, user: User) -> None:
        self._session.add(
            UserModel(id=user.id, version=user.version, **self._to_columns(user)),
        )
        try:
            await self._session.commit()
        except IntegrityError as e:
            await self._session.rollback()
            if "UNIQUE constraint failed" in str(e) or "unique" in str(e).lower():
                raise EmailAlreadyExistsError(user.email) from e
            raise
        logger.info("Created user: %s (email: %s)", user.id, user.email)

    async def save(self, user: User) -> bool:
        updated = await self._update_where(user)
        if updated:
            logger.debug("Updated user: %s", user.id)
        else:
            logger.info("Lost update for user %s at revision %s", user.id, user.version)
        return updated

    async def save_if_token_matches(
        self,
        user: User,
        kind: TokenKind,
        token: str,
    ) -> bool:
        token_column, _ = _TOKEN_COLUMNS[kind]
        updated = await self._update_where(user, token_column == token)
        if updated:
            logger.debug("Updated user %s consuming %s token", user.id, kind.value)
        return updated

    async def remove(self, user: User) -> None:
        await self._delete_where(UserModel.id == user.id)
        logger.info("Deleted user: %s", user.id)

    async def remove_if_token_matches(
        self,
        user: User,
        kind: TokenKind,
        token: str,
    ) -> bool:
        token_column, _ = _TOKEN_COLUMNS[kind]
        removed = await self._delete_where(UserModel.id == user.id, token_column == token)
        if removed:
            logger.info("Deleted user %s consuming %s token", user.id, kind.value)
        return removed

    async def collect_statistics(self, now: datetime) -> AccountStatistics:
        unverified = UserModel.is_email_verified.is_(False)
        verification_live = UserModel.email_verification_token_expires > now
        stmt = select(
            func.count(UserModel.id),
            _count_where(UserModel.is_email_verified.is_(True)),
            _count_where(
                and_(
                    unverified,
                    UserModel.email_verification_token.is_not(None),
                    verification_live,
                )
            ),
            _count_where(
                and_(
                    unverified,
                    or_(
                        UserModel.email_verification_token.is_(None),
                        UserModel.email_verification_token_expires.is_(None),
                        UserModel.email_verification_token_expires <= now,
                    ),
                )
            ),
            _count_where(UserModel.is_marked_for_deletion.is_(True)),
            _count_where(
                and_(
                    UserModel.password_reset_token.is_not(None),
                    UserModel.password_reset_token_expires > now,
                )
            ),
        )
        row = (await self._session.execute(stmt)).one()
        return AccountStatistics(
            total=row[0],
            verified=row[1],
            pending_verification=row[2],
            pending_expired=row[3],
            marked_for_deletion=row[4],
            pending_password_resets=row[5],
        )

    async def _find_by_token(self, kind: TokenKind, token: str) -> User | None:
        if not token:
            return None
        token_column, _ = _TOKEN_COLUMNS[kind]
        return await self._find_one(token_column == token)

    async def _find_one(self, *criteria: Any) -> User | None:
        stmt = (
            select(UserModel)
            .where(*criteria)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            return None

        return self._map_to_domain(model)

    async def _update_where(self, user: User, *criteria: Any) -> bool:
        next_version = user.version + 1
        stmt = (
            update(UserModel)
            .where(UserModel.id == user.id, UserModel.version == user.version, *criteria)
            .values(version=next_version, **self._to_columns(user))
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        await self._session.commit()
        if result.rowcount != 1:
            return False
        user.mark_saved(next_version)
        return True

    async def _delete_where(self, *criteria: Any) -> bool:
        stmt = (
            delete(UserModel)
            .where(*criteria)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        await self._session.commit()
        return result.rowcount == 1

    def _map_to_domain(self, model: UserModel) -> User:
        tokens: dict[TokenKind, OneTimeToken] = {}
        for kind, (token_column, expires_column) in _TOKEN_COLUMNS.items():
            value = getattr(model, token_column.key)
            expires_at = getattr(model, expires_column.key)
            if value is not None and expires_at is not None:
                tokens[kind] = OneTimeToken(
                    value=value,
                    expires_at=ensure_tz_aware(expires_at),
                )

        return User.reconstitute(
            id=model.id,
            email=model.email,
            password=PasswordHash(hash=model.password_hash, salt=model.password_salt),
            is_email_verified=model.is_email_verified,
            tokens=tokens,
            is_marked_for_deletion=model.is_marked_for_deletion,
            deletion_scheduled_at=(
                ensure_tz_aware(model.deletion_scheduled_at)
                if model.deletion_scheduled_at
                else None
            ),
            created_at=ensure_tz_aware(model.created_at),
            updated_at=ensure_tz_aware(model.updated_at),
            version=model.version,
        )

    def _to_columns(self, user: User) -> dict[str, Any]:
        columns: dict[str, Any] = {
            "email": user.email,
            "password_hash": user.password.hash,
            "password_salt": user.password.salt,
            "is_email_verified": user.is_email_verified,
            "is_marked_for_deletion": user.is_marked_for_deletion,
            "deletion_scheduled_at": user.deletion_scheduled_at,
            "created_at": user.created_at,
            "updated_at": user.updated_at,
        }
        for kind, (token_column, expires_column) in _TOKEN_COLUMNS.items():
            token = user.token(kind)
            columns[token_column.key] = token.value if token else None
            columns[expires_column.key] = token.expires_at if token else None
        return columns
