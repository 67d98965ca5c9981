"""Wiring of the concrete adapters behind the account lifecycle service."""

import logging

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from lockbox_config.settings import Settings
from lockbox_identity.application.ports import EmailDispatcher
from lockbox_identity.application.services import AccountLifecycleService
from lockbox_identity.infrastructure.email import SmtpEmailDispatcher
from lockbox_identity.infrastructure.persistence.sqlalchemy import (
    IdentityBase,
    UserRepositorySQLAlchemy,
)
from lockbox_identity.services import (
    OneTimeTokenService,
    PasswordHashingService,
    SessionTokenService,
)

logger = logging.getLogger(__name__)


def create_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine for the configured database."""
    return create_async_engine(
        settings.sqlalchemy_url,
        echo=False,
        pool_pre_ping=True,
    )


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory; each unit of work opens its own session."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """
    Create the identity tables (idempotent).

    Uses SQLAlchemy's create_all(), which only creates missing tables.
    """
    logger.info("Ensuring identity tables exist...")
    async with engine.begin() as conn:
        await conn.run_sync(IdentityBase.metadata.create_all)
    logger.info("Identity schema is up to date")


def build_account_lifecycle_service(
    session: AsyncSession,
    settings: Settings,
    email_dispatcher: EmailDispatcher | None = None,
) -> AccountLifecycleService:
    """
    Build an AccountLifecycleService bound to one database session.

    Parameters
    ----------
    session
        Session for this unit of work
    settings
        Loaded application settings
    email_dispatcher
        Optional dispatcher override; defaults to SMTP

    Returns
    -------
    Fully wired AccountLifecycleService
    """
    return AccountLifecycleService(
        user_repository=UserRepositorySQLAlchemy(session),
        email_dispatcher=email_dispatcher or SmtpEmailDispatcher(settings),
        password_service=PasswordHashingService(),
        token_service=OneTimeTokenService(),
        session_service=SessionTokenService(
            secret_key=settings.jwt_secret.get_secret_value(),
            expire_hours=settings.jwt_session_expire_hours,
        ),
    )
