"""
Pytest configuration for lockbox_identity tests.

Provides settings, an in-memory SQLite session and an email dispatcher
that records what would have been sent.
"""

from dataclasses import dataclass, field

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from lockbox_config import Settings
from lockbox_identity.application.ports import EmailDispatcher
from lockbox_identity.infrastructure.persistence.sqlalchemy import IdentityBase

TEST_JWT_SECRET = "test-signing-secret-" + "x" * 64


@dataclass
class SentEmail:
    kind: str
    email: str
    token: str | None = None


@dataclass
class RecordingEmailDispatcher(EmailDispatcher):
    """EmailDispatcher that keeps every message instead of sending it."""

    sent: list[SentEmail] = field(default_factory=list)
    succeed: bool = True

    async def send_verification(self, email: str, token: str) -> bool:
        return self._record("verification", email, token)

    async def send_password_reset(self, email: str, token: str) -> bool:
        return self._record("password_reset", email, token)

    async def send_deletion_confirmation(self, email: str, token: str) -> bool:
        return self._record("deletion_confirmation", email, token)

    async def send_deletion_completed_notice(self, email: str) -> bool:
        return self._record("deletion_completed", email)

    def last_token(self, kind: str) -> str:
        return next(m.token for m in reversed(self.sent) if m.kind == kind)

    def kinds(self) -> list[str]:
        return [m.kind for m in self.sent]

    def _record(self, kind: str, email: str, token: str | None = None) -> bool:
        self.sent.append(SentEmail(kind=kind, email=email, token=token))
        return self.succeed


@pytest.fixture
def settings() -> Settings:
    """Settings with a test signing secret and SMTP disabled."""
    return Settings(
        jwt_secret=TEST_JWT_SECRET,
        database_url="sqlite+aiosqlite:///:memory:",
        smtp_enabled=False,
        public_base_url="https://lockbox.example.com",
    )


@pytest.fixture
def email_dispatcher() -> RecordingEmailDispatcher:
    return RecordingEmailDispatcher()


@pytest_asyncio.fixture
async def session_maker():
    """Session factory bound to a fresh in-memory SQLite database."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(IdentityBase.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def session(session_maker):
    """Create an in-memory SQLite session for testing."""
    async with session_maker() as session:
        yield session
