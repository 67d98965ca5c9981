"""Account lifecycle service.

Orchestrates password hashing, single-use tokens and session tokens against
the user record: registration, email verification, login, password reset
and the two-phase account deletion.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Optional

from lockbox_identity.application.results import (
    PASSWORD_RESET_NOTICE,
    EmailStatusReport,
    FailureReason,
    OperationResult,
    ResultStatus,
)
from lockbox_identity.domain.user import (
    AccountStatistics,
    Email,
    EmailAlreadyExistsError,
    EmailStatus,
    InvalidEmailError,
    TokenKind,
    User,
)

if TYPE_CHECKING:
    from lockbox_identity.application.ports import EmailDispatcher
    from lockbox_identity.domain.user import UserRepository
    from lockbox_identity.services import (
        OneTimeTokenService,
        PasswordHashingService,
        SessionTokenService,
    )

logger = logging.getLogger(__name__)

# Attempts for a read-modify-write before giving up on a busy record
_MAX_WRITE_ATTEMPTS = 3

# Verified against when the account does not exist, so that a login for an
# unknown email costs the same HMAC computation as a real one.
_DUMMY_HASH = bytes(64)
_DUMMY_SALT = bytes(128)


def _normalized_or_raw(email: str) -> str:
    try:
        return Email(email).value
    except InvalidEmailError:
        return email


class AccountLifecycleService:
    """
    Application service for the account credential and token lifecycle.

    This is the only writer of user records. Every operation reads the
    record fresh from the repository, persists its mutation before any email
    is dispatched, and reports business outcomes as ``OperationResult``
    values. Only unexpected persistence failures propagate as exceptions.
    Writes are conditional on the revision that was read; a lost write is
    redone against the fresh record rather than overwriting it.
    """

    def __init__(  # noqa: PLR0913
        self,
        user_repository: UserRepository,
        email_dispatcher: EmailDispatcher,
        password_service: PasswordHashingService,
        token_service: OneTimeTokenService,
        session_service: SessionTokenService,
    ):
        self._user_repo = user_repository
        self._email = email_dispatcher
        self._password_service = password_service
        self._token_service = token_service
        self._session_service = session_service

    async def register(self, email: str, password: str) -> OperationResult[User]:
        email_obj = Email(email)
        if await self._user_repo.exists_by_email(email_obj):
            logger.info("Registration rejected, email already registered: %s", email_obj)
            return OperationResult.conflict(FailureReason.EMAIL_ALREADY_REGISTERED)

        verification_token = self._token_service.issue(TokenKind.EMAIL_VERIFICATION.ttl)
        user = User.register(
            email=email_obj,
            password=self._password_service.hash(password),
            verification_token=verification_token,
        )
        try:
            await self._user_repo.insert(user)
        except EmailAlreadyExistsError:
            logger.info("Registration lost insert race for email: %s", email_obj)
            return OperationResult.conflict(FailureReason.EMAIL_ALREADY_REGISTERED)

        # Registration stands even if this fails; the user can ask for a resend
        if await self._email.send_verification(user.email, verification_token.value):
            logger.info("Verification email sent to %s", user.email)
        else:
            logger.error("Failed to send verification email to %s", user.email)

        logger.info("User registered: %s", user.email)
        return OperationResult.success(user)

    async def login(self, email: str, password: str) -> OperationResult[str]:
        user = await self._find_by_email(email)
        if user is None:
            self._password_service.verify(password, _DUMMY_HASH, _DUMMY_SALT)
            return OperationResult.unauthorized()

        if not self._password_service.verify(
            password,
            user.password.hash,
            user.password.salt,
        ):
            logger.info("Login failed for %s: bad credentials", user.email)
            return OperationResult.unauthorized()

        if not user.is_email_verified:
            logger.warning("Login attempt with unverified email: %s", user.email)
            return OperationResult.unauthorized(FailureReason.EMAIL_NOT_VERIFIED)

        session_token = self._session_service.issue(user)
        logger.info("User logged in: %s", user.email)
        return OperationResult.success(session_token)

    async def verify_email(self, token: Optional[str]) -> OperationResult[None]:
        def apply(user: User) -> Optional[OperationResult[None]]:
            if user.is_email_verified:
                logger.warning("User email already verified: %s", user.email)
                return OperationResult.conflict(FailureReason.ALREADY_VERIFIED)
            user.verify_email()
            return None

        return await self._consume_token(TokenKind.EMAIL_VERIFICATION, token, apply)

    async def resend_verification(self, email: str) -> OperationResult[None]:
        def apply(user: Optional[User]) -> Optional[OperationResult[None]]:
            if user is None:
                return OperationResult.not_found()
            if user.is_email_verified:
                return OperationResult.conflict(FailureReason.ALREADY_VERIFIED)
            user.issue_token(
                self._token_service.issue(TokenKind.EMAIL_VERIFICATION.ttl),
                TokenKind.EMAIL_VERIFICATION,
            )
            return None

        user, rejection = await self._mutate(email, apply)
        if rejection is not None:
            return rejection

        token = user.token(TokenKind.EMAIL_VERIFICATION)
        if not await self._email.send_verification(user.email, token.value):
            logger.error("Failed to resend verification email to %s", user.email)
            return OperationResult.delivery_failed()

        logger.info("Verification email resent to %s", user.email)
        return OperationResult.success()

    async def forgot_password(self, email: str) -> OperationResult[None]:
        """Start a password reset.

        Every outcome carries the same ``message`` so the caller can answer
        uniformly whether or not the account exists.
        """

        def apply(user: Optional[User]) -> Optional[OperationResult[None]]:
            if user is None:
                logger.debug("Password reset requested for unknown email: %s", email)
                return OperationResult.failure(
                    ResultStatus.NOT_FOUND,
                    FailureReason.ACCOUNT_NOT_FOUND,
                    message=PASSWORD_RESET_NOTICE,
                )
            if not user.is_email_verified:
                logger.debug("Password reset requested for unverified email: %s", email)
                return OperationResult.failure(
                    ResultStatus.NOT_FOUND,
                    FailureReason.EMAIL_NOT_VERIFIED,
                    message=PASSWORD_RESET_NOTICE,
                )
            user.issue_token(
                self._token_service.issue(TokenKind.PASSWORD_RESET.ttl),
                TokenKind.PASSWORD_RESET,
            )
            return None

        user, rejection = await self._mutate(email, apply, message=PASSWORD_RESET_NOTICE)
        if rejection is not None:
            return rejection

        token = user.token(TokenKind.PASSWORD_RESET)
        if not await self._email.send_password_reset(user.email, token.value):
            logger.error("Failed to send password reset email to %s", user.email)
            return OperationResult.failure(
                ResultStatus.SYSTEM_ERROR,
                FailureReason.EMAIL_DELIVERY_FAILED,
                message=PASSWORD_RESET_NOTICE,
            )

        logger.info("Password reset email sent to %s", user.email)
        return OperationResult.success(message=PASSWORD_RESET_NOTICE)

    async def reset_password(
        self,
        token: Optional[str],
        new_password: str,
    ) -> OperationResult[None]:
        def apply(user: User) -> Optional[OperationResult[None]]:
            user.change_password(self._password_service.hash(new_password))
            return None

        return await self._consume_token(TokenKind.PASSWORD_RESET, token, apply)

    async def request_account_deletion(
        self,
        email: str,
        password: str,
    ) -> OperationResult[None]:
        def apply(user: Optional[User]) -> Optional[OperationResult[None]]:
            if user is None:
                self._password_service.verify(password, _DUMMY_HASH, _DUMMY_SALT)
                return OperationResult.unauthorized()
            if not self._password_service.verify(
                password,
                user.password.hash,
                user.password.salt,
            ):
                logger.warning("Account deletion rejected for %s: bad credentials", user.email)
                return OperationResult.unauthorized()
            user.request_deletion(
                self._token_service.issue(TokenKind.ACCOUNT_DELETION.ttl),
                now=self._token_service.now(),
            )
            return None

        user, rejection = await self._mutate(email, apply)
        if rejection is not None:
            return rejection

        token = user.token(TokenKind.ACCOUNT_DELETION)
        if not await self._email.send_deletion_confirmation(user.email, token.value):
            logger.error(
                "Failed to send account deletion confirmation email to %s",
                user.email,
            )
            return OperationResult.delivery_failed()

        logger.info("Account deletion confirmation email sent to %s", user.email)
        return OperationResult.success()

    async def confirm_account_deletion(self, token: Optional[str]) -> OperationResult[None]:
        user, failure = await self._resolve_live_token(TokenKind.ACCOUNT_DELETION, token)
        if failure is not None:
            return failure

        if not user.is_marked_for_deletion:
            logger.warning("Deletion token presented for unmarked account: %s", user.email)
            return OperationResult.invalid_token(FailureReason.NOT_MARKED_FOR_DELETION)

        if not await self._user_repo.remove_if_token_matches(
            user,
            TokenKind.ACCOUNT_DELETION,
            token,
        ):
            logger.warning("Deletion token consumed concurrently for %s", user.email)
            return OperationResult.invalid_token(FailureReason.TOKEN_ALREADY_CONSUMED)

        await self._notify_deleted(user.email)
        logger.info("User account permanently deleted: %s", user.email)
        return OperationResult.success()

    async def admin_delete_account(self, email: str) -> OperationResult[None]:
        """Delete an account without the token workflow.

        Authorization is the caller's job; only the operator CLI calls this.
        """
        user = await self._find_by_email(email)
        if user is None:
            return OperationResult.not_found()

        await self._user_repo.remove(user)
        await self._notify_deleted(user.email)
        logger.info("User account deleted by admin: %s", user.email)
        return OperationResult.success()

    async def check_email_status(self, email: str) -> OperationResult[EmailStatusReport]:
        """Report the registration status of an email (operator use only)."""
        user = await self._find_by_email(email)
        if user is None:
            return OperationResult.success(
                EmailStatusReport(
                    email=_normalized_or_raw(email),
                    status=EmailStatus.NOT_REGISTERED,
                ),
            )

        if user.is_email_verified:
            status = EmailStatus.VERIFIED
        else:
            token = user.token(TokenKind.EMAIL_VERIFICATION)
            if token is None or token.is_expired(self._token_service.now()):
                status = EmailStatus.PENDING_EXPIRED
            else:
                status = EmailStatus.PENDING_VERIFICATION

        return OperationResult.success(
            EmailStatusReport(
                email=user.email,
                status=status,
                registered_at=user.created_at,
            ),
        )

    async def account_statistics(self) -> OperationResult[AccountStatistics]:
        """Aggregate account counts for operators. No per-user data is included."""
        stats = await self._user_repo.collect_statistics(self._token_service.now())
        return OperationResult.success(stats)

    async def _find_by_email(self, email: str) -> Optional[User]:
        try:
            email_obj = Email(email)
        except InvalidEmailError:
            return None
        return await self._user_repo.find_by_email(email_obj)

    async def _mutate(
        self,
        email: str,
        apply: Callable[[Optional[User]], Optional[OperationResult[None]]],
        message: Optional[str] = None,
    ) -> tuple[Optional[User], Optional[OperationResult[None]]]:
        """Read the user by email, apply a change and save it.

        ``apply`` returns a rejection or ``None`` to go ahead. When the record
        changed between read and write the whole step runs again against the
        fresh record, so a stale copy never overwrites a newer one.
        """
        for _ in range(_MAX_WRITE_ATTEMPTS):
            user = await self._find_by_email(email)
            rejection = apply(user)
            if rejection is not None:
                return None, rejection
            if await self._user_repo.save(user):
                return user, None
            logger.info("Record for %s changed concurrently, retrying", user.email)

        logger.warning("Giving up on write for %s after %d attempts", email, _MAX_WRITE_ATTEMPTS)
        return None, OperationResult.failure(
            ResultStatus.CONFLICT,
            FailureReason.CONCURRENT_UPDATE,
            message=message,
        )

    async def _consume_token(
        self,
        kind: TokenKind,
        token: Optional[str],
        apply: Callable[[User], Optional[OperationResult[None]]],
    ) -> OperationResult[None]:
        """Apply a change to the holder of a live token and consume the token."""
        for attempt in range(_MAX_WRITE_ATTEMPTS):
            user, failure = await self._resolve_live_token(kind, token)
            if failure is not None:
                if attempt > 0 and failure.reason == FailureReason.TOKEN_NOT_FOUND:
                    logger.warning("%s token consumed concurrently", kind.value)
                    return OperationResult.invalid_token(FailureReason.TOKEN_ALREADY_CONSUMED)
                return failure

            rejection = apply(user)
            if rejection is not None:
                return rejection
            if await self._user_repo.save_if_token_matches(user, kind, token):
                logger.info("%s token consumed for user: %s", kind.value, user.email)
                return OperationResult.success()
            logger.info("Record for %s changed concurrently, retrying", user.email)

        logger.warning("Giving up on %s token after %d attempts", kind.value, _MAX_WRITE_ATTEMPTS)
        return OperationResult.failure(ResultStatus.CONFLICT, FailureReason.CONCURRENT_UPDATE)

    def _token_finder(self, kind: TokenKind) -> Callable[[str], Awaitable[Optional[User]]]:
        return {
            TokenKind.EMAIL_VERIFICATION: self._user_repo.find_by_verification_token,
            TokenKind.PASSWORD_RESET: self._user_repo.find_by_reset_token,
            TokenKind.ACCOUNT_DELETION: self._user_repo.find_by_deletion_token,
        }[kind]

    async def _resolve_live_token(
        self,
        kind: TokenKind,
        token: Optional[str],
    ) -> tuple[Optional[User], Optional[OperationResult[None]]]:
        """Find the user holding a live token of ``kind``.

        Whether a token was unknown or merely expired is logged for
        diagnostics; callers only ever see "invalid or expired".
        """
        if not token:
            logger.warning("Empty %s token presented", kind.value)
            return None, OperationResult.invalid_token(FailureReason.TOKEN_MISSING)

        user = await self._token_finder(kind)(token)
        if user is None:
            logger.warning("No user found with %s token", kind.value)
            return None, OperationResult.invalid_token(FailureReason.TOKEN_NOT_FOUND)

        stored = user.token(kind)
        now = self._token_service.now()
        if not self._token_service.is_live(stored, token, now):
            if stored is not None and stored.is_expired(now):
                logger.warning(
                    "%s token expired for user %s (expired at %s, now %s)",
                    kind.value,
                    user.email,
                    stored.expires_at.isoformat(),
                    now.isoformat(),
                )
                return None, OperationResult.invalid_token(FailureReason.TOKEN_EXPIRED)
            return None, OperationResult.invalid_token(FailureReason.TOKEN_NOT_FOUND)

        return user, None

    async def _notify_deleted(self, email: str) -> None:
        # Deletion has already happened; a failed notice is only logged
        if await self._email.send_deletion_completed_notice(email):
            logger.info("Account deletion notification sent to %s", email)
        else:
            logger.error("Failed to send account deletion notification to %s", email)
