"""Tests for the User aggregate."""

from datetime import datetime, timedelta, timezone

import pytest

from lockbox_identity.domain.user import (
    AccountState,
    InvalidAccountStateError,
    OneTimeToken,
    PasswordHash,
    TokenKind,
    User,
)

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
CREDENTIAL = PasswordHash(hash=b"h" * 64, salt=b"s" * 128)


def _token(value: str = "token") -> OneTimeToken:
    return OneTimeToken(value=value, expires_at=NOW + timedelta(hours=1))


def _registered_user() -> User:
    return User.register("User@Example.com", CREDENTIAL, _token("verify"))


class TestUserRegister:
    """Tests for User.register."""

    def test_starts_unverified_with_verification_token(self):
        """A new account is pending verification and holds one token."""
        user = _registered_user()

        assert user.email == "user@example.com"
        assert not user.is_email_verified
        assert user.state == AccountState.PENDING_VERIFICATION
        assert user.token(TokenKind.EMAIL_VERIFICATION).value == "verify"
        assert user.token(TokenKind.PASSWORD_RESET) is None
        assert user.token(TokenKind.ACCOUNT_DELETION) is None

    def test_not_marked_for_deletion(self):
        user = _registered_user()

        assert not user.is_marked_for_deletion
        assert user.deletion_scheduled_at is None


class TestUserVerifyEmail:
    """Tests for User.verify_email."""

    def test_verifies_and_consumes_token(self):
        user = _registered_user()

        user.verify_email()

        assert user.is_email_verified
        assert user.state == AccountState.ACTIVE
        assert user.token(TokenKind.EMAIL_VERIFICATION) is None

    def test_second_verification_rejected(self):
        """Verification never happens twice."""
        user = _registered_user()
        user.verify_email()

        with pytest.raises(InvalidAccountStateError):
            user.verify_email()


class TestUserTokens:
    """Tests for token issuance and password changes."""

    def test_new_token_replaces_previous_of_same_kind(self):
        user = _registered_user()

        user.issue_token(_token("second"), TokenKind.EMAIL_VERIFICATION)

        assert user.token(TokenKind.EMAIL_VERIFICATION).value == "second"

    def test_change_password_consumes_reset_token(self):
        user = _registered_user()
        user.issue_token(_token("reset"), TokenKind.PASSWORD_RESET)
        assert user.has_pending_password_reset

        new_credential = PasswordHash(hash=b"n" * 64, salt=b"t" * 128)
        user.change_password(new_credential)

        assert user.password == new_credential
        assert not user.has_pending_password_reset

    def test_request_deletion_marks_account(self):
        user = _registered_user()
        user.verify_email()

        user.request_deletion(_token("delete"), now=NOW)

        assert user.is_marked_for_deletion
        assert user.deletion_scheduled_at == NOW
        assert user.state == AccountState.DELETION_PENDING
        assert user.token(TokenKind.ACCOUNT_DELETION).value == "delete"


class TestUserIdentity:
    """Tests for equality and repr."""

    def test_equality_by_id(self):
        user = _registered_user()
        copy = User.reconstitute(
            id=user.id,
            email=user.email,
            password=user.password,
            is_email_verified=True,
            tokens={},
            is_marked_for_deletion=False,
            deletion_scheduled_at=None,
            created_at=user.created_at,
            updated_at=user.updated_at,
            version=7,
        )

        assert copy == user
        assert hash(copy) == hash(user)

    def test_repr_hides_credential(self):
        user = _registered_user()

        assert "hhhh" not in repr(user)
        assert "verify" not in repr(user)


class TestUserRevision:
    """Tests for the stored-record revision."""

    def test_new_user_starts_at_first_revision(self):
        assert _registered_user().version == 1

    def test_mark_saved_records_revision(self):
        user = _registered_user()

        user.mark_saved(2)

        assert user.version == 2
