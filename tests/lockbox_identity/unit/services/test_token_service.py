"""Tests for OneTimeTokenService and token transport decoding."""

from datetime import datetime, timedelta, timezone
from urllib.parse import quote

import pytest

from lockbox_identity.domain.user import OneTimeToken
from lockbox_identity.services import OneTimeTokenService, decode_transported_token

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class TestOneTimeTokenServiceIssue:
    """Tests for issue."""

    def setup_method(self):
        self.service = OneTimeTokenService(clock=lambda: NOW)

    def test_expiry_is_now_plus_ttl(self):
        token = self.service.issue(timedelta(hours=1))

        assert token.expires_at == NOW + timedelta(hours=1)

    def test_token_carries_at_least_64_bytes_of_entropy(self):
        """64 random bytes encode to 86 URL-safe base64 characters."""
        token = self.service.issue(timedelta(hours=1))

        assert len(token.value) >= 86

    def test_tokens_are_unique(self):
        values = {self.service.issue(timedelta(hours=1)).value for _ in range(50)}

        assert len(values) == 50

    def test_rejects_low_entropy(self):
        with pytest.raises(ValueError):
            OneTimeTokenService(entropy_bytes=16)


class TestOneTimeTokenServiceIsLive:
    """Tests for is_live."""

    def test_live_token(self):
        stored = OneTimeToken(value="abc", expires_at=NOW + timedelta(seconds=1))

        assert OneTimeTokenService.is_live(stored, "abc", NOW)

    def test_expired_at_boundary(self):
        """A token whose expiry equals now is not live."""
        stored = OneTimeToken(value="abc", expires_at=NOW)

        assert not OneTimeTokenService.is_live(stored, "abc", NOW)

    def test_mismatch(self):
        stored = OneTimeToken(value="abc", expires_at=NOW + timedelta(hours=1))

        assert not OneTimeTokenService.is_live(stored, "abd", NOW)

    @pytest.mark.parametrize("presented", [None, ""])
    def test_missing_presented_token(self, presented):
        stored = OneTimeToken(value="abc", expires_at=NOW + timedelta(hours=1))

        assert not OneTimeTokenService.is_live(stored, presented, NOW)

    def test_nothing_stored(self):
        assert not OneTimeTokenService.is_live(None, "abc", NOW)


class TestDecodeTransportedToken:
    """Tests for decode_transported_token."""

    def test_reverses_percent_encoding(self):
        assert decode_transported_token(quote("a+b/c=", safe="")) == "a+b/c="

    def test_restores_plus_turned_into_space(self):
        assert decode_transported_token("a b c") == "a+b+c"

    def test_percent_encoded_space_also_restored(self):
        """Decoding happens before the space fix-up."""
        assert decode_transported_token("a%20b") == "a+b"

    def test_plain_token_unchanged(self):
        assert decode_transported_token("abc-DEF_123") == "abc-DEF_123"
