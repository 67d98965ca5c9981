"""Single-use token value object."""

import secrets
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class OneTimeToken:
    """A token together with its expiry.

    Token and expiry only ever exist as a pair, so a user record can never
    hold one without the other.
    """

    value: str
    expires_at: datetime

    def matches(self, presented: str) -> bool:
        """Exact, case-sensitive comparison in constant time."""
        return secrets.compare_digest(
            self.value.encode("utf-8"),
            presented.encode("utf-8"),
        )

    def is_expired(self, now: datetime) -> bool:
        """A token is expired once ``now`` reaches ``expires_at``."""
        return self.expires_at <= now

    def __repr__(self) -> str:
        return f"OneTimeToken(expires_at={self.expires_at.isoformat()})"
