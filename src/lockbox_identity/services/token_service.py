"""Single-use token generation and liveness checks."""

import secrets
from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Optional
from urllib.parse import unquote

from lockbox_identity.domain.shared.time import utc_now
from lockbox_identity.domain.user.value_objects import OneTimeToken

TOKEN_ENTROPY_BYTES = 64


class OneTimeTokenService:
    """Issues URL-safe random tokens and decides whether a stored one is live."""

    def __init__(
        self,
        entropy_bytes: int = TOKEN_ENTROPY_BYTES,
        clock: Callable[[], datetime] = utc_now,
    ):
        if entropy_bytes < TOKEN_ENTROPY_BYTES:
            msg = f"Tokens need at least {TOKEN_ENTROPY_BYTES} bytes of randomness"
            raise ValueError(msg)
        self._entropy_bytes = entropy_bytes
        self._clock = clock

    def now(self) -> datetime:
        return self._clock()

    def issue(self, ttl: timedelta) -> OneTimeToken:
        """Create a token that expires ``ttl`` from now."""
        return OneTimeToken(
            value=secrets.token_urlsafe(self._entropy_bytes),
            expires_at=self._clock() + ttl,
        )

    @staticmethod
    def is_live(
        stored: Optional[OneTimeToken],
        presented: Optional[str],
        now: datetime,
    ) -> bool:
        """True iff a token is stored, equals ``presented`` exactly and ``expires_at > now``."""
        if stored is None or not presented:
            return False
        return stored.matches(presented) and not stored.is_expired(now)


def decode_transported_token(raw: str) -> str:
    """Undo URL transport damage before a token is presented for matching.

    Reverses percent-encoding first, then restores literal ``+`` characters
    that intermediate layers turned into spaces.
    """
    return unquote(raw).replace(" ", "+")
