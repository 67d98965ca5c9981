"""Session token service.

Signs the session credential handed out after a successful login.
Validating inbound credentials is the job of the request layer.
"""

from datetime import datetime, timedelta, timezone

import jwt

from lockbox_config import ConfigurationError
from lockbox_identity.domain.user import User
from lockbox_identity.exceptions import UnverifiedAccountError


class SessionTokenService:
    """Service for issuing signed, time-limited session tokens.

    Examples
    --------
    >>> service = SessionTokenService(secret_key="your-secret-key")
    >>> token = service.issue(user)
    """

    DEFAULT_EXPIRE_HOURS = 24
    ALGORITHM = "HS512"

    def __init__(
        self,
        secret_key: str,
        expire_hours: int = DEFAULT_EXPIRE_HOURS,
    ):
        """Initialize the session token service.

        Parameters
        ----------
        secret_key
            Process-wide signing secret, loaded once at startup.
        expire_hours
            Hours until a session token expires (default 24)

        Raises
        ------
        ConfigurationError
            If no secret is configured
        """
        if not secret_key:
            msg = "JWT secret key is not configured"
            raise ConfigurationError(msg)

        self._secret_key = secret_key
        self._expire = timedelta(hours=expire_hours)

    def issue(self, user: User) -> str:
        """Create a session token carrying the user's id and email.

        Raises
        ------
        UnverifiedAccountError
            If the user has not verified their email address
        """
        if not user.is_email_verified:
            raise UnverifiedAccountError

        now = datetime.now(tz=timezone.utc)
        payload = {
            "sub": str(user.id),
            "email": user.email,
            "iat": now,
            "exp": now + self._expire,
        }

        return jwt.encode(payload, self._secret_key, algorithm=self.ALGORITHM)
