"""Email address value object.

lockbox treats addresses case-insensitively. The stored form is trimmed and
lower-cased, and that single form is what registration, lookups and the
uniqueness constraint all see, so ``Alice@X.com`` and ``alice@x.com`` are
one account.
"""

import re
from dataclasses import dataclass

from lockbox_identity.domain.user.exceptions import InvalidEmailError

# Matched against the already lower-cased form
_LOCAL_PART = r"[a-z0-9._%+-]+"
_DOMAIN = r"[a-z0-9.-]+\.[a-z]{2,}"
EMAIL_PATTERN = re.compile(rf"{_LOCAL_PART}@{_DOMAIN}")


def normalize_email(raw: str) -> str:
    """Canonical form used for storage and comparison."""
    return raw.strip().lower()


@dataclass(frozen=True)
class Email:
    """A syntactically valid, normalized email address."""

    value: str

    def __post_init__(self) -> None:
        normalized = normalize_email(self.value or "")
        if not normalized:
            msg = "Email cannot be empty"
            raise InvalidEmailError(msg)
        if EMAIL_PATTERN.fullmatch(normalized) is None:
            msg = f"Invalid email format: {self.value!r}"
            raise InvalidEmailError(msg)
        object.__setattr__(self, "value", normalized)

    def __str__(self) -> str:
        return self.value
