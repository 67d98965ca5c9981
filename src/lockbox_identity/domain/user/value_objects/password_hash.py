from dataclasses import dataclass


@dataclass(frozen=True)
class PasswordHash:
    """Keyed password hash and the random salt (key) it was computed under."""

    hash: bytes
    salt: bytes

    def __repr__(self) -> str:
        return "PasswordHash(<redacted>)"
