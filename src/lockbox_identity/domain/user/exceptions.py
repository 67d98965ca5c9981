"""User domain exceptions.

Custom exceptions for the user domain, used for validation
and aggregate guards. Expected business outcomes of the account
lifecycle are reported as results, not raised.
"""


class InvalidEmailError(ValueError):
    """Raised when email format is invalid."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class EmailAlreadyExistsError(Exception):
    """Email already registered."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f"Email already registered: {email}")


class InvalidAccountStateError(Exception):
    """A state transition was attempted from the wrong state."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
