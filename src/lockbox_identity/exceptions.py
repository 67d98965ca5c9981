"""Identity exceptions.

Expected business outcomes of the account lifecycle are returned as
``OperationResult`` values. The exceptions here signal infrastructure
failures and programming errors.
"""


class IdentityError(Exception):
    """Base exception for all identity errors."""

    def __init__(self, message: str = "Identity error"):
        self.message = message
        super().__init__(self.message)


class EmailDeliveryError(IdentityError):
    """Raised by the SMTP transport when a message could not be sent."""

    def __init__(self, message: str = "Email could not be delivered"):
        super().__init__(message)


class UnverifiedAccountError(IdentityError):
    """Raised when a session token is requested for an unverified account."""

    def __init__(self, message: str = "Account email is not verified"):
        super().__init__(message)
