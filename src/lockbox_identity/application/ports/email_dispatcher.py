"""Port for the outbound account emails."""

from abc import ABC, abstractmethod


class EmailDispatcher(ABC):
    """Sends the account lifecycle emails.

    Implementations report delivery failures by returning False; they never
    raise for a message that could not be sent.
    """

    @abstractmethod
    async def send_verification(self, email: str, token: str) -> bool:
        """Send the email verification link."""

    @abstractmethod
    async def send_password_reset(self, email: str, token: str) -> bool:
        """Send the password reset link."""

    @abstractmethod
    async def send_deletion_confirmation(self, email: str, token: str) -> bool:
        """Send the account deletion confirmation link."""

    @abstractmethod
    async def send_deletion_completed_notice(self, email: str) -> bool:
        """Notify the user that their account has been deleted."""
