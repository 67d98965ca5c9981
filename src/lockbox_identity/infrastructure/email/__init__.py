from lockbox_identity.infrastructure.email.email_service import SmtpEmailDispatcher

__all__ = ["SmtpEmailDispatcher"]
