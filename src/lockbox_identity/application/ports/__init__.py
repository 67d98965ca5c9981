"""Ports consumed by the identity application layer."""

from lockbox_identity.application.ports.email_dispatcher import EmailDispatcher

__all__ = ["EmailDispatcher"]
