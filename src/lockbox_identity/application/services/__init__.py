"""Application services for identity management."""

from lockbox_identity.application.services.account_lifecycle_service import (
    AccountLifecycleService,
)

__all__ = ["AccountLifecycleService"]
