from dataclasses import dataclass


@dataclass(frozen=True)
class AccountStatistics:
    """Aggregate counts over all stored accounts, for operators.

    ``pending_verification`` counts unverified accounts whose verification
    token is still live; ``pending_expired`` counts the unverified rest.
    """

    total: int
    verified: int
    pending_verification: int
    pending_expired: int
    marked_for_deletion: int
    pending_password_resets: int

    @property
    def unverified(self) -> int:
        return self.pending_verification + self.pending_expired
