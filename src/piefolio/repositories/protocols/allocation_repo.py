"""Allocation target repository protocol."""

from decimal import Decimal
from typing import Protocol


class AllocationTargetRepository(Protocol):
    """Interface for per-user pie target percentages."""

    def get_targets(self, user_id: str) -> dict[str, Decimal]:
        """Get all targets for a user keyed by pie name."""
        ...

    def set_target(self, user_id: str, pie_name: str, target_percentage: Decimal) -> None:
        """Insert or update a single pie target."""
        ...

    def delete_target(self, user_id: str, pie_name: str) -> bool:
        """Delete a pie target. Returns False when it did not exist."""
        ...

    def replace_targets(self, user_id: str, targets: dict[str, Decimal]) -> None:
        """Replace the whole target set for a user."""
        ...
