"""Repository layer - data access abstractions and implementations."""

from piefolio.repositories.protocols import (
    SnapshotRepository,
    StoredSnapshot,
    UserSettingsRepository,
    AllocationTargetRepository,
)

__all__ = [
    "SnapshotRepository",
    "StoredSnapshot",
    "UserSettingsRepository",
    "AllocationTargetRepository",
]
