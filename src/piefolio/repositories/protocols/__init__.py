"""Repository protocol definitions (interfaces)."""

from piefolio.repositories.protocols.snapshot_repo import SnapshotRepository, StoredSnapshot
from piefolio.repositories.protocols.settings_repo import UserSettingsRepository
from piefolio.repositories.protocols.allocation_repo import AllocationTargetRepository

__all__ = [
    "SnapshotRepository",
    "StoredSnapshot",
    "UserSettingsRepository",
    "AllocationTargetRepository",
]
