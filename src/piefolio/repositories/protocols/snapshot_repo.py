"""Snapshot repository protocol."""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, Optional


@dataclass
class StoredSnapshot:
    """Raw stored row: serialized snapshot plus its freshness timestamp."""

    user_id: str
    payload: str
    fetched_at: datetime


class SnapshotRepository(Protocol):
    """Interface for the per-user latest-snapshot store (one row per user)."""

    def get(self, user_id: str) -> Optional[StoredSnapshot]:
        """Get the stored snapshot for a user, or None when there is none."""
        ...

    def upsert(self, user_id: str, payload: str, fetched_at: datetime) -> None:
        """Insert or replace the stored snapshot for a user."""
        ...
