"""User settings repository protocol."""

from typing import Protocol, Optional

from piefolio.domain.models import UserSettings


class UserSettingsRepository(Protocol):
    """Interface for per-user portfolio settings."""

    def get(self, user_id: str) -> Optional[UserSettings]:
        """Get settings for a user."""
        ...

    def upsert(self, settings: UserSettings) -> UserSettings:
        """Insert or update settings for a user."""
        ...
