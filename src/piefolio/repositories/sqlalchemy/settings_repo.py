"""SQLAlchemy implementation of UserSettingsRepository."""

from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from piefolio.core.timezone import now_utc, to_utc
from piefolio.domain.models import UserSettings
from piefolio.repositories.sqlalchemy.orm_models import UserSettingsORM


class SqlAlchemyUserSettingsRepository:
    """SQLAlchemy-backed user settings repository."""

    def __init__(self, db: Session):
        self._db = db

    def get(self, user_id: str) -> Optional[UserSettings]:
        """Get settings for a user."""
        orm_settings = (
            self._db.query(UserSettingsORM)
            .filter(UserSettingsORM.user_id == user_id)
            .first()
        )
        return self._to_domain(orm_settings) if orm_settings else None

    def upsert(self, settings: UserSettings) -> UserSettings:
        """Insert or update settings for a user."""
        orm_settings = (
            self._db.query(UserSettingsORM)
            .filter(UserSettingsORM.user_id == settings.user_id)
            .first()
        )
        updated_at = now_utc().replace(tzinfo=None)

        if orm_settings:
            orm_settings.country = settings.country
            orm_settings.currency = settings.currency
            orm_settings.monthly_budget = settings.monthly_budget
            orm_settings.updated_at = updated_at
        else:
            orm_settings = UserSettingsORM(
                user_id=settings.user_id,
                country=settings.country,
                currency=settings.currency,
                monthly_budget=settings.monthly_budget,
                updated_at=updated_at,
            )
            self._db.add(orm_settings)

        self._db.commit()
        self._db.refresh(orm_settings)
        return self._to_domain(orm_settings)

    @staticmethod
    def _to_domain(orm: UserSettingsORM) -> UserSettings:
        """Convert ORM settings to domain model."""
        return UserSettings(
            user_id=orm.user_id,
            country=orm.country,
            currency=orm.currency,
            monthly_budget=Decimal(str(orm.monthly_budget)) if orm.monthly_budget is not None else Decimal("0"),
            updated_at=to_utc(orm.updated_at) if orm.updated_at else None,
        )
