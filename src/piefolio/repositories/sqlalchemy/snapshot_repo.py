"""SQLAlchemy implementation of SnapshotRepository."""

from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from piefolio.core.timezone import to_utc
from piefolio.repositories.protocols import StoredSnapshot
from piefolio.repositories.sqlalchemy.orm_models import UserPortfolioORM


class SqlAlchemySnapshotRepository:
    """SQLAlchemy-backed store of the latest snapshot per user."""

    def __init__(self, db: Session):
        self._db = db

    def get(self, user_id: str) -> Optional[StoredSnapshot]:
        """Get the stored snapshot for a user."""
        orm_row = (
            self._db.query(UserPortfolioORM)
            .filter(UserPortfolioORM.user_id == user_id)
            .first()
        )
        return self._to_stored(orm_row) if orm_row else None

    def upsert(self, user_id: str, payload: str, fetched_at: datetime) -> None:
        """Insert or replace the stored snapshot for a user."""
        # SQLite drops tzinfo, so rows hold naive UTC
        naive_fetched_at = to_utc(fetched_at).replace(tzinfo=None)
        try:
            orm_row = (
                self._db.query(UserPortfolioORM)
                .filter(UserPortfolioORM.user_id == user_id)
                .first()
            )
            if orm_row:
                orm_row.portfolio_data = payload
                orm_row.fetched_at = naive_fetched_at
            else:
                orm_row = UserPortfolioORM(
                    user_id=user_id,
                    portfolio_data=payload,
                    fetched_at=naive_fetched_at,
                )
                self._db.add(orm_row)
            self._db.commit()
        except SQLAlchemyError:
            self._db.rollback()
            raise

    @staticmethod
    def _to_stored(orm: UserPortfolioORM) -> StoredSnapshot:
        """Convert ORM row to a stored snapshot record."""
        return StoredSnapshot(
            user_id=orm.user_id,
            payload=orm.portfolio_data,
            fetched_at=to_utc(orm.fetched_at),
        )
