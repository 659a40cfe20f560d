"""SQLAlchemy implementation of AllocationTargetRepository."""

from decimal import Decimal

from sqlalchemy.orm import Session

from piefolio.repositories.sqlalchemy.orm_models import PieAllocationORM


class SqlAlchemyAllocationTargetRepository:
    """SQLAlchemy-backed pie target repository."""

    def __init__(self, db: Session):
        self._db = db

    def get_targets(self, user_id: str) -> dict[str, Decimal]:
        """Get all targets for a user keyed by pie name."""
        rows = (
            self._db.query(PieAllocationORM)
            .filter(PieAllocationORM.user_id == user_id)
            .order_by(PieAllocationORM.pie_name)
            .all()
        )
        return {row.pie_name: Decimal(str(row.target_percentage)) for row in rows}

    def set_target(self, user_id: str, pie_name: str, target_percentage: Decimal) -> None:
        """Insert or update a single pie target."""
        orm_row = (
            self._db.query(PieAllocationORM)
            .filter(
                PieAllocationORM.user_id == user_id,
                PieAllocationORM.pie_name == pie_name,
            )
            .first()
        )
        if orm_row:
            orm_row.target_percentage = target_percentage
        else:
            self._db.add(
                PieAllocationORM(
                    user_id=user_id,
                    pie_name=pie_name,
                    target_percentage=target_percentage,
                )
            )
        self._db.commit()

    def delete_target(self, user_id: str, pie_name: str) -> bool:
        """Delete a pie target. Returns False when it did not exist."""
        deleted = (
            self._db.query(PieAllocationORM)
            .filter(
                PieAllocationORM.user_id == user_id,
                PieAllocationORM.pie_name == pie_name,
            )
            .delete()
        )
        self._db.commit()
        return deleted > 0

    def replace_targets(self, user_id: str, targets: dict[str, Decimal]) -> None:
        """Replace the whole target set for a user in one transaction."""
        self._db.query(PieAllocationORM).filter(
            PieAllocationORM.user_id == user_id
        ).delete()
        for pie_name, target_percentage in targets.items():
            self._db.add(
                PieAllocationORM(
                    user_id=user_id,
                    pie_name=pie_name,
                    target_percentage=target_percentage,
                )
            )
        self._db.commit()
