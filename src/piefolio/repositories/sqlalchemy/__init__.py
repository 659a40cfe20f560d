"""SQLAlchemy repository implementations."""

from piefolio.repositories.sqlalchemy.database import (
    get_engine,
    get_session_factory,
    get_db,
    init_db,
    reset_database,
    Base,
)
from piefolio.repositories.sqlalchemy.snapshot_repo import SqlAlchemySnapshotRepository
from piefolio.repositories.sqlalchemy.settings_repo import SqlAlchemyUserSettingsRepository
from piefolio.repositories.sqlalchemy.allocation_repo import SqlAlchemyAllocationTargetRepository

__all__ = [
    "get_engine",
    "get_session_factory",
    "get_db",
    "init_db",
    "reset_database",
    "Base",
    "SqlAlchemySnapshotRepository",
    "SqlAlchemyUserSettingsRepository",
    "SqlAlchemyAllocationTargetRepository",
]
