"""SQLAlchemy ORM model definitions."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Column, String, DateTime, Text, Numeric

from piefolio.repositories.sqlalchemy.database import Base


class UserPortfolioORM(Base):
    """Latest portfolio snapshot per user (one row per user, no history)."""

    __tablename__ = "user_portfolios"

    user_id = Column(String(64), primary_key=True)
    portfolio_data = Column(Text, nullable=False)
    fetched_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=True, onupdate=datetime.utcnow)


class UserSettingsORM(Base):
    """SQLAlchemy model for UserSettings."""

    __tablename__ = "user_settings"

    user_id = Column(String(64), primary_key=True)
    country = Column(String(8), nullable=False)
    currency = Column(String(8), nullable=False)
    monthly_budget = Column(Numeric(precision=18, scale=2), default=Decimal("0"))
    updated_at = Column(DateTime, nullable=True)


class PieAllocationORM(Base):
    """Target percentage of one pie for one user."""

    __tablename__ = "pie_allocations"

    user_id = Column(String(64), primary_key=True)
    pie_name = Column(String(255), primary_key=True)
    target_percentage = Column(Numeric(precision=7, scale=4), nullable=False)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
