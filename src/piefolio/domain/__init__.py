"""Domain layer - business models and views, no I/O."""

from piefolio.domain.models import (
    InstrumentType,
    InstrumentPosition,
    Pie,
    OverallSummary,
    DepositInfo,
    PortfolioSnapshot,
    UserSettings,
    RateLimitEntry,
    RateLimitResult,
)

__all__ = [
    "InstrumentType",
    "InstrumentPosition",
    "Pie",
    "OverallSummary",
    "DepositInfo",
    "PortfolioSnapshot",
    "UserSettings",
    "RateLimitEntry",
    "RateLimitResult",
]
