"""Domain models package."""

from piefolio.domain.models.enums import InstrumentType
from piefolio.domain.models.snapshot import (
    InstrumentPosition,
    Pie,
    OverallSummary,
    DepositInfo,
    PortfolioSnapshot,
    snapshot_to_dict,
    snapshot_from_dict,
    snapshot_to_json,
    snapshot_from_json,
)
from piefolio.domain.models.user_settings import UserSettings
from piefolio.domain.models.rate_limit import RateLimitEntry, RateLimitResult

__all__ = [
    "InstrumentType",
    "InstrumentPosition",
    "Pie",
    "OverallSummary",
    "DepositInfo",
    "PortfolioSnapshot",
    "snapshot_to_dict",
    "snapshot_from_dict",
    "snapshot_to_json",
    "snapshot_from_json",
    "UserSettings",
    "RateLimitEntry",
    "RateLimitResult",
]
