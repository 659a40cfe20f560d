"""Pydantic schemas for API request/response."""

from piefolio.api.schemas.portfolio import (
    InstrumentResponse,
    PieResponse,
    OverallSummaryResponse,
    DepositInfoResponse,
    PortfolioResponse,
)
from piefolio.api.schemas.allocation import (
    TargetUpdateRequest,
    TargetsReplaceRequest,
    TargetsResponse,
    AllocationLineResponse,
    RebalanceLineResponse,
    AllocationReportResponse,
)
from piefolio.api.schemas.settings import SettingsUpdateRequest, SettingsResponse

__all__ = [
    "InstrumentResponse",
    "PieResponse",
    "OverallSummaryResponse",
    "DepositInfoResponse",
    "PortfolioResponse",
    "TargetUpdateRequest",
    "TargetsReplaceRequest",
    "TargetsResponse",
    "AllocationLineResponse",
    "RebalanceLineResponse",
    "AllocationReportResponse",
    "SettingsUpdateRequest",
    "SettingsResponse",
]
