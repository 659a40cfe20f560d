"""Portfolio endpoints."""

from decimal import Decimal, InvalidOperation
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response

from piefolio.api.deps import (
    get_allocation_service,
    get_portfolio_service,
    get_settings_service,
    get_user_id,
)
from piefolio.api.rate_limit import api_rate_limit
from piefolio.api.schemas import AllocationReportResponse, PortfolioResponse
from piefolio.config.settings import get_settings
from piefolio.core.exceptions import ValidationError
from piefolio.core.timezone import now_utc
from piefolio.services import AllocationService, PortfolioService, SettingsService

router = APIRouter(prefix="/portfolio", tags=["portfolio"], dependencies=[Depends(api_rate_limit)])


def parse_targets(raw: Optional[str]) -> Optional[dict[str, Decimal]]:
    """Parse a "name:pct,name:pct" query value into a target map."""
    if raw is None or not raw.strip():
        return None
    targets: dict[str, Decimal] = {}
    for item in raw.split(","):
        name, sep, value = item.rpartition(":")
        if not sep or not name.strip():
            raise ValidationError(f"Malformed target {item!r}, expected name:percentage")
        try:
            targets[name.strip()] = Decimal(value.strip())
        except InvalidOperation as exc:
            raise ValidationError(f"Target for {name.strip()!r} is not a number: {value!r}") from exc
    return targets


def _cache_control(max_staleness: int, force_refresh: bool) -> str:
    if force_refresh or max_staleness == 0:
        return "no-cache, no-store, must-revalidate"
    return f"private, max-age={max_staleness}"


@router.get("", response_model=PortfolioResponse)
def get_portfolio(
    response: Response,
    max_staleness_seconds: Optional[int] = Query(None, ge=0, description="Oldest acceptable cached age"),
    force_refresh: bool = Query(False, description="Bypass the cached snapshot"),
    user_id: str = Depends(get_user_id),
    portfolio: PortfolioService = Depends(get_portfolio_service),
    user_settings: SettingsService = Depends(get_settings_service),
) -> PortfolioResponse:
    """Get the user's portfolio, refreshing from upstream when it is too old."""
    if max_staleness_seconds is None:
        max_staleness_seconds = get_settings().portfolio_max_staleness_seconds

    snapshot = portfolio.get_portfolio(
        user_id,
        user_settings.get_settings(user_id),
        max_staleness_seconds=max_staleness_seconds,
        force_refresh=force_refresh,
    )
    response.headers["Cache-Control"] = _cache_control(max_staleness_seconds, force_refresh)
    return PortfolioResponse.from_snapshot(snapshot, age_seconds=max(0.0, snapshot.age_seconds(now_utc())))


@router.get("/allocation", response_model=AllocationReportResponse)
def get_allocation_report(
    planned_deposit: Optional[Decimal] = Query(None, ge=0, description="Deposit to split across pies"),
    targets: Optional[str] = Query(None, description="Comma-separated name:percentage overrides"),
    max_staleness_seconds: Optional[int] = Query(None, ge=0),
    force_refresh: bool = Query(False),
    user_id: str = Depends(get_user_id),
    allocations: AllocationService = Depends(get_allocation_service),
) -> AllocationReportResponse:
    """Current vs target allocation, deposit plan and dividend estimate."""
    report = allocations.get_allocation_report(
        user_id,
        targets=parse_targets(targets),
        planned_deposit=planned_deposit,
        max_staleness_seconds=max_staleness_seconds,
        force_refresh=force_refresh,
    )
    return AllocationReportResponse.from_report(report)
