"""Dependency injection for FastAPI."""

from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from piefolio.config.settings import get_settings
from piefolio.core.concurrency import KeyedLocks, SingleFlight
from piefolio.core.exceptions import ValidationError
from piefolio.providers import HttpPortfolioProvider, PortfolioProvider, StubPortfolioProvider
from piefolio.repositories.sqlalchemy.database import get_db, reset_database
from piefolio.repositories.sqlalchemy import (
    SqlAlchemySnapshotRepository,
    SqlAlchemyUserSettingsRepository,
    SqlAlchemyAllocationTargetRepository,
)
from piefolio.services import (
    AllocationAnalyzer,
    AllocationService,
    PortfolioCache,
    PortfolioFetcher,
    PortfolioService,
    RateLimiter,
    SettingsService,
)

# Process-wide state shared by every request
_snapshot_locks = KeyedLocks()
_single_flight = SingleFlight()
_provider: Optional[PortfolioProvider] = None
_api_limiter: Optional[RateLimiter] = None
_auth_limiter: Optional[RateLimiter] = None


def reset_state() -> None:
    """Drop process-wide provider, limiters and engine (for reconfiguration and tests)."""
    global _provider, _api_limiter, _auth_limiter
    if isinstance(_provider, HttpPortfolioProvider):
        _provider.close()
    _provider = None
    _api_limiter = None
    _auth_limiter = None
    reset_database()


def get_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    """Resolve the calling user from the X-User-Id header."""
    if x_user_id is None or not x_user_id.strip():
        raise ValidationError("X-User-Id header is required")
    return x_user_id.strip()


def get_api_limiter() -> RateLimiter:
    """Provide the general API rate limiter."""
    global _api_limiter
    if _api_limiter is None:
        settings = get_settings()
        _api_limiter = RateLimiter(
            limit=settings.api_rate_limit,
            window_seconds=settings.api_rate_window_seconds,
            max_clients=settings.rate_limit_max_clients,
            idle_ttl_seconds=settings.rate_limit_idle_ttl_seconds,
            name="api",
        )
    return _api_limiter


def get_auth_limiter() -> RateLimiter:
    """Provide the stricter limiter for credential and settings writes."""
    global _auth_limiter
    if _auth_limiter is None:
        settings = get_settings()
        _auth_limiter = RateLimiter(
            limit=settings.auth_rate_limit,
            window_seconds=settings.auth_rate_window_seconds,
            max_clients=settings.rate_limit_max_clients,
            idle_ttl_seconds=settings.rate_limit_idle_ttl_seconds,
            name="auth",
        )
    return _auth_limiter


def get_portfolio_provider() -> PortfolioProvider:
    """Provide the upstream provider (stub when configured for offline use)."""
    global _provider
    if _provider is None:
        settings = get_settings()
        if settings.use_stub_provider:
            _provider = StubPortfolioProvider()
        else:
            _provider = HttpPortfolioProvider(
                base_url=settings.upstream_base_url,
                api_key=settings.upstream_api_key,
                timeout_seconds=settings.upstream_timeout_seconds,
            )
    return _provider


def get_snapshot_repo(db: Session = Depends(get_db)) -> SqlAlchemySnapshotRepository:
    """Provide SnapshotRepository instance."""
    return SqlAlchemySnapshotRepository(db)


def get_settings_repo(db: Session = Depends(get_db)) -> SqlAlchemyUserSettingsRepository:
    """Provide UserSettingsRepository instance."""
    return SqlAlchemyUserSettingsRepository(db)


def get_allocation_repo(db: Session = Depends(get_db)) -> SqlAlchemyAllocationTargetRepository:
    """Provide AllocationTargetRepository instance."""
    return SqlAlchemyAllocationTargetRepository(db)


def get_portfolio_cache(
    snapshot_repo: SqlAlchemySnapshotRepository = Depends(get_snapshot_repo),
) -> PortfolioCache:
    """Provide PortfolioCache instance."""
    return PortfolioCache(repository=snapshot_repo, locks=_snapshot_locks)


def get_portfolio_fetcher(
    provider: PortfolioProvider = Depends(get_portfolio_provider),
    cache: PortfolioCache = Depends(get_portfolio_cache),
) -> PortfolioFetcher:
    """Provide PortfolioFetcher instance."""
    return PortfolioFetcher(provider=provider, cache=cache)


def get_portfolio_service(
    cache: PortfolioCache = Depends(get_portfolio_cache),
    fetcher: PortfolioFetcher = Depends(get_portfolio_fetcher),
) -> PortfolioService:
    """Provide PortfolioService instance."""
    return PortfolioService(
        cache=cache,
        fetcher=fetcher,
        single_flight=_single_flight,
        serve_stale=get_settings().serve_stale_on_upstream_error,
    )


def get_settings_service(
    settings_repo: SqlAlchemyUserSettingsRepository = Depends(get_settings_repo),
) -> SettingsService:
    """Provide SettingsService instance."""
    settings = get_settings()
    return SettingsService(
        settings_repo=settings_repo,
        default_country=settings.default_country,
        default_currency=settings.default_currency,
        default_monthly_budget=settings.default_monthly_budget,
    )


def get_allocation_service(
    allocation_repo: SqlAlchemyAllocationTargetRepository = Depends(get_allocation_repo),
    portfolio_service: PortfolioService = Depends(get_portfolio_service),
    settings_service: SettingsService = Depends(get_settings_service),
) -> AllocationService:
    """Provide AllocationService instance."""
    settings = get_settings()
    return AllocationService(
        target_repo=allocation_repo,
        portfolio_service=portfolio_service,
        settings_service=settings_service,
        analyzer=AllocationAnalyzer(rebalance_threshold=settings.rebalance_threshold_percent),
        max_staleness_seconds=settings.portfolio_max_staleness_seconds,
    )
