"""Service layer - business logic orchestration."""

from piefolio.services.rate_limiter import RateLimiter, resolve_client_identity, UNKNOWN_CLIENT
from piefolio.services.portfolio_cache import PortfolioCache
from piefolio.services.portfolio_fetcher import PortfolioFetcher, normalize_portfolio
from piefolio.services.portfolio_service import PortfolioService
from piefolio.services.allocation_analyzer import AllocationAnalyzer, targets_from_pie_names
from piefolio.services.settings_service import SettingsService
from piefolio.services.allocation_service import AllocationService

__all__ = [
    "RateLimiter",
    "resolve_client_identity",
    "UNKNOWN_CLIENT",
    "PortfolioCache",
    "PortfolioFetcher",
    "normalize_portfolio",
    "PortfolioService",
    "AllocationAnalyzer",
    "targets_from_pie_names",
    "SettingsService",
    "AllocationService",
]
