"""Caller-facing portfolio reads: cache first, upstream on staleness."""

import dataclasses
import logging
from datetime import datetime
from typing import Callable, Optional

from piefolio.core.concurrency import SingleFlight
from piefolio.core.exceptions import UpstreamError, ValidationError
from piefolio.core.timezone import now_utc
from piefolio.domain.models import PortfolioSnapshot, UserSettings
from piefolio.services.portfolio_cache import PortfolioCache
from piefolio.services.portfolio_fetcher import PortfolioFetcher

logger = logging.getLogger(__name__)


class PortfolioService:
    """
    Read-through access to a user's portfolio.

    A cached snapshot no older than the caller's max staleness is returned
    as is. Otherwise one upstream fetch runs per user at a time; concurrent
    callers for the same user share its outcome. When upstream fails and a
    cached snapshot exists, that snapshot is returned marked ``stale``.
    """

    def __init__(
        self,
        cache: PortfolioCache,
        fetcher: PortfolioFetcher,
        single_flight: Optional[SingleFlight] = None,
        clock: Callable[[], datetime] = now_utc,
        serve_stale: bool = True,
    ):
        self._cache = cache
        self._fetcher = fetcher
        self._single_flight = single_flight or SingleFlight()
        self._clock = clock
        self._serve_stale = serve_stale

    def get_portfolio(
        self,
        user_id: str,
        settings: UserSettings,
        max_staleness_seconds: float,
        force_refresh: bool = False,
    ) -> PortfolioSnapshot:
        """
        Return the user's portfolio, fetching when the cached one is too old.

        Args:
            user_id: Owner of the portfolio
            settings: Country/currency/budget passed to upstream
            max_staleness_seconds: Oldest acceptable cached age
            force_refresh: Skip the cache check

        Raises:
            ValidationError: negative max staleness
            CacheReadError: the cache could not be read
            UpstreamError: upstream failed and there is nothing to fall back on
            CacheWriteError: the fresh snapshot could not be stored
        """
        if max_staleness_seconds < 0:
            raise ValidationError("max_staleness_seconds cannot be negative")

        cached = self._cache.get(user_id)
        if cached is not None and not force_refresh:
            age = cached.age_seconds(self._clock())
            if age <= max_staleness_seconds:
                logger.debug("Serving cached portfolio user=%s age=%.1fs", user_id, age)
                return cached

        try:
            return self._single_flight.do(
                user_id, lambda: self._fetcher.fetch(user_id, settings)
            )
        except UpstreamError as exc:
            if cached is None or not self._serve_stale:
                raise
            logger.warning(
                "Upstream failed, serving stale portfolio user=%s fetched_at=%s error=%s",
                user_id, cached.fetched_at.isoformat(), exc.code,
            )
            return dataclasses.replace(cached, stale=True)
