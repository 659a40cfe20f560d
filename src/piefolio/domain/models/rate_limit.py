"""Rate limiter bookkeeping models."""

from dataclasses import dataclass


@dataclass
class RateLimitEntry:
    """
    Counter for one client identity.

    Times are seconds on the limiter's monotonic clock.
    """

    count: int
    window_start: float
    last_seen: float


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of a single RateLimiter.check call."""

    allowed: bool
    remaining: int
    limit: int
    retry_after_seconds: float = 0.0
