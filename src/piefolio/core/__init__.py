"""Core utilities and shared functionality."""

from piefolio.core.timezone import (
    now_utc,
    to_utc,
    parse_datetime_utc,
    UTC,
)
from piefolio.core.exceptions import (
    AppError,
    ValidationError,
    NotFoundError,
    UpstreamError,
    UpstreamFormatError,
    CacheError,
    CacheReadError,
    CacheWriteError,
)
from piefolio.core.concurrency import KeyedLocks, SingleFlight

__all__ = [
    "now_utc",
    "to_utc",
    "parse_datetime_utc",
    "UTC",
    "AppError",
    "ValidationError",
    "NotFoundError",
    "UpstreamError",
    "UpstreamFormatError",
    "CacheError",
    "CacheReadError",
    "CacheWriteError",
    "KeyedLocks",
    "SingleFlight",
]
