"""Per-client fixed-window rate limiter with a bounded store."""

import logging
import threading
import time
from collections import OrderedDict
from typing import Callable, Mapping, Optional

from piefolio.domain.models import RateLimitEntry, RateLimitResult

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"

# Header lookup order for client identity
CLIENT_IDENTITY_HEADERS = ("x-forwarded-for", "cf-connecting-ip", "client-ip")


def resolve_client_identity(headers: Mapping[str, str]) -> str:
    """
    Resolve the rate-limit identity of a request.

    Order: first X-Forwarded-For hop, then CF-Connecting-IP, then Client-IP.
    Requests carrying none of them all land in the shared "unknown" bucket.
    """
    lowered = {k.lower(): v for k, v in headers.items()}
    for header in CLIENT_IDENTITY_HEADERS:
        value = lowered.get(header)
        if not value:
            continue
        if header == "x-forwarded-for":
            value = value.split(",")[0]
        value = value.strip()
        if value:
            return value
    return UNKNOWN_CLIENT


class RateLimiter:
    """
    Fixed-window request counter per client identity.

    A window opens on a client's first request and resets once
    ``window_seconds`` have passed since it opened. Denied requests do not
    consume budget. The store holds at most ``max_clients`` entries: entries
    idle for ``idle_ttl_seconds`` are swept first, then the least recently
    seen are dropped.

    check() takes one lock around read, compare and write, so concurrent
    callers for the same client can never be admitted past the limit. It
    performs no I/O.
    """

    def __init__(
        self,
        limit: int,
        window_seconds: float,
        max_clients: int = 500,
        idle_ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
        name: str = "api",
    ):
        if limit < 1:
            raise ValueError("limit must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        if max_clients < 1:
            raise ValueError("max_clients must be at least 1")

        self.limit = limit
        self.window_seconds = window_seconds
        self.max_clients = max_clients
        self.idle_ttl_seconds = idle_ttl_seconds if idle_ttl_seconds is not None else window_seconds
        self.name = name
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: "OrderedDict[str, RateLimitEntry]" = OrderedDict()

    def check(self, client_id: str) -> RateLimitResult:
        """Count one request for client_id and report whether it is admitted."""
        with self._lock:
            now = self._clock()
            self._sweep_idle(now)

            entry = self._entries.get(client_id)
            if entry is None or now - entry.window_start >= self.window_seconds:
                entry = RateLimitEntry(count=0, window_start=now, last_seen=now)
                self._store(client_id, entry)
            else:
                entry.last_seen = now
                self._entries.move_to_end(client_id)

            if entry.count >= self.limit:
                retry_after = max(0.0, entry.window_start + self.window_seconds - now)
                logger.info(
                    "Rate limit exceeded limiter=%s client=%s retry_after=%.1fs",
                    self.name, client_id, retry_after,
                )
                return RateLimitResult(
                    allowed=False,
                    remaining=0,
                    limit=self.limit,
                    retry_after_seconds=retry_after,
                )

            entry.count += 1
            return RateLimitResult(
                allowed=True,
                remaining=self.limit - entry.count,
                limit=self.limit,
            )

    def reset(self, client_id: Optional[str] = None) -> None:
        """Forget one client, or every client when client_id is None."""
        with self._lock:
            if client_id is None:
                self._entries.clear()
            else:
                self._entries.pop(client_id, None)

    def tracked_clients(self) -> int:
        with self._lock:
            return len(self._entries)

    def _store(self, client_id: str, entry: RateLimitEntry) -> None:
        self._entries[client_id] = entry
        self._entries.move_to_end(client_id)
        while len(self._entries) > self.max_clients:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Evicted least recently seen client limiter=%s client=%s", self.name, evicted)

    def _sweep_idle(self, now: float) -> None:
        # Entries are kept in last-seen order, so idle ones sit at the front
        while self._entries:
            entry = next(iter(self._entries.values()))
            if now - entry.last_seen < self.idle_ttl_seconds:
                break
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Swept idle client limiter=%s client=%s", self.name, evicted)
