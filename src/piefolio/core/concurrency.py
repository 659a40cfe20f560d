"""Process-wide locking helpers shared by request-scoped services."""

import logging
import threading
from concurrent.futures import Future
from typing import Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class KeyedLocks:
    """Lazily created mutex per key."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}

    def lock_for(self, key: str) -> threading.Lock:
        """Return the lock dedicated to key, creating it on first use."""
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)


class SingleFlight:
    """
    Collapse concurrent calls for the same key into one execution.

    The first caller for a key runs the function; callers arriving while it
    is still running block on the same future and get its result, or its
    exception re-raised. Nothing is remembered once the call finishes.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._inflight: dict[str, Future] = {}

    def do(self, key: str, fn: Callable[[], T]) -> T:
        with self._guard:
            future = self._inflight.get(key)
            leader = future is None
            if leader:
                future = Future()
                self._inflight[key] = future

        if not leader:
            logger.debug("Joining in-flight call for key=%s", key)
            return future.result()

        try:
            result = fn()
        except BaseException as exc:
            future.set_exception(exc)
            raise
        else:
            future.set_result(result)
            return result
        finally:
            with self._guard:
                self._inflight.pop(key, None)

    def in_flight(self, key: str) -> bool:
        with self._guard:
            return key in self._inflight
