"""Latest-snapshot cache per user over a SnapshotRepository."""

import logging
from decimal import InvalidOperation
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from piefolio.core.concurrency import KeyedLocks
from piefolio.core.exceptions import CacheReadError, CacheWriteError, ValidationError
from piefolio.core.timezone import to_utc
from piefolio.domain.models import PortfolioSnapshot, snapshot_from_json, snapshot_to_json
from piefolio.repositories.protocols import SnapshotRepository

logger = logging.getLogger(__name__)

_STORE_ERRORS = (SQLAlchemyError, OSError)
_DECODE_ERRORS = (ValueError, KeyError, TypeError, InvalidOperation)


class PortfolioCache:
    """
    Holds exactly one snapshot per user.

    The cache never expires anything: freshness is decided by the caller
    from ``fetched_at``. Writes for the same user are serialized through a
    per-user lock; a write carrying an older ``fetched_at`` than the stored
    row is discarded so the stored timestamp never moves backwards.
    """

    def __init__(
        self,
        repository: SnapshotRepository,
        locks: Optional[KeyedLocks] = None,
    ):
        self._repo = repository
        self._locks = locks or KeyedLocks()

    def get(self, user_id: str) -> Optional[PortfolioSnapshot]:
        """
        Return the stored snapshot for a user, or None when there is none.

        Raises:
            CacheReadError: the store failed or holds an unreadable payload
        """
        try:
            stored = self._repo.get(user_id)
        except _STORE_ERRORS as exc:
            logger.error("Snapshot read failed user=%s error=%s", user_id, exc.__class__.__name__)
            raise CacheReadError(user_id, str(exc)) from exc

        if stored is None:
            return None

        try:
            return snapshot_from_json(stored.payload)
        except _DECODE_ERRORS as exc:
            logger.error("Stored snapshot is unreadable user=%s", user_id)
            raise CacheReadError(user_id, f"corrupt payload: {exc}") from exc

    def put(self, user_id: str, snapshot: PortfolioSnapshot) -> None:
        """
        Store snapshot as the latest for user_id, replacing the previous one.

        Raises:
            ValidationError: snapshot belongs to another user
            CacheWriteError: the store failed; the write did not happen
        """
        if snapshot.user_id != user_id:
            raise ValidationError(
                f"Snapshot for {snapshot.user_id} cannot be stored under {user_id}"
            )

        payload = snapshot_to_json(snapshot)
        with self._locks.lock_for(user_id):
            try:
                existing = self._repo.get(user_id)
                if existing is not None and to_utc(existing.fetched_at) > to_utc(snapshot.fetched_at):
                    logger.warning(
                        "Discarding out-of-order snapshot user=%s stored=%s incoming=%s",
                        user_id, existing.fetched_at.isoformat(), snapshot.fetched_at.isoformat(),
                    )
                    return
                self._repo.upsert(user_id, payload, snapshot.fetched_at)
            except _STORE_ERRORS as exc:
                logger.error("Snapshot write failed user=%s error=%s", user_id, exc.__class__.__name__)
                raise CacheWriteError(user_id, str(exc)) from exc

        logger.info("Cached portfolio snapshot user=%s fetched_at=%s", user_id, snapshot.fetched_at.isoformat())
