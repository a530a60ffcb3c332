"""
Reservation Lock Manager

Short-lived advisory locks keyed by (property, date range) that serialize
the check-then-write sequence of concurrent reservation attempts.

    Free --acquire--> Locked(token, expires_at) --release/expiry--> Free

- acquire() never waits: an active overlapping lock fails it at once with
  LockConflictError so the caller can answer "booking in progress".
- Expiry is lazy. A lock with now > expires_at is treated as absent and is
  purged by the next acquire() touching that range; sweep() is only a
  periodic clean-up.
- release() deletes the lock only when the token matches, and is a no-op
  when the lock already expired or was removed.

The store is responsible for making "insert if no active overlapping lock"
atomic; the manager never checks and inserts in two separate steps.
"""

from __future__ import annotations

import logging
import secrets
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Iterator, List, Optional

from shared.domain.base import utcnow
from shared.domain.value_objects import DateRange

from apps.bookings.domain.errors import LockConflictError, ReservationError

logger = logging.getLogger(__name__)

DEFAULT_LOCK_TTL = timedelta(minutes=10)


@dataclass(frozen=True)
class LockHandle:
    property_id: Any
    dates: DateRange
    token: str
    expires_at: datetime
    holder_id: Any = None

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    def conflicts_with(self, property_id: Any, dates: DateRange, now: datetime) -> bool:
        return (
            self.property_id == property_id
            and not self.is_expired(now)
            and self.dates.overlaps_with(dates)
        )


class AbstractLockStore(ABC):

    @abstractmethod
    def try_insert(self, handle: LockHandle, now: datetime) -> Optional[LockHandle]:
        """
        Atomically purge expired locks overlapping ``handle`` and insert it
        unless an active overlapping lock exists.

        Returns None when inserted, otherwise the lock that is in the way.
        """

    @abstractmethod
    def delete(self, property_id: Any, dates: DateRange, token: str) -> bool:
        """Delete the matching lock; False when nothing matched."""

    @abstractmethod
    def delete_expired(self, now: datetime) -> int:
        pass

    @abstractmethod
    def active_locks(self, property_id: Any, now: datetime) -> List[LockHandle]:
        pass


class InMemoryLockStore(AbstractLockStore):
    """Process-local lock table guarded by a mutex."""

    def __init__(self):
        self._mutex = threading.Lock()
        self._locks: Dict[Any, List[LockHandle]] = {}

    def try_insert(self, handle: LockHandle, now: datetime) -> Optional[LockHandle]:
        with self._mutex:
            locks = [lock for lock in self._locks.get(handle.property_id, []) if not lock.is_expired(now)]
            self._locks[handle.property_id] = locks
            for lock in locks:
                if lock.dates.overlaps_with(handle.dates):
                    return lock
            locks.append(handle)
            return None

    def delete(self, property_id: Any, dates: DateRange, token: str) -> bool:
        with self._mutex:
            locks = self._locks.get(property_id, [])
            remaining = [lock for lock in locks if not (lock.token == token and lock.dates == dates)]
            self._locks[property_id] = remaining
            return len(remaining) != len(locks)

    def delete_expired(self, now: datetime) -> int:
        removed = 0
        with self._mutex:
            for property_id, locks in self._locks.items():
                remaining = [lock for lock in locks if not lock.is_expired(now)]
                removed += len(locks) - len(remaining)
                self._locks[property_id] = remaining
        return removed

    def active_locks(self, property_id: Any, now: datetime) -> List[LockHandle]:
        with self._mutex:
            return [lock for lock in self._locks.get(property_id, []) if not lock.is_expired(now)]


class ReservationLockManager:

    def __init__(
        self,
        store: AbstractLockStore,
        ttl: timedelta = DEFAULT_LOCK_TTL,
        clock: Callable[[], datetime] = utcnow,
    ):
        if ttl <= timedelta(0):
            raise ValueError("Lock TTL must be positive")
        self.store = store
        self.ttl = ttl
        self.clock = clock

    def acquire(self, property_id: Any, dates: DateRange, holder_id: Any = None) -> LockHandle:
        now = self.clock()
        handle = LockHandle(
            property_id=property_id,
            dates=dates,
            token=secrets.token_urlsafe(24),
            expires_at=now + self.ttl,
            holder_id=holder_id,
        )
        blocking = self.store.try_insert(handle, now)
        if blocking is not None:
            logger.info(
                f"Lock conflict on property {property_id} for {dates}: "
                f"held until {blocking.expires_at.isoformat()}"
            )
            raise LockConflictError(property_id, dates.start_date, dates.end_date, blocking.expires_at)

        logger.info(f"Acquired reservation lock on property {property_id} for {dates}")
        return handle

    def release(self, property_id: Any, dates: DateRange, token: str) -> bool:
        released = self.store.delete(property_id, dates, token)
        if released:
            logger.info(f"Released reservation lock on property {property_id} for {dates}")
        else:
            logger.debug(f"Reservation lock on property {property_id} for {dates} already gone")
        return released

    def release_handle(self, handle: LockHandle) -> bool:
        return self.release(handle.property_id, handle.dates, handle.token)

    def sweep(self, now: Optional[datetime] = None) -> int:
        removed = self.store.delete_expired(now or self.clock())
        if removed:
            logger.info(f"Swept {removed} expired reservation lock(s)")
        return removed

    def active_locks(self, property_id: Any) -> List[LockHandle]:
        return self.store.active_locks(property_id, self.clock())

    @contextmanager
    def holding(self, property_id: Any, dates: DateRange, holder_id: Any = None) -> Iterator[LockHandle]:
        """Acquire, run the block, and release whatever happens inside it."""
        handle = self.acquire(property_id, dates, holder_id=holder_id)
        try:
            yield handle
        finally:
            try:
                self.release_handle(handle)
            except ReservationError as release_error:
                # The lock still expires after its TTL.
                logger.error(
                    f"Could not release reservation lock on property {property_id}: {release_error}",
                    exc_info=True,
                )
