"""Tests for the reservation lock manager over the in-memory store."""

from __future__ import annotations

import threading
from datetime import date, datetime, timedelta, timezone

import pytest

from shared.domain.value_objects import DateRange

from apps.bookings.domain.errors import LockConflictError, PersistenceError
from apps.bookings.domain.locks import InMemoryLockStore, ReservationLockManager

D = date(2026, 9, 1)
TTL = timedelta(minutes=10)


class FakeClock:
    def __init__(self):
        self.now = datetime(2026, 8, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


def days(start: int, end: int) -> DateRange:
    return DateRange(D + timedelta(days=start), D + timedelta(days=end))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def manager(clock) -> ReservationLockManager:
    return ReservationLockManager(InMemoryLockStore(), ttl=TTL, clock=clock)


def test_acquire_returns_handle_with_expiry(manager, clock) -> None:
    handle = manager.acquire(1, days(0, 3))
    assert handle.expires_at == clock.now + TTL
    assert handle.token


def test_overlapping_acquire_fails_fast(manager) -> None:
    first = manager.acquire(1, days(0, 3))

    with pytest.raises(LockConflictError) as excinfo:
        manager.acquire(1, days(2, 5))

    assert excinfo.value.expires_at == first.expires_at
    assert excinfo.value.to_dict()["code"] == "lock_conflict"


def test_adjacent_ranges_and_other_properties_do_not_conflict(manager) -> None:
    manager.acquire(1, days(0, 3))
    manager.acquire(1, days(3, 5))
    manager.acquire(2, days(0, 3))


def test_lock_is_free_again_one_second_after_expiry(manager, clock) -> None:
    manager.acquire(1, days(0, 3))

    clock.advance(TTL)
    with pytest.raises(LockConflictError):
        manager.acquire(1, days(0, 3))

    clock.advance(timedelta(seconds=1))
    manager.acquire(1, days(0, 3))


def test_release_requires_matching_token(manager) -> None:
    handle = manager.acquire(1, days(0, 3))

    assert manager.release(1, days(0, 3), "not-the-token") is False
    with pytest.raises(LockConflictError):
        manager.acquire(1, days(0, 3))

    assert manager.release(1, days(0, 3), handle.token) is True
    manager.acquire(1, days(0, 3))


def test_release_of_expired_lock_is_a_no_op(manager, clock) -> None:
    handle = manager.acquire(1, days(0, 3))
    clock.advance(TTL + timedelta(seconds=1))
    newer = manager.acquire(1, days(0, 3))

    assert manager.release_handle(handle) is False
    assert manager.active_locks(1) == [newer]


def test_sweep_removes_only_expired_locks(manager, clock) -> None:
    manager.acquire(1, days(0, 1))
    clock.advance(TTL + timedelta(seconds=1))
    live = manager.acquire(2, days(0, 1))

    assert manager.sweep() == 1
    assert manager.active_locks(2) == [live]


def test_holding_releases_on_error(manager) -> None:
    with pytest.raises(RuntimeError):
        with manager.holding(1, days(0, 3)):
            raise RuntimeError("boom")

    assert manager.active_locks(1) == []


def test_holding_releases_on_success(manager) -> None:
    with manager.holding(1, days(0, 3)) as handle:
        assert manager.active_locks(1) == [handle]
    assert manager.active_locks(1) == []


def test_ttl_must_be_positive() -> None:
    with pytest.raises(ValueError):
        ReservationLockManager(InMemoryLockStore(), ttl=timedelta(0))


def test_concurrent_acquirers_get_exactly_one_lock() -> None:
    manager = ReservationLockManager(InMemoryLockStore(), ttl=TTL)
    barrier = threading.Barrier(8)
    winners, losers = [], []

    def attempt() -> None:
        barrier.wait()
        try:
            winners.append(manager.acquire(1, days(0, 3)))
        except LockConflictError:
            losers.append(True)

    threads = [threading.Thread(target=attempt) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(winners) == 1
    assert len(losers) == 7


class UnreachableOnDeleteStore(InMemoryLockStore):
    def delete(self, property_id, dates, token) -> bool:
        raise PersistenceError("Lock store unavailable")


def test_release_failure_after_success_is_not_raised(clock) -> None:
    store = UnreachableOnDeleteStore()
    manager = ReservationLockManager(store, ttl=TTL, clock=clock)

    with manager.holding(1, days(0, 3)) as handle:
        pass

    # Left for the TTL to reclaim.
    assert manager.active_locks(1) == [handle]
    clock.advance(TTL + timedelta(seconds=1))
    assert manager.active_locks(1) == []


def test_release_failure_keeps_the_original_error(clock) -> None:
    manager = ReservationLockManager(UnreachableOnDeleteStore(), ttl=TTL, clock=clock)

    with pytest.raises(RuntimeError, match="boom"):
        with manager.holding(1, days(0, 3)):
            raise RuntimeError("boom")
