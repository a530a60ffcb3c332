"""Tests for the database-backed locks, repositories and periodic tasks."""

from __future__ import annotations

from datetime import timedelta

from django.test import TestCase
from django.utils import timezone

from shared.domain.value_objects import DateRange

from apps.bookings.domain.errors import LockConflictError, PropertyNotFoundError
from apps.bookings.domain.locks import ReservationLockManager
from apps.bookings.infrastructure.lock_store import DjangoLockStore
from apps.bookings.infrastructure.repositories import DjangoBookingRepository
from apps.bookings.models import Booking, ReservationLock
from apps.bookings.tasks import complete_finished_bookings, sweep_expired_reservation_locks
from apps.properties.models import Property
from apps.users.models import User
from apps.users.roles import Role


class DjangoLockStoreTests(TestCase):
    def setUp(self) -> None:
        self.owner = User.objects.create_user(email="owner-locks@example.dz", role=Role.PARTNER)
        self.property = Property.objects.create(owner=self.owner, title="Loft Constantine", nightly_price=8000)
        self.now = timezone.now()
        self.manager = ReservationLockManager(DjangoLockStore(), ttl=timedelta(minutes=10), clock=lambda: self.now)
        start = timezone.localdate() + timedelta(days=5)
        self.stay = DateRange(start, start + timedelta(days=3))

    def test_acquire_persists_lock_row(self) -> None:
        handle = self.manager.acquire(self.property.id, self.stay, holder_id=self.owner.id)

        lock = ReservationLock.objects.get(token=handle.token)
        self.assertEqual(lock.check_in, self.stay.start_date)
        self.assertEqual(lock.holder, self.owner)
        self.assertEqual(lock.expires_at, self.now + timedelta(minutes=10))

    def test_overlapping_acquire_conflicts_until_expiry(self) -> None:
        self.manager.acquire(self.property.id, self.stay)
        overlapping = DateRange(self.stay.start_date + timedelta(days=1), self.stay.end_date + timedelta(days=1))

        with self.assertRaises(LockConflictError):
            self.manager.acquire(self.property.id, overlapping)

        self.now += timedelta(minutes=10, seconds=1)
        self.manager.acquire(self.property.id, overlapping)
        self.assertEqual(ReservationLock.objects.count(), 1)

    def test_release_matches_token(self) -> None:
        handle = self.manager.acquire(self.property.id, self.stay)

        self.assertFalse(self.manager.release(self.property.id, self.stay, "other-token"))
        self.assertTrue(self.manager.release_handle(handle))
        self.assertFalse(self.manager.release_handle(handle))
        self.assertFalse(ReservationLock.objects.exists())

    def test_acquire_for_unknown_property(self) -> None:
        with self.assertRaises(PropertyNotFoundError):
            self.manager.acquire(999999, self.stay)

    def test_sweep_task_deletes_expired_locks(self) -> None:
        ReservationLock.objects.create(
            property=self.property,
            check_in=self.stay.start_date,
            check_out=self.stay.end_date,
            token="expired",
            expires_at=timezone.now() - timedelta(minutes=1),
        )
        ReservationLock.objects.create(
            property=self.property,
            check_in=self.stay.end_date,
            check_out=self.stay.end_date + timedelta(days=1),
            token="live",
            expires_at=timezone.now() + timedelta(minutes=5),
        )

        result = sweep_expired_reservation_locks()

        self.assertEqual(result, {"removed": 1})
        self.assertEqual(list(ReservationLock.objects.values_list("token", flat=True)), ["live"])


class CompleteFinishedBookingsTaskTests(TestCase):
    def setUp(self) -> None:
        self.owner = User.objects.create_user(email="owner-tasks@example.dz", role=Role.PARTNER)
        self.property = Property.objects.create(owner=self.owner, title="Loft Tlemcen", nightly_price=9000)
        self.today = timezone.localdate()

    def _booking(self, code: str, check_in, check_out, status) -> Booking:
        return Booking.objects.create(
            booking_code=code,
            property=self.property,
            guest_name="Yacine",
            guest_email="yacine@example.dz",
            guest_phone="+213555000333",
            check_in=check_in,
            check_out=check_out,
            status=status,
        )

    def test_completes_confirmed_bookings_after_check_out(self) -> None:
        finished = self._booking(
            "DONE0001", self.today - timedelta(days=3), self.today, Booking.Status.CONFIRMED
        )
        ongoing = self._booking(
            "LIVE0001", self.today - timedelta(days=1), self.today + timedelta(days=2), Booking.Status.CONFIRMED
        )
        pending = self._booking(
            "PEND0001", self.today - timedelta(days=5), self.today - timedelta(days=2), Booking.Status.PENDING
        )

        result = complete_finished_bookings()

        self.assertEqual(result, {"completed": 1})
        finished.refresh_from_db()
        ongoing.refresh_from_db()
        pending.refresh_from_db()
        self.assertEqual(finished.status, Booking.Status.COMPLETED)
        self.assertEqual(ongoing.status, Booking.Status.CONFIRMED)
        self.assertEqual(pending.status, Booking.Status.PENDING)


class DjangoBookingRepositoryTests(TestCase):
    def setUp(self) -> None:
        self.guest = User.objects.create_user(email="guest-repo@example.dz", role=Role.CLIENT)
        owner = User.objects.create_user(email="owner-repo@example.dz", role=Role.PARTNER)
        self.property = Property.objects.create(owner=owner, title="Loft Tlemcen", nightly_price=10000)
        self.repo = DjangoBookingRepository()

    def test_get_maps_row_to_reservation(self) -> None:
        check_in = timezone.localdate() + timedelta(days=3)
        booking = Booking.objects.create(
            booking_code="REPO0001",
            property=self.property,
            guest=self.guest,
            guest_name="Nadia",
            guest_email="nadia@example.dz",
            guest_phone="+213555000555",
            check_in=check_in,
            check_out=check_in + timedelta(days=4),
            nightly_rate=10000,
            base_price=40000,
            service_fee=2000,
            taxes=7980,
            total_price=49980,
        )

        reservation = self.repo.get(booking.pk)

        self.assertEqual(reservation.id, booking.pk)
        self.assertEqual(reservation.dates.nights, 4)
        self.assertEqual(reservation.pricing.nights, 4)
        self.assertEqual(reservation.pricing.total, 49980)
        self.assertEqual(reservation.guest_id, self.guest.id)

    def test_guest_exists(self) -> None:
        self.assertTrue(self.repo.guest_exists(self.guest.id))
        self.assertFalse(self.repo.guest_exists(999999))
        self.assertFalse(self.repo.guest_exists("not-an-id"))
