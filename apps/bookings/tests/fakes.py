"""In-memory stand-ins for the Django adapters, used by the domain tests."""

from __future__ import annotations

import copy
import threading
from decimal import Decimal

from shared.application.uow import AbstractUnitOfWork

from apps.bookings.domain.entities import (
    OccupiedPeriod,
    PricingPolicy,
    PropertyCalendar,
    PropertySnapshot,
)
from apps.bookings.domain.errors import BookingNotFoundError, PropertyNotFoundError
from apps.bookings.domain.repositories import AbstractBookingRepository, AbstractCalendarRepository


def make_property(property_id=1, **overrides) -> PropertySnapshot:
    pricing = PricingPolicy(
        nightly_price=overrides.pop("nightly_price", 10000),
        cleaning_fee=overrides.pop("cleaning_fee", 2000),
        service_fee_rate=overrides.pop("service_fee_rate", Decimal("0.05")),
        tax_rate=overrides.pop("tax_rate", Decimal("0.19")),
        max_guests=overrides.pop("max_guests", 4),
        weekly_discount_rate=overrides.pop("weekly_discount_rate", Decimal("0")),
        monthly_discount_rate=overrides.pop("monthly_discount_rate", Decimal("0")),
    )
    fields = {"owner_id": 100, "is_bookable": True, "minimum_stay": 1, "maximum_stay": None}
    fields.update(overrides)
    return PropertySnapshot(id=property_id, pricing=pricing, **fields)


class InMemoryCalendarRepository(AbstractCalendarRepository):
    """Properties, blocks and rules kept in dicts; bookings come from a booking repository."""

    def __init__(self, booking_repo=None):
        self.properties = {}
        self.blocks = {}
        self.rules = {}
        self.booking_repo = booking_repo
        self.calendar_loads = 0

    def add_property(self, prop: PropertySnapshot) -> PropertySnapshot:
        self.properties[prop.id] = prop
        return prop

    def add_block(self, property_id, dates, reason="manual_block"):
        self.blocks.setdefault(property_id, []).append(
            OccupiedPeriod(kind="block", dates=dates, reference=len(self.blocks) + 1, reason=reason)
        )

    def add_rule(self, property_id, rule):
        self.rules.setdefault(property_id, []).append(rule)

    def get_property(self, property_id) -> PropertySnapshot:
        try:
            return self.properties[property_id]
        except KeyError:
            raise PropertyNotFoundError(property_id)

    def load_calendar(self, property_id, dates) -> PropertyCalendar:
        self.calendar_loads += 1
        occupied = list(self.blocks.get(property_id, []))
        if self.booking_repo is not None:
            occupied.extend(self.booking_repo.occupied_periods(property_id))
        return PropertyCalendar(
            occupied=tuple(p for p in occupied if p.dates.overlaps_with(dates)),
            rules=tuple(r for r in self.rules.get(property_id, []) if r.dates.overlaps_with(dates)),
        )


class InMemoryBookingRepository(AbstractBookingRepository):

    def __init__(self):
        self._rows = {}
        self._mutex = threading.Lock()
        self.fail_on_add = None
        self.guests = set()

    def add(self, reservation) -> None:
        if self.fail_on_add is not None:
            raise self.fail_on_add
        with self._mutex:
            self._rows[reservation.id] = copy.deepcopy(reservation)

    def get(self, booking_id, *, for_update: bool = False):
        with self._mutex:
            try:
                reservation = copy.deepcopy(self._rows[booking_id])
            except KeyError:
                raise BookingNotFoundError(booking_id)
        reservation.clear_events()
        return reservation

    def save(self, reservation) -> None:
        with self._mutex:
            if reservation.id not in self._rows:
                raise BookingNotFoundError(reservation.id)
            self._rows[reservation.id] = copy.deepcopy(reservation)

    def guest_exists(self, guest_id) -> bool:
        return guest_id in self.guests

    def all(self):
        with self._mutex:
            return list(self._rows.values())

    def occupied_periods(self, property_id):
        return [
            OccupiedPeriod(kind="booking", dates=r.dates, reference=r.id, reason=r.status.value)
            for r in self.all()
            if r.property_id == property_id and r.blocks_dates
        ]


class FakeUnitOfWork(AbstractUnitOfWork):
    """Records the events a real unit of work would publish after commit."""

    def __init__(self, published=None):
        self.published = published if published is not None else []
        self._events = []
        self.committed = False

    def commit(self):
        self.published.extend(self._events)
        self._events = []
        self.committed = True

    def rollback(self):
        self._events = []

    def collect_events(self, *aggregates):
        for aggregate in aggregates:
            self._events.extend(aggregate.events)
            aggregate.clear_events()
