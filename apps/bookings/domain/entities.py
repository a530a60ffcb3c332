"""
Booking Domain Entities

- BookingStatus / PaymentStatus: lifecycle states
- PricingPolicy, PropertySnapshot: what the engine needs to know about a loft
- OccupiedPeriod, StayRule, PropertyCalendar: bookings and owner blocks
  loaded for one property
- Reservation: aggregate root for a booking created by the engine
"""

from __future__ import annotations

import secrets
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from shared.domain.base import Aggregate
from shared.domain.value_objects import DateRange

from apps.bookings.domain.errors import ValidationError


class BookingStatus(str, Enum):
    """
    Booking status state machine

    - PENDING -> CONFIRMED (payment received)
    - PENDING -> CANCELLED
    - CONFIRMED -> CANCELLED
    - CONFIRMED -> COMPLETED (guest checked out)
    """
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'
    COMPLETED = 'completed'


class PaymentStatus(str, Enum):
    PENDING = 'pending'
    PAID = 'paid'
    REFUNDED = 'refunded'
    FAILED = 'failed'


BLOCKING_STATUSES = (BookingStatus.PENDING, BookingStatus.CONFIRMED)

ALLOWED_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CANCELLED, BookingStatus.COMPLETED}),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.COMPLETED: frozenset(),
}


@dataclass(frozen=True)
class PricingPolicy:
    """Pricing attributes of a property. Amounts are minor currency units."""
    nightly_price: int
    cleaning_fee: int = 0
    service_fee_rate: Decimal = Decimal('0.05')
    tax_rate: Decimal = Decimal('0.19')
    max_guests: int = 1
    currency: str = 'DZD'
    weekly_discount_rate: Decimal = Decimal('0')
    monthly_discount_rate: Decimal = Decimal('0')


@dataclass(frozen=True)
class PropertySnapshot:
    id: Any
    owner_id: Any
    is_bookable: bool
    pricing: PricingPolicy
    minimum_stay: int = 1
    maximum_stay: Optional[int] = None


@dataclass(frozen=True)
class OccupiedPeriod:
    """A booking or an exclusion block occupying part of the calendar."""
    kind: str  # "booking" or "block"
    dates: DateRange
    reference: Any = None
    reason: str = ''

    def to_dict(self) -> dict:
        return {
            'kind': self.kind,
            'check_in': self.dates.start_date.isoformat(),
            'check_out': self.dates.end_date.isoformat(),
            'reference': str(self.reference) if self.reference is not None else None,
            'reason': self.reason,
        }


@dataclass(frozen=True)
class StayRule:
    """Non-blocking calendar entry carrying a price override and/or a minimum stay."""
    dates: DateRange
    price_override: Optional[int] = None
    minimum_stay: Optional[int] = None
    reference: Any = None


@dataclass(frozen=True)
class PropertyCalendar:
    occupied: tuple = ()
    rules: tuple = ()

    def price_overrides(self, dates: DateRange) -> dict:
        """Nightly price override for every night of ``dates`` that has one."""
        overrides = {}
        for rule in self.rules:
            if rule.price_override is None or not rule.dates.overlaps_with(dates):
                continue
            for day in rule.dates.days():
                if dates.contains(day):
                    overrides[day] = rule.price_override
        return overrides


@dataclass(frozen=True)
class GuestDetails:
    name: str
    email: str
    phone: str


def generate_booking_code() -> str:
    return secrets.token_hex(4).upper()


@dataclass(eq=False)
class Reservation(Aggregate):
    """
    Reservation Aggregate Root

    Key invariants:
    - dates is a valid half-open range of at least one night
    - status only moves along ALLOWED_TRANSITIONS
    - pricing is frozen at creation time
    """
    property_id: Any = None
    guest_id: Any = None
    guest: Optional[GuestDetails] = None
    dates: Optional[DateRange] = None
    guests_count: int = 1
    pricing: Any = None
    booking_code: str = field(default_factory=generate_booking_code)
    status: BookingStatus = BookingStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    special_requests: str = ''
    cancellation_reason: str = ''

    @classmethod
    def create(cls, *, property_id, guest_id, guest: GuestDetails, dates: DateRange,
               guests_count: int, pricing, special_requests: str = '') -> 'Reservation':
        from apps.bookings.domain.events import BookingCreated

        reservation = cls(
            property_id=property_id,
            guest_id=guest_id,
            guest=guest,
            dates=dates,
            guests_count=guests_count,
            pricing=pricing,
            special_requests=special_requests,
        )
        reservation.add_event(BookingCreated(
            aggregate_id=reservation.id,
            booking_id=reservation.id,
            property_id=property_id,
            guest_id=guest_id,
            dates=dates,
            total_price=pricing.total,
        ))
        return reservation

    @property
    def blocks_dates(self) -> bool:
        return self.status in BLOCKING_STATUSES

    def can_transition_to(self, new_status: BookingStatus) -> bool:
        return new_status in ALLOWED_TRANSITIONS[self.status]

    def transition_to(self, new_status: BookingStatus, *, actor_id=None, reason: str = ''):
        """Move to ``new_status`` and record the matching domain event."""
        from apps.bookings.domain import events

        new_status = BookingStatus(new_status)
        if not self.can_transition_to(new_status):
            raise ValidationError(
                f"Cannot move booking {self.booking_code} from {self.status.value} to {new_status.value}",
                field='status',
            )

        old_status = self.status
        self.status = new_status

        if new_status == BookingStatus.CONFIRMED:
            self.payment_status = PaymentStatus.PAID
            event = events.BookingConfirmed(aggregate_id=self.id, booking_id=self.id,
                                            property_id=self.property_id, actor_id=actor_id)
        elif new_status == BookingStatus.CANCELLED:
            if self.payment_status == PaymentStatus.PAID:
                self.payment_status = PaymentStatus.REFUNDED
            self.cancellation_reason = reason
            event = events.BookingCancelled(aggregate_id=self.id, booking_id=self.id,
                                            property_id=self.property_id, actor_id=actor_id,
                                            reason=reason, old_status=old_status.value)
        else:
            event = events.BookingCompleted(aggregate_id=self.id, booking_id=self.id,
                                            property_id=self.property_id, actor_id=actor_id)
        self.add_event(event)

    def __str__(self):
        return f"Booking {self.booking_code} ({self.status.value})"
