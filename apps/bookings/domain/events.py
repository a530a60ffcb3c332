"""
Booking Domain Events

Published by the unit of work after the transaction that produced them
committed. The audit trail subscribes to all of them.
"""

from dataclasses import dataclass
from typing import Any

from shared.domain.base import DomainEvent
from shared.domain.value_objects import DateRange


@dataclass
class BookingCreated(DomainEvent):
    """A pending booking was persisted by the reservation engine."""
    booking_id: Any = None
    property_id: Any = None
    guest_id: Any = None
    dates: DateRange = None
    total_price: int = 0


@dataclass
class BookingConfirmed(DomainEvent):
    """PENDING -> CONFIRMED, payment received."""
    booking_id: Any = None
    property_id: Any = None
    actor_id: Any = None


@dataclass
class BookingCancelled(DomainEvent):
    """The booking was cancelled and its dates are free again."""
    booking_id: Any = None
    property_id: Any = None
    actor_id: Any = None
    reason: str = ''
    old_status: str = ''


@dataclass
class BookingCompleted(DomainEvent):
    """CONFIRMED -> COMPLETED, guest checked out."""
    booking_id: Any = None
    property_id: Any = None
    actor_id: Any = None
