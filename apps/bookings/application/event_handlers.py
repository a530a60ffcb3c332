"""
Booking Event Handlers

Write the reservation audit trail. They run after the booking transaction
committed (see DjangoUnitOfWork), so the booking row always exists.
"""

import logging

from apps.bookings.domain.events import (
    BookingCancelled,
    BookingCompleted,
    BookingConfirmed,
    BookingCreated,
)
from apps.bookings.models import ReservationAuditLog
from shared.application.message_bus import MessageBus, message_bus

logger = logging.getLogger(__name__)


def _record(event, action: str, actor_id=None, **payload):
    entry = ReservationAuditLog.objects.create(
        booking_id=event.booking_id,
        action=action,
        actor_id=actor_id,
        payload={'event_id': str(event.event_id), 'occurred_at': event.occurred_at.isoformat(), **payload},
    )
    logger.info(f"Audit: booking {event.booking_id} {action}")
    return entry


def record_booking_created(event: BookingCreated):
    _record(
        event,
        ReservationAuditLog.Action.CREATED,
        actor_id=event.guest_id,
        property_id=event.property_id,
        check_in=event.dates.start_date.isoformat() if event.dates else None,
        check_out=event.dates.end_date.isoformat() if event.dates else None,
        total_price=event.total_price,
    )


def record_booking_confirmed(event: BookingConfirmed):
    _record(event, ReservationAuditLog.Action.CONFIRMED, actor_id=event.actor_id)


def record_booking_cancelled(event: BookingCancelled):
    _record(
        event,
        ReservationAuditLog.Action.CANCELLED,
        actor_id=event.actor_id,
        reason=event.reason,
        old_status=event.old_status,
    )


def record_booking_completed(event: BookingCompleted):
    _record(event, ReservationAuditLog.Action.COMPLETED, actor_id=event.actor_id)


def register_handlers(bus: MessageBus = message_bus):
    bus.register_event_handler(BookingCreated, record_booking_created)
    bus.register_event_handler(BookingConfirmed, record_booking_confirmed)
    bus.register_event_handler(BookingCancelled, record_booking_cancelled)
    bus.register_event_handler(BookingCompleted, record_booking_completed)
