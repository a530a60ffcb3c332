"""Celery tasks for the reservation engine."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore
from django.utils import timezone  # type: ignore

from apps.users.roles import Actor

from . import services
from .application.command_handlers import ChangeReservationStatusCommand
from .domain.errors import ReservationError
from .models import Booking

logger = logging.getLogger(__name__)


# ============================================================================
# PERIODIC TASKS (run by Celery Beat, see config/celery.py)
# ============================================================================

@shared_task(name="bookings.sweep_expired_reservation_locks")
def sweep_expired_reservation_locks() -> dict[str, int]:
    """
    Delete reservation locks whose TTL has passed.

    Expired locks are already ignored by acquire(); this keeps the lock
    table small. Runs every minute.
    """
    removed = services.get_lock_manager().sweep()
    return {"removed": removed}


@shared_task(name="bookings.complete_finished_bookings")
def complete_finished_bookings() -> dict[str, int]:
    """
    Move confirmed bookings whose check-out date has arrived to COMPLETED.

    Runs every hour.
    """
    today = timezone.localdate()
    handler = services.get_change_status_handler()
    actor = Actor.system()
    completed_count = 0

    booking_ids = list(
        Booking.objects.filter(
            status=Booking.Status.CONFIRMED,
            check_out__lte=today,
        ).values_list("id", flat=True)
    )

    for booking_id in booking_ids:
        try:
            handler.handle(
                ChangeReservationStatusCommand(booking_id=booking_id, status=Booking.Status.COMPLETED),
                actor,
            )
            completed_count += 1
        except ReservationError as e:
            logger.error(f"Error completing booking {booking_id}: {e}", exc_info=True)

    if completed_count > 0:
        logger.info(f"Completed {completed_count} bookings")

    return {"completed": completed_count}
