"""Wiring of the reservation engine onto the Django adapters and settings."""

from __future__ import annotations

from datetime import timedelta

from django.conf import settings  # type: ignore
from django.utils import timezone  # type: ignore

from .application.command_handlers import (
    DEFAULT_BOOKING_WINDOW_DAYS,
    ChangeReservationStatusHandler,
    CreateReservationHandler,
    GetReservationHandler,
    QuoteReservationHandler,
)
from .domain.availability import AvailabilityChecker
from .domain.locks import DEFAULT_LOCK_TTL, ReservationLockManager
from .infrastructure.lock_store import DjangoLockStore
from .infrastructure.repositories import DjangoBookingRepository, DjangoCalendarRepository


def lock_ttl() -> timedelta:
    seconds = getattr(settings, "RESERVATION_LOCK_TTL_SECONDS", None)
    if not seconds:
        return DEFAULT_LOCK_TTL
    return timedelta(seconds=int(seconds))


def booking_window_days() -> int:
    return int(getattr(settings, "BOOKING_WINDOW_DAYS", DEFAULT_BOOKING_WINDOW_DAYS))


def get_lock_manager() -> ReservationLockManager:
    return ReservationLockManager(DjangoLockStore(), ttl=lock_ttl(), clock=timezone.now)


def get_availability_checker() -> AvailabilityChecker:
    return AvailabilityChecker(DjangoCalendarRepository())


def get_create_reservation_handler() -> CreateReservationHandler:
    return CreateReservationHandler(
        calendar_repo=DjangoCalendarRepository(),
        booking_repo=DjangoBookingRepository(),
        lock_manager=get_lock_manager(),
        booking_window_days=booking_window_days(),
    )


def get_change_status_handler() -> ChangeReservationStatusHandler:
    return ChangeReservationStatusHandler(DjangoCalendarRepository(), DjangoBookingRepository())


def get_reservation_handler() -> GetReservationHandler:
    return GetReservationHandler(DjangoCalendarRepository(), DjangoBookingRepository())


def get_quote_handler() -> QuoteReservationHandler:
    return QuoteReservationHandler(DjangoCalendarRepository())
