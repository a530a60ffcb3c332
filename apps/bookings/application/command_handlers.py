"""
Reservation Command Handlers

These are the use cases of the reservation engine. Each handler checks the
actor's permission once, then orchestrates the domain components.

Commands:
- CreateReservationCommand: book a stay (the only path that writes bookings)
- ChangeReservationStatusCommand: confirm, cancel or complete a booking
- QuoteReservationCommand: availability and price without side effects
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Callable, Optional, Union
import logging

from django.core.exceptions import ValidationError as DjangoValidationError  # type: ignore
from django.core.validators import validate_email  # type: ignore
from django.db import DatabaseError  # type: ignore
from django.utils import timezone  # type: ignore

from shared.application.uow import AbstractUnitOfWork, DjangoUnitOfWork
from shared.domain.errors import InvalidRangeError
from shared.domain.value_objects import DateRange
from apps.bookings.domain.availability import AvailabilityChecker, AvailabilityResult
from apps.bookings.domain.entities import BookingStatus, GuestDetails, Reservation
from apps.bookings.domain.errors import PermissionDeniedError, PersistenceError, ValidationError
from apps.bookings.domain.locks import ReservationLockManager
from apps.bookings.domain.pricing import PriceBreakdown, PricingCalculator, pricing_calculator
from apps.bookings.domain.repositories import AbstractBookingRepository, AbstractCalendarRepository
from apps.users.roles import Actor, Permission

logger = logging.getLogger(__name__)

DEFAULT_BOOKING_WINDOW_DAYS = 730

DateInput = Union[date, str]


# ===== Commands =====

@dataclass
class CreateReservationCommand:
    property_id: Any
    check_in: DateInput
    check_out: DateInput
    guests_count: int
    guest_name: str
    guest_email: str
    guest_phone: str
    special_requests: str = ''
    # Walk-in bookings made by staff for someone else.
    guest_id: Any = None


@dataclass
class ChangeReservationStatusCommand:
    booking_id: Any
    status: str
    reason: str = ''


@dataclass
class QuoteReservationCommand:
    property_id: Any
    check_in: DateInput
    check_out: DateInput
    guests_count: int = 1


@dataclass(frozen=True)
class Quote:
    availability: AvailabilityResult
    pricing: PriceBreakdown

    def to_dict(self) -> dict:
        return {
            'available': self.availability.available,
            'nights': self.availability.dates.nights,
            'pricing': self.pricing.to_dict(),
            'conflicts': [c.to_dict() for c in self.availability.conflicts],
            'restrictions': [r.to_dict() for r in self.availability.restrictions],
        }


# ===== Validation helpers =====

def authorize(actor: Actor, permission: Permission) -> None:
    if not actor.can(permission):
        logger.warning(f"Actor {actor.user_id} ({actor.role}) lacks permission {permission.value}")
        raise PermissionDeniedError(
            "You do not have permission to perform this action",
            permission=permission.value,
        )


def parse_date(value: DateInput, field: str) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a date in YYYY-MM-DD format", field=field)


def parse_stay(check_in: DateInput, check_out: DateInput) -> DateRange:
    start = parse_date(check_in, 'check_in')
    end = parse_date(check_out, 'check_out')
    try:
        return DateRange(start, end)
    except InvalidRangeError:
        raise ValidationError("check_out must be after check_in", field='check_out')


def validate_booking_window(dates: DateRange, today: date, window_days: int) -> None:
    if dates.start_date < today:
        raise ValidationError("check_in cannot be in the past", field='check_in')
    limit = today + timedelta(days=window_days)
    if dates.end_date > limit:
        raise ValidationError(
            f"check_out must be on or before {limit.isoformat()}",
            field='check_out',
            booking_window_days=window_days,
        )


def parse_guest_count(value: Any) -> int:
    try:
        count = int(value)
    except (TypeError, ValueError):
        raise ValidationError("guests must be a whole number", field='guests_count')
    if count < 1:
        raise ValidationError("At least one guest is required", field='guests_count')
    return count


def validate_guest(command: CreateReservationCommand) -> GuestDetails:
    name = (command.guest_name or '').strip()
    email = (command.guest_email or '').strip()
    phone = (command.guest_phone or '').strip()
    if not name:
        raise ValidationError("Guest name is required", field='guest_name')
    if not email:
        raise ValidationError("Guest email is required", field='guest_email')
    try:
        validate_email(email)
    except DjangoValidationError:
        raise ValidationError("Guest email is not a valid address", field='guest_email')
    if not phone:
        raise ValidationError("Guest phone is required", field='guest_phone')
    return GuestDetails(name=name, email=email, phone=phone)


# ===== Command Handlers =====

class CreateReservationHandler:
    """
    Handler for CreateReservation command

    The only path that creates bookings. Double booking is prevented by
    taking a reservation lock on (property, dates) and re-running the
    availability check while holding it:

    1. Authorize and validate the request
    2. Availability pre-check (cheap early rejection)
    3. Acquire the reservation lock (fails fast on contention)
    4. Authoritative availability re-check under the lock
    5. Price the stay
    6. Persist the pending booking and commit
    7. Release the lock, whatever happened in 4-6
    """

    def __init__(
        self,
        calendar_repo: AbstractCalendarRepository,
        booking_repo: AbstractBookingRepository,
        lock_manager: ReservationLockManager,
        calculator: PricingCalculator = pricing_calculator,
        uow_factory: Callable[[], AbstractUnitOfWork] = DjangoUnitOfWork,
        today: Callable[[], date] = timezone.localdate,
        booking_window_days: int = DEFAULT_BOOKING_WINDOW_DAYS,
    ):
        self.calendar_repo = calendar_repo
        self.booking_repo = booking_repo
        self.checker = AvailabilityChecker(calendar_repo)
        self.lock_manager = lock_manager
        self.calculator = calculator
        self.uow_factory = uow_factory
        self.today = today
        self.booking_window_days = booking_window_days

    def handle(self, command: CreateReservationCommand, actor: Actor) -> Reservation:
        authorize(actor, Permission.CREATE_RESERVATION)

        dates = parse_stay(command.check_in, command.check_out)
        validate_booking_window(dates, self.today(), self.booking_window_days)
        guests_count = parse_guest_count(command.guests_count)
        guest = validate_guest(command)
        guest_id = self._resolve_guest_id(command, actor)

        logger.info(
            f"Creating reservation for property {command.property_id}, "
            f"guest {guest_id}, dates {dates}"
        )

        self.checker.check(command.property_id, dates).raise_if_unavailable()

        with self.lock_manager.holding(command.property_id, dates, holder_id=actor.user_id):
            availability = self.checker.check(command.property_id, dates)
            availability.raise_if_unavailable()

            pricing = self.calculator.compute(
                availability.property.pricing,
                dates,
                guests_count,
                availability.calendar.price_overrides(dates),
            )
            reservation = Reservation.create(
                property_id=availability.property.id,
                guest_id=guest_id,
                guest=guest,
                dates=dates,
                guests_count=guests_count,
                pricing=pricing,
                special_requests=command.special_requests or '',
            )

            try:
                with self.uow_factory() as uow:
                    self.booking_repo.add(reservation)
                    uow.collect_events(reservation)
            except DatabaseError as exc:
                logger.error(f"Commit failed for reservation {reservation.booking_code}: {exc}", exc_info=True)
                raise PersistenceError("Could not save the booking") from exc

        logger.info(
            f"Reservation created: {reservation.booking_code} (ID: {reservation.id}), "
            f"total {pricing.total} {pricing.currency}"
        )
        return reservation

    def _resolve_guest_id(self, command: CreateReservationCommand, actor: Actor):
        if command.guest_id is not None and command.guest_id != actor.user_id:
            authorize(actor, Permission.MANAGE_RESERVATIONS)
            if not self.booking_repo.guest_exists(command.guest_id):
                raise ValidationError(f"Guest {command.guest_id} does not exist", field='guest_id')
            return command.guest_id
        return actor.user_id


class ChangeReservationStatusHandler:
    """
    Handler for status changes: confirm, cancel, complete.

    Allowed for reservation managers, for the property owner, and for the
    guest cancelling their own booking.
    """

    def __init__(
        self,
        calendar_repo: AbstractCalendarRepository,
        booking_repo: AbstractBookingRepository,
        uow_factory: Callable[[], AbstractUnitOfWork] = DjangoUnitOfWork,
    ):
        self.calendar_repo = calendar_repo
        self.booking_repo = booking_repo
        self.uow_factory = uow_factory

    def handle(self, command: ChangeReservationStatusCommand, actor: Actor) -> Reservation:
        try:
            new_status = BookingStatus(command.status)
        except ValueError:
            raise ValidationError(f"Unknown status '{command.status}'", field='status')

        logger.info(f"Changing booking {command.booking_id} to {new_status.value}")

        try:
            with self.uow_factory() as uow:
                reservation = self.booking_repo.get(command.booking_id, for_update=True)
                self._authorize(actor, reservation, new_status)
                reservation.transition_to(new_status, actor_id=actor.user_id, reason=command.reason or '')
                self.booking_repo.save(reservation)
                uow.collect_events(reservation)
        except DatabaseError as exc:
            raise PersistenceError("Could not save the booking") from exc

        logger.info(f"Booking {reservation.booking_code} is now {reservation.status.value}")
        return reservation

    def _authorize(self, actor: Actor, reservation: Reservation, new_status: BookingStatus) -> None:
        if actor.can(Permission.MANAGE_RESERVATIONS):
            return
        if actor.is_authenticated and actor.can(Permission.MANAGE_PROPERTY_RESERVATIONS):
            prop = self.calendar_repo.get_property(reservation.property_id)
            if prop.owner_id == actor.user_id:
                return
        if (
            new_status == BookingStatus.CANCELLED
            and actor.is_authenticated
            and reservation.guest_id == actor.user_id
            and actor.can(Permission.CANCEL_OWN_RESERVATION)
        ):
            return
        authorize(actor, Permission.MANAGE_RESERVATIONS)


class GetReservationHandler:
    """Booking detail for its stakeholders: guest, property owner, staff."""

    def __init__(self, calendar_repo: AbstractCalendarRepository, booking_repo: AbstractBookingRepository):
        self.calendar_repo = calendar_repo
        self.booking_repo = booking_repo

    def handle(self, booking_id: Any, actor: Actor) -> Reservation:
        reservation = self.booking_repo.get(booking_id)
        if actor.can(Permission.VIEW_ALL_RESERVATIONS):
            return reservation
        if actor.is_authenticated:
            if reservation.guest_id == actor.user_id and actor.can(Permission.VIEW_OWN_RESERVATIONS):
                return reservation
            if actor.can(Permission.VIEW_PROPERTY_RESERVATIONS):
                prop = self.calendar_repo.get_property(reservation.property_id)
                if prop.owner_id == actor.user_id:
                    return reservation
        authorize(actor, Permission.VIEW_ALL_RESERVATIONS)
        return reservation


class QuoteReservationHandler:
    """Availability plus price for a prospective stay. Writes nothing."""

    def __init__(
        self,
        calendar_repo: AbstractCalendarRepository,
        calculator: PricingCalculator = pricing_calculator,
    ):
        self.checker = AvailabilityChecker(calendar_repo)
        self.calculator = calculator

    def handle(self, command: QuoteReservationCommand, actor: Optional[Actor] = None) -> Quote:
        authorize(actor or Actor.anonymous(), Permission.VIEW_AVAILABILITY)
        dates = parse_stay(command.check_in, command.check_out)
        guests_count = parse_guest_count(command.guests_count)
        availability = self.checker.check(command.property_id, dates)
        pricing = self.calculator.compute(
            availability.property.pricing,
            dates,
            guests_count,
            availability.calendar.price_overrides(dates),
        )
        return Quote(availability=availability, pricing=pricing)
