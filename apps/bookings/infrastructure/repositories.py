"""Django ORM implementations of the reservation repositories."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from django.contrib.auth import get_user_model  # type: ignore
from django.core.exceptions import ValidationError as DjangoValidationError  # type: ignore
from django.db import DatabaseError  # type: ignore
from django.utils import timezone  # type: ignore

from shared.domain.value_objects import DateRange

from apps.bookings.domain.entities import (
    BookingStatus,
    GuestDetails,
    OccupiedPeriod,
    PaymentStatus,
    PricingPolicy,
    PropertyCalendar,
    PropertySnapshot,
    Reservation,
    StayRule,
)
from apps.bookings.domain.errors import BookingNotFoundError, PersistenceError, PropertyNotFoundError
from apps.bookings.domain.pricing import PriceBreakdown
from apps.bookings.domain.repositories import AbstractBookingRepository, AbstractCalendarRepository
from apps.bookings.models import Booking
from apps.properties.models import AvailabilityBlock, Property

logger = logging.getLogger(__name__)


def property_to_snapshot(prop: Property) -> PropertySnapshot:
    return PropertySnapshot(
        id=prop.pk,
        owner_id=prop.owner_id,
        is_bookable=prop.is_bookable,
        minimum_stay=prop.minimum_stay,
        maximum_stay=prop.maximum_stay,
        pricing=PricingPolicy(
            nightly_price=prop.nightly_price,
            cleaning_fee=prop.cleaning_fee,
            service_fee_rate=Decimal(prop.service_fee_rate),
            tax_rate=Decimal(prop.tax_rate),
            max_guests=prop.max_guests,
            currency=prop.currency,
            weekly_discount_rate=Decimal(prop.weekly_discount_rate),
            monthly_discount_rate=Decimal(prop.monthly_discount_rate),
        ),
    )


class DjangoCalendarRepository(AbstractCalendarRepository):

    def get_property(self, property_id: Any) -> PropertySnapshot:
        try:
            prop = Property.objects.get(pk=property_id)
        except (Property.DoesNotExist, ValueError, TypeError, DjangoValidationError):
            raise PropertyNotFoundError(property_id)
        except DatabaseError as exc:
            raise PersistenceError("Property store unavailable") from exc
        return property_to_snapshot(prop)

    def load_calendar(self, property_id: Any, dates: DateRange) -> PropertyCalendar:
        try:
            bookings = list(
                Booking.objects.filter(property_id=property_id)
                .blocking()
                .overlapping(dates.start_date, dates.end_date)
                .values("id", "booking_code", "check_in", "check_out", "status")
            )
            blocks = list(
                AvailabilityBlock.objects.filter(
                    property_id=property_id,
                    start_date__lt=dates.end_date,
                    end_date__gt=dates.start_date,
                )
            )
        except DatabaseError as exc:
            raise PersistenceError("Calendar store unavailable") from exc

        occupied = [
            OccupiedPeriod(
                kind="booking",
                dates=DateRange(row["check_in"], row["check_out"]),
                reference=row["id"],
                reason=row["status"],
            )
            for row in bookings
        ]
        rules = []
        for block in blocks:
            block_dates = DateRange(block.start_date, block.end_date)
            if not block.is_available:
                occupied.append(OccupiedPeriod(kind="block", dates=block_dates, reference=block.pk, reason=block.reason))
            elif block.price_override is not None or block.minimum_stay:
                rules.append(StayRule(
                    dates=block_dates,
                    price_override=block.price_override,
                    minimum_stay=block.minimum_stay,
                    reference=block.pk,
                ))
        return PropertyCalendar(occupied=tuple(occupied), rules=tuple(rules))


def booking_to_reservation(booking: Booking) -> Reservation:
    dates = DateRange(booking.check_in, booking.check_out)
    return Reservation(
        id=booking.pk,
        property_id=booking.property_id,
        guest_id=booking.guest_id,
        guest=GuestDetails(booking.guest_name, booking.guest_email, booking.guest_phone),
        dates=dates,
        guests_count=booking.guests_count,
        pricing=PriceBreakdown(
            nights=dates.nights,
            nightly_rate=booking.nightly_rate,
            base=booking.base_price,
            discount=booking.discount,
            service_fee=booking.service_fee,
            cleaning_fee=booking.cleaning_fee,
            taxes=booking.taxes,
            total=booking.total_price,
            currency=booking.currency,
        ),
        booking_code=booking.booking_code,
        status=BookingStatus(booking.status),
        payment_status=PaymentStatus(booking.payment_status),
        special_requests=booking.special_requests,
        cancellation_reason=booking.cancellation_reason,
    )


class DjangoBookingRepository(AbstractBookingRepository):
    """Maps the Reservation aggregate onto ``Booking`` rows."""

    def add(self, reservation: Reservation) -> None:
        pricing = reservation.pricing
        try:
            Booking.objects.create(
                id=reservation.id,
                booking_code=reservation.booking_code,
                property_id=reservation.property_id,
                guest_id=reservation.guest_id,
                guest_name=reservation.guest.name,
                guest_email=reservation.guest.email,
                guest_phone=reservation.guest.phone,
                check_in=reservation.dates.start_date,
                check_out=reservation.dates.end_date,
                guests_count=reservation.guests_count,
                nightly_rate=pricing.nightly_rate,
                base_price=pricing.base,
                discount=pricing.discount,
                service_fee=pricing.service_fee,
                cleaning_fee=pricing.cleaning_fee,
                taxes=pricing.taxes,
                total_price=pricing.total,
                currency=pricing.currency,
                status=reservation.status.value,
                payment_status=reservation.payment_status.value,
                special_requests=reservation.special_requests,
            )
        except DatabaseError as exc:
            logger.error(f"Failed to persist booking {reservation.booking_code}: {exc}", exc_info=True)
            raise PersistenceError("Could not save the booking") from exc

    def get(self, booking_id: Any, *, for_update: bool = False) -> Reservation:
        queryset = Booking.objects.all()
        if for_update:
            queryset = queryset.select_for_update()
        try:
            booking = queryset.get(pk=booking_id)
        except (Booking.DoesNotExist, ValueError, TypeError, DjangoValidationError):
            raise BookingNotFoundError(booking_id)
        except DatabaseError as exc:
            raise PersistenceError("Booking store unavailable") from exc
        return booking_to_reservation(booking)

    def save(self, reservation: Reservation) -> None:
        try:
            updated = Booking.objects.filter(pk=reservation.id).update(
                status=reservation.status.value,
                payment_status=reservation.payment_status.value,
                cancellation_reason=reservation.cancellation_reason,
                updated_at=timezone.now(),
            )
        except DatabaseError as exc:
            raise PersistenceError("Could not save the booking") from exc
        if not updated:
            raise BookingNotFoundError(reservation.id)

    def guest_exists(self, guest_id: Any) -> bool:
        try:
            return get_user_model().objects.filter(pk=guest_id).exists()
        except (ValueError, TypeError, DjangoValidationError):
            return False
        except DatabaseError as exc:
            raise PersistenceError("User store unavailable") from exc
