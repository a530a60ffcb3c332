"""Repository interfaces used by the reservation engine."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from shared.domain.value_objects import DateRange

from apps.bookings.domain.entities import PropertyCalendar, PropertySnapshot, Reservation


class AbstractCalendarRepository(ABC):
    """Read side: properties, their committed bookings and owner blocks."""

    @abstractmethod
    def get_property(self, property_id: Any) -> PropertySnapshot:
        """Raises PropertyNotFoundError for an unknown id."""

    @abstractmethod
    def load_calendar(self, property_id: Any, dates: DateRange) -> PropertyCalendar:
        """Pending/confirmed bookings, exclusion blocks and stay rules overlapping ``dates``."""


class AbstractBookingRepository(ABC):

    @abstractmethod
    def add(self, reservation: Reservation) -> None:
        pass

    @abstractmethod
    def get(self, booking_id: Any, *, for_update: bool = False) -> Reservation:
        """Raises BookingNotFoundError for an unknown id."""

    @abstractmethod
    def save(self, reservation: Reservation) -> None:
        pass

    @abstractmethod
    def guest_exists(self, guest_id: Any) -> bool:
        """Whether ``guest_id`` names a registered user."""
