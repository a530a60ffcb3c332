"""
Availability Checker

Decides whether a stay can be booked by testing it against the committed
bookings (pending/confirmed) and the exclusion blocks of the property, and
against its stay-length rules. The answer always carries the reason: every
conflicting interval and every violated rule.

This check is not race free on its own. The reservation handler runs it
once as a cheap pre-check and again, authoritatively, while holding the
reservation lock.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Optional

from shared.domain.value_objects import DateRange

from apps.bookings.domain.entities import OccupiedPeriod, PropertyCalendar, PropertySnapshot
from apps.bookings.domain.errors import UnavailableError
from apps.bookings.domain.repositories import AbstractCalendarRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Restriction:
    type: str  # property_unavailable, minimum_stay, maximum_stay
    message: str
    value: Optional[int] = None

    def to_dict(self) -> dict:
        data = {'type': self.type, 'message': self.message}
        if self.value is not None:
            data['value'] = self.value
        return data


@dataclass(frozen=True)
class AvailabilityResult:
    property: PropertySnapshot
    dates: DateRange
    available: bool
    conflicts: tuple = ()
    restrictions: tuple = ()
    calendar: PropertyCalendar = field(default_factory=PropertyCalendar, compare=False, repr=False)

    @property
    def minimum_stay(self) -> int:
        return effective_minimum_stay(self.property, self.calendar, self.dates)

    def to_dict(self) -> dict:
        return {
            'property_id': self.property.id,
            'check_in': self.dates.start_date.isoformat(),
            'check_out': self.dates.end_date.isoformat(),
            'nights': self.dates.nights,
            'available': self.available,
            'conflicts': [c.to_dict() for c in self.conflicts],
            'restrictions': [r.to_dict() for r in self.restrictions],
        }

    def raise_if_unavailable(self):
        if self.available:
            return
        raise UnavailableError(
            f"Property {self.property.id} is not available for {self.dates}",
            conflicts=self.conflicts,
            restrictions=self.restrictions,
        )


@dataclass(frozen=True)
class CalendarDay:
    day: date
    available: bool
    price: int
    minimum_stay: int
    reason: str = ''

    def to_dict(self) -> dict:
        return {
            'date': self.day.isoformat(),
            'available': self.available,
            'price': self.price,
            'minimum_stay': self.minimum_stay,
            'reason': self.reason,
        }


def effective_minimum_stay(prop: PropertySnapshot, calendar: PropertyCalendar, dates: DateRange) -> int:
    """Largest minimum stay among the property and the rules in force on the check-in night."""
    candidates = [prop.minimum_stay or 1]
    candidates.extend(
        rule.minimum_stay for rule in calendar.rules
        if rule.minimum_stay and rule.dates.contains(dates.start_date)
    )
    return max(candidates)


class AvailabilityChecker:

    def __init__(self, calendar_repo: AbstractCalendarRepository):
        self.calendar_repo = calendar_repo

    def check(self, property_id: Any, dates: DateRange) -> AvailabilityResult:
        prop = self.calendar_repo.get_property(property_id)
        calendar = self.calendar_repo.load_calendar(property_id, dates)
        return self.evaluate(prop, calendar, dates)

    def evaluate(self, prop: PropertySnapshot, calendar: PropertyCalendar, dates: DateRange) -> AvailabilityResult:
        conflicts = tuple(sorted(
            (period for period in calendar.occupied if period.dates.overlaps_with(dates)),
            key=lambda period: (period.dates.start_date, period.kind),
        ))

        restrictions = []
        if not prop.is_bookable:
            restrictions.append(Restriction('property_unavailable', 'Property is currently not available for booking'))

        minimum_stay = effective_minimum_stay(prop, calendar, dates)
        if dates.nights < minimum_stay:
            restrictions.append(Restriction('minimum_stay', f'Minimum stay is {minimum_stay} night(s)', minimum_stay))

        if prop.maximum_stay and dates.nights > prop.maximum_stay:
            restrictions.append(
                Restriction('maximum_stay', f'Maximum stay is {prop.maximum_stay} night(s)', prop.maximum_stay)
            )

        available = not conflicts and not restrictions
        if not available:
            logger.info(
                f"Property {prop.id} unavailable for {dates}: "
                f"{len(conflicts)} conflict(s), {len(restrictions)} restriction(s)"
            )
        return AvailabilityResult(
            property=prop,
            dates=dates,
            available=available,
            conflicts=conflicts,
            restrictions=tuple(restrictions),
            calendar=calendar,
        )

    def ensure_available(self, property_id: Any, dates: DateRange) -> AvailabilityResult:
        result = self.check(property_id, dates)
        result.raise_if_unavailable()
        return result

    def calendar_days(self, property_id: Any, window: DateRange) -> list[CalendarDay]:
        """Per-night availability and price over ``window``."""
        prop = self.calendar_repo.get_property(property_id)
        calendar = self.calendar_repo.load_calendar(property_id, window)
        overrides = calendar.price_overrides(window)
        days = []
        for day in window.days():
            night = DateRange(day, day + timedelta(days=1))
            blocking: Optional[OccupiedPeriod] = next(
                (p for p in calendar.occupied if p.dates.overlaps_with(night)),
                None,
            )
            if not prop.is_bookable:
                reason = 'property_unavailable'
            elif blocking is not None:
                reason = blocking.reason or blocking.kind
            else:
                reason = ''
            days.append(CalendarDay(
                day=day,
                available=not reason,
                price=overrides.get(day, prop.pricing.nightly_price),
                minimum_stay=effective_minimum_stay(prop, calendar, night),
                reason=reason,
            ))
        return days
