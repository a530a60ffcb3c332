"""Tests for the availability checker against in-memory calendars."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from shared.domain.value_objects import DateRange

from apps.bookings.domain.availability import AvailabilityChecker
from apps.bookings.domain.entities import StayRule
from apps.bookings.domain.errors import PropertyNotFoundError, UnavailableError

from .fakes import InMemoryCalendarRepository, make_property

D = date(2026, 8, 1)


def days(start: int, end: int) -> DateRange:
    return DateRange(D + timedelta(days=start), D + timedelta(days=end))


@pytest.fixture
def repo() -> InMemoryCalendarRepository:
    repo = InMemoryCalendarRepository()
    repo.add_property(make_property(1))
    return repo


@pytest.fixture
def checker(repo) -> AvailabilityChecker:
    return AvailabilityChecker(repo)


def test_free_calendar_is_available(checker) -> None:
    result = checker.check(1, days(0, 3))
    assert result.available
    assert result.conflicts == ()
    assert result.restrictions == ()


def test_block_makes_overlapping_stay_unavailable(repo, checker) -> None:
    repo.add_block(1, days(2, 4), reason="maintenance")

    result = checker.check(1, days(0, 3))

    assert not result.available
    assert len(result.conflicts) == 1
    assert result.conflicts[0].kind == "block"
    assert result.conflicts[0].reason == "maintenance"


def test_back_to_back_stays_are_available(repo, checker) -> None:
    repo.add_block(1, days(0, 3))
    assert checker.check(1, days(3, 5)).available
    assert checker.check(1, days(-2, 0)).available


def test_conflicts_are_reported_in_date_order(repo, checker) -> None:
    repo.add_block(1, days(5, 6))
    repo.add_block(1, days(1, 2))

    result = checker.check(1, days(0, 10))

    assert [c.dates.start_date for c in result.conflicts] == [D + timedelta(days=1), D + timedelta(days=5)]


def test_unbookable_property(repo, checker) -> None:
    repo.add_property(make_property(2, is_bookable=False))

    result = checker.check(2, days(0, 2))

    assert not result.available
    assert [r.type for r in result.restrictions] == ["property_unavailable"]


def test_minimum_stay_from_property_and_rules(repo, checker) -> None:
    repo.add_property(make_property(3, minimum_stay=2))
    repo.add_rule(3, StayRule(dates=days(10, 12), minimum_stay=5))

    assert [r.type for r in checker.check(3, days(0, 1)).restrictions] == ["minimum_stay"]
    assert checker.check(3, days(0, 2)).available

    result = checker.check(3, days(10, 12))
    assert not result.available
    assert result.restrictions[0].value == 5
    assert result.minimum_stay == 5

    # A stay arriving before the rule starts is held to the property minimum only.
    result = checker.check(3, days(9, 12))
    assert result.available
    assert result.minimum_stay == 2


def test_rule_starting_mid_stay_agrees_with_calendar(repo, checker) -> None:
    repo.add_rule(1, StayRule(dates=days(2, 10), minimum_stay=5))

    calendar = checker.calendar_days(1, days(0, 3))
    result = checker.check(1, days(0, 3))

    assert calendar[0].minimum_stay == 1
    assert result.available
    assert result.minimum_stay == 1


def test_rule_in_force_on_check_in_night(repo, checker) -> None:
    repo.add_rule(1, StayRule(dates=days(-3, 1), minimum_stay=4))

    result = checker.check(1, days(0, 3))

    assert not result.available
    assert [r.to_dict() for r in result.restrictions] == [
        {"type": "minimum_stay", "message": "Minimum stay is 4 night(s)", "value": 4}
    ]
    assert checker.check(1, days(0, 4)).available


def test_maximum_stay(repo, checker) -> None:
    repo.add_property(make_property(4, maximum_stay=7))

    assert checker.check(4, days(0, 7)).available
    result = checker.check(4, days(0, 8))
    assert [r.type for r in result.restrictions] == ["maximum_stay"]


def test_check_is_idempotent(repo, checker) -> None:
    repo.add_block(1, days(1, 2))
    assert checker.check(1, days(0, 4)) == checker.check(1, days(0, 4))


def test_unknown_property(checker) -> None:
    with pytest.raises(PropertyNotFoundError):
        checker.check(999, days(0, 1))


def test_ensure_available_raises_with_conflicts(repo, checker) -> None:
    repo.add_block(1, days(0, 1))

    with pytest.raises(UnavailableError) as excinfo:
        checker.ensure_available(1, days(0, 2))

    body = excinfo.value.to_dict()
    assert body["code"] == "unavailable"
    assert body["conflicts"][0]["check_in"] == D.isoformat()


def test_calendar_days_report_price_and_reason(repo, checker) -> None:
    repo.add_block(1, days(1, 2), reason="renovation")
    repo.add_rule(1, StayRule(dates=days(2, 3), price_override=15000, minimum_stay=3))

    calendar = checker.calendar_days(1, days(0, 3))

    assert [d.available for d in calendar] == [True, False, True]
    assert calendar[1].reason == "renovation"
    assert [d.price for d in calendar] == [10000, 10000, 15000]
    assert calendar[2].minimum_stay == 3
