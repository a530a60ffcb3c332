"""Golden tests for the pricing calculator."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

import pytest

from shared.domain.value_objects import DateRange

from apps.bookings.domain.entities import PricingPolicy
from apps.bookings.domain.errors import PricingInputError
from apps.bookings.domain.pricing import PricingCalculator

CHECK_IN = date(2026, 6, 1)


def stay(nights: int) -> DateRange:
    return DateRange(CHECK_IN, CHECK_IN + timedelta(days=nights))


@pytest.fixture
def policy() -> PricingPolicy:
    return PricingPolicy(
        nightly_price=10000,
        cleaning_fee=2000,
        service_fee_rate=Decimal("0.05"),
        tax_rate=Decimal("0.19"),
        max_guests=4,
    )


@pytest.fixture
def calculator() -> PricingCalculator:
    return PricingCalculator()


def test_three_night_stay_golden_values(calculator, policy) -> None:
    price = calculator.compute(policy, stay(3), guests=2)

    assert price.nights == 3
    assert price.base == 30000
    assert price.discount == 0
    assert price.service_fee == 1500
    assert price.cleaning_fee == 2000
    assert price.taxes == 5985
    assert price.total == 39485
    assert price.currency == "DZD"


def test_total_is_sum_of_components(calculator, policy) -> None:
    for nights in (1, 2, 5, 7, 13, 30):
        price = calculator.compute(policy, stay(nights), guests=1)
        assert price.total == price.base - price.discount + price.service_fee + price.cleaning_fee + price.taxes


def test_rounding_is_half_up_per_component(calculator) -> None:
    policy = PricingPolicy(nightly_price=10010, service_fee_rate=Decimal("0.05"), tax_rate=Decimal("0.19"), max_guests=2)
    price = calculator.compute(policy, stay(1), guests=1)

    # 10010 * 0.05 = 500.5 -> 501; (10010 + 501) * 0.19 = 1997.09 -> 1997
    assert price.service_fee == 501
    assert price.taxes == 1997
    assert price.total == 10010 + 501 + 1997


def test_price_overrides_replace_nightly_rate(calculator, policy) -> None:
    overrides = {CHECK_IN + timedelta(days=1): 15000}
    price = calculator.compute(policy, stay(3), guests=1, overrides=overrides)

    assert price.base == 10000 + 15000 + 10000
    assert price.to_dict()["price_overrides"] == [
        {"date": (CHECK_IN + timedelta(days=1)).isoformat(), "price": 15000},
    ]


def test_overrides_outside_the_stay_are_ignored(calculator, policy) -> None:
    price = calculator.compute(policy, stay(2), guests=1, overrides={CHECK_IN - timedelta(days=1): 99999})
    assert price.base == 20000
    assert "price_overrides" not in price.to_dict()


def test_weekly_and_monthly_discounts(calculator) -> None:
    policy = PricingPolicy(
        nightly_price=10000,
        service_fee_rate=Decimal("0"),
        tax_rate=Decimal("0"),
        max_guests=2,
        weekly_discount_rate=Decimal("0.10"),
        monthly_discount_rate=Decimal("0.25"),
    )

    assert calculator.compute(policy, stay(6), guests=1).discount == 0
    assert calculator.compute(policy, stay(7), guests=1).discount == 7000
    assert calculator.compute(policy, stay(28), guests=1).discount == 70000


def test_fees_are_computed_on_discounted_base(calculator) -> None:
    policy = PricingPolicy(
        nightly_price=10000,
        service_fee_rate=Decimal("0.05"),
        tax_rate=Decimal("0.19"),
        max_guests=2,
        weekly_discount_rate=Decimal("0.10"),
    )
    price = calculator.compute(policy, stay(7), guests=1)

    assert price.base == 70000
    assert price.discount == 7000
    assert price.service_fee == 3150
    assert price.taxes == 12569
    assert price.total == 63000 + 3150 + 12569


def test_guest_count_limits(calculator, policy) -> None:
    with pytest.raises(PricingInputError):
        calculator.compute(policy, stay(2), guests=0)
    with pytest.raises(PricingInputError) as excinfo:
        calculator.compute(policy, stay(2), guests=5)
    assert excinfo.value.details["max_guests"] == 4


def test_same_input_same_output(calculator, policy) -> None:
    assert calculator.compute(policy, stay(4), guests=3) == calculator.compute(policy, stay(4), guests=3)


def test_breakdown_is_in_the_property_currency(calculator) -> None:
    policy = PricingPolicy(nightly_price=8000, cleaning_fee=1000, max_guests=2, currency="EUR")

    price = calculator.compute(policy, stay(2), guests=1)

    assert price.currency == "EUR"
    assert price.total == 16000 + 800 + 3192 + 1000


def test_unsupported_currency(calculator) -> None:
    policy = PricingPolicy(nightly_price=8000, max_guests=2, currency="XXX")

    with pytest.raises(PricingInputError) as excinfo:
        calculator.compute(policy, stay(2), guests=1)
    assert excinfo.value.details["currency"] == "XXX"
