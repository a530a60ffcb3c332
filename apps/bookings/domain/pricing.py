"""
Pricing Calculator

Computes the price breakdown of a stay in integer minor currency units.
Each component is rounded once (half-up) and the total is the exact sum of
the rounded components, so the quote shown to a guest and the total stored
on the booking can never differ by a centime.

    base         = sum of nightly rates (price override or nightly price)
    discount     = base * monthly rate (28+ nights) or weekly rate (7+ nights)
    service_fee  = (base - discount) * service_fee_rate
    cleaning_fee = flat fee
    taxes        = (base - discount + service_fee) * tax_rate
    total        = base - discount + service_fee + cleaning_fee + taxes
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Mapping, Optional

from shared.domain.value_objects import SUPPORTED_CURRENCIES, DateRange, Money

from apps.bookings.domain.entities import PricingPolicy
from apps.bookings.domain.errors import PricingInputError

WEEKLY_STAY_NIGHTS = 7
MONTHLY_STAY_NIGHTS = 28


@dataclass(frozen=True)
class NightlyRate:
    night: date
    amount: int
    overridden: bool = False


@dataclass(frozen=True)
class PriceBreakdown:
    nights: int
    nightly_rate: int
    base: int
    discount: int
    service_fee: int
    cleaning_fee: int
    taxes: int
    total: int
    currency: str = 'DZD'
    nightly_rates: tuple = field(default=(), compare=False)

    def to_dict(self) -> dict:
        data = {
            'nights': self.nights,
            'nightly_rate': self.nightly_rate,
            'base': self.base,
            'discount': self.discount,
            'service_fee': self.service_fee,
            'cleaning_fee': self.cleaning_fee,
            'taxes': self.taxes,
            'total': self.total,
            'currency': self.currency,
        }
        overrides = [
            {'date': rate.night.isoformat(), 'price': rate.amount}
            for rate in self.nightly_rates if rate.overridden
        ]
        if overrides:
            data['price_overrides'] = overrides
        return data


class PricingCalculator:
    """Pure price computation; no I/O happens here."""

    def compute(
        self,
        policy: PricingPolicy,
        dates: DateRange,
        guests: int,
        overrides: Optional[Mapping[date, int]] = None,
    ) -> PriceBreakdown:
        nights = dates.nights
        if nights < 1:
            raise PricingInputError("A stay must last at least one night", nights=nights)
        if guests < 1:
            raise PricingInputError("At least one guest is required", guests=guests)
        if guests > policy.max_guests:
            raise PricingInputError(
                f"Guest count ({guests}) exceeds property capacity ({policy.max_guests})",
                guests=guests,
                max_guests=policy.max_guests,
            )
        if policy.currency not in SUPPORTED_CURRENCIES:
            raise PricingInputError(f"Unsupported currency: {policy.currency}", currency=policy.currency)

        overrides = overrides or {}
        nightly_rates = tuple(
            NightlyRate(night, overrides[night], True) if night in overrides
            else NightlyRate(night, policy.nightly_price)
            for night in dates.days()
        )
        currency = policy.currency
        base = Money.zero(currency)
        for rate in nightly_rates:
            base += Money(rate.amount, currency)
        discount = base * self.discount_rate(policy, nights)
        discounted = base - discount
        service_fee = discounted * Decimal(policy.service_fee_rate)
        taxes = (discounted + service_fee) * Decimal(policy.tax_rate)
        cleaning_fee = Money(policy.cleaning_fee, currency)
        total = discounted + service_fee + cleaning_fee + taxes

        return PriceBreakdown(
            nights=nights,
            nightly_rate=policy.nightly_price,
            base=base.amount,
            discount=discount.amount,
            service_fee=service_fee.amount,
            cleaning_fee=cleaning_fee.amount,
            taxes=taxes.amount,
            total=total.amount,
            currency=currency,
            nightly_rates=nightly_rates,
        )

    @staticmethod
    def discount_rate(policy: PricingPolicy, nights: int) -> Decimal:
        if nights >= MONTHLY_STAY_NIGHTS and policy.monthly_discount_rate:
            return Decimal(policy.monthly_discount_rate)
        if nights >= WEEKLY_STAY_NIGHTS and policy.weekly_discount_rate:
            return Decimal(policy.weekly_discount_rate)
        return Decimal('0')


pricing_calculator = PricingCalculator()
