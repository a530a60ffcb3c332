"""
Common Value Objects

- Money: an integer amount of minor currency units (centimes) with currency
- DateRange: a half-open stay interval [start_date, end_date)
"""

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterator, Union

from shared.domain.base import ValueObject
from shared.domain.errors import CurrencyMismatchError, InvalidRangeError

SUPPORTED_CURRENCIES = ('DZD', 'EUR', 'USD')


def round_minor_units(value: Union[Decimal, int]) -> int:
    """Round half-up to a whole number of minor units."""
    return int(Decimal(value).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class Money(ValueObject):
    """
    Money value object

    Amounts are integers in the currency's minor unit so that sums never
    drift. Multiplication by a rate rounds half-up once.
    """
    amount: int
    currency: str = 'DZD'

    def __post_init__(self):
        if not isinstance(self.amount, int) or isinstance(self.amount, bool):
            raise TypeError("Money amount must be an integer number of minor units")
        if not self.currency:
            raise ValueError("Currency is required")
        if self.currency not in SUPPORTED_CURRENCIES:
            raise ValueError(f"Unsupported currency: {self.currency}")

    @classmethod
    def zero(cls, currency: str = 'DZD') -> 'Money':
        return cls(0, currency)

    def _check_currency(self, other: 'Money'):
        if not isinstance(other, Money):
            raise TypeError("Can only combine Money with Money")
        if self.currency != other.currency:
            raise CurrencyMismatchError(
                f"Cannot combine different currencies: {self.currency} and {other.currency}"
            )

    def __add__(self, other: 'Money') -> 'Money':
        self._check_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: 'Money') -> 'Money':
        self._check_currency(other)
        return Money(self.amount - other.amount, self.currency)

    def __mul__(self, factor: Union[int, Decimal]) -> 'Money':
        if isinstance(factor, bool) or not isinstance(factor, (int, Decimal)):
            raise TypeError("Can only multiply Money by an int or a Decimal")
        return Money(round_minor_units(Decimal(self.amount) * factor), self.currency)

    def __str__(self):
        return f"{Decimal(self.amount) / 100:,.2f} {self.currency}"

    def __repr__(self):
        return f"Money({self.amount}, '{self.currency}')"


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Date range value object

    Represents a range from start_date (inclusive) to end_date (exclusive),
    so a stay ending on the day another begins does not overlap it.
    """
    start_date: date
    end_date: date

    def __post_init__(self):
        if self.end_date <= self.start_date:
            raise InvalidRangeError(self.start_date, self.end_date)

    def overlaps_with(self, other: 'DateRange') -> bool:
        """
        Check if this range overlaps with another

        Examples:
            - DateRange(25, 28) overlaps with DateRange(27, 30) -> True
            - DateRange(25, 28) overlaps with DateRange(28, 31) -> False (adjacent)
        """
        if not isinstance(other, DateRange):
            raise TypeError("Can only check overlap with another DateRange")
        return self.start_date < other.end_date and other.start_date < self.end_date

    def contains(self, check_date: date) -> bool:
        return self.start_date <= check_date < self.end_date

    def days(self) -> Iterator[date]:
        """Iterate over the nights of the stay (check-out day excluded)."""
        current = self.start_date
        while current < self.end_date:
            yield current
            current += timedelta(days=1)

    @property
    def nights(self) -> int:
        return (self.end_date - self.start_date).days

    def __len__(self) -> int:
        return self.nights

    def __str__(self):
        return f"{self.start_date.isoformat()} - {self.end_date.isoformat()}"

    def __repr__(self):
        return f"DateRange({self.start_date}, {self.end_date})"


def overlaps(a: DateRange, b: DateRange) -> bool:
    return a.overlaps_with(b)


def nights(dates: DateRange) -> int:
    return dates.nights
