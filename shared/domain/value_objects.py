"""
Common Value Objects

- Money: a monetary amount with currency
- DateRange: a half-open range of calendar dates (check-in to check-out)
"""

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterator

from shared.domain.base import ValueObject


@dataclass(frozen=True)
class Money(ValueObject):
    """
    Money value object

    Amounts are kept as ``Decimal`` and quantized to cents on creation.
    """
    amount: Decimal
    currency: str = 'SAR'

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, 'amount', Decimal(str(self.amount)))
        object.__setattr__(
            self, 'amount', self.amount.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
        )
        if self.amount < 0:
            raise ValueError("Amount cannot be negative")
        if not self.currency:
            raise ValueError("Currency is required")
        if len(self.currency) != 3 or not self.currency.isalpha():
            raise ValueError(f"Currency must be a 3-letter ISO 4217 code, got {self.currency!r}")

    def __mul__(self, factor) -> 'Money':
        if not isinstance(factor, (int, Decimal)):
            raise TypeError("Can only multiply Money by an integer or Decimal")
        return Money(self.amount * factor, self.currency)

    def __str__(self):
        return f"{self.amount:,.2f} {self.currency}"


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Date range value object

    ``start_date`` is inclusive and ``end_date`` exclusive, so a stay
    from the 1st to the 3rd occupies the nights of the 1st and 2nd and two
    back-to-back stays never share a date.
    """
    start_date: date
    end_date: date

    def __post_init__(self):
        if self.start_date >= self.end_date:
            raise ValueError(f"Start date ({self.start_date}) must be before end date ({self.end_date})")

    def overlaps_with(self, other: 'DateRange') -> bool:
        """
        Check if this range overlaps with another

        Examples:
            - DateRange(25, 28) overlaps with DateRange(27, 30) -> True
            - DateRange(25, 28) overlaps with DateRange(28, 31) -> False (adjacent)
        """
        if not isinstance(other, DateRange):
            raise TypeError("Can only check overlap with another DateRange")
        return (self.start_date < other.end_date and
                self.end_date > other.start_date)

    def iter_days(self) -> Iterator[date]:
        """Yield every date covered by the range."""
        current = self.start_date
        while current < self.end_date:
            yield current
            current += timedelta(days=1)

    def __len__(self) -> int:
        """Number of nights."""
        return (self.end_date - self.start_date).days

    def __str__(self):
        return f"{self.start_date.isoformat()} - {self.end_date.isoformat()}"
