"""
Common Value Objects

Value objects used across the booking core:
- Money: An amount in integer minor currency units
- DateRange: An inclusive range of calendar days
- Date keys: timezone-less ISO day strings used on the wire and in storage
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterator, Union

from shared.domain.exceptions import ValidationError

SUPPORTED_CURRENCIES = ('USD', 'EUR', 'GBP', 'KZT')


def to_date_key(day: date) -> str:
    """Normalize a calendar day to its `YYYY-MM-DD` key"""
    if isinstance(day, datetime):
        day = day.date()
    return day.isoformat()


def parse_date_key(value: Union[str, date]) -> date:
    """
    Parse a `YYYY-MM-DD` key into a date

    Datetimes are truncated to their calendar day so no timezone offset can
    shift a booking by one day.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValidationError(f"Invalid date key: {value!r}")


@dataclass(frozen=True)
class Money:
    """
    Money value object

    Amounts are integer minor units (cents) so no float ever touches a price.
    """
    amount_minor: int
    currency: str = 'USD'

    def __post_init__(self):
        if not isinstance(self.amount_minor, int) or isinstance(self.amount_minor, bool):
            raise ValidationError("Money amount must be an integer number of minor units")
        if self.amount_minor < 0:
            raise ValidationError("Amount cannot be negative")
        if self.currency not in SUPPORTED_CURRENCIES:
            raise ValidationError(f"Unsupported currency: {self.currency}")

    def __add__(self, other: 'Money') -> 'Money':
        if not isinstance(other, Money):
            raise TypeError("Can only add Money to Money")
        if self.currency != other.currency:
            raise ValidationError(f"Cannot add different currencies: {self.currency} and {other.currency}")
        return Money(self.amount_minor + other.amount_minor, self.currency)

    def __sub__(self, other: 'Money') -> 'Money':
        if not isinstance(other, Money):
            raise TypeError("Can only subtract Money from Money")
        if self.currency != other.currency:
            raise ValidationError(f"Cannot subtract different currencies: {self.currency} and {other.currency}")
        return Money(self.amount_minor - other.amount_minor, self.currency)

    def to_major_string(self) -> str:
        """Two-decimal major amount, e.g. 16050 -> '160.50'"""
        return f"{self.amount_minor // 100}.{self.amount_minor % 100:02d}"

    def __str__(self):
        return f"{self.to_major_string()} {self.currency}"


@dataclass(frozen=True)
class DateRange:
    """
    Date range value object

    Both `start` and `end` are inclusive calendar days, so a range with
    start == end covers one day.
    """
    start: date
    end: date

    def __post_init__(self):
        if not isinstance(self.start, date) or not isinstance(self.end, date):
            raise ValidationError("Date range bounds must be dates")
        if self.end < self.start:
            raise ValidationError(
                f"End date ({to_date_key(self.end)}) is before start date ({to_date_key(self.start)})"
            )

    @classmethod
    def from_keys(cls, start, end) -> 'DateRange':
        return cls(parse_date_key(start), parse_date_key(end))

    def overlaps_with(self, other: 'DateRange') -> bool:
        """
        Check if this range shares at least one day with another

        Examples:
            - DateRange(25, 28) overlaps with DateRange(28, 30) -> True
            - DateRange(25, 27) overlaps with DateRange(28, 30) -> False
        """
        if not isinstance(other, DateRange):
            raise TypeError("Can only check overlap with another DateRange")
        return self.start <= other.end and other.start <= self.end

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def days(self) -> Iterator[date]:
        """Iterate every calendar day in the range"""
        current = self.start
        while current <= self.end:
            yield current
            current += timedelta(days=1)

    @property
    def nights(self) -> int:
        """Number of billable days in the range"""
        return (self.end - self.start).days + 1

    def __len__(self) -> int:
        return self.nights

    def __str__(self):
        return f"{to_date_key(self.start)}..{to_date_key(self.end)}"
