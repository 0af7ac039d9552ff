"""
Platform fee calculator.

All arithmetic is done in integer minor units. The renter and lister fee
lines are each rounded half-up exactly once; nothing else is rounded.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

from django.conf import settings  # type: ignore

from shared.domain.exceptions import ValidationError

DEFAULT_RENTER_FEE_RATE = Decimal("0.07")
DEFAULT_LISTER_FEE_RATE = Decimal("0.03")

Number = Union[int, float, str, Decimal]


@dataclass(frozen=True)
class FeeBreakdown:
    nights: int
    price_per_day: int
    subtotal: int
    renter_fee: int
    lister_fee: int
    total: int
    lister_payout: int

    @property
    def platform_fee(self) -> int:
        """Commission kept by the platform from both sides"""
        return self.renter_fee + self.lister_fee

    def as_dict(self) -> dict:
        return {
            "nights": self.nights,
            "price_per_day": self.price_per_day,
            "subtotal": self.subtotal,
            "renter_fee": self.renter_fee,
            "lister_fee": self.lister_fee,
            "total": self.total,
            "lister_payout": self.lister_payout,
            "platform_fee": self.platform_fee,
        }


def _rate(value: Number, name: str) -> Decimal:
    try:
        rate = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{name} must be a number, got {value!r}")
    if rate < 0 or rate >= 1:
        raise ValidationError(f"{name} must be within [0, 1), got {rate}")
    return rate


def to_minor_units(amount: Number) -> int:
    """
    Convert a price to minor units.

    Integers are already minor units; Decimal/str/float values are major
    amounts (50.00 -> 5000) and must not carry fractions of a cent.
    """
    if isinstance(amount, bool):
        raise ValidationError("Price must be a number")
    if isinstance(amount, int):
        return amount
    try:
        minor = Decimal(str(amount)) * 100
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Invalid price: {amount!r}")
    if minor != minor.to_integral_value():
        raise ValidationError(f"Price {amount} has fractions of a minor unit")
    return int(minor)


def _round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def default_rates() -> tuple[Decimal, Decimal]:
    return (
        Decimal(str(getattr(settings, "BOOKING_RENTER_FEE_RATE", DEFAULT_RENTER_FEE_RATE))),
        Decimal(str(getattr(settings, "BOOKING_LISTER_FEE_RATE", DEFAULT_LISTER_FEE_RATE))),
    )


def price(
    nights: int,
    price_per_day: Number,
    renter_fee_rate: Number = DEFAULT_RENTER_FEE_RATE,
    lister_fee_rate: Number = DEFAULT_LISTER_FEE_RATE,
) -> FeeBreakdown:
    """
    Price a rental of `nights` days.

    >>> price(3, 5000).total
    16050
    """
    if isinstance(nights, bool) or not isinstance(nights, int) or nights < 1:
        raise ValidationError(f"Nights must be a positive integer, got {nights!r}")
    per_day = to_minor_units(price_per_day)
    if per_day < 0:
        raise ValidationError("Price per day cannot be negative")

    subtotal = nights * per_day
    renter_fee = _round_half_up(subtotal * _rate(renter_fee_rate, "renter_fee_rate"))
    lister_fee = _round_half_up(subtotal * _rate(lister_fee_rate, "lister_fee_rate"))

    return FeeBreakdown(
        nights=nights,
        price_per_day=per_day,
        subtotal=subtotal,
        renter_fee=renter_fee,
        lister_fee=lister_fee,
        total=subtotal + renter_fee,
        lister_payout=subtotal - lister_fee,
    )
