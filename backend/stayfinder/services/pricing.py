"""Stay price calculation — two-tier nightly rate plus percentage tax.

Nights 1-7 are charged at the property's base rate; every night after the
first week is charged at the weekly discount rate. Tax is applied to the
subtotal. All arithmetic is done in ``Decimal`` and the tax and total are
rounded half-up to cents.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal

from stayfinder.exceptions import InvalidRangeError

STANDARD_RATE_NIGHTS = 7
_CENTS = Decimal("0.01")


@dataclass(frozen=True)
class PriceQuote:
    """Itemised price for a stay."""

    nights: int
    standard_nights: int
    discounted_nights: int
    subtotal: Decimal
    tax: Decimal
    total: Decimal


def count_nights(check_in: date | datetime, check_out: date | datetime) -> int:
    """Number of nights between two dates.

    Partial days round up when datetimes are passed, so a late check-out is
    charged as a full night.
    """
    if isinstance(check_in, datetime) and isinstance(check_out, datetime):
        nights = math.ceil((check_out - check_in).total_seconds() / 86400)
    else:
        nights = (_as_date(check_out) - _as_date(check_in)).days
    if nights <= 0:
        raise InvalidRangeError("Check-out date must be after check-in date")
    return nights


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def quote(
    base_rate: Decimal | int | str,
    weekly_discount_rate: Decimal | int | str,
    tax_percent: Decimal | int | str,
    nights: int,
) -> PriceQuote:
    """Itemise the price of ``nights`` nights."""
    if nights <= 0:
        raise InvalidRangeError("A stay must be at least one night")

    base = Decimal(str(base_rate))
    discounted = Decimal(str(weekly_discount_rate))
    tax_rate = Decimal(str(tax_percent))

    standard_nights = min(nights, STANDARD_RATE_NIGHTS)
    discounted_nights = nights - standard_nights
    subtotal = base * standard_nights + discounted * discounted_nights
    tax = (subtotal * tax_rate / 100).quantize(_CENTS, rounding=ROUND_HALF_UP)

    return PriceQuote(
        nights=nights,
        standard_nights=standard_nights,
        discounted_nights=discounted_nights,
        subtotal=subtotal.quantize(_CENTS, rounding=ROUND_HALF_UP),
        tax=tax,
        total=(subtotal + tax).quantize(_CENTS, rounding=ROUND_HALF_UP),
    )


def compute_total(
    base_rate: Decimal | int | str,
    weekly_discount_rate: Decimal | int | str,
    tax_percent: Decimal | int | str,
    nights: int,
) -> Decimal:
    """Total price including tax, e.g. ``compute_total(1000, 800, 10, 10) == Decimal("10340.00")``."""
    return quote(base_rate, weekly_discount_rate, tax_percent, nights).total
