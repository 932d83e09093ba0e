"""Money and length rounding helpers.

Monetary values are rounded half-up to cents only when a breakdown line or a
final total is produced. Intermediate arithmetic stays unrounded.
"""

from decimal import Decimal, ROUND_HALF_UP, ROUND_CEILING
from typing import Iterable, Union

Number = Union[int, float, Decimal]

CENT = Decimal("0.01")

# Binary float noise lives far below this; collapsing it first keeps
# 388.39499999999998 from rounding down to 388.39.
_NOISE = Decimal("0.000000001")

# Lengths are in metres; anything below a micrometre is float noise.
LENGTH_PRECISION = Decimal("0.000001")


def to_decimal(value: Number) -> Decimal:
    """Convert a number to Decimal through its shortest repr."""
    if isinstance(value, Decimal):
        return value
    return Decimal(repr(float(value)))


def round_money(value: Number) -> float:
    """Round a monetary amount half-up to 2 decimal places."""
    d = to_decimal(value).quantize(_NOISE, rounding=ROUND_HALF_UP)
    return float(d.quantize(CENT, rounding=ROUND_HALF_UP))


def money_product(quantity: Number, unit_price: Number) -> float:
    """quantity x unit_price computed in decimal and rounded to cents."""
    return round_money(to_decimal(quantity) * to_decimal(unit_price))


def sum_money(values: Iterable[Number]) -> float:
    """Sum monetary amounts in decimal and round the result to cents."""
    total = sum((to_decimal(v) for v in values), Decimal("0"))
    return round_money(total)


def clean_length(value: Number) -> float:
    """Strip float noise from a length in metres (e.g. 2.7300000000000004 -> 2.73)."""
    d = to_decimal(value).quantize(LENGTH_PRECISION, rounding=ROUND_HALF_UP)
    return float(d)


def ceil_div(numerator: Number, denominator: Number) -> int:
    """Ceiling of numerator / denominator, robust to float noise at exact multiples."""
    ratio = to_decimal(clean_length(numerator)) / to_decimal(clean_length(denominator))
    return int(ratio.to_integral_value(rounding=ROUND_CEILING))


def round_up_to_multiple(value: float, step: float) -> float:
    """Round a length up to the next whole multiple of step (pattern repeats)."""
    # Repeats below the length precision clean to zero and mean "no repeat"
    if clean_length(step) <= 0:
        return value
    return clean_length(ceil_div(value, step) * step)
