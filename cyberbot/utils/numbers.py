import math
from typing import Any, Union

Number = Union[int, float]


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives (2.5 -> 3), unlike round()."""
    return int(math.floor(value + 0.5))


def to_number(value: Any, default: Number = 0) -> Number:
    """Parse a vendor metric value; unparsable or non-finite values become ``default``.

    Integral results come back as ``int`` so counts serialize as ``3`` rather than ``3.0``.
    """
    if value is None or isinstance(value, bool):
        return default

    try:
        number = float(value)
    except (TypeError, ValueError):
        return default

    if not math.isfinite(number):
        return default
    if number.is_integer():
        return int(number)
    return number
