# drapes/numbers.py
"""Parse-or-default coercion and the rounding rules used for costing.

Every numeric field read from a form or an external record goes through
``to_float``/``to_int`` so bad input always degrades to the default instead
of raising.  Rounding is half-up on the exact value of the float, which is
how the historical records were produced.
"""

import math
from decimal import Decimal, ROUND_HALF_UP

_CENT = Decimal('0.01')
_UNIT = Decimal('1')


def to_float(value, default: float = 0.0) -> float:
    """Return ``value`` as a finite float, or ``default`` if it isn't one."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return default
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(result):
        return default
    return result


def to_int(value, default: int = 0) -> int:
    """Like ``to_float`` but truncates toward zero."""
    result = to_float(value, None)
    if result is None:
        return default
    return int(result)


def non_negative(value) -> float:
    """Coerce a measurement; negatives and garbage become 0."""
    return max(to_float(value), 0.0)


def round_half_up(value: float) -> int:
    return int(Decimal(value).quantize(_UNIT, rounding=ROUND_HALF_UP))


def round2(value: float) -> float:
    return float(Decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP))


def ceil_half(value: float) -> float:
    """Round up to the next 0.5 step."""
    return math.ceil(value * 2) / 2
