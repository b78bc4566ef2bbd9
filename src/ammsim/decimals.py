"""Decimal helpers shared by the simulator.

CRITICAL: All monetary and quantity values use Decimal. A long-running
simulation performs an unbounded chain of sequential arithmetic, so float
drift is not acceptable anywhere in the core.
"""

import random
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")

#: Resolution kept when turning a float draw into a Decimal.
_RANDOM_QUANTUM = Decimal("1E-10")

_SHORT_UNITS: list[tuple[Decimal, str]] = [
    (Decimal("1000000000000"), "T"),
    (Decimal("1000000000"), "B"),
    (Decimal("1000000"), "M"),
    (Decimal("1000"), "K"),
]


def random_decimal(rng: random.Random) -> Decimal:
    """Draw a uniform Decimal in [0, 1) with ten fractional digits.

    Truncates rather than rounds so a draw just below one stays below one.
    """
    return Decimal(rng.random()).quantize(_RANDOM_QUANTUM, rounding=ROUND_FLOOR)


def format_fixed(value: Decimal, decimals: int = 2) -> str:
    """Render ``value`` with exactly ``decimals`` fractional digits."""
    exponent = Decimal(1).scaleb(-decimals)
    return f"{value.quantize(exponent, rounding=ROUND_HALF_UP):f}"


def format_short(value: Decimal) -> str:
    """Humanized rendering: 1234567 -> "1.23M", 950 -> "950", 0.01234 -> "0.0123".

    Values of a thousand and above are abbreviated with K/M/B/T and two
    significant fractional digits; smaller magnitudes keep three
    significant digits so small prices and fractions stay readable.
    """
    magnitude = abs(value)
    for threshold, suffix in _SHORT_UNITS:
        if magnitude >= threshold:
            scaled = value / threshold
            return f"{_trim(format_fixed(scaled, 2))}{suffix}"

    if magnitude == ZERO:
        return "0"
    if magnitude >= HUNDRED:
        return _trim(format_fixed(value, 0))
    if magnitude >= ONE:
        return _trim(format_fixed(value, 2))

    # Three significant digits for fractions
    digits = -magnitude.adjusted() + 2
    return _trim(format_fixed(value, digits))


def _trim(text: str) -> str:
    if "." not in text:
        return text
    return text.rstrip("0").rstrip(".")
