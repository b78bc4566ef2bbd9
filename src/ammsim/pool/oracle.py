"""Tick oracle on the 1.0001 geometric price grid.

A tick ``t`` prices one base unit at ``1.0001 ** t`` quote units. The
inverse rounds down: ``tick_for_price(p)`` is the largest tick whose
base price does not exceed ``p``.
"""

from decimal import ROUND_FLOOR, Decimal

from ammsim.decimals import ONE, ZERO
from ammsim.exceptions import ConfigurationInconsistency
from ammsim.models import Side
from ammsim.pool.base import PriceOracle

#: Price ratio between two adjacent ticks.
BASE_PRICE = Decimal("1.0001")

MIN_TICK = -887272
MAX_TICK = 887272

_LN_BASE = BASE_PRICE.ln()


class TickOracle(PriceOracle):
    """Exact Decimal tick/price conversions on the 1.0001 grid."""

    def price(self, tick: int, side: Side) -> Decimal:
        base_price = BASE_PRICE ** tick
        if side is Side.BASE:
            return base_price
        return ONE / base_price

    def tick_for_price(self, price: Decimal) -> int:
        if price <= ZERO:
            raise ConfigurationInconsistency(f"Price must be positive, got {price}")
        if price == ONE:
            return 0

        tick = int((price.ln() / _LN_BASE).to_integral_value(rounding=ROUND_FLOOR))
        tick = max(MIN_TICK, min(MAX_TICK, tick))

        # ln() carries context precision; settle the boundary exactly
        while tick < MAX_TICK and BASE_PRICE ** (tick + 1) <= price:
            tick += 1
        while tick > MIN_TICK and BASE_PRICE ** tick > price:
            tick -= 1
        return tick
