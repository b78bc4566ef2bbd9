"""Synthetic trade generation bounded by the day's volatility corridor.

Each call emits one TradeIntent:
1. DIRECTION: outside the corridor, trade back toward it; inside, pick a
   side with probability proportional to the room left on that side.
2. SIZE: start from the asset's default notional and halve until the
   pool's read-only impact estimate fits the usable width, or the floor
   is reached (accepted regardless of impact).

No single synthetic trade can therefore push the price further than the
currently implied corridor allows.
"""

import random
from decimal import Decimal

from ammsim.config import TradeGenSettings
from ammsim.decimals import random_decimal
from ammsim.logging import get_logger
from ammsim.models import PriceCorridor, SwapDirection, TradeIntent
from ammsim.pool.base import Pool

logger = get_logger(__name__)


def choose_direction(
    cur_tick: int,
    corridor: PriceCorridor,
    rng: random.Random,
) -> tuple[SwapDirection, int]:
    """Pick the trade direction and the usable tick width it may consume.

    Args:
        cur_tick: Current pool tick.
        corridor: Today's corridor.
        rng: Random source, only drawn from when ``cur_tick`` is inside.

    Returns:
        ``(direction, usable_width)``.
    """
    left, right = corridor.left_tick, corridor.right_tick

    if cur_tick < left:
        # Clamp the violated edge so the gap being closed counts as room
        return SwapDirection.QUOTE_TO_BASE, right - cur_tick + 1
    if cur_tick > right:
        return SwapDirection.BASE_TO_QUOTE, cur_tick - left + 1

    width = Decimal(corridor.width)
    quote_width = cur_tick - left
    r = random_decimal(rng)

    if r <= Decimal(quote_width) / width:
        return SwapDirection.BASE_TO_QUOTE, quote_width
    return SwapDirection.QUOTE_TO_BASE, right - cur_tick + 1


def size_trade(
    pool: Pool,
    direction: SwapDirection,
    usable_width: int,
    default_qty: Decimal,
    min_qty: Decimal,
) -> Decimal:
    """Largest halving of ``default_qty`` whose estimated impact fits ``usable_width``.

    Terminates after at most ``ceil(log2(default_qty / min_qty))`` halvings:
    once a halving drops below ``min_qty`` the floor is returned without
    another estimate.
    """
    qty = default_qty
    while True:
        impact = pool.estimate_impact_ticks(TradeIntent(direction=direction, quantity_in=qty))
        if impact <= usable_width:
            return qty

        qty = qty / 2
        if qty < min_qty:
            return min_qty


class TradeGenerator:
    """Generates one corridor-bounded TradeIntent per call.

    Holds only its size bounds and random source; pool and corridor are
    passed in on every call.

    Args:
        settings: Default and floor notionals per input asset.
        rng: Random source for the in-corridor direction draw.
    """

    def __init__(self, settings: TradeGenSettings, rng: random.Random) -> None:
        self._settings = settings
        self._rng = rng

    def bounds(self, direction: SwapDirection) -> tuple[Decimal, Decimal]:
        """``(default_qty, min_qty)`` for the asset ``direction`` pays in."""
        if direction is SwapDirection.BASE_TO_QUOTE:
            return self._settings.base_default_qty, self._settings.base_min_qty
        return self._settings.quote_default_qty, self._settings.quote_min_qty

    def generate(self, pool: Pool, corridor: PriceCorridor) -> TradeIntent:
        cur_tick = pool.cur_tick
        direction, usable_width = choose_direction(cur_tick, corridor, self._rng)
        default_qty, min_qty = self.bounds(direction)

        qty = size_trade(pool, direction, usable_width, default_qty, min_qty)

        logger.debug(
            "trade_generated",
            direction=direction.value,
            quantity_in=str(qty),
            cur_tick=cur_tick,
            usable_width=usable_width,
            corridor_left=corridor.left_tick,
            corridor_right=corridor.right_tick,
        )
        return TradeIntent(direction=direction, quantity_in=qty)
