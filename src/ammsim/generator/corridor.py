"""Volatility corridor and pivot random walk.

The corridor is the tick band a day's trades are expected to land in:
``[pivot - width, pivot + width]`` where ``width`` is the tick distance a
price move of ``volatility`` covers on the pool's grid. At each day
rollover the pivot jumps to one of the corridor's bounds, biased back
toward a fixed reference tick (mean reversion with a rare excursion).

CRITICAL: All computations use Decimal. Never use float.
"""

import random
from decimal import Decimal

from ammsim.config import DayCycleSettings
from ammsim.decimals import ONE, ZERO, random_decimal
from ammsim.exceptions import ConfigurationInconsistency
from ammsim.logging import get_logger
from ammsim.models import PriceCorridor, Side
from ammsim.pool.base import PriceOracle

logger = get_logger(__name__)

#: Tunable constants; values are kept as calibrated, not derived.
DEFAULT_ESCAPE_PROBABILITY = Decimal("0.5")
DEFAULT_PULL_PROBABILITY = Decimal("0.99")


def volatility_to_ticks(
    volatility: Decimal,
    oracle: PriceOracle,
    reference_tick: int = 1,
) -> int:
    """Convert a fractional volatility into a tick width.

    Prices the reference tick, scales it by ``1 + volatility`` and converts
    the result back to a tick; the width is the distance from the
    reference tick.

    Raises:
        ConfigurationInconsistency: If the width resolves to less than one tick.
    """
    if volatility <= ZERO:
        raise ConfigurationInconsistency(f"Volatility must be positive, got {volatility}")

    scaled_price = oracle.price(reference_tick, Side.BASE) * (ONE + volatility)
    width = oracle.tick_for_price(scaled_price) - reference_tick

    if width < 1:
        raise ConfigurationInconsistency(
            f"Volatility {volatility} is narrower than one tick "
            f"(scaled price {scaled_price}, width {width})"
        )
    return width


def derive_corridor(
    pivot_tick: int,
    volatility: Decimal,
    oracle: PriceOracle,
    reference_tick: int = 1,
) -> PriceCorridor:
    """Return the inclusive band ``[pivot - width, pivot + width]``."""
    width = volatility_to_ticks(volatility, oracle, reference_tick)
    return PriceCorridor(left_tick=pivot_tick - width, right_tick=pivot_tick + width)


def next_pivot(
    current_pivot: int,
    volatility: Decimal,
    reference_tick: int,
    oracle: PriceOracle,
    rng: random.Random,
    escape_probability: Decimal = DEFAULT_ESCAPE_PROBABILITY,
    pull_probability: Decimal = DEFAULT_PULL_PROBABILITY,
    width_reference_tick: int = 1,
) -> int:
    """Draw tomorrow's pivot from the bounds of today's corridor.

    - ``reference_tick`` inside the corridor: either bound, coin flip
      (``escape_probability`` for the left one).
    - Corridor entirely above the reference: left bound with
      ``pull_probability``, otherwise the right one.
    - Corridor entirely below: right bound with ``pull_probability``,
      otherwise the left one.

    Args:
        current_pivot: Today's pivot tick.
        volatility: Fractional daily volatility.
        reference_tick: The tick the walk reverts toward (the market tick
            the pool was opened at).
        oracle: Tick/price conversions.
        rng: Random source.
        escape_probability: Probability of the left bound when the
            reference is inside the corridor.
        pull_probability: Probability of the bound nearer the reference
            when the corridor has drifted away from it.
        width_reference_tick: Anchor tick for the volatility-to-width conversion.

    Returns:
        The next pivot tick.
    """
    corridor = derive_corridor(current_pivot, volatility, oracle, width_reference_tick)
    left, right = corridor.left_tick, corridor.right_tick
    r = random_decimal(rng)

    if corridor.contains(reference_tick):
        return left if r < escape_probability else right

    if left > reference_tick:
        return left if r < pull_probability else right

    return right if r < pull_probability else left


def initial_target_volume(avg_daily_volume: Decimal, rng: random.Random) -> Decimal:
    """First day's volume target: uniform in ``[0, 2 * avg_daily_volume)``."""
    return avg_daily_volume * random_decimal(rng) * 2


class CorridorModel:
    """Binds oracle, random source and tunables for corridor/pivot derivation.

    Shared by the trade generator (today's corridor) and the day-cycle
    aggregator (tomorrow's pivot), so both see the same grid and constants.

    Args:
        settings: Day-cycle settings carrying the tunable probabilities.
        oracle: Tick/price conversions.
        rng: Random source.
        market_tick: The tick the pivot walk reverts toward.
    """

    def __init__(
        self,
        settings: DayCycleSettings,
        oracle: PriceOracle,
        rng: random.Random,
        market_tick: int,
    ) -> None:
        self._settings = settings
        self._oracle = oracle
        self._rng = rng
        self._market_tick = market_tick

    @property
    def market_tick(self) -> int:
        return self._market_tick

    def corridor(self, pivot_tick: int, volatility: Decimal) -> PriceCorridor:
        return derive_corridor(
            pivot_tick, volatility, self._oracle, self._settings.reference_tick
        )

    def next_pivot(self, current_pivot: int, volatility: Decimal) -> int:
        pivot = next_pivot(
            current_pivot,
            volatility,
            self._market_tick,
            self._oracle,
            self._rng,
            escape_probability=self._settings.escape_probability,
            pull_probability=self._settings.pull_probability,
            width_reference_tick=self._settings.reference_tick,
        )
        logger.debug(
            "pivot_redrawn",
            previous=current_pivot,
            pivot=pivot,
            market_tick=self._market_tick,
        )
        return pivot

    def initial_target_volume(self) -> Decimal:
        return initial_target_volume(self._settings.avg_daily_volume, self._rng)
