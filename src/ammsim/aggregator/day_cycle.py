"""Day cycle and rolling statistics aggregator.

Accumulates each trade's quote-equivalent volume and fees against the
day's volume target. When the target is reached the day rolls over:

1. Push the completed day's volume and fees into the trailing windows
2. Advance ``day`` by one and zero both accumulators
3. Clear the intraday trade-size and slippage windows
4. Set the next target from live pool depth (depth * target_multiplier)
5. Redraw the pivot from the corridor model

All DayCycle and window state is owned here; callers only read copies.
"""

from dataclasses import replace
from decimal import Decimal
from enum import Enum

from ammsim.aggregator.windows import IntradayWindow, TrailingWindow
from ammsim.config import DayCycleSettings
from ammsim.decimals import ZERO
from ammsim.exceptions import InvariantViolation
from ammsim.generator.corridor import CorridorModel
from ammsim.logging import get_logger
from ammsim.models import DayCycle, PriceCorridor

logger = get_logger(__name__)


class DailyMetric(str, Enum):
    """Per-day totals kept in trailing windows."""

    VOLUME = "volume"
    FEES = "fees"


class IntradayMetric(str, Enum):
    """Per-trade samples kept in intraday windows."""

    TRADE_SIZE = "trade_size"
    SLIPPAGE = "slippage"


class DayCycleAggregator:
    """Owns "today" and the trailing/intraday windows.

    Args:
        settings: Day-cycle settings (volatility, multiplier, window depth).
        corridor_model: Corridor and pivot derivation.
        initial_pivot: Day 1 pivot tick.
        initial_target: Day 1 volume target; drawn around
            ``settings.avg_daily_volume`` when omitted.

    Raises:
        ConfigurationInconsistency: If the configured volatility cannot be
            represented on the tick grid.
    """

    def __init__(
        self,
        settings: DayCycleSettings,
        corridor_model: CorridorModel,
        initial_pivot: int,
        initial_target: Decimal | None = None,
    ) -> None:
        self._settings = settings
        self._corridor_model = corridor_model
        self._volatility = settings.volatility

        # Fail at startup rather than on the first trade
        corridor_model.corridor(initial_pivot, self._volatility)

        if initial_target is None:
            initial_target = corridor_model.initial_target_volume()

        self._today = DayCycle(
            day=1,
            accumulated_quote_volume=ZERO,
            target_quote_volume=initial_target,
            pivot_tick=initial_pivot,
            accumulated_fees=ZERO,
        )
        self._trailing: dict[DailyMetric, TrailingWindow] = {
            metric: TrailingWindow(settings.trailing_depth) for metric in DailyMetric
        }
        self._intraday: dict[IntradayMetric, IntradayWindow] = {
            metric: IntradayWindow() for metric in IntradayMetric
        }

    @property
    def state(self) -> DayCycle:
        """Copy of today's state."""
        return replace(self._today)

    @property
    def day(self) -> int:
        return self._today.day

    @property
    def volatility(self) -> Decimal:
        return self._volatility

    @volatility.setter
    def volatility(self, value: Decimal) -> None:
        # Validate before accepting so a bad runtime change cannot reach a trade
        self._corridor_model.corridor(self._today.pivot_tick, value)
        logger.info("volatility_changed", previous=str(self._volatility), volatility=str(value))
        self._volatility = value

    def corridor(self) -> PriceCorridor:
        """Today's corridor around the current pivot."""
        return self._corridor_model.corridor(self._today.pivot_tick, self._volatility)

    def record_trade(self, quote_volume: Decimal, fees: Decimal, quote_depth: Decimal) -> bool:
        """Add one trade to today's totals, rolling the day over on target.

        Args:
            quote_volume: Quote-equivalent volume of the trade.
            fees: Quote-equivalent fees collected by the pool.
            quote_depth: Pool quote-side reserve plus expected-from-exit,
                used to size the next day's target on rollover.

        Returns:
            True if this trade completed the day.

        Raises:
            InvariantViolation: If volume or fees are negative.
        """
        if quote_volume < ZERO or fees < ZERO:
            raise InvariantViolation(
                f"Trade totals must be non-negative (volume={quote_volume}, fees={fees})"
            )

        today = self._today
        today.accumulated_quote_volume += quote_volume
        today.accumulated_fees += fees

        if today.accumulated_quote_volume < today.target_quote_volume:
            return False

        self._rollover(quote_depth)
        return True

    def _rollover(self, quote_depth: Decimal) -> None:
        today = self._today
        completed_day = today.day
        completed_volume = today.accumulated_quote_volume
        completed_fees = today.accumulated_fees

        self._trailing[DailyMetric.VOLUME].push(completed_volume)
        self._trailing[DailyMetric.FEES].push(completed_fees)

        for window in self._intraday.values():
            window.clear()

        self._today = DayCycle(
            day=completed_day + 1,
            accumulated_quote_volume=ZERO,
            target_quote_volume=quote_depth * self._settings.target_multiplier,
            pivot_tick=self._corridor_model.next_pivot(today.pivot_tick, self._volatility),
            accumulated_fees=ZERO,
        )

        logger.info(
            "day_rolled_over",
            completed_day=completed_day,
            volume=str(completed_volume),
            fees=str(completed_fees),
            day=self._today.day,
            target=str(self._today.target_quote_volume),
            pivot_tick=self._today.pivot_tick,
        )

    def record_sample(self, kind: IntradayMetric, value: Decimal) -> None:
        self._intraday[kind].push(value)

    def trailing_average(self, kind: DailyMetric) -> Decimal:
        """Average over the stored days plus today when today is nonzero."""
        if kind is DailyMetric.VOLUME:
            today = self._today.accumulated_quote_volume
        else:
            today = self._today.accumulated_fees
        return self._trailing[kind].average_with(today)

    def intraday_average(self, kind: IntradayMetric) -> Decimal:
        return self._intraday[kind].mean()

    def history(self, kind: DailyMetric) -> list[Decimal]:
        """Completed-day values of ``kind``, oldest first."""
        return self._trailing[kind].values()

    def intraday_count(self, kind: IntradayMetric) -> int:
        return len(self._intraday[kind])
