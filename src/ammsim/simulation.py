"""Simulation driver -- applies synthetic trades and samples metrics.

Runs two independently paced asyncio tasks over the same pool and
aggregator:

  1. PACING: while not paused, generate one trade, apply it to the pool
     and report it to the aggregator, then sleep for the speed-derived
     interval.
  2. SAMPLING: on a fixed cadence, assemble a MetricsSnapshot and hand
     it to the optional publisher. Never mutates.

Both tasks share one event loop. ``step()`` and ``snapshot()`` contain no
await, so the sampler always sees a trade either fully applied (pool and
aggregator) or not at all, and no lock is required.

A fatal error in a trade (InvariantViolation, ConfigurationInconsistency)
stops both tasks and is re-raised from ``wait()``. The pool is no longer
trusted afterwards: ``step()``, ``resume()`` and ``start()`` refuse to run.
"""

from __future__ import annotations

import asyncio
from decimal import Decimal
from typing import Any, Awaitable, Callable

import structlog

from ammsim.aggregator.day_cycle import DailyMetric, DayCycleAggregator, IntradayMetric
from ammsim.config import AppSettings, RuntimeConfig
from ammsim.decimals import ZERO
from ammsim.exceptions import InvariantViolation, SimulationError
from ammsim.generator.trade import TradeGenerator
from ammsim.logging import get_logger
from ammsim.metrics.snapshot import build_snapshot
from ammsim.models import MetricsSnapshot, Side, TradeIntent, TradeRecord
from ammsim.pool.base import Pool, PriceOracle

logger = get_logger(__name__)

MIN_SPEED = 1
MAX_SPEED = 100

Publisher = Callable[[MetricsSnapshot], Awaitable[None]]


def trade_interval(speed: int) -> float:
    """Seconds between trades: ~1s at speed 1, 10ms at speed 100."""
    return (MAX_SPEED + 1 - speed) / 100


class Simulation:
    """Closed loop of trade generator, pool and day-cycle aggregator.

    Args:
        settings: Application-wide settings.
        pool: The pool trades are applied to.
        oracle: Tick/price conversions.
        generator: Corridor-bounded trade generator.
        aggregator: Day cycle and rolling windows.
        publish: Optional coroutine receiving each sampled snapshot.
    """

    def __init__(
        self,
        settings: AppSettings,
        pool: Pool,
        oracle: PriceOracle,
        generator: TradeGenerator,
        aggregator: DayCycleAggregator,
        publish: Publisher | None = None,
    ) -> None:
        self._settings = settings
        self._pool = pool
        self._oracle = oracle
        self._generator = generator
        self._aggregator = aggregator
        self._publish = publish

        self._speed = self._validate_speed(settings.simulation.speed)
        self._sample_interval = settings.simulation.sample_interval
        self._paused = settings.simulation.start_paused
        self._running = False
        self._fee_factor: Decimal = ZERO
        self._trades_executed = 0
        self._last_trade: TradeRecord | None = None
        self._latest_snapshot: MetricsSnapshot | None = None
        self._error: BaseException | None = None
        self._stopped: asyncio.Event | None = None
        self._pacing_task: asyncio.Task | None = None  # type: ignore[type-arg]
        self._sampler_task: asyncio.Task | None = None  # type: ignore[type-arg]

    # ------------------------------------------------------------------
    # Trades and snapshots (synchronous, atomic w.r.t. the event loop)
    # ------------------------------------------------------------------

    def step(self, intent: TradeIntent | None = None) -> TradeRecord:
        """Generate (unless given) and fully apply one trade.

        Args:
            intent: Trade to apply instead of a generated one.

        Returns:
            The applied trade.

        Raises:
            InvariantViolation: If the swap decreased either side's reserve.
            SimulationError: If the run was aborted by an earlier fatal error.
        """
        self._ensure_not_aborted()

        pool = self._pool
        tick_before = pool.cur_tick

        if intent is None:
            intent = self._generator.generate(pool, self._aggregator.corridor())

        base_price = self._oracle.price(tick_before, Side.BASE)
        paid_in_base = intent.direction.input_side is Side.BASE
        quote_volume = intent.quantity_in * base_price if paid_in_base else intent.quantity_in

        reserves_before = pool.reserves
        result = pool.swap(intent)
        reserves_after = pool.reserves

        for side in Side:
            before, after = reserves_before.get(side), reserves_after.get(side)
            if after < before:
                raise InvariantViolation(
                    f"{side.value.capitalize()} reserve has decreased! "
                    f"(after - before = {after - before})"
                )

        quote_fees = result.fees_in * base_price if paid_in_base else result.fees_in

        self._aggregator.record_sample(IntradayMetric.TRADE_SIZE, quote_volume)
        self._aggregator.record_sample(IntradayMetric.SLIPPAGE, result.slippage)
        rolled_over = self._aggregator.record_trade(
            quote_volume, quote_fees, pool.stats_by_side.quote.depth
        )

        self._fee_factor = result.fee_factor
        self._trades_executed += 1

        record = TradeRecord(
            intent=intent,
            quote_volume=quote_volume,
            quote_fees=quote_fees,
            slippage=result.slippage,
            fee_factor=result.fee_factor,
            tick_before=tick_before,
            tick_after=pool.cur_tick,
            rolled_over=rolled_over,
        )
        self._last_trade = record
        return record

    def snapshot(self) -> MetricsSnapshot:
        """Assemble a metrics snapshot from current state."""
        return build_snapshot(self._pool, self._oracle, self._aggregator, self._fee_factor)

    @property
    def latest_snapshot(self) -> MetricsSnapshot | None:
        """Snapshot taken by the most recent sampler tick."""
        return self._latest_snapshot

    @property
    def last_trade(self) -> TradeRecord | None:
        return self._last_trade

    @property
    def aggregator(self) -> DayCycleAggregator:
        return self._aggregator

    # ------------------------------------------------------------------
    # Controls
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def error(self) -> BaseException | None:
        """Fatal error that aborted the run, if any."""
        return self._error

    @property
    def is_aborted(self) -> bool:
        return self._error is not None

    @property
    def is_paused(self) -> bool:
        return self._paused

    @property
    def speed(self) -> int:
        return self._speed

    @property
    def trade_interval(self) -> float:
        return trade_interval(self._speed)

    def pause(self) -> None:
        """Stop trading before the next scheduled trade. Sampling continues."""
        if not self._paused:
            self._paused = True
            logger.info("simulation_paused", day=self._aggregator.day)

    def resume(self) -> None:
        """Restart trading.

        Raises:
            SimulationError: If the run was aborted; the pool is no longer trusted.
        """
        self._ensure_not_aborted()
        if self._paused:
            self._paused = False
            logger.info("simulation_resumed", day=self._aggregator.day)

    def set_speed(self, speed: int) -> None:
        self._speed = self._validate_speed(speed)
        logger.info("speed_changed", speed=self._speed, interval=self.trade_interval)

    def set_volatility(self, volatility: Decimal) -> None:
        """Change volatility for subsequent corridors.

        Raises:
            ConfigurationInconsistency: If the value is narrower than one tick.
        """
        self._aggregator.volatility = volatility

    def apply_runtime_config(self, config: RuntimeConfig) -> None:
        """Apply non-None fields of ``config``. Validates everything before changing anything."""
        if config.speed is not None:
            self._validate_speed(config.speed)
        if config.volatility is not None:
            self.set_volatility(config.volatility)
        if config.speed is not None:
            self.set_speed(config.speed)

    def _ensure_not_aborted(self) -> None:
        if self._error is not None:
            raise SimulationError(f"Simulation was aborted: {self._error}")

    @staticmethod
    def _validate_speed(speed: int) -> int:
        if not MIN_SPEED <= speed <= MAX_SPEED:
            raise ValueError(f"speed must be in [{MIN_SPEED}, {MAX_SPEED}], got {speed}")
        return speed

    def get_status(self) -> dict[str, Any]:
        """Return current simulation status."""
        today = self._aggregator.state
        corridor = self._aggregator.corridor()
        return {
            "running": self._running,
            "paused": self._paused,
            "speed": self._speed,
            "volatility": str(self._aggregator.volatility),
            "day": today.day,
            "pivot_tick": today.pivot_tick,
            "corridor": [corridor.left_tick, corridor.right_tick],
            "cur_tick": self._pool.cur_tick,
            "accumulated_quote_volume": str(today.accumulated_quote_volume),
            "target_quote_volume": str(today.target_quote_volume),
            "accumulated_fees": str(today.accumulated_fees),
            "trades_executed": self._trades_executed,
            "aborted": self._error is not None,
            "error": str(self._error) if self._error is not None else None,
        }

    def get_history(self) -> dict[str, list[str]]:
        """Completed-day volume and fee windows, oldest first."""
        return {
            metric.value: [str(v) for v in self._aggregator.history(metric)]
            for metric in DailyMetric
        }

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Launch the pacing and sampling tasks and return immediately."""
        if self._running:
            logger.warning("simulation_already_running")
            return

        self._ensure_not_aborted()
        self._running = True
        self._stopped = asyncio.Event()
        self._pacing_task = asyncio.create_task(self._pacing_loop())
        self._sampler_task = asyncio.create_task(self._sampler_loop())

        logger.info(
            "simulation_started",
            speed=self._speed,
            paused=self._paused,
            sample_interval=self._sample_interval,
            day=self._aggregator.day,
        )

    async def stop(self) -> None:
        """Cancel both tasks and wait for them to finish."""
        self._running = False
        current = asyncio.current_task()
        for task in (self._pacing_task, self._sampler_task):
            if task is None or task is current:
                continue
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._pacing_task = None
        self._sampler_task = None
        if self._stopped is not None:
            self._stopped.set()
        logger.info("simulation_stopped", trades_executed=self._trades_executed)

    async def wait(self) -> None:
        """Block until the simulation stops; re-raise a fatal trade error."""
        if self._stopped is not None:
            await self._stopped.wait()
        if self._error is not None:
            raise self._error

    async def abort(self, error: BaseException) -> None:
        """Stop on a fatal error; ``wait()`` re-raises it."""
        logger.critical(
            "simulation_aborted",
            error=str(error),
            day=self._aggregator.day,
            exc_info=error,
        )
        self._error = error
        await self.stop()

    async def _pacing_loop(self) -> None:
        structlog.contextvars.bind_contextvars(task="pacing")
        while self._running:
            if not self._paused:
                try:
                    self.step()
                except asyncio.CancelledError:
                    raise
                except Exception as e:
                    await self.abort(e)
                    return
            await asyncio.sleep(self.trade_interval)

    async def _sampler_loop(self) -> None:
        structlog.contextvars.bind_contextvars(task="sampler")
        while self._running:
            try:
                snapshot = self.snapshot()
                self._latest_snapshot = snapshot
                if self._publish is not None:
                    await self._publish(snapshot)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.warning("sampler_error", exc_info=True)
            await asyncio.sleep(self._sample_interval)
