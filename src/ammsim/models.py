"""Shared data models for the AMM order-flow simulator.

CRITICAL: All monetary values use Decimal. Never use float for prices, quantities, or fees.
"""

import time
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Generic, TypeVar

from ammsim.decimals import ZERO, format_short

T = TypeVar("T")


class SwapDirection(str, Enum):
    """Trade direction as seen by the trader."""

    BASE_TO_QUOTE = "base -> quote"
    QUOTE_TO_BASE = "quote -> base"

    @property
    def input_side(self) -> "Side":
        """The asset the trader pays in."""
        return Side.BASE if self is SwapDirection.BASE_TO_QUOTE else Side.QUOTE


class Side(str, Enum):
    """Side of the traded pair. Quote is the pricing unit."""

    BASE = "base"
    QUOTE = "quote"


@dataclass(frozen=True)
class TwoSided(Generic[T]):
    """A value kept once per asset side."""

    base: T
    quote: T

    def get(self, side: Side) -> T:
        return self.base if side is Side.BASE else self.quote


@dataclass(frozen=True)
class PriceCorridor:
    """Inclusive tick band ``[left_tick, right_tick]`` for the current day."""

    left_tick: int
    right_tick: int

    @property
    def width(self) -> int:
        """Number of ticks in the band, both ends included."""
        return self.right_tick - self.left_tick + 1

    def contains(self, tick: int) -> bool:
        return self.left_tick <= tick <= self.right_tick


@dataclass
class DayCycle:
    """Live mutable state of "today".

    Accumulators only grow within a day and are reset to zero exactly at
    rollover; ``day`` increments by one per rollover.
    """

    day: int
    accumulated_quote_volume: Decimal
    target_quote_volume: Decimal
    pivot_tick: int
    accumulated_fees: Decimal = ZERO


@dataclass(frozen=True)
class TradeIntent:
    """Direction and input quantity of one synthetic trade."""

    direction: SwapDirection
    quantity_in: Decimal


@dataclass(frozen=True)
class SwapResult:
    """Realised outcome reported by the pool for one swap.

    ``fees_in`` is denominated in the input asset; ``slippage`` and
    ``fee_factor`` are fractions.
    """

    fee_factor: Decimal
    fees_in: Decimal
    slippage: Decimal


@dataclass(frozen=True)
class SideStats:
    """Pool accounting for one asset side."""

    actual_reserve: Decimal
    expected_reserve_from_exit: Decimal
    deposited_reserve: Decimal
    respective_reserve: Decimal

    @property
    def depth(self) -> Decimal:
        """Reserve plus what the side expects back when inventory is exited."""
        return self.actual_reserve + self.expected_reserve_from_exit


@dataclass(frozen=True)
class TradeRecord:
    """Result of one trade fully applied to the pool and the aggregator."""

    intent: TradeIntent
    quote_volume: Decimal
    quote_fees: Decimal
    slippage: Decimal
    fee_factor: Decimal
    tick_before: int
    tick_after: int
    rolled_over: bool
    executed_at: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        return {
            "direction": self.intent.direction.value,
            "quantity_in": str(self.intent.quantity_in),
            "quote_volume": str(self.quote_volume),
            "quote_fees": str(self.quote_fees),
            "slippage": str(self.slippage),
            "fee_factor": str(self.fee_factor),
            "tick_before": self.tick_before,
            "tick_after": self.tick_after,
            "rolled_over": self.rolled_over,
            "executed_at": self.executed_at,
        }


@dataclass(frozen=True)
class SideMetrics:
    """Per-asset block of a metrics snapshot."""

    reserve: Decimal
    inventory: Decimal
    profit: Decimal
    profit_percent: Decimal
    impermanent_loss_percent: Decimal


@dataclass(frozen=True)
class MetricsSnapshot:
    """Flat read-only metrics record assembled on each sampler tick."""

    day: int
    current_price: Decimal
    current_fee_factor_percent: Decimal
    avg_apr: Decimal
    avg_volume_30d: Decimal
    avg_fees_30d: Decimal
    avg_trade_size_intraday: Decimal
    avg_slippage_percent_intraday: Decimal
    base: SideMetrics
    quote: SideMetrics
    sampled_at: float = field(default_factory=time.time)

    def to_dict(self, humanize: bool = False) -> dict[str, Any]:
        """Serialise for JSON. Decimals become strings, short-form when ``humanize``."""
        render = format_short if humanize else str

        def side(m: SideMetrics) -> dict[str, str]:
            return {
                "reserve": render(m.reserve),
                "inventory": render(m.inventory),
                "profit": render(m.profit),
                "profit_percent": render(m.profit_percent),
                "impermanent_loss_percent": render(m.impermanent_loss_percent),
            }

        return {
            "day": self.day,
            "current_price": render(self.current_price),
            "current_fee_factor_percent": render(self.current_fee_factor_percent),
            "avg_apr": render(self.avg_apr),
            "avg_volume_30d": render(self.avg_volume_30d),
            "avg_fees_30d": render(self.avg_fees_30d),
            "avg_trade_size_intraday": render(self.avg_trade_size_intraday),
            "avg_slippage_percent_intraday": render(self.avg_slippage_percent_intraday),
            "base": side(self.base),
            "quote": side(self.quote),
            "sampled_at": self.sampled_at,
        }
