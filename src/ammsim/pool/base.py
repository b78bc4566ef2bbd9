"""Abstract pool and price-oracle interfaces.

The simulator never implements AMM accounting itself: it depends ONLY on
these contracts. The concrete pool is resolved from configuration at
startup (see ``ammsim.pool.factory``) and passed explicitly to the
components that need it.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any

from ammsim.models import Side, SideStats, SwapResult, TradeIntent, TwoSided


class Pool(ABC):
    """Contract of the AMM pool driven by the simulator."""

    @property
    @abstractmethod
    def cur_tick(self) -> int:
        """Current price tick."""
        ...

    @abstractmethod
    def estimate_impact_ticks(self, intent: TradeIntent) -> int:
        """Estimate how many ticks ``intent`` would move the price.

        Must be read-only: the pool state is identical before and after.
        """
        ...

    @abstractmethod
    def swap(self, intent: TradeIntent) -> SwapResult:
        """Execute ``intent`` against the pool, mutating its reserves."""
        ...

    @property
    @abstractmethod
    def reserves(self) -> TwoSided[Decimal]:
        """Cumulative per-side totals after the last trade."""
        ...

    @property
    @abstractmethod
    def deposited_reserves(self) -> TwoSided[Decimal]:
        """Original capital, immutable after initialisation."""
        ...

    @property
    @abstractmethod
    def tvl_quote(self) -> Decimal:
        """Total value locked, in quote units."""
        ...

    @property
    @abstractmethod
    def impermanent_loss(self) -> TwoSided[Decimal]:
        """Per-side impermanent loss as fractions."""
        ...

    @property
    @abstractmethod
    def stats_by_side(self) -> TwoSided[SideStats]:
        ...

    @property
    def liquidity_digest(self) -> Any:
        """Opaque structure for visualisation. Not consumed by the simulator."""
        return None


class PriceOracle(ABC):
    """Converts between ticks and prices on the pool's grid."""

    @abstractmethod
    def price(self, tick: int, side: Side) -> Decimal:
        """Price of ``side`` at ``tick``, in units of the other asset."""
        ...

    @abstractmethod
    def tick_for_price(self, price: Decimal) -> int:
        """Approximate inverse of ``price(tick, Side.BASE)``."""
        ...
