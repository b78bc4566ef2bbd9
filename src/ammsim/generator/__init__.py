"""Corridor/pivot model and corridor-bounded trade generation."""

from ammsim.generator.corridor import (
    CorridorModel,
    derive_corridor,
    initial_target_volume,
    next_pivot,
    volatility_to_ticks,
)
from ammsim.generator.trade import TradeGenerator, choose_direction, size_trade

__all__ = [
    "CorridorModel",
    "TradeGenerator",
    "choose_direction",
    "derive_corridor",
    "initial_target_volume",
    "next_pivot",
    "size_trade",
    "volatility_to_ticks",
]
