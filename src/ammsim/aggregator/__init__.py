"""Day cycle and rolling-window aggregation."""

from ammsim.aggregator.day_cycle import DailyMetric, DayCycleAggregator, IntradayMetric
from ammsim.aggregator.windows import TRAILING_DEPTH, IntradayWindow, TrailingWindow

__all__ = [
    "TRAILING_DEPTH",
    "DailyMetric",
    "DayCycleAggregator",
    "IntradayMetric",
    "IntradayWindow",
    "TrailingWindow",
]
