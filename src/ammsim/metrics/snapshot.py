"""Metrics snapshot assembly for the display feed.

Pure Decimal arithmetic over pool state and aggregator windows; reads
only, never mutates either.
"""

from decimal import Decimal

from ammsim.aggregator.day_cycle import DailyMetric, DayCycleAggregator, IntradayMetric
from ammsim.decimals import HUNDRED, ZERO
from ammsim.models import MetricsSnapshot, Side, SideMetrics
from ammsim.pool.base import Pool, PriceOracle

DAYS_PER_YEAR = 365


def annualized_apr(avg_daily_fees: Decimal, tvl_quote: Decimal) -> Decimal:
    """Average daily fees over TVL, in percent per year. Zero when TVL is zero."""
    if tvl_quote == ZERO:
        return ZERO
    return avg_daily_fees / tvl_quote * HUNDRED * DAYS_PER_YEAR


def side_metrics(pool: Pool, side: Side) -> SideMetrics:
    """Reserve, inventory, profit and IL for one asset side.

    Profit compares what the side holds plus what it expects back from
    exiting inventory against the capital originally deposited.
    """
    stats = pool.stats_by_side.get(side)
    deposited = pool.deposited_reserves.get(side)

    profit = stats.depth - deposited
    profit_percent = profit / deposited * HUNDRED if deposited != ZERO else ZERO

    return SideMetrics(
        reserve=stats.actual_reserve,
        inventory=stats.respective_reserve,
        profit=profit,
        profit_percent=profit_percent,
        impermanent_loss_percent=pool.impermanent_loss.get(side) * HUNDRED,
    )


def build_snapshot(
    pool: Pool,
    oracle: PriceOracle,
    aggregator: DayCycleAggregator,
    fee_factor: Decimal,
) -> MetricsSnapshot:
    """Assemble a MetricsSnapshot from current pool and aggregator state.

    Args:
        pool: The simulated pool.
        oracle: Tick/price conversions for the current price.
        aggregator: Day cycle and rolling windows.
        fee_factor: Latest realised fee rate (fraction), zero before any trade.

    Returns:
        A frozen snapshot.
    """
    avg_fees_30d = aggregator.trailing_average(DailyMetric.FEES)

    return MetricsSnapshot(
        day=aggregator.day,
        current_price=oracle.price(pool.cur_tick, Side.BASE),
        current_fee_factor_percent=fee_factor * HUNDRED,
        avg_apr=annualized_apr(avg_fees_30d, pool.tvl_quote),
        avg_volume_30d=aggregator.trailing_average(DailyMetric.VOLUME),
        avg_fees_30d=avg_fees_30d,
        avg_trade_size_intraday=aggregator.intraday_average(IntradayMetric.TRADE_SIZE),
        avg_slippage_percent_intraday=aggregator.intraday_average(IntradayMetric.SLIPPAGE) * HUNDRED,
        base=side_metrics(pool, Side.BASE),
        quote=side_metrics(pool, Side.QUOTE),
    )
