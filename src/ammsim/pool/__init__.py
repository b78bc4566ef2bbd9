"""Pool and price-oracle contracts consumed by the simulator."""

from ammsim.pool.base import Pool, PriceOracle
from ammsim.pool.factory import create_pool, load_pool_factory
from ammsim.pool.oracle import BASE_PRICE, TickOracle

__all__ = [
    "BASE_PRICE",
    "Pool",
    "PriceOracle",
    "TickOracle",
    "create_pool",
    "load_pool_factory",
]
