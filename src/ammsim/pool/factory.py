"""Resolve the pool implementation named in configuration."""

import importlib
from typing import Callable

from ammsim.config import PoolSettings
from ammsim.exceptions import ConfigurationInconsistency
from ammsim.logging import get_logger
from ammsim.pool.base import Pool

logger = get_logger(__name__)

PoolFactory = Callable[[PoolSettings], Pool]


def load_pool_factory(path: str) -> PoolFactory:
    """Import a ``"package.module:callable"`` pool factory.

    Args:
        path: Import path of a callable taking PoolSettings and returning a Pool.

    Returns:
        The resolved callable.

    Raises:
        ConfigurationInconsistency: If the path is empty, malformed, or
            does not resolve to a callable.
    """
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise ConfigurationInconsistency(
            f"Pool factory must look like 'package.module:callable', got {path!r}"
        )

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationInconsistency(f"Cannot import pool module {module_name!r}: {e}") from e

    factory = getattr(module, attr, None)
    if not callable(factory):
        raise ConfigurationInconsistency(f"{path!r} is not a callable pool factory")

    logger.info("pool_factory_loaded", factory=path)
    return factory


def create_pool(settings: PoolSettings) -> Pool:
    """Build the configured pool and check it honours the Pool contract."""
    factory = load_pool_factory(settings.factory)
    pool = factory(settings)
    if not isinstance(pool, Pool):
        raise ConfigurationInconsistency(
            f"Pool factory {settings.factory!r} returned {type(pool).__name__}, not a Pool"
        )
    logger.info("pool_created", cur_tick=pool.cur_tick, tvl_quote=str(pool.tvl_quote))
    return pool
