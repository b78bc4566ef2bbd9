"""Shared test fixtures for the AMM order-flow simulator."""

import random
from decimal import Decimal

import pytest

from ammsim.aggregator.day_cycle import DayCycleAggregator
from ammsim.config import (
    AppSettings,
    DashboardSettings,
    DayCycleSettings,
    PoolSettings,
    SimulationSettings,
    TradeGenSettings,
)
from ammsim.generator.corridor import CorridorModel
from ammsim.generator.trade import TradeGenerator
from ammsim.pool.oracle import TickOracle

from fakes import FakePool

MARKET_TICK = 114445


@pytest.fixture
def mock_settings() -> AppSettings:
    """Return AppSettings with test defaults (seeded, fast sampler, no feed)."""
    return AppSettings(
        log_level="DEBUG",
        pool=PoolSettings(factory="fakes:create_pool"),
        tradegen=TradeGenSettings(),
        day_cycle=DayCycleSettings(),
        simulation=SimulationSettings(speed=100, sample_interval=0.01, seed=42),
        dashboard=DashboardSettings(enabled=False),
    )


@pytest.fixture
def oracle() -> TickOracle:
    return TickOracle()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def fake_pool() -> FakePool:
    return FakePool(tick=MARKET_TICK)


@pytest.fixture
def corridor_model(
    mock_settings: AppSettings, oracle: TickOracle, rng: random.Random
) -> CorridorModel:
    return CorridorModel(mock_settings.day_cycle, oracle, rng, MARKET_TICK)


@pytest.fixture
def aggregator(mock_settings: AppSettings, corridor_model: CorridorModel) -> DayCycleAggregator:
    """Aggregator on day 1 with a 1,000,000 quote-unit target."""
    return DayCycleAggregator(
        mock_settings.day_cycle,
        corridor_model,
        initial_pivot=MARKET_TICK,
        initial_target=Decimal("1000000"),
    )


@pytest.fixture
def generator(mock_settings: AppSettings, rng: random.Random) -> TradeGenerator:
    return TradeGenerator(mock_settings.tradegen, rng)
