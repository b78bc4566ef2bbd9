"""Tests for TickOracle price/tick conversions on the 1.0001 grid."""

from decimal import Decimal

import pytest

from ammsim.exceptions import ConfigurationInconsistency
from ammsim.models import Side
from ammsim.pool.oracle import BASE_PRICE, TickOracle


@pytest.fixture
def oracle() -> TickOracle:
    return TickOracle()


class TestPrice:
    def test_tick_zero_is_parity(self, oracle: TickOracle) -> None:
        assert oracle.price(0, Side.BASE) == Decimal("1")
        assert oracle.price(0, Side.QUOTE) == Decimal("1")

    def test_tick_one_is_base_price(self, oracle: TickOracle) -> None:
        assert oracle.price(1, Side.BASE) == BASE_PRICE

    def test_quote_price_is_reciprocal(self, oracle: TickOracle) -> None:
        base = oracle.price(500, Side.BASE)
        quote = oracle.price(500, Side.QUOTE)
        assert abs(base * quote - Decimal("1")) < Decimal("1e-20")

    def test_market_tick_price_near_btc_usdt(self, oracle: TickOracle) -> None:
        """Tick 114445 is ~93,3xx quote per base."""
        price = oracle.price(114445, Side.BASE)
        assert Decimal("93000") < price < Decimal("93700")


class TestTickForPrice:
    @pytest.mark.parametrize("tick", [-5000, -1, 1, 2, 487, 114445])
    def test_exact_grid_prices_round_trip(self, oracle: TickOracle, tick: int) -> None:
        assert oracle.tick_for_price(BASE_PRICE ** tick) == tick

    def test_parity(self, oracle: TickOracle) -> None:
        assert oracle.tick_for_price(Decimal("1")) == 0

    def test_rounds_down_between_ticks(self, oracle: TickOracle) -> None:
        between = (BASE_PRICE ** 10 + BASE_PRICE ** 11) / 2
        assert oracle.tick_for_price(between) == 10

    def test_below_parity_rounds_down(self, oracle: TickOracle) -> None:
        between = (BASE_PRICE ** -11 + BASE_PRICE ** -10) / 2
        assert oracle.tick_for_price(between) == -11

    @pytest.mark.parametrize("price", [Decimal("0"), Decimal("-1")])
    def test_non_positive_price_rejected(self, oracle: TickOracle, price: Decimal) -> None:
        with pytest.raises(ConfigurationInconsistency):
            oracle.tick_for_price(price)
