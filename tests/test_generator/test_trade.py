"""Tests for corridor-bounded trade generation.

Covers:
- Direction forced back toward the corridor when the tick is outside
- In-corridor direction probability and usable width per side
- Size search: accepts the first halving that fits, clamps to the floor,
  and never makes more than ceil(log2(default / floor)) + 1 estimates
"""

import math
import random
from decimal import Decimal

import pytest

from ammsim.config import TradeGenSettings
from ammsim.generator.trade import TradeGenerator, choose_direction, size_trade
from ammsim.models import PriceCorridor, SwapDirection

from fakes import FakePool, FixedRandom

CORRIDOR = PriceCorridor(left_tick=100, right_tick=200)


class TestChooseDirection:
    def test_below_corridor_buys_base(self) -> None:
        direction, width = choose_direction(90, CORRIDOR, FixedRandom(0.0))
        assert direction is SwapDirection.QUOTE_TO_BASE
        # left clamped to 90: 200 - 90 + 1
        assert width == 111

    def test_above_corridor_sells_base(self) -> None:
        direction, width = choose_direction(230, CORRIDOR, FixedRandom(0.99))
        assert direction is SwapDirection.BASE_TO_QUOTE
        # right clamped to 230: 230 - 100 + 1
        assert width == 131

    def test_inside_low_draw_sells_base(self) -> None:
        """cur=150: P(base -> quote) = 50 / 101."""
        direction, width = choose_direction(150, CORRIDOR, FixedRandom(0.4))
        assert direction is SwapDirection.BASE_TO_QUOTE
        assert width == 50

    def test_inside_high_draw_buys_base(self) -> None:
        direction, width = choose_direction(150, CORRIDOR, FixedRandom(0.6))
        assert direction is SwapDirection.QUOTE_TO_BASE
        assert width == 51

    def test_on_left_edge_leans_to_buying(self) -> None:
        direction, width = choose_direction(100, CORRIDOR, FixedRandom(0.01))
        assert direction is SwapDirection.QUOTE_TO_BASE
        assert width == 101

    def test_on_right_edge_leans_to_selling(self) -> None:
        direction, width = choose_direction(200, CORRIDOR, FixedRandom(0.98))
        assert direction is SwapDirection.BASE_TO_QUOTE
        assert width == 100

    def test_direction_frequency_tracks_position(self) -> None:
        """Near the right edge most trades push the price down."""
        rng = random.Random(5)
        draws = [choose_direction(190, CORRIDOR, rng)[0] for _ in range(4000)]
        sells = sum(1 for d in draws if d is SwapDirection.BASE_TO_QUOTE)
        assert 0.85 < sells / len(draws) < 0.93  # expected 90 / 101


class TestSizeTrade:
    def test_default_accepted_when_it_fits(self) -> None:
        pool = FakePool(base_per_tick=Decimal("0.01"))
        qty = size_trade(pool, SwapDirection.BASE_TO_QUOTE, 10, Decimal("0.1"), Decimal("0.001"))
        assert qty == Decimal("0.1")
        assert len(pool.estimate_calls) == 1

    def test_halves_until_it_fits(self) -> None:
        """0.1 -> 10 ticks, 0.05 -> 5, 0.025 -> 3 (fits 3)."""
        pool = FakePool(base_per_tick=Decimal("0.01"))
        qty = size_trade(pool, SwapDirection.BASE_TO_QUOTE, 3, Decimal("0.1"), Decimal("0.001"))
        assert qty == Decimal("0.025")
        assert [c.quantity_in for c in pool.estimate_calls] == [
            Decimal("0.1"),
            Decimal("0.05"),
            Decimal("0.025"),
        ]

    def test_clamps_to_floor(self) -> None:
        pool = FakePool(quote_per_tick=Decimal("1"))
        qty = size_trade(pool, SwapDirection.QUOTE_TO_BASE, 0, Decimal("10000"), Decimal("100"))
        assert qty == Decimal("100")

    def test_estimates_are_read_only(self) -> None:
        pool = FakePool(tick=150)
        size_trade(pool, SwapDirection.QUOTE_TO_BASE, 0, Decimal("10000"), Decimal("100"))
        assert pool.cur_tick == 150
        assert pool.swaps == []

    @pytest.mark.parametrize(
        "default,floor",
        [
            (Decimal("0.1"), Decimal("0.001")),
            (Decimal("10000"), Decimal("100")),
            (Decimal("1"), Decimal("1")),
            (Decimal("1024"), Decimal("1")),
        ],
    )
    def test_estimate_count_bounded(self, default: Decimal, floor: Decimal) -> None:
        pool = FakePool(quote_per_tick=Decimal("0.000001"))
        size_trade(pool, SwapDirection.QUOTE_TO_BASE, 0, default, floor)
        bound = math.ceil(math.log2(default / floor)) + 1
        assert len(pool.estimate_calls) <= bound


class TestTradeGenerator:
    def test_impact_within_width_or_floor(self) -> None:
        """Over many random states the chosen size fits the room or is the floor."""
        settings = TradeGenSettings()
        state_rng = random.Random(11)

        for seed in range(300):
            left = state_rng.randint(-1000, 1000)
            corridor = PriceCorridor(left, left + state_rng.randint(1, 400))
            cur = state_rng.randint(left - 200, corridor.right_tick + 200)
            pool = FakePool(
                tick=cur,
                base_per_tick=Decimal(state_rng.randint(1, 50)) / Decimal("1000"),
                quote_per_tick=Decimal(state_rng.randint(1, 5000)),
            )

            direction, width = choose_direction(cur, corridor, random.Random(seed))
            generator = TradeGenerator(settings, random.Random(seed))
            intent = generator.generate(pool, corridor)

            assert intent.direction is direction
            _, floor = generator.bounds(direction)
            impact = pool.estimate_impact_ticks(intent)
            assert impact <= width or intent.quantity_in == floor

    def test_bounds_per_asset(self) -> None:
        generator = TradeGenerator(TradeGenSettings(), random.Random(0))
        assert generator.bounds(SwapDirection.BASE_TO_QUOTE) == (Decimal("0.1"), Decimal("0.001"))
        assert generator.bounds(SwapDirection.QUOTE_TO_BASE) == (Decimal("10000"), Decimal("100"))

    def test_outside_corridor_forces_direction(self) -> None:
        generator = TradeGenerator(TradeGenSettings(), random.Random(0))
        pool = FakePool(tick=50)
        intent = generator.generate(pool, CORRIDOR)
        assert intent.direction is SwapDirection.QUOTE_TO_BASE

    def test_custom_bounds_from_settings(self) -> None:
        settings = TradeGenSettings(quote_default_qty=Decimal("500"), quote_min_qty=Decimal("50"))
        generator = TradeGenerator(settings, random.Random(0))
        pool = FakePool(tick=50, quote_per_tick=Decimal("1000"))
        intent = generator.generate(pool, CORRIDOR)
        assert intent.quantity_in == Decimal("500")
