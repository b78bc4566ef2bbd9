"""Tests for trailing and intraday rolling windows."""

from decimal import Decimal

import pytest

from ammsim.aggregator.windows import TRAILING_DEPTH, IntradayWindow, TrailingWindow


class TestTrailingWindow:
    def test_default_depth(self) -> None:
        window = TrailingWindow()
        for v in range(TRAILING_DEPTH + 1):
            window.push(Decimal(v))
        assert len(window) == TRAILING_DEPTH == 29
        assert window.values()[0] == Decimal(1)

    def test_evicts_oldest_first(self) -> None:
        window = TrailingWindow(depth=3)
        for v in range(1, 6):
            window.push(Decimal(v))
        assert window.values() == [Decimal(3), Decimal(4), Decimal(5)]
        assert len(window) == 3

    def test_invalid_depth(self) -> None:
        with pytest.raises(ValueError):
            TrailingWindow(depth=0)

    def test_empty_and_idle_today_is_zero(self) -> None:
        assert TrailingWindow().average_with(Decimal("0")) == Decimal("0")

    def test_idle_today_excluded(self) -> None:
        window = TrailingWindow()
        window.push(Decimal("10"))
        window.push(Decimal("20"))
        assert window.average_with(Decimal("0")) == Decimal("15")

    def test_partial_today_counts_as_one_sample(self) -> None:
        window = TrailingWindow()
        window.push(Decimal("10"))
        window.push(Decimal("20"))
        assert window.average_with(Decimal("30")) == Decimal("20")

    def test_only_today(self) -> None:
        assert TrailingWindow().average_with(Decimal("7")) == Decimal("7")


class TestIntradayWindow:
    def test_empty_mean_is_zero(self) -> None:
        assert IntradayWindow().mean() == Decimal("0")

    def test_mean(self) -> None:
        window = IntradayWindow()
        for v in ("1", "2", "6"):
            window.push(Decimal(v))
        assert window.mean() == Decimal("3")
        assert len(window) == 3

    def test_unbounded(self) -> None:
        window = IntradayWindow()
        for _ in range(1000):
            window.push(Decimal("1"))
        assert len(window) == 1000

    def test_clear(self) -> None:
        window = IntradayWindow()
        window.push(Decimal("5"))
        window.clear()
        assert len(window) == 0
        assert window.mean() == Decimal("0")
