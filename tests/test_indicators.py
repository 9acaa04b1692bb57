#!/usr/bin/env python3
"""
Unit tests for the Dual Thrust indicator.

Run with:
    python -m pytest tests/test_indicators.py -v

Or standalone:
    python tests/test_indicators.py
"""

import random
import sys
from pathlib import Path

import pytest

# Add project root to path for standalone execution
sys.path.insert(0, str(Path(__file__).parent.parent))

# ruff: noqa: E402
from dualthrust.core import Candle, InsufficientDataError, StrategyConfig
from dualthrust.indicators import BreakoutLevels, compute_levels, dual_thrust_range, latest_signal

HOUR_MS = 3_600_000


def scenario_candles() -> list[Candle]:
    """Three hourly candles: two for the window, one current bar."""
    return [
        Candle(time=0, open=100.0, high=105.0, low=95.0, close=102.0),
        Candle(time=HOUR_MS, open=102.0, high=104.0, low=98.0, close=100.0),
        Candle(time=2 * HOUR_MS, open=101.0, high=110.0, low=99.0, close=108.0),
    ]


def random_candles(count: int, seed: int) -> list[Candle]:
    """Generate valid random-walk candles."""
    rng = random.Random(seed)
    candles = []
    price = 100.0
    for i in range(count):
        open_ = price
        close = open_ * (1 + rng.uniform(-0.03, 0.03))
        high = max(open_, close) * (1 + rng.uniform(0, 0.02))
        low = min(open_, close) * (1 - rng.uniform(0, 0.02))
        candles.append(Candle(time=i * HOUR_MS, open=open_, high=high, low=low, close=close))
        price = close
    return candles


class TestDualThrustRange:
    """Tests for the range calculation."""

    def test_range_scenario(self):
        """Test HH/LL/HC/LC range on a known window."""
        window = scenario_candles()[:2]
        # HH=105, LL=95, HC=102, LC=100 -> max(105-100, 102-95) = 7
        assert dual_thrust_range(window) == 7.0

    def test_range_uses_close_extremes(self):
        """Test the HC - LL branch wins when closes are spread."""
        window = [
            Candle(time=0, open=100.0, high=101.0, low=90.0, close=100.0),
            Candle(time=1, open=100.0, high=101.0, low=99.0, close=100.0),
        ]
        # HH-LC = 1, HC-LL = 10
        assert dual_thrust_range(window) == 10.0

    def test_range_flat_window(self):
        """Test a window with no movement has zero range."""
        window = [Candle(time=i, open=50.0, high=50.0, low=50.0, close=50.0) for i in range(3)]
        assert dual_thrust_range(window) == 0.0

    def test_range_empty_window(self):
        """Test empty window raises instead of returning zero."""
        with pytest.raises(InsufficientDataError):
            dual_thrust_range([])

    def test_range_never_negative(self):
        """Test range >= 0 and lines bracket the open for random windows."""
        candles = random_candles(200, seed=7)
        for i in range(24, len(candles)):
            window = candles[i - 24 : i]
            levels = compute_levels(window, candles[i].open, 0.5, 0.7)
            assert levels.range >= 0
            assert levels.buy_line >= candles[i].open >= levels.sell_line


class TestComputeLevels:
    """Tests for buy/sell line calculation."""

    def test_levels_scenario(self):
        """Test buy and sell lines for the third scenario candle."""
        candles = scenario_candles()
        levels = compute_levels(candles[:2], candles[2].open, 0.5, 0.5)
        assert levels.range == 7.0
        assert levels.buy_line == 104.5
        assert levels.sell_line == 97.5

    def test_levels_asymmetric_coefficients(self):
        """Test k1 and k2 scale the lines independently."""
        candles = scenario_candles()
        levels = compute_levels(candles[:2], 101.0, 1.0, 0.2)
        assert levels.buy_line == pytest.approx(108.0)
        assert levels.sell_line == pytest.approx(99.6)

    def test_price_position(self):
        """Test classification of price against the lines."""
        levels = BreakoutLevels(buy_line=104.5, sell_line=97.5, range=7.0)
        assert levels.price_position(110.0) == "above_buy"
        assert levels.price_position(90.0) == "below_sell"
        assert levels.price_position(100.0) == "inside"
        # Touching a line is not a breakout
        assert levels.price_position(104.5) == "inside"
        assert levels.price_position(97.5) == "inside"


class TestLatestSignal:
    """Tests for the latest-candle signal."""

    def test_latest_signal_scenario(self):
        """Test lines for the newest candle use the preceding window."""
        config = StrategyConfig(k1=0.5, k2=0.5, lookback=2)
        signal = latest_signal(scenario_candles(), config)
        assert signal.time == 2 * HOUR_MS
        assert signal.current_price == 108.0
        assert signal.buy_line == 104.5
        assert signal.sell_line == 97.5
        assert signal.position == "above_buy"

    def test_latest_signal_ignores_older_candles(self):
        """Test only the last lookback candles before the current bar matter."""
        config = StrategyConfig(k1=0.5, k2=0.5, lookback=2)
        older = Candle(time=-HOUR_MS, open=100.0, high=500.0, low=1.0, close=100.0)
        with_history = latest_signal([older, *scenario_candles()], config)
        without = latest_signal(scenario_candles(), config)
        assert with_history == without

    def test_latest_signal_insufficient_data(self):
        """Test fewer than lookback + 1 candles raises."""
        config = StrategyConfig(k1=0.5, k2=0.5, lookback=3)
        with pytest.raises(InsufficientDataError) as exc:
            latest_signal(scenario_candles(), config)
        assert exc.value.required == 4
        assert exc.value.available == 3

    def test_latest_signal_to_dict(self):
        """Test serialization includes the price position."""
        config = StrategyConfig(k1=0.5, k2=0.5, lookback=2)
        data = latest_signal(scenario_candles(), config).to_dict()
        assert data["buy_line"] == 104.5
        assert data["position"] == "above_buy"


def run_tests():
    """Run all tests."""
    import traceback

    test_classes = [TestDualThrustRange, TestComputeLevels, TestLatestSignal]
    passed = 0
    failed = 0

    for test_class in test_classes:
        print(f"\n{'='*60}")
        print(f"Running {test_class.__name__}")
        print("=" * 60)

        instance = test_class()
        for method_name in dir(instance):
            if method_name.startswith("test_"):
                try:
                    getattr(instance, method_name)()
                    print(f"  ✓ {method_name}")
                    passed += 1
                except AssertionError as e:
                    print(f"  ✗ {method_name}: {e}")
                    failed += 1
                except Exception as e:
                    print(f"  ✗ {method_name}: {e}")
                    traceback.print_exc()
                    failed += 1

    print(f"\n{'='*60}")
    print(f"Results: {passed} passed, {failed} failed")
    print("=" * 60)

    return failed == 0


if __name__ == "__main__":
    success = run_tests()
    sys.exit(0 if success else 1)
