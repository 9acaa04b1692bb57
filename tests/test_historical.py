#!/usr/bin/env python3
"""
Tests for the Binance kline fetcher and the CSV data source.

Run with:
    python -m pytest tests/test_historical.py -v

Or standalone (tests that need pytest's tmp_path fixture are skipped):
    python tests/test_historical.py

HTTP is served by httpx.MockTransport; no network access is needed.
"""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import httpx
import pytest

# Add project root to path for standalone execution
sys.path.insert(0, str(Path(__file__).parent.parent))

# ruff: noqa: E402
from dualthrust.backtest import run_backtest
from dualthrust.core import Candle, MalformedCandleError, StrategyConfig
from dualthrust.historical import BinanceHistoricalFetcher, HistoricalDataSource, candle_from_binance
from dualthrust.historical.cli import resolve_range
from dualthrust.historical.fetcher import MAX_LIMIT, generate_filename

HOUR_MS = 3_600_000
START = datetime(2026, 1, 1, tzinfo=timezone.utc)
START_MS = int(START.timestamp() * 1000)


def kline_row(open_ms: int, price: float = 100.0) -> list:
    """Build a Binance kline row (strings for prices, like the real API)."""
    return [
        open_ms,
        f"{price}",
        f"{price + 1}",
        f"{price - 1}",
        f"{price + 0.5}",
        "12.5",
        open_ms + HOUR_MS - 1,
        "1250.0",
        42,
        "6.0",
        "600.0",
        "0",
    ]


def make_kline_handler(total: int, requests: list[httpx.Request]):
    """Serve `total` hourly klines from START, paged like Binance."""

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        start_ms = int(request.url.params["startTime"])
        end_ms = int(request.url.params["endTime"])
        limit = int(request.url.params["limit"])

        rows = []
        for i in range(total):
            open_ms = START_MS + i * HOUR_MS
            if start_ms <= open_ms <= end_ms:
                rows.append(kline_row(open_ms, 100.0 + i % 7))
            if len(rows) == limit:
                break
        return httpx.Response(200, json=rows)

    return handler


class TestCandleParsing:
    """Tests for Binance kline row parsing."""

    def test_candle_from_binance(self):
        """Test string prices and integer open time are converted."""
        candle = candle_from_binance(kline_row(START_MS))
        assert candle == Candle(
            time=START_MS, open=100.0, high=101.0, low=99.0, close=100.5, volume=12.5
        )
        assert candle.timestamp == START


class TestBinanceHistoricalFetcher:
    """Tests for BinanceHistoricalFetcher."""

    def test_fetch_single_page(self):
        """Test a range smaller than one page needs one request."""
        requests: list[httpx.Request] = []
        client = httpx.Client(transport=httpx.MockTransport(make_kline_handler(48, requests)))

        with BinanceHistoricalFetcher(client=client, request_delay=0) as fetcher:
            candles = fetcher.fetch("BTCUSDT", START, START + timedelta(hours=47), interval="1h")

        assert len(candles) == 48
        assert len(requests) == 1
        params = requests[0].url.params
        assert params["symbol"] == "BTCUSDT"
        assert params["interval"] == "1h"
        assert params["limit"] == str(MAX_LIMIT)

    def test_fetch_paginates(self):
        """Test ranges larger than the page limit are fetched in order."""
        requests: list[httpx.Request] = []
        client = httpx.Client(transport=httpx.MockTransport(make_kline_handler(1500, requests)))

        fetcher = BinanceHistoricalFetcher(client=client, request_delay=0)
        candles = fetcher.fetch("BTCUSDT", START, START + timedelta(hours=1499), interval="1h")

        assert len(candles) == 1500
        assert len(requests) == 2
        assert int(requests[1].url.params["startTime"]) == START_MS + 999 * HOUR_MS + 1
        times = [c.time for c in candles]
        assert times == sorted(set(times))

    def test_fetch_api_error(self):
        """Test a Binance error payload raises RuntimeError."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"code": -1121, "msg": "Invalid symbol."})

        client = httpx.Client(transport=httpx.MockTransport(handler))
        fetcher = BinanceHistoricalFetcher(client=client, request_delay=0)
        with pytest.raises(RuntimeError, match="Invalid symbol"):
            fetcher.fetch("NOPE", START, START + timedelta(hours=5))

    def test_fetch_unsupported_interval(self):
        """Test unknown intervals are rejected before any request."""
        fetcher = BinanceHistoricalFetcher(
            client=httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(500))),
        )
        with pytest.raises(ValueError):
            fetcher.fetch("BTCUSDT", START, START + timedelta(hours=5), interval="7h")

    def test_generate_filename(self):
        """Test generated filenames start with the symbol."""
        name = generate_filename("ETHUSDT", "4h", START, START + timedelta(days=30))
        assert name == "ETHUSDT_4h_20260101_to_20260131.csv"


class TestHistoricalDataSource:
    """Tests for loading saved candles."""

    def test_save_and_load(self, tmp_path):
        """Test fetched candles load back and drive a backtest."""
        requests: list[httpx.Request] = []
        client = httpx.Client(transport=httpx.MockTransport(make_kline_handler(30, requests)))
        with BinanceHistoricalFetcher(client=client, request_delay=0) as fetcher:
            candles = fetcher.fetch("BTCUSDT", START, START + timedelta(hours=29))
            path = fetcher.save_csv(candles, tmp_path / "BTCUSDT_1h_test.csv")

        source = HistoricalDataSource(path)
        assert source.symbol == "BTCUSDT"
        assert source.candle_count == 30
        assert source.candles == candles
        assert source.start_time == START

        result = run_backtest(source.candles, StrategyConfig.from_timeframe("1h"))
        assert result.total_candles == 30

    def test_missing_file(self, tmp_path):
        """Test a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            HistoricalDataSource(tmp_path / "missing.csv")

    def test_empty_file(self, tmp_path):
        """Test a header-only file raises ValueError."""
        path = tmp_path / "BTCUSDT_empty.csv"
        path.write_text("time,open,high,low,close,volume\n")
        with pytest.raises(ValueError):
            HistoricalDataSource(path)

    def test_malformed_row(self, tmp_path):
        """Test a zero-price row fails as a malformed candle."""
        path = tmp_path / "BTCUSDT_bad.csv"
        path.write_text("time,open,high,low,close,volume\n0,0,0,0,0,1\n")
        with pytest.raises(MalformedCandleError):
            HistoricalDataSource(path)

    def test_interval_matches_timeframe(self, tmp_path):
        """Test the candle spacing is detected and compared to a timeframe."""
        requests: list[httpx.Request] = []
        client = httpx.Client(transport=httpx.MockTransport(make_kline_handler(10, requests)))
        with BinanceHistoricalFetcher(client=client, request_delay=0) as fetcher:
            candles = fetcher.fetch("BTCUSDT", START, START + timedelta(hours=9))
            path = fetcher.save_csv(candles, tmp_path / "BTCUSDT_1h_test.csv")

        source = HistoricalDataSource(path)
        assert source.interval_ms == HOUR_MS
        assert source.matches_timeframe("1h")
        assert not source.matches_timeframe("4h")

    def test_single_candle_interval(self, tmp_path):
        """Test a single candle has no spacing and matches any timeframe."""
        path = tmp_path / "BTCUSDT_one.csv"
        path.write_text("time,open,high,low,close,volume\n0,1,2,0.5,1.5,3\n")
        source = HistoricalDataSource(path)
        assert source.interval_ms is None
        assert source.matches_timeframe("4h")


class TestResolveRange:
    """Tests for CLI date range defaults."""

    def test_end_is_inclusive(self):
        """Test the end date covers its whole day."""
        start, end = resolve_range(START, START + timedelta(days=1))
        assert start == START
        assert end == START + timedelta(days=2) - timedelta(milliseconds=1)

    def test_default_span(self):
        """Test the default range spans 30 days before the end date."""
        start, end = resolve_range(None, START)
        assert START - start == timedelta(days=30)


# Tests that take pytest's tmp_path fixture
TMP_PATH_TESTS = {
    "test_save_and_load",
    "test_missing_file",
    "test_empty_file",
    "test_malformed_row",
    "test_interval_matches_timeframe",
    "test_single_candle_interval",
}


def run_tests():
    """Run all tests."""
    import traceback

    test_classes = [
        TestCandleParsing,
        TestBinanceHistoricalFetcher,
        TestHistoricalDataSource,
        TestResolveRange,
    ]
    passed = 0
    failed = 0

    for test_class in test_classes:
        print(f"\n{'='*60}")
        print(f"Running {test_class.__name__}")
        print("=" * 60)

        instance = test_class()
        for method_name in dir(instance):
            if method_name.startswith("test_") and method_name not in TMP_PATH_TESTS:
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
