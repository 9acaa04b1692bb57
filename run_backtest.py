#!/usr/bin/env python3
"""
Run a Dual Thrust backtest.

Usage:
    python run_backtest.py                                  # BTCUSDT 1h, last 30 days from Binance
    python run_backtest.py --symbol ETHUSDT --timeframe 4h  # Other symbol / timeframe
    python run_backtest.py --k1 0.4 --k2 0.6                # Custom coefficients
    python run_backtest.py --data path/to/candles.csv       # Use a saved CSV instead of fetching
    python run_backtest.py --signal                         # Also print the latest breakout lines
    python run_backtest.py --json result.json               # Dump the result as JSON
"""

import argparse
import json
import logging
import sys
from pathlib import Path

import httpx

from dualthrust.backtest import run_backtest
from dualthrust.core.config import DEFAULT_K1, DEFAULT_K2, StrategyConfig
from dualthrust.core.errors import BacktestError
from dualthrust.historical import BinanceHistoricalFetcher, HistoricalDataSource
from dualthrust.historical.cli import add_range_arguments, resolve_range
from dualthrust.indicators import latest_signal


def main():
    parser = argparse.ArgumentParser(description="Run a Dual Thrust breakout backtest")
    add_range_arguments(parser)
    parser.add_argument("--k1", type=float, default=DEFAULT_K1, help="Buy line coefficient (default: 0.5)")
    parser.add_argument("--k2", type=float, default=DEFAULT_K2, help="Sell line coefficient (default: 0.5)")
    parser.add_argument(
        "--data",
        "-d",
        help="Path to CSV candle file; --timeframe must match its spacing (default: fetch from Binance)",
    )
    parser.add_argument(
        "--json",
        "-j",
        type=Path,
        help="Write the result as JSON to this path",
    )
    parser.add_argument(
        "--signal",
        action="store_true",
        help="Print the breakout lines for the most recent candle",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    try:
        config = StrategyConfig.from_timeframe(args.timeframe, k1=args.k1, k2=args.k2)
    except BacktestError as e:
        print(f"❌ Invalid configuration: {e}")
        sys.exit(1)

    print(f"\n{'='*60}")
    print("🚀 BACKTEST CONFIGURATION")
    print("=" * 60)
    print(f"  Symbol:    {args.symbol}")
    print(f"  Timeframe: {args.timeframe} (lookback {config.lookback} bars)")
    print(f"  k1 / k2:   {config.k1} / {config.k2}")

    if args.data:
        if not Path(args.data).exists():
            print(f"❌ Data file not found: {args.data}")
            sys.exit(1)
        try:
            source = HistoricalDataSource(args.data)
        except ValueError as e:
            print(f"❌ Failed to load candles: {e}")
            sys.exit(1)
        print(f"  Data:      {source}")
        if not source.matches_timeframe(args.timeframe):
            print(
                f"⚠️  Candle spacing ({source.interval_ms / 60_000:g} min) does not match "
                f"--timeframe {args.timeframe}; lookback {config.lookback} bars may be wrong"
            )
        candles = source.candles
    else:
        start, end = resolve_range(args.start, args.end)
        print(f"  Range:     {start:%Y-%m-%d} to {end:%Y-%m-%d} (Binance)")
        try:
            with BinanceHistoricalFetcher() as fetcher:
                candles = fetcher.fetch(args.symbol, start, end, interval=args.timeframe)
        except (httpx.HTTPError, RuntimeError) as e:
            print(f"❌ Failed to fetch candles: {e}")
            sys.exit(1)
    print("=" * 60)

    print("\n⏳ Running backtest...")
    try:
        result = run_backtest(candles, config)
    except BacktestError as e:
        print(f"❌ Backtest failed: {e}")
        sys.exit(1)

    result.print_summary()

    # Show recent trades
    if result.trades:
        print("\n📜 RECENT TRADES (last 5)")
        print("-" * 60)
        for trade in result.trades[-5:]:
            pnl_emoji = "✅" if trade.pnl > 0 else "❌"
            print(
                f"  {pnl_emoji} {trade.side.name}: "
                f"{trade.entry_price:,.4f} → {trade.exit_price:,.4f} "
                f"| P&L: {trade.pnl:+,.4f} ({trade.pnl_percent:+.2f}%) "
                f"| held {trade.duration_seconds / 3600:g}h"
            )

    if args.signal:
        signal = latest_signal(candles, config)
        print("\n📡 LATEST SIGNAL")
        print("-" * 60)
        print(f"  Current Price: {signal.current_price:,.4f}")
        print(f"  Buy Line:      {signal.buy_line:,.4f}")
        print(f"  Sell Line:     {signal.sell_line:,.4f}")
        print(f"  Position:      {signal.position}")

    if args.json:
        args.json.parent.mkdir(parents=True, exist_ok=True)
        args.json.write_text(json.dumps(result.to_dict(), indent=2))
        print(f"\n💾 Result saved to: {args.json}")


if __name__ == "__main__":
    main()
