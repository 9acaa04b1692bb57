#!/usr/bin/env python3
"""
CLI for fetching historical klines from Binance.

Usage:
    python -m dualthrust.historical.cli --start 2026-01-01 --end 2026-01-31

If no start/end provided, fetches the last 30 days of data.
"""

import argparse
import logging
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import httpx

from dualthrust.core.config import TIMEFRAME_LOOKBACK
from dualthrust.historical.fetcher import BinanceHistoricalFetcher, generate_filename

DEFAULT_DAYS = 30


def parse_date(value: str) -> datetime:
    """
    Parse a UTC date from format: yyyy-mm-dd

    Examples:
        2026-01-12 -> 2026-01-12 00:00:00+00:00
    """
    try:
        return datetime.strptime(value, "%Y-%m-%d").replace(tzinfo=timezone.utc)
    except ValueError as e:
        raise argparse.ArgumentTypeError(
            f"Invalid date format: '{value}'. Expected: yyyy-mm-dd (e.g., 2026-01-12)"
        ) from e


def resolve_range(start: datetime | None, end: datetime | None) -> tuple[datetime, datetime]:
    """
    Resolve the requested date range.

    The end date is inclusive: its whole day is covered. Defaults to the
    last DEFAULT_DAYS days ending today (UTC).
    """
    if end is None:
        end = datetime.now(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
    if start is None:
        start = end - timedelta(days=DEFAULT_DAYS)
    return start, end + timedelta(days=1) - timedelta(milliseconds=1)


def add_range_arguments(parser: argparse.ArgumentParser) -> None:
    """Add the shared symbol/timeframe/date arguments."""
    parser.add_argument(
        "--symbol",
        "-S",
        default="BTCUSDT",
        help="Trading pair symbol (default: BTCUSDT)",
    )
    parser.add_argument(
        "--timeframe",
        "-t",
        default="1h",
        choices=list(TIMEFRAME_LOOKBACK),
        help="Candle timeframe (default: 1h)",
    )
    parser.add_argument(
        "--start",
        "-s",
        type=parse_date,
        default=None,
        help=f"Start date yyyy-mm-dd (default: {DEFAULT_DAYS} days before end)",
    )
    parser.add_argument(
        "--end",
        "-e",
        type=parse_date,
        default=None,
        help="End date yyyy-mm-dd, inclusive (default: today)",
    )


def main():
    parser = argparse.ArgumentParser(
        description="Fetch historical kline data from Binance",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Fetch the last 30 days of 1h BTCUSDT candles (default)
    %(prog)s

    # Fetch 4h ETH candles for January
    %(prog)s --symbol ETHUSDT --timeframe 4h --start 2026-01-01 --end 2026-01-31
        """,
    )
    add_range_arguments(parser)
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=Path("data/historical"),
        help="Output directory (default: data/historical/)",
    )
    parser.add_argument(
        "--filename",
        "-f",
        help="Custom output filename (default: auto-generated)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    start, end = resolve_range(args.start, args.end)
    if end <= start:
        parser.error("End date must not be before start date")

    print()
    print("=" * 60)
    print("🔄 Fetching historical data from Binance")
    print("=" * 60)
    print(f"   Symbol:    {args.symbol}")
    print(f"   Timeframe: {args.timeframe}")
    print(f"   Start:     {start.strftime('%Y-%m-%d %H:%M:%S')} UTC")
    print(f"   End:       {end.strftime('%Y-%m-%d %H:%M:%S')} UTC")
    print()

    try:
        with BinanceHistoricalFetcher() as fetcher:
            candles = fetcher.fetch(
                symbol=args.symbol,
                start=start,
                end=end,
                interval=args.timeframe,
            )

            if not candles:
                print("❌ No data received for the specified time range")
                sys.exit(1)

            filename = args.filename or generate_filename(args.symbol, args.timeframe, start, end)
            filepath = fetcher.save_csv(candles, args.output / filename)

    except (httpx.HTTPError, RuntimeError) as e:
        print(f"\n❌ Error: {e}")
        sys.exit(1)

    prices = [c.close for c in candles]
    print()
    print("=" * 60)
    print("📊 Summary")
    print("=" * 60)
    print(f"   Candles:     {len(candles)}")
    print(f"   Price range: ${min(prices):,.2f} - ${max(prices):,.2f}")
    print(f"   Saved to:    {filepath}")
    print()
    print("✅ Done!")
    print()


if __name__ == "__main__":
    main()
