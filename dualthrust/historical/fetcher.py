"""
Binance Historical Data Fetcher.

Downloads historical kline (candlestick) data from Binance's public API.
"""

import csv
import logging
import time
from datetime import datetime
from pathlib import Path

import httpx

from dualthrust.core.models import Candle

logger = logging.getLogger(__name__)

# Binance API endpoint
BINANCE_API_URL = "https://api.binance.com/api/v3/klines"

# Maximum candles per request (Binance limit)
MAX_LIMIT = 1000

# Interval to milliseconds mapping
INTERVAL_MS = {
    "1m": 60_000,
    "5m": 5 * 60_000,
    "15m": 15 * 60_000,
    "30m": 30 * 60_000,
    "1h": 60 * 60_000,
    "4h": 4 * 60 * 60_000,
    "1d": 24 * 60 * 60_000,
}

CSV_FIELDS = ["time", "open", "high", "low", "close", "volume"]


def candle_from_binance(data: list) -> Candle:
    """
    Create a Candle from a Binance kline row.

    Binance returns: [openTime, open, high, low, close, volume, closeTime, ...]
    Prices and volume as strings, times as integers.
    """
    return Candle(
        time=int(data[0]),
        open=float(data[1]),
        high=float(data[2]),
        low=float(data[3]),
        close=float(data[4]),
        volume=float(data[5]),
    )


class BinanceHistoricalFetcher:
    """
    Fetches historical kline data from Binance.

    Usage:
        with BinanceHistoricalFetcher() as fetcher:
            candles = fetcher.fetch(
                symbol="BTCUSDT",
                start=datetime(2026, 1, 1),
                end=datetime(2026, 1, 31),
                interval="1h",
            )
            fetcher.save_csv(candles, "data/historical/btc_1h.csv")
    """

    def __init__(self, client: httpx.Client | None = None, request_delay: float = 0.1):
        """
        Initialize the fetcher.

        Args:
            client: HTTP client to use (created if not provided)
            request_delay: Seconds to sleep between paged requests
        """
        self.client = client or httpx.Client(timeout=30.0)
        self.request_delay = request_delay

    def fetch(
        self,
        symbol: str,
        start: datetime,
        end: datetime,
        interval: str = "1h",
    ) -> list[Candle]:
        """
        Fetch historical kline data.

        Args:
            symbol: Trading pair (e.g., "BTCUSDT")
            start: Start datetime
            end: End datetime (inclusive)
            interval: Candle interval ("1h", "4h", ...)

        Returns:
            List of Candle objects, sorted by open time ascending
        """
        if interval not in INTERVAL_MS:
            raise ValueError(f"Unsupported interval: {interval}")

        start_ms = int(start.timestamp() * 1000)
        end_ms = int(end.timestamp() * 1000)

        expected = (end_ms - start_ms) // INTERVAL_MS[interval]
        logger.info(f"Requesting {symbol} {interval} klines (~{expected} candles expected)")

        candles: dict[int, Candle] = {}
        current_start = start_ms
        request_count = 0

        while current_start <= end_ms:
            params: dict[str, str | int] = {
                "symbol": symbol,
                "interval": interval,
                "startTime": current_start,
                "endTime": end_ms,
                "limit": MAX_LIMIT,
            }

            response = self.client.get(BINANCE_API_URL, params=params)
            if response.status_code != 200:
                raise RuntimeError(f"Binance API error ({response.status_code}): {response.text}")

            data = response.json()
            if isinstance(data, dict):
                raise RuntimeError(f"Binance API error: {data.get('msg', 'Unknown error')}")

            if not data:
                break

            for row in data:
                candle = candle_from_binance(row)
                if start_ms <= candle.time <= end_ms:
                    candles[candle.time] = candle

            # Binance pages forward: continue after the newest open time
            newest_ms = int(data[-1][0])
            if newest_ms < current_start:
                # No progress, avoid infinite loop
                break
            current_start = newest_ms + 1

            request_count += 1
            if request_count % 5 == 0:
                logger.info(f"... fetched {len(candles)} candles so far")

            if len(data) < MAX_LIMIT:
                break

            # Rate limiting - be nice to the API
            time.sleep(self.request_delay)

        result = [candles[t] for t in sorted(candles)]
        logger.info(f"Received {len(result)} candles")
        return result

    def save_csv(self, candles: list[Candle], filepath: str | Path) -> Path:
        """
        Save candles to CSV file.

        Args:
            candles: List of candles to save
            filepath: Output file path

        Returns:
            Path to saved file
        """
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        with filepath.open("w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
            writer.writeheader()
            for candle in candles:
                writer.writerow(candle.to_dict())

        size_kb = filepath.stat().st_size / 1024
        logger.info(f"Saved {len(candles)} candles to {filepath} ({size_kb:.1f} KB)")

        return filepath

    def close(self):
        """Close the HTTP client."""
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


def generate_filename(
    symbol: str,
    interval: str,
    start: datetime,
    end: datetime,
) -> str:
    """Generate a descriptive filename for the data."""
    start_str = start.strftime("%Y%m%d")
    end_str = end.strftime("%Y%m%d")
    return f"{symbol}_{interval}_{start_str}_to_{end_str}.csv"
