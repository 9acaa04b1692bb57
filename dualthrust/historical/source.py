"""
Historical Data Source for backtesting.

Reads CSV files written by the historical data fetcher and returns the
candles in chronological order.
"""

import csv
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path

from dualthrust.core.models import Candle
from dualthrust.historical.fetcher import INTERVAL_MS


class HistoricalDataSource:
    """
    Reads historical CSV data into Candles.

    Usage:
        source = HistoricalDataSource("data/historical/BTCUSDT_1h_....csv")
        result = run_backtest(source.candles, config)
    """

    def __init__(self, filepath: str | Path):
        """
        Initialize with path to CSV file.

        Args:
            filepath: Path to CSV file with a time,open,high,low,close,volume header
        """
        self.filepath = Path(filepath)
        if not self.filepath.exists():
            raise FileNotFoundError(f"Historical data file not found: {filepath}")

        # Extract symbol from filename (e.g., "BTCUSDT_1h_..." -> "BTCUSDT")
        self.symbol = self.filepath.name.split("_")[0]

        self._candles: list[Candle] = []
        self._load_data()

    def _load_data(self) -> None:
        """Load CSV data into memory."""
        with self.filepath.open(newline="") as f:
            reader = csv.DictReader(f)
            for row in reader:
                self._candles.append(Candle.from_dict(row))

        if not self._candles:
            raise ValueError(f"No data found in {self.filepath}")

        self._candles.sort(key=lambda c: c.time)

    @property
    def candles(self) -> list[Candle]:
        """All candles, oldest first."""
        return list(self._candles)

    @property
    def start_time(self) -> datetime:
        """Get the start timestamp of the data."""
        return datetime.fromtimestamp(self._candles[0].time / 1000, tz=timezone.utc)

    @property
    def end_time(self) -> datetime:
        """Get the end timestamp of the data."""
        return datetime.fromtimestamp(self._candles[-1].time / 1000, tz=timezone.utc)

    @property
    def candle_count(self) -> int:
        """Get the number of candles in the data."""
        return len(self._candles)

    @property
    def interval_ms(self) -> int | None:
        """Most common spacing between consecutive candles (None for a single candle)."""
        gaps = Counter(b.time - a.time for a, b in zip(self._candles, self._candles[1:]))
        if not gaps:
            return None
        return gaps.most_common(1)[0][0]

    def matches_timeframe(self, timeframe: str) -> bool:
        """Check whether the candle spacing agrees with `timeframe` (e.g. "1h")."""
        if self.interval_ms is None:
            return True
        return INTERVAL_MS.get(timeframe) == self.interval_ms

    def __repr__(self) -> str:
        return (
            f"HistoricalDataSource({self.symbol}, "
            f"{self.candle_count} candles, "
            f"{self.start_time.strftime('%Y-%m-%d %H:%M')} to "
            f"{self.end_time.strftime('%Y-%m-%d %H:%M')})"
        )
