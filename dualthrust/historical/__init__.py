"""
Historical data module - candle retrieval and storage for backtesting.

Provides:
1. Kline data (OHLCV) from Binance's public API
2. CSV loading of previously fetched candles
"""

from dualthrust.historical.fetcher import BinanceHistoricalFetcher, candle_from_binance
from dualthrust.historical.source import HistoricalDataSource

__all__ = [
    "BinanceHistoricalFetcher",
    "HistoricalDataSource",
    "candle_from_binance",
]
