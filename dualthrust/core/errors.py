"""
Error types raised by the strategy and backtest engine.

All of them are ValueErrors: they describe bad input (config or candles),
never a broken engine.
"""


class BacktestError(ValueError):
    """Base class for input errors that abort a backtest run."""


class InvalidConfigError(BacktestError):
    """Strategy parameters are out of range (k1/k2/lookback/timeframe)."""


class InsufficientDataError(BacktestError):
    """Not enough candles to fill the lookback window."""

    def __init__(self, required: int, available: int) -> None:
        self.required = required
        self.available = available
        super().__init__(f"Need at least {required} candles, got {available}")


class MalformedCandleError(BacktestError):
    """A candle breaks the OHLC invariant or the series is out of order."""
