"""
Candle model shared by the indicators, the backtest engine and the data adapters.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timezone

from dualthrust.core.errors import MalformedCandleError


@dataclass(frozen=True)
class Candle:
    """A single OHLCV candlestick. `time` is the open time in epoch milliseconds."""

    time: int
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    def __post_init__(self) -> None:
        """Validate prices and the OHLC invariant."""
        for name in ("open", "high", "low", "close"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise MalformedCandleError(
                    f"Candle at {self.time}: {name} must be a positive finite price, got {value}"
                )
        if not math.isfinite(self.volume) or self.volume < 0:
            raise MalformedCandleError(
                f"Candle at {self.time}: volume must be finite and non-negative, got {self.volume}"
            )
        if self.high < max(self.open, self.close, self.low):
            raise MalformedCandleError(
                f"Candle at {self.time}: high {self.high} below open/close/low"
            )
        if self.low > min(self.open, self.close, self.high):
            raise MalformedCandleError(
                f"Candle at {self.time}: low {self.low} above open/close/high"
            )

    @property
    def timestamp(self) -> datetime:
        """Open time as a UTC datetime."""
        return datetime.fromtimestamp(self.time / 1000, tz=timezone.utc)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "time": self.time,
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
            "volume": self.volume,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Candle":
        """Create a candle from a dict/CSV row (values may be strings)."""
        return cls(
            time=int(data["time"]),
            open=float(data["open"]),
            high=float(data["high"]),
            low=float(data["low"]),
            close=float(data["close"]),
            volume=float(data.get("volume") or 0.0),
        )
