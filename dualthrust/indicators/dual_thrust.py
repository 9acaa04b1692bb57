"""
Dual Thrust Indicator - Breakout lines from a trailing range.

Computes the buy (upper) and sell (lower) breakout lines for a bar from the
highs, lows and closes of the candles preceding it:

    range     = max(HH - LC, HC - LL)
    buy_line  = open + k1 * range
    sell_line = open - k2 * range
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal, Protocol

from dualthrust.core.config import StrategyConfig
from dualthrust.core.errors import InsufficientDataError


class CandleLike(Protocol):
    """Protocol for candle-like objects with OHLC data."""

    high: float
    low: float
    close: float


@dataclass(frozen=True)
class BreakoutLevels:
    """Breakout lines for a single bar."""

    buy_line: float
    sell_line: float
    range: float

    def price_position(self, price: float) -> Literal["above_buy", "below_sell", "inside"]:
        """
        Determine price position relative to the breakout lines.

        Returns:
            "above_buy": Price broke above the buy line (long breakout)
            "below_sell": Price broke below the sell line (short breakout)
            "inside": Price is between the lines
        """
        if price > self.buy_line:
            return "above_buy"
        elif price < self.sell_line:
            return "below_sell"
        else:
            return "inside"


@dataclass(frozen=True)
class DualThrustSignal:
    """Breakout lines for the most recent candle, plus its latest price."""

    time: int
    current_price: float
    buy_line: float
    sell_line: float
    range: float

    @property
    def position(self) -> str:
        """Where the current price sits relative to the lines."""
        return BreakoutLevels(self.buy_line, self.sell_line, self.range).price_position(
            self.current_price
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "time": self.time,
            "current_price": self.current_price,
            "buy_line": self.buy_line,
            "sell_line": self.sell_line,
            "range": self.range,
            "position": self.position,
        }


def dual_thrust_range(window: Sequence[CandleLike]) -> float:
    """
    Calculate the Dual Thrust range of a window of candles.

    Range is the greater of:
    1. Highest High - Lowest Close
    2. Highest Close - Lowest Low

    Args:
        window: Candles preceding the current bar (oldest first)

    Returns:
        Range value (never negative for valid candles)

    Raises:
        InsufficientDataError: If the window is empty
    """
    if not window:
        raise InsufficientDataError(required=1, available=0)

    highest_high = max(c.high for c in window)
    lowest_low = min(c.low for c in window)
    highest_close = max(c.close for c in window)
    lowest_close = min(c.close for c in window)

    return max(highest_high - lowest_close, highest_close - lowest_low)


def compute_levels(
    window: Sequence[CandleLike],
    current_open: float,
    k1: float,
    k2: float,
) -> BreakoutLevels:
    """
    Calculate buy and sell breakout lines for the current bar.

    Args:
        window: The lookback candles strictly before the current bar
        current_open: Open price of the current bar
        k1: Coefficient for the buy line
        k2: Coefficient for the sell line

    Returns:
        BreakoutLevels with buy_line, sell_line and the underlying range
    """
    price_range = dual_thrust_range(window)
    return BreakoutLevels(
        buy_line=current_open + k1 * price_range,
        sell_line=current_open - k2 * price_range,
        range=price_range,
    )


def latest_signal(candles: Sequence, config: StrategyConfig) -> DualThrustSignal:
    """
    Calculate the breakout lines for the most recent candle.

    The last candle is treated as the bar in progress: its open anchors the
    lines and its close is reported as the current price. The `lookback`
    candles before it form the window.

    Args:
        candles: Candles ordered oldest first (most recent last)
        config: Strategy parameters

    Returns:
        DualThrustSignal for the last candle

    Raises:
        InsufficientDataError: If there are fewer than lookback + 1 candles
    """
    required = config.lookback + 1
    if len(candles) < required:
        raise InsufficientDataError(required=required, available=len(candles))

    current = candles[-1]
    window = candles[-required:-1]
    levels = compute_levels(window, current.open, config.k1, config.k2)

    return DualThrustSignal(
        time=current.time,
        current_price=current.close,
        buy_line=levels.buy_line,
        sell_line=levels.sell_line,
        range=levels.range,
    )
