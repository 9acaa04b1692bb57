"""
Strategy configuration and constants.

Centralizes the Dual Thrust parameters and the timeframe → lookback mapping.
"""

from dataclasses import dataclass

from dualthrust.core.errors import InvalidConfigError

# =========================================================
# Strategy Defaults
# =========================================================

# Breakout coefficients applied to the lookback range
# Typical range: 0.1 - 2.0 | Lower = tighter lines, more trades
DEFAULT_K1 = 0.5
DEFAULT_K2 = 0.5

# Bars in the lookback window per supported timeframe (one day of candles
# in both cases)
TIMEFRAME_LOOKBACK: dict[str, int] = {
    "1h": 24,
    "4h": 6,
}

DEFAULT_TIMEFRAME = "1h"

# Annualization factor applied to per-trade returns in the Sharpe ratio
SHARPE_ANNUALIZATION = 252


@dataclass(frozen=True)
class StrategyConfig:
    """
    Parameters for one Dual Thrust backtest run.

    `lookback` is normally derived from the timeframe via `from_timeframe()`;
    it can be given directly for non-standard candle series (tests, CSVs).
    """

    k1: float = DEFAULT_K1
    k2: float = DEFAULT_K2
    lookback: int = TIMEFRAME_LOOKBACK[DEFAULT_TIMEFRAME]
    timeframe: str | None = None

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not self.k1 > 0:
            raise InvalidConfigError(f"k1 must be positive, got {self.k1}")
        if not self.k2 > 0:
            raise InvalidConfigError(f"k2 must be positive, got {self.k2}")
        if isinstance(self.lookback, bool) or not isinstance(self.lookback, int):
            raise InvalidConfigError(f"lookback must be an integer, got {self.lookback!r}")
        if self.lookback <= 0:
            raise InvalidConfigError(f"lookback must be positive, got {self.lookback}")
        if self.timeframe is not None:
            expected = lookback_for_timeframe(self.timeframe)
            if expected != self.lookback:
                raise InvalidConfigError(
                    f"lookback {self.lookback} does not match timeframe "
                    f"{self.timeframe} (expected {expected})"
                )

    @classmethod
    def from_timeframe(
        cls,
        timeframe: str = DEFAULT_TIMEFRAME,
        k1: float = DEFAULT_K1,
        k2: float = DEFAULT_K2,
    ) -> "StrategyConfig":
        """Create config with lookback derived from the candle timeframe."""
        return cls(k1=k1, k2=k2, lookback=lookback_for_timeframe(timeframe), timeframe=timeframe)

    @classmethod
    def from_dict(cls, data: dict) -> "StrategyConfig":
        """Create config from dictionary."""
        k1 = data.get("k1", DEFAULT_K1)
        k2 = data.get("k2", DEFAULT_K2)
        if data.get("timeframe"):
            return cls.from_timeframe(data["timeframe"], k1=k1, k2=k2)
        return cls(k1=k1, k2=k2, lookback=data.get("lookback", TIMEFRAME_LOOKBACK[DEFAULT_TIMEFRAME]))

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "k1": self.k1,
            "k2": self.k2,
            "lookback": self.lookback,
            "timeframe": self.timeframe,
        }


def lookback_for_timeframe(timeframe: str) -> int:
    """
    Get the lookback window length for a timeframe.

    Raises:
        InvalidConfigError: If the timeframe is not supported
    """
    try:
        return TIMEFRAME_LOOKBACK[timeframe]
    except KeyError:
        supported = ", ".join(TIMEFRAME_LOOKBACK)
        raise InvalidConfigError(
            f"Unsupported timeframe '{timeframe}' (supported: {supported})"
        ) from None


# Default configuration instance
DEFAULT_CONFIG = StrategyConfig.from_timeframe()
