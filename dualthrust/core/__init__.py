"""
Core types shared across the package.

Modules:
- models: Candle data class
- config: Strategy configuration and timeframe constants
- errors: Input error types raised by the engine
"""

from dualthrust.core.config import (
    DEFAULT_CONFIG,
    SHARPE_ANNUALIZATION,
    TIMEFRAME_LOOKBACK,
    StrategyConfig,
    lookback_for_timeframe,
)
from dualthrust.core.errors import (
    BacktestError,
    InsufficientDataError,
    InvalidConfigError,
    MalformedCandleError,
)
from dualthrust.core.models import Candle

__all__ = [
    "BacktestError",
    "Candle",
    "DEFAULT_CONFIG",
    "InsufficientDataError",
    "InvalidConfigError",
    "MalformedCandleError",
    "SHARPE_ANNUALIZATION",
    "StrategyConfig",
    "TIMEFRAME_LOOKBACK",
    "lookback_for_timeframe",
]
