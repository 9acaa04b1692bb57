"""
Backtest Module - Historical backtesting of the Dual Thrust strategy.

Orchestrates the flow: Candles → Breakout Lines → Position State Machine → Ledger → Statistics
"""

from .engine import BacktestEngine, run_backtest
from .ledger import TradeLedger
from .metrics import NO_TRADES, ZERO_VARIANCE, TradeStatistics, calculate_statistics
from .models import BacktestResult, Flat, Long, Position, Short, Side, Trade
from .position_manager import PositionStateMachine

__all__ = [
    "BacktestEngine",
    "BacktestResult",
    "Flat",
    "Long",
    "NO_TRADES",
    "Position",
    "PositionStateMachine",
    "Short",
    "Side",
    "Trade",
    "TradeLedger",
    "TradeStatistics",
    "ZERO_VARIANCE",
    "calculate_statistics",
    "run_backtest",
]
