"""
Backtest Engine - Runs the Dual Thrust strategy over a candle series.

Flow: Candles → Breakout Lines (per bar) → Position State Machine → Trade Ledger → Statistics

For every bar after the warm-up window the engine computes the breakout
lines from the preceding `lookback` candles, advances the position state
machine and records closed trades. A position still open at the end of the
series is reported but never counted as a trade.
"""

import logging
import time
from collections.abc import Sequence

from dualthrust.backtest.ledger import TradeLedger
from dualthrust.backtest.metrics import calculate_statistics
from dualthrust.backtest.models import BacktestResult
from dualthrust.backtest.position_manager import PositionStateMachine
from dualthrust.core.config import StrategyConfig
from dualthrust.core.errors import InsufficientDataError, MalformedCandleError
from dualthrust.core.models import Candle
from dualthrust.indicators.dual_thrust import compute_levels

logger = logging.getLogger(__name__)


class BacktestEngine:
    """
    Orchestrates a single-pass Dual Thrust backtest.

    The engine holds only its config; every run() builds fresh position and
    ledger state, so one engine can run many candle series independently.
    """

    def __init__(self, config: StrategyConfig) -> None:
        """
        Initialize the backtest engine.

        Args:
            config: Strategy parameters (k1, k2, lookback)
        """
        self.config = config

    def _validate(self, candles: Sequence[Candle]) -> None:
        """Check length and ordering before any bar is processed."""
        required = self.config.lookback + 1
        if len(candles) < required:
            raise InsufficientDataError(required=required, available=len(candles))

        for prev, curr in zip(candles, candles[1:]):
            if curr.time <= prev.time:
                raise MalformedCandleError(
                    f"Candle times must be strictly increasing: {prev.time} then {curr.time}"
                )

    def run(self, candles: Sequence[Candle]) -> BacktestResult:
        """
        Run the backtest.

        Args:
            candles: Candles ordered oldest first, at the config's timeframe

        Returns:
            BacktestResult with closed trades and performance metrics

        Raises:
            InsufficientDataError: Fewer than lookback + 1 candles
            MalformedCandleError: Candle times not strictly increasing
        """
        self._validate(candles)

        started = time.perf_counter()
        lookback = self.config.lookback
        machine = PositionStateMachine()
        ledger = TradeLedger()

        logger.info(
            f"Running Dual Thrust backtest: {len(candles)} candles, "
            f"k1={self.config.k1} k2={self.config.k2} lookback={lookback}"
        )

        for i in range(lookback, len(candles)):
            current = candles[i]
            window = candles[i - lookback : i]
            levels = compute_levels(window, current.open, self.config.k1, self.config.k2)

            trade = machine.step(current.high, current.low, levels, current.time)
            if trade is not None:
                ledger.record(trade)

        ledger.freeze()
        stats = calculate_statistics(ledger.trades)

        elapsed = time.perf_counter() - started
        logger.info(
            f"Backtest finished in {elapsed:.3f}s: {stats.total_trades} trades, "
            f"total P&L {stats.total_pnl:+.4f}"
        )
        if not machine.is_flat:
            logger.info(f"Position still open at end of data (excluded): {machine.position}")

        return BacktestResult(
            config=self.config,
            trades=list(ledger.trades),
            total_pnl=stats.total_pnl,
            win_rate=stats.win_rate,
            avg_pnl=stats.avg_pnl,
            max_drawdown=stats.max_drawdown,
            sharpe_ratio=stats.sharpe_ratio,
            total_candles=len(candles),
            start_time=candles[0].time,
            end_time=candles[-1].time,
            open_position=machine.position,
            degenerate=list(stats.degenerate),
        )


def run_backtest(candles: Sequence[Candle], config: StrategyConfig) -> BacktestResult:
    """
    Convenience function to run a backtest.

    Args:
        candles: Candles ordered oldest first
        config: Strategy parameters

    Returns:
        BacktestResult
    """
    return BacktestEngine(config).run(candles)
