"""
Performance statistics over a sequence of closed trades.

Drawdown and Sharpe are computed on the per-trade P&L sequence, not on an
equity curve:
- max_drawdown: largest (peak - balance) / peak, in %, over cumulative P&L,
  only at steps where the running peak is positive
- sharpe_ratio: mean / population stddev of per-trade pnl_percent, scaled by
  sqrt(252). The 252 factor is applied to per-trade returns as-is.
"""

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from statistics import fmean, pstdev

from dualthrust.backtest.models import Trade
from dualthrust.core.config import SHARPE_ANNUALIZATION

logger = logging.getLogger(__name__)

# Degenerate statistics markers
NO_TRADES = "no_trades"
ZERO_VARIANCE = "zero_variance"


@dataclass(frozen=True)
class TradeStatistics:
    """Aggregate metrics for a trade sequence. None means undefined (no trades)."""

    total_trades: int
    total_pnl: float
    win_rate: float | None
    avg_pnl: float | None
    max_drawdown: float | None
    sharpe_ratio: float | None
    degenerate: tuple[str, ...] = field(default=())


def max_drawdown(pnls: Sequence[float]) -> float:
    """
    Calculate max drawdown % of the cumulative P&L balance.

    Steps where the running peak is not positive have no defined drawdown
    and are skipped.

    Returns:
        Largest drawdown observed, or 0.0 if none was defined
    """
    balance = 0.0
    peak = -math.inf
    max_dd = 0.0

    for pnl in pnls:
        balance += pnl
        peak = max(peak, balance)
        if peak > 0:
            dd = (peak - balance) / peak * 100
            max_dd = max(max_dd, dd)

    return max_dd


def sharpe_ratio(returns: Sequence[float]) -> float | None:
    """
    Calculate the annualized Sharpe ratio of per-trade returns.

    Returns:
        Sharpe ratio, 0.0 for zero variance, None for an empty sequence
    """
    if not returns:
        return None

    std_return = pstdev(returns)
    if std_return == 0:
        return 0.0

    return fmean(returns) / std_return * math.sqrt(SHARPE_ANNUALIZATION)


def calculate_statistics(trades: Sequence[Trade]) -> TradeStatistics:
    """
    Reduce closed trades into performance statistics.

    Args:
        trades: Closed trades in chronological order

    Returns:
        TradeStatistics; ratio metrics are None when there are no trades
    """
    total_trades = len(trades)
    total_pnl = sum(t.pnl for t in trades)

    if total_trades == 0:
        logger.warning("No closed trades - win rate, avg P&L, drawdown and Sharpe are undefined")
        return TradeStatistics(
            total_trades=0,
            total_pnl=0.0,
            win_rate=None,
            avg_pnl=None,
            max_drawdown=None,
            sharpe_ratio=None,
            degenerate=(NO_TRADES,),
        )

    winning = sum(1 for t in trades if t.pnl > 0)
    returns = [t.pnl_percent for t in trades]

    degenerate: tuple[str, ...] = ()
    if pstdev(returns) == 0:
        logger.warning("Per-trade returns have zero variance - Sharpe ratio set to 0")
        degenerate = (ZERO_VARIANCE,)

    return TradeStatistics(
        total_trades=total_trades,
        total_pnl=total_pnl,
        win_rate=winning / total_trades * 100,
        avg_pnl=total_pnl / total_trades,
        max_drawdown=max_drawdown([t.pnl for t in trades]),
        sharpe_ratio=sharpe_ratio(returns),
        degenerate=degenerate,
    )
