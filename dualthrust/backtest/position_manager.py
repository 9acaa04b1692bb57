"""
Position Manager - Dual Thrust position state machine.

Applies the per-bar entry/exit rules:
- Flat: break above the buy line opens a long, otherwise a break below the
  sell line opens a short (long is checked first)
- Long: break below the sell line closes at the sell line
- Short: break above the buy line closes at the buy line

A bar that closes a position never opens a new one.
"""

import logging

from dualthrust.backtest.models import FLAT, Flat, Long, Position, Short, Trade
from dualthrust.indicators.dual_thrust import BreakoutLevels

logger = logging.getLogger(__name__)


class PositionStateMachine:
    """
    Tracks the single position of one backtest run.

    Always starts flat. Call step() once per bar with that bar's levels.
    """

    def __init__(self) -> None:
        self._position: Position = FLAT

    @property
    def position(self) -> Position:
        """Current position variant."""
        return self._position

    @property
    def is_flat(self) -> bool:
        """True if no position is open."""
        return isinstance(self._position, Flat)

    def step(self, high: float, low: float, levels: BreakoutLevels, time: int) -> Trade | None:
        """
        Advance the state machine by one bar.

        Args:
            high: Bar high
            low: Bar low
            levels: Breakout lines computed for this bar
            time: Bar open time (epoch ms)

        Returns:
            The closed Trade if this bar exited a position, else None
        """
        position = self._position

        if isinstance(position, Flat):
            if high > levels.buy_line:
                self._position = Long(entry_price=levels.buy_line, entry_time=time)
                logger.debug(f"LONG entry @ {levels.buy_line:.4f} ({time})")
            elif low < levels.sell_line:
                self._position = Short(entry_price=levels.sell_line, entry_time=time)
                logger.debug(f"SHORT entry @ {levels.sell_line:.4f} ({time})")
            return None

        if isinstance(position, Long):
            if low < levels.sell_line:
                return self._close(position, levels.sell_line, time)
            return None

        if isinstance(position, Short):
            if high > levels.buy_line:
                return self._close(position, levels.buy_line, time)
            return None

        raise TypeError(f"Unknown position state: {position!r}")

    def _close(self, position: Long | Short, exit_price: float, time: int) -> Trade:
        trade = Trade.close(position, exit_price, time)
        self._position = FLAT
        logger.debug(
            f"{trade.side.name} exit @ {exit_price:.4f} ({time}) "
            f"P&L: {trade.pnl:+.4f} ({trade.pnl_percent:+.2f}%)"
        )
        return trade

    def reset(self) -> None:
        """Return to the flat state."""
        self._position = FLAT
