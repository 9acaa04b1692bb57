"""
Trade Ledger - Append-only record of closed trades for one run.
"""

from collections.abc import Iterator

from dualthrust.backtest.models import Trade


class TradeLedger:
    """
    Ordered, append-only list of closed trades.

    Frozen once the run completes; further records raise RuntimeError.
    """

    def __init__(self) -> None:
        self._trades: list[Trade] = []
        self._frozen = False

    def record(self, trade: Trade) -> None:
        """Append a closed trade."""
        if self._frozen:
            raise RuntimeError("Cannot record trades into a frozen ledger")
        self._trades.append(trade)

    def freeze(self) -> None:
        """Stop accepting trades."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def trades(self) -> tuple[Trade, ...]:
        """All recorded trades, oldest first."""
        return tuple(self._trades)

    @property
    def total_pnl(self) -> float:
        """Sum of realized P&L."""
        return sum(t.pnl for t in self._trades)

    def __len__(self) -> int:
        return len(self._trades)

    def __iter__(self) -> Iterator[Trade]:
        return iter(tuple(self._trades))
