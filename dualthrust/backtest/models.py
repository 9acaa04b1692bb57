"""
Data models for positions, trades and backtest results.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dualthrust.core.config import StrategyConfig


class Side(Enum):
    """Trade direction."""

    LONG = "long"  # Entered on a break above the buy line
    SHORT = "short"  # Entered on a break below the sell line


@dataclass(frozen=True)
class Flat:
    """No open position."""

    def to_dict(self) -> dict:
        return {"state": "flat"}


@dataclass(frozen=True)
class Long:
    """Open long position, entered at the buy line."""

    entry_price: float
    entry_time: int

    side = Side.LONG

    def to_dict(self) -> dict:
        return {"state": "long", "entry_price": self.entry_price, "entry_time": self.entry_time}


@dataclass(frozen=True)
class Short:
    """Open short position, entered at the sell line."""

    entry_price: float
    entry_time: int

    side = Side.SHORT

    def to_dict(self) -> dict:
        return {"state": "short", "entry_price": self.entry_price, "entry_time": self.entry_time}


Position = Flat | Long | Short

FLAT = Flat()


@dataclass(frozen=True)
class Trade:
    """
    A completed round trip.

    Created when a position is closed. Times are epoch milliseconds.
    """

    side: Side
    entry_price: float
    exit_price: float
    entry_time: int
    exit_time: int
    pnl: float  # Price points, per unit
    pnl_percent: float  # pnl as % of entry price

    @classmethod
    def close(cls, position: Long | Short, exit_price: float, exit_time: int) -> "Trade":
        """Build the trade that closes `position` at `exit_price`."""
        if position.entry_price <= 0:
            raise ValueError(f"Cannot close a position entered at {position.entry_price}")
        if position.side == Side.LONG:
            pnl = exit_price - position.entry_price
        else:
            pnl = position.entry_price - exit_price
        return cls(
            side=position.side,
            entry_price=position.entry_price,
            exit_price=exit_price,
            entry_time=position.entry_time,
            exit_time=exit_time,
            pnl=pnl,
            pnl_percent=pnl / position.entry_price * 100,
        )

    @property
    def duration_seconds(self) -> float:
        """How long the position was held."""
        return (self.exit_time - self.entry_time) / 1000

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "side": self.side.value,
            "entry_price": self.entry_price,
            "exit_price": self.exit_price,
            "entry_time": self.entry_time,
            "exit_time": self.exit_time,
            "pnl": self.pnl,
            "pnl_percent": self.pnl_percent,
        }


def _format_ms(value: int) -> str:
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc).strftime("%Y-%m-%d %H:%M")


def _format_metric(value: float | None, fmt: str, suffix: str = "") -> str:
    if value is None:
        return "n/a"
    return f"{value:{fmt}}{suffix}"


@dataclass
class BacktestResult:
    """
    Results from a completed backtest run.

    Metrics that are undefined for the run (no closed trades) are None; the
    reasons are listed in `degenerate`.
    """

    config: "StrategyConfig"
    trades: list[Trade]

    # Performance metrics
    total_pnl: float
    win_rate: float | None  # % of winning trades
    avg_pnl: float | None
    max_drawdown: float | None  # Maximum drawdown %
    sharpe_ratio: float | None

    # Run details
    total_candles: int
    start_time: int
    end_time: int
    open_position: Position = FLAT  # Not included in trades or metrics
    degenerate: list[str] = field(default_factory=list)

    @property
    def total_trades(self) -> int:
        """Total number of completed trades."""
        return len(self.trades)

    @property
    def winning_trades(self) -> int:
        """Number of winning trades."""
        return sum(1 for t in self.trades if t.pnl > 0)

    @property
    def losing_trades(self) -> int:
        """Number of losing trades."""
        return sum(1 for t in self.trades if t.pnl < 0)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "config": self.config.to_dict(),
            "performance": {
                "total_pnl": self.total_pnl,
                "win_rate": self.win_rate,
                "total_trades": self.total_trades,
                "avg_pnl": self.avg_pnl,
                "max_drawdown": self.max_drawdown,
                "sharpe_ratio": self.sharpe_ratio,
            },
            "degenerate": list(self.degenerate),
            "trades": [t.to_dict() for t in self.trades],
            "open_position": self.open_position.to_dict(),
            "time_range": {
                "start": self.start_time,
                "end": self.end_time,
                "total_candles": self.total_candles,
            },
        }

    def print_summary(self) -> None:
        """Print a summary of backtest results."""
        print("\n" + "=" * 60)
        print("📊 BACKTEST RESULTS")
        print("=" * 60)

        print(f"\n📅 Period: {_format_ms(self.start_time)} to {_format_ms(self.end_time)}")
        print(f"📈 Candles: {self.total_candles}")
        print(
            f"⚙️  k1={self.config.k1}  k2={self.config.k2}  "
            f"lookback={self.config.lookback}"
        )

        print("\n💰 PERFORMANCE")
        print("-" * 40)
        print(f"  Total P&L:       {self.total_pnl:+,.4f}")
        print(f"  Avg P&L:         {_format_metric(self.avg_pnl, '+,.4f')}")

        print("\n📊 RISK METRICS")
        print("-" * 40)
        print(f"  Win Rate:        {_format_metric(self.win_rate, '.2f', '%')}")
        print(f"  Max Drawdown:    {_format_metric(self.max_drawdown, '.2f', '%')}")
        print(f"  Sharpe Ratio:    {_format_metric(self.sharpe_ratio, '.2f')}")

        print("\n🔄 TRADE STATISTICS")
        print("-" * 40)
        print(f"  Total Trades:    {self.total_trades}")
        print(f"  Winning:         {self.winning_trades}")
        print(f"  Losing:          {self.losing_trades}")
        if not isinstance(self.open_position, Flat):
            print(
                f"  Open Position:   {self.open_position.side.name} @ "
                f"{self.open_position.entry_price:,.4f} (not counted)"
            )

        if self.degenerate:
            print(f"\n⚠️  Degenerate statistics: {', '.join(self.degenerate)}")

        print("=" * 60 + "\n")
