"""
Backtest types: position state, positions, trades, equity points, metrics, result.

Extracted for reuse and to keep simulator.py focused on the walk-forward loop.
Reporting code can import these types without pulling in BacktestSimulator.
"""
from __future__ import annotations

from dataclasses import dataclass, asdict
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

import pandas as pd

from ..signals.definition import StrategyPerformance


class PositionState(Enum):
    """Simulator state (long-only)."""
    FLAT = "flat"
    LONG = "long"


class ExitReason(Enum):
    """Why a position was closed."""
    STOP_LOSS = "closed_stop"
    TAKE_PROFIT = "closed_target"
    SIGNAL = "closed_signal"  # Type-specific exit rule
    END_OF_DATA = "closed_end"  # Still open at end of series, force-closed


@dataclass(frozen=True)
class Position:
    """An open long position."""
    entry_date: pd.Timestamp
    entry_price: float
    quantity: int
    entry_fee: float = 0.0
    entry_reason: str = ""
    open: bool = True

    @property
    def cost_basis(self) -> float:
        return self.quantity * self.entry_price

    def unrealized_pct(self, price: float) -> float:
        """Unrealized return in percent at ``price``."""
        return (price - self.entry_price) / self.entry_price * 100.0


@dataclass(frozen=True)
class Trade:
    """A closed position."""
    entry_date: pd.Timestamp
    entry_price: float
    quantity: int
    exit_date: pd.Timestamp
    exit_price: float
    pnl: float  # Net of fees, in currency units
    pnl_percent: float  # pnl / cost basis * 100
    reason: ExitReason
    entry_reason: str = ""
    exit_detail: str = ""
    fees: float = 0.0

    @property
    def is_win(self) -> bool:
        return self.pnl > 0

    @property
    def is_loss(self) -> bool:
        return self.pnl < 0

    @property
    def holding_days(self) -> int:
        return (self.exit_date - self.entry_date).days


@dataclass(frozen=True)
class EquityPoint:
    """Portfolio value at one bar."""
    date: pd.Timestamp
    value: float
    drawdown_percent: float


@dataclass(frozen=True)
class BacktestMetrics:
    """Performance metrics of one run (percent values are in percent, win_rate is a fraction)."""
    win_rate: float
    total_return: float
    max_drawdown: float
    sharpe_ratio: float
    profit_factor: float

    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    average_return: float = 0.0  # Mean bar-to-bar equity return, percent
    average_win: float = 0.0
    average_loss: float = 0.0
    largest_win: float = 0.0
    largest_loss: float = 0.0
    expectancy: float = 0.0  # Mean pnl per trade
    average_holding_days: float = 0.0
    annualized_return: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class BacktestResult:
    """Immutable output of one simulation run."""
    strategy_id: str
    strategy_version: int
    symbol: Optional[str]
    start_date: pd.Timestamp
    end_date: pd.Timestamp
    initial_capital: float
    final_capital: float
    trades: Tuple[Trade, ...]
    equity: Tuple[EquityPoint, ...]
    metrics: BacktestMetrics

    @property
    def total_return(self) -> float:
        return self.metrics.total_return

    def trades_frame(self) -> pd.DataFrame:
        """One row per trade (reason as its string value)."""
        rows = []
        for t in self.trades:
            row = asdict(t)
            row["reason"] = t.reason.value
            rows.append(row)
        columns = [
            "entry_date", "entry_price", "quantity", "exit_date", "exit_price",
            "pnl", "pnl_percent", "reason", "entry_reason", "exit_detail", "fees",
        ]
        return pd.DataFrame(rows, columns=columns)

    def equity_frame(self) -> pd.DataFrame:
        """Equity curve indexed by date."""
        return pd.DataFrame(
            {
                "value": [p.value for p in self.equity],
                "drawdown_percent": [p.drawdown_percent for p in self.equity],
            },
            index=pd.DatetimeIndex([p.date for p in self.equity], name="Date"),
        )

    def to_performance(self, evaluated_at: Optional[datetime] = None) -> StrategyPerformance:
        """Performance record to store on a StrategyDefinition."""
        return StrategyPerformance(
            total_trades=self.metrics.total_trades,
            win_rate=self.metrics.win_rate,
            total_return=self.metrics.total_return,
            max_drawdown=self.metrics.max_drawdown,
            sharpe_ratio=self.metrics.sharpe_ratio,
            last_backtest=evaluated_at,
        )
