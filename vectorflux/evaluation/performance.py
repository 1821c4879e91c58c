"""
Performance metrics for backtest output.

Computes win rate, total return, drawdown, Sharpe ratio and profit factor
from a trade ledger and an equity curve, plus trade statistics (average and
largest win/loss, expectancy, holding period) and monthly returns.
Every division has a defined default; metrics are never NaN or infinite.
"""
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from .backtest_types import BacktestMetrics, EquityPoint, Trade
from ..shared.defaults import TRADING_DAYS_PER_YEAR


def equity_returns(equity: Sequence[EquityPoint]) -> np.ndarray:
    """Bar-to-bar fractional returns of the equity curve (0 where the previous value is 0)."""
    values = np.array([p.value for p in equity], dtype=float)
    if values.shape[0] < 2:
        return np.empty(0, dtype=float)
    prev = values[:-1]
    out = np.zeros(prev.shape[0], dtype=float)
    np.divide(values[1:] - prev, prev, out=out, where=prev != 0)
    return out


def sharpe_ratio(returns: np.ndarray, periods_per_year: int = TRADING_DAYS_PER_YEAR) -> float:
    """mean / population std * sqrt(periods); 0 when there is no variation."""
    if returns.shape[0] == 0:
        return 0.0
    std = float(np.std(returns))
    if std == 0.0:
        return 0.0
    return float(np.mean(returns) / std * np.sqrt(periods_per_year))


def max_drawdown(equity: Sequence[EquityPoint]) -> float:
    """Largest recorded drawdown in percent (0 for an empty curve)."""
    if not equity:
        return 0.0
    return float(max(p.drawdown_percent for p in equity))


def profit_factor(trades: Sequence[Trade]) -> float:
    """
    Gross winning pnl / abs(gross losing pnl).

    Exactly 1.0 when there are no losing trades (including no trades at all).
    """
    gross_loss = sum(t.pnl for t in trades if t.is_loss)
    if gross_loss == 0:
        return 1.0
    gross_win = sum(t.pnl for t in trades if t.is_win)
    return float(gross_win / abs(gross_loss))


def monthly_returns(equity: Sequence[EquityPoint]) -> pd.Series:
    """
    Percent return per calendar month from month-end equity values.

    The first month is measured against the first equity value.
    """
    if not equity:
        return pd.Series(dtype=float, name="monthly_return")
    values = pd.Series(
        [p.value for p in equity],
        index=pd.DatetimeIndex([p.date for p in equity]),
    )
    month_end = values.resample("ME").last().dropna()
    previous = month_end.shift(1)
    previous.iloc[0] = values.iloc[0]
    returns = (month_end / previous - 1.0) * 100.0
    return returns.fillna(0.0).rename("monthly_return")


class PerformanceAnalyzer:
    """Turns a trade ledger and an equity curve into BacktestMetrics."""

    def __init__(self, periods_per_year: int = TRADING_DAYS_PER_YEAR):
        self.periods_per_year = periods_per_year

    def analyze(
        self,
        trades: Sequence[Trade],
        equity: Sequence[EquityPoint],
        initial_capital: float,
        final_capital: Optional[float] = None,
    ) -> BacktestMetrics:
        """
        Compute metrics for one run.

        Args:
            trades: Closed trades
            equity: One point per simulated bar
            initial_capital: Starting cash
            final_capital: Cash after all positions are closed (default: last equity value)

        Returns:
            BacktestMetrics
        """
        if final_capital is None:
            final_capital = equity[-1].value if equity else initial_capital

        wins = [t.pnl for t in trades if t.is_win]
        losses = [t.pnl for t in trades if t.is_loss]
        total = len(trades)

        total_return = (
            (final_capital - initial_capital) / initial_capital * 100.0
            if initial_capital else 0.0
        )
        returns = equity_returns(equity)

        annualized = 0.0
        if len(equity) >= 2:
            days = (equity[-1].date - equity[0].date).days
            if days > 0:
                annualized = total_return * 365.0 / days

        return BacktestMetrics(
            win_rate=len(wins) / total if total else 0.0,
            total_return=float(total_return),
            max_drawdown=max_drawdown(equity),
            sharpe_ratio=sharpe_ratio(returns, self.periods_per_year),
            profit_factor=profit_factor(trades),
            total_trades=total,
            winning_trades=len(wins),
            losing_trades=len(losses),
            average_return=float(np.mean(returns) * 100.0) if returns.shape[0] else 0.0,
            average_win=float(np.mean(wins)) if wins else 0.0,
            average_loss=float(np.mean(losses)) if losses else 0.0,
            largest_win=float(max(wins)) if wins else 0.0,
            largest_loss=float(min(losses)) if losses else 0.0,
            expectancy=float(np.mean([t.pnl for t in trades])) if trades else 0.0,
            average_holding_days=float(np.mean([t.holding_days for t in trades])) if trades else 0.0,
            annualized_return=float(annualized),
        )
