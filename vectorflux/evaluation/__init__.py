"""
Backtest evaluation module.

Walk-forward simulation of one strategy over one bar series, never using
future bars, plus performance metrics over the resulting trades and equity.
"""
from .simulator import BacktestSimulator
from .performance import (
    PerformanceAnalyzer,
    equity_returns,
    sharpe_ratio,
    max_drawdown,
    profit_factor,
    monthly_returns,
)
from .backtest_types import (
    BacktestResult,
    BacktestMetrics,
    EquityPoint,
    ExitReason,
    Position,
    PositionState,
    Trade,
)

__all__ = [
    'BacktestSimulator',
    'PerformanceAnalyzer',
    'equity_returns',
    'sharpe_ratio',
    'max_drawdown',
    'profit_factor',
    'monthly_returns',
    'BacktestResult',
    'BacktestMetrics',
    'EquityPoint',
    'ExitReason',
    'Position',
    'PositionState',
    'Trade',
]
