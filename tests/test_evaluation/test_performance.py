"""
Tests for performance metrics.
"""
import pytest
import pandas as pd
import numpy as np
from vectorflux.evaluation import (
    PerformanceAnalyzer,
    EquityPoint,
    ExitReason,
    Trade,
    equity_returns,
    sharpe_ratio,
    max_drawdown,
    profit_factor,
    monthly_returns,
)


def make_trade(pnl, entry='2024-01-01', exit='2024-01-11'):
    return Trade(
        entry_date=pd.Timestamp(entry),
        entry_price=100.0,
        quantity=10,
        exit_date=pd.Timestamp(exit),
        exit_price=100.0 + pnl / 10,
        pnl=pnl,
        pnl_percent=pnl / 1000 * 100,
        reason=ExitReason.SIGNAL,
    )


def make_equity(values, start='2024-01-01'):
    dates = pd.date_range(start, periods=len(values), freq='D')
    points = []
    peak = values[0]
    for date, value in zip(dates, values):
        peak = max(peak, value)
        points.append(EquityPoint(date=date, value=value, drawdown_percent=(peak - value) / peak * 100))
    return points


class TestProfitFactor:

    def test_no_losing_trades_is_one(self):
        assert profit_factor([make_trade(50.0), make_trade(20.0)]) == 1

    def test_no_trades_is_one(self):
        assert profit_factor([]) == 1.0

    def test_ratio(self):
        assert profit_factor([make_trade(60.0), make_trade(-20.0), make_trade(-10.0)]) == pytest.approx(2.0)

    def test_only_losers_is_zero(self):
        assert profit_factor([make_trade(-10.0)]) == 0.0


class TestSharpe:

    def test_flat_curve_is_zero(self):
        assert sharpe_ratio(equity_returns(make_equity([100.0] * 10))) == 0.0

    def test_empty_is_zero(self):
        assert sharpe_ratio(np.array([])) == 0.0

    def test_annualized_population_std(self):
        returns = np.array([0.01, -0.005, 0.02, 0.0])
        expected = returns.mean() / returns.std(ddof=0) * np.sqrt(252)
        assert sharpe_ratio(returns) == pytest.approx(expected)


class TestDrawdown:

    def test_max_drawdown(self):
        equity = make_equity([100.0, 120.0, 90.0, 110.0])
        assert max_drawdown(equity) == pytest.approx(25.0)

    def test_empty(self):
        assert max_drawdown([]) == 0.0


class TestMonthlyReturns:

    def test_month_end_returns(self):
        dates = [pd.Timestamp('2024-01-15'), pd.Timestamp('2024-01-31'), pd.Timestamp('2024-02-29')]
        equity = [EquityPoint(d, v, 0.0) for d, v in zip(dates, [100.0, 110.0, 121.0])]
        result = monthly_returns(equity)
        assert len(result) == 2
        assert result.iloc[0] == pytest.approx(10.0)
        assert result.iloc[1] == pytest.approx(10.0)

    def test_empty(self):
        assert monthly_returns([]).empty


class TestPerformanceAnalyzer:

    def test_analyze(self):
        trades = [make_trade(100.0), make_trade(-50.0), make_trade(30.0, exit='2024-01-05')]
        equity = make_equity([10000.0, 10100.0, 10050.0, 10080.0])
        metrics = PerformanceAnalyzer().analyze(trades, equity, 10000.0, 10080.0)
        assert metrics.total_trades == 3
        assert metrics.winning_trades == 2
        assert metrics.losing_trades == 1
        assert metrics.win_rate == pytest.approx(2 / 3)
        assert metrics.total_return == pytest.approx(0.8)
        assert metrics.profit_factor == pytest.approx(130 / 50)
        assert metrics.largest_win == 100.0
        assert metrics.largest_loss == -50.0
        assert metrics.expectancy == pytest.approx(80 / 3)
        assert metrics.average_holding_days == pytest.approx((10 + 10 + 4) / 3)

    def test_no_trades(self):
        metrics = PerformanceAnalyzer().analyze([], make_equity([10000.0] * 5), 10000.0)
        assert metrics.win_rate == 0.0
        assert metrics.profit_factor == 1.0
        assert metrics.total_return == 0.0
        assert metrics.sharpe_ratio == 0.0
        assert all(np.isfinite(v) for v in metrics.to_dict().values())

    def test_final_capital_defaults_to_last_equity(self):
        metrics = PerformanceAnalyzer().analyze([], make_equity([10000.0, 11000.0]), 10000.0)
        assert metrics.total_return == pytest.approx(10.0)
