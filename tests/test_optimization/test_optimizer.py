"""
Tests for the local-search strategy optimizer.
"""
from datetime import datetime

import pytest
import pandas as pd
import numpy as np
from vectorflux.optimization import StrategyOptimizer, neighbor_changes
from vectorflux.signals import (
    StrategyDefinition,
    StrategyConditions,
    RiskManagement,
    StrategyPerformance,
)
from vectorflux.shared.errors import ErrorKind, InsufficientDataError
from vectorflux.shared.types import StrategyType

FIXED_NOW = datetime(2024, 5, 1, 9, 30)


def make_bars(n=300, seed=11):
    rng = np.random.default_rng(seed)
    closes = 100 * np.exp(np.cumsum(rng.normal(0.001, 0.015, n)))
    dates = pd.date_range('2022-01-03', periods=n, freq='D')
    return pd.DataFrame({
        'Open': closes,
        'High': closes * 1.01,
        'Low': closes * 0.99,
        'Close': closes,
        'Volume': rng.uniform(5e5, 2e6, n),
    }, index=dates)


def make_definition(baseline=0.0, rsi_lower=30, strategy_type=StrategyType.SWING):
    return StrategyDefinition(
        id="swing-opt",
        name="Swing",
        type=strategy_type,
        conditions=StrategyConditions(
            rsi_lower=rsi_lower, rsi_upper=70, sma_short=10, sma_long=30,
            macd_threshold=0.0, volume_multiplier=1.0,
        ),
        risk_management=RiskManagement(3.0, 8.0, 0.2),
        version=3,
        performance=StrategyPerformance(total_return=baseline),
    )


@pytest.fixture
def bars():
    return make_bars()


@pytest.fixture
def optimizer():
    return StrategyOptimizer(clock=lambda: FIXED_NOW)


class TestNeighborhood:

    def test_fixed_order(self):
        labels = [label for label, _ in neighbor_changes(make_definition().conditions)]
        assert labels == [
            "rsi_band_wider",
            "rsi_band_narrower",
            "sma_slower",
            "macd_threshold_scaled",
            "volume_multiplier_scaled",
        ]

    def test_changes(self):
        changes = dict(neighbor_changes(make_definition().conditions))
        assert changes["rsi_band_wider"] == {"rsi_lower": 25, "rsi_upper": 75}
        assert changes["rsi_band_narrower"] == {"rsi_lower": 35, "rsi_upper": 65}
        assert changes["sma_slower"] == {"sma_short": 12, "sma_long": 35}
        assert changes["volume_multiplier_scaled"]["volume_multiplier"] == pytest.approx(1.1)


class TestAcceptance:
    """Accept the best neighbor only when it beats the recorded return."""

    def test_low_baseline_creates_new_version(self, bars, optimizer):
        original = make_definition(baseline=-1e9)
        report = optimizer.run(bars, original)
        assert report.accepted
        assert report.definition.version == original.version + 1
        assert report.definition.conditions == report.best.conditions
        assert report.definition.updated_at == FIXED_NOW
        assert report.definition.performance.total_return == pytest.approx(report.best.score)
        assert report.definition.performance.last_backtest == FIXED_NOW
        assert report.definition.id == original.id

    def test_high_baseline_returns_original(self, bars, optimizer):
        original = make_definition(baseline=1e9)
        report = optimizer.run(bars, original)
        assert not report.accepted
        assert report.definition is original
        assert report.definition.version == original.version

    def test_optimize_shortcut(self, bars, optimizer):
        original = make_definition(baseline=1e9)
        assert optimizer.optimize(bars, original) is original

    def test_best_is_first_maximum(self, bars, optimizer):
        report = optimizer.run(bars, make_definition())
        scored = [s for s in report.scores if s.ok]
        top = max(s.score for s in scored)
        first_top = min(s.index for s in scored if s.score == top)
        assert report.best.index == first_top

    def test_original_untouched(self, bars, optimizer):
        original = make_definition(baseline=-1e9)
        before = original.to_dict()
        optimizer.run(bars, original)
        assert original.to_dict() == before


class TestFailures:
    """Failed neighbors are reported, never ranked."""

    def test_invalid_neighbor_is_separated(self, bars, optimizer):
        report = optimizer.run(bars, make_definition(baseline=-1e9, rsi_lower=2))
        assert [s.label for s in report.failures] == ["rsi_band_wider"]
        assert report.failures[0].error_kind is ErrorKind.INVALID_PARAMETERS
        assert report.failures[0].score is None
        assert report.best.label != "rsi_band_wider"

    def test_all_neighbors_fail(self, optimizer):
        with pytest.raises(InsufficientDataError):
            optimizer.run(make_bars(n=20), make_definition())

    def test_slow_neighbor_short_of_data(self, optimizer):
        # 32 bars cover sma_long 30 but not the slower neighbor's 35
        report = optimizer.run(make_bars(n=32), make_definition(baseline=1e9))
        failed = {s.label: s.error_kind for s in report.failures}
        assert failed == {"sma_slower": ErrorKind.INSUFFICIENT_DATA}


class TestWindow:

    def test_neighbors_trade_the_same_trailing_bars(self, bars):
        optimizer = StrategyOptimizer(window_bars=60)
        report = optimizer.run(bars, make_definition())
        for score in report.scores:
            assert len(score.backtest.equity) == 60
            assert score.backtest.end_date == bars.index[-1]
            assert score.backtest.equity[0].date == bars.index[-60]

    def test_invalid_window(self):
        with pytest.raises(ValueError):
            StrategyOptimizer(window_bars=0)


class TestParallel:

    def test_threaded_matches_sequential(self, bars):
        definition = make_definition(baseline=-1e9)
        sequential = StrategyOptimizer(max_workers=1, clock=lambda: FIXED_NOW).run(bars, definition)
        threaded = StrategyOptimizer(max_workers=4, clock=lambda: FIXED_NOW).run(bars, definition)
        assert [s.label for s in threaded.scores] == [s.label for s in sequential.scores]
        assert [s.score for s in threaded.scores] == [s.score for s in sequential.scores]
        assert threaded.definition == sequential.definition
