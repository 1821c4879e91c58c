"""
Tests for the backtest simulator.
"""
import pytest
import pandas as pd
import numpy as np
from vectorflux.evaluation import BacktestSimulator, ExitReason
from vectorflux.data import frame_to_bars
from vectorflux.signals import StrategyDefinition, StrategyConditions, RiskManagement
from vectorflux.shared.errors import InsufficientDataError, InvalidParametersError
from vectorflux.shared.types import StrategyType


def make_bars(closes, volumes=None, start='2023-01-02'):
    closes = np.asarray(closes, dtype=float)
    n = closes.shape[0]
    dates = pd.date_range(start, periods=n, freq='D')
    if volumes is None:
        volumes = np.full(n, 1_000_000.0)
    return pd.DataFrame({
        'Open': closes,
        'High': closes * 1.01,
        'Low': closes * 0.99,
        'Close': closes,
        'Volume': volumes,
    }, index=dates)


def make_definition(strategy_type=StrategyType.MOMENTUM, stop=3.0, profit=100.0, position=0.1, **conditions):
    values = dict(
        rsi_lower=40, rsi_upper=101, sma_short=10, sma_long=30,
        macd_threshold=0.1, volume_multiplier=0.5,
    )
    values.update(conditions)
    return StrategyDefinition(
        id=f"{strategy_type.value}-test",
        name="Test",
        type=strategy_type,
        conditions=StrategyConditions(**values),
        risk_management=RiskManagement(stop, profit, position),
    )


@pytest.fixture
def rising_bars():
    """100 bars rising linearly from 100 to 150."""
    return make_bars(np.linspace(100, 150, 100))


def random_bars(seed, n=300):
    """Geometric random walk with random volume."""
    rng = np.random.default_rng(seed)
    closes = 100 * np.exp(np.cumsum(rng.normal(0.0005, 0.02, n)))
    volumes = rng.uniform(5e5, 2e6, n)
    return make_bars(closes, volumes)


@pytest.fixture
def noisy_bars():
    return random_bars(3)


SEEDS = [0, 1, 2, 3, 4, 5, 6, 7]


class TestRisingSeries:
    """A steadily rising series opens one long position and holds it."""

    def test_single_profitable_trade(self, rising_bars):
        result = BacktestSimulator().run(rising_bars, make_definition())
        assert len(result.trades) == 1
        assert result.trades[0].pnl > 0

    def test_trade_details(self, rising_bars):
        trade = BacktestSimulator().run(rising_bars, make_definition()).trades[0]
        # First decision bar is sma_long = 30
        assert trade.entry_date == rising_bars.index[30]
        assert trade.quantity == int(10000 * 0.1 // rising_bars["Close"].iloc[30])
        assert trade.reason is ExitReason.END_OF_DATA
        assert trade.exit_price == pytest.approx(150.0)

    def test_metrics(self, rising_bars):
        result = BacktestSimulator().run(rising_bars, make_definition())
        m = result.metrics
        assert m.total_trades == 1
        assert m.win_rate == 1.0
        assert m.profit_factor == 1.0
        assert m.total_return > 0
        assert m.max_drawdown == 0.0
        assert result.final_capital == pytest.approx(10000 + result.trades[0].pnl)

    def test_equity_starts_at_first_decision_bar(self, rising_bars):
        result = BacktestSimulator().run(rising_bars, make_definition())
        assert len(result.equity) == 70
        assert result.equity[0].date == rising_bars.index[30]
        assert result.equity[0].value == pytest.approx(10000.0)

    def test_equity_includes_uninvested_cash(self, rising_bars):
        result = BacktestSimulator().run(rising_bars, make_definition())
        trade = result.trades[0]
        cash = 10000 - trade.quantity * trade.entry_price
        closes = rising_bars["Close"].iloc[31:]
        assert len(result.equity[1:]) == len(closes)
        for point, close in zip(result.equity[1:], closes):
            assert point.value == pytest.approx(cash + trade.quantity * close)
        # A 10% position marked without its cash would show a ~90% drawdown
        assert result.metrics.max_drawdown == 0.0

    def test_take_profit(self, rising_bars):
        result = BacktestSimulator().run(rising_bars, make_definition(profit=5.0))
        assert result.trades[0].reason is ExitReason.TAKE_PROFIT
        assert result.trades[0].pnl_percent >= 5.0

    def test_accepts_price_bars(self, rising_bars):
        from_frame = BacktestSimulator().run(rising_bars, make_definition())
        from_bars = BacktestSimulator().run(frame_to_bars(rising_bars), make_definition())
        assert from_bars.metrics == from_frame.metrics


class TestStopLoss:

    def test_stop_loss_closes_position(self):
        closes = np.concatenate([np.linspace(100, 130, 40), np.linspace(129, 100, 20)])
        result = BacktestSimulator().run(make_bars(closes), make_definition(stop=3.0))
        assert result.trades[0].reason is ExitReason.STOP_LOSS
        assert result.trades[0].pnl < 0


class TestInvariants:
    """Determinism, single position and bounded metrics."""

    @pytest.mark.parametrize("seed", SEEDS)
    @pytest.mark.parametrize("strategy_type", list(StrategyType))
    def test_deterministic(self, seed, strategy_type):
        bars = random_bars(seed)
        definition = make_definition(strategy_type, stop=3.0, profit=8.0, rsi_upper=70, volume_multiplier=1.0)
        first = BacktestSimulator().run(bars, definition)
        second = BacktestSimulator().run(bars, definition)
        assert first == second

    @pytest.mark.parametrize("seed", SEEDS)
    @pytest.mark.parametrize("strategy_type", list(StrategyType))
    def test_one_position_at_a_time(self, seed, strategy_type):
        definition = make_definition(strategy_type, stop=3.0, profit=8.0, rsi_upper=70, volume_multiplier=1.0)
        trades = BacktestSimulator().run(random_bars(seed), definition).trades
        for earlier, later in zip(trades, trades[1:]):
            assert later.entry_date >= earlier.exit_date
        for trade in trades:
            assert trade.exit_date >= trade.entry_date

    @pytest.mark.parametrize("strategy_type", list(StrategyType))
    def test_metric_bounds(self, noisy_bars, strategy_type):
        definition = make_definition(strategy_type, stop=3.0, profit=8.0, rsi_upper=70, volume_multiplier=1.0)
        result = BacktestSimulator().run(noisy_bars, definition)
        assert 0.0 <= result.metrics.max_drawdown <= 100.0
        assert 0.0 <= result.metrics.win_rate <= 1.0
        assert all(p.value >= 0 for p in result.equity)

    def test_no_look_ahead(self, noisy_bars):
        definition = make_definition(StrategyType.SWING, stop=3.0, profit=8.0, rsi_upper=70)
        full = BacktestSimulator().run(noisy_bars, definition)
        cutoff = noisy_bars.index[200]
        truncated = BacktestSimulator().run(noisy_bars.iloc[:201], definition)
        # Decisions up to the cutoff never depend on later bars
        full_entries = [t.entry_date for t in full.trades if t.entry_date <= cutoff]
        truncated_entries = [t.entry_date for t in truncated.trades]
        assert truncated_entries == full_entries


class TestFees:

    def test_fees_reduce_pnl(self, rising_bars):
        definition = make_definition()
        plain = BacktestSimulator().run(rising_bars, definition).trades[0]
        charged = BacktestSimulator(fee_pct=0.001, fee_absolute=1.0).run(rising_bars, definition).trades[0]
        assert charged.fees > 0
        assert charged.pnl == pytest.approx(plain.pnl - charged.fees)

    @pytest.mark.parametrize("kwargs", [
        {"initial_capital": 0},
        {"fee_pct": -0.1},
        {"fee_absolute": -1.0},
    ])
    def test_invalid_settings(self, kwargs):
        with pytest.raises(InvalidParametersError):
            BacktestSimulator(**kwargs)


class TestInputErrors:

    def test_insufficient_data(self):
        with pytest.raises(InsufficientDataError):
            BacktestSimulator().run(make_bars(np.linspace(100, 110, 20)), make_definition())

    def test_unordered_bars(self, rising_bars):
        with pytest.raises(InvalidParametersError):
            BacktestSimulator().run(rising_bars.iloc[::-1], make_definition())

    def test_non_positive_close(self, rising_bars):
        bad = rising_bars.copy()
        bad.iloc[50, bad.columns.get_loc("Close")] = 0.0
        with pytest.raises(InvalidParametersError):
            BacktestSimulator().run(bad, make_definition())

    def test_symbol_stored(self, rising_bars):
        result = BacktestSimulator().run(rising_bars, make_definition(), symbol="AAPL")
        assert result.symbol == "AAPL"
        assert result.strategy_version == 1
