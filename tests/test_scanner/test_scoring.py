"""
Tests for the additive opportunity score and market sentiment.
"""
import pytest
import pandas as pd
import numpy as np
from vectorflux.scanner import (
    ScanInputs,
    OpportunityType,
    MarketSentiment,
    TopMover,
    build_inputs,
    score_opportunity,
    support_resistance,
    market_sentiment,
    move_analysis,
    last_change_pct,
)
from vectorflux.indicators import INDICATOR_COLUMNS, TrendDirection
from vectorflux.shared.errors import InsufficientDataError

# Last five closes alternate, so neither pattern rule fires
NEUTRAL_HISTORY = tuple([100.0] * 25 + [100.0, 101.0, 100.0, 101.0, 100.0])


def inputs(**overrides):
    """Inputs for which no rule fires (confidence stays at 50)."""
    values = dict(
        symbol="AAPL", price=100.0, sma20=100.0, sma50=100.0, rsi=65.0, macd=0.0,
        support=50.0, resistance=200.0, volume=1000.0, avg_volume=1000.0,
        price_history=NEUTRAL_HISTORY,
    )
    values.update(overrides)
    return ScanInputs(**values)


class TestScoreOpportunity:
    """Point contributions of each rule."""

    def test_neutral(self):
        score = score_opportunity(inputs())
        assert score.confidence == 50
        assert score.predicted_change == 0.0
        assert score.opportunity is OpportunityType.BULLISH
        assert score.timeframe == "3-4 weeks"
        assert score.timeframe_days == 25
        assert score.reasoning == ()

    def test_uptrend(self):
        score = score_opportunity(inputs(price=104.0, sma20=102.0))
        assert score.confidence == 65
        assert score.predicted_change == pytest.approx(8.0)
        assert "uptrend confirmed" in score.reasoning[0]

    def test_downtrend(self):
        score = score_opportunity(inputs(price=92.0, sma20=96.0))
        assert score.confidence == 62
        assert score.predicted_change == pytest.approx(-6.0)
        assert score.opportunity is OpportunityType.BEARISH

    def test_oversold_reversal(self):
        score = score_opportunity(inputs(rsi=25.0))
        assert score.confidence == 70
        assert score.predicted_change == pytest.approx(12.0)
        assert score.opportunity is OpportunityType.REVERSAL

    def test_overbought(self):
        score = score_opportunity(inputs(rsi=75.0))
        assert score.confidence == 65
        assert score.opportunity is OpportunityType.BEARISH

    def test_bullish_rsi_zone(self):
        score = score_opportunity(inputs(rsi=55.0))
        assert score.confidence == 60
        assert score.predicted_change == pytest.approx(5.0)

    def test_macd(self):
        assert score_opportunity(inputs(macd=0.3)).confidence == 62
        assert score_opportunity(inputs(macd=-0.3)).confidence == 58

    def test_near_support(self):
        score = score_opportunity(inputs(support=99.0))
        assert score.confidence == 68
        assert score.opportunity is OpportunityType.REVERSAL
        assert score.predicted_change == pytest.approx(10.0)

    def test_breakout_with_volume(self):
        score = score_opportunity(inputs(resistance=101.0, volume=1600.0))
        # resistance +15, volume > 1.5x +10
        assert score.confidence == 75
        assert score.opportunity is OpportunityType.BREAKOUT
        assert score.predicted_change == pytest.approx(15.0 * 1.15)
        assert score.timeframe == "2-3 weeks"
        assert score.timeframe_days == 18

    def test_resistance_without_volume_is_bearish(self):
        score = score_opportunity(inputs(resistance=101.0))
        assert score.confidence == 65
        assert score.opportunity is OpportunityType.BEARISH
        assert score.predicted_change == pytest.approx(-5.0)

    def test_exceptional_volume(self):
        score = score_opportunity(inputs(rsi=55.0, volume=2500.0))
        assert score.confidence == 75
        assert score.predicted_change == pytest.approx(5.0 * 1.3)

    def test_strong_momentum(self):
        history = tuple([80.0] * 25 + [100.0, 101.0, 100.0, 101.0, 100.0])
        score = score_opportunity(inputs(price_history=history))
        assert score.confidence == 62
        assert score.predicted_change == pytest.approx(8.0)
        assert score.reasoning[0].startswith("Strong momentum: 25.0%")

    def test_consistent_uptrend_pattern(self):
        history = tuple([100.0] * 25 + [96.0, 97.0, 98.0, 99.0, 100.0])
        score = score_opportunity(inputs(price_history=history))
        assert score.confidence == 60
        assert score.predicted_change == pytest.approx(5.0)

    def test_major_crypto_multiplier(self):
        score = score_opportunity(inputs(symbol="BTC", rsi=25.0))
        assert score.predicted_change == pytest.approx(12.0 * 1.2)

    def test_confidence_capped(self):
        history = tuple(np.linspace(90, 110, 30))
        score = score_opportunity(inputs(
            price=110.0, sma20=105.0, rsi=55.0, macd=0.5, volume=3000.0,
            price_history=history,
        ))
        assert score.confidence == 95
        assert score.timeframe == "1-2 weeks"
        assert score.timeframe_days == 10

    def test_summary(self):
        score = score_opportunity(inputs(rsi=25.0))
        assert score.summary == "AAPL shows 70% confidence for upward movement of 12.0% over 3-4 weeks"


class TestBuildInputs:

    @pytest.fixture
    def frame(self):
        dates = pd.date_range('2024-01-01', periods=60, freq='D')
        closes = np.linspace(100, 130, 60)
        return pd.DataFrame({
            'Open': closes, 'High': closes + 1, 'Low': closes - 1, 'Close': closes,
            'Volume': np.arange(60, dtype=float) + 1,
        }, index=dates)

    def test_latest_values(self, frame):
        result = build_inputs("AAPL", frame)
        assert result.price == pytest.approx(130.0)
        assert result.sma20 == pytest.approx(frame["Close"].iloc[-20:].mean())
        assert result.sma50 == pytest.approx(frame["Close"].iloc[-50:].mean())
        assert result.rsi == pytest.approx(100.0)
        assert result.avg_volume == pytest.approx(frame["Volume"].iloc[-20:].mean())
        assert len(result.price_history) == 30

    def test_full_indicator_snapshot(self, frame):
        snapshot = build_inputs("AAPL", frame).snapshot
        assert snapshot.timestamp == frame.index[-1]
        for column in INDICATOR_COLUMNS:
            assert getattr(snapshot, column) is not None, column
        assert snapshot.bb_lower < snapshot.bb_middle < snapshot.bb_upper
        assert -100.0 <= snapshot.williams_r <= 0.0

    def test_scored_values_come_from_snapshot(self, frame):
        result = build_inputs("AAPL", frame)
        assert result.sma20 == result.snapshot.sma_short
        assert result.sma50 == result.snapshot.sma_long
        assert result.rsi == result.snapshot.rsi
        assert result.macd == result.snapshot.macd_histogram

    def test_trend(self, frame):
        steep = frame.assign(Close=np.linspace(100, 200, 60))
        assert build_inputs("AAPL", steep).trend is TrendDirection.UPTREND
        assert build_inputs("AAPL", steep.iloc[::-1].set_axis(steep.index)).trend is TrendDirection.DOWNTREND

    def test_needs_fifty_bars(self, frame):
        with pytest.raises(InsufficientDataError):
            build_inputs("AAPL", frame.iloc[:49])


class TestHelpers:

    def test_support_resistance(self):
        assert support_resistance(list(range(10, 0, -1))) == (3.0, 9.0)

    def test_support_resistance_empty(self):
        with pytest.raises(InsufficientDataError):
            support_resistance([])

    def test_last_change(self):
        assert last_change_pct([100.0, 105.0]) == pytest.approx(5.0)
        assert last_change_pct([100.0]) is None

    def test_move_analysis(self):
        assert "significant surge" in move_analysis(12.0, "TSLA")
        assert "strong decline" in move_analysis(-6.0, "TSLA")
        assert "moderate surge" in move_analysis(3.5, "TSLA")


class TestMarketSentiment:

    def test_bullish_movers(self):
        assert market_sentiment([], [TopMover("A", 5.0, "")]) is MarketSentiment.BULLISH

    def test_bearish_movers(self):
        assert market_sentiment([], [TopMover("A", -5.0, "")]) is MarketSentiment.BEARISH

    def test_balanced_is_neutral(self):
        movers = [TopMover("A", 5.0, ""), TopMover("B", -4.5, "")]
        assert market_sentiment([], movers) is MarketSentiment.NEUTRAL

    def test_empty_is_neutral(self):
        assert market_sentiment([], []) is MarketSentiment.NEUTRAL
