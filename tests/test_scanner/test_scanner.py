"""
Tests for the market scanner over an in-memory provider.
"""
from datetime import datetime, timedelta

import pytest
import pandas as pd
import numpy as np
from vectorflux.data import FrameDataProvider
from vectorflux.scanner import MarketScanner, DEFAULT_UNIVERSE
from vectorflux.shared.errors import ErrorKind, InvalidParametersError
from vectorflux.shared.types import AssetType

FIXED_NOW = datetime(2024, 7, 1, 16, 0)


def make_frame(closes):
    closes = np.asarray(closes, dtype=float)
    dates = pd.date_range('2024-01-01', periods=closes.shape[0], freq='D')
    return pd.DataFrame({
        'Open': closes,
        'High': closes + 1,
        'Low': closes - 1,
        'Close': closes,
        'Volume': np.full(closes.shape[0], 1000.0),
    }, index=dates)


@pytest.fixture
def frames():
    rising = np.linspace(100, 130, 80)
    jump = np.append(np.linspace(100, 110, 79), 115.5)  # +5% last bar
    falling = np.linspace(130, 100, 80)
    return {
        "AAPL": make_frame(rising),
        "TSLA": make_frame(jump),
        "MSFT": make_frame(falling),
        "SHORT": make_frame(np.linspace(100, 110, 20)),
    }


@pytest.fixture
def universe():
    return {
        "AAPL": AssetType.STOCK,
        "TSLA": AssetType.STOCK,
        "MSFT": AssetType.STOCK,
        "SHORT": AssetType.STOCK,
        "MISSING": "crypto",
    }


def make_scanner(frames, universe, **kwargs):
    kwargs.setdefault("clock", lambda: FIXED_NOW)
    return MarketScanner(FrameDataProvider(frames), universe=universe, **kwargs)


class TestConstruction:

    def test_empty_universe(self, frames):
        with pytest.raises(InvalidParametersError):
            MarketScanner(FrameDataProvider(frames), universe={})

    def test_invalid_top_n(self, frames, universe):
        with pytest.raises(InvalidParametersError):
            make_scanner(frames, universe, top_n=0)

    def test_default_universe(self, frames):
        scanner = MarketScanner(FrameDataProvider(frames))
        assert scanner.universe == DEFAULT_UNIVERSE
        assert scanner.universe["BTC"] is AssetType.CRYPTO
        assert scanner.universe["AAPL"] is AssetType.STOCK


class TestScan:
    """Partial results, ranking and filters."""

    def test_partial_failures(self, frames, universe):
        results = make_scanner(frames, universe, min_confidence=-1).scan()
        assert results.scanned == 5
        failures = {f.symbol: f.error_kind for f in results.failures}
        assert failures == {
            "SHORT": ErrorKind.INSUFFICIENT_DATA,
            "MISSING": ErrorKind.COMPUTATION_ERROR,
        }
        assert {o.symbol for o in results.opportunities} == {"AAPL", "TSLA", "MSFT"}

    def test_sorted_by_confidence(self, frames, universe):
        results = make_scanner(frames, universe, min_confidence=-1).scan()
        confidences = [o.confidence for o in results.opportunities]
        assert confidences == sorted(confidences, reverse=True)

    def test_top_n(self, frames, universe):
        results = make_scanner(frames, universe, min_confidence=-1, top_n=1).scan()
        assert len(results.opportunities) == 1

    def test_min_confidence_filter(self, frames, universe):
        results = make_scanner(frames, universe, min_confidence=95).scan()
        assert results.opportunities == []

    def test_top_movers(self, frames, universe):
        results = make_scanner(frames, universe).scan()
        assert [m.symbol for m in results.top_movers] == ["TSLA"]
        assert results.top_movers[0].change == pytest.approx(5.0)

    def test_scan_time(self, frames, universe):
        assert make_scanner(frames, universe).scan().scan_time == FIXED_NOW


class TestAnalyze:

    def test_opportunity_fields(self, frames, universe):
        scanner = make_scanner(frames, universe, min_confidence=-1)
        opportunity = scanner.analyze("AAPL", frames["AAPL"])
        assert opportunity.symbol == "AAPL"
        assert opportunity.asset_type is AssetType.STOCK
        assert opportunity.discovered_at == FIXED_NOW
        assert opportunity.expires_at > FIXED_NOW
        assert opportunity.expires_at - FIXED_NOW in (timedelta(days=10), timedelta(days=18), timedelta(days=25))
        assert opportunity.indicators.price == pytest.approx(130.0)

    def test_opportunity_carries_full_indicator_set(self, frames, universe):
        scanner = make_scanner(frames, universe, min_confidence=-1)
        snapshot = scanner.analyze("AAPL", frames["AAPL"]).indicators.snapshot
        for value in (
            snapshot.bb_upper, snapshot.stoch_k, snapshot.stoch_d, snapshot.atr,
            snapshot.adx, snapshot.cci, snapshot.williams_r, snapshot.obv,
        ):
            assert value is not None

    def test_below_threshold(self, frames, universe):
        scanner = make_scanner(frames, universe, min_confidence=95)
        assert scanner.analyze("AAPL", frames["AAPL"]) is None

    def test_opportunity_for(self, frames, universe):
        results = make_scanner(frames, universe, min_confidence=-1).scan()
        assert results.opportunity_for("AAPL").symbol == "AAPL"
        assert results.opportunity_for("NOPE") is None
