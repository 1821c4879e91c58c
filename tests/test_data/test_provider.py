"""
Tests for the bar contract, PriceBar conversion and the in-memory provider.
"""
import pytest
import pandas as pd
import numpy as np
from vectorflux.data import (
    FrameDataProvider,
    OHLCV_COLUMNS,
    bars_to_frame,
    frame_to_bars,
    validate_bars,
    coerce_bars,
    period_to_days,
)
from vectorflux.shared.errors import InsufficientDataError, InvalidParametersError
from vectorflux.shared.types import PriceBar


@pytest.fixture
def sample_frame():
    dates = pd.date_range('2024-01-01', periods=10, freq='D')
    closes = 100 + np.arange(10, dtype=float)
    return pd.DataFrame({
        'Open': closes - 0.5,
        'High': closes + 1,
        'Low': closes - 1,
        'Close': closes,
        'Volume': np.full(10, 1000.0),
    }, index=dates)


class TestConversion:

    def test_frame_to_bars(self, sample_frame):
        bars = frame_to_bars(sample_frame)
        assert len(bars) == 10
        assert bars[0] == PriceBar(
            date=pd.Timestamp('2024-01-01'), open=99.5, high=101.0, low=99.0, close=100.0, volume=1000.0,
        )

    def test_bars_to_frame(self, sample_frame):
        frame = bars_to_frame(frame_to_bars(sample_frame))
        assert list(frame.columns) == OHLCV_COLUMNS
        assert frame.index.name == "Date"
        np.testing.assert_allclose(frame["Close"], sample_frame["Close"])

    def test_coerce_accepts_bar_list(self, sample_frame):
        frame = coerce_bars(frame_to_bars(sample_frame))
        assert len(frame) == 10


class TestValidateBars:

    def test_valid(self, sample_frame):
        result = validate_bars(sample_frame.assign(Extra=1))
        assert list(result.columns) == OHLCV_COLUMNS

    def test_missing_column(self, sample_frame):
        with pytest.raises(InvalidParametersError, match="Volume"):
            validate_bars(sample_frame.drop(columns=["Volume"]))

    def test_unordered(self, sample_frame):
        with pytest.raises(InvalidParametersError, match="ascending"):
            validate_bars(sample_frame.iloc[::-1])

    def test_duplicates(self, sample_frame):
        duplicated = pd.concat([sample_frame.iloc[:3], sample_frame.iloc[2:5]])
        with pytest.raises(InvalidParametersError, match="Duplicate"):
            validate_bars(duplicated)

    def test_string_index_parsed(self, sample_frame):
        frame = sample_frame.copy()
        frame.index = frame.index.strftime('%Y-%m-%d')
        assert isinstance(validate_bars(frame).index, pd.DatetimeIndex)


class TestFrameDataProvider:

    def test_period_trims_to_last_bars(self, sample_frame):
        provider = FrameDataProvider({"AAPL": sample_frame})
        result = provider.fetch("AAPL", "5d")
        assert len(result) == 5
        assert result.index[-1] == sample_frame.index[-1]

    def test_open_period_returns_all(self, sample_frame):
        assert len(FrameDataProvider({"AAPL": sample_frame}).fetch("AAPL", "max")) == 10

    def test_unknown_symbol(self, sample_frame):
        with pytest.raises(KeyError):
            FrameDataProvider({"AAPL": sample_frame}).fetch("MSFT", "90d")

    def test_min_bars(self, sample_frame):
        provider = FrameDataProvider({"AAPL": sample_frame}, min_bars=20)
        with pytest.raises(InsufficientDataError):
            provider.fetch("AAPL", "90d")


class TestPeriodToDays:

    @pytest.mark.parametrize("period,days", [
        ("90d", 90),
        ("2w", 14),
        ("6mo", 180),
        ("1y", 365),
        ("max", None),
        ("abcd", None),
    ])
    def test_periods(self, period, days):
        assert period_to_days(period) == days
