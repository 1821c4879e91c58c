"""
Technical indicator facade over OHLCV DataFrames.

Wraps the pure functions in library.py: computes the full indicator set for
a bar frame, aligned to the bar index (NaN during warm-up), plus simple
trend and volume helpers used by the scanner.
"""
import os
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

import numpy as np
import pandas as pd

from . import library
from .series import IndicatorSeries
from ..shared.defaults import (
    RSI_PERIOD,
    MACD_FAST, MACD_SLOW, MACD_SIGNAL,
    BOLLINGER_PERIOD, BOLLINGER_K,
    STOCHASTIC_PERIOD, STOCHASTIC_D_PERIOD,
    ATR_PERIOD, ADX_PERIOD, CCI_PERIOD, WILLIAMS_R_PERIOD,
    SCANNER_SMA_SHORT, SCANNER_SMA_LONG,
    TREND_WINDOW, TREND_BAND,
    VOLUME_AVG_WINDOW, VOLUME_SPIKE_RATIO,
)
from ..shared.errors import InvalidParametersError

OHLCV_COLUMNS = ["Open", "High", "Low", "Close", "Volume"]

# Fixed output column order (blocks may finish in any order when threaded)
INDICATOR_COLUMNS = [
    "sma_short", "sma_long",
    "rsi",
    "macd_line", "macd_signal", "macd_histogram",
    "bb_upper", "bb_middle", "bb_lower",
    "stoch_k", "stoch_d",
    "atr", "adx",
    "cci", "williams_r",
    "obv", "volume_sma",
]


class TrendDirection(Enum):
    UPTREND = "uptrend"
    DOWNTREND = "downtrend"
    SIDEWAYS = "sideways"


@dataclass
class VolumeProfile:
    """Current volume relative to its trailing average."""
    current: float
    average: float
    ratio: float
    is_spike: bool


@dataclass
class IndicatorSnapshot:
    """Container for indicator values at the last bar."""
    timestamp: pd.Timestamp
    price: float

    sma_short: Optional[float] = None
    sma_long: Optional[float] = None
    rsi: Optional[float] = None
    macd_line: Optional[float] = None
    macd_signal: Optional[float] = None
    macd_histogram: Optional[float] = None
    bb_upper: Optional[float] = None
    bb_middle: Optional[float] = None
    bb_lower: Optional[float] = None
    stoch_k: Optional[float] = None
    stoch_d: Optional[float] = None
    atr: Optional[float] = None
    adx: Optional[float] = None
    cci: Optional[float] = None
    williams_r: Optional[float] = None
    obv: Optional[float] = None
    volume_sma: Optional[float] = None


def _require_ohlcv(data: pd.DataFrame) -> None:
    missing = [c for c in OHLCV_COLUMNS if c not in data.columns]
    if missing:
        raise InvalidParametersError(f"Missing OHLCV columns: {missing}")


class TechnicalIndicators:
    """Calculates the full indicator set from OHLCV data."""

    def __init__(
        self,
        sma_short_period: int = SCANNER_SMA_SHORT,
        sma_long_period: int = SCANNER_SMA_LONG,
        rsi_period: int = RSI_PERIOD,
        macd_fast: int = MACD_FAST,
        macd_slow: int = MACD_SLOW,
        macd_signal: int = MACD_SIGNAL,
        bollinger_period: int = BOLLINGER_PERIOD,
        bollinger_k: float = BOLLINGER_K,
        stochastic_period: int = STOCHASTIC_PERIOD,
        stochastic_d_period: int = STOCHASTIC_D_PERIOD,
        atr_period: int = ATR_PERIOD,
        adx_period: int = ADX_PERIOD,
        cci_period: int = CCI_PERIOD,
        williams_r_period: int = WILLIAMS_R_PERIOD,
        volume_period: int = VOLUME_AVG_WINDOW,
    ):
        """
        Initialize indicator calculator.

        Args:
            sma_short_period: Short SMA period (default: SCANNER_SMA_SHORT)
            sma_long_period: Long SMA period (default: SCANNER_SMA_LONG)
            rsi_period: RSI period (default: RSI_PERIOD)
            macd_fast: MACD fast EMA period
            macd_slow: MACD slow EMA period
            macd_signal: MACD signal EMA period
            bollinger_period: Bollinger window
            bollinger_k: Bollinger band width in standard deviations
            stochastic_period: %K window
            stochastic_d_period: %D smoothing window
            atr_period: ATR window
            adx_period: ADX window
            cci_period: CCI window
            williams_r_period: Williams %R window
            volume_period: Volume SMA window
        """
        self.sma_short_period = sma_short_period
        self.sma_long_period = sma_long_period
        self.rsi_period = rsi_period
        self.macd_fast = macd_fast
        self.macd_slow = macd_slow
        self.macd_signal = macd_signal
        self.bollinger_period = bollinger_period
        self.bollinger_k = bollinger_k
        self.stochastic_period = stochastic_period
        self.stochastic_d_period = stochastic_d_period
        self.atr_period = atr_period
        self.adx_period = adx_period
        self.cci_period = cci_period
        self.williams_r_period = williams_r_period
        self.volume_period = volume_period

    @staticmethod
    def _aligned(values: np.ndarray, index: pd.Index) -> pd.Series:
        return IndicatorSeries.align(values, len(index)).to_series(index)

    def _compute_trend_block(self, data: pd.DataFrame) -> Tuple[str, Dict[str, pd.Series], float]:
        """Compute SMA block; returns (timing_key, {col: series}, elapsed)."""
        t0 = time.perf_counter()
        closes = data["Close"].to_numpy()
        cols = {
            "sma_short": self._aligned(library.sma(closes, self.sma_short_period), data.index),
            "sma_long": self._aligned(library.sma(closes, self.sma_long_period), data.index),
        }
        return "indicator_sma", cols, time.perf_counter() - t0

    def _compute_momentum_block(self, data: pd.DataFrame) -> Tuple[str, Dict[str, pd.Series], float]:
        """Compute RSI and MACD block."""
        t0 = time.perf_counter()
        closes = data["Close"].to_numpy()
        result = library.macd(closes, self.macd_fast, self.macd_slow, self.macd_signal)
        cols = {
            "rsi": self._aligned(library.rsi(closes, self.rsi_period), data.index),
            "macd_line": self._aligned(result.line, data.index),
            "macd_signal": self._aligned(result.signal, data.index),
            "macd_histogram": self._aligned(result.histogram, data.index),
        }
        return "indicator_momentum", cols, time.perf_counter() - t0

    def _compute_band_block(self, data: pd.DataFrame) -> Tuple[str, Dict[str, pd.Series], float]:
        """Compute Bollinger and stochastic block."""
        t0 = time.perf_counter()
        bands = library.bollinger_bands(data["Close"].to_numpy(), self.bollinger_period, self.bollinger_k)
        stoch = library.stochastic(
            data["High"].to_numpy(), data["Low"].to_numpy(), data["Close"].to_numpy(),
            self.stochastic_period, self.stochastic_d_period,
        )
        cols = {
            "bb_upper": self._aligned(bands.upper, data.index),
            "bb_middle": self._aligned(bands.middle, data.index),
            "bb_lower": self._aligned(bands.lower, data.index),
            "stoch_k": self._aligned(stoch.k, data.index),
            "stoch_d": self._aligned(stoch.d, data.index),
        }
        return "indicator_bands", cols, time.perf_counter() - t0

    def _compute_range_block(self, data: pd.DataFrame) -> Tuple[str, Dict[str, pd.Series], float]:
        """Compute ATR, ADX, CCI and Williams %R block."""
        t0 = time.perf_counter()
        h, l, c = data["High"].to_numpy(), data["Low"].to_numpy(), data["Close"].to_numpy()
        cols = {
            "atr": self._aligned(library.atr(h, l, c, self.atr_period), data.index),
            "adx": self._aligned(library.adx(h, l, c, self.adx_period), data.index),
            "cci": self._aligned(library.cci(h, l, c, self.cci_period), data.index),
            "williams_r": self._aligned(library.williams_r(h, l, c, self.williams_r_period), data.index),
        }
        return "indicator_range", cols, time.perf_counter() - t0

    def _compute_volume_block(self, data: pd.DataFrame) -> Tuple[str, Dict[str, pd.Series], float]:
        """Compute OBV and volume SMA block."""
        t0 = time.perf_counter()
        volumes = data["Volume"].to_numpy()
        cols = {
            "obv": self._aligned(library.obv(data["Close"].to_numpy(), volumes), data.index),
            "volume_sma": self._aligned(library.sma(volumes, self.volume_period), data.index),
        }
        return "indicator_volume", cols, time.perf_counter() - t0

    def calculate_all(
        self,
        data: pd.DataFrame,
        timings: Optional[Dict[str, float]] = None,
        max_workers: Optional[int] = None,
    ) -> pd.DataFrame:
        """
        Calculate all indicators and return them as a DataFrame on the bar index.

        Blocks are computed in parallel via ThreadPoolExecutor when max_workers > 1.

        Args:
            data: DataFrame with OHLCV columns
            timings: If provided, accumulate per-block elapsed seconds
            max_workers: Thread pool size (default: cpu_count); 1 = sequential.

        Returns:
            DataFrame with a ``price`` column and one column per indicator
        """
        _require_ohlcv(data)

        def _acc(key: str, elapsed: float) -> None:
            if timings is not None:
                timings[key] = timings.get(key, 0.0) + elapsed

        df = pd.DataFrame(index=data.index)
        df["price"] = data["Close"].astype(float)

        blocks = [
            self._compute_trend_block,
            self._compute_momentum_block,
            self._compute_band_block,
            self._compute_range_block,
            self._compute_volume_block,
        ]
        workers = max(1, max_workers) if max_workers is not None else (os.cpu_count() or 1)

        if workers <= 1:
            for block in blocks:
                key, cols, elapsed = block(data)
                _acc(key, elapsed)
                for k, v in cols.items():
                    df[k] = v
        else:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = [executor.submit(block, data) for block in blocks]
                for future in as_completed(futures):
                    key, cols, elapsed = future.result()
                    _acc(key, elapsed)
                    for k, v in cols.items():
                        df[k] = v

        return df[["price"] + INDICATOR_COLUMNS]

    def latest(self, data: pd.DataFrame) -> Optional[IndicatorSnapshot]:
        """Indicator values at the last bar, or None for an empty frame."""
        if data.empty:
            return None
        row = self.calculate_all(data, max_workers=1).iloc[-1]
        values = {
            col: (None if pd.isna(row[col]) else float(row[col]))
            for col in INDICATOR_COLUMNS
        }
        return IndicatorSnapshot(timestamp=data.index[-1], price=float(row["price"]), **values)


def detect_trend(prices, window: int = TREND_WINDOW, band: float = TREND_BAND) -> TrendDirection:
    """
    Classify the recent trend by comparing the mean of the last ``window`` closes
    with the mean of the ``window`` closes before them.

    A change beyond +/-band (fraction) is an up/down trend; anything else,
    or too little data, is sideways.
    """
    data = np.asarray(prices, dtype=float)
    if data.shape[0] < 2 * window:
        return TrendDirection.SIDEWAYS
    recent = data[-window:].mean()
    previous = data[-2 * window:-window].mean()
    if previous == 0:
        return TrendDirection.SIDEWAYS
    change = (recent - previous) / previous
    if change > band:
        return TrendDirection.UPTREND
    if change < -band:
        return TrendDirection.DOWNTREND
    return TrendDirection.SIDEWAYS


def volume_profile(
    volumes, window: int = VOLUME_AVG_WINDOW, spike_ratio: float = VOLUME_SPIKE_RATIO
) -> Optional[VolumeProfile]:
    """Last volume vs the mean of the last ``window`` volumes (None when empty)."""
    data = np.asarray(volumes, dtype=float)
    if data.shape[0] == 0:
        return None
    current = float(data[-1])
    average = float(data[-window:].mean())
    ratio = current / average if average > 0 else 0.0
    return VolumeProfile(current=current, average=average, ratio=ratio, is_spike=ratio > spike_ratio)
