"""
Indicator calculation module.

Provides:
- Pure indicator functions (SMA, EMA, RSI, MACD, Bollinger, Stochastic, ATR, OBV, ADX, CCI, Williams %R)
- IndicatorSeries for aligning outputs of different warm-ups to one bar index
- TechnicalIndicators facade computing the full set over an OHLCV DataFrame
"""
from .library import (
    sma,
    ema,
    rsi,
    macd,
    bollinger_bands,
    stochastic,
    true_range,
    atr,
    obv,
    adx,
    cci,
    williams_r,
    warmup_offset,
    MACDResult,
    BollingerBands,
    StochasticResult,
)
from .series import IndicatorSeries
from .technical import (
    INDICATOR_COLUMNS,
    TechnicalIndicators,
    IndicatorSnapshot,
    TrendDirection,
    VolumeProfile,
    detect_trend,
    volume_profile,
)

__all__ = [
    'sma',
    'ema',
    'rsi',
    'macd',
    'bollinger_bands',
    'stochastic',
    'true_range',
    'atr',
    'obv',
    'adx',
    'cci',
    'williams_r',
    'warmup_offset',
    'MACDResult',
    'BollingerBands',
    'StochasticResult',
    'IndicatorSeries',
    'INDICATOR_COLUMNS',
    'TechnicalIndicators',
    'IndicatorSnapshot',
    'TrendDirection',
    'VolumeProfile',
    'detect_trend',
    'volume_profile',
]
