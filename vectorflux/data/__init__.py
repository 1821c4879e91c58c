"""
Data loading and provider module.

Defines the DataProvider interface (symbol, period -> OHLCV bars) and
implementations over CSV files, Yahoo Finance and in-memory frames.
"""
from .provider import (
    DataProvider,
    FrameDataProvider,
    OHLCV_COLUMNS,
    bars_to_frame,
    frame_to_bars,
    validate_bars,
    coerce_bars,
    period_to_days,
)
from .loader import DataLoader, CsvDataProvider
from .download import YahooDataProvider, download_symbols, yahoo_ticker

__all__ = [
    'DataProvider',
    'FrameDataProvider',
    'OHLCV_COLUMNS',
    'bars_to_frame',
    'frame_to_bars',
    'validate_bars',
    'coerce_bars',
    'period_to_days',
    'DataLoader',
    'CsvDataProvider',
    'YahooDataProvider',
    'download_symbols',
    'yahoo_ticker',
]
