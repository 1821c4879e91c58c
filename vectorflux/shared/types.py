"""
Shared types for the trading core.

This module consolidates the enums and the PriceBar record that are used
across indicators, signals, evaluation and scanning to avoid duplication
and inconsistent type checking.
"""
from dataclasses import dataclass
from enum import Enum

import pandas as pd


class StrategyType(Enum):
    """Rule family of a strategy."""
    MOMENTUM = "momentum"
    REVERSAL = "reversal"
    BREAKOUT = "breakout"
    SCALPING = "scalping"
    SWING = "swing"


class RiskLevel(Enum):
    """Risk tolerance used by the strategy factory."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AssetType(Enum):
    """Asset class of a scanned symbol."""
    STOCK = "stock"
    CRYPTO = "crypto"


class SignalLabel(Enum):
    """Label of a prediction signal."""
    STRONG_BUY = "STRONG BUY"
    BUY = "BUY"
    HOLD = "HOLD"
    SELL = "SELL"
    STRONG_SELL = "STRONG SELL"


@dataclass(frozen=True)
class PriceBar:
    """One OHLCV bar."""
    date: pd.Timestamp
    open: float
    high: float
    low: float
    close: float
    volume: float
