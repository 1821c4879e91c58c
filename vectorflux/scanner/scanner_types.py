"""
Market scanner types: scoring inputs, scores, opportunities and scan results.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from ..indicators.technical import IndicatorSnapshot, TrendDirection
from ..shared.errors import ErrorKind
from ..shared.types import AssetType


class OpportunityType(Enum):
    BULLISH = "bullish"
    BEARISH = "bearish"
    BREAKOUT = "breakout"
    REVERSAL = "reversal"


class MarketSentiment(Enum):
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class ScanInputs:
    """Latest indicator values of one symbol, as consumed by score_opportunity."""
    symbol: str
    price: float
    sma20: float
    sma50: float
    rsi: float
    macd: float  # MACD histogram
    support: float
    resistance: float
    volume: float
    avg_volume: float
    price_history: Tuple[float, ...]  # Last 30 closes, oldest first
    trend: TrendDirection = TrendDirection.SIDEWAYS
    snapshot: Optional[IndicatorSnapshot] = None  # Full indicator set at the last bar


@dataclass(frozen=True)
class OpportunityScore:
    """Output of the additive heuristic score."""
    opportunity: OpportunityType
    confidence: int  # 0-95
    predicted_change: float  # Percent
    timeframe: str
    timeframe_days: int
    summary: str
    reasoning: Tuple[str, ...]


@dataclass(frozen=True)
class Opportunity:
    """A scored symbol that passed the confidence filter."""
    symbol: str
    asset_type: AssetType
    opportunity: OpportunityType
    confidence: int
    predicted_change: float
    timeframe: str
    analysis: str
    indicators: ScanInputs
    reasoning: Tuple[str, ...]
    discovered_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class TopMover:
    symbol: str
    change: float  # Last bar change, percent
    analysis: str


@dataclass(frozen=True)
class ScanFailure:
    """A symbol the scan could not analyze."""
    symbol: str
    error_kind: ErrorKind
    message: str


@dataclass
class ScanResults:
    """Results of one market scan (partial when some symbols failed)."""
    opportunities: List[Opportunity]
    market_sentiment: MarketSentiment
    top_movers: List[TopMover]
    scan_time: datetime
    failures: List[ScanFailure] = field(default_factory=list)
    scanned: int = 0

    def opportunity_for(self, symbol: str) -> Optional[Opportunity]:
        for opp in self.opportunities:
            if opp.symbol == symbol:
                return opp
        return None
