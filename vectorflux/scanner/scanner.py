"""
Market scanner: ranks trading opportunities across a symbol universe.

Symbols are scanned sequentially. A symbol whose fetch or analysis fails
is logged and recorded as a ScanFailure; the remaining symbols are still
scanned (partial results).
"""
import logging
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Mapping, Optional, Union

import pandas as pd

from .scanner_types import Opportunity, ScanFailure, ScanResults, TopMover
from .scoring import build_inputs, last_change_pct, market_sentiment, move_analysis, score_opportunity
from ..data.provider import DataProvider, validate_bars
from ..shared.defaults import (
    DEFAULT_STOCKS,
    DEFAULT_CRYPTO,
    SCANNER_MIN_CONFIDENCE,
    SCANNER_TOP_N,
    SCANNER_MAX_MOVERS,
    SCANNER_MOVER_THRESHOLD_PCT,
    SCANNER_PERIOD,
)
from ..shared.errors import InvalidParametersError, Result
from ..shared.types import AssetType

logger = logging.getLogger(__name__)

DEFAULT_UNIVERSE: Dict[str, AssetType] = {
    **{symbol: AssetType.STOCK for symbol in DEFAULT_STOCKS},
    **{symbol: AssetType.CRYPTO for symbol in DEFAULT_CRYPTO},
}


class MarketScanner:
    """Scores every symbol of a universe and keeps the high-confidence ones."""

    def __init__(
        self,
        provider: DataProvider,
        universe: Optional[Mapping[str, Union[AssetType, str]]] = None,
        min_confidence: float = SCANNER_MIN_CONFIDENCE,
        top_n: int = SCANNER_TOP_N,
        max_movers: int = SCANNER_MAX_MOVERS,
        period: str = SCANNER_PERIOD,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Args:
            provider: Source of OHLCV bars
            universe: symbol -> asset type (default: DEFAULT_UNIVERSE)
            min_confidence: Keep opportunities with confidence strictly above this
            top_n: Maximum opportunities returned
            max_movers: Maximum top movers returned
            period: History requested per symbol
            clock: Source of scan / discovery timestamps
        """
        universe = DEFAULT_UNIVERSE if universe is None else universe
        if not universe:
            raise InvalidParametersError("Scan universe is empty")
        if top_n < 1:
            raise InvalidParametersError(f"top_n must be >= 1, got {top_n}")
        self.provider = provider
        self.universe = {symbol: AssetType(kind) for symbol, kind in universe.items()}
        self.min_confidence = min_confidence
        self.top_n = top_n
        self.max_movers = max_movers
        self.period = period
        self.clock = clock

    def analyze(self, symbol: str, frame: pd.DataFrame) -> Optional[Opportunity]:
        """
        Score one symbol's bars.

        Returns:
            Opportunity when confidence > min_confidence, else None

        Raises:
            InsufficientDataError: Fewer bars than the scoring needs
        """
        inputs = build_inputs(symbol, frame)
        score = score_opportunity(inputs)
        if score.confidence <= self.min_confidence:
            logger.debug("%s scored %d (<= %s), skipped", symbol, score.confidence, self.min_confidence)
            return None
        now = self.clock()
        return Opportunity(
            symbol=symbol,
            asset_type=self.universe.get(symbol, AssetType.STOCK),
            opportunity=score.opportunity,
            confidence=score.confidence,
            predicted_change=score.predicted_change,
            timeframe=score.timeframe,
            analysis=score.summary,
            indicators=inputs,
            reasoning=score.reasoning,
            discovered_at=now,
            expires_at=now + timedelta(days=score.timeframe_days),
        )

    def scan_symbol(self, symbol: str) -> Result:
        """Fetch and analyze one symbol; Result[(Optional[Opportunity], Optional[TopMover])]."""
        try:
            frame = validate_bars(self.provider.fetch(symbol, self.period))
            mover = None
            change = last_change_pct(frame["Close"].to_numpy())
            if change is not None and abs(change) > SCANNER_MOVER_THRESHOLD_PCT:
                mover = TopMover(symbol=symbol, change=change, analysis=move_analysis(change, symbol))
            opportunity = self.analyze(symbol, frame)
        except Exception as e:
            logger.warning("Error analyzing %s: %s", symbol, e)
            return Result.from_exception(e)
        return Result.success((opportunity, mover))

    def scan(self) -> ScanResults:
        """Scan the whole universe; failures are collected, never raised."""
        logger.info("Starting market scan of %d symbols", len(self.universe))
        opportunities: List[Opportunity] = []
        movers: List[TopMover] = []
        failures: List[ScanFailure] = []

        for symbol in self.universe:
            outcome = self.scan_symbol(symbol)
            if not outcome.ok:
                failures.append(ScanFailure(symbol=symbol, error_kind=outcome.error_kind, message=outcome.message))
                continue
            opportunity, mover = outcome.value
            if opportunity is not None:
                opportunities.append(opportunity)
            if mover is not None:
                movers.append(mover)

        # Stable sort: ties keep universe order
        opportunities.sort(key=lambda o: o.confidence, reverse=True)
        sentiment = market_sentiment(opportunities, movers)
        logger.info(
            "Scan finished: %d opportunities, %d movers, %d failures, sentiment %s",
            len(opportunities), len(movers), len(failures), sentiment.value,
        )
        return ScanResults(
            opportunities=opportunities[:self.top_n],
            market_sentiment=sentiment,
            top_movers=movers[:self.max_movers],
            scan_time=self.clock(),
            failures=failures,
            scanned=len(self.universe),
        )
