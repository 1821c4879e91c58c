"""
Heuristic opportunity scoring.

An additive confidence score starting at 50 and clamped to [0, 95]. Each
rule contributes a fixed number of points and a fixed predicted-change
adjustment:

    trend      price > sma20 > sma50            +15   +8   bullish
               price < sma20 < sma50            +12   -6   bearish
    rsi        rsi < 30                         +20  +12   reversal
               rsi > 70                         +15   -8   bearish
               50 < rsi < 60                    +10   +5
    macd       histogram > 0 / < 0           +12/+8  +6/-4
    levels     within 2% of support             +18  +10   reversal
               else within 2% of resistance     +15  +15 breakout (volume > 1.5x avg)
                                                     -5  bearish (otherwise)
    volume     > 2x avg / > 1.5x avg        +15/+10  x1.3/x1.15
    momentum   |30-bar change| > 10%            +12  +8 / -6
    pattern    last 5 closes rising / falling +10/+8  +5/-4
    asset      BTC, ETH                                x1.2
"""
from typing import Iterable, Optional, Sequence

import numpy as np
import pandas as pd

from .scanner_types import (
    MarketSentiment,
    Opportunity,
    OpportunityScore,
    OpportunityType,
    ScanInputs,
    TopMover,
)
from ..indicators.technical import TechnicalIndicators, detect_trend, volume_profile
from ..shared.defaults import (
    RSI_OVERSOLD, RSI_OVERBOUGHT, RSI_BULLISH_ZONE,
    SCANNER_MIN_BARS, SCANNER_BASE_CONFIDENCE, SCANNER_MAX_CONFIDENCE,
    SCANNER_HISTORY_BARS,
    SCANNER_PROXIMITY, SUPPORT_QUANTILE, RESISTANCE_QUANTILE,
    SENTIMENT_THRESHOLD_RATIO, HIGH_BETA_CRYPTO,
)
from ..shared.errors import InsufficientDataError


def support_resistance(prices: Sequence[float]):
    """Support / resistance as the sorted prices at floor(n * 0.2) and floor(n * 0.8)."""
    ordered = np.sort(np.asarray(prices, dtype=float))
    n = ordered.shape[0]
    if n == 0:
        raise InsufficientDataError("No prices for support/resistance")
    return float(ordered[int(n * SUPPORT_QUANTILE)]), float(ordered[int(n * RESISTANCE_QUANTILE)])


def build_inputs(symbol: str, frame: pd.DataFrame) -> ScanInputs:
    """
    Latest indicator values for one symbol; needs at least SCANNER_MIN_BARS bars.

    The full indicator set is computed once; the scoring rules read the
    SMA20/SMA50, RSI and MACD histogram values of that snapshot.
    """
    if len(frame) < SCANNER_MIN_BARS:
        raise InsufficientDataError(f"{symbol}: {len(frame)} bars < {SCANNER_MIN_BARS} required")
    snapshot = TechnicalIndicators().latest(frame)
    scored = (snapshot.sma_short, snapshot.sma_long, snapshot.rsi, snapshot.macd_histogram)
    if any(value is None for value in scored):
        raise InsufficientDataError(f"{symbol}: indicators still in warm-up")

    closes = frame["Close"].to_numpy(dtype=float)
    volume = volume_profile(frame["Volume"].to_numpy(dtype=float))
    support, resistance = support_resistance(closes)
    return ScanInputs(
        symbol=symbol,
        price=snapshot.price,
        sma20=snapshot.sma_short,
        sma50=snapshot.sma_long,
        rsi=snapshot.rsi,
        macd=snapshot.macd_histogram,
        support=support,
        resistance=resistance,
        volume=volume.current,
        avg_volume=volume.average,
        price_history=tuple(float(p) for p in closes[-SCANNER_HISTORY_BARS:]),
        trend=detect_trend(closes),
        snapshot=snapshot,
    )


def _timeframe(confidence: float):
    if confidence > 80:
        return "1-2 weeks", 10
    if confidence > 70:
        return "2-3 weeks", 18
    return "3-4 weeks", 25


def score_opportunity(inputs: ScanInputs) -> OpportunityScore:
    """Additive heuristic score for one symbol (pure function)."""
    price = inputs.price
    confidence = SCANNER_BASE_CONFIDENCE
    opportunity = OpportunityType.BULLISH
    predicted = 0.0
    reasoning = []

    # Moving averages
    if price > inputs.sma20 > inputs.sma50:
        confidence += 15
        predicted += 8
        opportunity = OpportunityType.BULLISH
        reasoning.append("Price above SMA20 and SMA50 - uptrend confirmed")
    elif price < inputs.sma20 < inputs.sma50:
        confidence += 12
        predicted -= 6
        opportunity = OpportunityType.BEARISH
        reasoning.append("Price below SMA20 and SMA50 - downtrend confirmed")

    # RSI
    low_zone, high_zone = RSI_BULLISH_ZONE
    if inputs.rsi < RSI_OVERSOLD:
        confidence += 20
        predicted += 12
        opportunity = OpportunityType.REVERSAL
        reasoning.append("RSI oversold (< 30) - potential reversal")
    elif inputs.rsi > RSI_OVERBOUGHT:
        confidence += 15
        predicted -= 8
        opportunity = OpportunityType.BEARISH
        reasoning.append("RSI overbought (> 70) - potential correction")
    elif low_zone < inputs.rsi < high_zone:
        confidence += 10
        predicted += 5
        reasoning.append("RSI in bullish zone (50-60)")

    # MACD histogram
    if inputs.macd > 0:
        confidence += 12
        predicted += 6
        reasoning.append("MACD histogram positive - momentum building")
    elif inputs.macd < 0:
        confidence += 8
        predicted -= 4
        reasoning.append("MACD histogram negative - selling pressure")

    # Support / resistance
    to_support = (price - inputs.support) / inputs.support if inputs.support else float("inf")
    to_resistance = (inputs.resistance - price) / price
    if to_support < SCANNER_PROXIMITY:
        confidence += 18
        predicted += 10
        opportunity = OpportunityType.REVERSAL
        reasoning.append("Price near strong support level - bounce expected")
    elif to_resistance < SCANNER_PROXIMITY:
        confidence += 15
        reasoning.append("Price near resistance - potential breakout or rejection")
        if inputs.volume > inputs.avg_volume * 1.5:
            opportunity = OpportunityType.BREAKOUT
            predicted += 15
            reasoning.append("High volume suggests breakout likely")
        else:
            opportunity = OpportunityType.BEARISH
            predicted -= 5

    # Volume
    if inputs.volume > inputs.avg_volume * 2:
        confidence += 15
        predicted *= 1.3
        reasoning.append("Exceptionally high volume - strong conviction")
    elif inputs.volume > inputs.avg_volume * 1.5:
        confidence += 10
        predicted *= 1.15
        reasoning.append("Above average volume - increased interest")

    # Momentum over the price history window
    history = inputs.price_history
    if history and history[0]:
        recent_change = (price - history[0]) / history[0] * 100
        if abs(recent_change) > 10:
            confidence += 12
            reasoning.append(f"Strong momentum: {recent_change:.1f}% in {len(history)} days")
            if recent_change > 0:
                predicted += 8
            else:
                predicted -= 6

    # Pattern: last 5 closes
    last5 = history[-5:]
    steps = [b - a for a, b in zip(last5, last5[1:])]
    if all(s >= 0 for s in steps):
        confidence += 10
        predicted += 5
        reasoning.append("Consistent uptrend in last 5 days")
    elif all(s <= 0 for s in steps):
        confidence += 8
        predicted -= 4
        reasoning.append("Consistent downtrend in last 5 days")

    if inputs.symbol in HIGH_BETA_CRYPTO:
        predicted *= 1.2
        if confidence > 75:
            reasoning.append("Major crypto with strong technical setup")

    confidence = min(max(confidence, 0), SCANNER_MAX_CONFIDENCE)
    timeframe, timeframe_days = _timeframe(confidence)

    direction = "upward" if predicted > 0 else "downward"
    summary = (
        f"{inputs.symbol} shows {confidence}% confidence for {direction} movement "
        f"of {abs(predicted):.1f}% over {timeframe}"
    )
    return OpportunityScore(
        opportunity=opportunity,
        confidence=int(round(confidence)),
        predicted_change=round(predicted, 2),
        timeframe=timeframe,
        timeframe_days=timeframe_days,
        summary=summary,
        reasoning=tuple(reasoning),
    )


def last_change_pct(closes: Sequence[float]) -> Optional[float]:
    """Percent change of the last close vs the previous one (None with < 2 bars)."""
    if len(closes) < 2 or closes[-2] == 0:
        return None
    return (closes[-1] - closes[-2]) / closes[-2] * 100


def move_analysis(change: float, symbol: str) -> str:
    """One-line description of a large daily move."""
    direction = "surge" if change > 0 else "decline"
    magnitude = abs(change)
    if magnitude > 10:
        return f"{symbol} experiencing significant {direction} of {magnitude:.1f}% - investigate fundamental catalysts"
    if magnitude > 5:
        return f"{symbol} showing strong {direction} of {magnitude:.1f}% - monitor for continuation"
    return f"{symbol} moderate {direction} of {magnitude:.1f}% - normal market movement"


def market_sentiment(
    opportunities: Iterable[Opportunity],
    movers: Iterable[TopMover],
) -> MarketSentiment:
    """
    Overall sentiment from confidence-weighted predicted changes plus daily movers.

    Bullish/breakout opportunities add to the bullish score, bearish ones to the
    bearish score (reversals count for neither). The side that leads by more than
    20% of the larger score wins; otherwise neutral.
    """
    bullish = 0.0
    bearish = 0.0
    for opp in opportunities:
        weight = opp.confidence / 100
        if opp.opportunity in (OpportunityType.BULLISH, OpportunityType.BREAKOUT):
            bullish += weight * abs(opp.predicted_change)
        elif opp.opportunity is OpportunityType.BEARISH:
            bearish += weight * abs(opp.predicted_change)
    for mover in movers:
        if mover.change > 0:
            bullish += mover.change
        else:
            bearish += abs(mover.change)

    diff = bullish - bearish
    threshold = max(bullish, bearish) * SENTIMENT_THRESHOLD_RATIO
    if diff > threshold:
        return MarketSentiment.BULLISH
    if diff < -threshold:
        return MarketSentiment.BEARISH
    return MarketSentiment.NEUTRAL
