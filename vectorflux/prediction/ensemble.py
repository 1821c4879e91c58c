"""
Weighted ensemble over whichever predictors are configured.

Each member's score is weighted by its configured weight times its own
confidence. Votes (BUY / SELL / HOLD) decide the label; the weighted
score decides the recommendation strength.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Sequence, Tuple

import pandas as pd

from .predictors import Predictor, Signal
from ..shared.defaults import ENSEMBLE_WEIGHTS, STRONG_CONSENSUS_RATIO
from ..shared.errors import InvalidParametersError, VectorFluxError
from ..shared.types import SignalLabel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnsembleSignal:
    """Combined prediction of an ensemble."""
    label: SignalLabel
    confidence: float
    score: float
    consensus: str
    recommendation: str
    votes: Dict[str, int] = field(default_factory=dict)
    members: Dict[str, Signal] = field(default_factory=dict)


def recommendation(score: float) -> str:
    """Human-readable recommendation from the weighted score's distance to 0.5."""
    strength = abs(score - 0.5) * 2
    bullish = score > 0.5
    bearish = score < 0.5
    if strength > 0.8:
        if bullish:
            return "STRONG BUY - High Confidence"
        return "STRONG SELL - High Confidence" if bearish else "HOLD - Strong Neutral Signal"
    if strength > 0.6:
        if bullish:
            return "BUY - Moderate Confidence"
        return "SELL - Moderate Confidence" if bearish else "HOLD - Neutral"
    if strength > 0.4:
        if bullish:
            return "WEAK BUY - Low Confidence"
        return "WEAK SELL - Low Confidence" if bearish else "HOLD - Uncertain"
    return "HOLD - Insufficient Signal Strength"


class EnsemblePredictor:
    """Combines several predictors into one EnsembleSignal."""

    name = "ensemble"

    def __init__(
        self,
        predictors: Sequence[Predictor],
        weights: Optional[Mapping[str, float]] = None,
    ):
        weights = dict(ENSEMBLE_WEIGHTS if weights is None else weights)
        for predictor in predictors:
            if predictor.name not in weights:
                raise InvalidParametersError(f"No ensemble weight for predictor '{predictor.name}'")
            if weights[predictor.name] < 0:
                raise InvalidParametersError(f"Negative weight for predictor '{predictor.name}'")
        self.predictors = list(predictors)
        self.weights = weights

    def predict(self, symbol: str, frame: pd.DataFrame) -> EnsembleSignal:
        """Run every member; members that fail are logged and left out."""
        signals: Dict[str, Signal] = {}
        for predictor in self.predictors:
            try:
                signals[predictor.name] = predictor.predict(symbol, frame)
            except VectorFluxError as e:
                logger.warning("Predictor %s failed for %s: %s", predictor.name, symbol, e)
        return self.combine(signals)

    def combine(self, signals: Mapping[str, Signal]) -> EnsembleSignal:
        """Combine already-computed member signals (pure)."""
        if not signals:
            return EnsembleSignal(
                label=SignalLabel.HOLD,
                confidence=0.5,
                score=0.5,
                consensus="0/0 models agree",
                recommendation=recommendation(0.5),
                votes={"buy": 0, "sell": 0, "hold": 0},
            )

        weighted = 0.0
        total = 0.0
        for name, signal in signals.items():
            weight = self.weights.get(name, 0.0) * signal.confidence
            weighted += signal.score * weight
            total += weight
        score = weighted / total if total > 0 else 0.5

        votes = {"buy": 0, "sell": 0, "hold": 0}
        for signal in signals.values():
            votes[signal.vote.name.lower()] += 1
        label, agreeing = self._vote(votes, len(signals))
        confidence = sum(s.confidence for s in signals.values()) / len(signals)

        return EnsembleSignal(
            label=label,
            confidence=confidence,
            score=score,
            consensus=f"{agreeing}/{len(signals)} models agree",
            recommendation=recommendation(score),
            votes=votes,
            members=dict(signals),
        )

    @staticmethod
    def _vote(votes: Dict[str, int], count: int) -> Tuple[SignalLabel, int]:
        buy, sell, hold = votes["buy"], votes["sell"], votes["hold"]
        if buy > sell and buy > hold:
            strong = buy / count >= STRONG_CONSENSUS_RATIO
            return (SignalLabel.STRONG_BUY if strong else SignalLabel.BUY), buy
        if sell > buy and sell > hold:
            strong = sell / count >= STRONG_CONSENSUS_RATIO
            return (SignalLabel.STRONG_SELL if strong else SignalLabel.SELL), sell
        return SignalLabel.HOLD, hold
