"""
Prediction capability.

A Predictor turns one symbol's bars into a Signal (label, confidence,
score). Two variants: HeuristicPredictor reuses the scanner's additive
score; ModelPredictor wraps any injected callable returning an up-move
probability. No model ships with the core.
"""
from dataclasses import dataclass
from typing import Callable, Protocol

import pandas as pd

from ..scanner.scanner_types import OpportunityType
from ..scanner.scoring import build_inputs, score_opportunity
from ..shared.errors import ComputationError, InvalidParametersError
from ..shared.types import SignalLabel

# Score (bullish probability) implied by a bare label
LABEL_SCORES = {
    SignalLabel.STRONG_BUY: 0.7,
    SignalLabel.BUY: 0.7,
    SignalLabel.HOLD: 0.5,
    SignalLabel.SELL: 0.3,
    SignalLabel.STRONG_SELL: 0.3,
}


@dataclass(frozen=True)
class Signal:
    """A prediction: label, confidence in [0, 1] and a bullish score in [0, 1]."""
    label: SignalLabel
    confidence: float
    score: float = 0.5

    @property
    def vote(self) -> SignalLabel:
        """BUY / SELL / HOLD (strong labels count as their plain side)."""
        if self.label in (SignalLabel.BUY, SignalLabel.STRONG_BUY):
            return SignalLabel.BUY
        if self.label in (SignalLabel.SELL, SignalLabel.STRONG_SELL):
            return SignalLabel.SELL
        return SignalLabel.HOLD


class Predictor(Protocol):
    """Anything that can produce a Signal for a symbol's bars."""
    name: str

    def predict(self, symbol: str, frame: pd.DataFrame) -> Signal:
        ...


class HeuristicPredictor:
    """Signal from the scanner's additive opportunity score."""

    name = "heuristic"

    def predict(self, symbol: str, frame: pd.DataFrame) -> Signal:
        score = score_opportunity(build_inputs(symbol, frame))
        if score.opportunity is OpportunityType.BEARISH:
            label = SignalLabel.SELL
        else:
            label = SignalLabel.BUY
        return Signal(label=label, confidence=score.confidence / 100, score=LABEL_SCORES[label])


class ModelPredictor:
    """
    Signal from an injected model.

    The model is any callable taking the bar frame and returning the
    probability of an upward move in [0, 1].
    """

    def __init__(
        self,
        name: str,
        model: Callable[[pd.DataFrame], float],
        buy_threshold: float = 0.6,
        sell_threshold: float = 0.4,
    ):
        if not (0 <= sell_threshold < buy_threshold <= 1):
            raise InvalidParametersError(
                f"Need 0 <= sell_threshold < buy_threshold <= 1, got {sell_threshold}, {buy_threshold}"
            )
        self.name = name
        self.model = model
        self.buy_threshold = buy_threshold
        self.sell_threshold = sell_threshold

    def predict(self, symbol: str, frame: pd.DataFrame) -> Signal:
        probability = float(self.model(frame))
        if not (0.0 <= probability <= 1.0):
            raise ComputationError(f"{self.name} returned probability {probability} for {symbol}")
        if probability > self.buy_threshold:
            label = SignalLabel.BUY
        elif probability < self.sell_threshold:
            label = SignalLabel.SELL
        else:
            label = SignalLabel.HOLD
        return Signal(label=label, confidence=min(abs(probability - 0.5) * 2, 1.0), score=probability)
