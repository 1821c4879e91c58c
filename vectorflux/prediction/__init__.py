"""
Prediction module.

Predictors produce a labelled, confidence-scored Signal per symbol; the
ensemble combines several of them with configurable weights.
"""
from .predictors import Signal, Predictor, HeuristicPredictor, ModelPredictor, LABEL_SCORES
from .ensemble import EnsemblePredictor, EnsembleSignal, recommendation

__all__ = [
    'Signal',
    'Predictor',
    'HeuristicPredictor',
    'ModelPredictor',
    'LABEL_SCORES',
    'EnsemblePredictor',
    'EnsembleSignal',
    'recommendation',
]
