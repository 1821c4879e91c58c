"""
Market scanning module.

Applies the indicator library and an additive heuristic score across a
symbol universe to rank trading opportunities, independent of backtesting.
"""
from .scanner import MarketScanner, DEFAULT_UNIVERSE
from .scoring import (
    build_inputs,
    score_opportunity,
    support_resistance,
    market_sentiment,
    move_analysis,
    last_change_pct,
)
from .scanner_types import (
    OpportunityType,
    MarketSentiment,
    ScanInputs,
    OpportunityScore,
    Opportunity,
    TopMover,
    ScanFailure,
    ScanResults,
)

__all__ = [
    'MarketScanner',
    'DEFAULT_UNIVERSE',
    'build_inputs',
    'score_opportunity',
    'support_resistance',
    'market_sentiment',
    'move_analysis',
    'last_change_pct',
    'OpportunityType',
    'MarketSentiment',
    'ScanInputs',
    'OpportunityScore',
    'Opportunity',
    'TopMover',
    'ScanFailure',
    'ScanResults',
]
