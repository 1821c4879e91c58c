"""
Strategy definitions and rule evaluation.

Frozen strategy definitions (conditions + risk management), a per-type
factory, YAML persistence and one entry/exit rule per strategy type.
"""
from .definition import (
    StrategyDefinition,
    StrategyConditions,
    RiskManagement,
    StrategyPerformance,
)
from .factory import create_strategy, default_strategies, BASE_STRATEGIES
from .rules import (
    BarSnapshot,
    StrategyRule,
    MomentumRule,
    ReversalRule,
    BreakoutRule,
    SwingRule,
    ScalpingRule,
    get_rule,
)
from .config_loader import load_strategy_from_yaml, save_strategy_to_yaml

__all__ = [
    'StrategyDefinition',
    'StrategyConditions',
    'RiskManagement',
    'StrategyPerformance',
    'create_strategy',
    'default_strategies',
    'BASE_STRATEGIES',
    'BarSnapshot',
    'StrategyRule',
    'MomentumRule',
    'ReversalRule',
    'BreakoutRule',
    'SwingRule',
    'ScalpingRule',
    'get_rule',
    'load_strategy_from_yaml',
    'save_strategy_to_yaml',
]
