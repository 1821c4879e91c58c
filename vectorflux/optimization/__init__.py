"""
Strategy optimization module.

Single-pass local search over a fixed neighborhood of parameter
perturbations, scored by shortened backtests.
"""
from .optimizer import StrategyOptimizer, neighbor_changes
from .optimizer_types import NeighborScore, OptimizationReport

__all__ = [
    'StrategyOptimizer',
    'neighbor_changes',
    'NeighborScore',
    'OptimizationReport',
]
