"""
Optimizer result types: per-neighbor scores and the optimization report.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from ..evaluation.backtest_types import BacktestResult
from ..shared.errors import ErrorKind, Result
from ..signals.definition import StrategyConditions, StrategyDefinition


@dataclass(frozen=True)
class NeighborScore:
    """Outcome of backtesting one parameter perturbation."""
    index: int  # Position in the fixed neighbor order
    label: str
    changes: Dict[str, Any]
    result: Result  # Result[float]: total return in percent, or the failure kind
    conditions: Optional[StrategyConditions] = None
    backtest: Optional[BacktestResult] = None

    @property
    def ok(self) -> bool:
        return self.result.ok

    @property
    def score(self) -> Optional[float]:
        return self.result.value

    @property
    def error_kind(self) -> Optional[ErrorKind]:
        return self.result.error_kind


@dataclass(frozen=True)
class OptimizationReport:
    """Everything one optimization pass looked at and what it decided."""
    original: StrategyDefinition
    definition: StrategyDefinition  # New version when accepted, else ``original``
    baseline_score: float  # original.performance.total_return
    scores: Tuple[NeighborScore, ...]
    best: Optional[NeighborScore]
    accepted: bool

    @property
    def failures(self) -> Tuple[NeighborScore, ...]:
        return tuple(s for s in self.scores if not s.ok)
