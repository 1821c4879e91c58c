"""
Local parameter search around a strategy.

One pass (not iterative hill-climbing): build a fixed neighborhood of
parameter perturbations, backtest each on the trailing window of bars and
accept the best neighbor only if it beats the strategy's recorded return.

Neighbors that cannot be evaluated (invalid parameters, too little data)
are kept in the report with their ErrorKind and never ranked, so a failed
evaluation cannot be mistaken for a poor score.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

import pandas as pd

from .optimizer_types import NeighborScore, OptimizationReport
from ..data.provider import Bars, coerce_bars
from ..evaluation.simulator import BacktestSimulator
from ..shared.defaults import (
    OPTIMIZER_WINDOW_BARS,
    OPTIMIZER_RSI_STEP,
    OPTIMIZER_SMA_SHORT_STEP,
    OPTIMIZER_SMA_LONG_STEP,
    OPTIMIZER_MACD_FACTOR,
    OPTIMIZER_VOLUME_FACTOR,
)
from ..shared.errors import InvalidParametersError, Result, VectorFluxError, error_for_kind
from ..signals.definition import StrategyConditions, StrategyDefinition

logger = logging.getLogger(__name__)


def neighbor_changes(conditions: StrategyConditions) -> List[Tuple[str, Dict[str, Any]]]:
    """The fixed neighborhood, in evaluation (and tie-break) order."""
    c = conditions
    return [
        ("rsi_band_wider", {
            "rsi_lower": c.rsi_lower - OPTIMIZER_RSI_STEP,
            "rsi_upper": c.rsi_upper + OPTIMIZER_RSI_STEP,
        }),
        ("rsi_band_narrower", {
            "rsi_lower": c.rsi_lower + OPTIMIZER_RSI_STEP,
            "rsi_upper": c.rsi_upper - OPTIMIZER_RSI_STEP,
        }),
        ("sma_slower", {
            "sma_short": c.sma_short + OPTIMIZER_SMA_SHORT_STEP,
            "sma_long": c.sma_long + OPTIMIZER_SMA_LONG_STEP,
        }),
        ("macd_threshold_scaled", {"macd_threshold": c.macd_threshold * OPTIMIZER_MACD_FACTOR}),
        ("volume_multiplier_scaled", {"volume_multiplier": c.volume_multiplier * OPTIMIZER_VOLUME_FACTOR}),
    ]


class StrategyOptimizer:
    """Scores parameter neighbors of a strategy with BacktestSimulator."""

    def __init__(
        self,
        simulator: Optional[BacktestSimulator] = None,
        window_bars: Optional[int] = OPTIMIZER_WINDOW_BARS,
        max_workers: Optional[int] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Args:
            simulator: Backtest engine (default: BacktestSimulator())
            window_bars: Simulated bars per neighbor backtest, after each neighbor's
                own warm-up, so all neighbors trade the same final dates (None = all bars)
            max_workers: Thread pool size for neighbor backtests; None or 1 = sequential
            clock: Source of the updated_at timestamp for accepted versions
        """
        if window_bars is not None and window_bars < 1:
            raise InvalidParametersError(f"window_bars must be >= 1, got {window_bars}")
        self.simulator = simulator or BacktestSimulator()
        self.window_bars = window_bars
        self.max_workers = max_workers
        self.clock = clock

    def _window(self, frame: pd.DataFrame, required_bars: int) -> pd.DataFrame:
        """Trailing bars giving ``window_bars`` simulated bars after the warm-up."""
        if self.window_bars is None:
            return frame
        size = self.window_bars + required_bars
        if len(frame) <= size:
            return frame
        return frame.iloc[-size:]

    def _score_neighbor(
        self,
        index: int,
        label: str,
        changes: Dict[str, Any],
        frame: pd.DataFrame,
        definition: StrategyDefinition,
        symbol: Optional[str],
    ) -> NeighborScore:
        try:
            candidate = definition.with_conditions(**changes)
            window = self._window(frame, candidate.required_bars)
            backtest = self.simulator.run(window, candidate, symbol=symbol)
        except VectorFluxError as e:
            logger.warning("Neighbor %s of %s not evaluated (%s): %s", label, definition.id, e.kind.value, e)
            return NeighborScore(index=index, label=label, changes=changes, result=Result.from_exception(e))
        logger.debug("Neighbor %s of %s scored %.4f", label, definition.id, backtest.metrics.total_return)
        return NeighborScore(
            index=index,
            label=label,
            changes=changes,
            result=Result.success(backtest.metrics.total_return),
            conditions=candidate.conditions,
            backtest=backtest,
        )

    def score_neighbors(
        self,
        bars: Bars,
        definition: StrategyDefinition,
        symbol: Optional[str] = None,
    ) -> Tuple[NeighborScore, ...]:
        """Backtest every neighbor on the trailing window; results in neighbor order."""
        frame = coerce_bars(bars)
        jobs = [
            (i, label, changes, frame, definition, symbol)
            for i, (label, changes) in enumerate(neighbor_changes(definition.conditions))
        ]
        workers = self.max_workers or 1
        if workers <= 1:
            return tuple(self._score_neighbor(*job) for job in jobs)
        with ThreadPoolExecutor(max_workers=workers) as executor:
            # map() yields in submission order regardless of completion order
            return tuple(executor.map(lambda job: self._score_neighbor(*job), jobs))

    def run(
        self,
        bars: Bars,
        definition: StrategyDefinition,
        symbol: Optional[str] = None,
    ) -> OptimizationReport:
        """
        One optimization pass.

        Returns:
            OptimizationReport; ``report.definition`` is a new version when the best
            neighbor beats ``definition.performance.total_return``, else ``definition`` itself

        Raises:
            InvalidParametersError: Bars violate the ordering contract
            VectorFluxError: No neighbor could be evaluated (first neighbor's error kind)
        """
        scores = self.score_neighbors(bars, definition, symbol)
        evaluated = [s for s in scores if s.ok]
        if not evaluated:
            first = scores[0]
            raise error_for_kind(
                first.error_kind,
                f"No neighbor of {definition.id} could be evaluated: {first.result.message}",
            )

        best = evaluated[0]
        for candidate in evaluated[1:]:
            if candidate.score > best.score:
                best = candidate

        baseline = definition.performance.total_return
        if best.score > baseline:
            now = self.clock()
            improved = definition.next_version(
                best.conditions,
                updated_at=now,
                performance=best.backtest.to_performance(now),
            )
            logger.info(
                "Strategy %s optimized (%s): %.2f%% > %.2f%%, version %d -> %d",
                definition.id, best.label, best.score, baseline, definition.version, improved.version,
            )
            return OptimizationReport(
                original=definition,
                definition=improved,
                baseline_score=baseline,
                scores=scores,
                best=best,
                accepted=True,
            )

        logger.info(
            "No improvement for %s: best neighbor %s %.2f%% <= baseline %.2f%%",
            definition.id, best.label, best.score, baseline,
        )
        return OptimizationReport(
            original=definition,
            definition=definition,
            baseline_score=baseline,
            scores=scores,
            best=best,
            accepted=False,
        )

    def optimize(
        self,
        bars: Bars,
        definition: StrategyDefinition,
        symbol: Optional[str] = None,
    ) -> StrategyDefinition:
        """Improved definition, or ``definition`` unchanged."""
        return self.run(bars, definition, symbol).definition
