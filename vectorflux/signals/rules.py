"""
Per-type entry and exit rules.

Rules read one BarSnapshot (indicator values already aligned to the current
bar) and return a reason string when they fire, None otherwise. A rule that
needs an indicator still in warm-up (None) does not fire.
"""
from dataclasses import dataclass
from typing import Dict, Optional, Protocol, Union

from .definition import StrategyConditions
from ..shared.defaults import SCALPING_EXIT_PCT, SCALPING_RSI_BAND
from ..shared.types import StrategyType


@dataclass(frozen=True)
class BarSnapshot:
    """Values visible at one bar (computed from this bar and earlier ones only)."""
    price: float
    volume: float
    avg_volume: float
    rsi: Optional[float] = None
    sma_short: Optional[float] = None
    sma_long: Optional[float] = None
    macd: Optional[float] = None

    @property
    def uptrend(self) -> bool:
        """sma_short > sma_long (False during warm-up)."""
        return (
            self.sma_short is not None
            and self.sma_long is not None
            and self.sma_short > self.sma_long
        )

    @property
    def downtrend(self) -> bool:
        return (
            self.sma_short is not None
            and self.sma_long is not None
            and self.sma_short < self.sma_long
        )

    def volume_above(self, multiplier: float) -> bool:
        return self.volume > self.avg_volume * multiplier

    def rsi_between(self, lower: float, upper: float) -> bool:
        return self.rsi is not None and lower < self.rsi < upper


class StrategyRule(Protocol):
    """Protocol for the entry/exit predicates of one strategy type."""

    def entry(self, snapshot: BarSnapshot, conditions: StrategyConditions) -> Optional[str]:
        """Reason to open a position at this bar, or None."""
        ...

    def exit(
        self,
        snapshot: BarSnapshot,
        conditions: StrategyConditions,
        unrealized_pct: float,
    ) -> Optional[str]:
        """Reason to close the open position at this bar, or None."""
        ...


class MomentumRule:
    """Trend + MACD + volume confirmation; exits when momentum fades."""

    def entry(self, snapshot: BarSnapshot, conditions: StrategyConditions) -> Optional[str]:
        if snapshot.macd is None:
            return None
        if (
            snapshot.rsi_between(conditions.rsi_lower, conditions.rsi_upper)
            and snapshot.uptrend
            and snapshot.macd > conditions.macd_threshold
            and snapshot.volume_above(conditions.volume_multiplier)
        ):
            return "Momentum breakout with volume confirmation"
        return None

    def exit(self, snapshot, conditions, unrealized_pct) -> Optional[str]:
        if (snapshot.rsi is not None and snapshot.rsi > conditions.rsi_upper) or snapshot.downtrend:
            return "Momentum weakening"
        return None


class ReversalRule:
    """Extreme RSI with MACD below threshold; exits once RSI is back inside the band."""

    def entry(self, snapshot: BarSnapshot, conditions: StrategyConditions) -> Optional[str]:
        if snapshot.rsi is None or snapshot.macd is None:
            return None
        extreme = snapshot.rsi < conditions.rsi_lower or snapshot.rsi > conditions.rsi_upper
        if extreme and snapshot.macd < conditions.macd_threshold:
            return "Mean reversion from oversold/overbought levels"
        return None

    def exit(self, snapshot, conditions, unrealized_pct) -> Optional[str]:
        if snapshot.rsi_between(conditions.rsi_lower, conditions.rsi_upper):
            return "Mean reversion completed"
        return None


class BreakoutRule:
    """Uptrend, RSI above its lower bound and a volume surge. No rule exit."""

    def entry(self, snapshot: BarSnapshot, conditions: StrategyConditions) -> Optional[str]:
        if snapshot.rsi is None:
            return None
        if (
            snapshot.uptrend
            and snapshot.rsi > conditions.rsi_lower
            and snapshot.volume_above(conditions.volume_multiplier)
        ):
            return "Price breakout with volume surge"
        return None

    def exit(self, snapshot, conditions, unrealized_pct) -> Optional[str]:
        return None


class SwingRule:
    """RSI inside the band in an uptrend. No rule exit."""

    def entry(self, snapshot: BarSnapshot, conditions: StrategyConditions) -> Optional[str]:
        if snapshot.rsi_between(conditions.rsi_lower, conditions.rsi_upper) and snapshot.uptrend:
            return "Swing trading entry signal"
        return None

    def exit(self, snapshot, conditions, unrealized_pct) -> Optional[str]:
        return None


class ScalpingRule:
    """Near-neutral RSI in an uptrend; exits on a 1% move either way."""

    def entry(self, snapshot: BarSnapshot, conditions: StrategyConditions) -> Optional[str]:
        if snapshot.rsi is None:
            return None
        if abs(snapshot.rsi - 50) < SCALPING_RSI_BAND and snapshot.uptrend:
            return "Short-term scalping opportunity"
        return None

    def exit(self, snapshot, conditions, unrealized_pct) -> Optional[str]:
        if abs(unrealized_pct) > SCALPING_EXIT_PCT:
            return "Scalping target reached"
        return None


_RULES: Dict[StrategyType, StrategyRule] = {
    StrategyType.MOMENTUM: MomentumRule(),
    StrategyType.REVERSAL: ReversalRule(),
    StrategyType.BREAKOUT: BreakoutRule(),
    StrategyType.SWING: SwingRule(),
    StrategyType.SCALPING: ScalpingRule(),
}


def get_rule(strategy_type: Union[StrategyType, str]) -> StrategyRule:
    """Rule instance for a strategy type."""
    return _RULES[StrategyType(strategy_type)]
