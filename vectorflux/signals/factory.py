"""
Strategy presets per type and risk level.

Base thresholds per strategy type; risk levels scale stop-loss, take-profit
and position size.
"""
from datetime import datetime
from typing import Dict, List, Optional, Union

from .definition import StrategyDefinition, StrategyConditions, RiskManagement
from ..shared.defaults import RISK_MULTIPLIERS
from ..shared.errors import InvalidParametersError
from ..shared.types import StrategyType, RiskLevel

# type -> (name, description, conditions, (stop %, take-profit %, max position))
BASE_STRATEGIES: Dict[StrategyType, tuple] = {
    StrategyType.MOMENTUM: (
        "AI Momentum Trader",
        "Rides strong trends confirmed by MACD and volume",
        StrategyConditions(rsi_lower=40, rsi_upper=60, sma_short=10, sma_long=30,
                           macd_threshold=0.1, volume_multiplier=1.5),
        (3.0, 8.0, 0.1),
    ),
    StrategyType.REVERSAL: (
        "AI Mean Reversion",
        "Buys oversold/overbought extremes expecting a return to the mean",
        StrategyConditions(rsi_lower=25, rsi_upper=75, sma_short=5, sma_long=20,
                           macd_threshold=-0.1, volume_multiplier=1.2),
        (2.0, 5.0, 0.15),
    ),
    StrategyType.BREAKOUT: (
        "AI Breakout Hunter",
        "Enters on trend breakouts with a volume surge",
        StrategyConditions(rsi_lower=50, rsi_upper=70, sma_short=20, sma_long=50,
                           macd_threshold=0.05, volume_multiplier=2.0),
        (2.5, 10.0, 0.08),
    ),
    StrategyType.SCALPING: (
        "AI Scalper Pro",
        "Short holds on small moves around neutral RSI",
        StrategyConditions(rsi_lower=35, rsi_upper=65, sma_short=5, sma_long=15,
                           macd_threshold=0.02, volume_multiplier=1.8),
        (1.0, 2.0, 0.2),
    ),
    StrategyType.SWING: (
        "AI Swing Trader",
        "Multi-week holds in established uptrends",
        StrategyConditions(rsi_lower=30, rsi_upper=70, sma_short=20, sma_long=60,
                           macd_threshold=0.0, volume_multiplier=1.3),
        (4.0, 12.0, 0.05),
    ),
}

DEFAULT_STRATEGY_TYPES = [
    StrategyType.MOMENTUM,
    StrategyType.REVERSAL,
    StrategyType.BREAKOUT,
    StrategyType.SWING,
]


def create_strategy(
    strategy_type: Union[StrategyType, str],
    risk_level: Union[RiskLevel, str] = RiskLevel.MEDIUM,
    now: Optional[datetime] = None,
) -> StrategyDefinition:
    """
    Build a version-1 strategy for a type and risk level.

    Stop-loss and take-profit are scaled and rounded to 0.1, position size
    scaled, rounded to 0.01 and capped at 1.
    """
    try:
        strategy_type = StrategyType(strategy_type)
        risk_level = RiskLevel(risk_level)
    except ValueError as e:
        raise InvalidParametersError(str(e)) from e

    name, description, conditions, (stop, profit, position) = BASE_STRATEGIES[strategy_type]
    stop_mult, profit_mult, position_mult = RISK_MULTIPLIERS[risk_level.value]
    risk = RiskManagement(
        stop_loss_percent=round(stop * stop_mult, 1),
        take_profit_percent=round(profit * profit_mult, 1),
        max_position_size=min(round(position * position_mult, 2), 1.0),
    )
    now = now or datetime.now()
    level = risk_level.value
    return StrategyDefinition(
        id=f"strategy-{strategy_type.value}-{level}-{int(now.timestamp() * 1000)}",
        name=f"{name} ({level.capitalize()} Risk)",
        description=f"{description} - Configured for {level} risk tolerance",
        type=strategy_type,
        conditions=conditions,
        risk_management=risk,
        version=1,
        risk_level=risk_level,
        created_at=now,
        updated_at=now,
    )


def default_strategies(now: Optional[datetime] = None) -> List[StrategyDefinition]:
    """Medium-risk momentum, reversal, breakout and swing strategies."""
    return [create_strategy(t, RiskLevel.MEDIUM, now=now) for t in DEFAULT_STRATEGY_TYPES]
