"""
Strategy definitions.

A StrategyDefinition describes a tradable rule set: its type, indicator
thresholds and risk parameters. Definitions are frozen; optimization
produces a new version instead of mutating one in place.
Validation runs at construction time (fail fast with clear errors).
"""
from dataclasses import dataclass, field, replace, asdict
from datetime import datetime
from typing import Any, Dict, Optional

from ..shared.defaults import RSI_PERIOD
from ..shared.errors import InvalidParametersError
from ..shared.types import StrategyType, RiskLevel


def _validate_conditions(
    *,
    rsi_lower: float,
    rsi_upper: float,
    sma_short: int,
    sma_long: int,
    volume_multiplier: float,
) -> None:
    """Validate indicator thresholds. Raises InvalidParametersError with clear message on failure."""
    if sma_short < 1 or int(sma_short) != sma_short:
        raise InvalidParametersError(f"sma_short must be a positive integer, got {sma_short}")
    if int(sma_long) != sma_long:
        raise InvalidParametersError(f"sma_long must be an integer, got {sma_long}")
    if sma_short >= sma_long:
        raise InvalidParametersError(
            f"sma_short ({sma_short}) must be less than sma_long ({sma_long})"
        )
    if rsi_lower < 0:
        raise InvalidParametersError(f"rsi_lower must be >= 0, got {rsi_lower}")
    if rsi_lower >= rsi_upper:
        raise InvalidParametersError(
            f"rsi_lower ({rsi_lower}) must be less than rsi_upper ({rsi_upper})"
        )
    if volume_multiplier < 0:
        raise InvalidParametersError(f"volume_multiplier must be >= 0, got {volume_multiplier}")


def _validate_risk(
    *,
    stop_loss_percent: float,
    take_profit_percent: float,
    max_position_size: float,
) -> None:
    """Validate risk parameters. Raises InvalidParametersError with clear message on failure."""
    if stop_loss_percent <= 0:
        raise InvalidParametersError(f"stop_loss_percent must be > 0, got {stop_loss_percent}")
    if take_profit_percent <= 0:
        raise InvalidParametersError(f"take_profit_percent must be > 0, got {take_profit_percent}")
    if not (0 < max_position_size <= 1):
        raise InvalidParametersError(
            f"max_position_size must be in (0, 1], got {max_position_size}"
        )


@dataclass(frozen=True)
class StrategyConditions:
    """Indicator thresholds used by the entry/exit rules."""
    rsi_lower: float
    rsi_upper: float
    sma_short: int
    sma_long: int
    macd_threshold: float
    volume_multiplier: float

    def __post_init__(self):
        _validate_conditions(
            rsi_lower=self.rsi_lower,
            rsi_upper=self.rsi_upper,
            sma_short=self.sma_short,
            sma_long=self.sma_long,
            volume_multiplier=self.volume_multiplier,
        )


@dataclass(frozen=True)
class RiskManagement:
    """Stop-loss / take-profit in percent, position size as a fraction of cash."""
    stop_loss_percent: float
    take_profit_percent: float
    max_position_size: float

    def __post_init__(self):
        _validate_risk(
            stop_loss_percent=self.stop_loss_percent,
            take_profit_percent=self.take_profit_percent,
            max_position_size=self.max_position_size,
        )


@dataclass(frozen=True)
class StrategyPerformance:
    """Recorded performance of the last backtest (total_return is the optimizer baseline)."""
    total_trades: int = 0
    win_rate: float = 0.0
    total_return: float = 0.0
    max_drawdown: float = 0.0
    sharpe_ratio: float = 0.0
    last_backtest: Optional[datetime] = None


@dataclass(frozen=True)
class StrategyDefinition:
    """A versioned, immutable strategy."""
    id: str
    name: str
    type: StrategyType
    conditions: StrategyConditions
    risk_management: RiskManagement
    version: int = 1
    risk_level: RiskLevel = RiskLevel.MEDIUM
    description: str = ""
    performance: StrategyPerformance = field(default_factory=StrategyPerformance)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        # Accept plain strings for the enums (YAML / dict input)
        try:
            object.__setattr__(self, "type", StrategyType(self.type))
            object.__setattr__(self, "risk_level", RiskLevel(self.risk_level))
        except ValueError as e:
            raise InvalidParametersError(str(e)) from e
        if self.version < 1:
            raise InvalidParametersError(f"version must be >= 1, got {self.version}")

    @property
    def required_bars(self) -> int:
        """Bars needed before the first decision: max(sma_long, RSI period)."""
        return max(self.conditions.sma_long, RSI_PERIOD)

    def with_conditions(self, **changes: Any) -> "StrategyDefinition":
        """Copy with some conditions replaced (same version); re-validates."""
        return replace(self, conditions=replace(self.conditions, **changes))

    def with_performance(self, performance: StrategyPerformance) -> "StrategyDefinition":
        return replace(self, performance=performance)

    def next_version(
        self,
        conditions: StrategyConditions,
        updated_at: datetime,
        performance: Optional[StrategyPerformance] = None,
    ) -> "StrategyDefinition":
        """New definition with the given conditions, version + 1 and a new timestamp."""
        return replace(
            self,
            conditions=conditions,
            version=self.version + 1,
            updated_at=updated_at,
            performance=performance if performance is not None else self.performance,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Plain, serializable representation (enums as values, datetimes as ISO strings)."""
        performance = asdict(self.performance)
        if self.performance.last_backtest is not None:
            performance["last_backtest"] = self.performance.last_backtest.isoformat()
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "type": self.type.value,
            "risk_level": self.risk_level.value,
            "version": self.version,
            "conditions": asdict(self.conditions),
            "risk": asdict(self.risk_management),
            "performance": performance,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StrategyDefinition":
        """Inverse of to_dict. Raises InvalidParametersError for missing sections."""
        try:
            conditions = StrategyConditions(**data["conditions"])
            risk = RiskManagement(**data["risk"])
        except KeyError as e:
            raise InvalidParametersError(f"Strategy is missing required section {e}") from e
        except TypeError as e:
            raise InvalidParametersError(f"Invalid strategy fields: {e}") from e

        performance_data = dict(data.get("performance") or {})
        if performance_data.get("last_backtest"):
            performance_data["last_backtest"] = _parse_datetime(performance_data["last_backtest"])
        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            description=str(data.get("description", "")),
            type=data.get("type", StrategyType.MOMENTUM.value),
            risk_level=data.get("risk_level", RiskLevel.MEDIUM.value),
            version=int(data.get("version", 1)),
            conditions=conditions,
            risk_management=risk,
            performance=StrategyPerformance(**performance_data),
            created_at=_parse_datetime(data.get("created_at")),
            updated_at=_parse_datetime(data.get("updated_at")),
        )


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))
