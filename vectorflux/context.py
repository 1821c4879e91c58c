"""
Shared run configuration.

Bundles the provider, capital, fees, optimizer settings and clock that
the simulator, optimizer and scanner would otherwise each be handed
separately. There is no global state: every component is built from an
explicit TradingContext.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from .data.provider import DataProvider
from .evaluation.simulator import BacktestSimulator
from .optimization.optimizer import StrategyOptimizer
from .scanner.scanner import MarketScanner
from .shared.defaults import INITIAL_CAPITAL, OPTIMIZER_WINDOW_BARS
from .shared.errors import InvalidParametersError


@dataclass
class TradingContext:
    provider: Optional[DataProvider] = None
    initial_capital: float = INITIAL_CAPITAL
    fee_pct: Optional[float] = None
    fee_absolute: Optional[float] = None
    window_bars: Optional[int] = OPTIMIZER_WINDOW_BARS
    max_workers: Optional[int] = None
    clock: Callable[[], datetime] = field(default=datetime.now)

    def simulator(self) -> BacktestSimulator:
        return BacktestSimulator(
            initial_capital=self.initial_capital,
            fee_pct=self.fee_pct,
            fee_absolute=self.fee_absolute,
        )

    def optimizer(self) -> StrategyOptimizer:
        return StrategyOptimizer(
            simulator=self.simulator(),
            window_bars=self.window_bars,
            max_workers=self.max_workers,
            clock=self.clock,
        )

    def scanner(self, **kwargs) -> MarketScanner:
        """MarketScanner over this context's provider; kwargs go to MarketScanner."""
        if self.provider is None:
            raise InvalidParametersError("TradingContext has no data provider")
        kwargs.setdefault("clock", self.clock)
        return MarketScanner(self.provider, **kwargs)
