"""
Walk-forward backtest simulator.

Replays one strategy over one bar series, long-only, with at most one open
position:
- Indicators are computed once and read at each bar through their offsets,
  so a decision at bar i only sees bars 0..i
- Exits are checked in priority order: stop-loss, take-profit, rule exit
- Any position still open at the last bar is closed at its close
- One equity point per simulated bar (cash plus marked-to-market position)

Identical (bars, definition) input yields an identical BacktestResult.
"""
import logging
import math
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd

from .backtest_types import (
    BacktestResult,
    EquityPoint,
    ExitReason,
    Position,
    PositionState,
    Trade,
)
from .performance import PerformanceAnalyzer
from ..data.provider import Bars, coerce_bars
from ..indicators.library import sma, rsi, macd
from ..indicators.series import IndicatorSeries
from ..shared.defaults import INITIAL_CAPITAL, RSI_PERIOD, VOLUME_AVG_WINDOW
from ..shared.errors import ComputationError, InsufficientDataError, InvalidParametersError
from ..signals.definition import StrategyDefinition
from ..signals.rules import BarSnapshot, get_rule

logger = logging.getLogger(__name__)

__all__ = ["BacktestSimulator"]


class BacktestSimulator:
    """
    Simulates one strategy over one symbol with cash-based position sizing.

    Features:
    - Position size = floor(cash * max_position_size / price) whole units
    - Cash never goes negative (no leverage, no shorting)
    - Optional per-side fees (percent of trade value plus a fixed amount)
    """

    def __init__(
        self,
        initial_capital: float = INITIAL_CAPITAL,
        fee_pct: Optional[float] = None,  # e.g. 0.001 for 0.1% of trade value per side
        fee_absolute: Optional[float] = None,  # e.g. 1.0 per trade per side
        analyzer: Optional[PerformanceAnalyzer] = None,
    ):
        """
        Initialize the simulator.

        Args:
            initial_capital: Starting cash (default: INITIAL_CAPITAL)
            fee_pct: Fee as fraction of trade value per side. None = no fee.
            fee_absolute: Fixed fee per trade per side. None = no fee.
            analyzer: Metrics calculator (default: PerformanceAnalyzer())
        """
        if initial_capital <= 0:
            raise InvalidParametersError(f"initial_capital must be > 0, got {initial_capital}")
        if fee_pct is not None and fee_pct < 0:
            raise InvalidParametersError(f"fee_pct must be >= 0, got {fee_pct}")
        if fee_absolute is not None and fee_absolute < 0:
            raise InvalidParametersError(f"fee_absolute must be >= 0, got {fee_absolute}")
        self.initial_capital = initial_capital
        self.fee_pct = fee_pct
        self.fee_absolute = fee_absolute
        self.analyzer = analyzer or PerformanceAnalyzer()

    def _fee_for_trade(self, trade_value: float) -> float:
        """Fee for one side (entry or exit): trade_value * fee_pct + fee_absolute."""
        pct = self.fee_pct or 0.0
        absolute = self.fee_absolute or 0.0
        return (trade_value * pct) + absolute

    def _position_size(self, cash: float, price: float, max_position_size: float) -> int:
        """Whole units affordable with cash * max_position_size, fees included."""
        quantity = int(math.floor(cash * max_position_size / price))
        while quantity > 0 and quantity * price + self._fee_for_trade(quantity * price) > cash:
            quantity -= 1
        return quantity

    def _close(
        self,
        position: Position,
        date: pd.Timestamp,
        price: float,
        reason: ExitReason,
        detail: str,
    ) -> Tuple[Trade, float]:
        """Close a position; returns (trade, cash received net of exit fee)."""
        proceeds = position.quantity * price
        exit_fee = min(self._fee_for_trade(proceeds), proceeds)
        pnl = proceeds - position.cost_basis - position.entry_fee - exit_fee
        trade = Trade(
            entry_date=position.entry_date,
            entry_price=position.entry_price,
            quantity=position.quantity,
            exit_date=date,
            exit_price=price,
            pnl=pnl,
            pnl_percent=pnl / position.cost_basis * 100.0,
            reason=reason,
            entry_reason=position.entry_reason,
            exit_detail=detail,
            fees=position.entry_fee + exit_fee,
        )
        return trade, proceeds - exit_fee

    def _check_exit(
        self,
        position: Position,
        snapshot: BarSnapshot,
        definition: StrategyDefinition,
    ) -> Optional[Tuple[ExitReason, str]]:
        """Exit trigger for the open position at this bar, or None."""
        unrealized = position.unrealized_pct(snapshot.price)
        risk = definition.risk_management
        if unrealized <= -risk.stop_loss_percent:
            return ExitReason.STOP_LOSS, "Stop loss triggered"
        if unrealized >= risk.take_profit_percent:
            return ExitReason.TAKE_PROFIT, "Take profit reached"
        detail = get_rule(definition.type).exit(snapshot, definition.conditions, unrealized)
        if detail:
            return ExitReason.SIGNAL, detail
        return None

    def run(
        self,
        bars: Bars,
        definition: StrategyDefinition,
        symbol: Optional[str] = None,
    ) -> BacktestResult:
        """
        Backtest ``definition`` over ``bars``.

        Args:
            bars: OHLCV DataFrame (DatetimeIndex) or a sequence of PriceBars, ascending
            definition: Strategy to simulate
            symbol: Optional label stored on the result

        Returns:
            BacktestResult with trades, equity curve and metrics

        Raises:
            InvalidParametersError: Bars unordered, duplicated or with non-positive closes
            InsufficientDataError: Fewer bars than max(sma_long, RSI period)
        """
        frame = coerce_bars(bars)
        n = len(frame)
        required = definition.required_bars
        if n < required:
            raise InsufficientDataError(
                f"{symbol or 'series'}: {n} bars < {required} required by {definition.id}"
            )

        closes = frame["Close"].to_numpy()
        volumes = frame["Volume"].to_numpy()
        dates = frame.index
        if not np.all(np.isfinite(closes)) or np.any(closes <= 0):
            raise InvalidParametersError("Close prices must be finite and > 0")
        if not np.all(np.isfinite(volumes)):
            raise InvalidParametersError("Volumes must be finite")

        conditions = definition.conditions
        sma_short = IndicatorSeries.align(sma(closes, conditions.sma_short), n)
        sma_long = IndicatorSeries.align(sma(closes, conditions.sma_long), n)
        rsi_series = IndicatorSeries.align(rsi(closes, RSI_PERIOD), n)
        macd_line = IndicatorSeries.align(macd(closes).line, n)
        rule = get_rule(definition.type)
        max_position_size = definition.risk_management.max_position_size

        cash = float(self.initial_capital)
        peak = cash
        state = PositionState.FLAT
        position: Optional[Position] = None
        trades: List[Trade] = []
        equity: List[EquityPoint] = []

        for i in range(required, n):
            date = dates[i]
            price = float(closes[i])

            # Uninvested cash stays in the value while LONG
            value = cash + position.quantity * price if state is PositionState.LONG else cash
            peak = max(peak, value)
            drawdown = (peak - value) / peak * 100.0 if peak > 0 else 0.0
            equity.append(EquityPoint(date=date, value=value, drawdown_percent=drawdown))

            snapshot = BarSnapshot(
                price=price,
                volume=float(volumes[i]),
                avg_volume=float(volumes[max(0, i - VOLUME_AVG_WINDOW):i].mean()),
                rsi=rsi_series.value_at(i),
                sma_short=sma_short.value_at(i),
                sma_long=sma_long.value_at(i),
                macd=macd_line.value_at(i),
            )

            if state is PositionState.FLAT:
                reason = rule.entry(snapshot, conditions)
                if not reason:
                    continue
                quantity = self._position_size(cash, price, max_position_size)
                if quantity == 0:
                    logger.debug("%s: entry signal at %s skipped (cash %.2f too small)", definition.id, date, cash)
                    continue
                entry_fee = self._fee_for_trade(quantity * price)
                cash -= quantity * price + entry_fee
                position = Position(
                    entry_date=date,
                    entry_price=price,
                    quantity=quantity,
                    entry_fee=entry_fee,
                    entry_reason=reason,
                )
                state = PositionState.LONG
                logger.debug("%s: open %d @ %.4f on %s (%s)", definition.id, quantity, price, date, reason)
            else:
                exit_signal = self._check_exit(position, snapshot, definition)
                if exit_signal is None:
                    continue
                exit_reason, detail = exit_signal
                trade, received = self._close(position, date, price, exit_reason, detail)
                cash += received
                trades.append(trade)
                position = None
                state = PositionState.FLAT
                logger.debug("%s: close @ %.4f on %s (%s) pnl=%.2f", definition.id, price, date, detail, trade.pnl)

        if state is PositionState.LONG:
            trade, received = self._close(
                position, dates[-1], float(closes[-1]), ExitReason.END_OF_DATA, "End of data"
            )
            cash += received
            trades.append(trade)

        metrics = self.analyzer.analyze(trades, equity, self.initial_capital, cash)
        if not all(math.isfinite(v) for v in metrics.to_dict().values()):
            raise ComputationError(f"Non-finite metric in backtest of {definition.id}: {metrics}")

        logger.info(
            "Backtest %s v%d on %s: %d trades, return %.2f%%, max drawdown %.2f%%",
            definition.id, definition.version, symbol or "series",
            len(trades), metrics.total_return, metrics.max_drawdown,
        )
        return BacktestResult(
            strategy_id=definition.id,
            strategy_version=definition.version,
            symbol=symbol,
            start_date=dates[0],
            end_date=dates[-1],
            initial_capital=float(self.initial_capital),
            final_capital=cash,
            trades=tuple(trades),
            equity=tuple(equity),
            metrics=metrics,
        )
