"""
Pure indicator functions over price arrays.

Every function accepts array-likes (lists, numpy arrays, pandas Series),
never mutates its input and returns numpy arrays that omit the warm-up
period, so ``len(output) = len(input) - warmup``. Input shorter than the
required lookback yields an empty array rather than an exception; callers
check lengths (or use IndicatorSeries) before indexing.

Output buffers are sized from the closed-form lengths below and written
by index:

    sma, ema, bollinger, stochastic %K, cci, williams_r: n - period + 1
    rsi, atr, adx:                                       n - period
    macd line:                                           n - slow + 1
    macd signal / histogram:                             len(line) - signal + 1
    obv:                                                 n
"""
from dataclasses import dataclass
from typing import Sequence, Tuple, Union

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from ..shared.defaults import (
    RSI_PERIOD,
    MACD_FAST, MACD_SLOW, MACD_SIGNAL,
    BOLLINGER_PERIOD, BOLLINGER_K,
    STOCHASTIC_PERIOD, STOCHASTIC_D_PERIOD,
    ATR_PERIOD, ADX_PERIOD,
    CCI_PERIOD, CCI_CONSTANT,
    WILLIAMS_R_PERIOD,
)
from ..shared.errors import InvalidParametersError

ArrayLike = Union[Sequence[float], np.ndarray]


@dataclass(frozen=True, eq=False)
class MACDResult:
    """MACD line, signal line and histogram (each omits its own warm-up)."""
    line: np.ndarray
    signal: np.ndarray
    histogram: np.ndarray


@dataclass(frozen=True, eq=False)
class BollingerBands:
    upper: np.ndarray
    middle: np.ndarray
    lower: np.ndarray


@dataclass(frozen=True, eq=False)
class StochasticResult:
    k: np.ndarray
    d: np.ndarray


def _empty() -> np.ndarray:
    return np.empty(0, dtype=float)


def _as_array(values: ArrayLike) -> np.ndarray:
    # Copy so callers' arrays are never written through a view
    return np.array(values, dtype=float, copy=True).reshape(-1)


def _check_period(period: int, name: str = "period") -> int:
    if period is None or period < 1 or int(period) != period:
        raise InvalidParametersError(f"{name} must be a positive integer, got {period}")
    return int(period)


def _as_ohlc(
    highs: ArrayLike, lows: ArrayLike, closes: ArrayLike
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    h, l, c = _as_array(highs), _as_array(lows), _as_array(closes)
    if not (h.shape[0] == l.shape[0] == c.shape[0]):
        raise InvalidParametersError(
            f"highs, lows and closes must have equal length, got {h.shape[0]}, {l.shape[0]}, {c.shape[0]}"
        )
    return h, l, c


def _safe_ratio(numerator: np.ndarray, denominator: np.ndarray) -> np.ndarray:
    """numerator / denominator, 0 where the denominator is 0."""
    out = np.zeros(numerator.shape[0], dtype=float)
    np.divide(numerator, denominator, out=out, where=denominator != 0)
    return out


def sma(prices: ArrayLike, period: int) -> np.ndarray:
    """Simple moving average; length n - period + 1."""
    period = _check_period(period)
    data = _as_array(prices)
    if data.shape[0] < period:
        return _empty()
    return sliding_window_view(data, period).mean(axis=1)


def ema(prices: ArrayLike, period: int) -> np.ndarray:
    """
    Exponential moving average seeded with the SMA of the first window.

    ema[0] = mean(prices[:period]); ema[j] = p * a + ema[j-1] * (1 - a), a = 2 / (period + 1)
    """
    period = _check_period(period)
    data = _as_array(prices)
    n = data.shape[0]
    if n < period:
        return _empty()
    alpha = 2.0 / (period + 1)
    out = np.empty(n - period + 1, dtype=float)
    out[0] = data[:period].mean()
    for j in range(1, out.shape[0]):
        out[j] = data[period - 1 + j] * alpha + out[j - 1] * (1.0 - alpha)
    return out


def rsi(prices: ArrayLike, period: int = RSI_PERIOD) -> np.ndarray:
    """
    Relative Strength Index over rolling windows of ``period`` price changes.

    RSI = 100 - 100 / (1 + avg_gain / avg_loss); a window without losses is 100.
    Output length is n - period (one value per full window of changes).
    """
    period = _check_period(period)
    data = _as_array(prices)
    n = data.shape[0]
    if n < period + 1:
        return _empty()
    changes = np.diff(data)
    gains = np.where(changes > 0, changes, 0.0)
    losses = np.where(changes < 0, -changes, 0.0)
    avg_gain = sliding_window_view(gains, period).mean(axis=1)
    avg_loss = sliding_window_view(losses, period).mean(axis=1)

    out = np.full(n - period, 100.0)
    has_loss = avg_loss > 0
    rs = avg_gain[has_loss] / avg_loss[has_loss]
    out[has_loss] = 100.0 - 100.0 / (1.0 + rs)
    return out


def macd(
    prices: ArrayLike,
    fast: int = MACD_FAST,
    slow: int = MACD_SLOW,
    signal: int = MACD_SIGNAL,
) -> MACDResult:
    """
    MACD line, signal line and histogram.

    line[i] = ema_fast[i + slow - fast] - ema_slow[i]  (both end on the same bar)
    signal  = ema(line, signal)
    hist[i] = line[i + signal - 1] - signal[i]
    """
    fast = _check_period(fast, "fast")
    slow = _check_period(slow, "slow")
    signal = _check_period(signal, "signal")
    if fast >= slow:
        raise InvalidParametersError(f"MACD fast ({fast}) must be less than slow ({slow})")

    data = _as_array(prices)
    slow_ema = ema(data, slow)
    if slow_ema.shape[0] == 0:
        return MACDResult(_empty(), _empty(), _empty())
    fast_ema = ema(data, fast)
    offset = slow - fast
    line = fast_ema[offset:offset + slow_ema.shape[0]] - slow_ema

    signal_line = ema(line, signal)
    if signal_line.shape[0] == 0:
        return MACDResult(line, _empty(), _empty())
    histogram = line[signal - 1:] - signal_line
    return MACDResult(line, signal_line, histogram)


def bollinger_bands(
    prices: ArrayLike, period: int = BOLLINGER_PERIOD, k: float = BOLLINGER_K
) -> BollingerBands:
    """Middle = SMA, upper/lower = middle +/- k * population std of each window."""
    period = _check_period(period)
    data = _as_array(prices)
    if data.shape[0] < period:
        return BollingerBands(_empty(), _empty(), _empty())
    windows = sliding_window_view(data, period)
    middle = windows.mean(axis=1)
    std = windows.std(axis=1)
    return BollingerBands(middle + k * std, middle, middle - k * std)


def stochastic(
    highs: ArrayLike,
    lows: ArrayLike,
    closes: ArrayLike,
    period: int = STOCHASTIC_PERIOD,
    d_period: int = STOCHASTIC_D_PERIOD,
) -> StochasticResult:
    """%K = (close - lowest low) / (highest high - lowest low) * 100; %D = SMA(%K, d_period)."""
    period = _check_period(period)
    d_period = _check_period(d_period, "d_period")
    h, l, c = _as_ohlc(highs, lows, closes)
    if c.shape[0] < period:
        return StochasticResult(_empty(), _empty())
    highest = sliding_window_view(h, period).max(axis=1)
    lowest = sliding_window_view(l, period).min(axis=1)
    k = _safe_ratio(c[period - 1:] - lowest, highest - lowest) * 100.0
    return StochasticResult(k, sma(k, d_period))


def true_range(highs: ArrayLike, lows: ArrayLike, closes: ArrayLike) -> np.ndarray:
    """True range from bar 1 on; length n - 1."""
    h, l, c = _as_ohlc(highs, lows, closes)
    if c.shape[0] < 2:
        return _empty()
    prev_close = c[:-1]
    return np.maximum.reduce([
        h[1:] - l[1:],
        np.abs(h[1:] - prev_close),
        np.abs(l[1:] - prev_close),
    ])


def atr(
    highs: ArrayLike, lows: ArrayLike, closes: ArrayLike, period: int = ATR_PERIOD
) -> np.ndarray:
    """Average true range: SMA of the true range; length n - period."""
    period = _check_period(period)
    return sma(true_range(highs, lows, closes), period)


def obv(closes: ArrayLike, volumes: ArrayLike) -> np.ndarray:
    """On-balance volume starting at volumes[0]; length n."""
    c, v = _as_array(closes), _as_array(volumes)
    if c.shape[0] != v.shape[0]:
        raise InvalidParametersError(
            f"closes and volumes must have equal length, got {c.shape[0]}, {v.shape[0]}"
        )
    n = c.shape[0]
    out = np.empty(n, dtype=float)
    if n == 0:
        return out
    out[0] = v[0]
    out[1:] = v[0] + np.cumsum(np.sign(np.diff(c)) * v[1:])
    return out


def adx(
    highs: ArrayLike, lows: ArrayLike, closes: ArrayLike, period: int = ADX_PERIOD
) -> np.ndarray:
    """Simplified ADX: ATR scaled by 100 and capped at 100; length n - period."""
    return np.minimum(atr(highs, lows, closes, period) * 100.0, 100.0)


def cci(
    highs: ArrayLike, lows: ArrayLike, closes: ArrayLike, period: int = CCI_PERIOD
) -> np.ndarray:
    """Commodity channel index on typical price; zero mean deviation gives 0."""
    period = _check_period(period)
    h, l, c = _as_ohlc(highs, lows, closes)
    if c.shape[0] < period:
        return _empty()
    typical = (h + l + c) / 3.0
    windows = sliding_window_view(typical, period)
    mean_tp = windows.mean(axis=1)
    mean_dev = np.abs(windows - mean_tp[:, None]).mean(axis=1)
    return _safe_ratio(typical[period - 1:] - mean_tp, CCI_CONSTANT * mean_dev)


def williams_r(
    highs: ArrayLike, lows: ArrayLike, closes: ArrayLike, period: int = WILLIAMS_R_PERIOD
) -> np.ndarray:
    """Williams %R in [-100, 0]; zero range gives 0."""
    period = _check_period(period)
    h, l, c = _as_ohlc(highs, lows, closes)
    if c.shape[0] < period:
        return _empty()
    highest = sliding_window_view(h, period).max(axis=1)
    lowest = sliding_window_view(l, period).min(axis=1)
    return _safe_ratio(highest - c[period - 1:], highest - lowest) * -100.0


def warmup_offset(
    name: str,
    period: int = 0,
    slow: int = MACD_SLOW,
    signal: int = MACD_SIGNAL,
    d_period: int = STOCHASTIC_D_PERIOD,
) -> int:
    """
    Number of leading bars without a value for an indicator output.

    Value j of the output belongs to bar ``j + warmup_offset(...)``. Names
    are the function names plus ``macd_signal`` and ``stochastic_d`` for
    the second outputs; ``period`` is ignored for macd and obv.
    """
    if name == "obv":
        return 0
    if name == "macd":
        return _check_period(slow, "slow") - 1
    if name == "macd_signal":
        return _check_period(slow, "slow") + _check_period(signal, "signal") - 2
    period = _check_period(period)
    if name in ("sma", "ema", "bollinger_bands", "stochastic", "cci", "williams_r"):
        return period - 1
    if name == "stochastic_d":
        return period + _check_period(d_period, "d_period") - 2
    if name in ("rsi", "atr", "adx"):
        return period
    raise InvalidParametersError(f"Unknown indicator: {name}")
