"""
Historical OHLCV data interface.

The core never retrieves data itself; it calls a DataProvider
(symbol, period -> ordered bars). Bars travel as DataFrames with a
DatetimeIndex and Open/High/Low/Close/Volume columns; PriceBar lists
convert to and from that shape.
"""
from typing import Dict, List, Optional, Protocol, Sequence, Union

import pandas as pd

from ..shared.errors import InsufficientDataError, InvalidParametersError
from ..shared.types import PriceBar

OHLCV_COLUMNS = ["Open", "High", "Low", "Close", "Volume"]

Bars = Union[pd.DataFrame, Sequence[PriceBar]]


class DataProvider(Protocol):
    """Source of historical bars."""

    def fetch(self, symbol: str, period: str) -> pd.DataFrame:
        """
        Return OHLCV bars for a symbol.

        Args:
            symbol: Ticker symbol (e.g. "AAPL", "BTC")
            period: Lookback such as "90d", "30d", "1y"

        Returns:
            DataFrame with DatetimeIndex ascending and OHLCV columns
        """
        ...


def bars_to_frame(bars: Sequence[PriceBar]) -> pd.DataFrame:
    """Convert PriceBars to an OHLCV DataFrame (order preserved)."""
    index = pd.DatetimeIndex([pd.Timestamp(b.date) for b in bars], name="Date")
    return pd.DataFrame(
        {
            "Open": [float(b.open) for b in bars],
            "High": [float(b.high) for b in bars],
            "Low": [float(b.low) for b in bars],
            "Close": [float(b.close) for b in bars],
            "Volume": [float(b.volume) for b in bars],
        },
        index=index,
        columns=OHLCV_COLUMNS,
    )


def frame_to_bars(frame: pd.DataFrame) -> List[PriceBar]:
    """Convert an OHLCV DataFrame to PriceBars."""
    return [
        PriceBar(
            date=pd.Timestamp(ts),
            open=float(row.Open),
            high=float(row.High),
            low=float(row.Low),
            close=float(row.Close),
            volume=float(row.Volume),
        )
        for ts, row in zip(frame.index, frame[OHLCV_COLUMNS].itertuples(index=False))
    ]


def validate_bars(frame: pd.DataFrame) -> pd.DataFrame:
    """
    Check the bar contract: OHLCV columns, datetime index, ascending, no duplicate dates.

    Returns the frame restricted to OHLCV columns (as float). Raises
    InvalidParametersError; never reorders or deduplicates silently.
    """
    missing = [c for c in OHLCV_COLUMNS if c not in frame.columns]
    if missing:
        raise InvalidParametersError(f"Missing OHLCV columns: {missing}")
    if not isinstance(frame.index, pd.DatetimeIndex):
        try:
            frame = frame.set_axis(pd.to_datetime(frame.index), axis=0)
        except (TypeError, ValueError) as e:
            raise InvalidParametersError(f"Bar index is not date-like: {e}") from e
    if frame.index.has_duplicates:
        dupes = frame.index[frame.index.duplicated()].unique()
        raise InvalidParametersError(f"Duplicate bar dates: {list(dupes[:3])}")
    if not frame.index.is_monotonic_increasing:
        raise InvalidParametersError("Bars must be ordered ascending by date")
    return frame[OHLCV_COLUMNS].astype(float)


def coerce_bars(bars: Bars) -> pd.DataFrame:
    """Accept a DataFrame or a PriceBar sequence and return a validated OHLCV frame."""
    if isinstance(bars, pd.DataFrame):
        return validate_bars(bars)
    return validate_bars(bars_to_frame(list(bars)))


class FrameDataProvider:
    """In-memory provider over a symbol -> DataFrame mapping."""

    def __init__(self, frames: Dict[str, pd.DataFrame], min_bars: Optional[int] = None):
        self.frames = dict(frames)
        self.min_bars = min_bars

    def fetch(self, symbol: str, period: str) -> pd.DataFrame:
        if symbol not in self.frames:
            raise KeyError(f"No data for symbol '{symbol}'")
        frame = self.frames[symbol]
        days = period_to_days(period)
        if days is not None and len(frame) > days:
            frame = frame.iloc[-days:]
        if self.min_bars is not None and len(frame) < self.min_bars:
            raise InsufficientDataError(f"{symbol}: {len(frame)} bars < {self.min_bars}")
        return frame


def period_to_days(period: str) -> Optional[int]:
    """Translate "90d" / "12w" / "6mo" / "2y" into a bar count; None for "max" or unknown."""
    period = str(period).strip().lower()
    units = (("mo", 30), ("d", 1), ("w", 7), ("y", 365))
    for suffix, days in units:
        if period.endswith(suffix):
            number = period[: -len(suffix)]
            if number.isdigit():
                return int(number) * days
            return None
    return None
