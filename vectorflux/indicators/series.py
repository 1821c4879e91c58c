"""
Alignment of indicator outputs to the bar index.

Indicator arrays cover a suffix of the input, so value j of an indicator
belongs to bar ``j + offset``. IndicatorSeries keeps that offset next to
the values so indicators of different periods can be read at the same bar.
"""
from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd


@dataclass(frozen=True, eq=False)
class IndicatorSeries:
    """Indicator values plus the bar index of the first value."""
    values: np.ndarray
    offset: int

    @classmethod
    def align(cls, values: np.ndarray, input_length: int) -> "IndicatorSeries":
        """Wrap an indicator output computed from ``input_length`` bars."""
        values = np.asarray(values, dtype=float)
        return cls(values=values, offset=input_length - values.shape[0])

    def __len__(self) -> int:
        return int(self.values.shape[0])

    def value_at(self, bar_index: int) -> Optional[float]:
        """Value at a bar, None during warm-up or past the end."""
        j = bar_index - self.offset
        if j < 0 or j >= self.values.shape[0]:
            return None
        return float(self.values[j])

    def to_series(self, index: pd.Index, name: Optional[str] = None) -> pd.Series:
        """Full-length Series on ``index`` with NaN during warm-up."""
        padded = np.full(len(index), np.nan)
        if self.values.shape[0]:
            padded[self.offset:] = self.values
        return pd.Series(padded, index=index, name=name)
