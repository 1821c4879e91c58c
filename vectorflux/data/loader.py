"""
CSV data loading.

Loads OHLCV CSV files (Date as first column) with support for:
- Date range filtering
- A directory of <SYMBOL>.csv files exposed as a DataProvider
"""
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

import pandas as pd

from .provider import period_to_days

logger = logging.getLogger(__name__)


class DataLoader:
    """
    Loads data from one CSV file.

    Supports date range filtering and single-column selection.
    """

    def __init__(self, data_path: Union[str, Path]):
        """
        Initialize the data loader.

        Args:
            data_path: Path to the CSV file containing the data
        """
        self.data_path = Path(data_path)
        if not self.data_path.exists():
            raise FileNotFoundError(f"Data file not found: {self.data_path}")

    def load(
        self,
        start_date: Optional[Union[str, datetime, pd.Timestamp]] = None,
        end_date: Optional[Union[str, datetime, pd.Timestamp]] = None,
        column: Optional[str] = None
    ) -> Union[pd.DataFrame, pd.Series]:
        """
        Load data from CSV file with optional filtering.

        Args:
            start_date: Start date for filtering (inclusive). If None, no start filter.
            end_date: End date for filtering (inclusive). If None, no end filter.
            column: If specified, return Series for this column instead of DataFrame.

        Returns:
            DataFrame or Series with datetime index and OHLCV columns (or specified column)
        """
        df = pd.read_csv(self.data_path, index_col=0, parse_dates=True)

        if not isinstance(df.index, pd.DatetimeIndex):
            df.index = pd.to_datetime(df.index)

        df = df.sort_index()

        if start_date is not None:
            df = df[df.index >= pd.to_datetime(start_date)]
        if end_date is not None:
            df = df[df.index <= pd.to_datetime(end_date)]

        if column is not None:
            if column not in df.columns:
                raise ValueError(f"Column '{column}' not found. Available: {list(df.columns)}")
            return df[column]

        return df


class CsvDataProvider:
    """DataProvider over a directory of <SYMBOL>.csv files."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def path_for(self, symbol: str) -> Path:
        return self.directory / f"{symbol}.csv"

    def list_symbols(self) -> List[str]:
        """Sorted CSV stems in the directory (empty if the directory is missing)."""
        if not self.directory.exists():
            return []
        return sorted(p.stem for p in self.directory.glob("*.csv"))

    def fetch(self, symbol: str, period: str) -> pd.DataFrame:
        """Last ``period`` bars of <SYMBOL>.csv (all bars when the period is open-ended)."""
        df = DataLoader(self.path_for(symbol)).load()
        days = period_to_days(period)
        if days is not None and len(df) > days:
            df = df.iloc[-days:]
        logger.debug("Loaded %d bars for %s from %s", len(df), symbol, self.directory)
        return df
