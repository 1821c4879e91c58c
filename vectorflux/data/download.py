"""Historical data from Yahoo Finance."""
import logging
import warnings
from pathlib import Path
from typing import Dict, Iterable, Optional, Union

import pandas as pd
import yfinance as yf

from .provider import OHLCV_COLUMNS
from ..shared.defaults import DEFAULT_CRYPTO
from ..shared.errors import InsufficientDataError

# Suppress yfinance's pandas deprecation warnings
warnings.filterwarnings('ignore', message='.*Timestamp.utcnow.*')

logger = logging.getLogger(__name__)

MODULE_DIR = Path(__file__).parent
DATA_DIR = MODULE_DIR.parent.parent / "data"  # Store data in project root /data


def yahoo_ticker(symbol: str, crypto_symbols: Iterable[str] = DEFAULT_CRYPTO) -> str:
    """Yahoo ticker for a symbol; crypto symbols trade as <SYMBOL>-USD."""
    if symbol in set(crypto_symbols) and not symbol.endswith("-USD"):
        return f"{symbol}-USD"
    return symbol


class YahooDataProvider:
    """DataProvider backed by yfinance."""

    def __init__(self, crypto_symbols: Iterable[str] = DEFAULT_CRYPTO, interval: str = "1d"):
        self.crypto_symbols = tuple(crypto_symbols)
        self.interval = interval

    def fetch(self, symbol: str, period: str) -> pd.DataFrame:
        """Download ``period`` of bars; raises InsufficientDataError when nothing comes back."""
        ticker = yahoo_ticker(symbol, self.crypto_symbols)
        df = yf.download(ticker, period=period, interval=self.interval, progress=False)

        if df is None or df.empty:
            raise InsufficientDataError(f"No data returned for {symbol} ({ticker})")

        # Flatten multi-level columns if present (yfinance sometimes returns these)
        if isinstance(df.columns, pd.MultiIndex):
            df.columns = df.columns.get_level_values(0)

        df = df[OHLCV_COLUMNS].dropna(subset=["Close"])
        df.index.name = "Date"
        logger.debug("Downloaded %d bars for %s", len(df), ticker)
        return df


def download_symbols(
    symbols: Iterable[str],
    period: str = "1y",
    data_dir: Union[str, Path] = DATA_DIR,
    provider: Optional[YahooDataProvider] = None,
) -> Dict[str, pd.DataFrame]:
    """
    Download bars for several symbols and save each as <data_dir>/<SYMBOL>.csv.

    Failed symbols are logged and skipped.

    Returns:
        Map symbol -> downloaded DataFrame (successful symbols only)
    """
    provider = provider or YahooDataProvider()
    data_dir = Path(data_dir)
    data_dir.mkdir(parents=True, exist_ok=True)

    results: Dict[str, pd.DataFrame] = {}
    for symbol in symbols:
        try:
            df = provider.fetch(symbol, period)
        except Exception as e:
            logger.warning("Error downloading %s: %s", symbol, e)
            continue
        csv_file = data_dir / f"{symbol}.csv"
        df.to_csv(csv_file)
        logger.info("Saved %d rows to %s", len(df), csv_file)
        results[symbol] = df
    return results
