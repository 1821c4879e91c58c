"""
Centralized default values for indicator, strategy, backtest and scanner parameters.

This is the SINGLE SOURCE OF TRUTH for all numeric defaults.
All modules should import from here to ensure consistency.
"""

# RSI (Relative Strength Index) defaults
RSI_PERIOD = 14  # Strategy rules always read RSI(14)
RSI_OVERSOLD = 30  # Scanner oversold zone
RSI_OVERBOUGHT = 70  # Scanner overbought zone
RSI_BULLISH_ZONE = (50, 60)  # Scanner "bullish zone" (exclusive bounds)

# MACD (Moving Average Convergence Divergence) defaults
MACD_FAST = 12  # Standard default
MACD_SLOW = 26  # Standard default
MACD_SIGNAL = 9  # Standard default

# Bollinger Bands
BOLLINGER_PERIOD = 20
BOLLINGER_K = 2.0

# Oscillators and volatility
STOCHASTIC_PERIOD = 14
STOCHASTIC_D_PERIOD = 3  # %D = SMA(%K, 3)
ATR_PERIOD = 14
ADX_PERIOD = 14
CCI_PERIOD = 20
CCI_CONSTANT = 0.015  # Lambert's constant
WILLIAMS_R_PERIOD = 14

# Trend / volume helpers
TREND_WINDOW = 5  # Compare mean of last 5 closes vs previous 5
TREND_BAND = 0.02  # +/-2% band counts as sideways
VOLUME_AVG_WINDOW = 20  # Bars in the average-volume window
VOLUME_SPIKE_RATIO = 1.5  # Volume / average above this is a spike

# Backtest defaults
INITIAL_CAPITAL = 10000.0
TRADING_DAYS_PER_YEAR = 252  # Sharpe annualization
SCALPING_EXIT_PCT = 1.0  # Scalping closes on a 1% move either way
SCALPING_RSI_BAND = 15  # Scalping enters when |RSI - 50| < 15

# Optimizer defaults
OPTIMIZER_WINDOW_BARS = 60  # Trailing bars for the shortened neighbor backtest
OPTIMIZER_RSI_STEP = 5
OPTIMIZER_SMA_SHORT_STEP = 2
OPTIMIZER_SMA_LONG_STEP = 5
OPTIMIZER_MACD_FACTOR = 1.2
OPTIMIZER_VOLUME_FACTOR = 1.1

# Strategy factory: risk multipliers (stop, profit, position)
RISK_MULTIPLIERS = {
    "low": (0.7, 0.8, 0.6),
    "medium": (1.0, 1.0, 1.0),
    "high": (1.4, 1.5, 1.5),
}

# Market scanner defaults
SCANNER_MIN_BARS = 50  # SMA50 needs 50 closes
SCANNER_MIN_CONFIDENCE = 65  # Keep only confidence > 65
SCANNER_MAX_CONFIDENCE = 95
SCANNER_BASE_CONFIDENCE = 50
SCANNER_TOP_N = 10
SCANNER_MAX_MOVERS = 5
SCANNER_MOVER_THRESHOLD_PCT = 3.0
SCANNER_PERIOD = "90d"
SCANNER_SMA_SHORT = 20
SCANNER_SMA_LONG = 50
SCANNER_HISTORY_BARS = 30  # Momentum window (last 30 closes)
SCANNER_PROXIMITY = 0.02  # Within 2% of support/resistance
SUPPORT_QUANTILE = 0.2
RESISTANCE_QUANTILE = 0.8
SENTIMENT_THRESHOLD_RATIO = 0.2

DEFAULT_STOCKS = ["AAPL", "GOOGL", "MSFT", "TSLA", "AMZN", "NVDA", "META", "NFLX"]
DEFAULT_CRYPTO = ["BTC", "ETH", "BNB", "SOL", "ADA", "DOT"]
HIGH_BETA_CRYPTO = ("BTC", "ETH")  # Predicted change x1.2

# Ensemble weights (per predictor name), scaled by each predictor's confidence
ENSEMBLE_WEIGHTS = {
    "dnn": 0.25,
    "lstm": 0.25,
    "transformer": 0.15,
    "reinforcement": 0.15,
    "cnn": 0.1,
    "sentiment": 0.1,
    "heuristic": 0.25,
}
STRONG_CONSENSUS_RATIO = 0.7  # STRONG BUY/SELL when >= 70% of votes agree
