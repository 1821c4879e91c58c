"""
VectorFlux trading core.

Provides unified interfaces for:
- Indicator calculations (SMA, EMA, RSI, MACD, Bollinger, Stochastic, ATR, OBV, ADX, CCI, Williams %R)
- Strategy definitions and per-type entry/exit rules
- Walk-forward backtesting and performance metrics
- Local parameter optimization
- Market scanning and heuristic/model prediction
"""
__version__ = "0.3.0"
