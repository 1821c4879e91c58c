"""
Unified CLI entry points for all trading operations.

Provides command-line interfaces for:
- Data download
- Strategy backtesting
- Strategy optimization
- Market scanning
"""
