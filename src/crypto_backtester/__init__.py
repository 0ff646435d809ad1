"""Strategy backtesting over recorded price candles."""

__version__ = "0.1.0"
