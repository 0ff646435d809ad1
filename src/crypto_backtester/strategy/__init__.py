"""Indicators, strategy variants and signal evaluation."""

from crypto_backtester.strategy.models import (
    HOLD,
    BollingerBreakout,
    MovingAverageCrossover,
    RSIThreshold,
    Signal,
    SignalAction,
    StrategySpec,
    VolatilityBreakout,
)
from crypto_backtester.strategy.indicators import (
    MACD,
    BollingerBands,
    IndicatorSeries,
    atr,
    bollinger,
    ema,
    macd,
    rsi,
    sma,
)
from crypto_backtester.strategy.evaluator import compute_indicators, evaluate
from crypto_backtester.strategy.specs import serialize_strategy, strategy_from_config
from crypto_backtester.strategy.market_data import (
    MarketSnapshot,
    load_candles,
    market_snapshot,
    prepare_candles,
)

__all__ = [
    "HOLD",
    "MACD",
    "BollingerBands",
    "BollingerBreakout",
    "IndicatorSeries",
    "MarketSnapshot",
    "MovingAverageCrossover",
    "RSIThreshold",
    "Signal",
    "SignalAction",
    "StrategySpec",
    "VolatilityBreakout",
    "atr",
    "bollinger",
    "compute_indicators",
    "ema",
    "evaluate",
    "load_candles",
    "macd",
    "market_snapshot",
    "prepare_candles",
    "rsi",
    "serialize_strategy",
    "sma",
    "strategy_from_config",
]
