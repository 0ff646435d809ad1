"""Per-step signal evaluation for the supported strategy variants."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Sequence

from crypto_backtester.config.models import WARMUP_STEPS
from crypto_backtester.strategy import indicators
from crypto_backtester.strategy.indicators import IndicatorSeries
from crypto_backtester.strategy.models import (
    HOLD,
    BollingerBreakout,
    MovingAverageCrossover,
    RSIThreshold,
    Signal,
    StrategySpec,
    VolatilityBreakout,
)

if TYPE_CHECKING:
    from crypto_backtester.simulator.models import Candle


def compute_indicators(strategy: StrategySpec, candles: Sequence[Candle]) -> dict[str, IndicatorSeries]:
    """Precompute only the series the strategy reads."""
    prices = indicators.closes(candles)
    if isinstance(strategy, MovingAverageCrossover):
        return {
            "short_ma": indicators.sma(prices, strategy.short_period),
            "long_ma": indicators.sma(prices, strategy.long_period),
        }
    if isinstance(strategy, RSIThreshold):
        return {"rsi": indicators.rsi(prices, strategy.period)}
    if isinstance(strategy, BollingerBreakout):
        bands = indicators.bollinger(prices, strategy.period, strategy.multiplier)
        return {"bb_middle": bands.middle, "bb_upper": bands.upper, "bb_lower": bands.lower}
    return {}


def evaluate(
    strategy: StrategySpec,
    index: int,
    price: float,
    series: dict[str, IndicatorSeries],
    prior_candle: Optional[Candle],
    warmup_steps: int = WARMUP_STEPS,
) -> Signal:
    # The floor applies to every strategy regardless of its own period.
    if index < warmup_steps:
        return HOLD

    if isinstance(strategy, MovingAverageCrossover):
        return _evaluate_crossover(index, series)
    if isinstance(strategy, RSIThreshold):
        return _evaluate_rsi(strategy, index, series)
    if isinstance(strategy, BollingerBreakout):
        return _evaluate_bollinger(index, price, series)
    if isinstance(strategy, VolatilityBreakout):
        return _evaluate_volatility(strategy, price, prior_candle)
    return HOLD


def _evaluate_crossover(index: int, series: dict[str, IndicatorSeries]) -> Signal:
    short_ma = series["short_ma"]
    long_ma = series["long_ma"]
    last_short = short_ma.at(index)
    last_long = long_ma.at(index)
    prev_short = short_ma.at(index - 1)
    prev_long = long_ma.at(index - 1)
    if last_short is None or last_long is None or prev_short is None or prev_long is None:
        return HOLD

    if last_short > last_long and prev_short <= prev_long:
        return Signal.buy("Golden Cross")
    if last_short < last_long and prev_short >= prev_long:
        return Signal.sell("Dead Cross")
    return HOLD


def _evaluate_rsi(strategy: RSIThreshold, index: int, series: dict[str, IndicatorSeries]) -> Signal:
    current = series["rsi"].at(index)
    if current is None:
        return HOLD
    if current < strategy.buy_threshold:
        return Signal.buy(f"RSI Oversold ({current:.2f})")
    if current > strategy.sell_threshold:
        return Signal.sell(f"RSI Overbought ({current:.2f})")
    return HOLD


def _evaluate_bollinger(index: int, price: float, series: dict[str, IndicatorSeries]) -> Signal:
    upper = series["bb_upper"].at(index)
    lower = series["bb_lower"].at(index)
    if upper is None or lower is None:
        return HOLD
    if price < lower:
        return Signal.buy("BB Lower Breakout")
    if price > upper:
        return Signal.sell("BB Upper Breakout")
    return HOLD


def volatility_target(prior_candle: Candle, multiplier: float) -> float:
    return prior_candle.high + (prior_candle.high - prior_candle.low) * multiplier


def _evaluate_volatility(strategy: VolatilityBreakout, price: float, prior_candle: Optional[Candle]) -> Signal:
    if prior_candle is None:
        return HOLD
    if price > volatility_target(prior_candle, strategy.multiplier):
        return Signal.buy("Volatility Breakout")
    return HOLD
