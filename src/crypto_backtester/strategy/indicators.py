"""Technical indicators over ordered price sequences.

Every indicator returns an :class:`IndicatorSeries`: the computed values plus
the candle index of the first value.  Look values up by candle index with
:meth:`IndicatorSeries.at`, which returns ``None`` inside the warm-up range
and past the end of the series.  Inputs are not validated; a sequence shorter
than the warm-up simply produces an empty series.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional, Sequence

if TYPE_CHECKING:
    from crypto_backtester.simulator.models import Candle


@dataclass(frozen=True)
class IndicatorSeries:
    values: list[float] = field(default_factory=list)
    offset: int = 0

    def __len__(self) -> int:
        return len(self.values)

    def at(self, index: int) -> Optional[float]:
        position = index - self.offset
        if position < 0 or position >= len(self.values):
            return None
        return self.values[position]

    def latest(self) -> Optional[float]:
        if not self.values:
            return None
        return self.values[-1]

    @property
    def end(self) -> int:
        return self.offset + len(self.values)


@dataclass(frozen=True)
class BollingerBands:
    middle: IndicatorSeries
    upper: IndicatorSeries
    lower: IndicatorSeries


@dataclass(frozen=True)
class MACD:
    macd: IndicatorSeries
    signal: IndicatorSeries
    histogram: IndicatorSeries


def closes(candles: Sequence[Candle]) -> list[float]:
    return [candle.close for candle in candles]


def sma(values: Sequence[float], period: int) -> IndicatorSeries:
    if period <= 0 or len(values) < period:
        return IndicatorSeries()
    output = []
    for start in range(len(values) - period + 1):
        window = values[start : start + period]
        output.append(sum(window) / period)
    return IndicatorSeries(output, period - 1)


def _ema_values(values: Sequence[float], period: int) -> list[float]:
    if period <= 0 or len(values) < period:
        return []
    alpha = 2.0 / (period + 1.0)
    ema = sum(values[:period]) / period
    output = [ema]
    for value in values[period:]:
        ema = (value - ema) * alpha + ema
        output.append(ema)
    return output


def ema(values: Sequence[float], period: int) -> IndicatorSeries:
    """EMA seeded with the SMA of the first ``period`` values."""
    return IndicatorSeries(_ema_values(values, period), max(period - 1, 0))


def rsi(values: Sequence[float], period: int) -> IndicatorSeries:
    """RSI with Wilder smoothing.  The first value lines up with index ``period``."""
    if period <= 0 or len(values) <= period:
        return IndicatorSeries()

    gains = []
    losses = []
    for index in range(1, len(values)):
        change = values[index] - values[index - 1]
        # NaN changes must reach both averages.
        gains.append(change if not change <= 0 else 0.0)
        losses.append(-change if not change >= 0 else 0.0)

    avg_gain = sum(gains[:period]) / period
    avg_loss = sum(losses[:period]) / period
    output = [_rsi_from_averages(avg_gain, avg_loss)]
    for gain, loss in zip(gains[period:], losses[period:]):
        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period
        output.append(_rsi_from_averages(avg_gain, avg_loss))
    return IndicatorSeries(output, period)


def _rsi_from_averages(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100.0 - (100.0 / (1.0 + rs))


def macd(values: Sequence[float], fast: int = 12, slow: int = 26, signal: int = 9) -> MACD:
    fast_ema = ema(values, fast)
    slow_ema = ema(values, slow)
    if not fast_ema.values or not slow_ema.values:
        empty = IndicatorSeries()
        return MACD(empty, empty, empty)

    start = max(fast_ema.offset, slow_ema.offset)
    macd_values = [fast_ema.at(index) - slow_ema.at(index) for index in range(start, len(values))]
    macd_line = IndicatorSeries(macd_values, start)

    signal_values = _ema_values(macd_values, signal)
    if not signal_values:
        empty = IndicatorSeries()
        return MACD(macd_line, empty, empty)

    signal_start = start + signal - 1
    signal_line = IndicatorSeries(signal_values, signal_start)
    histogram = IndicatorSeries(
        [macd_line.at(index) - signal_line.at(index) for index in range(signal_start, signal_line.end)],
        signal_start,
    )
    return MACD(macd_line, signal_line, histogram)


def bollinger(values: Sequence[float], period: int, multiplier: float) -> BollingerBands:
    """Bands around the SMA using the population standard deviation."""
    middle = sma(values, period)
    upper = []
    lower = []
    for position, mean in enumerate(middle.values):
        window = values[position : position + period]
        variance = sum((value - mean) ** 2 for value in window) / period
        deviation = variance**0.5
        upper.append(mean + multiplier * deviation)
        lower.append(mean - multiplier * deviation)
    return BollingerBands(
        middle=middle,
        upper=IndicatorSeries(upper, middle.offset),
        lower=IndicatorSeries(lower, middle.offset),
    )


def true_range(highs: Sequence[float], lows: Sequence[float], closes_: Sequence[float]) -> IndicatorSeries:
    """True range from the second candle on."""
    output = []
    for index in range(1, len(closes_)):
        high = highs[index]
        low = lows[index]
        prev_close = closes_[index - 1]
        output.append(max(high - low, abs(high - prev_close), abs(low - prev_close)))
    return IndicatorSeries(output, 1)


def atr(
    highs: Sequence[float],
    lows: Sequence[float],
    closes_: Sequence[float],
    period: int,
) -> IndicatorSeries:
    ranges = true_range(highs, lows, closes_).values
    if period <= 0 or len(ranges) < period:
        return IndicatorSeries()
    value = sum(ranges[:period]) / period
    output = [value]
    for tr in ranges[period:]:
        value = (value * (period - 1) + tr) / period
        output.append(value)
    return IndicatorSeries(output, period)


def candle_atr(candles: Sequence[Candle], period: int) -> IndicatorSeries:
    return atr(
        [candle.high for candle in candles],
        [candle.low for candle in candles],
        closes(candles),
        period,
    )
