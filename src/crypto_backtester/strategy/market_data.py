"""Candle adapters and the live-analysis indicator snapshot."""

from __future__ import annotations

import csv
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence

from crypto_backtester.simulator.models import Candle
from crypto_backtester.strategy import indicators
from crypto_backtester.strategy.evaluator import volatility_target

# Exchange candle payload keys -> generic candle fields.
EXCHANGE_FIELDS = {
    "candle_date_time_utc": "time",
    "opening_price": "open",
    "high_price": "high",
    "low_price": "low",
    "trade_price": "close",
    "candle_acc_trade_volume": "volume",
}


def parse_time(value: Any) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        parsed = datetime.fromtimestamp(value, tz=timezone.utc)
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def candle_from_record(record: dict[str, Any]) -> Candle:
    data = {EXCHANGE_FIELDS.get(key, key): value for key, value in record.items()}
    missing = [key for key in ("time", "open", "high", "low", "close") if data.get(key) in (None, "")]
    if missing:
        raise ValueError(f"Candle record missing fields: {missing}")
    volume = data.get("volume")
    return Candle(
        time=parse_time(data["time"]),
        open=float(data["open"]),
        high=float(data["high"]),
        low=float(data["low"]),
        close=float(data["close"]),
        volume=float(volume) if volume not in (None, "") else None,
    )


def candles_from_records(records: Iterable[dict[str, Any]]) -> list[Candle]:
    return [candle_from_record(record) for record in records]


def prepare_candles(candles: Iterable[Candle]) -> list[Candle]:
    """Sort ascending by time and keep the first candle of each timestamp."""
    seen: set[datetime] = set()
    ordered: list[Candle] = []
    for candle in sorted(candles, key=lambda item: item.time):
        if candle.time in seen:
            continue
        seen.add(candle.time)
        ordered.append(candle)
    return ordered


def load_candles(path: str | Path) -> list[Candle]:
    path = Path(path)
    if path.suffix.lower() == ".json":
        payload = json.loads(path.read_text(encoding="utf-8"))
        if isinstance(payload, dict):
            payload = payload.get("candles", [])
        if not isinstance(payload, list):
            raise ValueError("Candle JSON must be a list or contain a 'candles' list")
        return candles_from_records(payload)
    with path.open("r", encoding="utf-8", newline="") as handle:
        return candles_from_records(csv.DictReader(handle))


@dataclass(frozen=True)
class VolatilitySnapshot:
    range: float
    target_price: float
    is_breakout: bool


@dataclass(frozen=True)
class MarketSnapshot:
    time: datetime
    price: float
    rsi: Optional[float]
    sma: Optional[float]
    bollinger_upper: Optional[float]
    bollinger_middle: Optional[float]
    bollinger_lower: Optional[float]
    macd: Optional[float]
    macd_signal: Optional[float]
    macd_histogram: Optional[float]
    atr: Optional[float]
    volatility: Optional[VolatilitySnapshot]


def market_snapshot(
    candles: Sequence[Candle],
    rsi_period: int = 14,
    sma_period: int = 20,
    bollinger_period: int = 20,
    bollinger_multiplier: float = 2.0,
    atr_period: int = 14,
    volatility_multiplier: float = 0.5,
) -> MarketSnapshot:
    """Latest indicator values for live analysis.  Missing values are ``None``."""
    if not candles:
        raise ValueError("market_snapshot needs at least one candle")
    prices = indicators.closes(candles)
    bands = indicators.bollinger(prices, bollinger_period, bollinger_multiplier)
    macd = indicators.macd(prices)
    last = candles[-1]

    volatility = None
    if len(candles) > 1:
        prior = candles[-2]
        target = volatility_target(prior, volatility_multiplier)
        volatility = VolatilitySnapshot(
            range=prior.high - prior.low,
            target_price=target,
            is_breakout=last.close > target,
        )

    return MarketSnapshot(
        time=last.time,
        price=last.close,
        rsi=indicators.rsi(prices, rsi_period).latest(),
        sma=indicators.sma(prices, sma_period).latest(),
        bollinger_upper=bands.upper.latest(),
        bollinger_middle=bands.middle.latest(),
        bollinger_lower=bands.lower.latest(),
        macd=macd.macd.latest(),
        macd_signal=macd.signal.latest(),
        macd_histogram=macd.histogram.latest(),
        atr=indicators.candle_atr(candles, atr_period).latest(),
        volatility=volatility,
    )
