"""Build strategy variants from loosely-typed mappings."""

from __future__ import annotations

from dataclasses import fields
from typing import Any, Callable

from crypto_backtester.strategy.models import (
    BollingerBreakout,
    MovingAverageCrossover,
    RSIThreshold,
    StrategySpec,
    VolatilityBreakout,
)

# Accepts both snake_case keys and the camelCase keys sent by the web client.
_ALIASES = {
    "shortPeriod": "short_period",
    "longPeriod": "long_period",
    "buyThreshold": "buy_threshold",
    "sellThreshold": "sell_threshold",
}


def _require(data: dict[str, Any], key: str, kind: str) -> Any:
    if key not in data:
        raise ValueError(f"Missing parameter '{key}' for strategy '{kind}'")
    return data[key]


def _build_ma(data: dict[str, Any]) -> MovingAverageCrossover:
    return MovingAverageCrossover(
        short_period=int(_require(data, "short_period", "ma")),
        long_period=int(_require(data, "long_period", "ma")),
    )


def _build_rsi(data: dict[str, Any]) -> RSIThreshold:
    return RSIThreshold(
        period=int(_require(data, "period", "rsi")),
        buy_threshold=float(_require(data, "buy_threshold", "rsi")),
        sell_threshold=float(_require(data, "sell_threshold", "rsi")),
    )


def _build_bband(data: dict[str, Any]) -> BollingerBreakout:
    return BollingerBreakout(
        period=int(_require(data, "period", "bband")),
        multiplier=float(_require(data, "multiplier", "bband")),
    )


def _build_volatility(data: dict[str, Any]) -> VolatilityBreakout:
    return VolatilityBreakout(multiplier=float(_require(data, "multiplier", "volatility")))


_BUILDERS: dict[str, Callable[[dict[str, Any]], StrategySpec]] = {
    MovingAverageCrossover.kind: _build_ma,
    RSIThreshold.kind: _build_rsi,
    BollingerBreakout.kind: _build_bband,
    VolatilityBreakout.kind: _build_volatility,
}


def strategy_from_config(data: dict[str, Any]) -> StrategySpec:
    """Parse ``{"type": ..., "parameters": {...}}`` or a flat ``strategyType`` mapping."""
    kind = data.get("type", data.get("strategyType"))
    if kind is None:
        raise ValueError("Strategy config needs a 'type'")
    builder = _BUILDERS.get(str(kind))
    if builder is None:
        raise ValueError(f"Unsupported strategy type: {kind}")

    params = dict(data.get("parameters", {}))
    for key, value in data.items():
        if key not in {"type", "strategyType", "parameters"}:
            params.setdefault(key, value)
    normalized = {_ALIASES.get(key, key): value for key, value in params.items()}
    return builder(normalized)


def serialize_strategy(strategy: StrategySpec) -> dict[str, Any]:
    parameters = {item.name: getattr(strategy, item.name) for item in fields(strategy)}
    return {"type": strategy.kind, "parameters": parameters}
