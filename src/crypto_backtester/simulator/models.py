"""Simulation data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional


@dataclass(frozen=True)
class Candle:
    time: datetime
    open: float
    high: float
    low: float
    close: float
    volume: Optional[float] = None


@dataclass(frozen=True)
class TradeRecord:
    type: str  # "buy" or "sell"
    price: float
    amount: float
    timestamp: datetime
    reason: str
    profit: Optional[float] = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "type": self.type,
            "price": self.price,
            "amount": self.amount,
            "timestamp": self.timestamp.isoformat(),
            "reason": self.reason,
        }
        if self.profit is not None:
            payload["profit"] = self.profit
        return payload


@dataclass(frozen=True)
class EquityPoint:
    time: datetime
    value: float


@dataclass(frozen=True)
class BacktestResult:
    initial_capital: float
    final_capital: float
    total_return_pct: float
    trade_count: int
    win_rate_pct: float
    trades: list[TradeRecord] = field(default_factory=list)
    equity_history: list[EquityPoint] = field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        """Shape used by the web layer's backtest endpoint."""
        return {
            "initialCapital": self.initial_capital,
            "finalCapital": self.final_capital,
            "totalReturn": self.total_return_pct,
            "tradeCount": self.trade_count,
            "winRate": self.win_rate_pct,
            "trades": [trade.to_payload() for trade in self.trades],
            "history": [
                {"time": point.time.isoformat(), "value": point.value} for point in self.equity_history
            ],
        }
