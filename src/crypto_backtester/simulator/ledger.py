"""Cash/position bookkeeping for a single backtest run."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from crypto_backtester.config.models import CASH_UTILIZATION, MIN_ORDER_CASH
from crypto_backtester.simulator.models import EquityPoint, TradeRecord

logger = logging.getLogger(__name__)


class SimulationLedger:
    """Mutable run state.  One instance per run, never shared between runs."""

    def __init__(
        self,
        initial_capital: float,
        min_order_cash: float = MIN_ORDER_CASH,
        cash_utilization: float = CASH_UTILIZATION,
    ) -> None:
        self.initial_capital = initial_capital
        self.min_order_cash = min_order_cash
        self.cash_utilization = cash_utilization
        self.cash = initial_capital
        self.position = 0.0
        self.trades: list[TradeRecord] = []
        self.equity_history: list[EquityPoint] = []

    def buy(self, price: float, timestamp: datetime, reason: str) -> Optional[TradeRecord]:
        if self.cash <= self.min_order_cash:
            return None
        if price == 0:
            logger.warning("Skipping %s buy at zero price (%s)", reason, timestamp)
            return None
        # The unspent remainder stands in for fees and slippage and is never used.
        amount = (self.cash * self.cash_utilization) / price
        self.cash -= amount * price
        self.position += amount
        record = TradeRecord(type="buy", price=price, amount=amount, timestamp=timestamp, reason=reason)
        self.trades.append(record)
        logger.debug("buy %.8f @ %s (%s)", amount, price, reason)
        return record

    def sell(self, price: float, timestamp: datetime, reason: str) -> Optional[TradeRecord]:
        if self.position <= 0:
            return None
        amount = self.position
        # Profit is measured against the latest buy only, not the blended cost of
        # every buy since the previous sell.
        last_buy = self.last_buy()
        profit = (price - last_buy.price) * amount if last_buy is not None else 0.0
        self.cash += amount * price
        self.position = 0.0
        record = TradeRecord(
            type="sell",
            price=price,
            amount=amount,
            timestamp=timestamp,
            reason=reason,
            profit=profit,
        )
        self.trades.append(record)
        logger.debug("sell %.8f @ %s (%s) profit=%.2f", amount, price, reason, profit)
        return record

    def last_buy(self) -> Optional[TradeRecord]:
        return next((trade for trade in reversed(self.trades) if trade.type == "buy"), None)

    def equity(self, price: float) -> float:
        return self.cash + self.position * price

    def snapshot(self, time: datetime, price: float) -> EquityPoint:
        point = EquityPoint(time=time, value=self.equity(price))
        self.equity_history.append(point)
        return point
