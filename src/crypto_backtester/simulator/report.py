"""Summary statistics for a finished run."""

from __future__ import annotations

from typing import Iterable

from crypto_backtester.simulator.ledger import SimulationLedger
from crypto_backtester.simulator.models import BacktestResult, TradeRecord


def total_return_pct(final_value: float, initial_capital: float) -> float:
    if initial_capital == 0:
        return 0.0
    return (final_value - initial_capital) / initial_capital * 100.0


def win_rate_pct(trades: Iterable[TradeRecord]) -> float:
    sells = [trade for trade in trades if trade.type == "sell"]
    if not sells:
        return 0.0
    winners = sum(1 for trade in sells if trade.profit is not None and trade.profit > 0)
    return winners / len(sells) * 100.0


def summarize(ledger: SimulationLedger, last_close: float) -> BacktestResult:
    final_value = ledger.equity(last_close)
    return BacktestResult(
        initial_capital=ledger.initial_capital,
        final_capital=final_value,
        total_return_pct=total_return_pct(final_value, ledger.initial_capital),
        trade_count=len(ledger.trades),
        win_rate_pct=win_rate_pct(ledger.trades),
        trades=list(ledger.trades),
        equity_history=list(ledger.equity_history),
    )
