"""Backtest simulation."""

from crypto_backtester.simulator.models import BacktestResult, Candle, EquityPoint, TradeRecord
from crypto_backtester.simulator.ledger import SimulationLedger
from crypto_backtester.simulator.report import summarize, total_return_pct, win_rate_pct
from crypto_backtester.simulator.engine import (
    BacktestEngine,
    BacktestJob,
    ensure_enough_candles,
    run_backtest,
    run_batch,
)

__all__ = [
    "BacktestEngine",
    "BacktestJob",
    "BacktestResult",
    "Candle",
    "EquityPoint",
    "SimulationLedger",
    "TradeRecord",
    "ensure_enough_candles",
    "run_backtest",
    "run_batch",
    "summarize",
    "total_return_pct",
    "win_rate_pct",
]
