"""Backtest engine: one linear sweep over an ascending candle sequence."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Optional, Sequence, cast

from crypto_backtester.config.models import DEFAULT_INITIAL_CAPITAL, EngineConfig
from crypto_backtester.simulator.ledger import SimulationLedger
from crypto_backtester.simulator.models import BacktestResult, Candle
from crypto_backtester.simulator.report import summarize
from crypto_backtester.strategy.evaluator import compute_indicators, evaluate
from crypto_backtester.strategy.models import SignalAction, StrategySpec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BacktestJob:
    strategy: StrategySpec
    initial_capital: float = DEFAULT_INITIAL_CAPITAL


def ensure_enough_candles(candles: Sequence[Candle], minimum: int) -> None:
    """Caller-side precondition; the engine itself never rejects short input."""
    if len(candles) < minimum:
        raise ValueError(f"Not enough data for backtesting: {len(candles)} candles, need {minimum}")


class BacktestEngine:
    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        self.config = config or EngineConfig()

    def run(
        self,
        strategy: StrategySpec,
        initial_capital: float,
        candles: Sequence[Candle],
    ) -> BacktestResult:
        ledger = SimulationLedger(
            initial_capital,
            min_order_cash=self.config.min_order_cash,
            cash_utilization=self.config.cash_utilization,
        )
        if not candles:
            logger.warning("Backtest called without candles; returning an empty result")
            return summarize(ledger, 0.0)

        series = compute_indicators(strategy, candles)
        for index, candle in enumerate(candles):
            prior_candle = candles[index - 1] if index > 0 else None
            signal = evaluate(
                strategy,
                index,
                candle.close,
                series,
                prior_candle,
                warmup_steps=self.config.warmup_steps,
            )
            if signal.action == SignalAction.BUY:
                ledger.buy(candle.close, candle.time, signal.reason)
            elif signal.action == SignalAction.SELL:
                ledger.sell(candle.close, candle.time, signal.reason)
            ledger.snapshot(candle.time, candle.close)

        result = summarize(ledger, candles[-1].close)
        logger.info(
            "Backtest %s: %d candles, %d trades, return %.2f%%",
            strategy.kind,
            len(candles),
            result.trade_count,
            result.total_return_pct,
        )
        return result


def run_backtest(
    strategy: StrategySpec,
    initial_capital: float,
    candles: Sequence[Candle],
    config: Optional[EngineConfig] = None,
) -> BacktestResult:
    return BacktestEngine(config).run(strategy, initial_capital, candles)


def run_batch(
    jobs: Sequence[BacktestJob],
    candles: Sequence[Candle],
    config: Optional[EngineConfig] = None,
    max_workers: int = 4,
) -> list[BacktestResult]:
    """Run independent backtests over the same candles; results follow job order."""
    if not jobs:
        return []
    engine = BacktestEngine(config)
    max_workers = min(max(1, int(max_workers)), len(jobs))

    ordered_results: list[Optional[BacktestResult]] = [None] * len(jobs)
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        future_map = {
            pool.submit(engine.run, job.strategy, job.initial_capital, candles): index
            for index, job in enumerate(jobs)
        }
        for future in as_completed(future_map):
            ordered_results[future_map[future]] = future.result()
    return cast(list[BacktestResult], ordered_results)
