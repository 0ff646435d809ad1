"""Append-only audit log of completed backtest runs."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from crypto_backtester.simulator.models import BacktestResult
from crypto_backtester.strategy.models import StrategySpec
from crypto_backtester.strategy.specs import serialize_strategy


@dataclass
class AuditLog:
    path: Path
    run_id: str | None = None
    config_hash: str | None = None

    def __init__(self, path: str | Path, run_id: str | None = None, config_hash: str | None = None) -> None:
        self.path = Path(path)
        self.run_id = run_id
        self.config_hash = config_hash
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def log(self, event: str, payload: dict[str, Any]) -> None:
        record = {
            "ts": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "run_id": self.run_id,
            "config_hash": self.config_hash,
            "event": event,
            "payload": payload,
        }
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record, default=str))
            handle.write("\n")

    def log_backtest(self, strategy: StrategySpec, candle_count: int, result: BacktestResult) -> None:
        self.log(
            "backtest_completed",
            {
                "strategy": serialize_strategy(strategy),
                "candles": candle_count,
                "initial_capital": result.initial_capital,
                "final_capital": result.final_capital,
                "total_return_pct": result.total_return_pct,
                "trade_count": result.trade_count,
                "win_rate_pct": result.win_rate_pct,
            },
        )
