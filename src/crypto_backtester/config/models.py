"""Configuration models for reproducible runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from crypto_backtester.strategy.models import StrategySpec

WARMUP_STEPS = 20
MIN_ORDER_CASH = 5000.0
CASH_UTILIZATION = 0.99
MIN_CANDLES = 20
DEFAULT_INITIAL_CAPITAL = 1_000_000.0


@dataclass(frozen=True)
class EngineConfig:
    warmup_steps: int = WARMUP_STEPS
    min_order_cash: float = MIN_ORDER_CASH
    cash_utilization: float = CASH_UTILIZATION
    min_candles: int = MIN_CANDLES


@dataclass(frozen=True)
class MonitoringConfig:
    audit_log_path: str = "runtime/audit.log"
    logs_dir: str = "logs"
    log_level: str = "INFO"


@dataclass(frozen=True)
class BacktestConfig:
    name: str
    version: str
    strategy: StrategySpec
    initial_capital: float = DEFAULT_INITIAL_CAPITAL
    engine: EngineConfig = field(default_factory=EngineConfig)
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)
