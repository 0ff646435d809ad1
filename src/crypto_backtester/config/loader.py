"""Load and freeze configuration files."""

from __future__ import annotations

import hashlib
import json
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import yaml

from crypto_backtester.config.models import (
    CASH_UTILIZATION,
    DEFAULT_INITIAL_CAPITAL,
    MIN_CANDLES,
    MIN_ORDER_CASH,
    WARMUP_STEPS,
    BacktestConfig,
    EngineConfig,
    MonitoringConfig,
)
from crypto_backtester.strategy.specs import serialize_strategy, strategy_from_config


def load_config(path: str | Path) -> BacktestConfig:
    path = Path(path)
    data = _load_yaml(path)

    strategy_data = _require(data, "strategy")
    if not isinstance(strategy_data, dict):
        raise ValueError("strategy must be a mapping")

    return BacktestConfig(
        name=str(_require(data, "name")),
        version=str(_require(data, "version")),
        strategy=strategy_from_config(strategy_data),
        initial_capital=float(data.get("initial_capital", DEFAULT_INITIAL_CAPITAL)),
        engine=_parse_engine(data.get("engine") or {}),
        monitoring=_parse_monitoring(data.get("monitoring") or {}),
    )


def compute_config_hash(path: str | Path) -> str:
    path = Path(path)
    content = path.read_bytes()
    return hashlib.sha256(content).hexdigest()


def freeze_config(path: str | Path, lock_path: Optional[str | Path] = None) -> Path:
    path = Path(path)
    config_hash = compute_config_hash(path)
    if lock_path is None:
        lock_path = path.with_suffix(path.suffix + ".lock.json")
    lock_path = Path(lock_path)

    payload = {
        "config_path": str(path),
        "config_hash": config_hash,
        "frozen_at_utc": datetime.now(timezone.utc).isoformat(),
    }
    lock_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return lock_path


def verify_config_lock(path: str | Path, lock_path: Optional[str | Path] = None) -> bool:
    path = Path(path)
    if lock_path is None:
        lock_path = path.with_suffix(path.suffix + ".lock.json")
    lock_path = Path(lock_path)
    if not lock_path.exists():
        return False
    payload = json.loads(lock_path.read_text(encoding="utf-8"))
    expected = payload.get("config_hash")
    return expected == compute_config_hash(path)


def _load_yaml(path: Path) -> dict[str, Any]:
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("Config must be a mapping")
    return data


def _require(data: dict[str, Any], key: str) -> Any:
    if key not in data:
        raise ValueError(f"Missing required config key: {key}")
    return data[key]


def _parse_engine(data: dict[str, Any]) -> EngineConfig:
    if not isinstance(data, dict):
        raise ValueError("engine must be a mapping")
    return EngineConfig(
        warmup_steps=int(data.get("warmup_steps", WARMUP_STEPS)),
        min_order_cash=float(data.get("min_order_cash", MIN_ORDER_CASH)),
        cash_utilization=float(data.get("cash_utilization", CASH_UTILIZATION)),
        min_candles=int(data.get("min_candles", MIN_CANDLES)),
    )


def _parse_monitoring(data: dict[str, Any]) -> MonitoringConfig:
    if not isinstance(data, dict):
        raise ValueError("monitoring must be a mapping")
    return MonitoringConfig(
        audit_log_path=str(data.get("audit_log_path", "runtime/audit.log")),
        logs_dir=str(data.get("logs_dir", "logs")),
        log_level=str(data.get("log_level", "INFO")),
    )


def serialize_config(config: BacktestConfig) -> dict[str, Any]:
    payload = asdict(config)
    payload["strategy"] = serialize_strategy(config.strategy)
    return payload
