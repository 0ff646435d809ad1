from __future__ import annotations

import argparse
import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from crypto_backtester.config import compute_config_hash, load_config
from crypto_backtester.monitoring import AuditLog, setup_logging
from crypto_backtester.simulator import BacktestEngine, ensure_enough_candles
from crypto_backtester.strategy import load_candles, prepare_candles, serialize_strategy

logger = logging.getLogger("run_backtest")


def main() -> None:
    parser = argparse.ArgumentParser(description="Run a strategy backtest over a candle file.")
    parser.add_argument("--config", required=True)
    parser.add_argument("--candles", required=True, help="CSV or JSON candle file")
    parser.add_argument("--output", required=True)
    parser.add_argument("--run-id", default=None)
    args = parser.parse_args()

    config_path = Path(args.config)
    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    try:
        config = load_config(config_path)
        setup_logging(config.monitoring.log_level, config.monitoring.logs_dir)
        candles = prepare_candles(load_candles(args.candles))
        ensure_enough_candles(candles, config.engine.min_candles)
    except ValueError as exc:
        raise SystemExit(str(exc)) from exc

    run_id = args.run_id or f"{config.name}-{datetime.now(timezone.utc):%Y%m%dT%H%M%SZ}"
    engine = BacktestEngine(config.engine)
    result = engine.run(config.strategy, config.initial_capital, candles)

    audit = AuditLog(config.monitoring.audit_log_path, run_id=run_id, config_hash=compute_config_hash(config_path))
    audit.log_backtest(config.strategy, len(candles), result)

    report = {
        "generated_at_utc": datetime.now(timezone.utc).isoformat(),
        "run_id": run_id,
        "config_path": str(config_path),
        "strategy": serialize_strategy(config.strategy),
        "result": result.to_payload(),
    }
    output_path.write_text(json.dumps(report, indent=2, default=str), encoding="utf-8")
    logger.info("Wrote %s", output_path)


if __name__ == "__main__":
    main()
