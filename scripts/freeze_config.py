from __future__ import annotations

import argparse
from pathlib import Path

from crypto_backtester.config import compute_config_hash, freeze_config, load_config, verify_config_lock


def main() -> None:
    parser = argparse.ArgumentParser(description="Pin a backtest config with a hash lock file.")
    parser.add_argument("config")
    parser.add_argument("--lock", default=None)
    args = parser.parse_args()

    path = Path(args.config)
    try:
        config = load_config(path)
    except ValueError as exc:
        raise SystemExit(f"Refusing to freeze invalid config: {exc}") from exc

    lock_path = freeze_config(path, args.lock)
    status = "ok" if verify_config_lock(path, lock_path) else "mismatch"
    print(f"Frozen {config.name} v{config.version} ({compute_config_hash(path)[:12]}) -> {lock_path} ({status})")


if __name__ == "__main__":
    main()
