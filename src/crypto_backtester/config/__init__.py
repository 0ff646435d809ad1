"""Config loading and freezing."""

from crypto_backtester.config.models import (
    BacktestConfig,
    EngineConfig,
    MonitoringConfig,
)
from crypto_backtester.config.loader import (
    compute_config_hash,
    freeze_config,
    load_config,
    serialize_config,
    verify_config_lock,
)

__all__ = [
    "BacktestConfig",
    "EngineConfig",
    "MonitoringConfig",
    "compute_config_hash",
    "freeze_config",
    "load_config",
    "serialize_config",
    "verify_config_lock",
]
