"""Monitoring exports."""

from crypto_backtester.monitoring.audit import AuditLog
from crypto_backtester.monitoring.logging_setup import setup_logging, teardown_logging

__all__ = [
    "AuditLog",
    "setup_logging",
    "teardown_logging",
]
