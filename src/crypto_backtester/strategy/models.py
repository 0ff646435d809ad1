"""Strategy configuration variants and evaluation signals."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Union


@dataclass(frozen=True)
class MovingAverageCrossover:
    kind: ClassVar[str] = "ma"

    short_period: int
    long_period: int


@dataclass(frozen=True)
class RSIThreshold:
    kind: ClassVar[str] = "rsi"

    period: int
    buy_threshold: float
    sell_threshold: float


@dataclass(frozen=True)
class BollingerBreakout:
    kind: ClassVar[str] = "bband"

    period: int
    multiplier: float


@dataclass(frozen=True)
class VolatilityBreakout:
    """Buy-only: there is no exit rule for positions opened by this strategy."""

    kind: ClassVar[str] = "volatility"

    multiplier: float


StrategySpec = Union[MovingAverageCrossover, RSIThreshold, BollingerBreakout, VolatilityBreakout]


class SignalAction(str, Enum):
    BUY = "buy"
    SELL = "sell"
    HOLD = "hold"


@dataclass(frozen=True)
class Signal:
    action: SignalAction
    reason: str = ""

    @property
    def is_hold(self) -> bool:
        return self.action == SignalAction.HOLD

    @staticmethod
    def buy(reason: str) -> "Signal":
        return Signal(SignalAction.BUY, reason)

    @staticmethod
    def sell(reason: str) -> "Signal":
        return Signal(SignalAction.SELL, reason)


HOLD = Signal(SignalAction.HOLD)
