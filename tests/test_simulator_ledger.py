from datetime import datetime, timedelta, timezone

import pytest

from crypto_backtester.config.models import CASH_UTILIZATION, MIN_ORDER_CASH
from crypto_backtester.simulator import SimulationLedger, TradeRecord, summarize, win_rate_pct

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def test_default_constants():
    assert MIN_ORDER_CASH == 5000.0
    assert CASH_UTILIZATION == 0.99


def test_buy_requires_cash_above_minimum():
    ledger = SimulationLedger(5000.0)
    assert ledger.buy(100.0, T0, "test") is None
    assert ledger.trades == []

    ledger = SimulationLedger(5000.01)
    assert ledger.buy(100.0, T0, "test") is not None


def test_buy_keeps_one_percent_reserve():
    ledger = SimulationLedger(10000.0)
    record = ledger.buy(100.0, T0, "Golden Cross")
    assert record.type == "buy"
    assert record.amount == pytest.approx(99.0)
    assert record.profit is None
    assert ledger.cash == pytest.approx(100.0)
    assert ledger.position == pytest.approx(99.0)


def test_sell_closes_whole_position_against_last_buy():
    ledger = SimulationLedger(1_000_000.0)
    ledger.buy(100.0, T0, "first")
    ledger.buy(50.0, T0 + timedelta(days=1), "second")
    assert ledger.position == pytest.approx(9900.0 + 198.0)

    record = ledger.sell(80.0, T0 + timedelta(days=2), "exit")
    # Earlier buy at 100 is ignored: profit is positive despite a blended loss.
    assert record.profit == pytest.approx((80.0 - 50.0) * 10098.0)
    assert record.amount == pytest.approx(10098.0)
    assert ledger.position == 0.0
    assert ledger.cash == pytest.approx(100.0 + 80.0 * 10098.0)


def test_sell_without_position_is_ignored():
    ledger = SimulationLedger(1_000_000.0)
    assert ledger.sell(100.0, T0, "exit") is None
    assert ledger.trades == []


def test_second_buy_skipped_once_cash_is_spent():
    ledger = SimulationLedger(100_000.0)
    ledger.buy(10.0, T0, "a")
    assert ledger.cash == pytest.approx(1000.0)
    assert ledger.buy(10.0, T0, "b") is None
    assert len(ledger.trades) == 1


def test_constants_can_be_overridden():
    ledger = SimulationLedger(1000.0, min_order_cash=0.0, cash_utilization=1.0)
    ledger.buy(10.0, T0, "all in")
    assert ledger.cash == pytest.approx(0.0)
    assert ledger.position == pytest.approx(100.0)


def test_snapshot_marks_position_to_price():
    ledger = SimulationLedger(10000.0)
    ledger.buy(100.0, T0, "entry")
    point = ledger.snapshot(T0, 110.0)
    assert point.value == pytest.approx(100.0 + 99.0 * 110.0)
    assert ledger.equity_history == [point]


def test_win_rate_zero_without_sells():
    trades = [TradeRecord(type="buy", price=1.0, amount=1.0, timestamp=T0, reason="x")]
    assert win_rate_pct(trades) == 0.0
    assert win_rate_pct([]) == 0.0


def test_win_rate_counts_profitable_sells():
    trades = [
        TradeRecord(type="sell", price=1.0, amount=1.0, timestamp=T0, reason="x", profit=5.0),
        TradeRecord(type="sell", price=1.0, amount=1.0, timestamp=T0, reason="x", profit=0.0),
        TradeRecord(type="sell", price=1.0, amount=1.0, timestamp=T0, reason="x", profit=-2.0),
        TradeRecord(type="sell", price=1.0, amount=1.0, timestamp=T0, reason="x", profit=1.0),
    ]
    assert win_rate_pct(trades) == 50.0


def test_summarize_uses_last_close():
    ledger = SimulationLedger(10000.0)
    ledger.buy(100.0, T0, "entry")
    result = summarize(ledger, 120.0)
    assert result.final_capital == pytest.approx(100.0 + 99.0 * 120.0)
    assert result.total_return_pct == pytest.approx((100.0 + 99.0 * 120.0 - 10000.0) / 10000.0 * 100.0)
    assert result.trade_count == 1
    assert result.win_rate_pct == 0.0


def test_buy_at_zero_price_is_skipped():
    ledger = SimulationLedger(10000.0)
    assert ledger.buy(0.0, T0, "BB Lower Breakout") is None
    assert ledger.trades == []
    assert ledger.cash == 10000.0
    assert ledger.position == 0.0


def test_zero_capital_return_is_zero():
    result = summarize(SimulationLedger(0.0), 100.0)
    assert result.total_return_pct == 0.0
    assert result.trade_count == 0
