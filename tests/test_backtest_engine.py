import math
from datetime import datetime, timedelta, timezone

import pytest

from crypto_backtester.config.models import EngineConfig
from crypto_backtester.simulator import (
    BacktestEngine,
    BacktestJob,
    Candle,
    ensure_enough_candles,
    run_backtest,
    run_batch,
)
from crypto_backtester.strategy import (
    BollingerBreakout,
    MovingAverageCrossover,
    RSIThreshold,
    VolatilityBreakout,
)


def _candles(prices):
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return [
        Candle(
            time=start + timedelta(days=day),
            open=price,
            high=price,
            low=price,
            close=price,
            volume=1.0,
        )
        for day, price in enumerate(prices)
    ]


def _crossover_prices():
    # Golden cross at index 21 (110), dead cross at index 40 (130).
    return [100.0] * 21 + [110.0] + [150.0] * 17 + [140.0, 130.0, 120.0, 110.0, 100.0, 90.0]


def test_rising_prices_never_trigger_rsi_buy():
    candles = _candles([100.0 + 2.0 * day for day in range(25)])
    result = run_backtest(RSIThreshold(period=14, buy_threshold=30, sell_threshold=70), 1_000_000.0, candles)

    assert result.trade_count == 0
    assert result.final_capital == 1_000_000.0
    assert result.total_return_pct == 0.0
    assert len(result.equity_history) == 25


def test_moving_average_round_trip():
    candles = _candles(_crossover_prices())
    assert len(candles) == 45

    result = run_backtest(MovingAverageCrossover(short_period=5, long_period=20), 1_000_000.0, candles)

    assert result.trade_count == 2
    buy, sell = result.trades
    assert buy.type == "buy"
    assert buy.timestamp == candles[21].time
    assert buy.price == 110.0
    assert buy.amount == pytest.approx(9000.0)
    assert sell.type == "sell"
    assert sell.timestamp == candles[40].time
    assert sell.price == 130.0
    assert sell.amount * sell.price == pytest.approx(1_170_000.0)
    assert sell.profit == pytest.approx(180_000.0)
    assert result.win_rate_pct == 100.0
    assert result.final_capital == pytest.approx(1_180_000.0)
    assert result.total_return_pct == pytest.approx(18.0)


def test_bollinger_single_spike_buys_once():
    prices = [100.0] * 30 + [80.0] + [100.0] * 14
    candles = _candles(prices)
    result = run_backtest(BollingerBreakout(period=20, multiplier=2.0), 1_000_000.0, candles)

    assert result.trade_count == 1
    assert result.trades[0].type == "buy"
    assert result.trades[0].timestamp == candles[30].time
    assert result.final_capital == pytest.approx(10_000.0 + 12_375.0 * 100.0)


def test_bollinger_sustained_breakout_buys_until_cash_runs_out():
    candles = _candles([100.0] * 30 + [80.0] * 5)
    result = run_backtest(BollingerBreakout(period=20, multiplier=2.0), 1_000_000.0, candles)

    assert [trade.timestamp for trade in result.trades] == [candles[30].time, candles[31].time]
    assert all(trade.type == "buy" for trade in result.trades)


def test_no_signal_run_keeps_capital():
    candles = _candles([100.0] * 40)
    for strategy in (
        MovingAverageCrossover(5, 20),
        RSIThreshold(14, 30, 70),
        BollingerBreakout(20, 2.0),
        VolatilityBreakout(0.5),
    ):
        result = run_backtest(strategy, 500_000.0, candles)
        assert result.trade_count == 0
        assert result.final_capital == 500_000.0
        assert result.total_return_pct == 0.0
        assert result.win_rate_pct == 0.0
        assert len(result.equity_history) == len(candles)
        assert all(point.value == 500_000.0 for point in result.equity_history)


def test_volatility_breakout_holds_position_to_the_end():
    prices = [100.0] * 25 + [120.0, 90.0, 80.0]
    candles = _candles(prices)
    result = run_backtest(VolatilityBreakout(multiplier=0.5), 1_000_000.0, candles)

    assert [trade.type for trade in result.trades] == ["buy"]
    assert result.trades[0].timestamp == candles[25].time
    assert result.win_rate_pct == 0.0
    assert result.final_capital < 1_000_000.0


def test_short_input_is_not_an_error():
    candles = _candles([100.0, 90.0, 80.0])
    result = run_backtest(RSIThreshold(14, 30, 70), 1_000.0, candles)
    assert result.trade_count == 0
    assert len(result.equity_history) == 3


def test_empty_candles_degrade_to_empty_result():
    result = run_backtest(RSIThreshold(14, 30, 70), 1_000.0, [])
    assert result.final_capital == 1_000.0
    assert result.equity_history == []
    assert result.trade_count == 0


def test_win_rate_is_finite():
    prices = [100.0 - step for step in range(25)] + [100.0 + 3.0 * step for step in range(15)]
    result = run_backtest(RSIThreshold(5, 30, 70), 1_000_000.0, _candles(prices))
    assert math.isfinite(result.win_rate_pct)
    assert 0.0 <= result.win_rate_pct <= 100.0


def test_engine_config_overrides_warmup():
    prices = [100.0] * 5 + [120.0] + [100.0] * 5
    candles = _candles(prices)
    strategy = VolatilityBreakout(multiplier=0.5)

    assert BacktestEngine().run(strategy, 1_000_000.0, candles).trade_count == 0
    eager = BacktestEngine(EngineConfig(warmup_steps=1)).run(strategy, 1_000_000.0, candles)
    assert eager.trade_count == 1


def test_ensure_enough_candles():
    ensure_enough_candles(_candles([1.0] * 20), 20)
    with pytest.raises(ValueError, match="Not enough data"):
        ensure_enough_candles(_candles([1.0] * 19), 20)


def test_run_batch_matches_sequential_runs():
    candles = _candles(_crossover_prices())
    jobs = [
        BacktestJob(MovingAverageCrossover(5, 20), 1_000_000.0),
        BacktestJob(RSIThreshold(14, 30, 70), 2_000_000.0),
        BacktestJob(BollingerBreakout(20, 2.0), 1_000_000.0),
        BacktestJob(VolatilityBreakout(0.5), 1_000_000.0),
    ]
    results = run_batch(jobs, candles, max_workers=3)

    assert len(results) == len(jobs)
    for job, result in zip(jobs, results):
        expected = run_backtest(job.strategy, job.initial_capital, candles)
        assert result == expected
    assert run_batch([], candles) == []


def test_result_payload_shape():
    candles = _candles(_crossover_prices())
    payload = run_backtest(MovingAverageCrossover(5, 20), 1_000_000.0, candles).to_payload()

    assert set(payload) == {
        "initialCapital",
        "finalCapital",
        "totalReturn",
        "tradeCount",
        "winRate",
        "trades",
        "history",
    }
    assert "profit" not in payload["trades"][0]
    assert payload["trades"][1]["profit"] == pytest.approx(180_000.0)
    assert payload["history"][0] == {"time": candles[0].time.isoformat(), "value": 1_000_000.0}


def test_zero_close_does_not_abort_run():
    candles = _candles([10.0] * 25 + [0.0])
    result = run_backtest(BollingerBreakout(20, 2.0), 1_000_000.0, candles)

    assert result.trade_count == 0
    assert result.final_capital == 1_000_000.0
    assert len(result.equity_history) == len(candles)
