from datetime import datetime, timedelta, timezone

from crypto_backtester.simulator import BacktestJob, Candle, run_batch
from crypto_backtester.strategy import (
    BollingerBreakout,
    MovingAverageCrossover,
    RSIThreshold,
    VolatilityBreakout,
    market_snapshot,
)

start = datetime(2024, 1, 1, tzinfo=timezone.utc)
closes = [100, 102, 99, 97, 101, 104, 108, 107, 111, 115, 112, 109, 104, 100, 96, 94, 97, 101, 106, 110,
          114, 118, 116, 113, 108, 103, 99, 95, 92, 96, 100, 105, 111, 117, 121, 119, 114, 109, 104, 98]
candles = [
    Candle(
        time=start + timedelta(days=day),
        open=price - 1,
        high=price + 2,
        low=price - 2,
        close=price,
        volume=1000.0,
    )
    for day, price in enumerate(closes)
]

jobs = [
    BacktestJob(MovingAverageCrossover(short_period=5, long_period=20)),
    BacktestJob(RSIThreshold(period=14, buy_threshold=30, sell_threshold=70)),
    BacktestJob(BollingerBreakout(period=20, multiplier=2.0)),
    BacktestJob(VolatilityBreakout(multiplier=0.5)),
]

for job, result in zip(jobs, run_batch(jobs, candles)):
    print(
        f"{job.strategy.kind:>10}: trades={result.trade_count} "
        f"return={result.total_return_pct:.2f}% win_rate={result.win_rate_pct:.1f}%"
    )

snapshot = market_snapshot(candles)
print("Latest:", snapshot.price, "RSI", snapshot.rsi, "ATR", snapshot.atr)
