"""Bar sources feeding the signal monitor.

- ExchangeBarSource: recent bars from the Binance REST API
- SyntheticBarSource: seeded random walk for demos and tests
- FallbackBarSource: exchange first, synthetic on failure when enabled.
  The result always says whether the bars are simulated.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable, Protocol, runtime_checkable

import httpx
import numpy as np

from signal_bot.clients import BinanceRestClient
from signal_engine.models import Bar

logger = logging.getLogger(__name__)

# Bar interval in minutes for each timeframe
TIMEFRAME_TO_MINUTES = {
    "1m": 1,
    "3m": 3,
    "5m": 5,
    "15m": 15,
    "30m": 30,
    "1h": 60,
    "4h": 240,
    "1d": 1440,
}


def timeframe_delta(timeframe: str) -> timedelta:
    """Bar duration for *timeframe*.

    Raises:
        ValueError: For an unsupported timeframe.
    """
    minutes = TIMEFRAME_TO_MINUTES.get(timeframe)
    if minutes is None:
        raise ValueError(
            f"Unsupported timeframe '{timeframe}'. "
            f"Supported: {', '.join(TIMEFRAME_TO_MINUTES)}"
        )
    return timedelta(minutes=minutes)


@runtime_checkable
class BarSource(Protocol):
    """Anything that can return recent bars, oldest first."""

    async def fetch_bars(self, symbol: str, timeframe: str, limit: int) -> list[Bar]:
        ...


@dataclass
class BarBatch:
    """Bars returned to the monitor, tagged with their origin."""

    bars: list[Bar]
    simulated: bool = False


class ExchangeBarSource:
    """Recent bars from the exchange REST API."""

    def __init__(self, client: BinanceRestClient):
        self.client = client

    async def fetch_bars(self, symbol: str, timeframe: str, limit: int) -> list[Bar]:
        return await self.client.get_klines(symbol, timeframe, limit=limit)


class SyntheticBarSource:
    """Synthetic bars: small sine trend plus noise around a base price.

    Each call appends one new bar per symbol/timeframe, so consecutive
    ticks see an evolving series.
    """

    def __init__(
        self,
        base_price: float = 0.11583,
        seed: int | None = None,
        history_size: int = 100,
        clock: Callable[[], datetime] | None = None,
    ):
        self.base_price = base_price
        self.history_size = history_size
        self._rng = np.random.default_rng(seed)
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._history: dict[str, list[Bar]] = {}

    def _make_bar(
        self,
        symbol: str,
        timeframe: str,
        timestamp: datetime,
        open_price: float,
        close_price: float,
    ) -> Bar:
        wick = abs(self._rng.normal(0, 0.0005))
        high = max(open_price, close_price) * (1 + wick)
        low = min(open_price, close_price) * (1 - wick)
        volume = self._rng.uniform(50_000, 150_000)
        return Bar(
            symbol=symbol,
            timeframe=timeframe,
            timestamp=timestamp,
            open=Decimal(f"{open_price:.8f}"),
            high=Decimal(f"{high:.8f}"),
            low=Decimal(f"{low:.8f}"),
            close=Decimal(f"{close_price:.8f}"),
            volume=Decimal(f"{volume:.2f}"),
        )

    def _seed_history(self, symbol: str, timeframe: str) -> list[Bar]:
        step = timeframe_delta(timeframe)
        start = self._clock() - step * self.history_size
        bars = []
        prev_close = self.base_price
        for i in range(self.history_size):
            trend = np.sin(i * 0.1) * 0.0005
            noise = (self._rng.random() - 0.5) * 0.002
            close = self.base_price * (1 + trend + noise)
            bars.append(self._make_bar(symbol, timeframe, start + step * i, prev_close, close))
            prev_close = close
        return bars

    async def fetch_bars(self, symbol: str, timeframe: str, limit: int) -> list[Bar]:
        key = f"{symbol}_{timeframe}"
        history = self._history.get(key)
        if history is None:
            history = self._seed_history(symbol, timeframe)
            self._history[key] = history
        else:
            last = history[-1]
            prev_close = float(last.close)
            close = prev_close * (1 + (self._rng.random() - 0.5) * 0.001)
            history.append(
                self._make_bar(
                    symbol,
                    timeframe,
                    last.timestamp + timeframe_delta(timeframe),
                    prev_close,
                    close,
                )
            )
            if len(history) > self.history_size:
                del history[: len(history) - self.history_size]

        return list(history[-limit:])


class FallbackBarSource:
    """Primary source with an explicit, caller-visible synthetic fallback.

    With ``enabled=False`` a primary failure propagates unchanged.
    Without a primary the source runs in simulation mode and every
    batch comes from the fallback.
    """

    def __init__(
        self,
        primary: BarSource | None,
        fallback: BarSource | None = None,
        enabled: bool = False,
    ):
        self.primary = primary
        self.fallback = fallback or SyntheticBarSource()
        self.enabled = enabled

    @property
    def simulation_mode(self) -> bool:
        return self.primary is None

    async def fetch(self, symbol: str, timeframe: str, limit: int) -> BarBatch:
        if self.primary is None:
            bars = await self.fallback.fetch_bars(symbol, timeframe, limit)
            return BarBatch(bars=bars, simulated=True)

        try:
            bars = await self.primary.fetch_bars(symbol, timeframe, limit)
            return BarBatch(bars=bars, simulated=False)
        except (httpx.HTTPError, ValueError) as e:
            if not self.enabled:
                raise
            logger.warning(
                f"Bar fetch failed for {symbol} {timeframe}: {e}. "
                "Using SIMULATED bars."
            )

        bars = await self.fallback.fetch_bars(symbol, timeframe, limit)
        return BarBatch(bars=bars, simulated=True)
