"""OHLCV bar data models."""

from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field


class Bar(BaseModel):
    """OHLCV bar for one period of a symbol/timeframe."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    timeframe: str
    timestamp: datetime
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal
    volume: Decimal

    @property
    def is_bullish(self) -> bool:
        """Check if this is a bullish (green) bar."""
        return self.close > self.open

    @property
    def is_bearish(self) -> bool:
        """Check if this is a bearish (red) bar."""
        return self.close < self.open


class BarBuffer(BaseModel):
    """Rolling window of recent bars for indicator calculation."""

    symbol: str
    timeframe: str
    bars: list[Bar] = Field(default_factory=list)
    max_size: int = 500

    def add(self, bar: Bar) -> None:
        """Add a bar to the buffer, maintaining order and max size."""
        if self.bars and bar.timestamp <= self.bars[-1].timestamp:
            # Still-forming bar: replace the last one
            if bar.timestamp == self.bars[-1].timestamp:
                self.bars[-1] = bar
            return

        self.bars.append(bar)
        if len(self.bars) > self.max_size:
            self.bars = self.bars[-self.max_size :]

    def extend(self, bars: list[Bar]) -> None:
        """Add several bars in timestamp order."""
        for bar in sorted(bars, key=lambda b: b.timestamp):
            self.add(bar)

    def get_closes(self) -> list[Decimal]:
        """Get list of close prices."""
        return [b.close for b in self.bars]

    def get_volumes(self) -> list[Decimal]:
        """Get list of volumes."""
        return [b.volume for b in self.bars]

    def __len__(self) -> int:
        return len(self.bars)
