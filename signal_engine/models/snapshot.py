"""Per-bar indicator snapshot."""

from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, ConfigDict


class IndicatorSnapshot(BaseModel):
    """Indicator values aligned with a single bar.

    A field is ``None`` while the indicator is still warming up.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    close: Decimal
    volume: Decimal
    volume_sma: Decimal | None = None
    ema_fast: Decimal | None = None
    ema_slow: Decimal | None = None
    rsi: Decimal | None = None
    macd: Decimal | None = None
    macd_signal: Decimal | None = None
    macd_histogram: Decimal | None = None

    @property
    def has_core_values(self) -> bool:
        """RSI, MACD and MACD signal are all defined."""
        return (
            self.rsi is not None
            and self.macd is not None
            and self.macd_signal is not None
        )
