"""Signal data models."""

import hashlib
from datetime import datetime
from decimal import Decimal
from enum import Enum
from pydantic import BaseModel, ConfigDict


class SignalType(str, Enum):
    """Signal side."""

    BUY = "BUY"
    SELL = "SELL"


def _generate_signal_id(
    rule: str,
    symbol: str,
    timeframe: str,
    emitted_at: datetime,
    signal_type: str,
) -> str:
    """Generate deterministic signal ID based on signal attributes.

    The same evaluation replayed over the same bars yields the same ID,
    so collaborators can deduplicate on it.
    """
    ts_str = emitted_at.strftime("%Y%m%d%H%M%S%f")
    key = f"{rule}:{symbol}:{timeframe}:{ts_str}:{signal_type}"
    return hashlib.sha256(key.encode()).hexdigest()[:32]


class Signal(BaseModel):
    """BUY/SELL signal emitted by the analyzer.

    Immutable once created; delivery state is tracked by collaborators.
    """

    model_config = ConfigDict(frozen=True)

    id: str = ""  # Set in model_post_init
    symbol: str
    timeframe: str
    type: SignalType
    price: Decimal
    rsi: Decimal
    macd: Decimal
    macd_signal: Decimal
    volume: Decimal
    emitted_at: datetime
    rule: str
    confirmations: int | None = None  # Set by confirmation scoring only
    simulated: bool = False  # Derived from synthetic bars

    def model_post_init(self, __context) -> None:
        """Generate deterministic ID after model initialization."""
        if not self.id:
            object.__setattr__(
                self,
                "id",
                _generate_signal_id(
                    self.rule,
                    self.symbol,
                    self.timeframe,
                    self.emitted_at,
                    self.type.value,
                ),
            )

    @property
    def is_buy(self) -> bool:
        return self.type == SignalType.BUY
