"""Analyzer configuration model."""

from __future__ import annotations

from datetime import timedelta

from pydantic import BaseModel, ConfigDict, Field, model_validator


class AnalyzerConfig(BaseModel):
    """Indicator and alerting parameters for one symbol/timeframe.

    Defaults match the production configuration table (MACD 8/17/9,
    RSI 14 with a 20/80 band, 20-bar volume average, 5 minute cooldown).
    Invalid combinations are rejected here, before the analyzer ever
    sees them.
    """

    model_config = ConfigDict(frozen=True)

    # Indicator periods
    macd_fast: int = Field(default=8, gt=0)
    macd_slow: int = Field(default=17, gt=0)
    macd_signal_period: int = Field(default=9, gt=0)
    rsi_period: int = Field(default=14, gt=0)
    volume_period: int = Field(default=20, gt=0)

    # RSI band
    rsi_lower: float = 20.0
    rsi_upper: float = 80.0

    # Minimum minutes between two emitted signals
    alert_cooldown_minutes: int = Field(default=5, ge=0)

    # Confirmation scoring only
    min_confirmations: int = Field(default=2, ge=1, le=3)
    macd_depth_ratio: float = Field(default=0.001, ge=0)

    @model_validator(mode="after")
    def _validate(self):
        if not 0 <= self.rsi_lower < self.rsi_upper <= 100:
            raise ValueError(
                f"rsi band must satisfy 0 <= rsi_lower < rsi_upper <= 100, "
                f"got {self.rsi_lower}/{self.rsi_upper}"
            )
        if self.macd_fast >= self.macd_slow:
            raise ValueError(
                f"macd_fast must be smaller than macd_slow, "
                f"got {self.macd_fast}/{self.macd_slow}"
            )
        return self

    @property
    def cooldown(self) -> timedelta:
        """Alert cooldown as a timedelta."""
        return timedelta(minutes=self.alert_cooldown_minutes)

    @property
    def min_history(self) -> int:
        """Bars needed before the latest snapshot is worth evaluating."""
        return max(self.macd_slow, self.rsi_period) + 1
