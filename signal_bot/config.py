"""Application configuration."""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict

from signal_engine.models import AnalyzerConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Binance API
    binance_base_url: str = "https://api.binance.com"

    # Monitored pairs
    symbols: list[str] = ["XLMUSDT"]
    timeframe: str = "5m"
    poll_interval_seconds: float = 60.0
    bar_limit: int = 100

    # Analyzer deployment choices
    decision_rule: str = "crossover_strict"
    startup_guard_seconds: int = 120
    reset_cooldown_on_restart: bool = False

    # Substitute synthetic bars when the exchange fetch fails.
    # Signals derived from them are flagged as simulated.
    simulation_fallback: bool = False

    # Indicator parameters
    macd_fast: int = 8
    macd_slow: int = 17
    macd_signal_period: int = 9
    rsi_period: int = 14
    rsi_lower: float = 20.0
    rsi_upper: float = 80.0
    volume_period: int = 20
    alert_cooldown_minutes: int = 5
    min_confirmations: int = 2
    macd_depth_ratio: float = 0.001

    # Telegram
    telegram_enabled: bool = False
    telegram_token: str = ""
    telegram_chat_id: str = ""

    log_level: str = "INFO"

    def analyzer_config(self) -> AnalyzerConfig:
        """Build the validated analyzer configuration."""
        return AnalyzerConfig(
            macd_fast=self.macd_fast,
            macd_slow=self.macd_slow,
            macd_signal_period=self.macd_signal_period,
            rsi_period=self.rsi_period,
            rsi_lower=self.rsi_lower,
            rsi_upper=self.rsi_upper,
            volume_period=self.volume_period,
            alert_cooldown_minutes=self.alert_cooldown_minutes,
            min_confirmations=self.min_confirmations,
            macd_depth_ratio=self.macd_depth_ratio,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
