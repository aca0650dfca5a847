"""Monitor configuration loaded from monitor.yaml.

Supports:
- A list of monitored pairs, each with optional indicator overrides
- A deployment-wide decision rule override
- Backward compatible: no YAML file = pairs and parameters from Settings
"""

import logging
from dataclasses import dataclass
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, model_validator

from signal_bot.config import Settings, get_settings
from signal_engine.analyzer import list_rules
from signal_engine.models import AnalyzerConfig

logger = logging.getLogger(__name__)


class PairEntry(BaseModel):
    """A single monitored pair in the YAML config."""

    symbol: str
    timeframe: str | None = None  # None = Settings.timeframe
    enabled: bool = True

    # Indicator overrides (None = inherit)
    macd_fast: int | None = None
    macd_slow: int | None = None
    macd_signal_period: int | None = None
    rsi_period: int | None = None
    rsi_lower: float | None = None
    rsi_upper: float | None = None
    volume_period: int | None = None
    alert_cooldown_minutes: int | None = None
    min_confirmations: int | None = None
    macd_depth_ratio: float | None = None

    def overrides(self) -> dict:
        return {
            k: v
            for k, v in self.model_dump(
                exclude={"symbol", "timeframe", "enabled"}
            ).items()
            if v is not None
        }

    def to_analyzer_config(self, base: AnalyzerConfig) -> AnalyzerConfig:
        """Merge overrides onto *base*; the result is re-validated."""
        return AnalyzerConfig(**{**base.model_dump(), **self.overrides()})


@dataclass(frozen=True)
class PairConfig:
    """Resolved configuration of one monitored symbol/timeframe."""

    symbol: str
    timeframe: str
    config: AnalyzerConfig

    @property
    def key(self) -> str:
        return f"{self.symbol}_{self.timeframe}"


class MonitorConfig(BaseModel):
    """Top-level monitor.yaml configuration."""

    decision_rule: str | None = None  # None = Settings.decision_rule
    pairs: list[PairEntry] = []

    @model_validator(mode="after")
    def _validate(self):
        if self.decision_rule is not None and self.decision_rule not in list_rules():
            raise ValueError(
                f"decision_rule must be one of {list_rules()}, got '{self.decision_rule}'"
            )
        keys = [(p.symbol, p.timeframe) for p in self.pairs]
        if len(keys) != len(set(keys)):
            raise ValueError("pairs must not list the same symbol/timeframe twice")
        return self

    def resolve_rule(self, settings: Settings) -> str:
        return self.decision_rule or settings.decision_rule

    def get_pairs(self, settings: Settings) -> list[PairConfig]:
        """Resolve enabled pairs against Settings defaults."""
        base = settings.analyzer_config()
        if not self.pairs:
            return [
                PairConfig(symbol=s, timeframe=settings.timeframe, config=base)
                for s in settings.symbols
            ]
        return [
            PairConfig(
                symbol=p.symbol,
                timeframe=p.timeframe or settings.timeframe,
                config=p.to_analyzer_config(base),
            )
            for p in self.pairs
            if p.enabled
        ]


_DEFAULT_PATH = Path(__file__).parent.parent / "monitor.yaml"


def load_config_env(path: Path | None = None) -> bool:
    """Export the .env next to monitor.yaml (e.g. Telegram credentials).

    Values already set in the environment win. The cached Settings are
    dropped so the next get_settings() sees the new variables.

    Returns:
        True if a .env file was found and loaded
    """
    env_path = (path or _DEFAULT_PATH).parent / ".env"
    loaded = load_dotenv(env_path, override=False)
    get_settings.cache_clear()
    if loaded:
        logger.info("Loaded environment from %s", env_path)
    return loaded


def load_monitor_config(path: Path | None = None) -> MonitorConfig:
    """Load monitor config from YAML file.

    Falls back to defaults (pairs from Settings) if the file doesn't exist.
    Call load_config_env() first when Settings should see the .env
    next to the file.
    """
    config_path = path or _DEFAULT_PATH

    if not config_path.exists():
        logger.info("No monitor.yaml found at %s, using settings defaults", config_path)
        return MonitorConfig()

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    config = MonitorConfig(**raw)
    logger.info(
        "Loaded monitor config: rule=%s, %d pairs",
        config.decision_rule or "(settings)",
        len(config.pairs),
    )
    return config
