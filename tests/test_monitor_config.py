"""Tests for settings and monitor.yaml loading."""

import os
import textwrap
from pathlib import Path

import pytest
from pydantic import ValidationError

from signal_bot.config import Settings, get_settings
from signal_bot.monitor_config import (
    MonitorConfig,
    PairEntry,
    load_config_env,
    load_monitor_config,
)
from signal_engine.models import AnalyzerConfig


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


def _write_yaml(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "monitor.yaml"
    path.write_text(textwrap.dedent(content))
    return path


# ── Settings ──────────────────────────────────────────────────────────────


class TestSettings:
    def test_defaults_build_valid_config(self):
        config = _settings().analyzer_config()
        assert config == AnalyzerConfig()

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("RSI_LOWER", "30")
        monkeypatch.setenv("DECISION_RULE", "confirmation_scoring")

        settings = _settings()
        assert settings.rsi_lower == 30.0
        assert settings.decision_rule == "confirmation_scoring"

    def test_invalid_parameters_rejected(self):
        with pytest.raises(ValueError, match="rsi band"):
            _settings(rsi_lower=90).analyzer_config()

    def test_macd_depth_ratio(self, monkeypatch):
        monkeypatch.setenv("MACD_DEPTH_RATIO", "0.002")
        assert _settings().analyzer_config().macd_depth_ratio == 0.002

    def test_negative_macd_depth_ratio_rejected(self):
        with pytest.raises(ValidationError):
            _settings(macd_depth_ratio=-0.1).analyzer_config()


# ── MonitorConfig model ───────────────────────────────────────────────────


class TestMonitorConfig:
    def test_no_pairs_uses_settings(self):
        settings = _settings(symbols=["XLMUSDT", "BTCUSDT"], timeframe="15m")
        pairs = MonitorConfig().get_pairs(settings)

        assert [p.key for p in pairs] == ["XLMUSDT_15m", "BTCUSDT_15m"]
        assert all(p.config == settings.analyzer_config() for p in pairs)

    def test_pair_overrides_merge_onto_base(self):
        config = MonitorConfig(
            pairs=[PairEntry(symbol="BTCUSDT", timeframe="1h", rsi_lower=30, rsi_upper=70)]
        )
        (pair,) = config.get_pairs(_settings(macd_fast=6))

        assert pair.timeframe == "1h"
        assert pair.config.rsi_lower == 30
        assert pair.config.rsi_upper == 70
        assert pair.config.macd_fast == 6

    def test_pair_overrides_macd_depth_ratio(self):
        config = MonitorConfig(pairs=[PairEntry(symbol="XLMUSDT", macd_depth_ratio=0.005)])
        (pair,) = config.get_pairs(_settings())
        assert pair.config.macd_depth_ratio == 0.005

    def test_pair_inherits_timeframe(self):
        config = MonitorConfig(pairs=[PairEntry(symbol="ETHUSDT")])
        (pair,) = config.get_pairs(_settings(timeframe="30m"))
        assert pair.timeframe == "30m"

    def test_disabled_pairs_skipped(self):
        config = MonitorConfig(
            pairs=[
                PairEntry(symbol="XLMUSDT"),
                PairEntry(symbol="BTCUSDT", enabled=False),
            ]
        )
        assert [p.symbol for p in config.get_pairs(_settings())] == ["XLMUSDT"]

    def test_invalid_override_rejected(self):
        config = MonitorConfig(pairs=[PairEntry(symbol="XLMUSDT", macd_fast=30)])
        with pytest.raises(ValueError, match="macd_fast"):
            config.get_pairs(_settings())

    def test_unknown_rule_rejected(self):
        with pytest.raises(ValidationError, match="decision_rule"):
            MonitorConfig(decision_rule="magic")

    def test_duplicate_pairs_rejected(self):
        with pytest.raises(ValidationError, match="same symbol/timeframe"):
            MonitorConfig(
                pairs=[
                    PairEntry(symbol="XLMUSDT", timeframe="5m"),
                    PairEntry(symbol="XLMUSDT", timeframe="5m"),
                ]
            )

    def test_rule_resolution(self):
        settings = _settings(decision_rule="confirmation_scoring")
        assert MonitorConfig().resolve_rule(settings) == "confirmation_scoring"
        assert (
            MonitorConfig(decision_rule="crossover_strict").resolve_rule(settings)
            == "crossover_strict"
        )


# ── YAML loading ──────────────────────────────────────────────────────────


class TestLoadMonitorConfig:
    def test_missing_file_returns_defaults(self, tmp_path):
        config = load_monitor_config(tmp_path / "missing.yaml")
        assert config.pairs == []
        assert config.decision_rule is None

    def test_empty_file(self, tmp_path):
        path = _write_yaml(tmp_path, "")
        assert load_monitor_config(path) == MonitorConfig()

    def test_load_pairs(self, tmp_path):
        path = _write_yaml(
            tmp_path,
            """\
            decision_rule: confirmation_scoring
            pairs:
              - symbol: XLMUSDT
                timeframe: 5m
              - symbol: BTCUSDT
                timeframe: 15m
                alert_cooldown_minutes: 15
                min_confirmations: 3
            """,
        )
        config = load_monitor_config(path)

        assert config.decision_rule == "confirmation_scoring"
        pairs = config.get_pairs(_settings())
        assert [p.key for p in pairs] == ["XLMUSDT_5m", "BTCUSDT_15m"]
        assert pairs[1].config.alert_cooldown_minutes == 15
        assert pairs[1].config.min_confirmations == 3

    def test_invalid_yaml_rule(self, tmp_path):
        path = _write_yaml(tmp_path, "decision_rule: nope\n")
        with pytest.raises(ValidationError):
            load_monitor_config(path)

    def test_config_env_reaches_settings(self, tmp_path, monkeypatch):
        monkeypatch.setattr(os, "environ", dict(os.environ))
        os.environ.pop("TELEGRAM_TOKEN", None)
        monkeypatch.chdir(tmp_path)
        config_dir = tmp_path / "cfg"
        config_dir.mkdir()
        (config_dir / ".env").write_text("TELEGRAM_TOKEN=abc\n")

        # Settings cached before the .env is read must not stick
        assert get_settings().telegram_token == ""
        assert load_config_env(config_dir / "monitor.yaml") is True
        assert get_settings().telegram_token == "abc"
        get_settings.cache_clear()

    def test_config_env_does_not_override_environment(self, tmp_path, monkeypatch):
        monkeypatch.setattr(os, "environ", dict(os.environ))
        os.environ["TELEGRAM_TOKEN"] = "from-env"
        (tmp_path / ".env").write_text("TELEGRAM_TOKEN=abc\n")

        load_config_env(tmp_path / "monitor.yaml")
        assert os.environ["TELEGRAM_TOKEN"] == "from-env"
        get_settings.cache_clear()

    def test_missing_config_env(self, tmp_path):
        assert load_config_env(tmp_path / "monitor.yaml") is False
