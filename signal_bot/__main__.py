"""CLI entry point for the signal monitor.

Usage:
    python -m signal_bot
    python -m signal_bot --symbols XLMUSDT,BTCUSDT --timeframe 15m
    python -m signal_bot --once
    python -m signal_bot --simulate --interval 5
"""

import argparse
import asyncio
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path

import httpx

from signal_bot.clients import BinanceRestClient, TelegramClient
from signal_bot.config import Settings, get_settings
from signal_bot.monitor_config import load_config_env, load_monitor_config
from signal_bot.services import (
    ExchangeBarSource,
    FallbackBarSource,
    SignalMonitor,
    TelegramNotifier,
    timeframe_delta,
)
from signal_engine.analyzer import SignalAnalyzer
from signal_engine.models import Signal

logger = logging.getLogger("signal_bot")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Monitor MACD/RSI signals for crypto pairs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m signal_bot --symbols XLMUSDT --timeframe 5m
  python -m signal_bot --once
  python -m signal_bot --simulate --interval 5
        """,
    )
    parser.add_argument(
        "--symbols",
        type=str,
        default=None,
        help="Comma-separated symbols (default: from settings / monitor.yaml)",
    )
    parser.add_argument(
        "--timeframe",
        type=str,
        default=None,
        help="Bar timeframe, e.g. 5m (default: from settings)",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Seconds between ticks (default: from settings)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to monitor.yaml",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Analyze the latest bars once and exit (ignores cooldown/guard)",
    )
    parser.add_argument(
        "--simulate",
        action="store_true",
        help="Use synthetic bars only (signals are flagged as simulated)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Logging level (default: from settings)",
    )
    return parser.parse_args(argv)


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Return settings updated with command line overrides."""
    updates: dict = {}
    if args.symbols:
        updates["symbols"] = [s.strip().upper() for s in args.symbols.split(",") if s.strip()]
    if args.timeframe:
        timeframe_delta(args.timeframe)  # validate
        updates["timeframe"] = args.timeframe
    if args.interval is not None:
        updates["poll_interval_seconds"] = args.interval
    if args.log_level:
        updates["log_level"] = args.log_level.upper()
    return settings.model_copy(update=updates)


def load_settings(args: argparse.Namespace) -> Settings:
    """Settings from the environment, the .env next to monitor.yaml and args."""
    load_config_env(args.config)
    return apply_overrides(get_settings(), args)


async def check_connectivity(
    rest_client: BinanceRestClient | None,
    telegram: TelegramClient | None,
    clock_skew_warning: timedelta = timedelta(seconds=5),
) -> None:
    """Log exchange reachability, clock skew and Telegram bot status.

    Problems are logged, never raised.
    """
    if rest_client is not None:
        try:
            server_time = await rest_client.get_server_time()
        except httpx.HTTPError as e:
            logger.warning(f"Exchange not reachable at startup: {e}")
        else:
            skew = abs(datetime.now(timezone.utc) - server_time)
            if skew > clock_skew_warning:
                logger.warning(
                    f"Local clock differs from exchange by {skew.total_seconds():.1f}s; "
                    "cooldown and startup guard use the local clock"
                )
            else:
                logger.info(f"Exchange reachable (clock skew {skew.total_seconds():.1f}s)")

    if telegram is not None:
        if await telegram.test_connection():
            logger.info("Telegram bot connection OK")
        else:
            logger.warning("Telegram bot connection failed; alerts will not be delivered")


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


async def _log_signal(signal: Signal) -> None:
    logger.info(
        f"{signal.emitted_at.isoformat()} - {signal.symbol} Signal: "
        f"{signal.type.value} at {signal.price:.5f}"
        + (" [simulated]" if signal.simulated else "")
    )


async def run(args: argparse.Namespace) -> int:
    settings = load_settings(args)
    setup_logging(settings.log_level)

    monitor_config = load_monitor_config(args.config)
    pairs = monitor_config.get_pairs(settings)
    if not pairs:
        logger.error("No enabled pairs to monitor")
        return 1

    rest_client = BinanceRestClient(base_url=settings.binance_base_url)
    telegram = TelegramClient(settings.telegram_token, settings.telegram_chat_id)
    notifier = TelegramNotifier(telegram, enabled=settings.telegram_enabled)

    primary = None if args.simulate else ExchangeBarSource(rest_client)
    source = FallbackBarSource(primary, enabled=settings.simulation_fallback)

    monitors = []
    for pair in pairs:
        analyzer = SignalAnalyzer(
            rule=monitor_config.resolve_rule(settings),
            guard_window=timedelta(seconds=settings.startup_guard_seconds),
            reset_cooldown_on_restart=settings.reset_cooldown_on_restart,
        )
        monitor = SignalMonitor(pair, source, analyzer, bar_limit=settings.bar_limit)
        monitor.on_signal(_log_signal)
        monitor.on_signal(notifier)
        monitors.append(monitor)

    try:
        await check_connectivity(
            None if args.simulate else rest_client,
            telegram if settings.telegram_enabled else None,
        )

        if args.once:
            for monitor in monitors:
                result = await monitor.preview()
                if result is None:
                    logger.info(f"{monitor.pair.key}: insufficient data")
                    continue
                snapshot, decision = result
                logger.info(
                    f"{monitor.pair.key} close={snapshot.close} rsi={snapshot.rsi} "
                    f"macd={snapshot.macd} signal={snapshot.macd_signal} "
                    f"decision={decision.type.value if decision else 'NEUTRAL'}"
                )
            return 0

        await asyncio.gather(
            *(m.run(settings.poll_interval_seconds) for m in monitors)
        )
    finally:
        for monitor in monitors:
            monitor.stop()
        await rest_client.close()
        await telegram.close()

    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    raise SystemExit(main())
