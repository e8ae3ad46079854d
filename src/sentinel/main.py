"""
Main entry point for the P&F sentinel.

Usage:
    python -m src.sentinel.main once --source synthetic --dry-run
    python -m src.sentinel.main run --source kite --signature-file state/signatures.json
    python -m src.sentinel.main serve --source kite --port 8000
    python -m src.sentinel.main once --source csv --data-dir Data/30m --watchlist watchlist.json

Credentials and chart settings are read from the environment; see
``src.sentinel.config``.
"""

import argparse
import logging
import sys
from typing import Optional, Sequence

from ..data.base import BarSource
from ..data.csv_source import CsvBarSource
from ..data.kite_source import KiteBarSource
from ..data.synthetic_source import SyntheticBarSource
from ..notify.base import LoggingNotifier, Notifier
from ..notify.telegram import TelegramNotifier
from .config import SentinelConfig, load_watchlist
from .exceptions import ConfigError
from .orchestrator import CycleOrchestrator
from .scheduler import Scheduler
from .signature_store import SignatureStore

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="P&F Sentinel - Point-and-Figure column change alerts for a watchlist"
    )
    parser.add_argument(
        "command",
        choices=["run", "once", "serve"],
        help="run: scheduled loop; once: a single cycle; serve: status API with monitor"
    )
    parser.add_argument(
        "--source",
        choices=["kite", "csv", "synthetic"],
        default="kite",
        help="Bar source (default: kite)"
    )
    parser.add_argument("--data-dir", default="Data", help="Directory of <SYMBOL>.csv files for --source csv")
    parser.add_argument("--seed", type=int, default=0, help="Random seed for --source synthetic")
    parser.add_argument("--watchlist", default=None, help="JSON watchlist file (default: built-in NSE list)")
    parser.add_argument("--signature-file", default=None, help="Persist column signatures to this JSON file")
    parser.add_argument("--dry-run", action="store_true", help="Log alerts instead of sending them")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind to for serve (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000, help="Port for serve (default: 8000)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def load_config(args: argparse.Namespace) -> SentinelConfig:
    """Environment config with command-line overrides, validated."""
    config = SentinelConfig.from_env()
    if args.watchlist:
        config = config.with_watchlist(load_watchlist(args.watchlist))
    if args.signature_file:
        config = config.with_signature_file(args.signature_file)
    config.validate()

    if args.source == "kite" and not (config.kite_api_key and config.kite_access_token):
        raise ConfigError("KITE_API_KEY and KITE_ACCESS_TOKEN must be set for --source kite")
    return config


def create_bar_source(args: argparse.Namespace, config: SentinelConfig) -> BarSource:
    if args.source == "csv":
        return CsvBarSource(args.data_dir)
    if args.source == "synthetic":
        return SyntheticBarSource(seed=args.seed)
    return KiteBarSource(
        api_key=config.kite_api_key,
        access_token=config.kite_access_token,
        history_days=config.history_days,
        timeout=config.request_timeout,
        clock=config.schedule.market_hours.now,
    )


def create_notifier(args: argparse.Namespace, config: SentinelConfig) -> Notifier:
    if args.dry_run:
        return LoggingNotifier()
    notifier = TelegramNotifier(
        bot_token=config.telegram_bot_token,
        chat_id=config.telegram_chat_id,
        timeout=config.request_timeout,
    )
    if not notifier.configured:
        logger.warning("TELEGRAM_BOT_TOKEN/TELEGRAM_CHAT_ID not set; alerts will be suppressed")
    return notifier


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    try:
        config = load_config(args)
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    bar_source = create_bar_source(args, config)
    notifier = create_notifier(args, config)
    store = SignatureStore(config.signature_file) if config.signature_file else None
    orchestrator = CycleOrchestrator(config, bar_source, notifier, store=store)
    scheduler = Scheduler(orchestrator)

    logger.info(
        f"Watching {len(config.watchlist)} instruments | interval {config.chart.interval} | "
        f"ATR({config.chart.atr_length}) boxes | {config.chart.reversal}-box reversal | "
        f"source {bar_source.name} | notifier {notifier.name}"
    )

    try:
        if args.command == "once":
            report = scheduler.trigger()
            return 1 if report is None or report.all_failed else 0

        if args.command == "serve":
            import uvicorn
            from .api import init_app

            app = init_app(orchestrator, scheduler)
            scheduler.start()
            uvicorn.run(app, host=args.host, port=args.port, log_level="info")
            return 0

        scheduler.run_forever()
        return 0
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
        return 0
    finally:
        scheduler.stop()
        bar_source.close()
        notifier.close()


if __name__ == "__main__":
    sys.exit(main())
