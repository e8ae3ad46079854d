"""
Tests for the sentinel command line.
"""

import json

import pytest

from src.notify.base import LoggingNotifier
from src.notify.telegram import TelegramNotifier
from src.sentinel.main import create_bar_source, create_notifier, load_config, main, parse_args


ENV_VARS = [
    "KITE_API_KEY", "KITE_ACCESS_TOKEN", "TELEGRAM_BOT_TOKEN", "TELEGRAM_CHAT_ID",
    "PNF_ATR_LENGTH", "PNF_REVERSAL", "PNF_INTERVAL", "PNF_PERIOD_SECONDS",
    "PNF_HISTORY_DAYS", "PNF_MAX_WORKERS", "PNF_SIGNATURE_FILE",
    "PNF_MARKET_OPEN", "PNF_MARKET_CLOSE", "PNF_MARKET_TIMEZONE",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestParseArgs:
    """Tests for argument parsing."""

    def test_defaults(self):
        args = parse_args(["once"])
        assert args.command == "once"
        assert args.source == "kite"
        assert args.dry_run is False
        assert args.port == 8000

    def test_invalid_command(self):
        with pytest.raises(SystemExit):
            parse_args(["replay"])


class TestLoadConfig:
    """Tests for load_config."""

    def test_kite_requires_credentials(self):
        with pytest.raises(ValueError, match="KITE_API_KEY"):
            load_config(parse_args(["once", "--source", "kite"]))

    def test_synthetic_needs_no_credentials(self):
        config = load_config(parse_args(["once", "--source", "synthetic"]))
        assert len(config.watchlist) == 8

    def test_watchlist_file(self, tmp_path):
        path = tmp_path / "watchlist.json"
        path.write_text(json.dumps([{"tradingsymbol": "INFY", "instrument_token": 408065}]))
        config = load_config(parse_args(["once", "--source", "synthetic", "--watchlist", str(path)]))
        assert [i.symbol for i in config.watchlist] == ["INFY"]


class TestFactories:
    """Tests for bar source and notifier selection."""

    def test_dry_run_uses_logging_notifier(self):
        args = parse_args(["once", "--source", "synthetic", "--dry-run"])
        notifier = create_notifier(args, load_config(args))
        assert isinstance(notifier, LoggingNotifier)

    def test_telegram_notifier_by_default(self, monkeypatch):
        monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "123:abc")
        monkeypatch.setenv("TELEGRAM_CHAT_ID", "42")
        args = parse_args(["once", "--source", "synthetic"])
        notifier = create_notifier(args, load_config(args))
        try:
            assert isinstance(notifier, TelegramNotifier)
            assert notifier.configured
        finally:
            notifier.close()

    @pytest.mark.parametrize("source", ["kite", "csv", "synthetic"])
    def test_bar_source_selection(self, monkeypatch, source):
        monkeypatch.setenv("KITE_API_KEY", "key")
        monkeypatch.setenv("KITE_ACCESS_TOKEN", "token")
        args = parse_args(["once", "--source", source])
        bar_source = create_bar_source(args, load_config(args))
        try:
            assert bar_source.name == source
        finally:
            bar_source.close()


class TestMain:
    """Tests for main()."""

    def test_once_with_synthetic_source(self, tmp_path):
        signature_file = tmp_path / "signatures.json"
        exit_code = main([
            "once", "--source", "synthetic", "--dry-run",
            "--signature-file", str(signature_file),
        ])

        assert exit_code == 0
        saved = json.loads(signature_file.read_text())
        assert len(saved) == 8
        assert set(saved["INFY"]) == {"count", "type"}

    def test_config_error_exit_code(self):
        assert main(["once", "--source", "kite", "--dry-run"]) == 2

    def test_missing_watchlist_exit_code(self, tmp_path):
        args = ["once", "--source", "synthetic", "--dry-run", "--watchlist", str(tmp_path / "none.json")]
        assert main(args) == 2

    def test_all_instruments_failing(self, tmp_path):
        assert main(["once", "--source", "csv", "--data-dir", str(tmp_path), "--dry-run"]) == 1
