"""
Tests for CSV loading and the CSV bar source.
"""

import pytest

from src.data.csv_source import CsvBarSource, load_ohlcv_csv, symbol_filename
from src.sentinel.config import Instrument
from src.sentinel.exceptions import DataUnavailableError


def write_csv(path, text):
    path.write_text(text.strip() + "\n")
    return str(path)


class TestLoadOhlcvCsv:
    """Tests for load_ohlcv_csv."""

    def test_string_timestamps(self, tmp_path):
        filepath = write_csv(tmp_path / "INFY.csv", """
timestamp,open,high,low,close,volume
2024-01-02 09:15:00,100,102,99,101,1500
2024-01-02 09:45:00,101,103,100.5,102.5,1800
""")
        df = load_ohlcv_csv(filepath)
        assert len(df) == 2
        assert list(df.columns) == ["timestamp", "open", "high", "low", "close", "volume"]
        assert df["close"].tolist() == [101.0, 102.5]

    def test_unix_timestamps_and_capitalized_headers(self, tmp_path):
        filepath = write_csv(tmp_path / "INFY.csv", """
Date,Open,High,Low,Close
1700001800,2,3,1.5,2.5
1700000000,1,2,0.5,1.5
""")
        df = load_ohlcv_csv(filepath)
        assert df["close"].tolist() == [1.5, 2.5]
        assert df["volume"].tolist() == [0, 0]
        assert int(df["timestamp"].iloc[0].timestamp()) == 1700000000

    def test_duplicates_keep_last(self, tmp_path):
        filepath = write_csv(tmp_path / "INFY.csv", """
timestamp,open,high,low,close
2024-01-02 09:15:00,100,102,99,101
2024-01-02 09:15:00,100,102,99,101.5
""")
        assert load_ohlcv_csv(filepath)["close"].tolist() == [101.5]

    def test_invalid_ohlc_rows_dropped(self, tmp_path):
        filepath = write_csv(tmp_path / "INFY.csv", """
timestamp,open,high,low,close
2024-01-02 09:15:00,100,102,99,101
2024-01-02 09:45:00,100,99,101,100
""")
        assert len(load_ohlcv_csv(filepath)) == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_ohlcv_csv(str(tmp_path / "missing.csv"))

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("")
        with pytest.raises(ValueError, match="empty"):
            load_ohlcv_csv(str(path))

    def test_missing_columns(self, tmp_path):
        filepath = write_csv(tmp_path / "INFY.csv", """
timestamp,open,close
2024-01-02 09:15:00,100,101
""")
        with pytest.raises(ValueError, match="Missing required columns"):
            load_ohlcv_csv(filepath)


class TestCsvBarSource:
    """Tests for CsvBarSource."""

    @pytest.fixture
    def data_dir(self, tmp_path):
        rows = "\n".join(
            f"{1700000000 + i * 1800},{100 + i},{101 + i},{99 + i},{100.5 + i}" for i in range(10)
        )
        (tmp_path / "NIFTY_50.csv").write_text("timestamp,open,high,low,close\n" + rows + "\n")
        return tmp_path

    def test_symbol_filename(self):
        assert symbol_filename("NIFTY 50") == "NIFTY_50.csv"
        assert symbol_filename("INFY") == "INFY.csv"

    def test_fetch_bars(self, data_dir):
        bars = CsvBarSource(str(data_dir)).fetch_bars(Instrument("NIFTY 50", 256265), "30minute")
        assert len(bars) == 10
        assert bars[0].timestamp == 1700000000
        assert bars[-1].close == 109.5

    def test_max_bars_keeps_latest(self, data_dir):
        bars = CsvBarSource(str(data_dir), max_bars=3).fetch_bars(Instrument("NIFTY 50", 256265), "30minute")
        assert [b.close for b in bars] == [107.5, 108.5, 109.5]
        assert [b.index for b in bars] == [0, 1, 2]

    def test_missing_symbol_is_data_unavailable(self, data_dir):
        with pytest.raises(DataUnavailableError) as exc_info:
            CsvBarSource(str(data_dir)).fetch_bars(Instrument("INFY", 408065), "30minute")
        assert exc_info.value.symbol == "INFY"
