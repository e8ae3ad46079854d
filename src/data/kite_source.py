"""
Kite Connect historical data source.

Fetches OHLCV candles from the Kite Connect REST API:

    GET /instruments/historical/{instrument_token}/{interval}?from=...&to=...

Response format::

    {"status": "success",
     "data": {"candles": [["2024-01-02T09:15:00+0530", o, h, l, c, v], ...]}}

Every transport, HTTP or payload failure is reported as
DataUnavailableError so the orchestrator can skip the instrument for the
cycle.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Callable, List, Optional, Sequence

import httpx
import pandas as pd

from ..point_figure.chart_builder import dataframe_to_bars
from ..point_figure.types import Bar
from ..sentinel.config import Instrument
from ..sentinel.exceptions import DataUnavailableError
from .base import BarSource

logger = logging.getLogger(__name__)

KITE_API_ROOT = "https://api.kite.trade"
KITE_API_VERSION = "3"
CANDLE_COLUMNS = ["date", "open", "high", "low", "close", "volume"]


class KiteBarSource(BarSource):
    """Bar source backed by the Kite Connect historical candles endpoint."""

    name = "kite"

    def __init__(
        self,
        api_key: str,
        access_token: str,
        history_days: int = 10,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
        clock: Optional[Callable[[], datetime]] = None,
        api_root: str = KITE_API_ROOT,
    ):
        """
        Args:
            api_key: Kite Connect API key.
            access_token: Session access token (obtained out of band).
            history_days: Calendar days of history requested per fetch.
            timeout: Per-request timeout in seconds; a timeout is a recoverable failure.
            client: Optional preconfigured httpx client (used by tests).
            clock: Returns "now" for the request window.
            api_root: Base URL of the API.
        """
        self.api_key = api_key
        self.access_token = access_token
        self.history_days = history_days
        self.api_root = api_root.rstrip("/")
        self._clock = clock or datetime.now
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    @property
    def headers(self) -> dict:
        return {
            "X-Kite-Version": KITE_API_VERSION,
            "Authorization": f"token {self.api_key}:{self.access_token}",
        }

    def fetch_bars(self, instrument: Instrument, interval: str) -> List[Bar]:
        symbol = instrument.symbol
        if not self.api_key or not self.access_token:
            raise DataUnavailableError(symbol, "Kite API key or access token not configured")

        to_dt = self._clock()
        from_dt = to_dt - timedelta(days=self.history_days)
        url = f"{self.api_root}/instruments/historical/{instrument.instrument_token}/{interval}"
        params = {
            "from": from_dt.strftime("%Y-%m-%d %H:%M:%S"),
            "to": to_dt.strftime("%Y-%m-%d %H:%M:%S"),
        }

        logger.debug(f"Fetching {interval} history for {symbol} ({params['from']} -> {params['to']})")
        try:
            response = self._client.get(url, params=params, headers=self.headers)
            response.raise_for_status()
            payload = response.json()
        except httpx.TimeoutException as e:
            raise DataUnavailableError(symbol, f"request timed out: {e}")
        except httpx.HTTPStatusError as e:
            raise DataUnavailableError(symbol, f"HTTP {e.response.status_code}: {_error_message(e.response)}")
        except httpx.HTTPError as e:
            raise DataUnavailableError(symbol, f"request failed: {e}")
        except ValueError as e:
            raise DataUnavailableError(symbol, f"invalid JSON response: {e}")

        if not isinstance(payload, dict) or payload.get("status") != "success":
            message = payload.get("message", "unknown error") if isinstance(payload, dict) else "malformed payload"
            raise DataUnavailableError(symbol, f"API error: {message}")

        candles = (payload.get("data") or {}).get("candles") or []
        try:
            bars = candles_to_bars(candles)
        except (ValueError, TypeError) as e:
            raise DataUnavailableError(symbol, f"malformed candles: {e}")

        logger.debug(f"{symbol}: received {len(bars)} bars")
        return bars

    def close(self) -> None:
        if self._owns_client:
            self._client.close()


def candles_to_bars(candles: Sequence[Sequence[Any]]) -> List[Bar]:
    """
    Convert Kite candle rows to Bars, oldest first.

    Extra trailing fields (open interest) are ignored, rows with missing
    prices are dropped and duplicate timestamps keep the last row.
    """
    if not candles:
        return []

    df = pd.DataFrame([list(row)[:6] for row in candles], columns=CANDLE_COLUMNS)
    df["date"] = pd.to_datetime(df["date"], utc=True)
    for col in ["open", "high", "low", "close", "volume"]:
        df[col] = pd.to_numeric(df[col], errors="coerce")

    df = df.dropna(subset=["date", "open", "high", "low", "close"])
    df["volume"] = df["volume"].fillna(0)
    df = df.sort_values("date", kind="stable").drop_duplicates(subset="date", keep="last").reset_index(drop=True)

    return dataframe_to_bars(df)


def _error_message(response: httpx.Response) -> str:
    try:
        return response.json().get("message", response.reason_phrase)
    except (ValueError, AttributeError):
        return response.reason_phrase
