"""
Market Data Collector — the yfinance-backed MetricsProvider

Everything that touches the network lives here; the numeric core only ever
sees plain closing-price sequences.

Simple interface:
    get_closing_prices(symbol) -> List[float]          (metrics lookback)
    get_price_history(symbol, days) -> pd.Series        (dated closes)
    get_display_name(symbol) -> Optional[str]
    resolve_symbol(query) -> str                        (ticker or free text)
    get_quote_snapshot(symbol) -> QuoteSnapshot
    get_market_overview() -> Dict[str, List[(month, level)]]

Complexity hidden → caching, NaN cleanup, upstream error wrapping.
"""

import logging
import re
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple

import pandas as pd
import yfinance as yf

from config import (
    ASSET_LOOKBACK_DAYS, BENCHMARKS, CACHE_TIMEOUT_MINUTES,
    HISTORICAL_DAYS, OVERVIEW_MONTHS,
)
from errors import SymbolResolutionError, UpstreamFetchError

logger = logging.getLogger(__name__)

TICKER_PATTERN = re.compile(r"^[A-Z]{1,5}$")


@dataclass
class QuoteSnapshot:
    symbol: str
    name: Optional[str]
    market_cap: Optional[float]
    volume: Optional[int]


class DataCollector:
    """Fetches and caches daily closes and quote details from Yahoo Finance."""

    def __init__(self, cache_timeout: timedelta = timedelta(minutes=CACHE_TIMEOUT_MINUTES)):
        self._cache: Dict[Tuple[str, int], Tuple[pd.Series, datetime]] = {}
        self._info_cache: Dict[str, Tuple[dict, datetime]] = {}
        self._cache_timeout = cache_timeout
        self._lock = threading.Lock()

    # ── Public Interface ────────────────────────────────────────────────

    def get_closing_prices(self, symbol: str) -> List[float]:
        return self.get_price_history(symbol, HISTORICAL_DAYS).tolist()

    def get_price_history(self, symbol: str, days: int = ASSET_LOOKBACK_DAYS) -> pd.Series:
        key = (symbol, days)
        cached = self._from_cache(self._cache, key)
        if cached is not None:
            return cached.copy()

        logger.info(f"Fetching {days}d of closes for {symbol}")
        try:
            hist = yf.Ticker(symbol).history(period=f"{days}d", interval="1d")
        except Exception as e:
            raise UpstreamFetchError(f"Failed to fetch data for {symbol}: {e}") from e

        if hist is None or hist.empty or "Close" not in hist:
            raise UpstreamFetchError(f"No data returned for {symbol}")

        close = hist["Close"].dropna()
        close = close[close > 0]
        if close.empty:
            raise UpstreamFetchError(f"No valid closing prices for {symbol}")

        with self._lock:
            self._cache[key] = (close, datetime.now())
        return close.copy()

    def get_display_name(self, symbol: str) -> Optional[str]:
        info = self._get_info(symbol)
        return info.get("shortName") or info.get("longName")

    def get_quote_snapshot(self, symbol: str) -> QuoteSnapshot:
        try:
            info = self._get_info(symbol)
        except UpstreamFetchError as e:
            logger.warning(f"Quote details unavailable for {symbol}: {e}")
            info = {}
        return QuoteSnapshot(
            symbol=symbol,
            name=info.get("longName") or info.get("shortName"),
            market_cap=info.get("marketCap"),
            volume=info.get("regularMarketVolume"),
        )

    def resolve_symbol(self, query: str) -> str:
        """Return `query` if it already looks like a ticker, else search for one."""
        query = (query or "").strip()
        if not query:
            raise SymbolResolutionError("Symbol or company name is required")
        if TICKER_PATTERN.match(query):
            return query

        try:
            quotes = yf.Search(query, max_results=1, news_count=0).quotes
        except Exception as e:
            raise SymbolResolutionError(f"Failed to resolve symbol for {query!r}: {e}") from e
        if not quotes or not quotes[0].get("symbol"):
            raise SymbolResolutionError(f"No matching symbol found for {query!r}")

        symbol = quotes[0]["symbol"]
        logger.info(f"Resolved {query!r} → {symbol}")
        return symbol

    def get_market_overview(self) -> Dict[str, List[Tuple[str, float]]]:
        """Monthly benchmark levels, each normalized to 100 at its first month."""
        days = OVERVIEW_MONTHS * 31
        return {
            name: self._monthly_normalized(self.get_price_history(ticker, days))
            for name, ticker in BENCHMARKS.items()
        }

    # ── Helpers ─────────────────────────────────────────────────────────

    def _from_cache(self, cache: dict, key):
        with self._lock:
            entry = cache.get(key)
            if entry is None:
                return None
            data, ts = entry
            if datetime.now() - ts < self._cache_timeout:
                return data
            del cache[key]
        return None

    def _get_info(self, symbol: str) -> dict:
        cached = self._from_cache(self._info_cache, symbol)
        if cached is not None:
            return dict(cached)
        try:
            info = yf.Ticker(symbol).info or {}
        except Exception as e:
            raise UpstreamFetchError(f"Quote lookup failed for {symbol}: {e}") from e
        with self._lock:
            self._info_cache[symbol] = (info, datetime.now())
        return dict(info)

    @staticmethod
    def _monthly_normalized(close: pd.Series) -> List[Tuple[str, float]]:
        index = pd.DatetimeIndex(close.index)
        if index.tz is not None:
            index = index.tz_localize(None)
        monthly = close.groupby(index.to_period("M")).last()
        base = monthly.iloc[0]
        return [(f"{period}-01", float(value / base * 100)) for period, value in monthly.items()]
