"""
Asset Metrics Calculator

Turns a closing-price series into annualized expected return, volatility and
Sharpe ratio (all in percent units, 252 trading days per year).

Market data is reached through a MetricsProvider capability so the numeric
core runs unchanged against live yfinance data or a deterministic fake.
"""

import logging
from typing import Optional, Protocol, Sequence

import numpy as np

from config import RISK_FREE_RATE, TRADING_DAYS
from errors import DegenerateStatisticsError
from indicators import as_price_array
from models import AssetMetrics

logger = logging.getLogger(__name__)


class MetricsProvider(Protocol):
    """Anything that can hand over closing prices and a display name."""

    def get_closing_prices(self, symbol: str) -> Sequence[float]:
        ...

    def get_display_name(self, symbol: str) -> Optional[str]:
        ...


def simple_returns(prices: Sequence[float]) -> np.ndarray:
    arr = as_price_array(prices, what="returns")
    return np.diff(arr) / arr[:-1]


def log_returns(prices: Sequence[float]) -> np.ndarray:
    arr = as_price_array(prices, what="returns")
    return np.log(arr[1:] / arr[:-1])


def compute_asset_metrics(prices: Sequence[float],
                          risk_free_rate: float = RISK_FREE_RATE,
                          symbol: str = "",
                          name: Optional[str] = None) -> AssetMetrics:
    """
    Annualized metrics for one instrument.

    Volatility is the population standard deviation of simple returns around
    the per-period equivalent of the annualized mean. A zero volatility leaves
    the Sharpe ratio undefined and raises DegenerateStatisticsError.
    """
    returns = simple_returns(prices)

    expected_return = float(returns.mean()) * TRADING_DAYS * 100
    center = expected_return / TRADING_DAYS / 100
    volatility = float(np.sqrt(np.mean((returns - center) ** 2))) * np.sqrt(TRADING_DAYS) * 100

    if volatility == 0:
        raise DegenerateStatisticsError(
            f"{symbol or 'series'}: zero volatility, Sharpe ratio undefined"
        )
    sharpe = (expected_return - risk_free_rate) / volatility

    return AssetMetrics(
        symbol=symbol,
        name=name or symbol,
        expected_return=expected_return,
        volatility=float(volatility),
        sharpe_ratio=float(sharpe),
    )


class AssetMetricsCalculator:
    """
    Computes AssetMetrics for symbols via an injected provider.

    Simple interface:
        metrics_for(symbol) -> AssetMetrics

    Price fetch failures propagate; name lookup is best-effort and falls back
    to the symbol.
    """

    def __init__(self, provider: MetricsProvider, risk_free_rate: float = RISK_FREE_RATE):
        self.provider = provider
        self.risk_free_rate = risk_free_rate

    def metrics_for(self, symbol: str) -> AssetMetrics:
        prices = self.provider.get_closing_prices(symbol)
        metrics = compute_asset_metrics(
            prices, self.risk_free_rate, symbol=symbol, name=self._resolve_name(symbol)
        )
        logger.info(
            f"{symbol}: return {metrics.expected_return:.2f}% "
            f"vol {metrics.volatility:.2f}% sharpe {metrics.sharpe_ratio:.2f}"
        )
        return metrics

    def _resolve_name(self, symbol: str) -> str:
        try:
            name = self.provider.get_display_name(symbol)
        except Exception as e:
            logger.warning(f"Could not fetch name for {symbol}, using symbol instead: {e}")
            return symbol
        return name or symbol
