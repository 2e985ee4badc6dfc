"""
Shared pytest fixtures for the Portfolio Forecaster test suite.

Provides:
  - Deterministic synthetic closing-price series (trending, alternating, flat).
  - ``make_metrics``: AssetMetrics factory with a consistent Sharpe ratio.
  - ``FakeProvider``: an in-memory MetricsProvider with optional failures.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

import numpy as np
import pytest

from errors import UpstreamFetchError
from models import AssetMetrics

RF = 4.5


def make_metrics(symbol: str, expected_return: float, volatility: float = 20.0,
                 name: Optional[str] = None) -> AssetMetrics:
    return AssetMetrics(
        symbol=symbol,
        name=name or symbol,
        expected_return=expected_return,
        volatility=volatility,
        sharpe_ratio=(expected_return - RF) / volatility,
    )


def random_walk(n: int = 260, seed: int = 0, drift: float = 0.0004,
                vol: float = 0.015, start: float = 100.0) -> List[float]:
    rng = np.random.default_rng(seed)
    steps = rng.normal(drift, vol, size=n - 1)
    return [start] + list(start * np.exp(np.cumsum(steps)))


class FakeProvider:
    """MetricsProvider backed by dicts; symbols in `failing` raise."""

    def __init__(self, prices: Dict[str, Sequence[float]],
                 names: Optional[Dict[str, str]] = None,
                 failing: Sequence[str] = (),
                 name_failing: Sequence[str] = ()):
        self.prices = prices
        self.names = names or {}
        self.failing = set(failing)
        self.name_failing = set(name_failing)
        self.price_calls: List[str] = []

    def get_closing_prices(self, symbol: str) -> Sequence[float]:
        self.price_calls.append(symbol)
        if symbol in self.failing or symbol not in self.prices:
            raise UpstreamFetchError(f"No data returned for {symbol}")
        return self.prices[symbol]

    def get_display_name(self, symbol: str) -> Optional[str]:
        if symbol in self.name_failing:
            raise UpstreamFetchError(f"Quote lookup failed for {symbol}")
        return self.names.get(symbol)


# ── Price fixtures ────────────────────────────────────────────────────────────

@pytest.fixture
def trending_prices() -> List[float]:
    return random_walk(260, seed=42)


@pytest.fixture
def alternating_prices() -> List[float]:
    """100, 101, 100, 101, ... (60 points) — RSI near 50, no trend."""
    return [100.0 + (i % 2) for i in range(60)]


@pytest.fixture
def rising_prices() -> List[float]:
    return [100.0 + i for i in range(60)]


@pytest.fixture
def flat_prices() -> List[float]:
    return [50.0] * 40
