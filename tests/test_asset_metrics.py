"""
Tests for asset_metrics.py.

What we test
------------
compute_asset_metrics():
  - Annualized return / volatility / Sharpe on a hand-checked series.
  - Volatility is a population std around the per-period mean.
  - Zero volatility raises DegenerateStatisticsError.
  - Name falls back to the symbol.
  - Idempotent: identical input gives identical output.
AssetMetricsCalculator:
  - Pulls prices and display name through the injected provider.
  - Name lookup failure falls back to the symbol (no error).
  - Price fetch failure propagates as UpstreamFetchError.
"""

from __future__ import annotations

import math

import numpy as np
import pytest

from asset_metrics import AssetMetricsCalculator, compute_asset_metrics, log_returns, simple_returns
from conftest import FakeProvider, random_walk
from errors import DegenerateStatisticsError, InsufficientDataError, UpstreamFetchError


def test_hand_checked_metrics():
    m = compute_asset_metrics([100.0, 110.0, 99.0], risk_free_rate=4.5, symbol="XYZ")
    vol = 0.1 * math.sqrt(252) * 100
    assert m.expected_return == pytest.approx(0.0, abs=1e-12)
    assert m.volatility == pytest.approx(vol)
    assert m.sharpe_ratio == pytest.approx(-4.5 / vol)
    assert m.symbol == "XYZ"
    assert m.name == "XYZ"


def test_matches_numpy_population_std():
    prices = random_walk(253, seed=11)
    returns = np.diff(prices) / np.array(prices[:-1])
    m = compute_asset_metrics(prices)
    assert m.expected_return == pytest.approx(returns.mean() * 252 * 100)
    assert m.volatility == pytest.approx(returns.std(ddof=0) * math.sqrt(252) * 100)
    assert m.sharpe_ratio == pytest.approx((m.expected_return - 4.5) / m.volatility)


def test_zero_volatility_raises(flat_prices):
    with pytest.raises(DegenerateStatisticsError):
        compute_asset_metrics(flat_prices, symbol="FLAT")


def test_single_price_is_insufficient():
    with pytest.raises(InsufficientDataError):
        compute_asset_metrics([100.0])


def test_explicit_name_is_kept():
    m = compute_asset_metrics([100.0, 101.0, 100.5], symbol="ABC", name="Abc Corp")
    assert m.name == "Abc Corp"


def test_idempotent(trending_prices):
    first = compute_asset_metrics(trending_prices, symbol="T")
    second = compute_asset_metrics(trending_prices, symbol="T")
    assert first == second


def test_return_helpers_lengths(trending_prices):
    assert len(simple_returns(trending_prices)) == len(trending_prices) - 1
    assert len(log_returns(trending_prices)) == len(trending_prices) - 1


# ── AssetMetricsCalculator ────────────────────────────────────────────────────

def test_calculator_uses_provider():
    prices = random_walk(200, seed=2)
    provider = FakeProvider({"AAA": prices}, names={"AAA": "Triple A Inc"})
    m = AssetMetricsCalculator(provider).metrics_for("AAA")
    assert m.name == "Triple A Inc"
    assert m == compute_asset_metrics(prices, symbol="AAA", name="Triple A Inc")


def test_calculator_name_failure_falls_back_to_symbol():
    provider = FakeProvider({"AAA": random_walk(50)}, name_failing=["AAA"])
    assert AssetMetricsCalculator(provider).metrics_for("AAA").name == "AAA"


def test_calculator_missing_name_falls_back_to_symbol():
    provider = FakeProvider({"AAA": random_walk(50)})
    assert AssetMetricsCalculator(provider).metrics_for("AAA").name == "AAA"


def test_calculator_price_failure_propagates():
    provider = FakeProvider({}, failing=["BAD"])
    with pytest.raises(UpstreamFetchError):
        AssetMetricsCalculator(provider).metrics_for("BAD")


def test_calculator_custom_risk_free_rate():
    prices = random_walk(100, seed=9)
    provider = FakeProvider({"AAA": prices})
    m = AssetMetricsCalculator(provider, risk_free_rate=0.0).metrics_for("AAA")
    assert m.sharpe_ratio == pytest.approx(m.expected_return / m.volatility)
