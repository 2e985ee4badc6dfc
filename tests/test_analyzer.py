"""
Tests for analyzer.py end-to-end flows with fake collaborators.

What we test
------------
analyze_asset():
  - Resolves the query, forecasts, recommends and reports day-over-day change.
  - Seeded runs are reproducible.
  - Quote name missing → falls back to the symbol.
build_portfolio():
  - Gathers metrics for the selected universe through the provider.
  - Failed instruments are excluded and surface as warnings on the result.
"""

from __future__ import annotations

import pandas as pd
import pytest

from analyzer import analyze_asset, build_portfolio, compute_asset_metrics, run_forecast
from config import AVAILABLE_ASSETS
from conftest import FakeProvider, random_walk
from data_collector import QuoteSnapshot
from models import Action, Category


class FakeCollector:
    def __init__(self, prices, name="Acme Corp"):
        self.prices = prices
        self.name = name
        self.queries = []

    def resolve_symbol(self, query):
        self.queries.append(query)
        return "acme"

    def get_price_history(self, symbol, days):
        return pd.Series(self.prices)

    def get_quote_snapshot(self, symbol):
        return QuoteSnapshot(symbol=symbol, name=self.name, market_cap=5e9, volume=1000)


def test_analyze_asset(trending_prices):
    collector = FakeCollector(trending_prices)
    analysis = analyze_asset("Acme", collector, seed=4)

    assert collector.queries == ["Acme"]
    assert analysis.symbol == "ACME"
    assert analysis.name == "Acme Corp"
    assert analysis.current_price == trending_prices[-1]
    assert analysis.price_change == pytest.approx(trending_prices[-1] - trending_prices[-2])
    assert analysis.price_change_pct == pytest.approx(
        (trending_prices[-1] - trending_prices[-2]) / trending_prices[-2] * 100)
    assert analysis.forecast == run_forecast(trending_prices, seed=4)
    assert isinstance(analysis.recommendation.action, Action)
    assert analysis.market_cap == 5e9


def test_analyze_asset_reproducible(trending_prices):
    a = analyze_asset("Acme", FakeCollector(trending_prices), seed=9)
    b = analyze_asset("Acme", FakeCollector(trending_prices), seed=9)
    assert a == b


def test_analyze_asset_name_fallback(trending_prices):
    analysis = analyze_asset("Acme", FakeCollector(trending_prices, name=None), seed=0)
    assert analysis.name == "acme"


def _provider(failing=()):
    prices = {}
    for i, symbol in enumerate(AVAILABLE_ASSETS["stocks"] + AVAILABLE_ASSETS["bonds"]):
        prices[symbol] = random_walk(253, seed=i, drift=0.0006, vol=0.005)
    return FakeProvider(prices, failing=failing)


def test_build_portfolio():
    result = build_portfolio(50, 25_000, ["stocks", "bonds"], _provider())
    assert set(result.allocation) == {Category.STOCKS, Category.BONDS}
    assert result.allocated_amount == pytest.approx(25_000)
    assert result.warnings == []
    for category in result.allocation.values():
        for symbol, asset in category.assets.items():
            assert asset.sharpe_ratio == pytest.approx(
                compute_asset_metrics(_provider().prices[symbol], symbol=symbol).sharpe_ratio)


def test_build_portfolio_reports_failed_instruments():
    result = build_portfolio(50, 25_000, ["stocks", "bonds"], _provider(failing=["AAPL"]))
    assert "AAPL" not in result.allocation[Category.STOCKS].assets
    assert any("AAPL" in w for w in result.warnings)
    assert result.is_degraded
