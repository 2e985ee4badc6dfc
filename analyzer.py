"""
Functional boundary of the core.

The five pure operations:
    compute_indicators(prices, params)               -> IndicatorSet
    compute_asset_metrics(prices, risk_free_rate)    -> AssetMetrics
    run_forecast(prices, seed)                       -> ForecastResult
    recommend(historical_prices, forecast_mean)      -> Recommendation
    optimize_allocation(tolerance, amount, categories, metrics) -> PortfolioAllocation

and two end-to-end flows wired to a market data provider:
    analyze_asset(query)                             -> AssetAnalysis
    build_portfolio(tolerance, amount, categories)   -> PortfolioAllocation
"""

import logging
from typing import Iterable, Optional

from asset_metrics import AssetMetricsCalculator, compute_asset_metrics
from allocation_optimizer import (
    AllocationOptimizer, gather_category_metrics, optimize_allocation,
)
from config import ASSET_LOOKBACK_DAYS, RISK_FREE_RATE
from data_collector import DataCollector
from forecast_engine import run_forecast
from indicators import as_price_array, compute_indicators
from models import AssetAnalysis, PortfolioAllocation
from recommendation_engine import recommend

logger = logging.getLogger(__name__)

__all__ = [
    "compute_indicators",
    "compute_asset_metrics",
    "run_forecast",
    "recommend",
    "optimize_allocation",
    "analyze_asset",
    "build_portfolio",
]


def analyze_asset(query: str, collector: Optional[DataCollector] = None,
                  seed: Optional[int] = None,
                  lookback_days: int = ASSET_LOOKBACK_DAYS) -> AssetAnalysis:
    """Resolve, fetch, forecast and recommend for a single instrument."""
    collector = collector or DataCollector()
    symbol = collector.resolve_symbol(query)
    history = collector.get_price_history(symbol, lookback_days)
    prices = as_price_array(history.tolist(), what=f"{symbol} history")

    forecast = run_forecast(prices, seed=seed)
    rec = recommend(prices, forecast.mean)
    quote = collector.get_quote_snapshot(symbol)

    current, previous = float(prices[-1]), float(prices[-2])
    return AssetAnalysis(
        symbol=symbol.upper(),
        name=quote.name or symbol,
        current_price=current,
        price_change=current - previous,
        price_change_pct=(current - previous) / previous * 100,
        prices=tuple(float(p) for p in prices),
        forecast=forecast,
        recommendation=rec,
        market_cap=quote.market_cap,
        volume=quote.volume,
    )


def build_portfolio(risk_tolerance: float, amount: float,
                    selected_categories: Iterable,
                    collector=None,
                    risk_free_rate: float = RISK_FREE_RATE,
                    redistribute_dropped: Optional[bool] = None) -> PortfolioAllocation:
    """Fetch metrics for the selected universe and optimize across it."""
    selected = list(selected_categories)
    calculator = AssetMetricsCalculator(collector or DataCollector(), risk_free_rate)
    metrics, warnings = gather_category_metrics(selected, calculator)
    if warnings:
        logger.warning(f"{len(warnings)} instrument(s) excluded from the optimization")
    optimizer = AllocationOptimizer(risk_free_rate, redistribute_dropped)
    return optimizer.optimize(risk_tolerance, amount, selected, metrics, upstream_warnings=warnings)
