"""Core data models — single source of truth.
Every component passes these value objects around; none of them holds shared
mutable state. Derived fields are computed here so callers never recompute them.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Dict, Tuple

import numpy as np


class Action(Enum):
    BUY = "Buy"
    SELL = "Sell"
    HOLD = "Hold"


class Category(Enum):
    """Closed set of asset categories the optimizer allocates across."""
    STOCKS = "stocks"
    BONDS = "bonds"
    CRYPTO = "crypto"
    MUTUAL_FUNDS = "mutual_funds"
    EMERGING_MARKETS = "emerging_markets"
    ETFS = "etfs"

    @classmethod
    def parse(cls, value) -> "Category":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(c.value for c in cls)
            raise ValueError(f"Unknown asset category {value!r} (expected one of: {valid})") from None


RiskAllocation = Dict[Category, float]


@dataclass(frozen=True)
class AssetMetrics:
    symbol: str
    name: str
    expected_return: float     # annualized %
    volatility: float          # annualized %
    sharpe_ratio: float


@dataclass(frozen=True, eq=False)
class IndicatorSet:
    sma: np.ndarray
    ema: np.ndarray
    rsi: np.ndarray

    @property
    def latest_rsi(self) -> float:
        return float(self.rsi[-1])


@dataclass(frozen=True)
class ForecastResult:
    """Mean path plus nested confidence bands, day 0 = last known price."""
    mean: Tuple[float, ...]
    upper_ci90: Tuple[float, ...]
    upper_ci80: Tuple[float, ...]
    upper_ci50: Tuple[float, ...]
    lower_ci50: Tuple[float, ...]
    lower_ci80: Tuple[float, ...]
    lower_ci90: Tuple[float, ...]

    @property
    def horizon(self) -> int:
        return len(self.mean) - 1

    @property
    def final_price(self) -> float:
        return self.mean[-1]

    def bands_at(self, day: int) -> Tuple[float, ...]:
        """Ordered (lower90, lower80, lower50, mean, upper50, upper80, upper90)."""
        return (
            self.lower_ci90[day], self.lower_ci80[day], self.lower_ci50[day],
            self.mean[day],
            self.upper_ci50[day], self.upper_ci80[day], self.upper_ci90[day],
        )


@dataclass(frozen=True)
class Recommendation:
    action: Action
    confidence: float          # 0..100
    reasoning: str
    price_change: float = 0.0  # projected % change over the forecast horizon
    rsi: float = 50.0
    sma_50: Optional[float] = None

    # ── Computed properties ──────────────────────────────────────────────────
    @property
    def is_actionable(self) -> bool:
        return self.action is not Action.HOLD


@dataclass
class InstrumentAllocation:
    symbol: str
    name: str
    amount: float
    percentage: float          # of the total investable amount
    expected_return: float
    volatility: float
    sharpe_ratio: float


@dataclass
class CategoryAllocation:
    category: Category
    amount: float
    percentage: float
    expected_return: float     # arithmetic mean of instruments
    volatility: float          # RMS of instrument volatilities
    assets: Dict[str, InstrumentAllocation] = field(default_factory=dict)

    @property
    def allocated_amount(self) -> float:
        return sum(a.amount for a in self.assets.values())


@dataclass(frozen=True)
class PortfolioMetrics:
    expected_return: float
    volatility: float
    sharpe_ratio: float


@dataclass
class PortfolioAllocation:
    risk_score: int
    amount: float
    allocation: Dict[Category, CategoryAllocation]
    metrics: PortfolioMetrics
    dropped_categories: List[Category] = field(default_factory=list)
    unallocated_amount: float = 0.0
    warnings: List[str] = field(default_factory=list)

    @property
    def is_degraded(self) -> bool:
        return bool(self.dropped_categories or self.warnings)

    @property
    def allocated_amount(self) -> float:
        return sum(c.amount for c in self.allocation.values())


@dataclass(frozen=True)
class AssetAnalysis:
    """Single-instrument snapshot: history, forecast and recommendation."""
    symbol: str
    name: str
    current_price: float
    price_change: float
    price_change_pct: float
    prices: Tuple[float, ...]
    forecast: ForecastResult
    recommendation: Recommendation
    market_cap: Optional[float] = None
    volume: Optional[int] = None
