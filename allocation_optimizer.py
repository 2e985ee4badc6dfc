"""
Allocation Optimizer — risk-tolerance driven multi-level allocation

Pipeline:
─────────
1. Risk tolerance 0..100 → risk score 1..5 (breakpoints 20/40/60/80).
2. Pick the category table for the score; if bonds are selected and every
   bond instrument has a negative expected return, use the no-bond table.
3. Keep only the selected categories and renormalize to 100%.
4. Per category: rank by Sharpe (desc), cap the pick count
   (stocks score+2, crypto max(1, score//2), others 2), drop anything
   returning worse than -risk_free_rate, keep the top survivors.
5. Split category capital by max(0.1, sharpe) weights.
6. Category return = mean of instruments; category vol = RMS of instruments.
7. Portfolio return = weighted sum; vol = root of weighted squares
   (no covariance terms); Sharpe against the risk-free rate.

A category with no viable instrument is dropped. By default its capital stays
unallocated and is reported on the result; ALLOCATION["redistribute_dropped"]
spreads it over the surviving categories instead.
"""

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from config import (
    ALLOCATION, AVAILABLE_ASSETS, BASE_ALLOCATIONS, MAX_FETCH_WORKERS,
    NO_BOND_ALLOCATIONS, RISK_BREAKPOINTS, RISK_FREE_RATE,
)
from asset_metrics import AssetMetricsCalculator
from errors import (
    DegenerateStatisticsError, NoViableAssetsError,
)
from models import (
    AssetMetrics, Category, CategoryAllocation, InstrumentAllocation,
    PortfolioAllocation, PortfolioMetrics, RiskAllocation,
)

logger = logging.getLogger(__name__)

CategoryMetrics = Mapping[Category, Sequence[AssetMetrics]]


# ═══════════════════════════════════════════════════════════════════════════
# Risk tables
# ═══════════════════════════════════════════════════════════════════════════

def risk_score(risk_tolerance: float) -> int:
    """Discretize a 0..100 tolerance into a 1..5 score (upper-inclusive)."""
    if not 0 <= risk_tolerance <= 100:
        raise ValueError(f"risk tolerance must be within 0..100, got {risk_tolerance}")
    for score, bound in enumerate(RISK_BREAKPOINTS, start=1):
        if risk_tolerance <= bound:
            return score
    return len(RISK_BREAKPOINTS) + 1


def _as_risk_allocation(table: Mapping[str, float]) -> RiskAllocation:
    return {Category(name): float(pct) for name, pct in table.items()}


def all_bonds_negative(metrics: CategoryMetrics,
                       selected: Optional[Iterable[Category]] = None) -> bool:
    if selected is not None and Category.BONDS not in list(selected):
        return False
    bonds = metrics.get(Category.BONDS) or []
    return bool(bonds) and all(b.expected_return < 0 for b in bonds)


def base_allocation(score: int, metrics: CategoryMetrics,
                    selected: Optional[Iterable[Category]] = None) -> RiskAllocation:
    if all_bonds_negative(metrics, selected):
        logger.info(f"All bonds negative — using no-bond table for risk score {score}")
        return _as_risk_allocation(NO_BOND_ALLOCATIONS[score])
    return _as_risk_allocation(BASE_ALLOCATIONS[score])


def target_allocation(score: int, metrics: CategoryMetrics,
                      selected: Iterable[Category]) -> RiskAllocation:
    """Category percentages restricted to `selected` and renormalized to 100."""
    selected = list(selected)
    table = base_allocation(score, metrics, selected)
    filtered = {c: pct for c, pct in table.items() if c in selected}
    total = sum(filtered.values())
    if total <= 0:
        raise NoViableAssetsError(
            f"Selected categories carry no weight at risk score {score}: "
            f"{', '.join(c.value for c in selected)}"
        )
    return {c: pct * 100 / total for c, pct in filtered.items()}


def pick_count(category: Category, score: int, available: int) -> int:
    if category is Category.STOCKS:
        wanted = score + ALLOCATION["stocks_pick_bonus"]
    elif category is Category.CRYPTO:
        wanted = max(1, score // 2)
    else:
        wanted = ALLOCATION["default_pick_count"]
    return min(wanted, available)


# ═══════════════════════════════════════════════════════════════════════════
# Optimizer
# ═══════════════════════════════════════════════════════════════════════════

class AllocationOptimizer:
    """
    Simple interface:
        optimize(risk_tolerance, amount, selected_categories, metrics) -> PortfolioAllocation
    """

    def __init__(self, risk_free_rate: float = RISK_FREE_RATE,
                 redistribute_dropped: Optional[bool] = None):
        self.risk_free_rate = risk_free_rate
        self.redistribute_dropped = (
            ALLOCATION["redistribute_dropped"] if redistribute_dropped is None
            else redistribute_dropped
        )

    # ── Public Interface ────────────────────────────────────────────────

    def optimize(self, risk_tolerance: float, amount: float,
                 selected_categories: Iterable, metrics: CategoryMetrics,
                 upstream_warnings: Optional[List[str]] = None) -> PortfolioAllocation:
        if amount <= 0:
            raise ValueError(f"investment amount must be positive, got {amount}")
        selected = self._parse_categories(selected_categories)
        score = risk_score(risk_tolerance)
        warnings = list(upstream_warnings or [])

        targets = target_allocation(score, metrics, selected)

        viable: Dict[Category, List[AssetMetrics]] = {}
        dropped: List[Category] = []
        for category, pct in targets.items():
            if pct == 0:
                continue
            picked = self._select_instruments(category, score, metrics.get(category) or [])
            if picked:
                viable[category] = picked
            else:
                dropped.append(category)
                warnings.append(
                    f"{category.value}: no viable instruments, "
                    f"{pct:.2f}% of capital not allocated to this category"
                )
                logger.warning(f"No viable assets in {category.value} — category dropped")

        if not viable:
            raise NoViableAssetsError("No selected category has a viable instrument")

        percentages = {c: targets[c] for c in viable}
        if dropped and self.redistribute_dropped:
            total = sum(percentages.values())
            percentages = {c: pct * 100 / total for c, pct in percentages.items()}
            logger.info(f"Redistributed capital of dropped categories: {[c.value for c in dropped]}")

        allocation = {
            c: self._allocate_category(c, amount, percentages[c], viable[c])
            for c in viable
        }
        portfolio = self._portfolio_metrics(allocation.values())
        unallocated = 0.0
        if dropped and not self.redistribute_dropped:
            unallocated = max(0.0, amount - sum(c.amount for c in allocation.values()))

        result = PortfolioAllocation(
            risk_score=score,
            amount=amount,
            allocation=allocation,
            metrics=portfolio,
            dropped_categories=dropped,
            unallocated_amount=unallocated,
            warnings=warnings,
        )
        logger.info(
            f"Portfolio (score {score}): return {portfolio.expected_return:.2f}% "
            f"vol {portfolio.volatility:.2f}% sharpe {portfolio.sharpe_ratio:.2f} "
            f"across {len(allocation)} categories"
        )
        return result

    # ── Internal ────────────────────────────────────────────────────────

    @staticmethod
    def _parse_categories(selected_categories: Iterable) -> List[Category]:
        parsed: List[Category] = []
        for value in selected_categories:
            category = Category.parse(value)
            if category not in parsed:
                parsed.append(category)
        if not parsed:
            raise ValueError("at least one asset category must be selected")
        return parsed

    def _select_instruments(self, category: Category, score: int,
                            candidates: Sequence[AssetMetrics]) -> List[AssetMetrics]:
        ranked = sorted(candidates, key=lambda m: m.sharpe_ratio, reverse=True)
        count = pick_count(category, score, len(ranked))
        survivors = [m for m in ranked if m.expected_return > -self.risk_free_rate]
        return survivors[:count]

    @staticmethod
    def _allocate_category(category: Category, total_amount: float, percentage: float,
                           picked: Sequence[AssetMetrics]) -> CategoryAllocation:
        category_amount = total_amount * percentage / 100
        floor = ALLOCATION["min_weight_sharpe"]
        weights = [max(floor, m.sharpe_ratio) for m in picked]
        weight_sum = sum(weights)

        assets = {}
        for m, w in zip(picked, weights):
            asset_amount = category_amount * w / weight_sum
            assets[m.symbol] = InstrumentAllocation(
                symbol=m.symbol,
                name=m.name,
                amount=asset_amount,
                percentage=asset_amount / total_amount * 100,
                expected_return=m.expected_return,
                volatility=m.volatility,
                sharpe_ratio=m.sharpe_ratio,
            )

        return CategoryAllocation(
            category=category,
            amount=category_amount,
            percentage=percentage,
            expected_return=sum(m.expected_return for m in picked) / len(picked),
            volatility=math.sqrt(sum(m.volatility ** 2 for m in picked) / len(picked)),
            assets=assets,
        )

    def _portfolio_metrics(self, categories: Iterable[CategoryAllocation]) -> PortfolioMetrics:
        categories = list(categories)
        expected = sum(c.expected_return * c.percentage / 100 for c in categories)
        volatility = math.sqrt(sum((c.volatility * c.percentage / 100) ** 2 for c in categories))
        if volatility == 0:
            raise DegenerateStatisticsError("Portfolio volatility is zero, Sharpe ratio undefined")
        return PortfolioMetrics(
            expected_return=expected,
            volatility=volatility,
            sharpe_ratio=(expected - self.risk_free_rate) / volatility,
        )


# ═══════════════════════════════════════════════════════════════════════════
# Metric gathering
# ═══════════════════════════════════════════════════════════════════════════

def gather_category_metrics(
    selected_categories: Iterable,
    calculator: AssetMetricsCalculator,
    universe: Optional[Mapping[str, Sequence[str]]] = None,
    max_workers: int = MAX_FETCH_WORKERS,
) -> Tuple[Dict[Category, List[AssetMetrics]], List[str]]:
    """
    Metrics for every instrument of the selected categories, fetched
    concurrently. A failing instrument is logged and left out of its
    category; the failures come back as warning strings.

    Returns (ranked metrics per category, warnings).
    """
    universe = universe or AVAILABLE_ASSETS
    jobs: List[Tuple[Category, str]] = []
    for value in selected_categories:
        category = Category.parse(value)
        jobs.extend((category, symbol) for symbol in universe.get(category.value, []))

    def fetch(job):
        category, symbol = job
        try:
            return category, symbol, calculator.metrics_for(symbol), None
        except Exception as e:
            logger.warning(f"  Skipping {symbol} ({category.value}): {e}")
            return category, symbol, None, str(e)

    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as pool:
        results = list(pool.map(fetch, jobs))

    ranked: Dict[Category, List[AssetMetrics]] = {}
    warnings: List[str] = []
    for category, symbol, metrics, error in results:
        ranked.setdefault(category, [])
        if metrics is None:
            warnings.append(f"{symbol}: excluded from {category.value} ({error})")
        else:
            ranked[category].append(metrics)

    for category in ranked:
        ranked[category].sort(key=lambda m: m.sharpe_ratio, reverse=True)
    return ranked, warnings


def optimize_allocation(risk_tolerance: float, amount: float,
                        selected_categories: Iterable,
                        per_category_ranked_metrics: CategoryMetrics) -> PortfolioAllocation:
    return AllocationOptimizer().optimize(
        risk_tolerance, amount, selected_categories, per_category_ranked_metrics
    )
