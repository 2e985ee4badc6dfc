"""
Forecast Engine — Monte Carlo price paths with nested confidence bands

How it works:
─────────────
1. Historical log returns give the drift (mean) and volatility (population std).
2. EMA(12) vs EMA(26) gives a trend strength; RSI(14) distance from 50 gives
   a mean-reversion nudge. Both tilt the drift with fixed weights:
       adjusted = drift + 0.1 * trend - 0.05 * (rsi - 50) / 100
3. Every path starts at the last known price. Each day draws u ~ U[-1, 1],
   forms adjusted + volatility * u, damps it by max(0, 1 - day / (2 * horizon))
   and compounds with exp().
4. For each day the cross-path distribution is sorted; the mean and the
   5/10/25/75/90/95% order statistics (floor index, no interpolation) become
   the forecast and its 90/80/50% bands.

The path grid is generated as one (paths x days) numpy array, so paths are
independent by construction and aggregation only happens once the grid is
complete. Randomness comes from an injected numpy Generator; pass a seed
for reproducible output.
"""

import logging
import math
from typing import Optional, Sequence

import numpy as np

from config import FORECAST
from indicators import as_price_array, exponential_moving_average, latest_rsi
from models import ForecastResult

logger = logging.getLogger(__name__)


class ForecastEngine:
    """
    Simple interface:
        run(prices) -> ForecastResult
    """

    def __init__(self,
                 rng: Optional[np.random.Generator] = None,
                 seed: Optional[int] = None,
                 num_simulations: int = FORECAST["num_simulations"],
                 forecast_days: int = FORECAST["forecast_days"]):
        if num_simulations < 1 or forecast_days < 1:
            raise ValueError("num_simulations and forecast_days must be positive")
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.num_simulations = num_simulations
        self.forecast_days = forecast_days

    # ── Public Interface ────────────────────────────────────────────────

    def run(self, prices: Sequence[float]) -> ForecastResult:
        arr = as_price_array(prices, minimum=FORECAST["rsi_period"] + 1, what="forecast")
        drift, volatility = self._return_stats(arr)
        adjusted = self._adjusted_return(arr, drift)

        paths = self._simulate(arr[-1], adjusted, volatility)
        result = self._summarize(paths)

        logger.info(
            f"Forecast: {self.num_simulations} paths x {self.forecast_days}d, "
            f"drift {drift:.5f} → {adjusted:.5f}, vol {volatility:.5f}, "
            f"day {self.forecast_days} mean {result.final_price:.2f}"
        )
        return result

    # ── Internal ────────────────────────────────────────────────────────

    @staticmethod
    def _return_stats(arr: np.ndarray):
        returns = np.log(arr[1:] / arr[:-1])
        return float(returns.mean()), float(returns.std())

    @staticmethod
    def _adjusted_return(arr: np.ndarray, drift: float) -> float:
        short_ema = exponential_moving_average(arr, FORECAST["short_ema"])[-1]
        long_ema = exponential_moving_average(arr, FORECAST["long_ema"])[-1]
        last_rsi = latest_rsi(arr, FORECAST["rsi_period"])

        trend_strength = (short_ema - long_ema) / long_ema
        rsi_adjustment = (last_rsi - 50) / 100
        return float(
            drift
            + trend_strength * FORECAST["trend_weight"]
            - rsi_adjustment * FORECAST["rsi_weight"]
        )

    def _simulate(self, last_price: float, adjusted: float, volatility: float) -> np.ndarray:
        """(num_simulations, forecast_days + 1) price grid, column 0 = last price."""
        n, days = self.num_simulations, self.forecast_days
        draws = self.rng.uniform(-1.0, 1.0, size=(n, days))
        day = np.arange(1, days + 1)
        damping = np.maximum(0.0, 1.0 - day / (days * 2))

        log_steps = (adjusted + volatility * draws) * damping
        paths = np.empty((n, days + 1))
        paths[:, 0] = last_price
        paths[:, 1:] = last_price * np.exp(np.cumsum(log_steps, axis=1))
        return paths

    def _summarize(self, paths: np.ndarray) -> ForecastResult:
        n = paths.shape[0]
        ordered = np.sort(paths, axis=0)

        bands = {}
        for label, q in FORECAST["quantiles"].items():
            idx = min(int(math.floor(n * q)), n - 1)
            bands[label] = ordered[idx]

        # The arithmetic mean is not an order statistic; keep it inside the
        # 50% band so the nesting lower90 <= ... <= upper90 always holds.
        mean = np.clip(paths.mean(axis=0), bands["lower_ci50"], bands["upper_ci50"])

        return ForecastResult(
            mean=tuple(float(x) for x in mean),
            **{label: tuple(float(x) for x in values) for label, values in bands.items()},
        )


def run_forecast(prices: Sequence[float],
                 seed: Optional[int] = None,
                 rng: Optional[np.random.Generator] = None) -> ForecastResult:
    """One forecast with a fresh generator (seeded when `seed` is given)."""
    return ForecastEngine(rng=rng, seed=seed).run(prices)
