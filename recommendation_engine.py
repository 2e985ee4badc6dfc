"""
Recommendation Engine
Maps a forecast mean path plus RSI state to Buy / Sell / Hold.

Decision table (first match wins):
    change > +5%  and RSI < 70  → Buy,  confidence min(85, 60 + |change|)
    change < -5%  or  RSI > 70  → Sell, confidence min(85, 60 + |change|)
    otherwise                   → Hold, confidence 70
"""

import logging
from typing import Optional, Sequence

from config import INDICATORS, THRESHOLDS
from errors import InsufficientDataError
from indicators import as_price_array, latest_rsi, moving_average
from models import Action, Recommendation

logger = logging.getLogger(__name__)


class RecommendationEngine:
    """Stateless; recommend(historical, forecast_mean) -> Recommendation."""

    def recommend(self, historical_prices: Sequence[float],
                  forecast_mean: Sequence[float]) -> Recommendation:
        hist = as_price_array(historical_prices, minimum=INDICATORS["rsi_period"] + 1,
                              what="recommendation")
        future = as_price_array(forecast_mean, minimum=1, what="forecast mean")

        last_price = hist[-1]
        price_change = float((future[-1] - last_price) / last_price * 100)
        rsi_now = latest_rsi(hist, INDICATORS["rsi_period"])
        sma_50 = self._context_sma(hist)

        action, confidence, reasoning = self._decide(price_change, rsi_now)
        rec = Recommendation(
            action=action,
            confidence=confidence,
            reasoning=reasoning,
            price_change=price_change,
            rsi=rsi_now,
            sma_50=sma_50,
        )
        logger.info(
            f"Recommendation: {action.value} {confidence:.0f}% "
            f"(change {price_change:+.1f}%, RSI {rsi_now:.1f})"
        )
        return rec

    @staticmethod
    def _context_sma(hist) -> Optional[float]:
        # Reported alongside the decision, never part of it.
        try:
            return float(moving_average(hist, INDICATORS["sma_period"])[-1])
        except InsufficientDataError:
            return None

    @staticmethod
    def _decide(price_change: float, rsi_now: float):
        t = THRESHOLDS
        scaled = min(t["confidence_cap"], t["confidence_base"] + abs(price_change))

        if price_change > t["buy_change_pct"] and rsi_now < t["overbought_rsi"]:
            return (
                Action.BUY, scaled,
                f"Strong upward trend with {price_change:.1f}% projected growth and favorable RSI.",
            )
        if price_change < t["sell_change_pct"] or rsi_now > t["overbought_rsi"]:
            return (
                Action.SELL, scaled,
                f"Bearish indicators with {abs(price_change):.1f}% projected decline "
                f"and overbought conditions.",
            )
        return (
            Action.HOLD, t["hold_confidence"],
            "Market conditions suggest maintaining current position.",
        )


def recommend(historical_prices: Sequence[float],
              forecast_mean: Sequence[float]) -> Recommendation:
    return RecommendationEngine().recommend(historical_prices, forecast_mean)
