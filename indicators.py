"""
Technical Indicator Library

Stateless functions over a chronological closing-price sequence:
  moving_average            — trailing simple mean
  exponential_moving_average — k = 2/(period+1), seeded with the first price
  rsi                       — Wilder-smoothed Relative Strength Index

Every function copies its input into a float numpy array; the caller's
sequence is never mutated. Windows longer than the series raise
InsufficientDataError instead of returning an empty result.
"""

import logging
from typing import Optional, Sequence
from dataclasses import dataclass

import numpy as np
import pandas as pd

from config import INDICATORS
from errors import InsufficientDataError, InvalidPriceSeriesError
from models import IndicatorSet

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndicatorParams:
    sma_period: int = INDICATORS["sma_period"]
    ema_period: int = INDICATORS["ema_period"]
    rsi_period: int = INDICATORS["rsi_period"]


def as_price_array(prices: Sequence[float], minimum: int = 2,
                   what: str = "calculation") -> np.ndarray:
    """Validate a price sequence and return it as a fresh float array."""
    arr = np.array(prices, dtype=float).ravel()
    if len(arr) < minimum:
        raise InsufficientDataError(minimum, len(arr), what)
    if not np.all(np.isfinite(arr)):
        raise InvalidPriceSeriesError(f"{what}: price series contains NaN or infinite values")
    if np.any(arr <= 0):
        raise InvalidPriceSeriesError(f"{what}: price series contains non-positive prices")
    return arr


def _check_period(period: int):
    if int(period) < 1:
        raise ValueError(f"period must be a positive integer, got {period}")


def moving_average(prices: Sequence[float], period: int) -> np.ndarray:
    """Trailing simple moving average, length len(prices) - period + 1."""
    _check_period(period)
    arr = as_price_array(prices, minimum=max(period, 1), what=f"SMA({period})")
    sma = pd.Series(arr).rolling(period).mean().to_numpy()
    return sma[period - 1:]


def exponential_moving_average(prices: Sequence[float], period: int) -> np.ndarray:
    """EMA of the same length as the input; the first value is the first price."""
    _check_period(period)
    arr = as_price_array(prices, minimum=1, what=f"EMA({period})")
    return pd.Series(arr).ewm(span=period, adjust=False).mean().to_numpy()


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    # Saturate instead of dividing by zero: no losses → 100, flat series → 50.
    if avg_loss == 0:
        return 100.0 if avg_gain > 0 else 50.0
    rs = avg_gain / avg_loss
    return 100.0 - (100.0 / (1.0 + rs))


def rsi(prices: Sequence[float], period: int = INDICATORS["rsi_period"]) -> np.ndarray:
    """
    Wilder-smoothed RSI series, length len(prices) - period.

    Seed averages are the simple mean of the first `period` changes; each
    later step applies avg = (prev * (period - 1) + current) / period.
    Output is always within [0, 100].
    """
    _check_period(period)
    arr = as_price_array(prices, minimum=period + 1, what=f"RSI({period})")

    delta = np.diff(arr)
    gains = np.where(delta > 0, delta, 0.0)
    losses = np.where(delta < 0, -delta, 0.0)

    avg_gain = gains[:period].mean()
    avg_loss = losses[:period].mean()

    out = np.empty(len(delta) - period + 1)
    out[0] = _rsi_value(avg_gain, avg_loss)
    for i in range(period, len(delta)):
        avg_gain = (avg_gain * (period - 1) + gains[i]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i]) / period
        out[i - period + 1] = _rsi_value(avg_gain, avg_loss)

    return np.clip(out, 0.0, 100.0)


def latest_rsi(prices: Sequence[float], period: int = INDICATORS["rsi_period"]) -> float:
    return float(rsi(prices, period)[-1])


def compute_indicators(prices: Sequence[float],
                       params: Optional[IndicatorParams] = None) -> IndicatorSet:
    """SMA, EMA and RSI for one series with the given (or default) windows."""
    params = params or IndicatorParams()
    arr = as_price_array(prices, what="indicators")
    result = IndicatorSet(
        sma=moving_average(arr, params.sma_period),
        ema=exponential_moving_average(arr, params.ema_period),
        rsi=rsi(arr, params.rsi_period),
    )
    logger.debug(
        f"Indicators over {len(arr)} prices: SMA{params.sma_period}={result.sma[-1]:.2f} "
        f"EMA{params.ema_period}={result.ema[-1]:.2f} RSI={result.latest_rsi:.1f}"
    )
    return result
