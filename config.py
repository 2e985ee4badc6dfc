"""
Configuration for Portfolio Forecaster
Centralized configuration, easy to modify.

Key settings:
- Annualization and risk-free rate used by every metric
- Monte Carlo forecast shape (paths, horizon, trend weights)
- Risk-bucket allocation tables and per-category pick rules
- Instrument universe per asset category
"""
import os

from dotenv import load_dotenv

load_dotenv()

# ── Market assumptions ──────────────────────────────────────────────────────
RISK_FREE_RATE = float(os.getenv("RISK_FREE_RATE", "4.5"))   # % (10y Treasury)
TRADING_DAYS = 252

# ── Data ────────────────────────────────────────────────────────────────────
DATA_PROVIDER = "yfinance"
HISTORICAL_DAYS = 365          # metrics lookback (1y)
ASSET_LOOKBACK_DAYS = 180      # single-asset forecast lookback
CACHE_TIMEOUT_MINUTES = int(os.getenv("CACHE_TIMEOUT_MINUTES", "60"))
MAX_FETCH_WORKERS = int(os.getenv("MAX_FETCH_WORKERS", "8"))

# Benchmarks for the market overview (normalized to 100 at the first month)
BENCHMARKS = {
    "sp500": "^GSPC",
    "nasdaq": "^IXIC",
}
OVERVIEW_MONTHS = 6

# ── Technical Indicators ────────────────────────────────────────────────────
INDICATORS = {
    "sma_period": 50,
    "ema_period": 12,
    "rsi_period": 14,
}

# ── Forecast ────────────────────────────────────────────────────────────────
# Heuristic blend weights are fixed design constants, not calibrated.
FORECAST = {
    "num_simulations": 1000,
    "forecast_days": 90,
    "short_ema": 12,
    "long_ema": 26,
    "rsi_period": 14,
    "trend_weight": 0.1,
    "rsi_weight": 0.05,
    # (label, quantile) pairs picked by floor index from the sorted paths
    "quantiles": {
        "upper_ci90": 0.95,
        "upper_ci80": 0.90,
        "upper_ci50": 0.75,
        "lower_ci50": 0.25,
        "lower_ci80": 0.10,
        "lower_ci90": 0.05,
    },
}

# ── Recommendation ──────────────────────────────────────────────────────────
THRESHOLDS = {
    "buy_change_pct": 5.0,
    "sell_change_pct": -5.0,
    "overbought_rsi": 70.0,
    "confidence_base": 60.0,
    "confidence_cap": 85.0,
    "hold_confidence": 70.0,
}

# ── Allocation ──────────────────────────────────────────────────────────────
# Upper-inclusive risk tolerance breakpoints → risk score 1..5
RISK_BREAKPOINTS = [20, 40, 60, 80]

# Category percentages per risk score
BASE_ALLOCATIONS = {
    1: {"stocks": 20, "bonds": 50, "crypto": 0, "mutual_funds": 15, "emerging_markets": 5, "etfs": 10},
    2: {"stocks": 30, "bonds": 40, "crypto": 0, "mutual_funds": 15, "emerging_markets": 5, "etfs": 10},
    3: {"stocks": 40, "bonds": 25, "crypto": 5, "mutual_funds": 15, "emerging_markets": 5, "etfs": 10},
    4: {"stocks": 50, "bonds": 15, "crypto": 10, "mutual_funds": 10, "emerging_markets": 5, "etfs": 10},
    5: {"stocks": 60, "bonds": 5, "crypto": 15, "mutual_funds": 5, "emerging_markets": 5, "etfs": 10},
}

# Used when every bond instrument has a negative expected return
NO_BOND_ALLOCATIONS = {
    1: {"stocks": 35, "bonds": 0, "crypto": 0, "mutual_funds": 40, "emerging_markets": 10, "etfs": 15},
    2: {"stocks": 45, "bonds": 0, "crypto": 0, "mutual_funds": 35, "emerging_markets": 10, "etfs": 10},
    3: {"stocks": 50, "bonds": 0, "crypto": 10, "mutual_funds": 25, "emerging_markets": 5, "etfs": 10},
    4: {"stocks": 55, "bonds": 0, "crypto": 15, "mutual_funds": 15, "emerging_markets": 5, "etfs": 10},
    5: {"stocks": 65, "bonds": 0, "crypto": 15, "mutual_funds": 10, "emerging_markets": 5, "etfs": 5},
}

ALLOCATION = {
    "default_pick_count": 2,
    "stocks_pick_bonus": 2,        # stocks: risk_score + 2
    "min_weight_sharpe": 0.1,      # floor on per-instrument Sharpe weight
    # False keeps a non-viable category's capital unallocated (reported);
    # True spreads it over the viable categories instead.
    "redistribute_dropped": os.getenv("REDISTRIBUTE_DROPPED", "false").lower() == "true",
}

# ── Universe ────────────────────────────────────────────────────────────────
# yfinance ticker format
AVAILABLE_ASSETS = {
    "stocks": ["AAPL", "MSFT", "GOOGL", "AMZN", "NVDA", "META", "TSLA", "BRK-B", "JPM", "V"],
    "bonds": ["AGG", "BND", "TLT", "IEF", "SHY"],
    "crypto": ["BTC-USD", "ETH-USD", "SOL-USD", "ADA-USD"],
    "mutual_funds": ["VFIAX", "VTSAX", "VBTLX", "VTIAX"],
    "emerging_markets": ["VWO", "IEMG", "EEM", "SCHE"],
    "etfs": ["SPY", "QQQ", "VTI", "IVV", "VOO"],
}

# ── Logging ─────────────────────────────────────────────────────────────────
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
