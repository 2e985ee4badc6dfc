"""
Portfolio Forecaster — command-line entry point

    python bot.py analyze AAPL --seed 7
    python bot.py optimize --risk 55 --amount 10000 --categories stocks bonds etfs
    python bot.py overview
"""

import argparse
import logging
import sys

from config import LOG_LEVEL, LOG_FORMAT
from analyzer import analyze_asset, build_portfolio
from data_collector import DataCollector
from errors import PortfolioForecasterError
from models import Category

logging.basicConfig(
    level=LOG_LEVEL,
    format=LOG_FORMAT,
    handlers=[logging.StreamHandler()],
)
logger = logging.getLogger(__name__)

WIDTH = 78


def _print_analysis(analysis):
    rec = analysis.recommendation
    fc = analysis.forecast
    print("=" * WIDTH)
    print(f"  {analysis.symbol} — {analysis.name}")
    print("=" * WIDTH)
    print(f"  Price:          ${analysis.current_price:,.2f} "
          f"({analysis.price_change:+.2f}, {analysis.price_change_pct:+.2f}%)")
    print(f"  {fc.horizon}d forecast:  ${fc.final_price:,.2f}")
    print(f"  50% band:       ${fc.lower_ci50[-1]:,.2f} – ${fc.upper_ci50[-1]:,.2f}")
    print(f"  90% band:       ${fc.lower_ci90[-1]:,.2f} – ${fc.upper_ci90[-1]:,.2f}")
    print(f"  RSI:            {rec.rsi:.1f}")
    print(f"  Recommendation: {rec.action.value.upper()} ({rec.confidence:.0f}%)")
    print(f"  {rec.reasoning}")


def _print_portfolio(result):
    print("=" * WIDTH)
    print(f"  Portfolio — risk score {result.risk_score}, ${result.amount:,.2f}")
    print("=" * WIDTH)
    for category, alloc in result.allocation.items():
        print(f"  {category.value:18s} {alloc.percentage:6.2f}%  ${alloc.amount:>12,.2f}  "
              f"ret {alloc.expected_return:6.2f}%  vol {alloc.volatility:6.2f}%")
        for symbol, asset in alloc.assets.items():
            print(f"      {symbol:10s} {asset.percentage:6.2f}%  ${asset.amount:>12,.2f}  "
                  f"sharpe {asset.sharpe_ratio:5.2f}  {asset.name}")
    m = result.metrics
    print("-" * WIDTH)
    print(f"  Expected return {m.expected_return:.2f}% | volatility {m.volatility:.2f}% "
          f"| Sharpe {m.sharpe_ratio:.2f}")
    if result.unallocated_amount > 0:
        print(f"  Unallocated: ${result.unallocated_amount:,.2f}")
    for warning in result.warnings:
        print(f"  ! {warning}")


def _print_overview(overview):
    for name, points in overview.items():
        print(f"  {name}:")
        for month, level in points:
            print(f"      {month}  {level:7.2f}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Forecasts and risk-based allocations")
    sub = parser.add_subparsers(dest="command", required=True)

    p_analyze = sub.add_parser("analyze", help="Forecast and recommend for one asset")
    p_analyze.add_argument("query", help="Ticker or company name")
    p_analyze.add_argument("--seed", type=int, default=None)

    p_opt = sub.add_parser("optimize", help="Build a risk-based allocation")
    p_opt.add_argument("--risk", type=float, required=True, help="Risk tolerance 0-100")
    p_opt.add_argument("--amount", type=float, required=True)
    p_opt.add_argument("--categories", nargs="+", default=[c.value for c in Category],
                       choices=[c.value for c in Category])
    p_opt.add_argument("--redistribute", action="store_true",
                       help="Spread capital of categories without viable assets")

    sub.add_parser("overview", help="Normalized S&P 500 / NASDAQ monthly levels")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    collector = DataCollector()
    try:
        if args.command == "analyze":
            _print_analysis(analyze_asset(args.query, collector, seed=args.seed))
        elif args.command == "optimize":
            _print_portfolio(build_portfolio(
                args.risk, args.amount, args.categories, collector,
                redistribute_dropped=args.redistribute or None,
            ))
        else:
            _print_overview(collector.get_market_overview())
    except (PortfolioForecasterError, ValueError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
