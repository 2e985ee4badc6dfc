"""
Tests for the bot.py command-line entry point (collaborators patched out).

What we test
------------
main():
  - analyze / optimize dispatch and print a summary, exit code 0.
  - Typed core errors map to exit code 1.
build_parser():
  - Rejects categories outside the closed set.
"""

from __future__ import annotations

import pytest

import bot
from errors import NoViableAssetsError
from models import (
    Action, AssetAnalysis, Category, CategoryAllocation, ForecastResult,
    InstrumentAllocation, PortfolioAllocation, PortfolioMetrics, Recommendation,
)


def _analysis():
    band = tuple([100.0, 110.0])
    forecast = ForecastResult(band, band, band, band, band, band, band)
    rec = Recommendation(Action.BUY, 70.0, "Strong upward trend with 10.0% projected growth.",
                         price_change=10.0, rsi=55.0)
    return AssetAnalysis("ACME", "Acme Corp", 100.0, 1.0, 1.01, (99.0, 100.0), forecast, rec)


def _portfolio():
    asset = InstrumentAllocation("SPY", "S&P 500 ETF", 1_000.0, 100.0, 10.0, 15.0, 0.37)
    category = CategoryAllocation(Category.ETFS, 1_000.0, 100.0, 10.0, 15.0, {"SPY": asset})
    return PortfolioAllocation(3, 1_000.0, {Category.ETFS: category},
                               PortfolioMetrics(10.0, 15.0, 0.37))


def test_analyze_command(monkeypatch, capsys):
    monkeypatch.setattr(bot, "analyze_asset", lambda query, collector, seed=None: _analysis())
    assert bot.main(["analyze", "acme", "--seed", "1"]) == 0
    out = capsys.readouterr().out
    assert "ACME" in out
    assert "BUY" in out


def test_optimize_command(monkeypatch, capsys):
    monkeypatch.setattr(bot, "build_portfolio", lambda *a, **kw: _portfolio())
    assert bot.main(["optimize", "--risk", "50", "--amount", "1000", "--categories", "etfs"]) == 0
    assert "SPY" in capsys.readouterr().out


def test_core_error_exit_code(monkeypatch):
    def fail(*a, **kw):
        raise NoViableAssetsError("nothing viable")
    monkeypatch.setattr(bot, "build_portfolio", fail)
    assert bot.main(["optimize", "--risk", "50", "--amount", "1000"]) == 1


def test_parser_rejects_unknown_category():
    with pytest.raises(SystemExit):
        bot.build_parser().parse_args(["optimize", "--risk", "5", "--amount", "1", "--categories", "gold"])
