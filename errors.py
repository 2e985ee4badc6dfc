"""Error taxonomy for the numeric core.

Series-level errors are fatal for the single request that raised them.
Per-instrument errors (UpstreamFetchError, DegenerateStatisticsError during a
basket fetch) are caught by the allocation pipeline and the instrument is
excluded with a warning.
"""


class PortfolioForecasterError(Exception):
    """Base class for every error raised by this package."""


class InsufficientDataError(PortfolioForecasterError):
    """Price series shorter than a component's minimum window."""

    def __init__(self, required: int, available: int, what: str = "calculation"):
        self.required = required
        self.available = available
        super().__init__(
            f"{what} needs at least {required} prices, got {available}"
        )


class InvalidPriceSeriesError(PortfolioForecasterError):
    """Series contains non-finite or non-positive prices."""


class DegenerateStatisticsError(PortfolioForecasterError):
    """Zero volatility makes the Sharpe ratio undefined."""


class NoViableAssetsError(PortfolioForecasterError):
    """Every candidate instrument was filtered out by the return floor."""


class UpstreamFetchError(PortfolioForecasterError):
    """Market data for an instrument could not be retrieved."""


class SymbolResolutionError(UpstreamFetchError):
    """A free-text query did not match any listed instrument."""
