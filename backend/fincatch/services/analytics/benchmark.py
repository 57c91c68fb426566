# backend/fincatch/services/analytics/benchmark.py
"""
Benchmark comparison for the performance charts.

Puts the portfolio's base-100 series next to a benchmark instrument's own
base-100 series over the same date range:

    benchmark value_i   = close_i × price_scale / (close_0 × price_scale) × 100
    portfolio_return    = last portfolio value − 100
    benchmark_return    = last benchmark value − 100
    outperformance      = portfolio_return − benchmark_return

The benchmark is not currency-converted: a ratio of prices in one currency
is already currency-free.

When either series is empty there is nothing to compare and `compare`
returns None. Callers must show "insufficient data", not a zero return.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from fincatch.services.constants import BASE_INDEX, DAILY_RESOLUTION, DEFAULT_BENCHMARK_SOURCE
from fincatch.services.valuation.types import BenchmarkComparison, SeriesPoint
from fincatch.utils.context import fetch_cycle

if TYPE_CHECKING:
    from fincatch.services.protocols import MarketDataProviderProtocol
    from fincatch.services.valuation.history_calculator import HistoryCalculator
    from fincatch.services.valuation.types import Entry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BenchmarkOption:
    """An instrument the portfolio can be compared against."""

    id: str
    name: str
    symbol: str
    description: str
    source: str = DEFAULT_BENCHMARK_SOURCE


DEFAULT_BENCHMARKS: dict[str, BenchmarkOption] = {
    option.id: option
    for option in (
        BenchmarkOption("SPY", "S&P 500", "SPY", "U.S. Large Cap Stocks"),
        BenchmarkOption("QQQ", "NASDAQ-100", "QQQ", "U.S. Tech & Growth Stocks"),
        BenchmarkOption("VTI", "Total Market", "VTI", "Total U.S. Stock Market"),
        BenchmarkOption("VNM", "Vietnam Market", "VNM", "Vietnam Stock Market"),
        BenchmarkOption("GOLD", "Gold", "GC=F", "Gold Futures"),
    )
}


def series_return(points: list[SeriesPoint]) -> float:
    """Return of a base-100 series: last value − 100 (0 when empty)."""
    return points[-1].value - BASE_INDEX if points else 0.0


class BenchmarkComparator:
    """
    Compares a portfolio against a benchmark instrument.

    Usage:
        comparator = BenchmarkComparator(provider, history_calculator)
        comparison = await comparator.compare(
            entries, DEFAULT_BENCHMARKS["SPY"], start, end, "USD"
        )
        if comparison is None:
            ...  # insufficient data
    """

    def __init__(
            self,
            provider: MarketDataProviderProtocol,
            history: HistoryCalculator,
    ) -> None:
        self.provider = provider
        self.history = history

    async def benchmark_series(
            self,
            benchmark: BenchmarkOption,
            start: int,
            end: int,
    ) -> list[SeriesPoint]:
        """
        The benchmark's daily closes over [start, end], normalized to 100 at
        its first candle.

        Returns:
            Normalized points; empty when the fetch failed or returned nothing
        """
        try:
            response = await self.provider.fetch_stock_history(
                benchmark.symbol, start, end,
                resolution=DAILY_RESOLUTION, source=benchmark.source,
            )
        except Exception as e:
            logger.error(f"Failed to fetch benchmark data for {benchmark.symbol}: {e}")
            return []

        if not response.is_ok:
            logger.error(
                f"Failed to fetch benchmark data for {benchmark.symbol}: {response.error}"
            )
            return []
        if not response.candles:
            return []

        scale = response.price_scale
        first_price = response.candles[0].close * scale
        if first_price <= 0:
            logger.warning(f"Benchmark {benchmark.symbol} starts at a non-positive price")
            return []

        return [
            SeriesPoint(
                timestamp=candle.timestamp,
                value=candle.close * scale / first_price * BASE_INDEX,
            )
            for candle in response.candles
        ]

    async def compare(
            self,
            entries: list[Entry],
            benchmark: BenchmarkOption,
            start: int,
            end: int,
            display_currency: str,
    ) -> BenchmarkComparison | None:
        """
        Portfolio vs benchmark over [start, end].

        Returns:
            BenchmarkComparison, or None when either series is empty
        """
        with fetch_cycle("bench"):
            portfolio = await self.history.build(entries, start, end, display_currency)
            benchmark_points = await self.benchmark_series(benchmark, start, end)

            return self.combine(
                portfolio.points, benchmark_points, benchmark.name,
                start, end, display_currency.upper(),
            )

    @staticmethod
    def combine(
            portfolio_points: list[SeriesPoint],
            benchmark_points: list[SeriesPoint],
            benchmark_name: str,
            start: int,
            end: int,
            currency: str,
    ) -> BenchmarkComparison | None:
        """Assemble the comparison from two base-100 series; None if either is empty."""
        if not portfolio_points or not benchmark_points:
            logger.info("Insufficient data for benchmark comparison")
            return None

        portfolio_return = series_return(portfolio_points)
        benchmark_return = series_return(benchmark_points)

        return BenchmarkComparison(
            portfolio_series=portfolio_points,
            benchmark_series=benchmark_points,
            benchmark_name=benchmark_name,
            start_date=start,
            end_date=end,
            currency=currency,
            portfolio_return=portfolio_return,
            benchmark_return=benchmark_return,
            outperformance=portfolio_return - benchmark_return,
        )
