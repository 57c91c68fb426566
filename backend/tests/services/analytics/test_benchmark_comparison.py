# backend/tests/services/analytics/test_benchmark_comparison.py
"""
Tests for benchmark comparison.

All tests use known values that can be verified by hand.
"""

import pytest

from fincatch.services.analytics import (
    DEFAULT_BENCHMARKS,
    BenchmarkComparator,
    series_return,
)
from fincatch.services.valuation.types import SeriesPoint
from tests.conftest import DAY, NOW, make_stock

START = NOW - 2 * DAY
SAMPLES = [START, START + DAY, NOW]
SPY = DEFAULT_BENCHMARKS["SPY"]


@pytest.fixture
def comparator(provider, history_calculator):
    return BenchmarkComparator(provider, history_calculator)


class TestBenchmarkSeries:

    async def test_normalized_to_first_close(self, comparator, provider):
        provider.set_stock_series("SPY", list(zip(SAMPLES, [400.0, 420.0, 440.0])))

        points = await comparator.benchmark_series(SPY, START, NOW)

        assert [p.timestamp for p in points] == SAMPLES
        assert [p.value for p in points] == pytest.approx([100.0, 105.0, 110.0])

    async def test_requests_whole_range_once(self, comparator, provider):
        provider.set_stock_price("SPY", 400.0)

        await comparator.benchmark_series(SPY, START, NOW)

        assert provider.calls_for("stock") == [("stock", "SPY", START, NOW)]

    async def test_price_scale_cancels_out(self, comparator, provider):
        provider.set_stock_series("SPY", [(START, 4.0), (NOW, 5.0)], price_scale=100)

        points = await comparator.benchmark_series(SPY, START, NOW)

        assert points[-1].value == pytest.approx(125.0)

    async def test_error_gives_empty_series(self, comparator, provider):
        provider.set_error("SPY")
        assert await comparator.benchmark_series(SPY, START, NOW) == []

    async def test_non_positive_first_price_gives_empty_series(self, comparator, provider):
        provider.set_stock_series("SPY", [(START, 0.0), (NOW, 10.0)])
        assert await comparator.benchmark_series(SPY, START, NOW) == []


class TestCompare:

    async def test_returns_and_outperformance(self, comparator, provider):
        provider.set_stock_series("AAPL", list(zip(SAMPLES, [100.0, 110.0, 115.0])))
        provider.set_stock_series("SPY", list(zip(SAMPLES, [400.0, 420.0, 440.0])))

        comparison = await comparator.compare([make_stock()], SPY, START, NOW, "usd")

        assert comparison.benchmark_name == "S&P 500"
        assert comparison.currency == "USD"
        assert comparison.start_date == START
        assert comparison.end_date == NOW
        assert comparison.portfolio_return == pytest.approx(15.0)
        assert comparison.benchmark_return == pytest.approx(10.0)
        assert comparison.outperformance == pytest.approx(5.0)

    async def test_no_benchmark_data_returns_none(self, comparator, provider):
        provider.set_stock_price("AAPL", 100.0)

        assert await comparator.compare([make_stock()], SPY, START, NOW, "USD") is None

    async def test_empty_range_returns_none(self, comparator, provider):
        provider.set_stock_price("SPY", 400.0)

        assert await comparator.compare([make_stock()], SPY, NOW, START, "USD") is None


class TestHelpers:

    def test_series_return(self):
        points = [SeriesPoint(1, 100.0), SeriesPoint(2, 93.5)]
        assert series_return(points) == pytest.approx(-6.5)
        assert series_return([]) == 0.0

    def test_combine_requires_both_series(self):
        points = [SeriesPoint(1, 100.0)]
        assert BenchmarkComparator.combine(points, [], "SPY", 1, 2, "USD") is None
        assert BenchmarkComparator.combine([], points, "SPY", 1, 2, "USD") is None

    def test_default_benchmarks(self):
        assert set(DEFAULT_BENCHMARKS) == {"SPY", "QQQ", "VTI", "VNM", "GOLD"}
        assert DEFAULT_BENCHMARKS["GOLD"].symbol == "GC=F"
