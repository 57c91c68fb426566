# backend/fincatch/services/analytics/__init__.py
"""
Analytics Service Package.

This package compares portfolio performance against benchmarks:

Architecture:
    analytics/
    ├── __init__.py              # This file - package exports
    └── benchmark.py             # BenchmarkComparator, DEFAULT_BENCHMARKS

Usage:
    from fincatch.services.analytics import BenchmarkComparator, DEFAULT_BENCHMARKS

    comparator = BenchmarkComparator(provider, history_calculator)
    comparison = await comparator.compare(entries, DEFAULT_BENCHMARKS["SPY"], start, end, "USD")
"""

from fincatch.services.analytics.benchmark import (
    DEFAULT_BENCHMARKS,
    BenchmarkComparator,
    BenchmarkOption,
    series_return,
)

__all__ = [
    "BenchmarkComparator",
    "BenchmarkOption",
    "DEFAULT_BENCHMARKS",
    "series_return",
]
