# backend/fincatch/services/valuation/__init__.py
"""
Valuation Service Package.

This package provides the valuation engine:
- Current performance of a set of holdings (PerformanceService)
- Base-100 history for the portfolio and each holding (HistoryCalculator)
- Bond present value (BondPricer)
- Unit normalization for gold quantities and prices (units)

Usage:
    from fincatch.services.valuation import (
        EntryPricer,
        HistoryCalculator,
        PerformanceService,
    )

    pricer = EntryPricer.default(provider)
    performance = await PerformanceService(fx_service, pricer).calculate(entries, "USD")
    series = await HistoryCalculator(fx_service, pricer).build(entries, start, end, "USD")

Architecture:
    valuation/
    ├── __init__.py              # This file - package exports
    ├── types.py                 # Internal data classes
    ├── units.py                 # Gold unit conversions
    ├── bond_pricer.py           # Present-value bond pricing
    ├── pricing.py               # Per-asset pricing strategies
    ├── history_calculator.py    # Time series builder
    └── service.py               # PerformanceService (orchestrator)

Data Flow:
    Entry → EntryPricer → PriceQuote (native currency)
    PriceQuote + FXRateService → display currency
    Entry + units → base quantity and base purchase price
    All Above (+ coupons) → EntryPerformance → PortfolioPerformance
"""

from fincatch.services.valuation.bond_pricer import BondPricer
from fincatch.services.valuation.history_calculator import HistoryCalculator
from fincatch.services.valuation.pricing import (
    BondPricingStrategy,
    EntryPricer,
    GoldPricingStrategy,
    PricingStrategy,
    StockPricingStrategy,
)
from fincatch.services.valuation.service import FailurePolicy, PerformanceService
from fincatch.services.valuation.types import (
    BenchmarkComparison,
    EntryFailure,
    EntryPerformance,
    HoldingSeries,
    HoldingsPerformance,
    PerformanceSeries,
    PortfolioPerformance,
    PriceQuote,
    SeriesPoint,
)

__all__ = [
    # Services
    "PerformanceService",
    "FailurePolicy",
    "HistoryCalculator",
    # Pricing
    "BondPricer",
    "EntryPricer",
    "PricingStrategy",
    "StockPricingStrategy",
    "GoldPricingStrategy",
    "BondPricingStrategy",
    # Types
    "PriceQuote",
    "EntryFailure",
    "EntryPerformance",
    "PortfolioPerformance",
    "SeriesPoint",
    "PerformanceSeries",
    "HoldingSeries",
    "HoldingsPerformance",
    "BenchmarkComparison",
]
