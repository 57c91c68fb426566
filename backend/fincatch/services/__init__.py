# backend/fincatch/services/__init__.py
"""
Service layer of the valuation engine.

Services:
- Have NO knowledge of transports (no httpx outside market_data/)
- Raise domain-specific exceptions
- Receive their collaborators (provider, FX service, clock) via constructor
- Are easily testable via dependency injection

Usage:
    from fincatch.services import FXRateService, PerformanceService
    from fincatch.services import (
        RateUnavailableError,
        PriceUnavailableError,
    )

Architecture:
    services/
    ├── __init__.py                  # This file - main exports
    ├── exceptions.py                # Domain exceptions
    ├── constants.py                 # Currency, unit and bond constants
    ├── protocols.py                 # Collaborator interfaces (Protocol classes)
    ├── fx_rate_service.py           # Exchange rates through the VND pivot
    ├── coupon_payments.py           # Coupon payment store
    ├── cancellation.py              # Last-request-wins fetch cycles
    ├── analytics/                   # Benchmark comparison
    │   └── benchmark.py
    ├── market_data/                 # Market data package
    │   ├── base.py                  # Abstract provider interface
    │   └── http_provider.py         # Fin-Catch data API over httpx
    └── valuation/                   # Valuation engine
        ├── service.py               # PerformanceService (current valuation)
        ├── history_calculator.py    # Base-100 series
        ├── pricing.py               # Per-asset pricing strategies
        ├── bond_pricer.py           # Bond present value
        ├── units.py                 # Gold unit normalization
        └── types.py                 # Result data classes
"""

# Benchmark comparison
from fincatch.services.analytics import (
    DEFAULT_BENCHMARKS,
    BenchmarkComparator,
    BenchmarkOption,
)
# Cancellation
from fincatch.services.cancellation import LatestRequestRunner
# Coupon payments
from fincatch.services.coupon_payments import (
    CouponPaymentRepository,
    CouponPaymentUpdateResult,
)
# Exceptions
from fincatch.services.exceptions import (
    BondError,
    CouponPaymentNotFoundError,
    FXRateError,
    InvalidBondParametersError,
    MarketDataError,
    PriceUnavailableError,
    ProviderUnavailableError,
    RateLimitError,
    RateUnavailableError,
    ServiceError,
    UnsupportedGoldSourceError,
    UnsupportedUnitError,
    ValidationError,
)
# FX rates
from fincatch.services.fx_rate_service import (
    CachedRate,
    ExchangeRateCache,
    FXRateService,
    format_currency,
    is_supported_currency,
)
# Market data providers
from fincatch.services.market_data import (
    FinCatchDataProvider,
    MarketDataProvider,
)
# Valuation engine
from fincatch.services.valuation import (
    BondPricer,
    EntryPricer,
    FailurePolicy,
    HistoryCalculator,
    PerformanceService,
)

__all__ = [
    # FX rates
    "FXRateService",
    "ExchangeRateCache",
    "CachedRate",
    "format_currency",
    "is_supported_currency",
    # Market data
    "MarketDataProvider",
    "FinCatchDataProvider",
    # Valuation
    "PerformanceService",
    "FailurePolicy",
    "HistoryCalculator",
    "EntryPricer",
    "BondPricer",
    # Benchmarks
    "BenchmarkComparator",
    "BenchmarkOption",
    "DEFAULT_BENCHMARKS",
    # Coupons
    "CouponPaymentRepository",
    "CouponPaymentUpdateResult",
    # Cancellation
    "LatestRequestRunner",

    # ==========================================================================
    # Exceptions
    # ==========================================================================
    "ServiceError",
    "ValidationError",
    "UnsupportedUnitError",
    "MarketDataError",
    "ProviderUnavailableError",
    "RateLimitError",
    "PriceUnavailableError",
    "UnsupportedGoldSourceError",
    "FXRateError",
    "RateUnavailableError",
    "BondError",
    "InvalidBondParametersError",
    "CouponPaymentNotFoundError",
]
