# backend/fincatch/services/market_data/__init__.py
"""
Market data services package.

This package contains:
- Abstract interface for market data providers (base.py)
- Fin-Catch data API implementation over httpx (http_provider.py)

Usage:
    from fincatch.services.market_data import (
        MarketDataProvider,
        FinCatchDataProvider,
    )

Architecture:
    MarketDataProvider (ABC)
    └── FinCatchDataProvider (concrete)
"""

from fincatch.services.market_data.base import MarketDataProvider
from fincatch.services.market_data.http_provider import FinCatchDataProvider

__all__ = [
    "MarketDataProvider",
    "FinCatchDataProvider",
]
