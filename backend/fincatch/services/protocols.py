# backend/fincatch/services/protocols.py
"""
Protocol interfaces for service dependency injection.

Using typing.Protocol enables structural subtyping:
- The HTTP provider and test fakes satisfy protocols without inheritance
- Clocks can be swapped for deterministic cache and bond tests
- Clear documentation of the collaborators the engine consumes
"""

from __future__ import annotations

import time
from typing import Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from fincatch.schemas.market_data import (
        ExchangeRateResponse,
        GoldPriceResponse,
        StockHistoryResponse,
    )
    from fincatch.schemas.portfolio import BondCouponPayment


class MarketDataProviderProtocol(Protocol):
    """Interface required by the pricing strategies and FXRateService."""

    async def fetch_stock_history(
        self,
        symbol: str,
        from_: int,
        to: int,
        resolution: str = "1D",
        source: str | None = None,
    ) -> StockHistoryResponse:
        ...

    async def fetch_gold_price(
        self,
        gold_price_id: str,
        from_: int,
        to: int,
        source: str | None = None,
    ) -> GoldPriceResponse:
        ...

    async def fetch_exchange_rate(
        self,
        currency_code: str,
        from_: int,
        to: int,
    ) -> ExchangeRateResponse:
        ...


class FXRateServiceProtocol(Protocol):
    """Interface required by PerformanceService and HistoryCalculator."""

    async def get_exchange_rate(
        self,
        from_currency: str,
        to_currency: str,
        as_of: int | None = None,
    ) -> float:
        ...

    async def convert_currency(
        self,
        amount: float,
        from_currency: str,
        to_currency: str,
        as_of: int | None = None,
    ) -> float:
        ...


class CouponPaymentSource(Protocol):
    """Interface required by PerformanceService to read realized coupons."""

    async def list_coupon_payments(self, entry_id: str) -> list[BondCouponPayment]:
        ...


class Clock(Protocol):
    """Source of the current time in Unix seconds."""

    def now(self) -> float:
        ...


class SystemClock:
    """Wall clock."""

    def now(self) -> float:
        return time.time()
