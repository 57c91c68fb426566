# backend/tests/conftest.py
"""
Pytest configuration and fixtures.

This module provides shared fixtures for all tests:
- Database session fixtures (in-memory SQLite)
- A fake market data provider with scripted prices and rates
- A frozen clock
- A fake coupon payment source
- Sample entry factories
"""

import asyncio
import os

os.environ.setdefault("ENVIRONMENT", "test")

from typing import Any, Iterator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from fincatch.models import Base
from fincatch.schemas.market_data import (
    ExchangeRatePoint,
    ExchangeRateResponse,
    GoldPricePoint,
    GoldPriceResponse,
    StockCandle,
    StockHistoryResponse,
)
from fincatch.schemas.portfolio import (
    BondCouponPayment,
    BondEntry,
    GoldEntry,
    StockEntry,
)
from fincatch.services.fx_rate_service import ExchangeRateCache, FXRateService
from fincatch.services.market_data.base import MarketDataProvider
from fincatch.services.valuation.bond_pricer import BondPricer
from fincatch.services.valuation.history_calculator import HistoryCalculator
from fincatch.services.valuation.pricing import EntryPricer
from fincatch.services.valuation.service import PerformanceService
from fincatch.utils.date_utils import SECONDS_PER_DAY


# Wednesday 2024-06-19 12:00:00 UTC
NOW = 1718798400
DAY = SECONDS_PER_DAY


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

@pytest.fixture(scope="function")
def db_engine():
    """Create an in-memory SQLite database engine for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)


@pytest.fixture(scope="function")
def session_factory(db_engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture(scope="function")
def db(session_factory) -> Iterator[Session]:
    """Create a database session for testing."""
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


# =============================================================================
# CLOCK
# =============================================================================

class FakeClock:
    """Clock frozen at a given Unix time; advance() moves it forward."""

    def __init__(self, now: float = NOW) -> None:
        self._now = now

    def now(self) -> float:
        return self._now

    def advance(self, seconds: float) -> None:
        self._now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# =============================================================================
# FAKE MARKET DATA PROVIDER
# =============================================================================

class FakeMarketDataProvider(MarketDataProvider):
    """
    Scripted implementation of MarketDataProvider for testing.

    Prices can be configured as a constant (one sample at the end of every
    requested window) or as a series of (timestamp, value) samples filtered
    to the requested window. Errors come back as status="error" responses,
    like the HTTP provider after its retries are exhausted.
    """

    def __init__(self) -> None:
        self._stock_constant: dict[str, float] = {}
        self._stock_series: dict[str, list[tuple[int, float]]] = {}
        self._gold_constant: dict[str, float] = {}
        self._gold_series: dict[str, list[tuple[int, float]]] = {}
        self._rates: dict[str, float] = {}
        self._rate_series: dict[str, list[tuple[int, float]]] = {}
        self._errors: dict[str, str] = {}
        self._price_scale: dict[str, float] = {}
        self.gate: asyncio.Event | None = None
        self.calls: list[tuple[str, str, int, int]] = []

    @property
    def name(self) -> str:
        return "fake"

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    def set_stock_price(self, symbol: str, close: float, price_scale: float | None = None) -> None:
        self._stock_constant[symbol] = close
        if price_scale is not None:
            self._price_scale[symbol] = price_scale

    def set_stock_series(
            self,
            symbol: str,
            points: list[tuple[int, float]],
            price_scale: float | None = None,
    ) -> None:
        self._stock_series[symbol] = sorted(points)
        if price_scale is not None:
            self._price_scale[symbol] = price_scale

    def set_gold_price(self, gold_price_id: str, sell: float) -> None:
        self._gold_constant[gold_price_id] = sell

    def set_gold_series(self, gold_price_id: str, points: list[tuple[int, float]]) -> None:
        self._gold_series[gold_price_id] = sorted(points)

    def set_rate(self, currency: str, rate_to_vnd: float) -> None:
        self._rates[currency] = rate_to_vnd

    def set_rate_series(self, currency: str, points: list[tuple[int, float]]) -> None:
        self._rate_series[currency] = sorted(points)

    def set_error(self, key: str, message: str = "upstream failure") -> None:
        """Make every fetch for a symbol, gold id or currency return an error."""
        self._errors[key] = message

    def calls_for(self, kind: str) -> list[tuple[str, str, int, int]]:
        return [call for call in self.calls if call[0] == kind]

    # -------------------------------------------------------------------------
    # MarketDataProvider
    # -------------------------------------------------------------------------

    async def _wait(self) -> None:
        if self.gate is not None:
            await self.gate.wait()
        else:
            await asyncio.sleep(0)

    @staticmethod
    def _window(
            constant: dict[str, float],
            series: dict[str, list[tuple[int, float]]],
            key: str,
            from_: int,
            to: int,
    ) -> list[tuple[int, float]]:
        if key in series:
            return [(ts, value) for ts, value in series[key] if from_ <= ts <= to]
        if key in constant:
            return [(to, constant[key])]
        return []

    def _metadata(self, key: str) -> dict[str, Any] | None:
        if key in self._price_scale:
            return {"price_scale": self._price_scale[key]}
        return None

    async def fetch_stock_history(
            self,
            symbol: str,
            from_: int,
            to: int,
            resolution: str = "1D",
            source: str | None = None,
    ) -> StockHistoryResponse:
        self.calls.append(("stock", symbol, from_, to))
        await self._wait()
        if symbol in self._errors:
            return StockHistoryResponse(symbol=symbol, status="error", error=self._errors[symbol])

        samples = self._window(self._stock_constant, self._stock_series, symbol, from_, to)
        return StockHistoryResponse(
            symbol=symbol,
            resolution=resolution,
            source=source,
            data=[
                StockCandle(timestamp=ts, open=close, high=close, low=close, close=close)
                for ts, close in samples
            ],
            metadata=self._metadata(symbol),
        )

    async def fetch_gold_price(
            self,
            gold_price_id: str,
            from_: int,
            to: int,
            source: str | None = None,
    ) -> GoldPriceResponse:
        self.calls.append(("gold", gold_price_id, from_, to))
        await self._wait()
        if gold_price_id in self._errors:
            return GoldPriceResponse(
                gold_price_id=gold_price_id, status="error", error=self._errors[gold_price_id]
            )

        samples = self._window(self._gold_constant, self._gold_series, gold_price_id, from_, to)
        return GoldPriceResponse(
            gold_price_id=gold_price_id,
            source=source,
            data=[
                GoldPricePoint(timestamp=ts, type_name="SJC 1L", buy=sell * 0.98, sell=sell)
                for ts, sell in samples
            ],
            metadata=self._metadata(gold_price_id),
        )

    async def fetch_exchange_rate(
            self,
            currency_code: str,
            from_: int,
            to: int,
    ) -> ExchangeRateResponse:
        self.calls.append(("fx", currency_code, from_, to))
        await self._wait()
        if currency_code in self._errors:
            return ExchangeRateResponse(
                currency_code=currency_code, status="error", error=self._errors[currency_code]
            )

        samples = self._window(self._rates, self._rate_series, currency_code, from_, to)
        return ExchangeRateResponse(
            currency_code=currency_code,
            data=[ExchangeRatePoint(timestamp=ts, buy=sell, sell=sell) for ts, sell in samples],
        )


@pytest.fixture
def provider() -> FakeMarketDataProvider:
    """Create a fresh fake provider with USD and EUR rates to VND."""
    fake = FakeMarketDataProvider()
    fake.set_rate("USD", 25_000.0)
    fake.set_rate("EUR", 27_000.0)
    return fake


# =============================================================================
# COUPON SOURCE
# =============================================================================

class FakeCouponSource:
    """In-memory CouponPaymentSource; `fail` makes every listing raise."""

    def __init__(self) -> None:
        self.payments: dict[str, list[BondCouponPayment]] = {}
        self.fail = False
        self.requested: list[str] = []

    def add(self, entry_id: str, amount: float, currency: str = "USD", payment_date: int = NOW) -> None:
        self.payments.setdefault(entry_id, []).append(
            BondCouponPayment(
                entry_id=entry_id, payment_date=payment_date, amount=amount, currency=currency,
            )
        )

    async def list_coupon_payments(self, entry_id: str) -> list[BondCouponPayment]:
        self.requested.append(entry_id)
        if self.fail:
            raise RuntimeError("coupon store offline")
        return list(self.payments.get(entry_id, []))


@pytest.fixture
def coupon_source() -> FakeCouponSource:
    return FakeCouponSource()


# =============================================================================
# SERVICE FIXTURES
# =============================================================================

@pytest.fixture
def fx_cache(clock) -> ExchangeRateCache:
    return ExchangeRateCache(ttl_seconds=300, clock=clock)


@pytest.fixture
def fx_service(provider, fx_cache, clock) -> FXRateService:
    return FXRateService(provider, cache=fx_cache, clock=clock)


@pytest.fixture
def bond_pricer(clock) -> BondPricer:
    return BondPricer(clock)


@pytest.fixture
def entry_pricer(provider, clock, bond_pricer) -> EntryPricer:
    return EntryPricer.default(provider, clock=clock, bond_pricer=bond_pricer)


@pytest.fixture
def performance_service(fx_service, entry_pricer, coupon_source) -> PerformanceService:
    return PerformanceService(fx_service, entry_pricer, coupon_source, max_concurrency=4)


@pytest.fixture
def history_calculator(fx_service, entry_pricer) -> HistoryCalculator:
    return HistoryCalculator(fx_service, entry_pricer, max_concurrency=4)


# =============================================================================
# SAMPLE DATA FACTORIES
# =============================================================================

def make_stock(**overrides: Any) -> StockEntry:
    """Factory function for creating stock entries."""
    data = {
        "id": "s1",
        "symbol": "AAPL",
        "quantity": 10,
        "purchase_price": 100.0,
        "currency": "USD",
        "purchase_date": NOW - 30 * DAY,
        "source": "yahoo_finance",
    }
    data.update(overrides)
    return StockEntry(**data)


def make_gold(**overrides: Any) -> GoldEntry:
    """Factory function for creating SJC gold entries."""
    data = {
        "id": "g1",
        "symbol": "1",
        "quantity": 10,
        "purchase_price": 5_000_000.0,
        "currency": "VND",
        "purchase_date": NOW - 30 * DAY,
        "source": "sjc",
        "unit": "mace",
    }
    data.update(overrides)
    return GoldEntry(**data)


def make_bond(**overrides: Any) -> BondEntry:
    """Factory function for creating bond entries (no pricing inputs by default)."""
    data = {
        "id": "b1",
        "symbol": "VN000000BOND",
        "quantity": 1,
        "purchase_price": 950.0,
        "currency": "USD",
        "purchase_date": NOW - 365 * DAY,
    }
    data.update(overrides)
    return BondEntry(**data)
