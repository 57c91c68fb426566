# backend/tests/services/valuation/test_pricing.py
"""
Tests for the per-asset pricing strategies.

This module tests:
- Request windows (current, weekend, historical)
- price_scale application
- Error status vs. empty data handling
- Gold source restriction
- Bond pricing fallback chain
"""

import pytest

from fincatch.services.exceptions import PriceUnavailableError, UnsupportedGoldSourceError
from fincatch.services.valuation.pricing import EntryPricer
from tests.conftest import DAY, NOW, FakeClock, make_bond, make_gold, make_stock

# Sunday 2024-03-10 12:00 UTC and the Saturday 02:00 it snaps back to
SUNDAY_NOON = 1710072000
SATURDAY_0200 = 1709949600


class TestStockPricing:

    async def test_last_close_in_entry_currency(self, entry_pricer, provider):
        provider.set_stock_series("AAPL", [(NOW - 3600, 148.0), (NOW - 60, 150.0)])

        quote = await entry_pricer.price(make_stock())

        assert quote.amount == 150.0
        assert quote.currency == "USD"
        assert quote.source == "yahoo_finance"

    async def test_current_window(self, entry_pricer, provider):
        provider.set_stock_price("AAPL", 150.0)
        await entry_pricer.price(make_stock())
        assert provider.calls_for("stock") == [("stock", "AAPL", NOW - DAY - 1, NOW)]

    async def test_weekend_window_ends_saturday_morning(self, provider):
        pricer = EntryPricer.default(provider, clock=FakeClock(SUNDAY_NOON))
        provider.set_stock_price("AAPL", 150.0)

        await pricer.price(make_stock())

        assert provider.calls_for("stock") == [
            ("stock", "AAPL", SATURDAY_0200 - DAY - 1, SATURDAY_0200)
        ]

    async def test_historical_window(self, entry_pricer, provider):
        provider.set_stock_price("AAPL", 150.0)
        as_of = NOW - 10 * DAY

        await entry_pricer.price(make_stock(), as_of=as_of)

        assert provider.calls_for("stock") == [("stock", "AAPL", as_of - DAY, as_of)]

    async def test_price_scale_applied(self, entry_pricer, provider):
        provider.set_stock_price("VNM", 65.5, price_scale=1000)

        quote = await entry_pricer.price(make_stock(symbol="VNM", currency="VND", source="vndirect"))

        assert quote.amount == 65_500.0
        assert quote.currency == "VND"

    async def test_empty_data_is_zero(self, entry_pricer):
        quote = await entry_pricer.price(make_stock(symbol="NODATA"))
        assert quote.amount == 0.0

    async def test_error_status_raises(self, entry_pricer, provider):
        provider.set_error("AAPL", "symbol delisted")
        with pytest.raises(PriceUnavailableError, match="symbol delisted"):
            await entry_pricer.price(make_stock())

    async def test_missing_source_is_unknown(self, entry_pricer, provider):
        provider.set_stock_price("AAPL", 1.0)
        quote = await entry_pricer.price(make_stock(source=None))
        assert quote.source == "unknown"


class TestGoldPricing:

    async def test_sell_price_in_vnd(self, entry_pricer, provider):
        provider.set_gold_price("1", 85_000_000.0)

        quote = await entry_pricer.price(make_gold())

        assert quote.amount == 85_000_000.0
        assert quote.currency == "VND"
        assert quote.source == "sjc"

    async def test_current_window_is_last_day(self, entry_pricer, provider):
        provider.set_gold_price("1", 1.0)
        await entry_pricer.price(make_gold())
        assert provider.calls_for("gold") == [("gold", "1", NOW - DAY, NOW)]

    async def test_non_sjc_source_rejected_without_fetch(self, entry_pricer, provider):
        with pytest.raises(UnsupportedGoldSourceError):
            await entry_pricer.price(make_gold(source="pnj"))
        assert provider.calls == []

    async def test_error_status_raises(self, entry_pricer, provider):
        provider.set_error("1")
        with pytest.raises(PriceUnavailableError):
            await entry_pricer.price(make_gold())


class TestBondPricing:

    async def test_calculated(self, entry_pricer):
        bond = make_bond(
            face_value=1000, coupon_rate=5, ytm=6,
            maturity_date=NOW + 365 * DAY, coupon_frequency="annual",
        )
        quote = await entry_pricer.price(bond)
        assert quote.amount == pytest.approx(1050 / 1.06)
        assert quote.source == "calculated"

    async def test_manual(self, entry_pricer):
        quote = await entry_pricer.price(make_bond(current_market_price=980))
        assert quote.amount == 980
        assert quote.source == "manual"

    async def test_face_value(self, entry_pricer):
        quote = await entry_pricer.price(make_bond(face_value=1000))
        assert quote.amount == 1000
        assert quote.source == "faceValue"

    async def test_purchase_price(self, entry_pricer, provider):
        quote = await entry_pricer.price(make_bond())
        assert quote.amount == 950
        assert quote.source == "purchasePrice"
        assert quote.currency == "USD"
        assert provider.calls == []
