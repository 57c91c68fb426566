# backend/tests/services/test_fx_rates.py
"""
Tests for FXRateService and ExchangeRateCache.

This module tests:
- Rate resolution through the VND pivot
- Cache TTL behaviour with a frozen clock
- Historical lookups bypassing the cache
- Failure reporting (RateUnavailableError, batch 0.0)
- Display helpers
"""

import asyncio

import pytest

from fincatch.services.exceptions import RateUnavailableError
from fincatch.services.fx_rate_service import (
    ExchangeRateCache,
    format_currency,
    is_supported_currency,
)
from tests.conftest import DAY, NOW


# =============================================================================
# PIVOT RESOLUTION
# =============================================================================

class TestGetExchangeRate:
    """Tests for rate resolution."""

    async def test_same_currency_is_one_without_fetch(self, fx_service, provider):
        assert await fx_service.get_exchange_rate("USD", "usd") == 1.0
        assert provider.calls == []

    async def test_to_pivot(self, fx_service):
        assert await fx_service.get_exchange_rate("USD", "VND") == 25_000.0

    async def test_from_pivot_is_inverted(self, fx_service):
        rate = await fx_service.get_exchange_rate("VND", "USD")
        assert rate == pytest.approx(1 / 25_000)

    async def test_cross_rate(self, fx_service):
        rate = await fx_service.get_exchange_rate("USD", "EUR")
        assert rate == pytest.approx(25_000 / 27_000)

    async def test_pair_rates_are_reciprocal(self, fx_service):
        forward = await fx_service.get_exchange_rate("EUR", "USD")
        backward = await fx_service.get_exchange_rate("USD", "EUR")
        assert forward * backward == pytest.approx(1.0)

    async def test_requests_hour_window_ending_now(self, fx_service, provider):
        await fx_service.get_exchange_rate("USD", "VND")
        assert provider.calls_for("fx") == [("fx", "USD", NOW - 3600, NOW)]

    async def test_uses_latest_sample(self, fx_service, provider):
        provider.set_rate_series("USD", [(NOW - 1800, 24_900.0), (NOW - 60, 25_100.0)])
        assert await fx_service.get_exchange_rate("USD", "VND") == 25_100.0

    async def test_missing_rate_raises(self, fx_service):
        with pytest.raises(RateUnavailableError) as exc_info:
            await fx_service.get_exchange_rate("GBP", "VND")
        assert exc_info.value.base_currency == "GBP"

    async def test_error_status_raises_with_reason(self, fx_service, provider):
        provider.set_error("EUR", "bank feed down")
        with pytest.raises(RateUnavailableError, match="bank feed down"):
            await fx_service.get_exchange_rate("USD", "EUR")

    @pytest.mark.parametrize("currency", ["USD", "VND", "EUR", "GBP"])
    async def test_identity_conversion(self, fx_service, currency):
        assert await fx_service.convert_currency(123.45, currency, currency) == 123.45

    async def test_convert_currency(self, fx_service):
        amount = await fx_service.convert_currency(100.0, "USD", "EUR")
        assert amount == pytest.approx(100 * 25_000 / 27_000)


# =============================================================================
# CACHING
# =============================================================================

class TestRateCaching:
    """Tests for current-rate caching."""

    async def test_second_lookup_served_from_cache(self, fx_service, provider):
        await fx_service.get_exchange_rate("USD", "VND")
        await fx_service.get_exchange_rate("USD", "VND")
        assert len(provider.calls_for("fx")) == 1

    async def test_entry_expires_after_ttl(self, fx_service, provider, clock):
        await fx_service.get_exchange_rate("USD", "VND")

        clock.advance(299)
        await fx_service.get_exchange_rate("USD", "VND")
        assert len(provider.calls_for("fx")) == 1

        clock.advance(1)
        await fx_service.get_exchange_rate("USD", "VND")
        assert len(provider.calls_for("fx")) == 2

    async def test_concurrent_lookups_share_one_fetch(self, fx_service, provider):
        rates = await asyncio.gather(*(fx_service.get_exchange_rate("USD", "VND") for _ in range(5)))
        assert rates == [25_000.0] * 5
        assert len(provider.calls_for("fx")) == 1

    async def test_historical_lookup_bypasses_cache(self, fx_service, provider, fx_cache):
        provider.set_rate_series("USD", [(NOW - DAY, 24_000.0), (NOW, 25_000.0)])

        first = await fx_service.get_exchange_rate("USD", "VND", as_of=NOW - DAY)
        second = await fx_service.get_exchange_rate("USD", "VND", as_of=NOW - DAY)

        assert first == second == 24_000.0
        assert len(provider.calls_for("fx")) == 2
        assert len(fx_cache) == 0

    async def test_failures_are_not_cached(self, fx_service, provider):
        with pytest.raises(RateUnavailableError):
            await fx_service.get_exchange_rate("GBP", "VND")
        provider.set_rate("GBP", 32_000.0)
        assert await fx_service.get_exchange_rate("GBP", "VND") == 32_000.0

    async def test_clear_cache(self, fx_service, provider):
        await fx_service.get_exchange_rate("USD", "VND")
        fx_service.clear_cache()
        await fx_service.get_exchange_rate("USD", "VND")
        assert len(provider.calls_for("fx")) == 2


class TestExchangeRateCache:

    def test_get_evicts_expired_entry(self, clock):
        cache = ExchangeRateCache(ttl_seconds=10, clock=clock)
        cache.set("USD_VND", 25_000.0)
        assert cache.get("USD_VND") == 25_000.0

        clock.advance(10)
        assert cache.get("USD_VND") is None
        assert "USD_VND" not in cache

    def test_peek_returns_raw_entry(self, clock):
        cache = ExchangeRateCache(ttl_seconds=10, clock=clock)
        cache.set("USD_VND", 25_000.0)
        entry = cache.peek("USD_VND")
        assert entry.timestamp == NOW
        assert entry.expires_at == NOW + 10


# =============================================================================
# BATCH
# =============================================================================

class TestBatch:

    async def test_failed_pair_maps_to_zero(self, fx_service):
        rates = await fx_service.get_exchange_rates_batch([("USD", "VND"), ("GBP", "VND")])
        assert rates == {"USD_VND": 25_000.0, "GBP_VND": 0.0}

    async def test_historical_pair(self, fx_service, provider):
        provider.set_rate_series("EUR", [(NOW - DAY, 26_000.0)])
        rates = await fx_service.get_exchange_rates_batch([("EUR", "VND", NOW - DAY)])
        assert rates == {"EUR_VND": 26_000.0}


# =============================================================================
# DISPLAY HELPERS
# =============================================================================

class TestDisplayHelpers:

    def test_prefix_symbol(self):
        assert format_currency(1234.5, "USD") == "$1,234.50"

    def test_vnd_suffix_symbol(self):
        assert format_currency(25000, "VND", decimals=0) == "25,000₫"

    def test_unknown_currency_uses_code(self):
        assert format_currency(1, "CHF") == "CHF1.00"

    def test_is_supported_currency(self):
        assert is_supported_currency("VND")
        assert not is_supported_currency("CHF")
