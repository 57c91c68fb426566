# backend/fincatch/services/fx_rate_service.py
"""
FX Rate Service for fetching, caching and applying exchange rates.

This service handles:
- Resolving the rate between any two currencies through the VND pivot
- Caching current rates with a time-to-live
- Converting amounts between currencies
- Display helpers (symbol formatting, supported-currency checks)

=============================================================================
FX RATE CONVENTION
=============================================================================

    rate = "1 from_currency = X to_currency"

Conversion formula:
    to_amount = from_amount × rate

The data API only quotes "currency -> VND". Every pair is resolved from
those legs:

    to == VND      : rate = from->VND
    from == VND    : rate = 1 / (to->VND)
    otherwise      : rate = (from->VND) / (to->VND)

Each leg is the `sell` of the most recent sample in the hour ending at the
target instant.

=============================================================================
CACHING
=============================================================================

Only current lookups (no `as_of`) are cached; historical lookups always go
to the provider. Entries live for `fx_cache_ttl_seconds` (5 minutes by
default) and are evicted lazily when their key is looked up again. The
cache is an explicit ExchangeRateCache object with an injectable clock so
one instance can be shared across services and frozen in tests.

Design Principles:
- Single Responsibility: only handles FX rate operations
- No HTTP Knowledge: raises domain exceptions, never touches httpx
- Float arithmetic: amounts are multiplied, never rounded, at this layer

Usage:
    from fincatch.services import FXRateService

    service = FXRateService(provider)

    rate = await service.get_exchange_rate("USD", "EUR")
    amount_eur = await service.convert_currency(100.0, "USD", "EUR")
"""

import asyncio
import logging
from dataclasses import dataclass

from fincatch.config import settings
from fincatch.services.constants import (
    CURRENCY_SYMBOLS,
    FX_LOOKBACK_SECONDS,
    PIVOT_CURRENCY,
    SUFFIX_SYMBOL_CURRENCIES,
    SUPPORTED_CURRENCIES,
)
from fincatch.services.exceptions import RateUnavailableError
from fincatch.services.protocols import (
    Clock,
    MarketDataProviderProtocol,
    SystemClock,
)

logger = logging.getLogger(__name__)


# =============================================================================
# CACHE
# =============================================================================

@dataclass(frozen=True)
class CachedRate:
    """
    A cached current exchange rate.

    Attributes:
        rate: 1 from = rate to
        timestamp: When the rate was stored (Unix seconds)
        expires_at: When the entry stops being served (Unix seconds)
    """

    rate: float
    timestamp: float
    expires_at: float


def cache_key(from_currency: str, to_currency: str) -> str:
    return f"{from_currency}_{to_currency}"


class ExchangeRateCache:
    """
    In-memory TTL cache of current exchange rates keyed "{from}_{to}".

    Expired entries are not swept; they are dropped when their key is next
    read.
    """

    def __init__(self, ttl_seconds: float | None = None, clock: Clock | None = None) -> None:
        self.ttl_seconds = (
            ttl_seconds if ttl_seconds is not None else settings.fx_cache_ttl_seconds
        )
        self.clock = clock or SystemClock()
        self._entries: dict[str, CachedRate] = {}

    def get(self, key: str) -> float | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self.clock.now() >= entry.expires_at:
            del self._entries[key]
            return None
        return entry.rate

    def set(self, key: str, rate: float) -> CachedRate:
        now = self.clock.now()
        entry = CachedRate(rate=rate, timestamp=now, expires_at=now + self.ttl_seconds)
        self._entries[key] = entry
        return entry

    def peek(self, key: str) -> CachedRate | None:
        """Return the raw entry without expiring it."""
        return self._entries.get(key)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries


# =============================================================================
# SERVICE
# =============================================================================

class FXRateService:
    """
    Service for exchange rates between arbitrary currency pairs.

    Collaborators:
        provider: anything satisfying MarketDataProviderProtocol
        cache: shared ExchangeRateCache (a private one is built when omitted)
        clock: "now" for current lookups; defaults to the cache's clock
    """

    def __init__(
            self,
            provider: MarketDataProviderProtocol,
            cache: ExchangeRateCache | None = None,
            clock: Clock | None = None,
    ) -> None:
        self.provider = provider
        self.cache = cache if cache is not None else ExchangeRateCache(clock=clock)
        self.clock = clock or self.cache.clock
        self._locks: dict[str, asyncio.Lock] = {}

    # =========================================================================
    # RATES
    # =========================================================================

    async def get_exchange_rate(
            self,
            from_currency: str,
            to_currency: str,
            as_of: int | None = None,
    ) -> float:
        """
        Get the rate such that 1 from_currency = rate to_currency.

        Args:
            from_currency: Source currency code
            to_currency: Target currency code
            as_of: Unix seconds for a historical rate; None for current

        Returns:
            The rate; exactly 1.0 when the currencies match

        Raises:
            RateUnavailableError: A leg had an error status or no samples
        """
        from_currency = from_currency.upper()
        to_currency = to_currency.upper()

        if from_currency == to_currency:
            return 1.0

        if as_of is not None:
            return await self._resolve_via_pivot(from_currency, to_currency, as_of)

        key = cache_key(from_currency, to_currency)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            # Another task may have filled the entry while we waited
            cached = self.cache.get(key)
            if cached is not None:
                return cached

            rate = await self._resolve_via_pivot(from_currency, to_currency, None)
            self.cache.set(key, rate)
            logger.debug(f"Cached FX rate {key}={rate}")
            return rate

    async def convert_currency(
            self,
            amount: float,
            from_currency: str,
            to_currency: str,
            as_of: int | None = None,
    ) -> float:
        """Convert `amount` as amount × rate. No rounding is applied."""
        rate = await self.get_exchange_rate(from_currency, to_currency, as_of)
        return amount * rate

    async def get_exchange_rates_batch(
            self,
            pairs: list[tuple[str, str] | tuple[str, str, int | None]],
    ) -> dict[str, float]:
        """
        Resolve many pairs concurrently.

        Args:
            pairs: (from, to) or (from, to, as_of) tuples

        Returns:
            Dict keyed "{from}_{to}"; a pair that failed maps to 0.0
        """

        async def _one(pair: tuple) -> tuple[str, float]:
            from_currency, to_currency = pair[0], pair[1]
            as_of = pair[2] if len(pair) > 2 else None
            key = cache_key(from_currency, to_currency)
            try:
                return key, await self.get_exchange_rate(from_currency, to_currency, as_of)
            except RateUnavailableError as e:
                logger.error(f"Failed to get rate for {from_currency} to {to_currency}: {e}")
                return key, 0.0

        results = await asyncio.gather(*(_one(pair) for pair in pairs))
        return dict(results)

    def clear_cache(self) -> None:
        self.cache.clear()
        logger.info("Exchange rate cache cleared")

    # =========================================================================
    # PRIVATE HELPERS
    # =========================================================================

    async def _resolve_via_pivot(
            self,
            from_currency: str,
            to_currency: str,
            as_of: int | None,
    ) -> float:
        try:
            if to_currency == PIVOT_CURRENCY:
                return await self._rate_to_pivot(from_currency, as_of)
            if from_currency == PIVOT_CURRENCY:
                return 1 / await self._rate_to_pivot(to_currency, as_of)

            from_to_pivot = await self._rate_to_pivot(from_currency, as_of)
            to_to_pivot = await self._rate_to_pivot(to_currency, as_of)
            return from_to_pivot / to_to_pivot
        except RateUnavailableError as e:
            logger.error(
                f"Error fetching exchange rate from {from_currency} to {to_currency}: {e}"
            )
            raise

    async def _rate_to_pivot(self, currency: str, as_of: int | None) -> float:
        """Fetch the "currency -> VND" sell rate for the hour ending at as_of."""
        if currency == PIVOT_CURRENCY:
            return 1.0

        timestamp = int(as_of if as_of is not None else self.clock.now())
        response = await self.provider.fetch_exchange_rate(
            currency, timestamp - FX_LOOKBACK_SECONDS, timestamp
        )

        if response.is_ok and response.rates:
            return response.rates[-1].sell

        raise RateUnavailableError(currency, reason=response.error)


# =============================================================================
# DISPLAY HELPERS
# =============================================================================

def format_currency(amount: float, currency: str, decimals: int = 2) -> str:
    """
    Format an amount with its currency symbol.

    VND puts the symbol after the amount; every other currency before it.

    Example:
        format_currency(1234.5, "USD")     -> "$1,234.50"
        format_currency(25000, "VND", 0)   -> "25,000₫"
    """
    code = currency.upper()
    symbol = CURRENCY_SYMBOLS.get(code, code)
    formatted = f"{amount:,.{decimals}f}"
    if code in SUFFIX_SYMBOL_CURRENCIES:
        return f"{formatted}{symbol}"
    return f"{symbol}{formatted}"


def is_supported_currency(code: str) -> bool:
    return code in SUPPORTED_CURRENCIES
