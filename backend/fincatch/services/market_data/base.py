# backend/fincatch/services/market_data/base.py
"""
Abstract interface for market data providers.

This module defines the contract that all market data providers must follow.
Using an abstract base class allows for:
- Swapping the Fin-Catch data API for another backend
- Fake implementations for testing
- Consistent retry behavior across all providers

The valuation engine only ever needs three windowed fetches: daily stock
candles, SJC gold quotes and "currency -> VND" exchange rates. Each returns
the pydantic response model from ``fincatch.schemas.market_data``.

Design Principles:
- Dependency Inversion: services depend on MarketDataProviderProtocol,
  not on this class or on httpx
- DRY: common retry logic implemented once in the base class
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, TypeVar

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from fincatch.schemas.market_data import (
    ExchangeRateResponse,
    GoldPriceResponse,
    StockHistoryResponse,
)
from fincatch.services.constants import DAILY_RESOLUTION
from fincatch.services.exceptions import (
    ProviderUnavailableError,
    RateLimitError,
)

logger = logging.getLogger(__name__)

T = TypeVar('T')


# =============================================================================
# ABSTRACT BASE CLASS
# =============================================================================

class MarketDataProvider(ABC):
    """
    Abstract base class for market data providers.

    Retry Behavior:
        The base class provides an async `_execute_with_retry` method that
        implements exponential backoff. Subclasses can override the retry
        configuration by setting class attributes:

        - MAX_RETRY_ATTEMPTS: Total attempts (default: 3)
        - RETRY_MIN_WAIT: Minimum wait in seconds (default: 1)
        - RETRY_MAX_WAIT: Maximum wait in seconds (default: 10)
        - RETRY_MULTIPLIER: Exponential multiplier (default: 1)

    Retryable Exceptions:
        - ProviderUnavailableError: Network issues, timeouts, server errors
        - RateLimitError: API rate limit exceeded

    Everything else (including asyncio.CancelledError) propagates at once.
    """

    MAX_RETRY_ATTEMPTS: int = 3
    RETRY_MIN_WAIT: float = 1
    RETRY_MAX_WAIT: float = 10
    RETRY_MULTIPLIER: float = 1

    # =========================================================================
    # ABSTRACT PROPERTIES AND METHODS
    # =========================================================================

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this provider, used in logs and errors."""
        pass

    @abstractmethod
    async def fetch_stock_history(
            self,
            symbol: str,
            from_: int,
            to: int,
            resolution: str = DAILY_RESOLUTION,
            source: str | None = None,
    ) -> StockHistoryResponse:
        """
        Fetch daily candles for a symbol over [from_, to].

        Returns:
            StockHistoryResponse; status "error" when the fetch failed
        """
        pass

    @abstractmethod
    async def fetch_gold_price(
            self,
            gold_price_id: str,
            from_: int,
            to: int,
            source: str | None = None,
    ) -> GoldPriceResponse:
        """
        Fetch gold quotes for a price series over [from_, to].

        Returns:
            GoldPriceResponse; prices are VND per tael or per mace
            depending on the series
        """
        pass

    @abstractmethod
    async def fetch_exchange_rate(
            self,
            currency_code: str,
            from_: int,
            to: int,
    ) -> ExchangeRateResponse:
        """
        Fetch "currency_code -> VND" rates over [from_, to].

        Returns:
            ExchangeRateResponse; the last sample's `sell` is the rate
        """
        pass

    # =========================================================================
    # RETRY HELPER METHOD
    # =========================================================================

    async def _execute_with_retry(
            self,
            func: Callable[..., Awaitable[T]],
            *args: Any,
            **kwargs: Any,
    ) -> T:
        """
        Await a coroutine function with retry logic for transient failures.

        Uses exponential backoff for retryable exceptions:
        - ProviderUnavailableError
        - RateLimitError

        Raises:
            The last exception if all retries fail
        """
        async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self.MAX_RETRY_ATTEMPTS),
                wait=wait_exponential(
                    multiplier=self.RETRY_MULTIPLIER,
                    min=self.RETRY_MIN_WAIT,
                    max=self.RETRY_MAX_WAIT,
                ),
                retry=retry_if_exception_type((ProviderUnavailableError, RateLimitError)),
                before_sleep=before_sleep_log(logger, logging.WARNING),
                reraise=True,
        ):
            with attempt:
                return await func(*args, **kwargs)

        raise AssertionError("unreachable")  # pragma: no cover

    # =========================================================================
    # OPTIONAL METHODS (with default implementations)
    # =========================================================================

    async def aclose(self) -> None:
        """Release any transport resources. Default is a no-op."""
        return None
