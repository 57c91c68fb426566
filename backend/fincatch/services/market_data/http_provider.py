# backend/fincatch/services/market_data/http_provider.py
"""
Fin-Catch data API market data provider.

Implements MarketDataProvider over HTTP with httpx. The data API exposes
three POST endpoints that take a windowed JSON request and answer either
with the response body directly or wrapped in a
``{"success": bool, "data": ..., "error": ...}`` envelope:

    POST /api/stock-history
    POST /api/gold-price
    POST /api/exchange-rate

Error Mapping:
    - Timeouts, connection errors, HTTP 5xx -> ProviderUnavailableError (retried)
    - HTTP 429                               -> RateLimitError (retried)
    - Other HTTP errors, envelope failures   -> MarketDataError (not retried)
    - Bodies that fail schema validation     -> MarketDataError (not retried)

Fetch methods never raise MarketDataError to the caller. Once retries are
exhausted the failure is returned as a response with ``status="error"``
and a human-readable ``error``; the pricing layer decides whether that is
fatal. Cancellation always propagates.

Example:
    async with httpx.AsyncClient() as client:
        provider = FinCatchDataProvider(client=client)
        history = await provider.fetch_stock_history("VNM", 1704067200, 1704153600)
"""

import logging
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from fincatch.config import settings
from fincatch.schemas.market_data import (
    ExchangeRateRequest,
    ExchangeRateResponse,
    GoldPriceRequest,
    GoldPriceResponse,
    StockHistoryRequest,
    StockHistoryResponse,
)
from fincatch.services.constants import DAILY_RESOLUTION, SJC_GOLD_SOURCE
from fincatch.services.exceptions import (
    MarketDataError,
    ProviderUnavailableError,
    RateLimitError,
)
from fincatch.services.market_data.base import MarketDataProvider

logger = logging.getLogger(__name__)

STOCK_HISTORY_PATH = "/api/stock-history"
GOLD_PRICE_PATH = "/api/gold-price"
EXCHANGE_RATE_PATH = "/api/exchange-rate"

# Source names the data API assumes when a request omits one
DEFAULT_STOCK_SOURCE = "vndirect"
DEFAULT_EXCHANGE_RATE_SOURCE = "vietcombank"

ResponseT = TypeVar("ResponseT", bound=BaseModel)


class FinCatchDataProvider(MarketDataProvider):
    """
    httpx implementation of MarketDataProvider for the Fin-Catch data API.

    Configuration (defaults from settings):
        base_url: API base URL
        token: Optional bearer token
        timeout: Per-request timeout in seconds

    A client may be injected (tests pass one built on httpx.MockTransport);
    otherwise the provider owns one and closes it in `aclose()`.
    """

    def __init__(
            self,
            client: httpx.AsyncClient | None = None,
            base_url: str | None = None,
            token: str | None = None,
            timeout: float | None = None,
    ) -> None:
        self._base_url = (base_url or settings.data_api_base_url).rstrip("/")
        self._token = token if token is not None else settings.data_api_token
        self._timeout = timeout if timeout is not None else settings.data_api_timeout_seconds
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=self._timeout)

        logger.info(
            f"FinCatchDataProvider initialized (base_url={self._base_url}, "
            f"timeout={self._timeout}s)"
        )

    @property
    def name(self) -> str:
        return "fincatch"

    # =========================================================================
    # PUBLIC FETCHES
    # =========================================================================

    async def fetch_stock_history(
            self,
            symbol: str,
            from_: int,
            to: int,
            resolution: str = DAILY_RESOLUTION,
            source: str | None = None,
    ) -> StockHistoryResponse:
        request = StockHistoryRequest(
            symbol=symbol, resolution=resolution, from_=from_, to=to, source=source,
        )
        try:
            body = await self._execute_with_retry(
                self._post, STOCK_HISTORY_PATH, request.to_wire()
            )
            return self._parse(StockHistoryResponse, body, STOCK_HISTORY_PATH)
        except MarketDataError as e:
            logger.error(f"Stock history error for {symbol}: {e}")
            return StockHistoryResponse(
                symbol=symbol,
                resolution=resolution,
                source=source or DEFAULT_STOCK_SOURCE,
                status="error",
                error=e.message,
            )

    async def fetch_gold_price(
            self,
            gold_price_id: str,
            from_: int,
            to: int,
            source: str | None = None,
    ) -> GoldPriceResponse:
        request = GoldPriceRequest(
            gold_price_id=gold_price_id, from_=from_, to=to, source=source,
        )
        try:
            body = await self._execute_with_retry(
                self._post, GOLD_PRICE_PATH, request.to_wire()
            )
            return self._parse(GoldPriceResponse, body, GOLD_PRICE_PATH)
        except MarketDataError as e:
            logger.error(f"Gold price error for {gold_price_id}: {e}")
            return GoldPriceResponse(
                gold_price_id=gold_price_id,
                source=source or SJC_GOLD_SOURCE,
                status="error",
                error=e.message,
            )

    async def fetch_exchange_rate(
            self,
            currency_code: str,
            from_: int,
            to: int,
    ) -> ExchangeRateResponse:
        request = ExchangeRateRequest(currency_code=currency_code, from_=from_, to=to)
        try:
            body = await self._execute_with_retry(
                self._post, EXCHANGE_RATE_PATH, request.to_wire()
            )
            return self._parse(ExchangeRateResponse, body, EXCHANGE_RATE_PATH)
        except MarketDataError as e:
            logger.error(f"Exchange rate error for {currency_code}: {e}")
            return ExchangeRateResponse(
                currency_code=request.currency_code,
                source=DEFAULT_EXCHANGE_RATE_SOURCE,
                status="error",
                error=e.message,
            )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # =========================================================================
    # TRANSPORT
    # =========================================================================

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _parse(self, model: type[ResponseT], body: Any, path: str) -> ResponseT:
        """Validate a response body, raising MarketDataError when it does not conform."""
        try:
            return model.model_validate(body)
        except ValidationError as e:
            raise MarketDataError(
                f"Malformed response from {path}: {e.error_count()} validation error(s)",
                provider=self.name,
            ) from e

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        """
        POST a JSON payload and return the unwrapped response body.

        Raises:
            ProviderUnavailableError: Timeout, connection failure or 5xx
            RateLimitError: HTTP 429
            MarketDataError: Any other non-success answer
        """
        url = f"{self._base_url}{path}"
        logger.debug(f"POST {path} {payload}")

        try:
            response = await self._client.post(
                url, json=payload, headers=self._headers(), timeout=self._timeout,
            )
        except httpx.TimeoutException as e:
            raise ProviderUnavailableError(self.name, f"timeout calling {path}: {e}") from e
        except httpx.TransportError as e:
            raise ProviderUnavailableError(self.name, f"transport error calling {path}: {e}") from e

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(
                self.name,
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
            )
        if response.status_code >= 500:
            raise ProviderUnavailableError(
                self.name, f"API error: {response.status_code} - {response.text}"
            )
        if response.is_error:
            raise MarketDataError(
                f"API error: {response.status_code} - {response.text}", provider=self.name
            )

        try:
            body = response.json()
        except ValueError as e:
            raise MarketDataError(f"Invalid JSON from {path}: {e}", provider=self.name) from e

        if isinstance(body, dict) and "success" in body:
            if not body["success"]:
                raise MarketDataError(body.get("error") or "Unknown API error", provider=self.name)
            return body.get("data") or {}
        return body
