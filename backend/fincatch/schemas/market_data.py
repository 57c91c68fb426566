# backend/fincatch/schemas/market_data.py
"""
Pydantic schemas for the Fin-Catch market data API.

These mirror the JSON bodies exchanged with the data API:
- Stock history (daily OHLCV candles)
- Gold prices (SJC buy/sell quotes)
- Exchange rates (currency -> VND buy/sell quotes)

All timestamps are Unix seconds. Requests use the wire name ``from`` for
the window start; in Python the field is ``from_``.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


ResponseStatus = Literal["ok", "error"]


class _WindowRequest(BaseModel):
    """Common shape of a windowed request."""

    from_: int = Field(..., alias="from", description="Window start (Unix seconds)")
    to: int = Field(..., description="Window end (Unix seconds)")

    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        """Serialize with wire field names, omitting unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True)


class _PricedResponse(BaseModel):
    """Common shape of a provider response."""

    status: ResponseStatus = "ok"
    error: str | None = None
    metadata: dict[str, Any] | None = None

    model_config = ConfigDict(extra="ignore")

    @property
    def is_ok(self) -> bool:
        return self.status == "ok"

    @property
    def price_scale(self) -> float:
        """
        Multiplier the provider asks us to apply to raw prices.

        Some sources quote in thousands (e.g. VND stocks); absent means 1.
        """
        if not self.metadata:
            return 1.0
        scale = self.metadata.get("price_scale")
        if scale is None:
            return 1.0
        return float(scale)


# =============================================================================
# STOCK HISTORY
# =============================================================================

class StockHistoryRequest(_WindowRequest):
    symbol: str
    resolution: str = "1D"
    source: str | None = None


class StockCandle(BaseModel):
    timestamp: int
    open: float
    high: float
    low: float
    close: float
    volume: float = 0


class StockHistoryResponse(_PricedResponse):
    symbol: str = ""
    resolution: str = "1D"
    source: str | None = None
    data: list[StockCandle] | None = None

    @property
    def candles(self) -> list[StockCandle]:
        return self.data or []


# =============================================================================
# GOLD PRICES
# =============================================================================

class GoldPriceRequest(_WindowRequest):
    gold_price_id: str
    source: str | None = None


class GoldPricePoint(BaseModel):
    timestamp: int
    type_name: str = ""
    branch_name: str | None = None
    buy: float
    sell: float
    buy_differ: float | None = None
    sell_differ: float | None = None


class GoldPriceResponse(_PricedResponse):
    gold_price_id: str = ""
    source: str | None = None
    data: list[GoldPricePoint] | None = None

    @property
    def points(self) -> list[GoldPricePoint]:
        return self.data or []


# =============================================================================
# EXCHANGE RATES
# =============================================================================

class ExchangeRateRequest(_WindowRequest):
    currency_code: str
    source: str | None = None

    @field_validator("currency_code")
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        """Normalize currency: uppercase and strip."""
        return v.strip().upper()


class ExchangeRatePoint(BaseModel):
    timestamp: int
    buy: float | None = None
    sell: float
    transfer: float | None = None


class ExchangeRateResponse(_PricedResponse):
    currency_code: str = ""
    source: str | None = None
    data: list[ExchangeRatePoint] | None = None

    @property
    def rates(self) -> list[ExchangeRatePoint]:
        return self.data or []
