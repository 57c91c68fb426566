# backend/fincatch/schemas/__init__.py
"""
Pydantic schemas for the valuation engine.

- market_data: request/response bodies of the Fin-Catch data API
- portfolio: portfolio entries (tagged union) and bond coupon payments

Usage:
    from fincatch.schemas import parse_entries, StockHistoryResponse
"""

from fincatch.schemas.market_data import (
    ExchangeRatePoint,
    ExchangeRateRequest,
    ExchangeRateResponse,
    GoldPricePoint,
    GoldPriceRequest,
    GoldPriceResponse,
    StockCandle,
    StockHistoryRequest,
    StockHistoryResponse,
)
from fincatch.schemas.portfolio import (
    BondCouponPayment,
    BondCouponPaymentCreate,
    BondCouponPaymentUpdate,
    BondEntry,
    GoldEntry,
    PortfolioEntry,
    StockEntry,
    parse_entries,
    parse_entry,
)

__all__ = [
    # Market data
    "StockHistoryRequest",
    "StockHistoryResponse",
    "StockCandle",
    "GoldPriceRequest",
    "GoldPriceResponse",
    "GoldPricePoint",
    "ExchangeRateRequest",
    "ExchangeRateResponse",
    "ExchangeRatePoint",
    # Portfolio
    "PortfolioEntry",
    "StockEntry",
    "GoldEntry",
    "BondEntry",
    "parse_entry",
    "parse_entries",
    # Coupons
    "BondCouponPayment",
    "BondCouponPaymentCreate",
    "BondCouponPaymentUpdate",
]
