# backend/fincatch/services/exceptions.py
"""
Service layer exceptions.

These exceptions represent domain-specific errors and contain NO transport
knowledge. Callers (UI bridge, CLI, HTTP layer) decide how to present them.

Exception Hierarchy:
    ServiceError (base)
    ├── ValidationError
    │   └── UnsupportedUnitError
    ├── MarketDataError
    │   ├── ProviderUnavailableError
    │   ├── RateLimitError
    │   ├── PriceUnavailableError
    │   └── UnsupportedGoldSourceError
    ├── FXRateError
    │   └── RateUnavailableError
    ├── BondError
    │   └── InvalidBondParametersError
    └── CouponPaymentNotFoundError
"""


class ServiceError(Exception):
    """
    Base exception for all service layer errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(ServiceError):
    """
    Raised when programmatic input validation fails.

    Attributes:
        field: The field that failed validation (optional)
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class UnsupportedUnitError(ValidationError):
    """
    Raised when a quantity unit has no known conversion to the base unit.

    Valid gold units are: gram, mace, tael, ounce, kg
    """

    def __init__(self, unit: str) -> None:
        self.unit = unit
        super().__init__(
            f"Unsupported unit: '{unit}'. Valid options: gram, mace, tael, ounce, kg",
            field="unit",
        )


# =============================================================================
# MARKET DATA PROVIDER ERRORS
# =============================================================================


class MarketDataError(ServiceError):
    """
    Base exception for market data provider failures.

    Attributes:
        provider: Name of the provider that failed
    """

    def __init__(self, message: str, provider: str | None = None) -> None:
        self.provider = provider
        super().__init__(message)


class ProviderUnavailableError(MarketDataError):
    """
    Raised when the market data API is temporarily unavailable.

    Examples:
    - Network timeout
    - Server errors (500, 502, 503)

    This is a retryable error.
    """

    def __init__(self, provider: str, reason: str) -> None:
        message = f"Provider '{provider}' is unavailable: {reason}"
        super().__init__(message, provider=provider)
        self.reason = reason


class RateLimitError(MarketDataError):
    """
    Raised when the provider's rate limit has been exceeded.

    This is a retryable error (with backoff).

    Attributes:
        retry_after: Seconds to wait before retrying (if provided by API)
    """

    def __init__(self, provider: str, retry_after: int | None = None) -> None:
        message = f"Rate limit exceeded for provider '{provider}'"
        if retry_after:
            message += f" (retry after {retry_after}s)"
        super().__init__(message, provider=provider)
        self.retry_after = retry_after


class PriceUnavailableError(MarketDataError):
    """
    Raised when a stock or gold price cannot be obtained for a window.

    The provider answered with an error status (or the request failed
    outright after retries). An empty-but-successful answer is NOT an
    error: it yields a zero price.

    Attributes:
        symbol: Ticker or gold price identifier
        window: (from, to) Unix seconds of the requested window
    """

    def __init__(
            self,
            symbol: str,
            window: tuple[int, int],
            reason: str | None = None,
            provider: str | None = None,
    ) -> None:
        self.symbol = symbol
        self.window = window
        self.reason = reason
        message = f"No price available for '{symbol}' in window {window[0]}..{window[1]}"
        if reason:
            message += f": {reason}"
        super().__init__(message, provider=provider)


class UnsupportedGoldSourceError(MarketDataError):
    """
    Raised when a gold entry names a price source other than SJC.

    Only SJC gold prices are available from the data API.
    """

    def __init__(self, source: str | None, entry_id: str | None = None) -> None:
        self.source = source
        self.entry_id = entry_id
        super().__init__(f"Invalid gold source for entry {entry_id}: {source}")


# =============================================================================
# FX RATE ERRORS
# =============================================================================


class FXRateError(ServiceError):
    """
    Base exception for FX rate errors.

    Attributes:
        base_currency: The currency being converted from
        quote_currency: The currency being converted to
    """

    def __init__(
            self,
            message: str,
            base_currency: str | None = None,
            quote_currency: str | None = None,
    ) -> None:
        self.base_currency = base_currency
        self.quote_currency = quote_currency
        super().__init__(message)


class RateUnavailableError(FXRateError):
    """
    Raised when the rate provider returns no samples or an error status.

    Rates are always requested as "currency -> VND", so base_currency is the
    leg that failed and quote_currency is the pivot.
    """

    def __init__(
            self,
            currency: str,
            reason: str | None = None,
            quote_currency: str = "VND",
    ) -> None:
        self.reason = reason
        message = reason or f"Failed to fetch exchange rate for {currency}"
        super().__init__(message, base_currency=currency, quote_currency=quote_currency)


# =============================================================================
# BOND ERRORS
# =============================================================================


class BondError(ServiceError):
    """Base exception for bond pricing errors."""
    pass


class InvalidBondParametersError(BondError):
    """
    Raised when bond math receives or produces non-finite values.

    Examples:
    - NaN/infinite face value, coupon rate or YTM
    - Non-positive time from purchase to maturity when back-calculating
      the coupon rate

    Attributes:
        reason: Specific reason for the failure
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Invalid bond parameters: {reason}")


# =============================================================================
# COUPON PAYMENT ERRORS
# =============================================================================


class CouponPaymentNotFoundError(ServiceError):
    """Raised when a coupon payment ID does not exist in the store."""

    def __init__(self, payment_id: str) -> None:
        self.payment_id = payment_id
        super().__init__(f"Coupon payment {payment_id} not found")


__all__ = [
    # Base
    "ServiceError",
    # Validation
    "ValidationError",
    "UnsupportedUnitError",
    # Market Data
    "MarketDataError",
    "ProviderUnavailableError",
    "RateLimitError",
    "PriceUnavailableError",
    "UnsupportedGoldSourceError",
    # FX Rate
    "FXRateError",
    "RateUnavailableError",
    # Bonds
    "BondError",
    "InvalidBondParametersError",
    # Coupons
    "CouponPaymentNotFoundError",
]
