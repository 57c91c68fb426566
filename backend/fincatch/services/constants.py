# backend/fincatch/services/constants.py
"""
Centralized constants for the valuation engine.

Single source of truth for currency, unit, bond and provider constants
used across the services.

Usage:
    from fincatch.services.constants import (
        PIVOT_CURRENCY,
        GRAMS_PER_UNIT,
        PERIODS_PER_YEAR,
    )
"""

from fincatch.utils.date_utils import SECONDS_PER_DAY, SECONDS_PER_HOUR


# =============================================================================
# CURRENCIES
# =============================================================================

# The rate provider only quotes "currency -> VND"; every pair goes through it
PIVOT_CURRENCY: str = "VND"

# Fallback when an entry or payment has no currency
DEFAULT_CURRENCY: str = "USD"

SUPPORTED_CURRENCIES: tuple[str, ...] = (
    "USD", "VND", "EUR", "GBP", "JPY", "CNY", "KRW", "THB", "SGD",
)

CURRENCY_SYMBOLS: dict[str, str] = {
    "USD": "$",
    "VND": "₫",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "CNY": "¥",
    "KRW": "₩",
    "THB": "฿",
    "SGD": "S$",
}

# Currencies whose symbol is written after the amount
SUFFIX_SYMBOL_CURRENCIES: frozenset[str] = frozenset({"VND"})


# =============================================================================
# PROVIDER WINDOWS
# =============================================================================

# Exchange rates are requested over the hour ending at the target instant
FX_LOOKBACK_SECONDS: int = SECONDS_PER_HOUR

# Prices are requested over the day ending at the target instant
PRICE_LOOKBACK_SECONDS: int = SECONDS_PER_DAY

# Default lifetime of a cached current exchange rate (5 minutes)
FX_CACHE_TTL_SECONDS: int = 300

# Daily candles for stock history requests
DAILY_RESOLUTION: str = "1D"


# =============================================================================
# GOLD
# =============================================================================

# Only SJC gold prices are served by the data API
SJC_GOLD_SOURCE: str = "sjc"

# Gold prices are quoted per tael, in VND
GOLD_PRICE_CURRENCY: str = "VND"
GOLD_BASE_UNIT: str = "tael"

# Default unit for computation when an entry has none; the entry form
# preselects mace
DEFAULT_GOLD_UNIT: str = "tael"
UI_DEFAULT_GOLD_UNIT: str = "mace"

# 1 tael = 10 mace = 37.5 g; troy ounce = 31.1035 g
GRAMS_PER_UNIT: dict[str, float] = {
    "gram": 1.0,
    "mace": 3.75,
    "tael": 37.5,
    "ounce": 31.1035,
    "kg": 1000.0,
}

# SJC price ids quoted per tael (bars); everything else is per mace
SJC_TAEL_PRICE_IDS: frozenset[str] = frozenset({"1", "2"})


# =============================================================================
# BONDS
# =============================================================================

PERIODS_PER_YEAR: dict[str, int] = {
    "annual": 1,
    "semiannual": 2,
    "quarterly": 4,
    "monthly": 12,
}

# Days in a year used by the fractional final-period adjustment
DAYS_PER_YEAR: int = 365

# Progress ratio is rounded to this many decimals
PROGRESS_RATIO_DECIMALS: int = 3

# Bond price provenance tags
BOND_SOURCE_CALCULATED: str = "calculated"
BOND_SOURCE_MANUAL: str = "manual"
BOND_SOURCE_FACE_VALUE: str = "faceValue"
BOND_SOURCE_PURCHASE_PRICE: str = "purchasePrice"


# =============================================================================
# PERFORMANCE SERIES
# =============================================================================

# Value assigned to the first sample of a normalized series
BASE_INDEX: float = 100.0

DEFAULT_BENCHMARK_SOURCE: str = "yahoo_finance"
