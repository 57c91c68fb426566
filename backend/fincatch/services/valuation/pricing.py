# backend/fincatch/services/valuation/pricing.py
"""
Per-asset pricing strategies.

Each strategy answers one question: what is one base unit of this entry
worth, in which currency, and where did the number come from?

    StockPricingStrategy  last daily close × price_scale, entry currency
    GoldPricingStrategy   last SJC sell × price_scale, VND per tael
    BondPricingStrategy   present value / manual price / face value /
                          purchase price, entry currency

Windows:
    current stock   [last_trading - 86401, last_trading]
    current gold    [now - 86400, now]
    historical      [as_of - 86400, as_of]

An error status from the provider raises PriceUnavailableError. A
successful answer with no samples yields a zero price and a warning; the
caller decides what a zero means.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from fincatch.schemas.portfolio import BondEntry, GoldEntry, StockEntry
from fincatch.services.constants import (
    BOND_SOURCE_CALCULATED,
    BOND_SOURCE_FACE_VALUE,
    BOND_SOURCE_MANUAL,
    DAILY_RESOLUTION,
    GOLD_PRICE_CURRENCY,
    PRICE_LOOKBACK_SECONDS,
    SJC_GOLD_SOURCE,
)
from fincatch.services.exceptions import (
    PriceUnavailableError,
    UnsupportedGoldSourceError,
)
from fincatch.services.protocols import (
    Clock,
    MarketDataProviderProtocol,
    SystemClock,
)
from fincatch.services.valuation.bond_pricer import BondPricer
from fincatch.services.valuation.types import PriceQuote
from fincatch.utils.date_utils import last_trading_timestamp

if TYPE_CHECKING:
    from fincatch.services.valuation.types import Entry

logger = logging.getLogger(__name__)

UNKNOWN_SOURCE = "unknown"


class PricingStrategy(Protocol):
    """Prices one base unit of an entry at `as_of` (None = now)."""

    async def price(self, entry: Entry, as_of: int | None = None) -> PriceQuote:
        ...


# =============================================================================
# STOCKS
# =============================================================================

class StockPricingStrategy:
    """Last daily close of the window, scaled by the provider's price_scale."""

    def __init__(self, provider: MarketDataProviderProtocol, clock: Clock | None = None) -> None:
        self.provider = provider
        self.clock = clock or SystemClock()

    def window(self, as_of: int | None) -> tuple[int, int]:
        if as_of is None:
            end = last_trading_timestamp(self.clock.now())
            return end - PRICE_LOOKBACK_SECONDS - 1, end
        return as_of - PRICE_LOOKBACK_SECONDS, as_of

    async def price(self, entry: StockEntry, as_of: int | None = None) -> PriceQuote:
        from_, to = self.window(as_of)
        response = await self.provider.fetch_stock_history(
            entry.symbol, from_, to, resolution=DAILY_RESOLUTION, source=entry.source,
        )

        if not response.is_ok:
            raise PriceUnavailableError(
                entry.symbol, (from_, to), reason=response.error, provider=entry.source,
            )

        amount = 0.0
        if response.candles:
            amount = response.candles[-1].close * response.price_scale
        else:
            logger.warning(f"No stock data for {entry.symbol} in {from_}..{to}; using 0")

        return PriceQuote(
            amount=amount,
            currency=entry.currency,
            source=entry.source or UNKNOWN_SOURCE,
        )


# =============================================================================
# GOLD
# =============================================================================

class GoldPricingStrategy:
    """
    Last SJC sell price of the window, in VND.

    Only the SJC source is served by the data API; any other source raises
    UnsupportedGoldSourceError before a request is made.
    """

    def __init__(self, provider: MarketDataProviderProtocol, clock: Clock | None = None) -> None:
        self.provider = provider
        self.clock = clock or SystemClock()

    def window(self, as_of: int | None) -> tuple[int, int]:
        end = int(self.clock.now()) if as_of is None else as_of
        return end - PRICE_LOOKBACK_SECONDS, end

    async def price(self, entry: GoldEntry, as_of: int | None = None) -> PriceQuote:
        if entry.source != SJC_GOLD_SOURCE:
            raise UnsupportedGoldSourceError(entry.source, entry_id=entry.id)

        from_, to = self.window(as_of)
        response = await self.provider.fetch_gold_price(
            entry.symbol, from_, to, source=entry.source,
        )

        if not response.is_ok:
            raise PriceUnavailableError(
                entry.symbol, (from_, to), reason=response.error, provider=entry.source,
            )

        amount = 0.0
        if response.points:
            amount = response.points[-1].sell * response.price_scale
        else:
            logger.warning(f"No gold price for {entry.symbol} in {from_}..{to}; using 0")

        return PriceQuote(amount=amount, currency=GOLD_PRICE_CURRENCY, source=entry.source)


# =============================================================================
# BONDS
# =============================================================================

class BondPricingStrategy:
    """
    Bond price by fallback chain, in the entry currency.

    1. Present value when every calculation input is present
    2. current_market_price when positive
    3. face_value
    4. purchase_price
    """

    def __init__(self, pricer: BondPricer | None = None) -> None:
        self.pricer = pricer or BondPricer()

    async def price(self, entry: BondEntry, as_of: int | None = None) -> PriceQuote:
        mode = entry.pricing_mode

        if mode == BOND_SOURCE_CALCULATED:
            amount = self.pricer.present_value(
                face_value=entry.face_value,
                coupon_rate=entry.coupon_rate,
                ytm=entry.ytm,
                maturity_date=entry.maturity_date,
                coupon_frequency=entry.coupon_frequency,
                as_of=as_of,
            )
        elif mode == BOND_SOURCE_MANUAL:
            amount = entry.current_market_price
        elif mode == BOND_SOURCE_FACE_VALUE:
            amount = entry.face_value
        else:
            amount = entry.purchase_price

        return PriceQuote(amount=amount, currency=entry.currency, source=mode)


# =============================================================================
# DISPATCH
# =============================================================================

class EntryPricer:
    """
    Routes an entry to the strategy for its asset_type.

    Example:
        pricer = EntryPricer.default(provider)
        quote = await pricer.price(entry)
    """

    def __init__(self, strategies: dict[str, PricingStrategy]) -> None:
        self.strategies = strategies

    @classmethod
    def default(
            cls,
            provider: MarketDataProviderProtocol,
            clock: Clock | None = None,
            bond_pricer: BondPricer | None = None,
    ) -> EntryPricer:
        clock = clock or SystemClock()
        return cls({
            "stock": StockPricingStrategy(provider, clock),
            "gold": GoldPricingStrategy(provider, clock),
            "bond": BondPricingStrategy(bond_pricer or BondPricer(clock)),
        })

    async def price(self, entry: Entry, as_of: int | None = None) -> PriceQuote:
        return await self.strategies[entry.asset_type].price(entry, as_of)
