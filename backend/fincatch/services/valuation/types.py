# backend/fincatch/services/valuation/types.py
"""
Internal data types for the valuation engine.

These dataclasses are the results produced by the pricing strategies,
the performance aggregator and the series builders. They are NOT Pydantic
schemas - the input data model lives in fincatch/schemas/portfolio.py.

Design Principles:
- Immutable where possible (frozen=True for value objects)
- Plain floats for amounts; nothing is rounded at this layer
- Unix seconds for every timestamp
- Failures accumulate as EntryFailure markers instead of vanishing

Type Hierarchy:
    PriceQuote            - One priced amount with its currency and provenance
    EntryFailure          - Why one entry could not be priced
    EntryPerformance      - Valuation of one entry in the display currency
    PortfolioPerformance  - Totals over all entries
    SeriesPoint           - Single point of a base-100 series
    PerformanceSeries     - Portfolio base-100 series
    HoldingSeries         - Base-100 series of one holding from its purchase
    HoldingsPerformance   - Per-holding series for a date range
    BenchmarkComparison   - Portfolio vs benchmark series and returns
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fincatch.schemas.portfolio import BondEntry, GoldEntry, StockEntry

    Entry = StockEntry | GoldEntry | BondEntry


# =============================================================================
# PRICING
# =============================================================================

@dataclass(frozen=True)
class PriceQuote:
    """
    A per-unit price in its native currency.

    Attributes:
        amount: Price per base unit (per share, per tael, per bond)
        currency: Native currency of `amount`
        source: Provider name, or "calculated"/"manual"/"faceValue"/
            "purchasePrice" for bonds
    """

    amount: float
    currency: str
    source: str


@dataclass(frozen=True)
class EntryFailure:
    """
    Marker for an entry that could not be priced.

    Attributes:
        entry_id: Entry identifier (None for unsaved entries)
        symbol: Entry symbol, for display
        reason: Human-readable error message
        timestamp: Sample instant for series failures; None for current
    """

    entry_id: str | None
    symbol: str
    reason: str
    timestamp: int | None = None


# =============================================================================
# CURRENT PERFORMANCE
# =============================================================================

@dataclass
class EntryPerformance:
    """
    One entry's valuation in the display currency.

    Attributes:
        entry: The holding this row describes
        current_price: Current price per base unit, display currency
        purchase_price: Purchase price per base unit, display currency
        current_value: current_price × base quantity
        total_cost: purchase_price × base quantity + fees
        gain_loss: current_value − total_cost + coupon_income
        gain_loss_percentage: gain_loss / total_cost × 100 (0 when no cost)
        price_source: Provenance tag of the current price
        currency: Display currency
        exchange_rate: Rate applied to the current price (1.0 when none)
        coupon_income: Realized coupons, display currency (bonds only)
    """

    entry: Entry
    current_price: float
    purchase_price: float
    current_value: float
    total_cost: float
    gain_loss: float
    gain_loss_percentage: float
    price_source: str
    currency: str
    exchange_rate: float = 1.0
    coupon_income: float = 0.0


@dataclass
class PortfolioPerformance:
    """
    Portfolio totals in the display currency.

    `entries_performance` mirrors the order of the input entries, minus any
    entry listed in `failures`.
    """

    total_value: float
    total_cost: float
    total_gain_loss: float
    total_gain_loss_percentage: float
    currency: str
    entries_performance: list[EntryPerformance] = field(default_factory=list)
    failures: list[EntryFailure] = field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        return bool(self.failures)


# =============================================================================
# SERIES
# =============================================================================

@dataclass(frozen=True)
class SeriesPoint:
    """Single point in a base-100 series."""

    timestamp: int
    value: float


@dataclass
class PerformanceSeries:
    """
    Portfolio value over time, normalized to 100 at the first sample with
    a nonzero total.

    Attributes:
        points: One point per sample timestamp, ascending
        failures: Entry × sample fetches that failed and contributed zero
    """

    points: list[SeriesPoint] = field(default_factory=list)
    failures: list[EntryFailure] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.points

    @property
    def last_value(self) -> float | None:
        return self.points[-1].value if self.points else None

    def __len__(self) -> int:
        return len(self.points)


@dataclass
class HoldingSeries:
    """One holding's price normalized to 100 at its purchase price."""

    entry: Entry
    points: list[SeriesPoint]
    current_return: float


@dataclass
class HoldingsPerformance:
    """Per-holding series for a date range; holdings without data are omitted."""

    holdings: list[HoldingSeries]
    start_date: int
    end_date: int
    currency: str
    failures: list[EntryFailure] = field(default_factory=list)


@dataclass
class BenchmarkComparison:
    """
    Portfolio series against a benchmark, each normalized to its own start.

    Returns are `last value − 100`; outperformance is portfolio − benchmark.
    """

    portfolio_series: list[SeriesPoint]
    benchmark_series: list[SeriesPoint]
    benchmark_name: str
    start_date: int
    end_date: int
    currency: str
    portfolio_return: float
    benchmark_return: float
    outperformance: float
