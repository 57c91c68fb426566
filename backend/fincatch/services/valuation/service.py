# backend/fincatch/services/valuation/service.py
"""
Performance Service - current valuation of a set of holdings.

Given heterogeneous entries (stocks, gold, bonds) in different currencies
and units, produce one consistent view in a display currency:

    current_value = current_price × base_quantity
    total_cost    = purchase_price × base_quantity + fees
    gain_loss     = current_value − total_cost + coupon_income

Entries are priced concurrently (bounded by `max_concurrent_fetches`) and
reassembled in input order.

Failure policy:
    ALL_OR_NOTHING  any entry failure -> None (the historical behaviour)
    BEST_EFFORT     failed entries are left out and listed in `failures`

Gold entries with a non-SJC source are always skipped with a failure
marker; they never abort the calculation. A failure to list coupon
payments counts as zero coupon income.

Design Principles:
- Dependency Injection: FX service, entry pricer and coupon source are
  passed in; nothing here talks to httpx or the database
- No HTTP Knowledge: callers get None or a result, never transport errors

Usage:
    from fincatch.services.valuation import PerformanceService

    service = PerformanceService(fx_service, EntryPricer.default(provider))
    performance = await service.calculate(entries, "USD")
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import TYPE_CHECKING

from fincatch.config import settings
from fincatch.services.exceptions import UnsupportedGoldSourceError
from fincatch.services.valuation.types import (
    EntryFailure,
    EntryPerformance,
    PortfolioPerformance,
)
from fincatch.services.valuation.units import to_base_price, to_base_quantity
from fincatch.utils.context import fetch_cycle

if TYPE_CHECKING:
    from fincatch.services.protocols import CouponPaymentSource, FXRateServiceProtocol
    from fincatch.services.valuation.pricing import EntryPricer
    from fincatch.services.valuation.types import Entry

logger = logging.getLogger(__name__)


class FailurePolicy(str, Enum):
    ALL_OR_NOTHING = "all_or_nothing"
    BEST_EFFORT = "best_effort"


def _percentage(gain_loss: float, cost: float) -> float:
    return gain_loss / cost * 100 if cost > 0 else 0.0


class PerformanceService:
    """
    Orchestrates current pricing, conversion and aggregation.

    Attributes:
        fx_service: Currency conversion (FXRateService or a fake)
        pricer: EntryPricer routing entries to pricing strategies
        coupon_source: Coupon payment listing; None disables coupon income
        max_concurrency: Upper bound on entries priced at once
    """

    def __init__(
            self,
            fx_service: FXRateServiceProtocol,
            pricer: EntryPricer,
            coupon_source: CouponPaymentSource | None = None,
            max_concurrency: int | None = None,
    ) -> None:
        self.fx_service = fx_service
        self.pricer = pricer
        self.coupon_source = coupon_source
        self.max_concurrency = max_concurrency or settings.max_concurrent_fetches

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    async def calculate(
            self,
            entries: list[Entry],
            display_currency: str,
            failure_policy: FailurePolicy = FailurePolicy.ALL_OR_NOTHING,
    ) -> PortfolioPerformance | None:
        """
        Value every entry now, in `display_currency`.

        Args:
            entries: Holdings to value
            display_currency: Currency of every figure in the result
            failure_policy: What to do when an entry cannot be priced

        Returns:
            PortfolioPerformance, or None when `entries` is empty or, under
            ALL_OR_NOTHING, when any entry failed
        """
        if not entries:
            return None

        display_currency = display_currency.upper()

        with fetch_cycle("perf"):
            logger.info(
                f"Calculating performance for {len(entries)} entries in {display_currency} "
                f"(policy={failure_policy.value})"
            )

            semaphore = asyncio.Semaphore(self.max_concurrency)

            async def _bounded(entry: Entry) -> EntryPerformance | _FailedEntry:
                async with semaphore:
                    return await self._evaluate_or_fail(entry, display_currency)

            outcomes = await asyncio.gather(*(_bounded(entry) for entry in entries))

            performances: list[EntryPerformance] = []
            failed: list[_FailedEntry] = []
            for entry, outcome in zip(entries, outcomes):
                if isinstance(outcome, EntryPerformance):
                    performances.append(outcome)
                    continue
                failed.append(outcome)
                if isinstance(outcome.error, UnsupportedGoldSourceError):
                    continue
                if failure_policy is FailurePolicy.ALL_OR_NOTHING:
                    logger.error(
                        f"Failed to calculate performance: {entry.label}: {outcome.failure.reason}"
                    )
                    return None

            result = self._aggregate(performances, display_currency)
            result.failures = [outcome.failure for outcome in failed]

            logger.info(
                f"Performance calculated: value={result.total_value:.2f} "
                f"cost={result.total_cost:.2f} {display_currency}, "
                f"{len(result.failures)} failures"
            )
            return result

    # =========================================================================
    # PER ENTRY
    # =========================================================================

    async def _evaluate_or_fail(
            self,
            entry: Entry,
            display_currency: str,
    ) -> EntryPerformance | _FailedEntry:
        try:
            return await self.evaluate_entry(entry, display_currency)
        except UnsupportedGoldSourceError as e:
            logger.warning(str(e))
            return _FailedEntry(entry, e)
        except Exception as e:
            logger.warning(f"Could not price {entry.label}: {e}")
            return _FailedEntry(entry, e)

    async def evaluate_entry(self, entry: Entry, display_currency: str) -> EntryPerformance:
        """
        Value a single entry in `display_currency`.

        Raises:
            ServiceError: Pricing or conversion failed
        """
        quote = await self.pricer.price(entry)

        current_price_display = await self.fx_service.convert_currency(
            quote.amount, quote.currency, display_currency
        )

        unit = getattr(entry, "unit", None) if entry.asset_type == "gold" else None
        quantity = to_base_quantity(entry.quantity, unit, entry.asset_type)
        purchase_price = to_base_price(entry.purchase_price, unit, entry.asset_type)

        purchase_price_display = await self.fx_service.convert_currency(
            purchase_price, entry.currency, display_currency
        )
        fees_display = 0.0
        if entry.transaction_fees:
            fees_display = await self.fx_service.convert_currency(
                entry.transaction_fees, entry.currency, display_currency
            )

        exchange_rate = 1.0
        if quote.currency != display_currency:
            exchange_rate = current_price_display / (quote.amount or 1)

        current_value = current_price_display * quantity
        total_cost = purchase_price_display * quantity + fees_display

        coupon_income = 0.0
        if entry.asset_type == "bond" and entry.id:
            coupon_income = await self._coupon_income(entry.id, display_currency)

        gain_loss = current_value - total_cost + coupon_income

        return EntryPerformance(
            entry=entry,
            current_price=current_price_display,
            purchase_price=purchase_price_display,
            current_value=current_value,
            total_cost=total_cost,
            gain_loss=gain_loss,
            gain_loss_percentage=_percentage(gain_loss, total_cost),
            price_source=quote.source,
            currency=display_currency,
            exchange_rate=exchange_rate,
            coupon_income=coupon_income,
        )

    async def _coupon_income(self, entry_id: str, display_currency: str) -> float:
        """Sum of realized coupons in the display currency; 0 if listing fails."""
        if self.coupon_source is None:
            return 0.0

        try:
            payments = await self.coupon_source.list_coupon_payments(entry_id)
            total = 0.0
            for payment in payments:
                total += await self.fx_service.convert_currency(
                    payment.amount, payment.currency, display_currency
                )
            return total
        except Exception as e:
            logger.warning(f"Failed to fetch coupon payments for entry {entry_id}: {e}")
            return 0.0

    # =========================================================================
    # TOTALS
    # =========================================================================

    @staticmethod
    def _aggregate(
            performances: list[EntryPerformance],
            display_currency: str,
    ) -> PortfolioPerformance:
        total_value = sum(p.current_value for p in performances)
        total_cost = sum(p.total_cost for p in performances)
        total_gain_loss = sum(p.gain_loss for p in performances)

        return PortfolioPerformance(
            total_value=total_value,
            total_cost=total_cost,
            total_gain_loss=total_gain_loss,
            total_gain_loss_percentage=_percentage(total_gain_loss, total_cost),
            currency=display_currency,
            entries_performance=performances,
        )


class _FailedEntry:
    """An entry that could not be priced, with the error that stopped it."""

    __slots__ = ("error", "failure")

    def __init__(self, entry: Entry, error: Exception) -> None:
        self.error = error
        self.failure = EntryFailure(
            entry_id=entry.id,
            symbol=entry.symbol,
            reason=str(error),
        )
