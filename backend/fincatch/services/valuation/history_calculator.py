# backend/fincatch/services/valuation/history_calculator.py
"""
History Calculator for base-100 performance series.

This calculator builds portfolio (and per-holding) time series by pricing
each entry as of each sampled timestamp:

1. Generate samples from start to end, `interval_days` apart, end included
2. For every sample, price every entry bought on or before it over the
   day ending at the sample
3. Accumulate price × base quantity per sample, in entry order
4. Normalize to 100 at the first sample with a nonzero total

Fetches for all (sample, entry) pairs run concurrently under a semaphore;
accumulation happens afterwards so the result does not depend on the order
in which responses arrive.

Degradation:
    A failed fetch is logged, recorded as an EntryFailure for that sample
    and contributes zero. The series itself never fails.

Coverage:
    Stocks and SJC gold have historical prices. Bonds have no historical
    price source and contribute zero. Gold with another source is skipped.

Prices are converted with the current (cached) exchange rate, as the
client charts always have.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from fincatch.config import settings
from fincatch.services.constants import BASE_INDEX, SJC_GOLD_SOURCE
from fincatch.services.valuation.types import (
    EntryFailure,
    HoldingSeries,
    HoldingsPerformance,
    PerformanceSeries,
    SeriesPoint,
)
from fincatch.services.valuation.units import to_base_price, to_base_quantity
from fincatch.utils.context import fetch_cycle
from fincatch.utils.date_utils import generate_sample_timestamps

if TYPE_CHECKING:
    from fincatch.services.protocols import FXRateServiceProtocol
    from fincatch.services.valuation.pricing import EntryPricer
    from fincatch.services.valuation.types import Entry

logger = logging.getLogger(__name__)


def _has_price_history(entry: Entry) -> bool:
    if entry.asset_type == "stock":
        return True
    if entry.asset_type == "gold":
        return entry.source == SJC_GOLD_SOURCE
    return False


def _unit_of(entry: Entry) -> str | None:
    return entry.unit if entry.asset_type == "gold" else None


class HistoryCalculator:
    """
    Builds base-100 series for a portfolio and for its individual holdings.

    Usage:
        calculator = HistoryCalculator(fx_service, EntryPricer.default(provider))
        series = await calculator.build(entries, start, end, "USD")
    """

    def __init__(
            self,
            fx_service: FXRateServiceProtocol,
            pricer: EntryPricer,
            max_concurrency: int | None = None,
    ) -> None:
        self.fx_service = fx_service
        self.pricer = pricer
        self.max_concurrency = max_concurrency or settings.max_concurrent_fetches

    # =========================================================================
    # PORTFOLIO SERIES
    # =========================================================================

    async def build(
            self,
            entries: list[Entry],
            start: int,
            end: int,
            display_currency: str,
            interval_days: int = 1,
    ) -> PerformanceSeries:
        """
        Portfolio value over [start, end], normalized to base 100.

        Args:
            entries: Holdings to include
            start: First sample (Unix seconds)
            end: Last sample (Unix seconds), always included
            display_currency: Currency prices are converted to
            interval_days: Spacing between samples

        Returns:
            PerformanceSeries with one point per sample; 100 for every
            sample before the first nonzero total
        """
        display_currency = display_currency.upper()
        timestamps = generate_sample_timestamps(start, end, interval_days)

        with fetch_cycle("hist"):
            logger.info(
                f"Building history for {len(entries)} entries, "
                f"{len(timestamps)} samples in {display_currency}"
            )

            semaphore = asyncio.Semaphore(self.max_concurrency)
            failures: list[EntryFailure] = []

            async def _value(entry: Entry, timestamp: int) -> float:
                async with semaphore:
                    try:
                        return await self._value_at(entry, timestamp, display_currency)
                    except Exception as e:
                        logger.warning(
                            f"Failed to fetch price for {entry.symbol} at {timestamp}: {e}"
                        )
                        failures.append(EntryFailure(entry.id, entry.symbol, str(e), timestamp))
                        return 0.0

            tasks = [
                [
                    _value(entry, timestamp)
                    for entry in entries
                    if entry.purchase_date <= timestamp and _has_price_history(entry)
                ]
                for timestamp in timestamps
            ]
            per_sample = await asyncio.gather(*(asyncio.gather(*row) for row in tasks))

            points: list[SeriesPoint] = []
            initial_value = 0.0
            for timestamp, values in zip(timestamps, per_sample):
                total_value = 0.0
                for value in values:
                    total_value += value

                if initial_value == 0 and total_value > 0:
                    initial_value = total_value

                normalized = total_value / initial_value * BASE_INDEX if initial_value > 0 else BASE_INDEX
                points.append(SeriesPoint(timestamp=timestamp, value=normalized))

            failures.sort(key=lambda f: (f.timestamp or 0, f.symbol))
            logger.info(f"History built: {len(points)} points, {len(failures)} failed fetches")
            return PerformanceSeries(points=points, failures=failures)

    async def _value_at(self, entry: Entry, timestamp: int, display_currency: str) -> float:
        quote = await self.pricer.price(entry, as_of=timestamp)
        price_display = await self.fx_service.convert_currency(
            quote.amount, quote.currency, display_currency
        )
        return price_display * to_base_quantity(entry.quantity, _unit_of(entry), entry.asset_type)

    # =========================================================================
    # PER-HOLDING SERIES
    # =========================================================================

    async def build_holdings(
            self,
            entries: list[Entry],
            start: int,
            end: int,
            display_currency: str,
            interval_days: int = 1,
    ) -> HoldingsPerformance | None:
        """
        One series per holding, normalized to 100 at its purchase price.

        Each holding is sampled from max(start, purchase_date) to end.
        Samples with a zero price are dropped; holdings left with no
        points are omitted.

        Returns:
            HoldingsPerformance, or None when no holding has data
        """
        if not entries:
            return None

        display_currency = display_currency.upper()

        with fetch_cycle("holdings"):
            semaphore = asyncio.Semaphore(self.max_concurrency)
            failures: list[EntryFailure] = []

            async def _holding(entry: Entry) -> HoldingSeries | None:
                if not _has_price_history(entry):
                    return None
                try:
                    points = await self._holding_points(
                        entry, start, end, display_currency, interval_days, semaphore, failures,
                    )
                except Exception as e:
                    logger.warning(f"Skipping holding {entry.label}: {e}")
                    failures.append(EntryFailure(entry.id, entry.symbol, str(e)))
                    return None
                if not points:
                    return None
                return HoldingSeries(
                    entry=entry,
                    points=points,
                    current_return=points[-1].value - BASE_INDEX,
                )

            results = await asyncio.gather(*(_holding(entry) for entry in entries))
            holdings = [holding for holding in results if holding is not None]

            if not holdings:
                logger.info("No holding has price data for the requested range")
                return None

            return HoldingsPerformance(
                holdings=holdings,
                start_date=start,
                end_date=end,
                currency=display_currency,
                failures=failures,
            )

    async def _holding_points(
            self,
            entry: Entry,
            start: int,
            end: int,
            display_currency: str,
            interval_days: int,
            semaphore: asyncio.Semaphore,
            failures: list[EntryFailure],
    ) -> list[SeriesPoint]:
        timestamps = generate_sample_timestamps(
            max(start, entry.purchase_date), end, interval_days
        ) or [end]

        purchase_price = to_base_price(entry.purchase_price, _unit_of(entry), entry.asset_type)
        purchase_price_display = await self.fx_service.convert_currency(
            purchase_price, entry.currency, display_currency
        )

        async def _sample(timestamp: int) -> SeriesPoint | None:
            async with semaphore:
                try:
                    quote = await self.pricer.price(entry, as_of=timestamp)
                    if quote.amount == 0:
                        return None
                    price_display = await self.fx_service.convert_currency(
                        quote.amount, quote.currency, display_currency
                    )
                except Exception as e:
                    logger.warning(
                        f"Failed to fetch price for {entry.symbol} at {timestamp}: {e}"
                    )
                    failures.append(EntryFailure(entry.id, entry.symbol, str(e), timestamp))
                    return None

            value = (
                price_display / purchase_price_display * BASE_INDEX
                if purchase_price_display > 0
                else BASE_INDEX
            )
            return SeriesPoint(timestamp=timestamp, value=value)

        samples = await asyncio.gather(*(_sample(ts) for ts in timestamps))
        return [point for point in samples if point is not None]
