# backend/fincatch/services/valuation/bond_pricer.py
"""
Bond present-value pricing.

PV = Σ C / (1 + r)^t  +  FV / (1 + r)^n

with one twist kept for parity with existing valuations: the final period
(t == 1) is not discounted by a full period but by a fractional-year
adjustment

    C / (1 + r × progress_ratio)

where progress_ratio = ceil(days to maturity) / 365, rounded to three
decimals (0 once matured). The face value is discounted the same way when
only one period remains. The result moves smoothly near maturity at the
cost of a discontinuity when the remaining period count changes.

Matured bonds are worth their face value. No clamping is applied to
pathological yields.
"""

import logging
import math

from fincatch.services.constants import (
    DAYS_PER_YEAR,
    PERIODS_PER_YEAR,
    PROGRESS_RATIO_DECIMALS,
)
from fincatch.services.exceptions import InvalidBondParametersError
from fincatch.services.protocols import Clock, SystemClock
from fincatch.utils.date_utils import SECONDS_PER_DAY, SECONDS_PER_YEAR

logger = logging.getLogger(__name__)


def _require_finite(**values: float) -> None:
    for name, value in values.items():
        if value is None or not math.isfinite(value):
            raise InvalidBondParametersError(f"{name} must be a finite number, got {value}")


class BondPricer:
    """
    Present-value pricer for fixed-coupon bonds.

    `as_of` defaults to the injected clock, so tests can freeze time.

    Example:
        pricer = BondPricer()
        value = pricer.present_value(
            face_value=1000, coupon_rate=5, ytm=6,
            maturity_date=1893456000, coupon_frequency="semiannual",
        )
    """

    def __init__(self, clock: Clock | None = None) -> None:
        self.clock = clock or SystemClock()

    def _now(self, as_of: float | None) -> float:
        return self.clock.now() if as_of is None else as_of

    def progress_ratio(self, maturity_date: int, as_of: float | None = None) -> float:
        """
        Fraction of a year left until maturity, in whole days.

        Returns:
            round(ceil(seconds_left / 86400) / 365, 3), or 0 when matured
        """
        now = self._now(as_of)
        if maturity_date < now:
            return 0.0
        days_remaining = math.ceil((maturity_date - now) / SECONDS_PER_DAY)
        return round(days_remaining / DAYS_PER_YEAR, PROGRESS_RATIO_DECIMALS)

    def present_value(
            self,
            face_value: float,
            coupon_rate: float,
            ytm: float,
            maturity_date: int,
            coupon_frequency: str,
            as_of: float | None = None,
    ) -> float:
        """
        Current value of one bond.

        Args:
            face_value: Principal repaid at maturity
            coupon_rate: Annual coupon, percent of face value
            ytm: Yield to maturity, annual percent
            maturity_date: Unix seconds
            coupon_frequency: annual, semiannual, quarterly or monthly
            as_of: Valuation instant (Unix seconds); now when omitted

        Returns:
            Sum of discounted coupons and discounted face value; exactly
            `face_value` when the bond has matured

        Raises:
            InvalidBondParametersError: Non-finite input or result, or an
                unknown coupon frequency
        """
        _require_finite(face_value=face_value, coupon_rate=coupon_rate, ytm=ytm)

        now = self._now(as_of)
        time_to_maturity_years = (maturity_date - now) / SECONDS_PER_YEAR
        if time_to_maturity_years <= 0:
            return face_value

        try:
            periods_per_year = PERIODS_PER_YEAR[coupon_frequency]
        except KeyError:
            raise InvalidBondParametersError(
                f"unknown coupon frequency '{coupon_frequency}'"
            ) from None

        periodic_coupon = face_value * (coupon_rate / 100 / periods_per_year)
        periodic_ytm = ytm / 100 / periods_per_year
        remaining_periods = math.ceil(time_to_maturity_years * periods_per_year)
        final_period_factor = 1 + periodic_ytm * self.progress_ratio(maturity_date, now)

        pv_coupons = 0.0
        for t in range(remaining_periods, 0, -1):
            if t > 1:
                pv_coupons += periodic_coupon / (1 + periodic_ytm) ** t
            else:
                pv_coupons += periodic_coupon / final_period_factor

        if remaining_periods > 1:
            pv_face_value = face_value / (1 + periodic_ytm) ** remaining_periods
        else:
            pv_face_value = face_value / final_period_factor

        value = pv_coupons + pv_face_value
        if not math.isfinite(value):
            raise InvalidBondParametersError(f"present value is not finite ({value})")
        return value

    def implied_coupon_rate(
            self,
            purchase_price: float,
            face_value: float,
            ytm: float,
            purchase_date: int,
            maturity_date: int,
    ) -> float:
        """
        Back out the annual coupon rate from a purchase price.

        coupon_rate = ((P × (1 + y)^T − FV) / (FV × T)) × 100

        with T the years from purchase to maturity and y = ytm / 100.

        Raises:
            InvalidBondParametersError: T <= 0, zero face value or a
                non-finite result
        """
        _require_finite(purchase_price=purchase_price, face_value=face_value, ytm=ytm)

        years = (maturity_date - purchase_date) / SECONDS_PER_YEAR
        if years <= 0:
            raise InvalidBondParametersError("maturity date must be after purchase date")
        if face_value == 0:
            raise InvalidBondParametersError("face value must be non-zero")

        future_value = purchase_price * (1 + ytm / 100) ** years
        rate = (future_value - face_value) / (face_value * years) * 100
        if not math.isfinite(rate):
            raise InvalidBondParametersError(f"implied coupon rate is not finite ({rate})")

        logger.debug(
            f"Implied coupon rate {rate:.4f}% (P={purchase_price}, FV={face_value}, "
            f"ytm={ytm}%, T={years:.4f}y)"
        )
        return rate
