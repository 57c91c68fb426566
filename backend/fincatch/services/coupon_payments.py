# backend/fincatch/services/coupon_payments.py
"""
Coupon Payment Service for recording realized bond coupons.

This service handles:
- Recording, editing and deleting coupon payments
- Listing the payments of one bond entry, oldest first
- Serving those payments to PerformanceService (CouponPaymentSource)

Payments are summed by the aggregator without deduplication: two payments
on the same date are two payments.

Design Principles:
- Single Responsibility: only handles coupon payment persistence
- No HTTP Knowledge: raises domain exceptions, not transport errors
- CRUD methods take a Session (caller controls the unit of work); the
  async listing opens its own session from the factory inside a worker
  thread, keeping the blocking query off the event loop

Usage:
    from fincatch.services.coupon_payments import CouponPaymentRepository

    repo = CouponPaymentRepository()
    payment = repo.create(db, BondCouponPaymentCreate(entry_id="b1", ...))
    payments = await repo.list_coupon_payments("b1")
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from fincatch.models import BondCouponPaymentRecord
from fincatch.schemas.portfolio import (
    BondCouponPayment,
    BondCouponPaymentCreate,
    BondCouponPaymentUpdate,
)
from fincatch.services.exceptions import CouponPaymentNotFoundError

logger = logging.getLogger(__name__)


@dataclass
class CouponPaymentUpdateResult:
    """Result of updating a coupon payment."""

    payment: BondCouponPayment
    changed_fields: list[str]


class CouponPaymentRepository:
    """
    SQLAlchemy-backed store of bond coupon payments.

    Attributes:
        session_factory: Builds sessions for the async listing interface
    """

    def __init__(self, session_factory: sessionmaker | None = None) -> None:
        if session_factory is None:
            from fincatch.database import SessionLocal
            session_factory = SessionLocal
        self.session_factory = session_factory

    # =========================================================================
    # CRUD
    # =========================================================================

    def create(self, db: Session, data: BondCouponPaymentCreate) -> BondCouponPayment:
        record = BondCouponPaymentRecord(
            entry_id=data.entry_id,
            payment_date=data.payment_date,
            amount=data.amount,
            currency=data.currency,
            notes=data.notes,
        )
        db.add(record)
        db.commit()
        db.refresh(record)

        logger.info(
            f"Coupon payment {record.id} recorded for entry {record.entry_id}: "
            f"{record.amount} {record.currency}"
        )
        return BondCouponPayment.model_validate(record)

    def get(self, db: Session, payment_id: str) -> BondCouponPayment:
        """
        Raises:
            CouponPaymentNotFoundError: No payment with this ID
        """
        return BondCouponPayment.model_validate(self._get_record(db, payment_id))

    def update(
            self,
            db: Session,
            payment_id: str,
            data: BondCouponPaymentUpdate,
    ) -> CouponPaymentUpdateResult:
        """
        Apply the fields set in `data`; unset fields are left alone.

        Raises:
            CouponPaymentNotFoundError: No payment with this ID
        """
        record = self._get_record(db, payment_id)
        changed_fields: list[str] = []

        for field_name, value in data.model_dump(exclude_unset=True).items():
            if value is not None and getattr(record, field_name) != value:
                setattr(record, field_name, value)
                changed_fields.append(field_name)

        if changed_fields:
            record.updated_at = datetime.now(timezone.utc)
            db.commit()
            db.refresh(record)
            logger.info(f"Coupon payment {payment_id} updated: {changed_fields}")

        return CouponPaymentUpdateResult(
            payment=BondCouponPayment.model_validate(record),
            changed_fields=changed_fields,
        )

    def delete(self, db: Session, payment_id: str) -> None:
        """
        Raises:
            CouponPaymentNotFoundError: No payment with this ID
        """
        record = self._get_record(db, payment_id)
        db.delete(record)
        db.commit()
        logger.info(f"Coupon payment {payment_id} deleted")

    def list_for_entry(self, db: Session, entry_id: str) -> list[BondCouponPayment]:
        """All payments for a bond entry, oldest first."""
        records = db.scalars(
            select(BondCouponPaymentRecord)
            .where(BondCouponPaymentRecord.entry_id == entry_id)
            .order_by(BondCouponPaymentRecord.payment_date, BondCouponPaymentRecord.created_at)
        ).all()
        return [BondCouponPayment.model_validate(record) for record in records]

    # =========================================================================
    # COUPON PAYMENT SOURCE
    # =========================================================================

    async def list_coupon_payments(self, entry_id: str) -> list[BondCouponPayment]:
        """Async listing consumed by PerformanceService, run in a worker thread."""
        return await asyncio.to_thread(self._list_in_new_session, entry_id)

    def _list_in_new_session(self, entry_id: str) -> list[BondCouponPayment]:
        with self.session_factory() as db:
            return self.list_for_entry(db, entry_id)

    # =========================================================================
    # PRIVATE HELPERS
    # =========================================================================

    @staticmethod
    def _get_record(db: Session, payment_id: str) -> BondCouponPaymentRecord:
        record = db.get(BondCouponPaymentRecord, payment_id)
        if record is None:
            raise CouponPaymentNotFoundError(payment_id)
        return record
