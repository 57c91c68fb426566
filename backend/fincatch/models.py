# backend/fincatch/models.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import BigInteger, DateTime, Float, Index, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


def _new_id() -> str:
    return str(uuid.uuid4())


class BondCouponPaymentRecord(Base):
    """
    A coupon payment actually received for a bond entry.

    Entries themselves live elsewhere (client storage or the sync server);
    entry_id is an opaque reference, not a foreign key. Several payments on
    the same date are allowed and are all summed.
    """
    __tablename__ = "bond_coupon_payments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    entry_id: Mapped[str] = mapped_column(String, index=True)
    payment_date: Mapped[int] = mapped_column(BigInteger)  # Unix seconds
    amount: Mapped[float] = mapped_column(Float)
    currency: Mapped[str] = mapped_column(String(3), default="USD")
    notes: Mapped[str | None] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_bond_coupon_payments_entry_date", "entry_id", "payment_date"),
    )
