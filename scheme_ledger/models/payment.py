"""
Payment model: money received against an enrollment.
The rate snapshot and allocated grams are written once at insert time.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import String, Numeric, DateTime, ForeignKey, Integer, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from scheme_ledger.core.database import Base


class Payment(Base):
    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    payment_id: Mapped[str] = mapped_column(
        String(36),
        default=lambda: str(uuid.uuid4()),
        unique=True,
        nullable=False,
        doc="Unique payment identifier (UUID); guards against double inserts"
    )
    enrollment_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("enrollments.enrollment_id"),
        nullable=False,
        index=True,
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        doc="Amount paid"
    )
    rate_per_gram: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        doc="Metal rate captured when the payment was recorded"
    )
    grams_allocated: Mapped[Decimal] = mapped_column(
        Numeric(14, 4),
        nullable=False,
        doc="amount / rate_per_gram, rounded half-up to 4 places"
    )
    payment_type: Mapped[str] = mapped_column(
        String(30),
        nullable=False,
        default="PRIMARY_INSTALLMENT",
        doc="PRIMARY_INSTALLMENT or TOP_UP"
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="SUCCESS",
        doc="SUCCESS, PENDING or FAILED"
    )
    mode: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="CASH",
        doc="Collection mode: CASH, UPI, CARD"
    )
    paid_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=func.now(),
        nullable=False,
        index=True,
        doc="When the payment was received (UTC)"
    )

    enrollment = relationship("Enrollment", back_populates="payments")

    def __repr__(self) -> str:
        return (
            f"<Payment(id={self.payment_id}, enrollment={self.enrollment_id}, "
            f"amount={self.amount}, grams={self.grams_allocated})>"
        )
