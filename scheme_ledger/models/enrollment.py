"""
Enrollment model: a customer's subscription to a savings scheme template.
Billing months are derived from these columns and never stored.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import String, Integer, Numeric, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from scheme_ledger.core.database import Base


class Enrollment(Base):
    __tablename__ = "enrollments"

    enrollment_id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
        doc="Unique enrollment identifier (UUID)"
    )
    customer_id: Mapped[str] = mapped_column(
        String(36),
        nullable=False,
        index=True,
        doc="Customer who owns the enrollment"
    )
    scheme_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        default="Gold Plan",
        doc="Display name of the scheme template"
    )
    grade: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        doc="Metal grade: 18K, 22K, 24K, SILVER"
    )
    commitment_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        doc="Monthly installment amount"
    )
    tenure_months: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        doc="Number of monthly installments"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=func.now(),
        nullable=False,
        doc="Enrollment timestamp (UTC)"
    )
    maturity_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime,
        nullable=True,
        doc="Explicit maturity date; derived from tenure when NULL"
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="ACTIVE",
        doc="ACTIVE or CLOSED"
    )

    payments = relationship(
        "Payment",
        back_populates="enrollment",
        lazy="selectin",
        order_by="Payment.paid_at",
    )

    def __repr__(self) -> str:
        return (
            f"<Enrollment(id={self.enrollment_id}, customer={self.customer_id}, "
            f"grade={self.grade}, tenure={self.tenure_months})>"
        )
