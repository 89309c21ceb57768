"""
Domain types for the savings scheme ledger.

These are the in-memory shapes the ledger functions operate on. They are
immutable: a Payment's grams and rate snapshot are fixed when it is recorded,
and billing months are derived views, never mutated.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from scheme_ledger.services.allocation import allocate_grams
from scheme_ledger.services.dates import add_months, start_of_day


class MetalGrade(str, Enum):
    K18 = "18K"
    K22 = "22K"
    K24 = "24K"
    SILVER = "SILVER"


class EnrollmentStatus(str, Enum):
    ACTIVE = "ACTIVE"
    CLOSED = "CLOSED"


class PaymentType(str, Enum):
    PRIMARY_INSTALLMENT = "PRIMARY_INSTALLMENT"
    TOP_UP = "TOP_UP"


class PaymentStatus(str, Enum):
    SUCCESS = "SUCCESS"
    PENDING = "PENDING"
    FAILED = "FAILED"


class BillingStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    OVERDUE = "OVERDUE"


class LedgerModel(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True, use_enum_values=False)


class Enrollment(LedgerModel):
    """A customer's subscription to a fixed-tenure savings scheme."""
    enrollment_id: str = Field(..., description="Enrollment identifier")
    customer_id: str = Field(..., description="Owning customer")
    grade: MetalGrade = Field(..., description="Metal grade the savings accrue in")
    commitment_amount: Decimal = Field(..., description="Monthly installment amount")
    tenure_months: int = Field(..., description="Number of monthly installments")
    created_at: datetime = Field(..., description="Enrollment creation timestamp")
    maturity_date: Optional[datetime] = Field(None, description="Explicit maturity date, if any")
    status: EnrollmentStatus = Field(EnrollmentStatus.ACTIVE)
    scheme_name: Optional[str] = Field(None, description="Display name of the scheme template")

    @property
    def effective_maturity_date(self) -> datetime:
        """Explicit maturity date, else creation date + tenure months (midnight UTC)."""
        if self.maturity_date is not None:
            return start_of_day(self.maturity_date)
        return add_months(self.created_at, self.tenure_months)

    @property
    def required_amount(self) -> Decimal:
        """Full principal owed across the tenure, excluding top-ups."""
        return self.commitment_amount * self.tenure_months


class Payment(LedgerModel):
    """A single money transfer against an enrollment, with its rate snapshot."""
    payment_id: str
    enrollment_id: str
    amount: Decimal
    rate_per_gram: Decimal
    grams_allocated: Decimal
    payment_type: PaymentType = PaymentType.PRIMARY_INSTALLMENT
    status: PaymentStatus = PaymentStatus.SUCCESS
    paid_at: datetime

    @classmethod
    def record(
        cls,
        enrollment_id: str,
        amount: Any,
        rate_per_gram: Any,
        paid_at: datetime,
        payment_type: PaymentType = PaymentType.PRIMARY_INSTALLMENT,
        status: PaymentStatus = PaymentStatus.SUCCESS,
        payment_id: Optional[str] = None,
    ) -> "Payment":
        """Build a payment, allocating grams once from the supplied rate snapshot."""
        grams = allocate_grams(amount, rate_per_gram)
        return cls(
            payment_id=payment_id or str(uuid.uuid4()),
            enrollment_id=enrollment_id,
            amount=Decimal(str(amount)),
            rate_per_gram=Decimal(str(rate_per_gram)),
            grams_allocated=grams,
            payment_type=payment_type,
            status=status,
            paid_at=paid_at,
        )

    @property
    def is_success(self) -> bool:
        return self.status == PaymentStatus.SUCCESS

    @property
    def is_primary(self) -> bool:
        return self.payment_type == PaymentType.PRIMARY_INSTALLMENT


class RateSnapshot(LedgerModel):
    """Metal price per gram for a grade, effective from a given instant."""
    grade: MetalGrade
    rate_per_gram: Decimal
    effective_from: datetime


class BillingMonth(LedgerModel):
    """One expected installment period of an enrollment."""
    enrollment_id: str
    index: int = Field(..., description="0-based position in the schedule")
    billing_month: str = Field(..., description="Calendar month label, YYYY-MM")
    due_date: datetime
    primary_paid: bool = False
    status: BillingStatus = BillingStatus.PENDING


class ClassifiedMonth(LedgerModel):
    """A billing month together with its paid/pending/overdue classification."""
    billing_month: BillingMonth
    status: BillingStatus
    days_overdue: int = 0
    payment_id: Optional[str] = Field(None, description="Payment that satisfied this month")
    amount_applied: Optional[Decimal] = Field(None, description="Amount of that payment")


class DuesSummary(LedgerModel):
    """Outstanding dues of one enrollment as of a given instant."""
    total_due: Decimal
    overdue_count: int
    pending_count: int
    next_due_date: Optional[datetime] = None


class EligibilityResult(LedgerModel):
    """Redemption eligibility plus the totals needed to show progress."""
    eligible: bool
    total_grams: Decimal
    total_paid: Decimal
    primary_paid: Decimal
    required_amount: Decimal
    shortfall: Decimal
    maturity_date: datetime
    eligible_date: Optional[datetime] = None
    unmet_conditions: list[str] = Field(default_factory=list)
    current_value: Optional[Decimal] = None


class GradeTotals(LedgerModel):
    total_paid: Decimal = Decimal("0")
    total_grams: Decimal = Decimal("0")
    payment_count: int = 0


class LedgerSummary(LedgerModel):
    """Totals over SUCCESS payments, optionally partitioned by metal grade."""
    total_paid: Decimal
    total_grams: Decimal
    payment_count: int
    by_grade: Optional[dict[MetalGrade, GradeTotals]] = None
