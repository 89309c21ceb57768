"""
Data access for the ledger.

Loads enrollments, payments and rates as one consistent snapshot and converts
rows into domain types. Bad stored values raise instead of being coerced
to zero, so a corrupt row shows up as an error rather than a wrong total.
"""

import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy.orm import Session

from scheme_ledger.core.exceptions import InvalidEnrollmentError, InvalidInputError
from scheme_ledger.models.enrollment import Enrollment as EnrollmentRow
from scheme_ledger.models.payment import Payment as PaymentRow
from scheme_ledger.models.rate import MetalRate
from scheme_ledger.schemas.savings import (
    Enrollment,
    EnrollmentStatus,
    MetalGrade,
    Payment,
    PaymentStatus,
    PaymentType,
    RateSnapshot,
)
from scheme_ledger.services.allocation import to_currency, to_positive_decimal
from scheme_ledger.services.dates import to_utc
from scheme_ledger.services.rates import latest_rate
from scheme_ledger.services.schedule import validate_enrollment

logger = logging.getLogger(__name__)


def _naive_utc(value: datetime) -> datetime:
    """Columns are naive DateTime holding UTC."""
    return to_utc(value).replace(tzinfo=None)


def to_enrollment(row: EnrollmentRow) -> Enrollment:
    try:
        grade = MetalGrade(row.grade)
        status = EnrollmentStatus(row.status)
    except ValueError as e:
        raise InvalidEnrollmentError(f"Enrollment {row.enrollment_id}: {e}") from e
    if row.commitment_amount is None or row.tenure_months is None or row.created_at is None:
        raise InvalidEnrollmentError(f"Enrollment {row.enrollment_id} has missing required fields")

    return Enrollment(
        enrollment_id=row.enrollment_id,
        customer_id=row.customer_id,
        grade=grade,
        commitment_amount=Decimal(row.commitment_amount),
        tenure_months=row.tenure_months,
        created_at=to_utc(row.created_at),
        maturity_date=to_utc(row.maturity_date) if row.maturity_date else None,
        status=status,
        scheme_name=row.scheme_name,
    )


def to_payment(row: PaymentRow) -> Payment:
    try:
        payment_type = PaymentType(row.payment_type)
        status = PaymentStatus(row.status)
    except ValueError as e:
        raise InvalidInputError(f"Payment {row.payment_id}: {e}") from e
    for field in ("amount", "rate_per_gram", "grams_allocated", "paid_at"):
        if getattr(row, field) is None:
            raise InvalidInputError(f"Payment {row.payment_id} has no {field}")

    return Payment(
        payment_id=row.payment_id,
        enrollment_id=row.enrollment_id,
        amount=Decimal(row.amount),
        rate_per_gram=Decimal(row.rate_per_gram),
        grams_allocated=Decimal(row.grams_allocated),
        payment_type=payment_type,
        status=status,
        paid_at=to_utc(row.paid_at),
    )


def to_rate_snapshot(row: MetalRate) -> RateSnapshot:
    return RateSnapshot(
        grade=MetalGrade(row.grade),
        rate_per_gram=Decimal(row.rate_per_gram),
        effective_from=to_utc(row.effective_from),
    )


def get_enrollment_row(db: Session, enrollment_id: str) -> Optional[EnrollmentRow]:
    return db.query(EnrollmentRow).filter(EnrollmentRow.enrollment_id == enrollment_id).first()


def load_enrollment(db: Session, enrollment_id: str) -> Optional[tuple[Enrollment, list[Payment]]]:
    """Enrollment plus all its payments, or None if the enrollment doesn't exist."""
    row = get_enrollment_row(db, enrollment_id)
    if row is None:
        return None
    return to_enrollment(row), [to_payment(p) for p in row.payments]


def load_customer(db: Session, customer_id: str) -> tuple[list[Enrollment], list[Payment]]:
    """All enrollments of a customer and every payment made against them."""
    rows = (
        db.query(EnrollmentRow)
        .filter(EnrollmentRow.customer_id == customer_id)
        .order_by(EnrollmentRow.created_at)
        .all()
    )
    enrollments = [to_enrollment(r) for r in rows]
    payments = [to_payment(p) for r in rows for p in r.payments]
    return enrollments, payments


def list_rates(db: Session, grade: Optional[MetalGrade] = None) -> list[RateSnapshot]:
    query = db.query(MetalRate)
    if grade is not None:
        query = query.filter(MetalRate.grade == MetalGrade(grade).value)
    return [to_rate_snapshot(r) for r in query.order_by(MetalRate.effective_from).all()]


def add_rate(db: Session, grade: MetalGrade, rate_per_gram: Decimal,
             effective_from: Optional[datetime] = None) -> RateSnapshot:
    rate = to_positive_decimal(to_currency(rate_per_gram, "rate_per_gram"), "rate_per_gram")
    row = MetalRate(
        grade=MetalGrade(grade).value,
        rate_per_gram=rate,
        effective_from=_naive_utc(effective_from or datetime.now(timezone.utc)),
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("Rate updated: %s = %s/g from %s", row.grade, row.rate_per_gram, row.effective_from)
    return to_rate_snapshot(row)


def create_enrollment(
    db: Session,
    customer_id: str,
    grade: MetalGrade,
    commitment_amount: Decimal,
    tenure_months: int,
    scheme_name: str,
    created_at: Optional[datetime] = None,
    maturity_date: Optional[datetime] = None,
) -> Enrollment:
    """
    Persist a new ACTIVE enrollment.

    Raises:
        InvalidEnrollmentError: the record could never produce a schedule.
    """
    row = EnrollmentRow(
        enrollment_id=str(uuid.uuid4()),
        customer_id=customer_id,
        grade=MetalGrade(grade).value,
        commitment_amount=to_currency(commitment_amount, "commitment_amount"),
        tenure_months=tenure_months,
        scheme_name=scheme_name,
        created_at=_naive_utc(created_at or datetime.now(timezone.utc)),
        maturity_date=_naive_utc(maturity_date) if maturity_date else None,
        status=EnrollmentStatus.ACTIVE.value,
    )
    enrollment = to_enrollment(row)
    validate_enrollment(enrollment)

    db.add(row)
    db.commit()
    logger.info("Enrollment %s created for customer %s", row.enrollment_id, customer_id)
    return enrollment


def record_payment(
    db: Session,
    enrollment: Enrollment,
    amount: Decimal,
    payment_type: PaymentType = PaymentType.PRIMARY_INSTALLMENT,
    status: PaymentStatus = PaymentStatus.SUCCESS,
    paid_at: Optional[datetime] = None,
    mode: str = "CASH",
) -> Payment:
    """
    Capture the rate in force at `paid_at` for the enrollment's grade,
    allocate grams once, and persist both alongside the payment.

    Raises:
        InvalidInputError: non-positive amount, or no rate published for the grade yet.
    """
    amount = to_currency(amount, "amount")
    paid_at = to_utc(paid_at or datetime.now(timezone.utc))
    rate = latest_rate(list_rates(db, enrollment.grade), enrollment.grade, at=paid_at)
    if rate is None:
        raise InvalidInputError(
            f"No {enrollment.grade.value} rate effective at {paid_at.isoformat()}"
        )

    payment = Payment.record(
        enrollment_id=enrollment.enrollment_id,
        amount=amount,
        rate_per_gram=rate.rate_per_gram,
        paid_at=paid_at,
        payment_type=payment_type,
        status=status,
    )
    row = PaymentRow(
        payment_id=payment.payment_id,
        enrollment_id=payment.enrollment_id,
        amount=payment.amount,
        rate_per_gram=payment.rate_per_gram,
        grams_allocated=payment.grams_allocated,
        payment_type=payment.payment_type.value,
        status=payment.status.value,
        mode=mode,
        paid_at=_naive_utc(paid_at),
    )
    db.add(row)
    db.commit()
    logger.info(
        "Payment recorded: %s = %sg %s at %s/g (enrollment %s)",
        payment.amount, payment.grams_allocated, enrollment.grade.value,
        payment.rate_per_gram, enrollment.enrollment_id,
    )
    return payment
